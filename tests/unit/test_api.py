"""
Tests for the HTTP API.
"""

import base64

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from ovclassifier.inference import ClassifierPipeline
from ovclassifier.services.api import main
from ovclassifier.services.api.main import app, decode_base64_frame, get_pipeline
from ovclassifier.services.schemas import DeviceList, LoadModelRequest


@pytest.fixture
def api_pipeline(fake_core, settings):
    """Pipeline with devices not yet enumerated."""
    return ClassifierPipeline(core=fake_core, settings=settings)


@pytest.fixture
def client(api_pipeline, monkeypatch):
    monkeypatch.setattr(main, "_class_names", {})
    app.dependency_overrides[get_pipeline] = lambda: api_pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()


def encode(frame: bytes) -> str:
    return base64.b64encode(frame).decode("ascii")


class TestDecodeFrame:

    def test_plain(self):
        assert decode_base64_frame(encode(b"\x01\x02\x03\x04")) == b"\x01\x02\x03\x04"

    def test_data_url(self):
        data = "data:application/octet-stream;base64," + encode(b"abcd")
        assert decode_base64_frame(data) == b"abcd"

    def test_invalid(self):
        with pytest.raises(ValueError):
            decode_base64_frame("not base64!")


class TestEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "/infer" in response.json()["endpoints"]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_devices(self, client):
        response = client.get("/devices")
        assert response.status_code == 200
        assert response.json() == {"devices": ["CPU", "GPU"]}

    def test_load_model(self, client, model_file):
        response = client.post("/model", json={
            "model_path": str(model_file),
            "device_index": 1,
            "width": 8,
            "height": 8
        })
        body = response.json()

        assert response.status_code == 200
        assert body["status"] == 0
        assert body["state"] == "ready"
        assert body["model"]["device"] == "GPU"
        assert body["error"] is None

    def test_load_missing_model(self, client, tmp_path):
        body = client.post("/model", json={"model_path": str(tmp_path / "x.xml")}).json()
        assert body["status"] == 1
        assert body["state"] == "uninitialized"
        assert body["model"] is None

    def test_load_static_model(self, client, static_model_file):
        body = client.post("/model", json={
            "model_path": str(static_model_file), "width": 64, "height": 64
        }).json()
        assert body["status"] == 2
        assert body["model"]["input_width"] == 16
        assert body["error"]

    def test_load_compile_failure(self, client, fake_core, model_file):
        fake_core.fail_compile = True
        body = client.post("/model", json={"model_path": str(model_file)}).json()
        assert body["status"] == 3
        assert body["state"] == "uninitialized"

    def test_load_bad_device(self, client, model_file):
        body = client.post("/model", json={"model_path": str(model_file), "device_index": 7}).json()
        assert body["status"] == 4

    def test_width_without_height(self, client, model_file):
        response = client.post("/model", json={"model_path": str(model_file), "width": 8})
        assert response.status_code == 422

    def test_missing_labels(self, client, model_file, tmp_path):
        response = client.post("/model", json={
            "model_path": str(model_file), "labels_path": str(tmp_path / "labels.txt")
        })
        assert response.status_code == 400

    def test_infer_before_load(self, client, frame_factory):
        body = client.post("/infer", json={"frame": encode(frame_factory(8, 8))}).json()
        assert body["class_index"] == -1
        assert body["error_kind"] == "UninitializedSession"

    def test_infer(self, client, model_file, frame_factory):
        client.post("/model", json={"model_path": str(model_file), "width": 8, "height": 8})
        body = client.post("/infer", json={"frame": encode(frame_factory(8, 8))}).json()

        assert 0 <= body["class_index"] < 10
        assert body["error_kind"] is None
        assert body["class_name"] is None

    def test_infer_wrong_size(self, client, model_file, frame_factory):
        client.post("/model", json={"model_path": str(model_file), "width": 8, "height": 8})
        body = client.post("/infer", json={"frame": encode(frame_factory(2, 2))}).json()

        assert body["class_index"] == -2
        assert body["error_kind"] == "ShapeMismatch"

    def test_infer_invalid_base64(self, client):
        response = client.post("/infer", json={"frame": "@@@@"})
        assert response.status_code == 400

    def test_infer_with_labels(self, client, model_file, tmp_path, frame_factory):
        labels = tmp_path / "labels.txt"
        labels.write_text("\n".join(f"class_{i}" for i in range(10)), encoding="utf-8")

        client.post("/model", json={
            "model_path": str(model_file), "width": 8, "height": 8, "labels_path": str(labels)
        })
        body = client.post("/infer", json={"frame": encode(frame_factory(8, 8))}).json()

        assert body["class_name"] == f"class_{body['class_index']}"

    def test_stats(self, client, model_file, frame_factory):
        assert client.get("/stats").json()["state"] == "uninitialized"

        client.post("/model", json={"model_path": str(model_file), "width": 8, "height": 8})
        client.post("/infer", json={"frame": encode(frame_factory(8, 8))})
        body = client.get("/stats").json()

        assert body["state"] == "ready"
        assert body["model"]["num_classes"] == 10
        assert body["stats"]["frames"] == 1


class TestSchemas:

    def test_dims_pair(self):
        with pytest.raises(ValidationError):
            LoadModelRequest(model_path="m.xml", height=8)
        request = LoadModelRequest(model_path="m.xml", width=8, height=4)
        assert (request.width, request.height) == (8, 4)

    def test_negative_device_index(self):
        with pytest.raises(ValidationError):
            LoadModelRequest(model_path="m.xml", device_index=-1)

    def test_device_list_count(self):
        assert DeviceList(devices=["CPU", "GPU"]).count == 2
