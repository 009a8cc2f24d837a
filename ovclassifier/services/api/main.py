"""
FastAPI application exposing the classification pipeline over HTTP
"""

from fastapi import Depends, FastAPI, HTTPException
import base64
import binascii
import logging
from typing import Dict, Optional
import uvicorn

from ..config import config, load_settings
from ..schemas import (
    DeviceList,
    InferRequest,
    InferResponse,
    LoadModelRequest,
    LoadModelResponse,
)
from ...inference import (
    ClassifierPipeline,
    CompileError,
    DeviceIndexOutOfRange,
    LoadStatus,
    TargetShape,
    load_class_names,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ovclassifier API",
    description="Image classification with OpenVINO",
    version="0.1.0"
)

# Created on first use
_pipeline: Optional[ClassifierPipeline] = None
_class_names: Dict[int, str] = {}


def get_pipeline() -> ClassifierPipeline:
    """Get or create the pipeline (lazy loading)"""
    global _pipeline
    if _pipeline is None:
        logger.info("Creating classification pipeline...")
        settings = load_settings()
        logging.getLogger().setLevel(settings.log_level)
        _pipeline = ClassifierPipeline(settings=settings)
        logger.info("Pipeline created")
    return _pipeline


def decode_base64_frame(base64_str: str) -> bytes:
    """Decode a base64 frame, accepting data-URL prefixes"""
    if ',' in base64_str:
        base64_str = base64_str.split(',', 1)[1]
    try:
        return base64.b64decode(base64_str, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 frame: {e}") from e


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "ovclassifier API",
        "version": "0.1.0",
        "endpoints": {
            "/devices": "GET - Usable compute devices",
            "/model": "POST - Load a model on a device",
            "/infer": "POST - Classify one base64 RGBA frame",
            "/stats": "GET - Pipeline state and latency statistics",
            "/health": "GET - Health check"
        }
    }


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy"}


@app.get("/devices", response_model=DeviceList)
def list_devices(pipeline: ClassifierPipeline = Depends(get_pipeline)):
    """Rebuild and return the device list"""
    return DeviceList(devices=pipeline.list_devices())


@app.post("/model", response_model=LoadModelResponse)
def load_model(request: LoadModelRequest, pipeline: ClassifierPipeline = Depends(get_pipeline)):
    """Load a model; failures keep the previously loaded model"""
    global _class_names

    class_names: Dict[int, str] = {}
    if request.labels_path:
        try:
            class_names = load_class_names(request.labels_path)
        except (OSError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))

    target_shape = None
    if request.width is not None and request.height is not None:
        target_shape = TargetShape(request.width, request.height)

    # The device list may not have been built yet by this client
    if not pipeline.devices.devices:
        pipeline.list_devices()

    try:
        outcome = pipeline.load_model(request.model_path, request.device_index, target_shape)
    except DeviceIndexOutOfRange as e:
        return LoadModelResponse(
            status=int(LoadStatus.DEVICE_OUT_OF_RANGE),
            state=pipeline.state.value,
            error=str(e)
        )
    except CompileError as e:
        logger.error(f"Compilation failed: {e}")
        return LoadModelResponse(
            status=int(LoadStatus.COMPILE_FAILED),
            state=pipeline.state.value,
            error=str(e)
        )

    if outcome.succeeded:
        _class_names = class_names

    return LoadModelResponse(
        status=int(outcome.status),
        state=pipeline.state.value,
        model=outcome.model_info.to_dict() if outcome.model_info else None,
        error=str(outcome.error) if outcome.error else None
    )


@app.post("/infer", response_model=InferResponse)
def infer(request: InferRequest, pipeline: ClassifierPipeline = Depends(get_pipeline)):
    """Classify one frame"""
    try:
        frame = decode_base64_frame(request.frame)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = pipeline.classify(frame)
    return InferResponse(
        class_index=result.class_index,
        class_name=_class_names.get(result.class_index) if result.ok else None,
        error_kind=result.error_kind,
        latency_ms=result.latency_ms
    )


@app.get("/stats")
def stats(pipeline: ClassifierPipeline = Depends(get_pipeline)):
    """Pipeline state, loaded model and latency statistics"""
    info = pipeline.model_info
    return {
        "state": pipeline.state.value,
        "model": info.to_dict() if info else None,
        "stats": pipeline.stats.to_dict()
    }


def main():
    """Run the API with uvicorn"""
    uvicorn.run(
        app,
        host=config.get('api.host', '0.0.0.0'),
        port=config.get('api.port', 8000)
    )


if __name__ == "__main__":
    main()
