"""
Pydantic schemas for the classification API
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


class DeviceList(BaseModel):
    """Usable compute devices, in enumeration order"""
    devices: List[str] = Field(default_factory=list, description="Device names (e.g. ['CPU', 'GPU'])")

    @property
    def count(self) -> int:
        return len(self.devices)


class LoadModelRequest(BaseModel):
    """Request to load a model on a device"""
    model_config = ConfigDict(protected_namespaces=())

    model_path: str = Field(..., min_length=1, description="Path to the OpenVINO model (.xml or .onnx)")
    device_index: int = Field(0, ge=0, description="Index in the last enumerated device list")
    width: Optional[int] = Field(None, gt=0, description="Frame width; None keeps the native shape")
    height: Optional[int] = Field(None, gt=0, description="Frame height; None keeps the native shape")
    labels_path: Optional[str] = Field(None, description="Optional class names file")

    @model_validator(mode="after")
    def validate_dims_pair(self) -> "LoadModelRequest":
        """Width and height must be given together"""
        if (self.width is None) != (self.height is None):
            raise ValueError("width and height must be given together")
        return self


class LoadModelResponse(BaseModel):
    """Result of a model load"""
    status: int = Field(..., description="0 ok, 1 parse failed, 2 reshape skipped, 3 compile failed, 4 bad device index")
    state: str = Field(..., description="Pipeline state after the load")
    model: Optional[Dict[str, Any]] = Field(None, description="Loaded model info")
    error: Optional[str] = Field(None, description="Error message for failed or degraded loads")


class InferRequest(BaseModel):
    """One RGBA frame, base64-encoded"""
    frame: str = Field(..., min_length=1, description="Base64 RGBA bytes, row-major, width*height*4 long")


class InferResponse(BaseModel):
    """Classification of one frame"""
    class_index: int = Field(..., description="Class index, -1 if no model is loaded, -2 on error")
    class_name: Optional[str] = Field(None, description="Class name if labels were loaded")
    error_kind: Optional[str] = Field(None, description="Failing error type for negative results")
    latency_ms: float = Field(0.0, ge=0.0, description="Preprocess + inference time")
