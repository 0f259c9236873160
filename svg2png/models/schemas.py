"""
Pydantic Models and Schemas
===========================

Data models for the conversion pipeline and the HTTP API.
Pipeline values are built fresh for every request and never shared.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator


PNG_MEDIA_TYPE = "image/png"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Pipeline Models
class IntrinsicSize(BaseModel):
    """Size a document declares for itself, in CSS pixels at 96 DPI."""

    width: float = Field(..., ge=0, description="Intrinsic width")
    height: float = Field(..., ge=0, description="Intrinsic height")


class ResolvedDimensions(BaseModel):
    """Target pixel size and physical resolution for one conversion."""

    width: int = Field(..., ge=1, description="Output width in pixels")
    height: int = Field(..., ge=1, description="Output height in pixels")
    dots_per_meter: int = Field(..., ge=0, description="Physical resolution for the pHYs chunk")
    dpi: float = Field(..., gt=0, description="Effective DPI")
    scale: float = Field(..., gt=0, description="Scale applied to the intrinsic size")


class PixelBuffer(BaseModel):
    """Raw 8-bit per channel pixel data in row-major order."""

    data: bytes = Field(..., repr=False, description="Pixel bytes")
    width: int = Field(..., ge=1, description="Buffer width in pixels")
    height: int = Field(..., ge=1, description="Buffer height in pixels")
    channels: int = Field(4, ge=1, le=4, description="Channels per pixel (RGBA)")

    @model_validator(mode="after")
    def validate_length(self) -> "PixelBuffer":
        """Buffer length must match its declared geometry."""
        expected = self.width * self.height * self.channels
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.data)} bytes, expected {expected}"
            )
        return self


class EncodedImage(BaseModel):
    """Encoded PNG ready to be written as a response body."""

    data: bytes = Field(..., repr=False, description="PNG binary data")
    media_type: str = Field(PNG_MEDIA_TYPE, description="MIME type of the data")
    width: Optional[int] = Field(None, description="Image width")
    height: Optional[int] = Field(None, description="Image height")
    dots_per_meter: Optional[int] = Field(None, description="Embedded physical resolution")

    @property
    def file_size(self) -> int:
        return len(self.data)


# Health Check Models
class HealthStatus(BaseModel):
    """Liveness status."""

    status: Literal["healthy"] = Field("healthy", description="Overall status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")


class ServiceInfo(BaseModel):
    """Basic API information."""

    name: str
    version: str
    description: str
    docs_url: Optional[str] = None
    health_check: str = "/health"
    endpoints: Dict[str, str] = Field(default_factory=dict)


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
