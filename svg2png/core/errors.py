"""
Pipeline Errors
===============

Error taxonomy for the conversion pipeline. Every error raised across a
component boundary is a ``ConversionPipelineError`` carrying a stable error
code and the party at fault.
"""

from enum import Enum
from typing import Any, Dict, Optional


class Fault(str, Enum):
    """Which side of the HTTP boundary caused a failure."""

    CALLER = "caller"
    SERVER = "server"


class ConversionPipelineError(Exception):
    """Base class for all conversion pipeline failures."""

    error_code = "PIPELINE_ERROR"
    fault = Fault.SERVER

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ConversionPipelineError):
    """Request input is unusable: empty body or degenerate output dimensions."""

    error_code = "VALIDATION_ERROR"
    fault = Fault.CALLER


class RenderError(ConversionPipelineError):
    """The rasterization engine rejected or could not parse the document."""

    error_code = "RENDER_ERROR"
    fault = Fault.CALLER


class EncodeError(ConversionPipelineError):
    """PNG construction failed after a successful render."""

    error_code = "ENCODE_ERROR"
    fault = Fault.SERVER


class ConversionError(ConversionPipelineError):
    """The external transparency conversion failed or produced no output."""

    error_code = "CONVERSION_ERROR"
    fault = Fault.SERVER


class ConversionSpawnError(ConversionError):
    """The external conversion executable could not be started."""

    error_code = "CONVERSION_SPAWN_ERROR"
