"""
Dimension Resolver
==================

Turns a document's intrinsic size and a requested DPI into target pixel
dimensions and the physical resolution written to the PNG ``pHYs`` chunk.
"""

import math
from typing import Optional, Union

from svg2png.config.logging import get_logger
from svg2png.core.errors import ValidationError
from svg2png.models.schemas import IntrinsicSize, ResolvedDimensions

logger = get_logger(__name__)

# CSS reference resolution; intrinsic sizes are expressed at this DPI.
DEFAULT_DPI = 96.0
METERS_PER_INCH = 0.0254


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive input."""
    return int(math.floor(value + 0.5))


def parse_dpi(raw: Optional[Union[str, float, int]]) -> float:
    """
    Parse a requested DPI leniently.

    Missing, non-numeric, non-finite and non-positive values all fall back to
    ``DEFAULT_DPI``; a bad value is never an error on its own.
    """
    if raw is None:
        return DEFAULT_DPI

    try:
        dpi = float(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric DPI", raw_dpi=raw)
        return DEFAULT_DPI

    if not math.isfinite(dpi) or dpi <= 0:
        logger.debug("Ignoring out-of-range DPI", raw_dpi=raw)
        return DEFAULT_DPI

    return dpi


def dots_per_meter(dpi: float) -> int:
    """Physical resolution in pixels per meter for ``dpi``."""
    return round_half_up(dpi / METERS_PER_INCH)


def resolve(intrinsic_width: float, intrinsic_height: float, dpi: float) -> ResolvedDimensions:
    """
    Resolve target pixel dimensions for a document.

    Args:
        intrinsic_width: Declared document width in CSS pixels
        intrinsic_height: Declared document height in CSS pixels
        dpi: Effective DPI, already parsed

    Returns:
        ResolvedDimensions for the render and the pHYs chunk

    Raises:
        ValidationError: If either dimension rounds to zero or the scaled
            values are not representable
    """
    scale = dpi / DEFAULT_DPI
    scaled_width = intrinsic_width * scale
    scaled_height = intrinsic_height * scale
    pixels_per_meter = dpi / METERS_PER_INCH

    if not all(math.isfinite(value) for value in (scaled_width, scaled_height, pixels_per_meter)):
        raise ValidationError(
            "Unrepresentable output dimensions: document size or DPI overflows after scaling",
            details={
                "intrinsic_width": str(intrinsic_width),
                "intrinsic_height": str(intrinsic_height),
                "dpi": dpi,
            },
        )

    width = round_half_up(scaled_width)
    height = round_half_up(scaled_height)

    logger.debug(
        "Calculated target dimensions",
        base_width=intrinsic_width,
        base_height=intrinsic_height,
        scale=scale,
        target_width=width,
        target_height=height,
    )

    if width < 1 or height < 1:
        raise ValidationError(
            "Degenerate output dimensions: document results in zero width or height after scaling",
            details={
                "intrinsic_width": intrinsic_width,
                "intrinsic_height": intrinsic_height,
                "dpi": dpi,
                "target_width": width,
                "target_height": height,
            },
        )

    return ResolvedDimensions(
        width=width,
        height=height,
        dots_per_meter=dots_per_meter(dpi),
        dpi=dpi,
        scale=scale,
    )


def resolve_size(size: IntrinsicSize, dpi: float) -> ResolvedDimensions:
    """Resolve target dimensions from an ``IntrinsicSize``."""
    return resolve(size.width, size.height, dpi)
