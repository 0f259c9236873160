"""
Rasterizer
==========

CairoSVG-backed rasterization of SVG documents into RGBA pixel buffers.
Engine failures never escape this module: parse and render problems become
``RenderError`` and allocation failures become ``EncodeError``.
"""

import io
import re
from typing import Any, Optional, Tuple

import cairocffi
import cairosvg
from cairosvg.parser import Tree
from PIL import Image  # type: ignore

from svg2png.config.logging import get_logger
from svg2png.core.errors import EncodeError, RenderError
from svg2png.models.schemas import IntrinsicSize, PixelBuffer

logger = get_logger(__name__)

# CSS pixels per unit at the 96 DPI reference resolution.
# em/ex follow CairoSVG's default 12pt font size.
UNIT_TO_PX = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "mm": 96.0 / 25.4,
    "cm": 96.0 / 2.54,
    "in": 96.0,
    "em": 16.0,
    "ex": 8.0,
}

# Size used for percentage or missing lengths when the root has no viewBox.
DEFAULT_VIEWPORT_SIZE = 100.0

# Largest surface cairo accepts per axis.
MAX_SURFACE_SIZE = 32767

_LENGTH_RE = re.compile(
    r"^\s*(?P<number>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(?P<unit>[a-zA-Z]*|%)\s*$"
)
_VIEWBOX_SEPARATORS = re.compile(r"[\s,]+")


def _parse_length(value: Optional[str], reference: float) -> float:
    """
    Convert an SVG length attribute to CSS pixels.

    Missing lengths default to ``100%``. Percentages resolve against
    ``reference``, the matching viewBox dimension or the default viewport.
    """
    if value is None or not value.strip():
        value = "100%"

    match = _LENGTH_RE.match(value)
    if not match:
        raise RenderError(f"Invalid SVG: unsupported length '{value}'")

    number = float(match.group("number"))
    unit = match.group("unit").lower()

    if unit == "%":
        return number * reference / 100.0

    if unit not in UNIT_TO_PX:
        raise RenderError(f"Invalid SVG: unsupported length unit '{unit}'")

    return number * UNIT_TO_PX[unit]


def _parse_viewbox(value: Optional[str]) -> Optional[Tuple[float, float, float, float]]:
    if not value or not value.strip():
        return None

    parts = _VIEWBOX_SEPARATORS.split(value.strip())
    if len(parts) != 4:
        raise RenderError(f"Invalid SVG: malformed viewBox '{value}'")
    try:
        min_x, min_y, width, height = (float(part) for part in parts)
    except ValueError:
        raise RenderError(f"Invalid SVG: malformed viewBox '{value}'")
    if width < 0 or height < 0:
        raise RenderError(f"Invalid SVG: negative viewBox size '{value}'")
    return min_x, min_y, width, height


class CairoSVGRasterizer:
    """Rasterizer implementation on top of CairoSVG."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="rasterizer")

    def _parse_tree(self, document: bytes) -> Tree:
        try:
            tree = Tree(bytestring=document)
        except MemoryError as e:
            raise EncodeError(f"Failed to allocate memory while parsing SVG: {e}")
        except Exception as e:
            self.logger.error("Invalid SVG data received", error=str(e))
            raise RenderError(f"Invalid SVG: {e}")

        if tree.tag != "svg":
            raise RenderError(f"Invalid SVG: root element is '{tree.tag}', expected 'svg'")
        return tree

    def intrinsic_size(self, document: bytes) -> IntrinsicSize:
        """
        Read the size a document declares for itself without rendering it.

        Args:
            document: Raw SVG bytes

        Returns:
            IntrinsicSize in CSS pixels

        Raises:
            RenderError: If the document cannot be parsed or declares an unusable size
        """
        tree = self._parse_tree(document)
        viewbox = _parse_viewbox(tree.get("viewBox"))

        reference_width, reference_height = (
            viewbox[2:] if viewbox else (DEFAULT_VIEWPORT_SIZE, DEFAULT_VIEWPORT_SIZE)
        )

        width = _parse_length(tree.get("width"), reference_width)
        height = _parse_length(tree.get("height"), reference_height)

        if width < 0 or height < 0:
            raise RenderError("Invalid SVG: document declares a negative size")

        self.logger.debug("Got base SVG size", base_width=width, base_height=height)
        return IntrinsicSize(width=width, height=height)

    def rasterize(self, document: bytes, width: int, height: int) -> PixelBuffer:
        """
        Render a document into an RGBA buffer of exactly ``width`` x ``height``.

        Args:
            document: Raw SVG bytes
            width: Target width in pixels
            height: Target height in pixels

        Returns:
            PixelBuffer owned by the caller

        Raises:
            RenderError: If the engine rejects the document
            EncodeError: If the pixel buffer cannot be allocated
        """
        self.logger.debug("Rendering SVG to pixmap", target_width=width, target_height=height)

        if width > MAX_SURFACE_SIZE or height > MAX_SURFACE_SIZE:
            self.logger.error(
                "Target exceeds surface limit", target_width=width, target_height=height
            )
            raise EncodeError(
                f"Failed to create pixmap: {width}x{height} exceeds "
                f"{MAX_SURFACE_SIZE} pixels per axis",
                details={"target_width": width, "target_height": height},
            )

        try:
            png_bytes = cairosvg.svg2png(
                bytestring=document,
                output_width=width,
                output_height=height,
                parent_width=DEFAULT_VIEWPORT_SIZE,
                parent_height=DEFAULT_VIEWPORT_SIZE,
            )
            with Image.open(io.BytesIO(png_bytes)) as rendered:
                image = rendered.convert("RGBA")

            if image.size != (width, height):
                self.logger.debug(
                    "Resampling engine output to target size",
                    engine_width=image.width,
                    engine_height=image.height,
                )
                image = image.resize((width, height), Image.Resampling.LANCZOS)

            data = image.tobytes()
        except MemoryError as e:
            self.logger.error("Failed to allocate pixmap", target_width=width, target_height=height)
            raise EncodeError(f"Failed to create pixmap: {e}")
        except cairocffi.CairoError as e:
            if e.status not in (cairocffi.STATUS_INVALID_SIZE, cairocffi.STATUS_NO_MEMORY):
                self.logger.error("SVG rendering failed", error=str(e))
                raise RenderError(f"Invalid SVG: {e}")
            self.logger.error("Failed to allocate pixmap", target_width=width, target_height=height)
            raise EncodeError(f"Failed to create pixmap: {e}")
        except Exception as e:
            self.logger.error("SVG rendering failed", error=str(e))
            raise RenderError(f"Invalid SVG: {e}")

        self.logger.debug("SVG rendering complete")
        return PixelBuffer(data=data, width=width, height=height, channels=4)
