"""
Conversion Orchestrator
=======================

Composes dimension resolution, rasterization and PNG encoding into the two
public conversion operations, validates input, and classifies failures as
caller or server faults.
"""

import asyncio
from typing import Any, Optional, Union

from svg2png.config.logging import get_logger
from svg2png.core.errors import ConversionPipelineError, Fault, ValidationError
from svg2png.core.rendering.dimensions import parse_dpi, resolve_size
from svg2png.core.rendering.png_encoder import PNGEncoder
from svg2png.core.rendering.rasterizer import CairoSVGRasterizer
from svg2png.core.rendering.transparency import TransparencyConverter
from svg2png.models.schemas import EncodedImage

logger = get_logger(__name__)


def classify_error(error: BaseException) -> Fault:
    """Map any pipeline failure to the party at fault."""
    if isinstance(error, ConversionPipelineError):
        return error.fault
    return Fault.SERVER


class ConversionOrchestrator:
    """Entry point for SVG to PNG conversions."""

    def __init__(
        self,
        rasterizer: Optional[CairoSVGRasterizer] = None,
        encoder: Optional[PNGEncoder] = None,
        transparency_converter: Optional[TransparencyConverter] = None,
    ):
        self.rasterizer = rasterizer or CairoSVGRasterizer()
        self.encoder = encoder or PNGEncoder()
        self._transparency_converter = transparency_converter
        self.logger: Any = logger.bind(component="orchestrator")

    @property
    def transparency_converter(self) -> TransparencyConverter:
        if self._transparency_converter is None:
            self._transparency_converter = TransparencyConverter()
        return self._transparency_converter

    @staticmethod
    def _require_document(document: bytes) -> None:
        if not document:
            raise ValidationError("Request body cannot be empty")

    def convert_sync(
        self, document: bytes, requested_dpi: Optional[Union[str, float]] = None
    ) -> EncodedImage:
        """
        Convert SVG bytes to a PNG carrying the requested physical resolution.

        Args:
            document: Raw SVG bytes
            requested_dpi: Requested DPI in any form; unusable values mean 96

        Returns:
            EncodedImage with the PNG bytes

        Raises:
            ValidationError: Empty document or degenerate output dimensions
            RenderError: Document rejected by the rasterization engine
            EncodeError: PNG construction failed
        """
        self._require_document(document)

        dpi = parse_dpi(requested_dpi)
        self.logger.debug("Parsed DPI", raw_dpi=requested_dpi, dpi=dpi)

        size = self.rasterizer.intrinsic_size(document)
        dimensions = resolve_size(size, dpi)

        buffer = self.rasterizer.rasterize(document, dimensions.width, dimensions.height)
        image = self.encoder.encode(buffer, dimensions.dots_per_meter)

        self.logger.info(
            "Converted SVG to PNG",
            width=dimensions.width,
            height=dimensions.height,
            dpi=dpi,
            dots_per_meter=dimensions.dots_per_meter,
            file_size=image.file_size,
        )
        return image

    async def convert(
        self, document: bytes, requested_dpi: Optional[Union[str, float]] = None
    ) -> EncodedImage:
        """Run ``convert_sync`` in a worker thread."""
        self._require_document(document)
        return await asyncio.to_thread(self.convert_sync, document, requested_dpi)

    async def convert_transparent(self, document: bytes) -> EncodedImage:
        """
        Convert SVG bytes to a transparency-aware PNG via the external converter.

        Raises:
            ValidationError: Empty document
            ConversionError: External process failed or produced no PNG
        """
        self._require_document(document)

        image = await self.transparency_converter.convert(document)
        self.logger.info("Converted SVG to transparent PNG", file_size=image.file_size)
        return image


_orchestrator: Optional[ConversionOrchestrator] = None


def get_orchestrator() -> ConversionOrchestrator:
    """Get the process-wide orchestrator; it holds no per-request state."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ConversionOrchestrator()
    return _orchestrator
