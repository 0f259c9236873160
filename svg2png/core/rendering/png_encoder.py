"""
PNG Encoder
===========

Pillow-backed PNG encoding of RGBA pixel buffers with a ``pHYs`` chunk
recording the physical resolution in pixels per meter.
"""

import io
from typing import Any

from PIL import Image  # type: ignore

from svg2png.config.logging import get_logger
from svg2png.core.errors import EncodeError
from svg2png.core.rendering.dimensions import METERS_PER_INCH
from svg2png.models.schemas import EncodedImage, PixelBuffer

logger = get_logger(__name__)

RGBA_CHANNELS = 4


class PNGEncoder:
    """Encodes RGBA pixel buffers as 8-bit RGBA PNG streams."""

    def __init__(self, compress_level: int = 6):
        self.compress_level = compress_level
        self.logger: Any = logger.bind(component="png_encoder")

    def encode(self, buffer: PixelBuffer, dots_per_meter: int) -> EncodedImage:
        """
        Encode a pixel buffer as PNG.

        Args:
            buffer: RGBA pixel buffer; consumed by this call
            dots_per_meter: Physical resolution for both axes of the pHYs chunk

        Returns:
            EncodedImage with the PNG bytes

        Raises:
            EncodeError: If the buffer does not describe a valid RGBA image or
                the PNG stream cannot be written
        """
        if buffer.channels != RGBA_CHANNELS:
            raise EncodeError(
                f"Unsupported channel count {buffer.channels}, expected {RGBA_CHANNELS}"
            )

        # Pillow derives pHYs as int(dpi / 0.0254 + 0.5); feeding it the inverse
        # reproduces dots_per_meter exactly.
        dpi = dots_per_meter * METERS_PER_INCH

        self.logger.debug(
            "Writing PNG",
            width=buffer.width,
            height=buffer.height,
            dots_per_meter=dots_per_meter,
        )

        try:
            image = Image.frombytes("RGBA", (buffer.width, buffer.height), buffer.data)
            output = io.BytesIO()
            image.save(
                output,
                format="PNG",
                dpi=(dpi, dpi),
                compress_level=self.compress_level,
            )
        except MemoryError as e:
            self.logger.error("Failed to allocate PNG buffer", error=str(e))
            raise EncodeError(f"Failed to allocate PNG buffer: {e}")
        except (ValueError, OSError) as e:
            self.logger.error("Failed to write PNG data", error=str(e))
            raise EncodeError(f"Failed to write PNG data: {e}")

        png_bytes = output.getvalue()
        self.logger.debug("PNG encoding complete", file_size=len(png_bytes))

        return EncodedImage(
            data=png_bytes,
            width=buffer.width,
            height=buffer.height,
            dots_per_meter=dots_per_meter,
        )
