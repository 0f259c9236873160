"""
Unit Tests for PNG Encoder
==========================

PNG structure, pixel fidelity and pHYs metadata.
"""

import io

import pytest
from PIL import Image  # type: ignore

from svg2png.core.errors import EncodeError, Fault
from svg2png.core.rendering.dimensions import dots_per_meter
from svg2png.core.rendering.png_encoder import PNGEncoder
from svg2png.models.schemas import PixelBuffer

from tests.utils.assertions import assert_phys_dots_per_meter, assert_valid_rgba_png, get_phys


def _buffer(width: int, height: int, pixel=(255, 0, 0, 255)) -> PixelBuffer:
    return PixelBuffer(data=bytes(pixel) * width * height, width=width, height=height)


class TestPNGEncoder:
    """PNG encoding of RGBA buffers."""

    @pytest.fixture
    def encoder(self):
        return PNGEncoder()

    def test_encodes_rgba_png(self, encoder):
        image = encoder.encode(_buffer(3, 2), 3780)

        assert image.media_type == "image/png"
        assert (image.width, image.height) == (3, 2)
        assert image.dots_per_meter == 3780
        assert image.file_size == len(image.data)
        assert_valid_rgba_png(image.data, 3, 2)

    def test_preserves_pixels(self, encoder):
        data = bytes(
            [
                255, 0, 0, 255,
                0, 255, 0, 128,
                0, 0, 255, 0,
                10, 20, 30, 40,
            ]
        )
        image = encoder.encode(PixelBuffer(data=data, width=2, height=2), 3780)

        with Image.open(io.BytesIO(image.data)) as decoded:
            assert decoded.mode == "RGBA"
            assert decoded.tobytes() == data

    @pytest.mark.parametrize("dpi", [24, 96, 150, 300, 600])
    def test_phys_chunk_matches_dpi(self, encoder, dpi):
        image = encoder.encode(_buffer(4, 4), dots_per_meter(dpi))

        assert_phys_dots_per_meter(image.data, round(dpi / 0.0254))

    @pytest.mark.parametrize("ppm", [1, 945, 2835, 3779, 3780, 11811, 23622, 39370])
    def test_phys_chunk_is_exact(self, encoder, ppm):
        image = encoder.encode(_buffer(1, 1), ppm)

        assert get_phys(image.data) == (ppm, ppm, 1)

    def test_output_is_deterministic(self, encoder):
        buffer = _buffer(8, 8, (1, 2, 3, 4))

        assert encoder.encode(buffer, 3780).data == encoder.encode(buffer, 3780).data

    def test_size_mismatch_is_encode_error(self, encoder):
        # Bypass PixelBuffer validation to simulate a corrupt buffer
        buffer = PixelBuffer.model_construct(data=b"\x00" * 5, width=2, height=2, channels=4)

        with pytest.raises(EncodeError, match="Failed to write PNG data") as exc_info:
            encoder.encode(buffer, 3780)

        assert exc_info.value.fault == Fault.SERVER

    def test_non_rgba_buffer_is_encode_error(self, encoder):
        buffer = PixelBuffer(data=b"\x00" * 12, width=2, height=2, channels=3)

        with pytest.raises(EncodeError, match="Unsupported channel count"):
            encoder.encode(buffer, 3780)


class TestPixelBuffer:
    def test_rejects_length_mismatch(self):
        with pytest.raises(ValueError, match="expected 16"):
            PixelBuffer(data=b"\x00" * 15, width=2, height=2)
