"""
Conversion Routes
=================

FastAPI routes for SVG to PNG conversion. Request bodies are raw SVG bytes;
responses are raw PNG bytes. Failures propagate as pipeline errors and are
rendered by the application's exception handlers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from svg2png.config.logging import get_logger
from svg2png.core.conversion import ConversionOrchestrator, get_orchestrator
from svg2png.models.schemas import EncodedImage

logger = get_logger(__name__)

router = APIRouter(tags=["Conversion"])

DPI_QUERY_PARAM = "dpi"

PNG_RESPONSE = {200: {"content": {"image/png": {}}, "description": "PNG image"}}


def _first_query_value(request: Request, name: str) -> Optional[str]:
    values = request.query_params.getlist(name)
    return values[0] if values else None


def _png_response(image: EncodedImage) -> Response:
    return Response(content=image.data, media_type=image.media_type)


@router.post("/svg-to-png", response_class=Response, responses=PNG_RESPONSE)
async def svg_to_png(
    request: Request, orchestrator: ConversionOrchestrator = Depends(get_orchestrator)
) -> Response:
    """
    Convert the SVG request body to PNG.

    The optional ``dpi`` query parameter scales the output relative to 96 DPI
    and sets the PNG pHYs chunk. Missing or unusable values mean 96 DPI.
    """
    body = await request.body()
    dpi = _first_query_value(request, DPI_QUERY_PARAM)

    logger.debug(
        "Processing svg_to_png request",
        content_length=len(body),
        dpi=dpi,
        request_id=getattr(request.state, "request_id", None),
    )

    image = await orchestrator.convert(body, dpi)
    return _png_response(image)


@router.post("/svg-to-png/transparent", response_class=Response, responses=PNG_RESPONSE)
async def svg_to_png_transparent(
    request: Request, orchestrator: ConversionOrchestrator = Depends(get_orchestrator)
) -> Response:
    """Convert the SVG request body to a PNG with a transparent background."""
    body = await request.body()

    logger.debug(
        "Processing transparent svg_to_png request",
        content_length=len(body),
        request_id=getattr(request.state, "request_id", None),
    )

    image = await orchestrator.convert_transparent(body)
    return _png_response(image)
