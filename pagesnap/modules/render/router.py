"""Render module routes."""

import json
from typing import Any

from fastapi import APIRouter, Depends, Request, Response

from pagesnap.config import Settings, get_settings
from pagesnap.shared.errors import ValidationError
from pagesnap.shared.logging import get_logger

from .schemas import ErrorResponse
from .service import RenderService
from .validator import validate_payload

logger = get_logger(__name__)
router = APIRouter(tags=["render"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid request or unreachable page"},
    500: {"model": ErrorResponse, "description": "Browser unavailable or render failed"},
}


def get_service(settings: Settings = Depends(get_settings)) -> RenderService:
    """Dependency injection for service. One service (and browser) per request."""
    return RenderService.from_settings(settings)


@router.post(
    "/render/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}, **ERROR_RESPONSES},
)
@router.post("/api/generate-pdf", response_class=Response, include_in_schema=False)
async def render_pdf(
    request: Request,
    service: RenderService = Depends(get_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Render a web page to PDF.

    Body: {"url": "<absolute http(s) URL>"}. Returns the PDF as an attachment.
    """
    payload = await _read_json(request)
    render_request = validate_payload(payload)

    pdf_bytes = await service.render(render_request.url)
    return pdf_response(pdf_bytes, settings.pdf_filename)


def pdf_response(pdf_bytes: bytes, filename: str) -> Response:
    """Encode PDF bytes as a downloadable attachment."""
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(pdf_bytes)),
        },
    )


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body.strip():
        raise ValidationError("Request body must be valid JSON")
    try:
        return json.loads(body)
    except ValueError as e:
        logger.info(f"Rejected non-JSON body: {e}")
        raise ValidationError("Request body must be valid JSON") from e
