"""Render module schemas."""

from pydantic import BaseModel, Field


class RenderRequest(BaseModel):
    """A validated request to snapshot one page."""

    url: str = Field(..., description="Absolute http(s) URL of the page to render")


class ErrorResponse(BaseModel):
    """JSON body returned for every failed render."""

    error: str
    message: str | None = None
