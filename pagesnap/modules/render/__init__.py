"""Render module - web page to PDF rendering using Playwright."""

from .browser import BrowserAcquirer, BrowserConfig, BrowserSession
from .router import router
from .schemas import ErrorResponse, RenderRequest
from .service import RenderOptions, RenderService
from .validator import validate_payload, validate_url

__all__ = [
    "router",
    "BrowserAcquirer",
    "BrowserConfig",
    "BrowserSession",
    "ErrorResponse",
    "RenderOptions",
    "RenderRequest",
    "RenderService",
    "validate_payload",
    "validate_url",
]
