"""
Error taxonomy.

Each error knows its HTTP status and how to encode itself as the JSON body
returned to the caller.
"""

from typing import Any


class PageSnapError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "internal_error"
    http_status = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.detail:
            body["message"] = self.detail
        return body


class ValidationError(PageSnapError):
    """Malformed payload, unparseable URL or disallowed scheme."""

    code = "validation_error"
    http_status = 400


class NavigationError(PageSnapError):
    """Target page could not be loaded."""

    code = "navigation_error"
    http_status = 400

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to navigate to URL: {detail}")


class BrowserUnavailableError(PageSnapError):
    """Neither the remote endpoint nor a local launch produced a browser."""

    code = "browser_unavailable"
    http_status = 500

    def __init__(self, detail: str) -> None:
        super().__init__("Failed to initialize browser. Please try again later.", detail)


class RenderError(PageSnapError):
    """Unexpected failure after a browser session was acquired."""

    code = "render_error"
    http_status = 500

    def __init__(self, detail: str) -> None:
        super().__init__("PDF Generation Failed", detail)
