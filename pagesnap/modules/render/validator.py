"""
Request validation for the render endpoint.

Pure functions: no I/O, no logging. Every rejection is a ValidationError
carrying the text returned to the caller.
"""

from typing import Any
from urllib.parse import SplitResult, urlsplit

from pagesnap.shared.errors import ValidationError

from .schemas import RenderRequest

REQUIRED_KEY = "url"
ALLOWED_SCHEMES = frozenset({"http", "https"})

# Schemes whose URLs must name a host to be absolute.
HOST_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})


def validate_payload(payload: Any) -> RenderRequest:
    """
    Validate a decoded JSON body.

    Args:
        payload: Whatever the request body decoded to

    Returns:
        RenderRequest with the original url string

    Raises:
        ValidationError: on any shape, format or scheme problem
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object with a single 'url' property")

    keys = list(payload.keys())
    unexpected = [key for key in keys if key != REQUIRED_KEY]
    if unexpected:
        raise ValidationError(f"Unexpected property: {', '.join(str(k) for k in unexpected)}")
    if REQUIRED_KEY not in payload:
        raise ValidationError(f"Missing required property: {REQUIRED_KEY}")

    raw_url = payload[REQUIRED_KEY]
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise ValidationError(f"Property '{REQUIRED_KEY}' must be a non-empty string")

    parts = validate_url(raw_url)
    return RenderRequest(url=parts.geturl())


def validate_url(raw_url: str) -> SplitResult:
    """Check that raw_url is an absolute http(s) URL and return its parts."""
    parts = parse_absolute_url(raw_url)
    if parts is None:
        raise ValidationError(
            f"Invalid URL format: {raw_url}. Please provide a valid URL with protocol "
            "(e.g., https://example.com)."
        )

    if parts.scheme not in ALLOWED_SCHEMES:
        raise ValidationError(
            f"Invalid URL protocol: {parts.scheme}:. URL must use http or https."
        )
    return parts


def parse_absolute_url(raw_url: str) -> SplitResult | None:
    """
    Parse raw_url as an absolute URL.

    Host-based schemes written without "//" ("http:example.com",
    "http:///example.com") are read as browsers read them, naming the host.
    Returns None when the string has no scheme, a host-based scheme without a
    host, whitespace inside the authority, or a malformed port/IPv6 literal.
    """
    parts = _split(raw_url.strip())
    if parts is None or not parts.scheme:
        return None

    if parts.scheme in HOST_SCHEMES:
        if not parts.netloc:
            parts = _split(_with_authority(parts))
            if parts is None:
                return None
        if not parts.hostname or any(ch.isspace() for ch in parts.netloc):
            return None
    return parts


def _split(candidate: str) -> SplitResult | None:
    try:
        parts = urlsplit(candidate)
        parts.port  # raises ValueError on a non-numeric or out-of-range port
    except ValueError:
        return None
    return parts


def _with_authority(parts: SplitResult) -> str:
    rebuilt = f"{parts.scheme}://{parts.path.lstrip('/')}"
    if parts.query:
        rebuilt += f"?{parts.query}"
    if parts.fragment:
        rebuilt += f"#{parts.fragment}"
    return rebuilt
