"""
Shared types.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Per-request tracing context attached by middleware."""
    request_id: str
    client: str | None = None
