"""
Error Taxonomy

Errors raised by the link, availability and gateway services.
The MCP tool layer turns every LinkError into a tagged tool failure.
"""

from typing import Optional


class LinkError(Exception):
    """Base class for all service errors."""

    code = "error"

    def __init__(self, message: str, *, detail: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class NotFoundError(LinkError):
    """A referenced task, event or link does not exist."""

    code = "not_found"


class DuplicateLinkError(LinkError):
    """A link for the same task/event pair already exists."""

    code = "duplicate_link"


class ValidationError(LinkError):
    """Malformed input (bad page token, bad time range, ...)."""

    code = "validation_error"


class GatewayError(LinkError):
    """Any other failure surfaced by the Google Tasks / Calendar gateways."""

    code = "gateway_error"
