"""Transport module - HTTP communication."""

from .http_client import (
    DEFAULT_REQUEST_TIMEOUT,
    HttpClient,
    RequestSpec,
    Response,
)

__all__ = [
    "DEFAULT_REQUEST_TIMEOUT",
    "HttpClient",
    "RequestSpec",
    "Response",
]
