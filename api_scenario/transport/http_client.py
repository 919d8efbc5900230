"""HTTP client used by the scenario executor.

Sends one resolved request per call over a shared ``requests.Session``.
Non-2xx statuses are returned as ordinary responses; only failures to
complete the exchange raise ``NetworkError``. Requests are never retried.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from ..errors import NetworkError, RequestEncodingError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass(frozen=True)
class RequestSpec:
    """A fully resolved request, ready to send."""
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True)
class Response:
    """Received response; immutable once built."""
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None  # parsed JSON, or None if the body is not JSON
    text: str = ""
    elapsed_ms: int = 0

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        return CaseInsensitiveDict(self.headers).get(name)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient:
    """Blocking HTTP client for scenario steps."""

    def __init__(
        self,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ):
        """Initialize HTTP client.

        Args:
            request_timeout: Connect/read timeout per request in seconds.
            verify: Verify TLS certificates.
            session: Session to reuse (a new one is created when omitted).
        """
        self.request_timeout = request_timeout
        self.verify = verify
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def send(self, request: RequestSpec) -> Response:
        """Send a request and return the parsed response.

        Args:
            request: Resolved request. A non-None body is JSON-encoded.

        Returns:
            Response with status, headers and parsed body.

        Raises:
            NetworkError: Connection, DNS or timeout failure.
            RequestEncodingError: The body is not JSON-encodable.
        """
        kwargs: dict[str, Any] = {
            "headers": dict(request.headers),
            "timeout": self.request_timeout,
            "verify": self.verify,
        }
        if request.body is not None:
            try:
                json.dumps(request.body, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise RequestEncodingError(f"Cannot encode body for {request.method} {request.url}: {e}") from e
            kwargs["json"] = request.body

        logger.debug("%s %s", request.method, request.url)
        start = time.perf_counter()
        try:
            raw = self._session.request(request.method, request.url, **kwargs)
        except requests.Timeout as e:
            raise NetworkError(f"Timed out after {self.request_timeout}s: {request.method} {request.url}") from e
        except requests.ConnectionError as e:
            raise NetworkError(f"Connection failed: {request.method} {request.url}: {e}") from e
        except requests.RequestException as e:
            raise NetworkError(f"Request failed: {request.method} {request.url}: {e}") from e
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        response = Response(
            status=raw.status_code,
            headers=MappingProxyType(dict(raw.headers)),
            body=_parse_body(raw),
            text=raw.text,
            elapsed_ms=elapsed_ms,
        )
        logger.debug("%s %s -> %d (%d ms)", request.method, request.url, response.status, elapsed_ms)
        return response

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _parse_body(raw: requests.Response) -> Any:
    if not raw.content:
        return None
    try:
        return raw.json()
    except ValueError:
        return None
