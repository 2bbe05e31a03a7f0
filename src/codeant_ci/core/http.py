"""HTTP client adapter with SSL certificate handling.

Thin wrapper over urllib that always hands back a status code and body,
whatever the status, and reserves exceptions for transport failures.
Certificates are verified against certifi's CA bundle so standalone
builds work without access to the system certificate store.
"""

from __future__ import annotations

import json
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import certifi

from codeant_ci import __version__
from codeant_ci.core.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_REQUEST_TIMEOUT = 60.0

USER_AGENT = f"codeant-ci/{__version__}"


class TransportError(Exception):
    """The request never produced an HTTP response (DNS, TLS, timeout...)."""

    pass


@dataclass(frozen=True)
class HttpResponse:
    """Status code and decoded body of an HTTP exchange."""

    status_code: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body)


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


class HttpClient:
    """Synchronous HTTP client used by every remote API wrapper."""

    def __init__(self, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        """Initialize the client.

        Args:
            timeout: Per-request timeout in seconds.
        """
        self._timeout = timeout
        self._ssl_context = get_ssl_context()

    @property
    def timeout(self) -> float:
        return self._timeout

    def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """POST a JSON document.

        Args:
            url: Target URL.
            payload: JSON-serializable request body.
            headers: Extra request headers.

        Returns:
            HttpResponse for any HTTP status, including 4xx and 5xx.

        Raises:
            TransportError: If no HTTP response was received.
        """
        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)
        data = json.dumps(payload).encode("utf-8")
        return self._send(Request(url, data=data, headers=request_headers, method="POST"))

    def put_file(self, url: str, path: Path, content_type: str) -> HttpResponse:
        """PUT the raw bytes of a file.

        Args:
            url: Target URL (typically presigned).
            path: File to upload.
            content_type: Value of the Content-Type header.

        Returns:
            HttpResponse for any HTTP status.

        Raises:
            TransportError: If no HTTP response was received.
        """
        data = path.read_bytes()
        request = Request(
            url,
            data=data,
            headers={"Content-Type": content_type},
            method="PUT",
        )
        return self._send(request)

    def _send(self, request: Request) -> HttpResponse:
        request.add_header("User-Agent", USER_AGENT)
        LOGGER.debug(f"{request.get_method()} {request.full_url}")

        try:
            with urlopen(  # nosec B310 - URLs come from configuration
                request, timeout=self._timeout, context=self._ssl_context
            ) as response:
                return HttpResponse(
                    status_code=response.getcode(),
                    body=_decode(response.read()),
                )
        except HTTPError as e:
            # urllib raises for non-2xx; the body is still the useful part.
            try:
                body = _decode(e.read())
            except OSError:
                body = ""
            return HttpResponse(status_code=e.code, body=body)
        except URLError as e:
            raise TransportError(str(e.reason)) from e
        except (OSError, ValueError) as e:
            raise TransportError(str(e)) from e


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")
