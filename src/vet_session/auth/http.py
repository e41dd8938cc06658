"""
HTTP client for the clinic backend.

Wraps ``httpx.AsyncClient`` with the behaviour every backend call shares:
JSON headers, a correlation id per request, bearer-token injection for
authenticated calls, request/response logging with a slow-call warning, and
a hook fired when an authenticated call comes back 401.
"""

import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from ..exceptions import TransportFailure

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

TokenProvider = Callable[[], Optional[str]]
UnauthorizedHandler = Callable[[str], Awaitable[None]]


def generate_correlation_id() -> str:
    """Create a unique id used to follow one request through the backend logs."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class ApiClient:
    """Thin async HTTP client bound to the backend base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        slow_call_ms: int = 3000,
        token_provider: Optional[TokenProvider] = None,
        on_unauthorized: Optional[UnauthorizedHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Backend root, e.g. ``http://localhost:8080/api``
            timeout: Transport timeout in seconds for every request
            slow_call_ms: Responses slower than this are logged as warnings
            token_provider: Returns the bearer token of the active session
            on_unauthorized: Awaited with the rejected token when an
                authenticated call returns 401
            transport: Custom httpx transport (tests use ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.slow_call_ms = slow_call_ms
        self.token_provider = token_provider
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
            event_hooks={
                "request": [self._log_request],
                "response": [self._log_response],
            },
        )

    async def _log_request(self, request: httpx.Request) -> None:
        request.extensions["started_at"] = time.perf_counter()
        logger.debug(
            f"-> API request: {request.method} {request.url.path}",
            extra={"correlation_id": request.headers.get(CORRELATION_HEADER)},
        )

    async def _log_response(self, response: httpx.Response) -> None:
        request = response.request
        started = request.extensions.get("started_at")
        duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        correlation_id = request.headers.get(CORRELATION_HEADER, "unknown")
        extra = {
            "correlation_id": correlation_id,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }

        if response.status_code >= 500:
            logger.error(
                f"Server error: {request.method} {request.url.path} -> {response.status_code}",
                extra=extra,
            )
        elif response.status_code == 403:
            logger.warning(f"Access forbidden: {request.url.path}", extra=extra)
        else:
            logger.debug(
                f"<- API response: {request.method} {request.url.path} {response.status_code}",
                extra=extra,
            )

        if duration_ms > self.slow_call_ms:
            logger.warning(
                f"Slow API call detected: {request.method} {request.url.path} "
                f"took {duration_ms:.0f}ms",
                extra=extra,
            )

    async def request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        operation: Optional[str] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request and return the response whatever its status.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            authenticated: Attach the active bearer token and treat 401 as expiry
            operation: Name used in logs and errors
            **kwargs: Passed through to ``httpx.AsyncClient.request``

        Returns:
            The httpx response

        Raises:
            TransportFailure: On connection errors and timeouts
        """
        headers: Dict[str, str] = dict(kwargs.pop("headers", None) or {})
        headers.setdefault(CORRELATION_HEADER, generate_correlation_id())

        token: Optional[str] = None
        if authenticated and self.token_provider is not None:
            token = self.token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        operation = operation or f"{method.upper()} {path}"
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(
                f"No response from server for '{operation}' within {self.timeout}s",
                extra={"correlation_id": headers[CORRELATION_HEADER]},
            )
            raise TransportFailure(
                "The server took too long to respond",
                operation=operation,
                original_error=e,
            )
        except httpx.TransportError as e:
            logger.error(
                f"No response from server for '{operation}': {e}",
                extra={"correlation_id": headers[CORRELATION_HEADER]},
            )
            raise TransportFailure(
                "The server could not be reached",
                operation=operation,
                original_error=e,
            )

        if (
            response.status_code == 401
            and token
            and self.on_unauthorized is not None
        ):
            logger.warning(
                f"Unauthorized access on '{operation}', ending session",
                extra={"correlation_id": headers[CORRELATION_HEADER]},
            )
            await self.on_unauthorized(token)

        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def error_message(response: httpx.Response) -> Optional[str]:
    """Extract the backend's ``message`` field from an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None
