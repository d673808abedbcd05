"""
Request Executor
Issues one HTTP call with a timeout and the tenant identity header, and
decodes failures into TransportFailure / HttpStatusFailure.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from leadgen.domain.models.request_outcome import HttpStatusFailure, TransportFailure
from leadgen.infrastructure.api_client.errors import RequestFailure
from leadgen.infrastructure.api_client.session_context import SessionContext

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


def decode_error_response(response: httpx.Response) -> HttpStatusFailure:
    """Decode a non-2xx response, reading the `{error, message, code}` body when present"""
    error = message = code = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        message = body.get("message")
        code = body.get("code")
        # FastAPI's own errors use {"detail": ...}
        if not error and isinstance(body.get("detail"), str):
            error = body["detail"]

    if not error and not message:
        error = response.reason_phrase or "Request failed"

    return HttpStatusFailure(status=response.status_code, error=error, message=message, code=code)


class RequestExecutor:
    """
    Single-attempt HTTP caller.

    Usage:
        executor = RequestExecutor("https://leads.example.com/api/v1", session)
        agents = await executor.send("GET", "/agents", params={"public": "true"})
    """

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout_s = timeout_s
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    def url_for(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send one request.

        Returns:
            Parsed JSON body, or text for non-JSON responses

        Raises:
            RequestFailure: On transport failure, timeout or non-2xx status
        """
        request_headers = dict(headers or {})
        # Tenant header only when a tenant session exists
        request_headers.update(self.session.identity_headers())

        url = self.url_for(path)
        try:
            response = await self.client.request(
                method,
                url,
                params=params,
                json=json,
                headers=request_headers,
                timeout=self.timeout_s,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {url} timed out after {self.timeout_s}s")
            raise RequestFailure(TransportFailure(reason=str(e) or "timeout", timed_out=True)) from e
        except httpx.TransportError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise RequestFailure(TransportFailure(reason=str(e) or type(e).__name__)) from e

        if response.is_success:
            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                return response.json()
            return response.text

        failure = decode_error_response(response)
        logger.info(f"{method} {url} -> {response.status_code} ({failure.code or failure.error})")
        raise RequestFailure(failure)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
