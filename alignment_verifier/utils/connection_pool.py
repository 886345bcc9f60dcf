"""
Pooled HTTP access to a JSON REST API.

Each tracker adapter owns one pool for its lifetime. The underlying
``httpx.AsyncClient`` is created lazily and reused across requests, and
``get_json`` is the single place where transport, status and decoding
failures become ExternalServiceError.
"""

import asyncio
from typing import Any

import httpx
import structlog

from alignment_verifier.exceptions import ExternalServiceError

log = structlog.get_logger(__name__)

JSON_HEADERS = {"Accept": "application/json"}


class HTTPConnectionPool:
    """Connection pool bound to one REST API base URL.

    ``service`` names the upstream on every raised ExternalServiceError
    (e.g. "jira").
    """

    def __init__(
        self,
        base_url: str,
        service: str = "http",
        max_connections: int = 10,
        max_keepalive_connections: int = 5,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
    ) -> None:
        self.base_url = base_url
        self.service = service
        self.max_connections = max_connections
        self.max_keepalive_connections = max_keepalive_connections
        self.timeout = timeout
        self.headers = {**JSON_HEADERS, **(headers or {})}
        self.auth = auth
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def with_basic_auth(
        cls,
        base_url: str,
        email: str,
        token: str,
        service: str,
        timeout: float = 30.0,
    ) -> "HTTPConnectionPool":
        """Pool authenticating with an account email and API token (Atlassian Cloud style)."""
        return cls(base_url, service=service, timeout=timeout, auth=(email, token))

    async def initialize(self) -> None:
        """Create the underlying client if it does not exist yet."""
        async with self._lock:
            if self._client is None:
                limits = httpx.Limits(
                    max_keepalive_connections=self.max_keepalive_connections,
                    max_connections=self.max_connections,
                    keepalive_expiry=30.0,
                )

                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    limits=limits,
                    timeout=self.timeout,
                    http2=True,
                    headers=self.headers,
                    auth=self.auth,
                )

                log.info("connection_pool_initialized", service=self.service, base_url=self.base_url)

    async def close(self) -> None:
        """Close the connection pool."""
        async with self._lock:
            if self._client:
                await self._client.aclose()
                self._client = None
                log.info("connection_pool_closed", service=self.service, base_url=self.base_url)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make GET request."""
        if self._client is None:
            await self.initialize()

        assert self._client is not None
        return await self._client.get(path, **kwargs)

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET a JSON object.

        Raises:
            ExternalServiceError: On a transport error, a non-2xx status, an
                undecodable body or a body that is not a JSON object
        """
        label = self.service.title()
        try:
            response = await self.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"{label} request failed: {path}",
                service=self.service,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"{label} request failed: {path}: {e}", service=self.service) from e
        except ValueError as e:
            raise ExternalServiceError(f"{label} returned invalid JSON: {path}", service=self.service) from e

        if not isinstance(data, dict):
            raise ExternalServiceError(f"Unexpected {label} response shape: {path}", service=self.service)
        return data

    async def __aenter__(self) -> "HTTPConnectionPool":
        await self.initialize()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
