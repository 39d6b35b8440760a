"""
Async HTTP client for the memory API.

Thin wrapper over httpx.AsyncClient used by the agent plugin. Adds the
bearer token when configured and turns non-2xx responses and transport
errors into MemoryClientError. No retries: hook callers log and move on,
tool callers surface the error.
"""

from typing import Any

import httpx
import structlog

from memstore.plugin.config import PluginConfig

logger = structlog.get_logger(__name__)


class MemoryClientError(Exception):
    """A memory API call failed."""

    def __init__(
        self,
        message: str,
        method: str,
        path: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.method = method
        self.path = path
        self.status_code = status_code
        self.response_body = response_body


class MemoryClient:
    """
    Client for the search, add and health endpoints.

    Example:
        async with MemoryClient(PluginConfig()) as client:
            await client.add("We use Postgres with pgvector")
            hits = await client.search("what database do we use?", limit=3)
    """

    def __init__(
        self,
        config: PluginConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Plugin configuration. Uses defaults if None.
            transport: Optional httpx transport (for testing)
        """
        self._config = config or PluginConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._config.api_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key is not None:
            headers["Authorization"] = f"Bearer {self._config.api_key.get_secret_value()}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def __aenter__(self) -> "MemoryClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Perform a request and decode the JSON response.

        Raises:
            MemoryClientError: On transport failure, non-2xx status or a
                body that is not JSON
        """
        try:
            response = await self._get_client().request(method, path, json=json_body)
        except httpx.HTTPError as e:
            raise MemoryClientError(
                f"memory API {method} {path} failed: {e}",
                method=method,
                path=path,
            ) from e

        if not response.is_success:
            body = response.text
            raise MemoryClientError(
                f"memory API {method} {path} -> {response.status_code}: {body}",
                method=method,
                path=path,
                status_code=response.status_code,
                response_body=body,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MemoryClientError(
                f"memory API {method} {path} returned invalid JSON: {e}",
                method=method,
                path=path,
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    def _expect_object(self, data: Any, method: str, path: str) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise MemoryClientError(
                f"memory API {method} {path} returned {type(data).__name__}, expected an object",
                method=method,
                path=path,
            )
        return data

    async def search(
        self,
        query: str,
        limit: int | None = None,
        threshold: float | None = None,
    ) -> list[dict[str, Any]]:
        """
        Search memories via /v3/search.

        Returns:
            Hits as returned by the API (id, content, score, ...)
        """
        body: dict[str, Any] = {"q": query}
        if limit is not None:
            body["limit"] = limit
        if threshold is not None:
            body["threshold"] = threshold

        data = await self._request("POST", "/v3/search", json_body=body)
        results = self._expect_object(data, "POST", "/v3/search").get("results", [])
        if not isinstance(results, list):
            raise MemoryClientError(
                "memory API POST /v3/search returned non-list results",
                method="POST",
                path="/v3/search",
            )
        return results

    async def add(
        self,
        content: str,
        metadata: dict[str, Any] | None = None,
        container_tag: str | None = None,
    ) -> dict[str, Any]:
        """
        Store a document via /v3/documents.

        Returns:
            The API response ({id, status, message})
        """
        body: dict[str, Any] = {"content": content}
        if metadata is not None:
            body["metadata"] = metadata
        if container_tag is not None:
            body["containerTag"] = container_tag

        data = await self._request("POST", "/v3/documents", json_body=body)
        return self._expect_object(data, "POST", "/v3/documents")

    async def health(self) -> dict[str, Any]:
        """Fetch /health."""
        data = await self._request("GET", "/health")
        return self._expect_object(data, "GET", "/health")
