"""
Embedding generation service backed by an OpenAI-compatible endpoint.

Provides async embedding generation for memory documents with:
- Single and batch requests (batch preserves input order)
- Silent truncation of oversized input to a fixed character budget
- Lazy client initialization (SDK client built on first use)
- Strict failure semantics: no retries, no fallback vectors
"""

import time
from typing import Any

import httpx
import openai
import structlog

from memstore.embedding.config import EmbeddingConfig
from memstore.exceptions import EmbeddingFailure
from memstore.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class EmbeddingService:
    """
    Service for converting text to fixed-length vectors.

    Wraps ``openai.AsyncOpenAI`` pointed at any OpenAI-compatible
    embeddings endpoint. Every failure of the external call surfaces as
    EmbeddingFailure; the caller decides whether to retry.

    Dimension consistency is not checked here. The document store rejects
    vectors that disagree with the schema at write time.

    Usage:
        service = EmbeddingService()
        vector = await service.embed("We use Postgres with pgvector")
        vectors = await service.embed_batch(["first", "second"])
    """

    def __init__(
        self,
        config: EmbeddingConfig | None = None,
        client: Any = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the embedding service.

        Args:
            config: Embedding configuration (uses defaults if None)
            client: Pre-built AsyncOpenAI-compatible client (built lazily if None)
            transport: Optional httpx transport for the lazily built client (for testing)
        """
        self._config = config or EmbeddingConfig()
        self._client = client
        self._transport = transport
        self._requests = 0
        self._failures = 0
        self._texts_embedded = 0

        logger.info(
            "EmbeddingService created",
            model=self._config.model_name,
            dimensions=self._config.dimensions,
            base_url=self._config.base_url,
        )

    @property
    def config(self) -> EmbeddingConfig:
        return self._config

    @property
    def dimensions(self) -> int:
        """Vector dimensionality requested from the endpoint."""
        return self._config.dimensions

    def _get_client(self) -> Any:
        """Lazy-initialize the async SDK client."""
        if self._client is None:
            api_key = self._config.api_key
            http_client = None
            if self._transport is not None:
                http_client = httpx.AsyncClient(
                    transport=self._transport,
                    timeout=self._config.timeout_seconds,
                )
            self._client = openai.AsyncOpenAI(
                api_key=api_key.get_secret_value() if api_key else "not-configured",
                base_url=self._config.base_url,
                timeout=self._config.timeout_seconds,
                max_retries=0,
                http_client=http_client,
            )
        return self._client

    def truncate(self, text: str) -> str:
        """Clip text to the configured character budget."""
        return text[: self._config.max_input_chars]

    async def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Args:
            text: Text to embed (truncated to max_input_chars)

        Returns:
            Embedding vector

        Raises:
            EmbeddingFailure: If the endpoint call fails or the response is malformed
        """
        vectors = await self._request([self.truncate(text)], operation="single")
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Generate embeddings for multiple texts.

        Texts are submitted in as few requests as batch_size allows. The
        returned list lines up with ``texts``. If any request fails the
        whole call fails.

        Args:
            texts: Texts to embed

        Returns:
            One embedding per input, in input order

        Raises:
            EmbeddingFailure: If any endpoint call fails
        """
        if not texts:
            return []

        truncated = [self.truncate(t) for t in texts]
        batch_size = self._config.batch_size

        results: list[list[float]] = []
        for start in range(0, len(truncated), batch_size):
            chunk = truncated[start : start + batch_size]
            results.extend(await self._request(chunk, operation="batch"))

        return results

    async def _request(self, inputs: list[str], operation: str) -> list[list[float]]:
        """Submit one embeddings request and validate the response."""
        metrics = get_metrics()
        start = time.perf_counter()
        self._requests += 1

        try:
            response = await self._get_client().embeddings.create(
                model=self._config.model_name,
                input=inputs,
                dimensions=self._config.dimensions,
                encoding_format="float",
            )
            vectors = self._parse_response(response, expected=len(inputs))
        except EmbeddingFailure:
            self._failures += 1
            metrics.record_embedding(operation, status="error")
            raise
        except openai.OpenAIError as e:
            self._failures += 1
            metrics.record_embedding(operation, status="error")
            logger.error(
                "Embedding request failed",
                operation=operation,
                inputs=len(inputs),
                error=str(e),
            )
            raise EmbeddingFailure(f"Embedding request failed: {e}", cause=e) from e

        latency = time.perf_counter() - start
        self._texts_embedded += len(inputs)
        metrics.record_embedding(
            operation,
            status="success",
            latency=latency,
            batch_size=len(inputs),
        )
        logger.debug(
            "Embeddings generated",
            operation=operation,
            inputs=len(inputs),
            latency_ms=round(latency * 1000, 2),
        )
        return vectors

    def _parse_response(self, response: Any, expected: int) -> list[list[float]]:
        """
        Extract vectors from an embeddings response.

        Items are ordered by their ``index`` field so batch output matches
        input order even if the endpoint reorders them.
        """
        data = getattr(response, "data", None)
        if not data or len(data) != expected:
            got = len(data) if data else 0
            raise EmbeddingFailure(
                f"Malformed embedding response: expected {expected} vectors, got {got}"
            )

        items = sorted(data, key=lambda item: getattr(item, "index", 0) or 0)

        vectors: list[list[float]] = []
        for item in items:
            embedding = getattr(item, "embedding", None)
            if not isinstance(embedding, list) or not embedding:
                raise EmbeddingFailure("Malformed embedding response: missing vector")
            try:
                vectors.append([float(x) for x in embedding])
            except (TypeError, ValueError) as e:
                raise EmbeddingFailure(
                    "Malformed embedding response: non-numeric vector", cause=e
                ) from e

        return vectors

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
        logger.info("EmbeddingService closed")

    @property
    def is_configured(self) -> bool:
        """Check if an API key is present."""
        return self._config.api_key is not None

    def get_stats(self) -> dict[str, Any]:
        """Get service statistics."""
        return {
            "model": self._config.model_name,
            "dimensions": self._config.dimensions,
            "max_input_chars": self._config.max_input_chars,
            "requests": self._requests,
            "failures": self._failures,
            "texts_embedded": self._texts_embedded,
        }
