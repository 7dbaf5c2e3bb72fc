"""
Embedding service with rate limiting, retries and a deterministic fallback.

EmbeddingProvider.embed() never raises: when the OpenAI embeddings API is
rate limited past the retry budget, out of quota, unreachable or not
configured, it returns a local hash-based pseudo-embedding instead.
"""

import asyncio
import math
import time
from typing import Any, Awaitable, Callable, List, Optional

import logfire
import openai
from openai import AsyncOpenAI

from config.settings import settings


def fallback_embedding(text: str, dimensions: int) -> List[float]:
    """
    Deterministic pseudo-embedding for when the embeddings API is unavailable.

    Each character adds sin(code * position) * 0.01 at index
    (code + position) % dimensions; the result is L2-normalized unless it is
    the zero vector.

    Args:
        text: Text to embed
        dimensions: Vector length

    Returns:
        List of `dimensions` floats
    """
    embedding = [0.0] * dimensions

    for position, char in enumerate(text):
        code = ord(char)
        embedding[(code + position) % dimensions] += math.sin(code * position) * 0.01

    magnitude = math.sqrt(sum(value * value for value in embedding))
    if magnitude > 0:
        return [value / magnitude for value in embedding]
    return embedding


def is_quota_exhausted(error: Exception) -> bool:
    """OpenAI reports an exhausted quota with code 'insufficient_quota'."""
    return getattr(error, "code", None) == "insufficient_quota"


def is_rate_limited(error: Exception) -> bool:
    """True for HTTP 429 responses."""
    return isinstance(error, openai.RateLimitError) or getattr(error, "status_code", None) == 429


class RateLimiter:
    """
    Minimum spacing between outbound embedding requests.

    One instance is shared by every caller of an EmbeddingProvider, so the
    spacing is global rather than per request. The delay doubles on each
    rate-limit signal (up to `max_delay_ms`) and decays by 10% on each
    success (down to `initial_delay_ms`).
    """

    def __init__(
        self,
        initial_delay_ms: float = 1000.0,
        max_delay_ms: float = 30000.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.min_delay_ms = initial_delay_ms
        self.max_delay_ms = max_delay_ms
        self.delay_ms = initial_delay_ms
        self.last_request_time: Optional[float] = None

        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def wait(self) -> float:
        """
        Block until `delay_ms` has passed since the previous request.

        Callers queue on a lock, so concurrent requests go out one at a time.

        Returns:
            Milliseconds waited
        """
        async with self._lock:
            waited_ms = 0.0
            if self.last_request_time is not None:
                elapsed_ms = (self._clock() - self.last_request_time) * 1000
                if elapsed_ms < self.delay_ms:
                    waited_ms = self.delay_ms - elapsed_ms
                    logfire.debug("Rate limiting embedding request", wait_ms=round(waited_ms))
                    await self._sleep(waited_ms / 1000)

            self.last_request_time = self._clock()
            return waited_ms

    async def backoff(self) -> None:
        """Sleep for the current delay (after a rate-limit signal)."""
        await self._sleep(self.delay_ms / 1000)

    def record_rate_limit(self) -> float:
        """Double the delay, capped at the ceiling. Returns the new delay."""
        self.delay_ms = min(self.max_delay_ms, self.delay_ms * 2)
        return self.delay_ms

    def record_success(self) -> float:
        """Decay the delay by 10%, floored at the initial delay. Returns the new delay."""
        self.delay_ms = max(self.min_delay_ms, self.delay_ms * 0.9)
        return self.delay_ms


class EmbeddingProvider:
    """
    Converts text to fixed-length vectors via the OpenAI embeddings API.

    Retries up to `max_retries` times on HTTP 429 with exponential backoff.
    Quota exhaustion and any other API failure skip straight to the fallback
    embedding. Callers should treat fallback vectors as lower quality.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        dimensions: Optional[int] = None,
        max_retries: Optional[int] = None,
        rate_limiter: Optional[RateLimiter] = None,
        client: Optional[Any] = None,
    ):
        self.model = model or settings.embedding_model
        self.dimensions = settings.embedding_dimensions if dimensions is None else dimensions
        self.max_retries = settings.embedding_max_retries if max_retries is None else max_retries
        self.rate_limiter = rate_limiter or RateLimiter(
            initial_delay_ms=settings.embedding_initial_delay_ms,
            max_delay_ms=settings.embedding_max_delay_ms,
        )

        # Counters surfaced in logs for spotting degraded retrieval
        self.api_embeddings = 0
        self.fallback_embeddings = 0

        api_key = settings.openai_api_key if api_key is None else api_key
        if client is not None:
            self.client = client
        elif api_key:
            self.client = AsyncOpenAI(api_key=api_key)
        else:
            self.client = None
            logfire.warning(
                "OPENAI_API_KEY not set, embeddings will use the local fallback",
                model=self.model
            )

    async def embed(self, text: str) -> List[float]:
        """
        Embed a single text. Never raises.

        Args:
            text: Text to embed

        Returns:
            Vector of length `self.dimensions`
        """
        if self.client is None:
            return self.fallback(text)

        attempts = 0
        while attempts < self.max_retries:
            await self.rate_limiter.wait()

            try:
                response = await self.client.embeddings.create(model=self.model, input=text)

            except Exception as e:
                if is_quota_exhausted(e):
                    logfire.error("OpenAI quota exceeded, using fallback embedding", model=self.model)
                    return self.fallback(text)

                if is_rate_limited(e):
                    attempts += 1
                    delay_ms = self.rate_limiter.record_rate_limit()

                    if attempts < self.max_retries:
                        logfire.warning(
                            "Embedding rate limit hit, retrying",
                            attempt=attempts,
                            max_attempts=self.max_retries,
                            retry_delay_ms=delay_ms
                        )
                        await self.rate_limiter.backoff()
                        continue

                    logfire.error(
                        "Max retries exceeded for embeddings API, using fallback embedding",
                        attempts=attempts
                    )
                    return self.fallback(text)

                logfire.error(
                    "Embedding request failed, using fallback embedding",
                    error=str(e)[:500],
                    error_type=type(e).__name__
                )
                return self.fallback(text)

            self.rate_limiter.record_success()
            embedding = list(response.data[0].embedding)

            if len(embedding) != self.dimensions:
                logfire.error(
                    "Embedding dimension mismatch, using fallback embedding",
                    expected=self.dimensions,
                    got=len(embedding)
                )
                return self.fallback(text)

            self.api_embeddings += 1
            return embedding

        return self.fallback(text)

    def fallback(self, text: str) -> List[float]:
        """Local pseudo-embedding at this provider's dimension."""
        self.fallback_embeddings += 1
        logfire.info(
            "Using fallback embedding",
            text_preview=text[:50],
            fallback_count=self.fallback_embeddings
        )
        return fallback_embedding(text, self.dimensions)
