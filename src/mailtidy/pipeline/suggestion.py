"""AI-backed domain suggestions.

The provider (typically an embedding model) is an external collaborator.
SuggestionAdapter wraps any provider so that a slow, failing or missing
provider can never break validation: on timeout or error the adapter
logs and returns None, and the caller keeps its synchronous verdict.
"""

import asyncio
import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

from mailtidy.config import AiOptions, default_ai_candidates
from mailtidy.exceptions import SuggestionUnavailableError
from mailtidy.patterns.blocklist import BlocklistMatcher
from mailtidy.pipeline.distance import levenshtein

logger = logging.getLogger(__name__)

SuggestionReason = Literal["embedding_similarity"]


@dataclass(frozen=True, slots=True)
class AiSuggestion:
    """A domain suggested by an external provider.

    Attributes:
        suggestion: Suggested domain.
        confidence: Provider's confidence in [0, 1].
        reason: Tag naming the method that produced the suggestion.
    """

    suggestion: str
    confidence: float
    reason: SuggestionReason = "embedding_similarity"


class SuggestionProvider(Protocol):
    """Anything that can suggest a domain asynchronously.

    Return None when there is no confident suggestion. Raise
    SuggestionUnavailableError when the provider cannot answer at all.
    """

    async def suggest(self, domain: str, options: AiOptions) -> AiSuggestion | None: ...


class SuggestionAdapter:
    """Time-boxed, failure-tolerant access to a SuggestionProvider."""

    def __init__(
        self,
        provider: SuggestionProvider,
        options: AiOptions | None = None,
        blocklist: BlocklistMatcher | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            provider: The external suggestion provider.
            options: Provider settings; ``timeout`` bounds each call.
            blocklist: Suggestions blocked by these rules are discarded.
        """
        self._provider = provider
        self._options = options or AiOptions()
        self._blocklist = blocklist

    @property
    def options(self) -> AiOptions:
        """Provider settings in use."""
        return self._options

    async def suggest(self, domain: str) -> AiSuggestion | None:
        """Ask the provider for a better domain.

        Args:
            domain: Domain as typed (after normalization).

        Returns:
            A suggestion different from ``domain`` and not blocked, or None
            if the provider has none, fails, or runs out of time.
        """
        query = domain.strip().lower()
        if not query:
            return None

        try:
            hit = await asyncio.wait_for(
                self._provider.suggest(query, self._options),
                timeout=self._options.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Suggestion provider timed out after %.2fs for %s", self._options.timeout, query
            )
            return None
        except SuggestionUnavailableError as exc:
            logger.warning("Suggestion provider unavailable: %s", exc)
            return None
        except Exception:
            logger.warning("Suggestion provider failed for %s", query, exc_info=True)
            return None

        if hit is None:
            return None

        if not hit.suggestion or not 0.0 <= hit.confidence <= 1.0:
            logger.warning("Discarding malformed suggestion %r for %s", hit, query)
            return None

        suggested = hit.suggestion.strip().lower()
        if suggested == query:
            return None

        if self._blocklist is not None and self._blocklist.is_blocked(suggested):
            logger.debug("Discarding blocked suggestion %s for %s", suggested, query)
            return None

        return AiSuggestion(suggestion=suggested, confidence=hit.confidence, reason=hit.reason)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors."""
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    return dot / (norm_a * norm_b + 1e-12)


class EmbeddingSuggestionProvider:
    """Suggests the candidate whose embedding is closest to the domain's.

    The embedding model is supplied by the caller as a plain function from
    text to vector (e.g. a sentence-transformers ``encode`` call); it runs
    in a worker thread. Embeddings are cached per text for the lifetime of
    the provider.

    A best match is only returned when its cosine similarity reaches
    ``options.threshold`` and it is within ``options.max_edits`` edits of
    the input, which rules out semantically close but unrelated domains.
    """

    def __init__(self, embed: Callable[[str], Sequence[float]]) -> None:
        """Initialize the provider.

        Args:
            embed: Function returning an embedding vector for a text.
        """
        self._embed = embed
        self._cache: dict[str, tuple[float, ...]] = {}

    async def suggest(self, domain: str, options: AiOptions) -> AiSuggestion | None:
        query = domain.strip().lower()
        if not query or not any(c.isalpha() for c in query):
            return None

        candidates = options.candidates or default_ai_candidates()
        query_vector = await self._embedding(query)

        best: str | None = None
        best_similarity = -1.0
        for candidate in candidates:
            candidate = candidate.lower()
            similarity = cosine_similarity(query_vector, await self._embedding(candidate))
            if similarity > best_similarity:
                best = candidate
                best_similarity = similarity

        if best is None or best_similarity < options.threshold:
            return None

        if levenshtein(query, best, options.max_edits) > options.max_edits:
            return None

        return AiSuggestion(
            suggestion=best,
            confidence=min(1.0, max(0.0, best_similarity)),
            reason="embedding_similarity",
        )

    async def _embedding(self, text: str) -> tuple[float, ...]:
        cached = self._cache.get(text)
        if cached is not None:
            return cached

        try:
            vector = await asyncio.to_thread(self._embed, text)
        except Exception as exc:
            raise SuggestionUnavailableError(message=f"Embedding failed for {text!r}: {exc}") from exc

        cached = tuple(float(x) for x in vector)
        self._cache[text] = cached
        return cached
