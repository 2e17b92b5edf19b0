"""
Result Cache
History of past analyses and the lookup that serves repeated queries from it
"""

import logging
from typing import Optional, Protocol

from pureplate.models import AnalysisResult

logger = logging.getLogger(__name__)


class AnalysisHistory:
    """
    In-memory history of successful analyses, newest first.

    Only ``prepend`` and ``clear`` mutate it. Callers that may complete
    concurrently must serialize ``prepend`` themselves (the orchestrator
    holds a lock around it).
    """

    def __init__(self):
        self._entries: list[AnalysisResult] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def entries(self) -> tuple[AnalysisResult, ...]:
        return tuple(self._entries)

    def prepend(self, result: AnalysisResult) -> None:
        if result.is_degraded:
            raise ValueError("Degraded results are never stored in history")
        self._entries.insert(0, result)

    def clear(self) -> None:
        self._entries.clear()

    def get(self, result_id: int) -> Optional[AnalysisResult]:
        for entry in self._entries:
            if entry.id == result_id:
                return entry
        return None


class MatchPolicy(Protocol):
    """Decides whether a stored product answers a new query"""

    def matches(self, query: str, product_name: str) -> bool:
        ...


class SubstringMatch:
    """Case-insensitive: the stored product name contains the query text.

    Loose on purpose. "Cola" will hit a cached "Diet Cola".
    """

    def matches(self, query: str, product_name: str) -> bool:
        return query.lower() in product_name.lower()


class ResultCache:
    """Read-only view over history used before any network call"""

    def __init__(self, history: AnalysisHistory, policy: Optional[MatchPolicy] = None):
        self._history = history
        self._policy = policy or SubstringMatch()

    def lookup(self, query: str) -> Optional[AnalysisResult]:
        for entry in self._history:
            if self._policy.matches(query, entry.product_name):
                logger.info("Cache hit for %r -> %r (id=%s)", query, entry.product_name, entry.id)
                return entry
        logger.info("Cache miss for %r", query)
        return None
