"""Analysis Orchestrator
Drives a query through cache lookup, one Gemini request, validation,
and falls back to a degraded placeholder when anything on the way fails.
"""

import asyncio
import logging
import time
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from pureplate import gemini
from pureplate.cache import AnalysisHistory, MatchPolicy, ResultCache
from pureplate.credentials import CredentialPool
from pureplate.errors import AnalysisError, EmptyQuery
from pureplate.models import AnalysisResult, UserContext
from pureplate.prompt import InstructionPayload, build_instruction
from pureplate.validator import validate

logger = logging.getLogger(__name__)

SendFn = Callable[[str, InstructionPayload], Awaitable[dict]]


class AnalysisState(str, Enum):
    IDLE = "idle"
    CACHE_CHECK = "cache_check"
    REQUESTING = "requesting"
    PARSING = "parsing"
    DONE = "done"
    DEGRADED = "degraded"


def narrow_allergy_alerts(result: AnalysisResult, context: UserContext) -> tuple[str, ...]:
    """Keep only alerts for allergies the user actually declared"""
    declared = {a.lower(): a for a in context.allergies}
    alerts = []
    for alert in result.allergy_alerts:
        canonical = declared.get(alert.strip().lower())
        if canonical and canonical not in alerts:
            alerts.append(canonical)
    return tuple(alerts)


class AnalysisOrchestrator:
    """
    Owns the request lifecycle and the history of one user session.

    ``analyze`` either returns a complete result (fresh or cached) or a
    complete degraded placeholder. Only a successful fresh analysis touches
    history.
    """

    def __init__(
        self,
        pool: CredentialPool,
        send: Optional[SendFn] = None,
        history: Optional[AnalysisHistory] = None,
        match_policy: Optional[MatchPolicy] = None,
    ):
        self.pool = pool
        self.history = history if history is not None else AnalysisHistory()
        self.cache = ResultCache(self.history, match_policy)
        self._send = send or gemini.generate_content
        self._lock = asyncio.Lock()
        self._last_id = 0
        self.last_state = AnalysisState.IDLE
        self.pending_query = ""

    def _transition(self, state: AnalysisState, query: str) -> None:
        logger.debug("analyze(%r): %s -> %s", query, self.last_state.value, state.value)
        self.last_state = state

    def _next_id(self) -> int:
        # Epoch millis, bumped so ids stay strictly increasing within a process
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return self._last_id

    async def analyze(self, query: str, context: Optional[UserContext] = None) -> AnalysisResult:
        if not query or not query.strip():
            raise EmptyQuery("Query must not be empty")

        context = context or UserContext()

        self._transition(AnalysisState.CACHE_CHECK, query)
        cached = self.cache.lookup(query)
        if cached is not None:
            self._transition(AnalysisState.DONE, query)
            return cached

        self._transition(AnalysisState.REQUESTING, query)
        self.pending_query = query
        try:
            api_key = self.pool.select()
            payload = build_instruction(query, context)
            envelope = await self._send(api_key, payload)

            self._transition(AnalysisState.PARSING, query)
            raw_text = gemini.extract_text(envelope)
            parsed = validate(raw_text)
        except AnalysisError as e:
            self._transition(AnalysisState.DEGRADED, query)
            logger.warning("Analysis of %r degraded: %s: %s", query, type(e).__name__, e)
            return AnalysisResult.degraded(f"{type(e).__name__}: {e}")

        parsed = parsed.with_allergy_alerts(narrow_allergy_alerts(parsed, context))

        async with self._lock:
            result = parsed.stamped(self._next_id(), datetime.now())
            self.history.prepend(result)

        self.pending_query = ""
        self._transition(AnalysisState.DONE, query)
        logger.info(
            "Analyzed %r -> %r (%s, score=%d)",
            query, result.product_name, result.verdict.value, result.health_score
        )
        return result

    def get_history(self) -> tuple[AnalysisResult, ...]:
        return self.history.entries()

    def clear_history(self) -> None:
        self.history.clear()
        logger.info("History cleared")

    def select_from_history(self, result_id: int) -> AnalysisResult:
        result = self.history.get(result_id)
        if result is None:
            raise KeyError(result_id)
        return result
