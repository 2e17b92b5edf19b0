"""Tests for analysis history and the result cache."""

from datetime import datetime

import pytest

from pureplate.cache import AnalysisHistory, ResultCache, SubstringMatch
from pureplate.models import AnalysisResult, Composition, Nutrition, Verdict


def _result(name: str, result_id: int) -> AnalysisResult:
    return AnalysisResult(
        product_name=name,
        health_score=50,
        verdict=Verdict.CAUTION,
        summary="",
        composition=Composition(),
        nutrition=Nutrition(),
        id=result_id,
        timestamp=datetime(2026, 1, 1),
    )


@pytest.fixture
def history() -> AnalysisHistory:
    h = AnalysisHistory()
    h.prepend(_result("Coca-Cola Classic", 1))
    h.prepend(_result("Diet Cola", 2))
    return h


def test_history_is_newest_first(history):
    assert [r.id for r in history.entries()] == [2, 1]


def test_lookup_is_case_insensitive_substring(history):
    cache = ResultCache(history)
    assert cache.lookup("coca").id == 1
    assert cache.lookup("DIET COLA").id == 2


def test_lookup_returns_newest_match_first(history):
    # Loose matching: "cola" is in both names
    assert ResultCache(history).lookup("cola").id == 2


def test_lookup_miss(history):
    assert ResultCache(history).lookup("Energy Drink") is None


def test_query_longer_than_product_name_misses(history):
    assert ResultCache(history).lookup("Diet Cola Zero Sugar") is None


def test_lookup_does_not_mutate_history(history):
    before = history.entries()
    ResultCache(history).lookup("cola")
    ResultCache(history).lookup("nothing")
    assert history.entries() == before


def test_custom_match_policy(history):
    class ExactMatch:
        def matches(self, query, product_name):
            return query.strip().lower() == product_name.lower()

    cache = ResultCache(history, ExactMatch())
    assert cache.lookup("cola") is None
    assert cache.lookup("diet cola").id == 2


def test_clear_empties_cache(history):
    cache = ResultCache(history)
    history.clear()
    assert len(history) == 0
    assert cache.lookup("cola") is None


def test_get_by_id(history):
    assert history.get(1).product_name == "Coca-Cola Classic"
    assert history.get(99) is None


def test_degraded_results_are_rejected():
    with pytest.raises(ValueError):
        AnalysisHistory().prepend(AnalysisResult.degraded("boom"))


def test_substring_match_direction():
    policy = SubstringMatch()
    assert policy.matches("cola", "Diet Cola")
    assert not policy.matches("Diet Cola", "cola")
