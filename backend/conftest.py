"""Shared fixtures for the PurePlate backend tests."""

import json
import random
from typing import Any

import pytest

from pureplate.credentials import CredentialPool
from pureplate.models import BMICategory, BMIReading, UserContext
from pureplate.orchestrator import AnalysisOrchestrator


def make_payload(**overrides: Any) -> dict[str, Any]:
    """A schema-valid model answer; override any top-level field."""
    payload = {
        "productName": "Energy Drink",
        "healthScore": 32,
        "verdict": "Avoid",
        "summary": "High sugar and caffeine; not a good fit for your BMI.",
        "composition": {"safe": 40, "questionable": 35, "harmful": 25},
        "nutrition": {"calories": 110, "protein": 0, "carbs": 28, "fats": 0, "sugar": 27},
        "ingredients": [
            {
                "name": "Caffeine",
                "risk": "Medium",
                "impact": "Raises heart rate",
                "tags": ["Stimulant"],
                "alternative": "Green tea",
            },
            {
                "name": "Sucrose",
                "risk": "High",
                "impact": "Blood sugar spike",
                "tags": ["Sweetener"],
                "alternative": None,
            },
        ],
        "allergyAlerts": [],
    }
    payload.update(overrides)
    return payload


def make_envelope(payload: Any) -> dict[str, Any]:
    """Wrap text (or a dict, JSON-encoded) in a Gemini generateContent envelope."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class FakeGemini:
    """Stands in for gemini.generate_content and records every call."""

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: list[tuple[str, Any]] = []

    async def __call__(self, api_key, payload):
        self.calls.append((api_key, payload))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def pool() -> CredentialPool:
    return CredentialPool(["key-a", "key-b", "key-c"], rng=random.Random(7))


@pytest.fixture
def user_context() -> UserContext:
    return UserContext(
        allergies=frozenset({"Peanuts", "Dairy"}),
        bmi=BMIReading(value=27.4, category=BMICategory.OVERWEIGHT),
    )


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini(make_envelope(make_payload()))


@pytest.fixture
def orchestrator(pool: CredentialPool, fake_gemini: FakeGemini) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(pool, send=fake_gemini)
