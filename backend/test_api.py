"""Tests for the FastAPI surface."""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeGemini, make_envelope, make_payload
from main import app, get_orchestrator
from pureplate.credentials import CredentialPool
from pureplate.errors import QuotaExceeded
from pureplate.orchestrator import AnalysisOrchestrator


@pytest.fixture
def api(orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def test_root(api):
    assert api.get("/").json()["message"] == "PurePlate API is running"


def test_health_reports_credentials(api):
    body = api.get("/health").json()
    assert body["status"] == "healthy"
    assert body["credentials"] == 3
    assert body["history_size"] == 0


def test_health_without_credentials():
    orch = AnalysisOrchestrator(CredentialPool([]), send=FakeGemini(make_envelope(make_payload())))
    app.dependency_overrides[get_orchestrator] = lambda: orch
    try:
        body = TestClient(app).get("/health").json()
    finally:
        app.dependency_overrides.clear()
    assert body["status"] == "no_credentials"


def test_allergy_options(api):
    assert "Tree Nuts" in api.get("/allergies").json()


def test_analyze_returns_result_and_records_history(api, fake_gemini):
    response = api.post(
        "/analyze",
        json={
            "query": "Energy Drink",
            "allergies": ["peanuts"],
            "bmi": {"value": 22.1, "category": "Normal weight"},
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["productName"] == "Energy Drink"
    assert body["verdict"] == "Avoid"
    assert body["ingredients"][0]["name"] == "Caffeine"
    assert "error" not in body

    _, payload = fake_gemini.calls[0]
    assert "Allergies: Peanuts." in payload.system_instruction
    assert "BMI: 22.1 (Normal)" in payload.system_instruction

    history = api.get("/history").json()
    assert [item["id"] for item in history] == [body["id"]]
    assert api.get(f"/history/{body['id']}").json() == body


def test_analyze_empty_query(api, fake_gemini):
    response = api.post("/analyze", json={"query": "   "})
    assert response.status_code == 400
    assert fake_gemini.calls == []


def test_analyze_unknown_allergy(api):
    response = api.post("/analyze", json={"query": "Tea", "allergies": ["Kryptonite"]})
    assert response.status_code == 422


def test_analyze_unknown_bmi_category(api):
    response = api.post("/analyze", json={"query": "Tea", "bmi": {"value": 20, "category": "Fit"}})
    assert response.status_code == 422


def test_analyze_degraded(api, fake_gemini):
    fake_gemini.responses = [QuotaExceeded("Quota limit reached")]

    body = api.post("/analyze", json={"query": "Energy Drink"}).json()

    assert body["error"].startswith("QuotaExceeded")
    assert body["healthScore"] == 0
    assert body["verdict"] == "Caution"
    assert body["ingredients"] == []
    assert api.get("/history").json() == []


def test_clear_history(api):
    api.post("/analyze", json={"query": "Energy Drink"})

    assert api.delete("/history").status_code == 204
    assert api.get("/history").json() == []


def test_unknown_history_item(api):
    assert api.get("/history/12345").status_code == 404


def test_non_finite_reply_keeps_history_serializable(api, fake_gemini):
    nutrition = {"calories": float("inf"), "protein": 0, "carbs": 28, "fats": 0, "sugar": 27}
    fake_gemini.responses = [make_envelope(make_payload(productName="Cola", nutrition=nutrition))]

    response = api.post("/analyze", json={"query": "Cola"})

    assert response.status_code == 200
    assert response.json()["error"].startswith("SchemaViolation")

    history = api.get("/history")
    assert history.status_code == 200
    assert history.json() == []
