"""
API endpoint tests for SickoHoops.

The resolver dependency is overridden, so no request leaves the process.
"""

import pytest
from fastapi.testclient import TestClient

from sickohoops.api.main import app, get_resolver
from sickohoops.llm.prompts import QUIZ_PROMPTS
from sickohoops.sources.curated import curated_strategies
from sickohoops.sources.generative import GenerativeStrategy
from sickohoops.sources.resolver import DataSourceResolver


@pytest.fixture
def client_for():
    """Create a test client backed by the given resolver."""
    def _make(resolver):
        app.dependency_overrides[get_resolver] = lambda: resolver
        return TestClient(app)
    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_for, fake_provider):
    return client_for(DataSourceResolver([*curated_strategies(), GenerativeStrategy(fake_provider("openai"))]))


class TestInfoEndpoints:
    """Tests for info endpoints."""

    def test_root_endpoint(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "SickoHoops API"

    def test_health_endpoint(self, client):
        """Test health check lists the strategy chain."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["generative_providers"] == 1
        assert data["strategies"][-1] == "generative_openai"

    def test_health_without_providers(self, client_for):
        """Test health is degraded when no generative provider is configured."""
        response = client_for(DataSourceResolver(curated_strategies())).get("/health")
        assert response.json()["status"] == "degraded"

    def test_health_before_startup(self):
        """Test an uninitialized resolver returns the shared error body."""
        response = TestClient(app).get("/health")
        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "ServiceUnavailable"
        assert "not initialized" in data["message"]
        assert "detail" not in data

    def test_random_prompt(self, client):
        """Test a suggested topic comes from the requested level."""
        response = client.get("/prompts/random?level=5")
        assert response.status_code == 200
        assert response.json()["topic"] in QUIZ_PROMPTS[5]

    def test_random_prompt_bad_level(self, client):
        """Test an out-of-range level is rejected."""
        response = client.get("/prompts/random?level=9")
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "InvalidRequest"
        assert "level" in data["details"]

    def test_unknown_route(self, client):
        """Test unknown paths use the shared error body."""
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"


class TestGenerateQuiz:
    """Tests for POST /api/generate-quiz."""

    def test_curated_topic(self, client):
        """Test a curated topic is served from its table."""
        response = client.post("/api/generate-quiz", json={"topic": "Every player with 10+ three-pointers in a game"})
        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"title", "description", "answers", "timeLimit"}
        assert data["timeLimit"] == 1200
        first = data["answers"][0]
        assert set(first) == {"points", "player", "team", "year"}
        assert isinstance(first["points"], int)
        assert first["team"].startswith(first["year"] + "-")

    def test_generated_topic(self, client):
        """Test other topics fall through to the generative provider."""
        response = client.post(
            "/api/generate-quiz",
            json={"topic": "Every NBA MVP since 2021", "maxQuestions": 100, "timeLimit": 300},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "NBA MVPs Since 2021"
        assert data["answers"][0] == {"points": 33.1, "player": "Joel Embiid", "team": "2023-PHI", "year": "2023"}

    @pytest.mark.parametrize("body", [{}, {"topic": ""}, {"topic": "   "}])
    def test_topic_required(self, client, body):
        """Test a missing or blank topic is rejected."""
        response = client.post("/api/generate-quiz", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "TopicRequired", "message": "Topic is required"}

    def test_missing_body(self, client):
        """Test a request without a body is treated as a missing topic."""
        response = client.post("/api/generate-quiz")
        assert response.status_code == 400
        assert response.json()["error"] == "TopicRequired"

    @pytest.mark.parametrize("body, field", [
        ({"topic": "x" * 501}, "topic"),
        ({"topic": ["a"]}, "topic"),
        ({"topic": "Every NBA MVP", "maxQuestions": 0}, "maxQuestions"),
        ({"topic": "Every NBA MVP", "timeLimit": -5}, "timeLimit"),
    ])
    def test_invalid_request(self, client, body, field):
        """Test invalid fields return the shared error body."""
        response = client.post("/api/generate-quiz", json=body)
        assert response.status_code == 400
        data = response.json()
        assert set(data) == {"error", "message", "details"}
        assert data["error"] == "InvalidRequest"
        assert field in data["details"]

    def test_source_unavailable(self, client_for, failing_provider):
        """Test every source failing maps to 503."""
        client = client_for(DataSourceResolver([GenerativeStrategy(failing_provider)]))
        response = client.post("/api/generate-quiz", json={"topic": "Every NBA MVP"})
        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "SourceUnavailable"
        assert "generative_down" in data["details"]

    def test_empty_result(self, client_for, fake_provider):
        """Test a source answering with nothing maps to 500."""
        empty = fake_provider("openai", content='{"title": "Nothing", "answers": []}')
        client = client_for(DataSourceResolver([GenerativeStrategy(empty)]))
        response = client.post("/api/generate-quiz", json={"topic": "Every NBA MVP"})
        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "EmptyResult"
        assert "more specific" in data["message"]
