"""Integration tests for the HTTP API.

Tests the /, /health, /status and /check endpoints against in-memory usage
oracles injected through the dependency layer.
"""

from datetime import UTC, datetime, timedelta
import json
from unittest.mock import AsyncMock, Mock

from fastapi.testclient import TestClient
import pytest

from schemacheck.api import create_app
from schemacheck.api.dependencies import get_usage_oracle_unsafe, set_usage_oracle
from schemacheck.core.config import Settings, get_settings
from schemacheck.usage import InMemoryUsageOracle, UsageOracle, UsageRecord


def _recent():
    return datetime.now(UTC) - timedelta(days=1)


@pytest.fixture
def settings():
    return Settings(log_requests=False, fail_warnings_without_usage=True)


@pytest.fixture
def oracle():
    return InMemoryUsageOracle()


@pytest.fixture
def app(settings, oracle):
    """Create the app with an injected oracle and fixed settings."""
    application = create_app(settings)
    application.dependency_overrides[get_settings] = lambda: settings
    set_usage_oracle(oracle)
    yield application
    set_usage_oracle(None)


@pytest.fixture
def client(app):
    """Create test client without running the lifespan."""
    return TestClient(app)


class TestRootEndpoint:
    """Test the / endpoint."""

    def test_root(self, client):
        """Root returns API information."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "schemacheck API"
        assert data["check"] == "/check"


class TestHealthEndpoints:
    """Test the /health and /status endpoints."""

    def test_health_degraded_without_usage(self, client):
        """An oracle with no records reports degraded."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["usage"]["record_count"] == 0

    def test_health_with_usage(self, client, oracle):
        """Loaded usage records make the service healthy."""
        oracle.add_records([UsageRecord(coordinate="Query.user", last_seen=_recent(), client="web")])

        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["usage"]["record_count"] == 1
        assert data["usage"]["additional_info"]["clients"] == ["web"]

    def test_health_oracle_error(self, client):
        """Oracle failures are reported in the health payload."""
        failing = Mock(spec=UsageOracle)
        failing.status = AsyncMock(side_effect=RuntimeError("backend down"))
        set_usage_oracle(failing)

        data = client.get("/health").json()

        assert data["status"] == "error"
        assert "backend down" in data["error"]

    def test_status(self, client):
        """Detailed status includes api, usage and policy sections."""
        response = client.get("/status")
        assert response.status_code == 200
        data = response.json()
        assert data["api"]["name"] == "schemacheck"
        assert data["usage"]["backend_type"] == "memory"
        assert data["policy"]["usage_window_days"] == 30

    def test_status_oracle_error(self, client):
        """Oracle failures on /status are HTTP 500."""
        failing = Mock(spec=UsageOracle)
        failing.status = AsyncMock(side_effect=RuntimeError("backend down"))
        set_usage_oracle(failing)

        response = client.get("/status")

        assert response.status_code == 500

    def test_oracle_not_initialized(self, client):
        """Requests fail with 500 when no oracle has been set."""
        set_usage_oracle(None)
        response = client.get("/health")
        assert response.status_code == 500


class TestCheckEndpoint:
    """Test the POST /check endpoint."""

    def test_addition_passes(self, client, make_document):
        """Adding a field passes with a NOTICE."""
        new = make_document()
        new["types"]["Query"]["fields"]["getUser"] = {"type": "User", "args": {"id": "ID!"}}

        response = client.post("/check", json={"old_schema": make_document(), "new_schema": new})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "passed"
        assert data["passed"] is True
        assert data["changes"] == [
            {
                "code": "FIELD_ADDED",
                "category": "ADDITION",
                "path": "Query.getUser",
                "description": "Field `getUser: User` was added to `Query`",
                "severity": "NOTICE",
            }
        ]
        assert data["schema_errors"] == []

    def test_removal_with_posted_usage(self, client, make_document):
        """Posted usage records are used instead of the server oracle."""
        new = make_document()
        del new["types"]["User"]["fields"]["name"]
        usage = [{"coordinate": "User.name", "last_seen": _recent().isoformat()}]

        response = client.post(
            "/check",
            json={"old_schema": make_document(), "new_schema": new, "usage": usage},
        )

        data = response.json()
        assert data["status"] == "failed"
        assert data["overall_severity"] == "FAILURE"
        assert data["usage_data_available"] is True

    def test_unused_removal_with_server_oracle(self, client, oracle, make_document):
        """The injected oracle answers when no usage is posted."""
        oracle.add_records([UsageRecord(coordinate="Query.user", last_seen=_recent())])
        new = make_document()
        del new["types"]["User"]["fields"]["name"]

        data = client.post(
            "/check", json={"old_schema": make_document(), "new_schema": new}
        ).json()

        assert data["status"] == "passed"
        assert data["changes"][0]["severity"] == "NOTICE"

    def test_warning_escalation(self, client, make_document):
        """Warnings without usage data fail under the default policy."""
        new = make_document()
        new["types"]["User"]["fields"]["name"] = "String!"

        data = client.post(
            "/check", json={"old_schema": make_document(), "new_schema": new}
        ).json()

        assert data["passed"] is True
        assert data["status"] == "failed"
        assert data["warnings_escalated"] is True

    def test_deprecation_with_loaded_oracle(self, client, oracle, make_document):
        """Warnings are not escalated when the oracle holds data, queried or not."""
        oracle.add_records([UsageRecord(coordinate="Query.user", last_seen=_recent())])
        new = make_document()
        new["types"]["User"]["fields"]["name"] = {"type": "String", "deprecated": True}

        data = client.post(
            "/check", json={"old_schema": make_document(), "new_schema": new}
        ).json()

        assert data["changes"][0]["code"] == "FIELD_DEPRECATION_ADDED"
        assert data["usage_data_available"] is False
        assert data["warnings_escalated"] is False
        assert data["status"] == "passed"

    def test_strict_request(self, client, oracle, make_document):
        """Strict requests fail warnings even with usage data."""
        oracle.add_records([UsageRecord(coordinate="Query.user", last_seen=_recent())])
        new = make_document()
        new["types"]["Query"]["fields"]["user"]["args"]["tenant"] = "String!"

        lenient = client.post(
            "/check", json={"old_schema": make_document(), "new_schema": new}
        ).json()
        strict = client.post(
            "/check",
            json={"old_schema": make_document(), "new_schema": new, "strict": True},
        ).json()

        assert lenient["status"] == "passed"
        assert strict["status"] == "failed"

    def test_invalid_schema(self, client, make_document):
        """An invalid schema is a failing result, not an HTTP error."""
        new = make_document()
        new["types"]["User"]["fields"]["team"] = "Team"

        response = client.post("/check", json={"old_schema": make_document(), "new_schema": new})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["changes"][0]["code"] == "INVALID_SCHEMA"
        assert data["schema_errors"]

    def test_bad_request(self, client, make_document):
        """Malformed requests are rejected by validation."""
        response = client.post(
            "/check",
            json={"old_schema": make_document(), "new_schema": make_document(), "window_days": 0},
        )
        assert response.status_code == 422


class TestLifespan:
    """Test oracle creation at startup."""

    def test_file_oracle_from_environment(self, tmp_path, monkeypatch):
        """The lifespan builds the configured oracle and clears it on shutdown."""
        usage_path = tmp_path / "usage.json"
        usage_path.write_text(
            json.dumps([{"coordinate": "Query.user", "last_seen": _recent().isoformat()}])
        )
        monkeypatch.setenv("SCHEMACHECK_USAGE_BACKEND_TYPE", "file")
        monkeypatch.setenv("SCHEMACHECK_USAGE_PATH", str(usage_path))
        get_settings.cache_clear()
        set_usage_oracle(None)

        try:
            with TestClient(create_app()) as client:
                data = client.get("/health").json()
                assert data["status"] == "healthy"
                assert data["usage"]["backend_type"] == "file"
                assert data["usage"]["source"] == str(usage_path)
            assert get_usage_oracle_unsafe() is None
        finally:
            get_settings.cache_clear()
