"""Tests for the import trigger and health endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.database import get_importer
from api.main import create_app
from scripts.legislator_importer import LegislatorImporter, SessionRange
from scripts.legislator_importer.schema import ImportResult, ImportStatus


@pytest.fixture
def client_for(settings):
    """Build a TestClient whose importer dependency is replaced."""

    def factory(importer) -> TestClient:
        app = create_app(settings)
        app.dependency_overrides[get_importer] = lambda: importer
        return TestClient(app)

    return factory


class TestImportLegislators:
    """Tests for /import-legislators."""

    def test_default_range(self, client_for, stub_importer_factory):
        """Without parameters the range is 119 down to 100."""
        importer = stub_importer_factory(result=ImportResult(status=ImportStatus.SUCCESS))

        response = client_for(importer).get("/import-legislators")

        assert response.status_code == 200
        assert importer.calls == [SessionRange(119, 100)]

    def test_query_parameters(self, client_for, stub_importer_factory):
        """startCongress and endCongress select the range."""
        importer = stub_importer_factory(
            result=ImportResult(status=ImportStatus.SUCCESS, imported=8)
        )

        response = client_for(importer).get(
            "/import-legislators", params={"startCongress": "101", "endCongress": "100"}
        )

        assert response.json() == {"status": "success", "imported": 8, "updated": 0}
        assert importer.calls == [SessionRange(101, 100)]

    def test_post_is_accepted(self, client_for, stub_importer_factory):
        """POST triggers the same import."""
        importer = stub_importer_factory(result=ImportResult(status=ImportStatus.SUCCESS))

        response = client_for(importer).post("/import-legislators?startCongress=118")

        assert response.status_code == 200
        assert importer.calls == [SessionRange(118, 100)]

    def test_locked_is_200(self, client_for, stub_importer_factory):
        """A locked run is a normal response."""
        importer = stub_importer_factory(result=ImportResult.locked())

        response = client_for(importer).get("/import-legislators")

        assert response.status_code == 200
        assert response.json() == {"status": "locked"}

    def test_recovered_error_is_200(self, client_for, stub_importer_factory):
        """A run that ended in an error status is still a 200."""
        importer = stub_importer_factory(result=ImportResult.failed("Failed to fetch"))

        response = client_for(importer).get("/import-legislators")

        assert response.status_code == 200
        assert response.json() == {"status": "error", "message": "Failed to fetch"}

    def test_unhandled_exception_is_500(self, client_for, stub_importer_factory):
        """Exceptions escaping the run return diagnostics with a 500."""
        importer = stub_importer_factory(error=RuntimeError("pool exhausted"))

        response = client_for(importer).get("/import-legislators")

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "error"
        assert body["message"] == "pool exhausted"
        assert body["type"] == "RuntimeError"
        assert "timestamp" in body

    def test_invalid_congress_is_500(self, client_for, stub_importer_factory):
        """Non-numeric parameters surface as a ValueError diagnostic."""
        importer = stub_importer_factory(result=ImportResult.locked())

        response = client_for(importer).get("/import-legislators?startCongress=abc")

        assert response.status_code == 500
        assert response.json()["type"] == "ValueError"
        assert importer.calls == []

    def test_empty_parameters_use_defaults(self, client_for, stub_importer_factory):
        """Blank startCongress and endCongress fall back to 119 and 100."""
        importer = stub_importer_factory(result=ImportResult(status=ImportStatus.SUCCESS))

        response = client_for(importer).get("/import-legislators?startCongress=&endCongress=")

        assert response.status_code == 200
        assert importer.calls == [SessionRange(119, 100)]

    def test_responses_carry_cors_headers(self, client_for, stub_importer_factory):
        """Every response allows any origin."""
        importer = stub_importer_factory(result=ImportResult.locked())

        response = client_for(importer).get("/import-legislators")

        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"


class TestPreflight:
    """Tests for OPTIONS pre-flight."""

    def test_options_returns_empty_200(self, client_for, stub_importer_factory):
        """OPTIONS answers with an empty body and permissive headers."""
        importer = stub_importer_factory(result=ImportResult.locked())

        response = client_for(importer).options("/import-legislators")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert (
            response.headers["access-control-allow-headers"]
            == "authorization, x-client-info, apikey, content-type"
        )
        assert importer.calls == []

    def test_browser_preflight_gets_fixed_headers(self, client_for, stub_importer_factory):
        """A preflight with Origin and request headers gets the same empty 200."""
        importer = stub_importer_factory(result=ImportResult.locked())

        response = client_for(importer).options(
            "/import-legislators",
            headers={
                "Origin": "https://app.example.org",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, apikey, x-request-id",
            },
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert (
            response.headers["access-control-allow-headers"]
            == "authorization, x-client-info, apikey, content-type"
        )
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert importer.calls == []


class TestFullStack:
    """Endpoint wired to a real importer over fake upstream and store."""

    def test_end_to_end(self, client_for, settings, fake_api_factory, make_members, store):
        """The HTTP response matches the pipeline result."""
        api = fake_api_factory({101: make_members(5, "A"), 100: make_members(3, "B")})
        importer = LegislatorImporter.from_settings(settings, store, api.client())

        response = client_for(importer).get(
            "/import-legislators", params={"startCongress": "101", "endCongress": "100"}
        )

        assert response.json() == {"status": "success", "imported": 8, "updated": 0}
        assert api.requested() == [(101, 0), (100, 0)]
        assert store.locks == {}


class TestHealth:
    """Tests for /health."""

    def test_healthy(self, client_for, stub_importer_factory):
        """A responsive database reports healthy."""
        response = client_for(stub_importer_factory()).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_unhealthy(self, client_for, stub_importer_factory):
        """A failing ping reports 503."""
        importer = stub_importer_factory()

        async def broken_ping():
            raise OSError("connection refused")

        importer.store.ping = broken_ping

        response = client_for(importer).get("/health")

        assert response.status_code == 503
        assert response.json() == {"status": "unhealthy"}
