"""
Tests for the metrics API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from propmetrics.main import app
from propmetrics.api.dependencies import get_orchestrator
from propmetrics.db.models import Property, PropertyMetricSnapshot
from propmetrics.errors import StorageError
from propmetrics.db.repository import SqlAlchemyPropertyRepository
from propmetrics.services.recompute import MetricsOrchestrator

# Database setup is handled by conftest.py


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def read_only_client(db_session, settings):
    """Client whose repository cannot write."""

    class ReadOnlyRepository(SqlAlchemyPropertyRepository):
        async def save_recompute(self, property_id, update, snapshot):
            raise StorageError("read-only replica")

    app.dependency_overrides[get_orchestrator] = lambda: MetricsOrchestrator(
        ReadOnlyRepository(db_session), settings
    )
    yield TestClient(app)
    del app.dependency_overrides[get_orchestrator]


@pytest.fixture
def unavailable_client(db_session, settings):
    """Client whose repository cannot read."""

    class UnavailableRepository(SqlAlchemyPropertyRepository):
        async def get_property_sources(self, property_id):
            raise StorageError("database unavailable")

        async def list_snapshots(self, property_id, since=None):
            raise StorageError("database unavailable")

    app.dependency_overrides[get_orchestrator] = lambda: MetricsOrchestrator(
        UnavailableRepository(db_session), settings
    )
    yield TestClient(app)
    del app.dependency_overrides[get_orchestrator]


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "0.1.0"}


class TestRecomputeProperty:
    def test_recompute(self, client, fourplex):
        response = client.post(f"/api/properties/{fourplex.id}/recompute")

        assert response.status_code == 200
        data = response.json()
        assert data["property_id"] == fourplex.id
        assert data["metrics"]["annual_gross_rent"] == pytest.approx(52800)
        assert data["metrics"]["monthly_debt_service"] == pytest.approx(758.48, abs=0.01)
        assert data["metrics"]["expense_breakdown"]["taxes"] == pytest.approx(5000)

    def test_recompute_persists(self, client, fourplex, db_session):
        client.post(f"/api/properties/{fourplex.id}/recompute")

        db_session.expire_all()
        assert db_session.get(Property, fourplex.id).initial_capital == pytest.approx(33000)
        assert db_session.query(PropertyMetricSnapshot).count() == 1

    def test_recompute_twice_same_result(self, client, fourplex):
        first = client.post(f"/api/properties/{fourplex.id}/recompute").json()
        second = client.post(f"/api/properties/{fourplex.id}/recompute").json()
        assert first == second

    def test_recompute_not_found(self, client):
        response = client.post("/api/properties/nonexistent/recompute")
        assert response.status_code == 404
        assert response.json()["detail"] == "Property not found"

    def test_recompute_persistence_failure(self, read_only_client, fourplex):
        response = read_only_client.post(f"/api/properties/{fourplex.id}/recompute")

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert "read-only replica" in detail["message"]
        assert detail["metrics"]["effective_gross_income"] == pytest.approx(50160)

    def test_recompute_read_failure(self, unavailable_client, fourplex):
        response = unavailable_client.post(f"/api/properties/{fourplex.id}/recompute")

        assert response.status_code == 503
        assert "database unavailable" in response.json()["detail"]["message"]


class TestRecomputeAll:
    def test_recompute_all(self, client, fourplex, db_session):
        db_session.add(Property(name="Vacant lot", purchase_price=50000))
        db_session.commit()

        response = client.post("/api/properties/recompute")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert fourplex.id in data["succeeded"]
        assert data["errors"] == []

    def test_recompute_all_reports_failures(self, read_only_client, fourplex):
        response = read_only_client.post("/api/properties/recompute")

        data = response.json()
        assert data["succeeded"] == []
        assert data["errors"][0]["property_id"] == fourplex.id
        assert data["errors"][0]["error_type"] == "PersistenceError"


class TestEntityRollup:
    def test_rollup(self, client, fourplex):
        response = client.get("/api/entities/Elm Holdings/rollup")

        assert response.status_code == 200
        data = response.json()
        assert data["entity_name"] == "Elm Holdings"
        assert data["property_count"] == 1
        assert data["total_units"] == 4
        assert data["property_ids"] == [fourplex.id]
        assert data["total_invested_capital"] == pytest.approx(33000)

    def test_unknown_entity_returns_zeros(self, client):
        response = client.get("/api/entities/Nobody/rollup")

        assert response.status_code == 200
        data = response.json()
        assert data["property_count"] == 0
        assert data["weighted_cap_rate"] == 0


class TestHistory:
    def test_history_after_recompute(self, client, fourplex):
        client.post(f"/api/properties/{fourplex.id}/recompute")

        response = client.get(f"/api/properties/{fourplex.id}/history?months=6")

        assert response.status_code == 200
        data = response.json()
        assert data["months"] == 6
        assert len(data["snapshots"]) == 1
        assert data["snapshots"][0]["metrics"]["annual_gross_rent"] == pytest.approx(52800)

    def test_history_not_found(self, client):
        response = client.get("/api/properties/missing/history")
        assert response.status_code == 404

    def test_history_months_validated(self, client, fourplex):
        response = client.get(f"/api/properties/{fourplex.id}/history?months=0")
        assert response.status_code == 422

    def test_history_read_failure(self, unavailable_client, fourplex):
        response = unavailable_client.get(f"/api/properties/{fourplex.id}/history")
        assert response.status_code == 503
