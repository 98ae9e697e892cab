"""
Tests for application wiring: health, error mapping, OpenAPI.
"""
from sqlalchemy.exc import OperationalError

from storefront.config import settings
from storefront.db.database import get_db
from storefront.db.locks import product_locks
from storefront.exceptions import StorageFailureError
from storefront.main import app
from storefront.services.inventory_service import InventoryService


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": "ok",
        "events_enabled": False,
    }


def test_health_degraded_when_database_is_down(client, session_factory):
    def broken_db():
        session = session_factory()

        def connection_refused(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        session.execute = connection_refused
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = broken_db

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"


def test_openapi_has_bearer_scheme(client):
    schema = client.get("/openapi.json").json()

    assert schema["components"]["securitySchemes"]["BearerAuth"]["scheme"] == "bearer"


def test_lock_timeout_maps_to_conflict(client, in_stock_product, admin_headers, monkeypatch):
    monkeypatch.setattr(settings, "stock_lock_timeout_seconds", 0.05)

    with product_locks.hold(in_stock_product.id, timeout=1):
        response = client.put(
            f"/api/products/{in_stock_product.id}/stock",
            json={"stock": 9},
            headers=admin_headers
        )

    assert response.status_code == 409
    assert response.json()["code"] == "CONCURRENT_MODIFICATION"


def test_storage_failure_maps_to_503(client, in_stock_product, admin_headers, monkeypatch):
    def failing_write(self, product_id, compute):
        raise StorageFailureError("Failed to update stock", product_id=product_id)

    monkeypatch.setattr(InventoryService, "_write_stock", failing_write)

    response = client.put(
        f"/api/products/{in_stock_product.id}/stock",
        json={"stock": 9},
        headers=admin_headers
    )

    assert response.status_code == 503
    assert response.json()["code"] == "STORAGE_FAILURE"


def test_validation_errors_are_422(client, admin_headers):
    response = client.post("/api/products", json={"price": "cheap"}, headers=admin_headers)

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)
