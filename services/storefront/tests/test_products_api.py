"""
Tests for the product endpoints.
"""
import pytest

from storefront.models import CartItem, Notification, Product, Reservation
from storefront.models.product import MAX_STOCK


@pytest.fixture
def catalog(make_product):
    return [
        make_product(name="Savon noir", price=3500, stock=0, category="Corps"),
        make_product(name="Sérum", price=12500, stock=2, category="Visage"),
        make_product(name="Crème", price=8000, stock=10, category="Visage"),
        make_product(name="Ancien parfum", price=20000, stock=5, status="archived"),
    ]


class TestBrowse:

    def test_only_active_products(self, client, catalog):
        response = client.get("/api/products")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert "Ancien parfum" not in [p["name"] for p in body["products"]]

    def test_category_filter(self, client, catalog):
        body = client.get("/api/products", params={"category": "Visage"}).json()

        assert {p["name"] for p in body["products"]} == {"Sérum", "Crème"}

    def test_sort_by_price(self, client, catalog):
        ascending = client.get("/api/products", params={"sort_by": "price_asc"}).json()
        descending = client.get("/api/products", params={"sort_by": "price_desc"}).json()

        assert [p["price"] for p in ascending["products"]] == [3500, 8000, 12500]
        assert [p["price"] for p in descending["products"]] == [12500, 8000, 3500]

    def test_sort_by_availability(self, client, catalog):
        body = client.get("/api/products", params={"sort_by": "availability"}).json()

        assert [p["name"] for p in body["products"]] == ["Crème", "Sérum", "Savon noir"]
        assert body["products"][-1]["in_stock"] is False

    def test_unknown_sort(self, client, catalog):
        assert client.get("/api/products", params={"sort_by": "random"}).status_code == 400

    def test_pagination(self, client, catalog):
        body = client.get("/api/products", params={"page": 1, "page_size": 2}).json()

        assert len(body["products"]) == 2
        assert body["has_next"] is True


class TestGetProduct:

    def test_get(self, client, in_stock_product):
        response = client.get(f"/api/products/{in_stock_product.id}")

        assert response.status_code == 200
        assert response.json()["image_urls"] == ["https://cdn.example.com/serum.jpg"]

    def test_missing(self, client):
        assert client.get("/api/products/999").status_code == 404

    def test_deleted_only_visible_to_admin(self, client, make_product, admin_headers):
        product = make_product(status="deleted")

        assert client.get(f"/api/products/{product.id}").status_code == 404
        assert client.get(f"/api/products/{product.id}", headers=admin_headers).status_code == 200


class TestAdminManagement:

    def test_create_requires_admin(self, client, customer_headers):
        response = client.post("/api/products", json={"name": "Khôl", "price": 2500}, headers=customer_headers)

        assert response.status_code == 403

    def test_create_clamps_negative_stock(self, client, admin_headers):
        response = client.post(
            "/api/products",
            json={"name": "Khôl", "price": 2500, "stock": -4, "category": "Maquillage"},
            headers=admin_headers
        )

        assert response.status_code == 201
        body = response.json()
        assert body["stock"] == 0
        assert body["in_stock"] is False
        assert body["status"] == "active"

    def test_create_rejects_non_positive_price(self, client, admin_headers):
        response = client.post("/api/products", json={"name": "Khôl", "price": 0}, headers=admin_headers)

        assert response.status_code == 422

    def test_list_all_includes_every_status(self, client, catalog, make_product, admin_headers):
        make_product(name="Supprimé", status="deleted")

        response = client.get("/api/products/all", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()) == 5

    def test_partial_update(self, client, in_stock_product, admin_headers):
        response = client.put(
            f"/api/products/{in_stock_product.id}",
            json={"price": 13000},
            headers=admin_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["price"] == 13000
        assert body["name"] == "Sérum vitamine C"

    def test_update_null_name_rejected(self, client, in_stock_product, admin_headers):
        response = client.put(
            f"/api/products/{in_stock_product.id}",
            json={"name": None},
            headers=admin_headers
        )

        assert response.status_code == 400

    def test_update_stock_goes_through_ledger(self, client, db, out_of_stock_product, customer, admin_headers):
        db.add(Reservation(product_id=out_of_stock_product.id, user_id=customer.id))
        db.commit()

        response = client.put(
            f"/api/products/{out_of_stock_product.id}",
            json={"stock": 3},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["stock"] == 3
        assert db.query(Notification).filter(Notification.user_id == customer.id).count() == 1

    def test_archive_and_reactivate(self, client, in_stock_product, admin_headers):
        archived = client.put(
            f"/api/products/{in_stock_product.id}/status",
            json={"status": "archived"},
            headers=admin_headers
        )
        assert archived.json()["status"] == "archived"
        assert client.get("/api/products").json()["total"] == 0

        active = client.put(
            f"/api/products/{in_stock_product.id}/status",
            json={"status": "active"},
            headers=admin_headers
        )
        assert active.json()["status"] == "active"

    def test_soft_delete_and_restore(self, client, in_stock_product, admin_headers):
        assert client.delete(f"/api/products/{in_stock_product.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/products/{in_stock_product.id}").status_code == 404

        restored = client.put(f"/api/products/{in_stock_product.id}/restore", headers=admin_headers)

        assert restored.status_code == 200
        assert restored.json()["status"] == "active"
        assert restored.json()["deleted_at"] is None

    def test_permanent_delete(self, client, db, out_of_stock_product, customer, admin_headers):
        db.add(Reservation(product_id=out_of_stock_product.id, user_id=customer.id))
        db.commit()

        response = client.delete(f"/api/products/{out_of_stock_product.id}/permanent", headers=admin_headers)

        assert response.status_code == 200
        db.expire_all()
        assert db.get(Product, out_of_stock_product.id) is None
        assert db.query(Reservation).count() == 0
        assert db.query(CartItem).count() == 0


class TestSetStockEndpoint:

    def test_replenishment_reports_notified_users(self, client, db, out_of_stock_product, customer, other_customer, admin_headers):
        db.add_all([
            Reservation(product_id=out_of_stock_product.id, user_id=customer.id),
            Reservation(product_id=out_of_stock_product.id, user_id=other_customer.id),
        ])
        db.commit()

        response = client.put(
            f"/api/products/{out_of_stock_product.id}/stock",
            json={"stock": 6},
            headers=admin_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["previous_stock"] == 0
        assert body["replenished"] is True
        assert sorted(body["notified_user_ids"]) == sorted([customer.id, other_customer.id])
        assert body["product"]["stock"] == 6
        assert db.query(Reservation).count() == 0

    def test_negative_stock_clamped(self, client, in_stock_product, admin_headers):
        response = client.put(
            f"/api/products/{in_stock_product.id}/stock",
            json={"stock": -2},
            headers=admin_headers
        )

        assert response.json()["product"]["stock"] == 0
        assert response.json()["replenished"] is False

    def test_unknown_product(self, client, admin_headers):
        response = client.put("/api/products/999/stock", json={"stock": 3}, headers=admin_headers)

        assert response.status_code == 404

    def test_requires_admin(self, client, in_stock_product, customer_headers):
        response = client.put(
            f"/api/products/{in_stock_product.id}/stock",
            json={"stock": 3},
            headers=customer_headers
        )

        assert response.status_code == 403

    def test_stock_beyond_column_range_is_rejected(self, client, in_stock_product, admin_headers):
        too_many = MAX_STOCK + 1

        set_stock = client.put(
            f"/api/products/{in_stock_product.id}/stock",
            json={"stock": 10**20},
            headers=admin_headers
        )
        update = client.put(
            f"/api/products/{in_stock_product.id}",
            json={"stock": too_many},
            headers=admin_headers
        )
        create = client.post(
            "/api/products",
            json={"name": "Khôl", "price": 2500, "stock": too_many},
            headers=admin_headers
        )

        assert set_stock.status_code == 422
        assert update.status_code == 422
        assert create.status_code == 422
        assert client.get(f"/api/products/{in_stock_product.id}").json()["stock"] == 4

    def test_column_maximum_is_accepted(self, client, in_stock_product, admin_headers):
        response = client.put(
            f"/api/products/{in_stock_product.id}/stock",
            json={"stock": MAX_STOCK},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["product"]["stock"] == MAX_STOCK
