"""
Tests for the cart, WhatsApp checkout and order history.
"""
from urllib.parse import parse_qs, urlparse

import pytest

from storefront.config import settings
from storefront.models import CartItem
from storefront.schemas.order import CustomerInfo
from storefront.services.order_service import build_order_message, build_whatsapp_url, format_amount


CUSTOMER = {
    "first_name": "Awa",
    "last_name": "Diop",
    "phone": "+221 77 123 45 67",
    "address": "Sacré-Coeur 3, Dakar",
}


def decoded_message(whatsapp_url: str) -> str:
    return parse_qs(urlparse(whatsapp_url).query)["text"][0]


class TestCart:

    def test_empty_cart(self, client, customer_headers):
        assert client.get("/api/cart", headers=customer_headers).json() == {
            "items": [], "item_count": 0, "total": 0
        }

    def test_add_and_increment(self, client, in_stock_product, customer_headers):
        client.post("/api/cart/items", json={"product_id": in_stock_product.id}, headers=customer_headers)
        cart = client.post(
            "/api/cart/items",
            json={"product_id": in_stock_product.id, "quantity": 2},
            headers=customer_headers
        ).json()

        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 3
        assert cart["item_count"] == 3
        assert cart["total"] == 3 * 12500

    def test_out_of_stock_cannot_be_added(self, client, out_of_stock_product, customer_headers):
        response = client.post(
            "/api/cart/items",
            json={"product_id": out_of_stock_product.id},
            headers=customer_headers
        )

        assert response.status_code == 409

    def test_unknown_product(self, client, customer_headers):
        response = client.post("/api/cart/items", json={"product_id": 999}, headers=customer_headers)

        assert response.status_code == 404

    def test_update_quantity_and_remove_on_zero(self, client, in_stock_product, customer_headers):
        client.post("/api/cart/items", json={"product_id": in_stock_product.id}, headers=customer_headers)

        updated = client.put(
            f"/api/cart/items/{in_stock_product.id}", json={"quantity": 5}, headers=customer_headers
        ).json()
        assert updated["item_count"] == 5

        removed = client.put(
            f"/api/cart/items/{in_stock_product.id}", json={"quantity": 0}, headers=customer_headers
        ).json()
        assert removed["items"] == []

    def test_update_missing_line(self, client, in_stock_product, customer_headers):
        response = client.put(
            f"/api/cart/items/{in_stock_product.id}", json={"quantity": 2}, headers=customer_headers
        )

        assert response.status_code == 404

    def test_carts_are_per_user(self, client, in_stock_product, customer_headers, other_customer_headers):
        client.post("/api/cart/items", json={"product_id": in_stock_product.id}, headers=customer_headers)

        assert client.get("/api/cart", headers=other_customer_headers).json()["items"] == []

    def test_quantity_beyond_column_range(self, client, in_stock_product, customer_headers):
        response = client.post(
            "/api/cart/items",
            json={"product_id": in_stock_product.id, "quantity": 10**20},
            headers=customer_headers
        )

        assert response.status_code == 422

    def test_clear(self, client, in_stock_product, make_product, customer_headers):
        other = make_product(name="Crème", price=8000, stock=3)
        client.post("/api/cart/items", json={"product_id": in_stock_product.id}, headers=customer_headers)
        client.post("/api/cart/items", json={"product_id": other.id}, headers=customer_headers)

        client.delete(f"/api/cart/items/{other.id}", headers=customer_headers)
        assert client.get("/api/cart", headers=customer_headers).json()["item_count"] == 1

        assert client.delete("/api/cart", headers=customer_headers).json()["items"] == []


class TestOrderMessage:

    def test_format_amount(self):
        assert format_amount(12500) == f"12\u202f500 {settings.currency_label}"
        assert format_amount(500) == f"500 {settings.currency_label}"

    def test_message_layout(self):
        customer = CustomerInfo(**CUSTOMER)
        lines = [{
            "product_id": 3,
            "name": "Sérum",
            "quantity": 2,
            "line_total": 25000,
            "image_url": "https://cdn.example.com/serum.jpg",
        }]

        message = build_order_message(customer, lines, 25000)

        assert message.startswith("*Nouvelle Commande de Belleza*")
        assert "*Client:* Awa Diop" in message
        assert "*Téléphone:* +221 77 123 45 67" in message
        assert "*Adresse:* Sacré-Coeur 3, Dakar" in message
        assert "*Sérum* (x2)" in message
        assert f"- Lien du produit: {settings.storefront_base_url.rstrip('/')}/product/3" in message
        assert "- Lien de l'image: https://cdn.example.com/serum.jpg" in message
        assert f"*TOTAL: {format_amount(25000)}*" in message

    def test_blank_address_is_omitted(self):
        customer = CustomerInfo(**{**CUSTOMER, "address": "   "})
        lines = [{"product_id": 1, "name": "Savon", "quantity": 1, "line_total": 3500, "image_url": None}]

        message = build_order_message(customer, lines, 3500)

        assert "Adresse" not in message
        assert "Lien de l'image" not in message

    def test_whatsapp_url(self):
        url = build_whatsapp_url("Bonjour & merci")

        assert url.startswith(f"https://wa.me/{settings.merchant_whatsapp_number}?text=")
        assert "Bonjour%20%26%20merci" in url


class TestCheckout:

    def test_checkout_cart(self, client, db, customer, in_stock_product, customer_headers):
        client.post(
            "/api/cart/items",
            json={"product_id": in_stock_product.id, "quantity": 2},
            headers=customer_headers
        )

        response = client.post("/api/orders/checkout", json={"customer": CUSTOMER}, headers=customer_headers)

        assert response.status_code == 201
        order = response.json()
        assert order["id"].startswith("order-")
        assert order["user_id"] == customer.id
        assert order["total"] == 25000
        assert order["currency"] == settings.currency_code
        assert order["items"][0]["quantity"] == 2
        assert "*Sérum vitamine C* (x2)" in decoded_message(order["whatsapp_url"])
        assert db.query(CartItem).filter(CartItem.user_id == customer.id).count() == 0

    def test_guest_checkout_with_items(self, client, in_stock_product):
        response = client.post("/api/orders/checkout", json={
            "customer": CUSTOMER,
            "items": [{"product_id": in_stock_product.id, "quantity": 1}],
        })

        assert response.status_code == 201
        assert response.json()["user_id"] is None

    def test_guest_without_items(self, client):
        response = client.post("/api/orders/checkout", json={"customer": CUSTOMER})

        assert response.status_code == 400

    def test_out_of_stock_item(self, client, out_of_stock_product):
        response = client.post("/api/orders/checkout", json={
            "customer": CUSTOMER,
            "items": [{"product_id": out_of_stock_product.id, "quantity": 1}],
        })

        assert response.status_code == 409

    def test_blank_customer_name(self, client, in_stock_product):
        response = client.post("/api/orders/checkout", json={
            "customer": {**CUSTOMER, "first_name": "  "},
            "items": [{"product_id": in_stock_product.id, "quantity": 1}],
        })

        assert response.status_code == 422

    def test_checkout_does_not_touch_stock(self, client, in_stock_product):
        client.post("/api/orders/checkout", json={
            "customer": CUSTOMER,
            "items": [{"product_id": in_stock_product.id, "quantity": 2}],
        })

        product = client.get(f"/api/products/{in_stock_product.id}").json()
        assert product["stock"] == 4


class TestOrderHistory:

    @pytest.fixture
    def placed_order(self, client, in_stock_product, customer_headers):
        return client.post("/api/orders/checkout", json={
            "customer": CUSTOMER,
            "items": [{"product_id": in_stock_product.id, "quantity": 1}],
        }, headers=customer_headers).json()

    def test_my_orders(self, client, placed_order, customer_headers, other_customer_headers):
        mine = client.get("/api/orders", headers=customer_headers).json()

        assert [o["id"] for o in mine] == [placed_order["id"]]
        assert client.get("/api/orders", headers=other_customer_headers).json() == []

    def test_order_detail_is_private(self, client, placed_order, customer_headers, other_customer_headers, admin_headers):
        path = f"/api/orders/{placed_order['id']}"

        assert client.get(path, headers=customer_headers).status_code == 200
        assert client.get(path, headers=other_customer_headers).status_code == 404
        assert client.get(path, headers=admin_headers).status_code == 200

    def test_all_orders_admin_only(self, client, placed_order, customer_headers, admin_headers):
        assert client.get("/api/orders/all", headers=customer_headers).status_code == 403
        assert len(client.get("/api/orders/all", headers=admin_headers).json()) == 1
