from decimal import Decimal
from urllib.parse import unquote

import pytest

from venefoods.core.config import get_settings
from venefoods.models.setting import SiteSetting
from venefoods.routers import orders as orders_router
from venefoods.services import product_service as product_module

from conftest import FIXED_NOW, make_token

CHECKOUT = {
    "customer_name": "María Pérez",
    "customer_phone": "(54) 99329-4396",
    "street": "Rua Sinimbu",
    "number": "123",
    "neighborhood": "Centro",
    "complement": "apto 2",
    "reference": "",
    "shipping_zone": "centro",
    "payment_method": "cash",
}


@pytest.fixture(autouse=True)
def fixed_clock(monkeypatch):
    monkeypatch.setattr(orders_router.service, "clock", lambda: FIXED_NOW)


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


class TestCatalog:
    def test_lists_active_products_only(self, client, api, make_product):
        make_product(name="Harina PAN", stock=4)
        make_product(name="Oculto", is_active=False)
        make_product(name="Agotado", stock=0)

        data = client.get(f"{api}/products").json()

        assert [p["name"] for p in data] == ["Agotado", "Harina PAN"]
        assert {p["name"]: p["in_stock"] for p in data} == {"Agotado": False, "Harina PAN": True}

    def test_category_filter(self, client, api, make_product):
        make_product(name="Harina PAN", category="despensa")
        make_product(name="Malta", category="bebidas")

        data = client.get(f"{api}/products", params={"category": "bebidas"}).json()

        assert [p["name"] for p in data] == ["Malta"]

    def test_inactive_product_is_not_found(self, client, api, make_product):
        product = make_product(is_active=False)

        assert client.get(f"{api}/products/{product.id}").status_code == 404

    def test_admin_create_normalizes_price(self, client, api, admin_headers):
        resp = client.post(
            f"{api}/products",
            json={"name": "Queso llanero", "price": "18,50", "stock": "7", "category": "lacteos"},
            headers=admin_headers,
        )

        assert resp.status_code == 201
        assert Decimal(resp.json()["price"]) == Decimal("18.50")
        assert resp.json()["stock"] == 7

    def test_admin_update_and_delete(self, client, api, admin_headers, make_product):
        product = make_product()

        resp = client.patch(
            f"{api}/products/{product.id}",
            json={"stock": 0, "badge_text": "AGOTADO"},
            headers=admin_headers,
        )
        assert resp.json()["in_stock"] is False
        assert resp.json()["badge_text"] == "AGOTADO"

        assert client.delete(f"{api}/products/{product.id}", headers=admin_headers).status_code == 204
        assert client.get(f"{api}/products/{product.id}").status_code == 404

    def test_image_upload(self, client, api, admin_headers, make_product, monkeypatch):
        product = make_product()
        monkeypatch.setattr(
            product_module,
            "upload_to_storage",
            lambda path, data, content_type: f"https://cdn.example/{path}",
        )

        resp = client.post(
            f"{api}/products/{product.id}/image",
            files={"file": ("arepa.webp", b"RIFF0000WEBP", "image/webp")},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        image = resp.json()["image"]
        assert image.startswith(f"https://cdn.example/products/{product.id}/")
        assert image.endswith(".webp")


class TestCart:
    def test_cart_id_header_required(self, client, api):
        resp = client.get(f"{api}/cart", headers={"X-Cart-Id": ""})

        assert resp.status_code == 422

    def test_add_increment_decrement_delete(self, client, api, make_product):
        product = make_product(price="15.00", stock=10)

        resp = client.post(f"{api}/cart/items", json={"product_id": str(product.id)})
        assert resp.json()["notice"] == {"level": "success", "message": "Added Harina PAN to cart"}

        client.post(f"{api}/cart/items", json={"product_id": str(product.id)})
        cart = client.get(f"{api}/cart").json()
        assert cart["total_quantity"] == 2
        assert Decimal(cart["subtotal"]) == Decimal("30.00")

        cart = client.post(f"{api}/cart/items/{product.id}/decrement").json()
        assert cart["items"][0]["quantity"] == 1

        cart = client.delete(f"{api}/cart/items/{product.id}").json()
        assert cart["items"] == []
        assert cart["notice"]["message"] == "Product removed"

    def test_stock_limit_is_a_warning(self, client, api, make_product):
        product = make_product(stock=1)
        client.post(f"{api}/cart/items", json={"product_id": str(product.id)})

        resp = client.post(f"{api}/cart/items", json={"product_id": str(product.id)})

        assert resp.status_code == 200
        assert resp.json()["notice"]["level"] == "warning"
        assert resp.json()["items"][0]["quantity"] == 1

    def test_out_of_stock_blocks_first_add(self, client, api, make_product):
        product = make_product(stock=0)

        resp = client.post(f"{api}/cart/items", json={"product_id": str(product.id)})

        assert resp.json()["items"] == []
        assert resp.json()["notice"] == {"level": "warning", "message": "Out of stock"}

    def test_unknown_product(self, client, api):
        resp = client.post(
            f"{api}/cart/items",
            json={"product_id": "00000000-0000-0000-0000-000000000000"},
        )

        assert resp.status_code == 404

    def test_decrement_unknown_is_noop(self, client, api):
        resp = client.post(f"{api}/cart/items/nope/decrement")

        assert resp.status_code == 200
        assert resp.json()["items"] == []

    def test_carts_are_per_browser(self, client, api, make_product):
        product = make_product()
        client.post(f"{api}/cart/items", json={"product_id": str(product.id)})

        other = client.get(f"{api}/cart", headers={"X-Cart-Id": "another-browser"}).json()

        assert other["items"] == []

    def test_coupon_apply_and_reject(self, client, api, make_coupon):
        make_coupon(code="DIEZ")

        resp = client.post(f"{api}/cart/coupon", json={"code": " diez "})
        assert resp.json()["coupon"]["code"] == "DIEZ"

        bad = client.post(f"{api}/cart/coupon", json={"code": "NOPE"})
        assert bad.status_code == 400
        assert bad.json()["detail"] == "Invalid or inactive coupon"

        # Previous coupon untouched
        assert client.get(f"{api}/cart").json()["coupon"]["code"] == "DIEZ"

        assert client.delete(f"{api}/cart/coupon").json()["coupon"] is None

    def test_clear_drops_coupon(self, client, api, make_coupon, make_product):
        make_coupon(code="DIEZ")
        product = make_product()
        client.post(f"{api}/cart/items", json={"product_id": str(product.id)})
        client.post(f"{api}/cart/coupon", json={"code": "DIEZ"})

        cart = client.delete(f"{api}/cart").json()

        assert cart["items"] == []
        assert cart["coupon"] is None


class TestCheckout:
    @pytest.fixture
    def filled_cart(self, client, api, session, make_product):
        session.add(SiteSetting(key="shipping_min_value", value="100"))
        session.add(SiteSetting(key="shipping_zones", value='[{"name": "Centro", "price": 10}]'))
        session.commit()
        arepa = make_product(name="Harina PAN", price="15.00", stock=10)
        queso = make_product(name="Queso llanero", price="50.00", stock=3)
        for product in (arepa, arepa, queso):
            client.post(f"{api}/cart/items", json={"product_id": str(product.id)})
        return arepa, queso

    def test_quote(self, client, api, filled_cart):
        quote = client.post(f"{api}/orders/quote", json={"shipping_zone": "Centro"}).json()

        assert Decimal(quote["subtotal"]) == Decimal("80.00")
        assert Decimal(quote["shipping_cost"]) == Decimal("10.00")
        assert Decimal(quote["total"]) == Decimal("90.00")

    def test_checkout(self, client, api, filled_cart):
        resp = client.post(f"{api}/orders/checkout", json=CHECKOUT)

        assert resp.status_code == 201
        body = resp.json()
        assert body["order"]["id"] == "VF-250307-0001"
        assert Decimal(body["order"]["total"]) == Decimal("90.00")
        assert body["order"]["address"] == "Rua Sinimbu, 123 - Centro (apto 2)"
        assert body["order"]["shipping_zone"] == "Centro"
        assert body["message"] == "Pedido VF-250307-0001 registrado"
        assert "*Pago:* EFECTIVO" in unquote(body["whatsapp_url"])

        assert client.get(f"{api}/cart").json()["items"] == []

    def test_missing_zone(self, client, api, filled_cart):
        payload = {**CHECKOUT, "shipping_zone": None}

        resp = client.post(f"{api}/orders/checkout", json=payload)

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Please select a shipping zone"
        assert len(client.get(f"{api}/cart").json()["items"]) == 2

    def test_invalid_payment_method(self, client, api, filled_cart):
        resp = client.post(f"{api}/orders/checkout", json={**CHECKOUT, "payment_method": "bitcoin"})

        assert resp.status_code == 422

    def test_idempotency_key_from_another_cart(self, client, api, filled_cart):
        payload = {**CHECKOUT, "idempotency_key": "checkout-7d2f"}
        client.post(f"{api}/orders/checkout", json=payload)

        resp = client.post(
            f"{api}/orders/checkout",
            json={**payload, "customer_name": "Otro"},
            headers={"X-Cart-Id": "another-browser-cart"},
        )

        assert resp.status_code == 409
        assert "order" not in resp.json()

    def test_unmasked_phone(self, client, api, filled_cart):
        resp = client.post(
            f"{api}/orders/checkout",
            json={**CHECKOUT, "customer_phone": "123456789012345"},
        )

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Please enter a valid phone number"
        assert len(client.get(f"{api}/cart").json()["items"]) == 2

    def test_store_closed(self, client, api, session, filled_cart):
        session.add(SiteSetting(key="store_status", value="closed"))
        session.commit()

        resp = client.post(f"{api}/orders/checkout", json=CHECKOUT)

        assert resp.status_code == 403
        assert resp.json()["detail"] == "Cerrado temporalmente"

    def test_admin_flow(self, client, api, admin_headers, filled_cart):
        order_id = client.post(f"{api}/orders/checkout", json=CHECKOUT).json()["order"]["id"]

        listed = client.get(f"{api}/orders", params={"status": "pending"}, headers=admin_headers)
        assert [o["id"] for o in listed.json()] == [order_id]

        resp = client.patch(
            f"{api}/orders/{order_id}/status",
            json={"status": "preparing", "admin_notes": "Llamar antes"},
            headers=admin_headers,
        )
        assert resp.json()["status"] == "preparing"

        bad = client.patch(
            f"{api}/orders/{order_id}/status",
            json={"status": "pending"},
            headers=admin_headers,
        )
        assert bad.status_code == 400

        assert client.delete(f"{api}/orders/{order_id}", headers=admin_headers).status_code == 204
        assert client.get(f"{api}/orders/{order_id}", headers=admin_headers).status_code == 404

    def test_stats(self, client, api, admin_headers, filled_cart):
        client.post(f"{api}/orders/checkout", json=CHECKOUT)

        stats = client.get(f"{api}/admin/stats", headers=admin_headers).json()

        assert stats["total_orders"] == 1
        assert Decimal(stats["total_revenue"]) == Decimal("90.00")
        assert stats["top_products"][0]["name"] == "Harina PAN"
        assert stats["top_products"][0]["total_quantity"] == 2
        assert stats["customers"] == [
            {
                "name": "María Pérez",
                "phone": "(54) 99329-4396",
                "orders_count": 1,
                "total_spent": "90.00",
                "is_vip": False,
            }
        ]
        assert [(p["name"], p["stock"]) for p in stats["low_stock_products"]] == [("Queso llanero", 2)]

    def test_counter_sale(self, client, api, admin_headers, filled_cart):
        arepa, _ = filled_cart

        resp = client.post(
            f"{api}/orders/counter-sale",
            json={"items": [{"product_id": str(arepa.id), "quantity": 3}], "payment_method": "card"},
            headers=admin_headers,
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["id"] == "VF-250307-0001"
        assert body["status"] == "completed"
        assert body["origin"] == "store"
        assert Decimal(body["total"]) == Decimal("45.00")
        assert client.get(f"{api}/products/{arepa.id}").json()["stock"] == 7
        # The storefront cart is not involved
        assert len(client.get(f"{api}/cart").json()["items"]) == 2

    def test_counter_sale_over_stock(self, client, api, admin_headers, filled_cart):
        _, queso = filled_cart

        resp = client.post(
            f"{api}/orders/counter-sale",
            json={"items": [{"product_id": str(queso.id), "quantity": 4}]},
            headers=admin_headers,
        )

        assert resp.status_code == 409
        assert client.get(f"{api}/orders", headers=admin_headers).json() == []

    def test_counter_sale_requires_admin(self, client, api, filled_cart):
        arepa, _ = filled_cart

        resp = client.post(
            f"{api}/orders/counter-sale",
            json={"items": [{"product_id": str(arepa.id), "quantity": 1}]},
        )

        assert resp.status_code == 401

    def test_stats_skip_cancelled_and_counter_customers(
        self, client, api, admin_headers, filled_cart
    ):
        arepa, _ = filled_cart
        order_id = client.post(f"{api}/orders/checkout", json=CHECKOUT).json()["order"]["id"]
        client.patch(
            f"{api}/orders/{order_id}/status",
            json={"status": "cancelled"},
            headers=admin_headers,
        )
        client.post(
            f"{api}/orders/counter-sale",
            json={"items": [{"product_id": str(arepa.id), "quantity": 1}]},
            headers=admin_headers,
        )

        stats = client.get(f"{api}/admin/stats", headers=admin_headers).json()

        assert stats["total_orders"] == 1
        assert Decimal(stats["total_revenue"]) == Decimal("15.00")
        assert stats["customers"] == []


class TestAdminAccess:
    def test_anonymous_is_rejected(self, client, api):
        resp = client.get(f"{api}/orders")

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Authentication required"

    def test_bad_token(self, client, api):
        resp = client.get(f"{api}/orders", headers={"Authorization": "Bearer not-a-jwt"})

        assert resp.status_code == 401

    def test_expired_token(self, client, api):
        headers = {"Authorization": f"Bearer {make_token(ttl=-60)}"}

        assert client.get(f"{api}/orders", headers=headers).status_code == 401

    def test_email_allow_list(self, client, api, monkeypatch):
        monkeypatch.setattr(get_settings(), "ADMIN_EMAILS", ["dueno@venefoods.com"])

        outsider = {"Authorization": f"Bearer {make_token(email='intruso@example.com')}"}
        owner = {"Authorization": f"Bearer {make_token(email='Dueno@venefoods.com')}"}

        assert client.get(f"{api}/orders", headers=outsider).status_code == 403
        assert client.get(f"{api}/orders", headers=owner).status_code == 200

    def test_settings(self, client, api, admin_headers):
        assert client.put(f"{api}/settings/store_status", json={"value": "closed"}).status_code == 401

        resp = client.put(
            f"{api}/settings/shipping_zones",
            json={"value": [{"name": "Centro", "price": "10"}]},
            headers=admin_headers,
        )
        assert resp.status_code == 200

        public = client.get(f"{api}/settings").json()
        assert public["shipping_zones"] == [{"name": "Centro", "price": "10.00"}]

    def test_coupon_admin(self, client, api, admin_headers):
        resp = client.post(
            f"{api}/admin/coupons",
            json={"code": "verano", "discount_type": "fixed", "value": "15"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        coupon_id = resp.json()["id"]

        dup = client.post(
            f"{api}/admin/coupons",
            json={"code": "VERANO", "value": "5"},
            headers=admin_headers,
        )
        assert dup.status_code == 400

        toggled = client.patch(
            f"{api}/admin/coupons/{coupon_id}",
            json={"active": False},
            headers=admin_headers,
        )
        assert toggled.json()["active"] is False

        assert client.post(f"{api}/cart/coupon", json={"code": "VERANO"}).status_code == 400
