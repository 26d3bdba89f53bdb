"""HTTP surface, exercised through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from storefront.api.deps import get_checkout_service
from storefront.data.database import get_db
from storefront.main import create_app
from storefront.services.checkout_service import CheckoutService
from storefront.utils.settings import GUEST_CART_COOKIE

from conftest import checkout_payload


@pytest.fixture()
def client(db, lock_service, notifier):
    app = create_app()

    def _db():
        yield db

    def _checkout():
        return CheckoutService(db, lock_service=lock_service, notification_service=notifier)

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_checkout_service] = _checkout
    return TestClient(app)


def _as(user_id):
    return {"X-User-Id": str(user_id)}


class TestHealth:
    def test_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "database": "ok"}


class TestGuestCart:
    def test_first_add_sets_cookie(self, client, make_product):
        product = make_product(price="2.50")

        resp = client.post("/cart/items", json={"product_id": product.id, "quantity": 2})

        assert resp.status_code == 200
        assert GUEST_CART_COOKIE in resp.cookies
        body = resp.json()
        assert body["user_id"] is None
        assert body["total_items"] == 2
        assert body["total_amount"] == "5.00"
        assert "guest_token" not in body

    def test_cookie_identifies_the_cart(self, client, make_product):
        first, second = make_product(), make_product()
        client.post("/cart/items", json={"product_id": first.id, "quantity": 1})
        client.post("/cart/items", json={"product_id": second.id, "quantity": 1})

        cart = client.get("/cart").json()
        assert len(cart["items"]) == 2

    def test_no_cookie_no_cart(self, client):
        cart = client.get("/cart").json()
        assert cart["cart_id"] is None
        assert cart["items"] == []

    def test_invalid_quantity(self, client, make_product):
        resp = client.post("/cart/items", json={"product_id": make_product().id, "quantity": 0})
        assert resp.status_code == 422

    def test_unknown_product(self, client):
        resp = client.post("/cart/items", json={"product_id": 404, "quantity": 1})
        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "NotFound"

    def test_not_enough_stock(self, client, make_product):
        product = make_product(quantity=1)
        resp = client.post("/cart/items", json={"product_id": product.id, "quantity": 3})

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["error"] == "InsufficientStock"
        assert detail["available"] == 1


class TestUserCart:
    def test_update_and_remove(self, client, buyer, make_product):
        product = make_product(quantity=10)
        cart = client.post(
            "/cart/items", json={"product_id": product.id, "quantity": 1}, headers=_as(buyer.id)
        ).json()
        item_id = cart["items"][0]["id"]

        resp = client.patch(f"/cart/items/{item_id}", json={"quantity": 4}, headers=_as(buyer.id))
        assert resp.json()["total_items"] == 4

        resp = client.delete(f"/cart/items/{item_id}", headers=_as(buyer.id))
        assert resp.json()["items"] == []

    def test_other_users_line_is_not_found(self, client, buyer, admin, make_product):
        cart = client.post(
            "/cart/items", json={"product_id": make_product().id, "quantity": 1}, headers=_as(buyer.id)
        ).json()
        client.post("/cart/items", json={"product_id": make_product().id, "quantity": 1}, headers=_as(admin.id))

        resp = client.delete(f"/cart/items/{cart['items'][0]['id']}", headers=_as(admin.id))
        assert resp.status_code == 404

    def test_clear(self, client, buyer, make_product):
        client.post("/cart/items", json={"product_id": make_product().id, "quantity": 1}, headers=_as(buyer.id))

        resp = client.delete("/cart", headers=_as(buyer.id))
        assert resp.status_code == 200
        assert resp.json()["total_items"] == 0


class TestTransfer:
    def test_requires_login(self, client):
        assert client.post("/cart/transfer").status_code == 401

    def test_nothing_to_transfer(self, client, buyer):
        resp = client.post("/cart/transfer", headers=_as(buyer.id))
        assert resp.status_code == 200
        assert resp.json() == {"message": "No guest cart items to transfer", "cart": None}

    def test_guest_cart_moves_to_user(self, client, buyer, make_product):
        product = make_product(quantity=10)
        client.post("/cart/items", json={"product_id": product.id, "quantity": 3})

        resp = client.post("/cart/transfer", headers=_as(buyer.id))

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Guest cart transferred successfully"
        assert body["cart"]["user_id"] == buyer.id
        assert body["cart"]["total_items"] == 3
        assert GUEST_CART_COOKIE not in client.cookies

        assert client.get("/cart", headers=_as(buyer.id)).json()["total_items"] == 3


class TestCheckout:
    def test_guest_gets_401_even_with_bad_body(self, client, make_product):
        client.post("/cart/items", json={"product_id": make_product().id, "quantity": 1})

        resp = client.post("/cart/checkout", json={"nonsense": 1})

        assert resp.status_code == 401
        assert resp.json()["detail"]["requires_auth"] is True

    def test_bad_body(self, client, buyer):
        resp = client.post("/cart/checkout", json={"payment_method_id": 1}, headers=_as(buyer.id))
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "ValidationFailed"

    def test_missing_body(self, client, buyer):
        resp = client.post("/cart/checkout", headers=_as(buyer.id))
        assert resp.status_code == 400

    def test_empty_cart(self, client, buyer, card):
        resp = client.post("/cart/checkout", json=checkout_payload(card.id), headers=_as(buyer.id))
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "EmptyCart"

    def test_places_order(self, client, buyer, card, make_product, notifier):
        product = make_product(price="12.50", quantity=3)
        client.post("/cart/items", json={"product_id": product.id, "quantity": 2}, headers=_as(buyer.id))

        resp = client.post("/cart/checkout", json=checkout_payload(card.id), headers=_as(buyer.id))

        assert resp.status_code == 201
        order = resp.json()
        assert order["total_amount"] == "25.00"
        assert order["payment_method"] == {"type": "card", "is_default": True}
        assert order["items"][0]["quantity"] == 2
        assert len(notifier.sent) == 1

        assert client.get("/cart", headers=_as(buyer.id)).json()["items"] == []
        assert client.get(f"/products/{product.id}").json()["quantity"] == 1

        fetched = client.get(f"/orders/{order['order_number']}", headers=_as(buyer.id))
        assert fetched.status_code == 200
        assert fetched.json()["order_number"] == order["order_number"]

        listed = client.get("/orders", headers=_as(buyer.id)).json()
        assert [o["order_number"] for o in listed] == [order["order_number"]]

    def test_order_hidden_from_other_users(self, client, buyer, admin, card, make_product):
        client.post("/cart/items", json={"product_id": make_product().id, "quantity": 1}, headers=_as(buyer.id))
        order = client.post("/cart/checkout", json=checkout_payload(card.id), headers=_as(buyer.id)).json()

        resp = client.get(f"/orders/{order['order_number']}", headers=_as(admin.id))
        assert resp.status_code == 403

    def test_unknown_order(self, client, buyer):
        assert client.get("/orders/ORD-000000-0000", headers=_as(buyer.id)).status_code == 404

    def test_orders_require_login(self, client):
        assert client.get("/orders").status_code == 401

    def test_stock_race_reports_available(self, client, db, buyer, card, make_product):
        product = make_product(quantity=5)
        client.post("/cart/items", json={"product_id": product.id, "quantity": 4}, headers=_as(buyer.id))
        product.quantity = 1
        db.commit()

        resp = client.post("/cart/checkout", json=checkout_payload(card.id), headers=_as(buyer.id))

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["error"] == "InsufficientInventory"
        assert detail["available"] == 1
        assert detail["requested"] == 4


class TestCatalogAndUsers:
    def test_buyer_cannot_create_product(self, client, buyer):
        payload = {
            "name": "Shea butter",
            "price": "8.00",
            "description": "raw",
            "quantity": 5,
            "category": "Spices",
        }
        resp = client.post("/products", json=payload, headers=_as(buyer.id))
        assert resp.status_code == 403

    def test_admin_creates_product_once(self, client, admin):
        payload = {
            "name": "Shea butter",
            "price": "8.00",
            "description": "raw",
            "quantity": 5,
            "category": "Spices",
        }
        first = client.post("/products", json=payload, headers=_as(admin.id))
        second = client.post("/products", json=payload, headers=_as(admin.id))

        assert first.status_code == 201
        assert first.json()["pictures"] == []
        assert second.status_code == 409

    def test_list_by_category(self, client, make_product):
        make_product(name="Ginger", category="Spices")
        make_product(name="Rice", category="Cereals")

        resp = client.get("/products", params={"category": "Spices"})
        assert [p["name"] for p in resp.json()["products"]] == ["Ginger"]
        assert resp.json()["pagination"] == {"total": 1, "page": 1, "pages": 1}

    def test_register_and_add_payment_method(self, client):
        resp = client.post("/users", json={"user_name": "akua", "email": "akua@example.com"})
        assert resp.status_code == 201
        user_id = resp.json()["id"]

        resp = client.post(
            f"/users/{user_id}/payment-methods", json={"type": "card", "token": "tok_x"}, headers=_as(user_id)
        )
        assert resp.status_code == 201
        assert resp.json() == {"id": resp.json()["id"], "type": "card", "is_default": True}

        methods = client.get(f"/users/{user_id}/payment-methods", headers=_as(user_id)).json()
        assert len(methods) == 1

    def test_unknown_user(self, client):
        assert client.get("/users/12345").status_code == 404

    def test_paging_parameters(self, client, make_product):
        for _ in range(3):
            make_product()

        resp = client.get("/products", params={"page": 2, "limit": 2})
        assert resp.status_code == 200
        assert len(resp.json()["products"]) == 1
        assert resp.json()["pagination"] == {"total": 3, "page": 2, "pages": 2}

        assert client.get("/products", params={"limit": 500}).status_code == 400

    def test_count(self, client, make_product):
        make_product(category="Spices")
        make_product(category="Cereals")

        assert client.get("/products/count").json() == {"count": 2}
        assert client.get("/products/count", params={"category": "Spices"}).json() == {"count": 1}

    def test_owner_patches_and_replaces(self, client, admin, make_product):
        product = make_product(name="Rice", quantity=10)

        resp = client.patch(f"/products/{product.id}", json={"quantity": 4}, headers=_as(admin.id))
        assert resp.status_code == 200
        assert resp.json()["quantity"] == 4
        assert resp.json()["name"] == "Rice"

        full = {
            "name": "Jollof rice",
            "price": "15.00",
            "description": "parboiled",
            "quantity": 8,
            "category": "Cereals",
        }
        resp = client.put(f"/products/{product.id}", json=full, headers=_as(admin.id))
        assert resp.status_code == 200
        assert resp.json()["name"] == "Jollof rice"
        assert resp.json()["pictures"] == []

    def test_non_owner_gets_403(self, client, buyer, make_product):
        product = make_product()

        resp = client.patch(f"/products/{product.id}", json={"quantity": 1}, headers=_as(buyer.id))
        assert resp.status_code == 403
        assert resp.json()["detail"]["error"] == "Unauthorized"

        assert client.delete(f"/products/{product.id}", headers=_as(buyer.id)).status_code == 403
        assert client.delete(f"/products/{product.id}").status_code == 401

    def test_delete_product(self, client, admin, make_product):
        product = make_product()

        resp = client.delete(f"/products/{product.id}", headers=_as(admin.id))
        assert resp.status_code == 200
        assert client.get(f"/products/{product.id}").status_code == 404

    def test_sold_product_cannot_be_deleted(self, client, admin, buyer, card, make_product):
        product = make_product(quantity=5)
        client.post("/cart/items", json={"product_id": product.id, "quantity": 1}, headers=_as(buyer.id))
        assert client.post("/cart/checkout", json=checkout_payload(card.id), headers=_as(buyer.id)).status_code == 201

        resp = client.delete(f"/products/{product.id}", headers=_as(admin.id))
        assert resp.status_code == 409

    def test_profile(self, client, buyer):
        resp = client.get("/users/profile", headers=_as(buyer.id))
        assert resp.status_code == 200
        assert resp.json()["user_name"] == "kofi"

        assert client.get("/users/profile").status_code == 401

    def test_role_change_needs_superadmin(self, client, buyer):
        resp = client.patch(f"/users/{buyer.id}", json={"role": "admin"}, headers=_as(buyer.id))
        assert resp.status_code == 403

        resp = client.patch(f"/users/{buyer.id}", json={"user_name": "Kofi B."}, headers=_as(buyer.id))
        assert resp.status_code == 200
        assert resp.json()["user_name"] == "Kofi B."

    def test_payment_methods_of_another_user(self, client, admin, buyer, card):
        resp = client.get(f"/users/{buyer.id}/payment-methods", headers=_as(admin.id))
        assert resp.status_code == 403
        assert resp.json()["detail"]["error"] == "Unauthorized"

        resp = client.post(
            f"/users/{buyer.id}/payment-methods", json={"type": "card", "token": "tok_y"}, headers=_as(admin.id)
        )
        assert resp.status_code == 403

        assert client.get(f"/users/{buyer.id}/payment-methods").status_code == 401
