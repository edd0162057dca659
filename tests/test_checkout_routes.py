from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from bookstore.models.cart import CartItem
from bookstore.models.order import Order


@pytest.fixture
def customer(make_user):
    return make_user("Ada")


@pytest.fixture
def dune(make_book):
    return make_book("Dune", 20.00)


def test_checkout_requires_identity(client):
    response = client.post("/checkout", json={"payment_reference": "pay_1"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHENTICATED"


def test_checkout_rejects_garbage_token(client):
    response = client.post(
        "/checkout",
        json={"payment_reference": "pay_1"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


def test_disabled_account_is_forbidden(client, make_user, auth_headers):
    user = make_user("Mallory", can_login=False)

    response = client.post("/checkout", json={"payment_reference": "pay_1"}, headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_payment_reference_is_required(client, customer, auth_headers):
    response = client.post("/checkout", json={}, headers=auth_headers(customer))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_cart_to_order_over_http(client, session, customer, dune, auth_headers, mailer):
    headers = auth_headers(customer)

    added = client.post("/cart/add", json={"book_id": dune.id, "quantity": 2}, headers=headers)
    assert added.status_code == 200

    cart = client.get("/cart", headers=headers).json()
    assert cart["subtotal"] == pytest.approx(40.00)

    response = client.post("/checkout", json={"payment_reference": "pay_1"}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["subtotal"] == pytest.approx(40.00)
    assert body["tax"] == pytest.approx(3.20)
    assert body["delivery"] == pytest.approx(12.00)
    assert body["total"] == pytest.approx(55.20)
    assert body["promotion"] is None
    assert body["items"] == [
        {"book_id": dune.id, "book_title": "Dune", "price": 20.0, "quantity": 2, "line_total": 40.0}
    ]

    assert client.get("/cart", headers=headers).json()["items"] == []
    assert len(mailer.calls) == 1


def test_checkout_echoes_promotion(client, customer, dune, make_cart, make_promotion, auth_headers):
    make_cart(customer, [(dune, 2)])
    now = datetime.utcnow()
    make_promotion(title="NOW20", discount=0.20, start_date=now - timedelta(days=1), end_date=now + timedelta(days=1))

    response = client.post(
        "/checkout",
        json={"promotion_title": "NOW20", "payment_reference": "pay_2"},
        headers=auth_headers(customer),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["promotion"]["title"] == "NOW20"
    assert body["total"] == pytest.approx(46.56)


def test_unknown_promotion_over_http(client, session, customer, dune, make_cart, auth_headers):
    cart = make_cart(customer, [(dune, 2)])

    response = client.post(
        "/checkout",
        json={"promotion_title": "GHOST", "payment_reference": "pay_3"},
        headers=auth_headers(customer),
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": {"code": "INVALID_PROMOTION", "message": "Invalid promotion title"}
    }
    assert session.exec(select(Order)).all() == []
    assert len(session.exec(select(CartItem).where(CartItem.cart_id == cart.id)).all()) == 1


def test_future_promotion_over_http(client, customer, dune, make_cart, make_promotion, auth_headers):
    make_cart(customer, [(dune, 1)])
    start = datetime.utcnow() + timedelta(days=5)
    make_promotion(title="LATER", start_date=start, end_date=start + timedelta(days=5))

    response = client.post(
        "/checkout",
        json={"promotion_title": "LATER", "payment_reference": "pay_4"},
        headers=auth_headers(customer),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PROMOTION_NOT_STARTED"


def test_empty_cart_over_http(client, customer, make_cart, auth_headers):
    make_cart(customer)

    response = client.post("/checkout", json={"payment_reference": "pay_5"}, headers=auth_headers(customer))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EMPTY_CART"


def test_missing_cart_over_http(client, customer, auth_headers):
    response = client.post("/checkout", json={"payment_reference": "pay_6"}, headers=auth_headers(customer))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_add_unknown_book_to_cart(client, customer, auth_headers):
    response = client.post("/cart/add", json={"book_id": 999, "quantity": 1}, headers=auth_headers(customer))

    assert response.status_code == 404


def test_adding_same_book_merges_quantity(client, customer, dune, auth_headers):
    headers = auth_headers(customer)

    client.post("/cart/add", json={"book_id": dune.id, "quantity": 1}, headers=headers)
    response = client.post("/cart/add", json={"book_id": dune.id, "quantity": 2}, headers=headers)

    assert response.json()["quantity"] == 3
    assert len(client.get("/cart", headers=headers).json()["items"]) == 1


def test_double_submit_places_one_order(client, session, customer, dune, make_cart, auth_headers, mailer):
    make_cart(customer, [(dune, 1)])
    headers = auth_headers(customer)

    first = client.post("/checkout", json={"payment_reference": "pay_D1"}, headers=headers)
    second = client.post("/checkout", json={"payment_reference": "pay_D2"}, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "EMPTY_CART"
    assert len(session.exec(select(Order)).all()) == 1
    assert len(mailer.calls) == 1
