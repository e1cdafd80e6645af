import json
import logging
import uuid
from decimal import Decimal
from urllib.parse import quote, unquote

import pytest
from django.http import HttpResponse

from cart import cart as c
from cart.middleware import CartCookieMiddleware
from cart.signals import BADGE_ATTR


def _cookie_rows(response, name="cart"):
    return json.loads(unquote(response.cookies[name].value))


@pytest.fixture
def cart_request(rf):
    def make(rows=None, raw=None):
        request = rf.get("/")
        if raw is not None:
            request.COOKIES["cart"] = raw
        elif rows is not None:
            request.COOKIES["cart"] = c.encode(c.normalize(rows))
        return request
    return make


# ---- decoding ----

def test_malformed_cookie_is_empty_cart():
    assert c.decode("{not json") == []
    assert c.decode("") == []
    assert c.decode(None) == []


def test_cookie_holding_non_list_is_empty_cart():
    assert c.decode(json.dumps({"id": "1", "quantity": 2})) == []


def test_decode_merges_duplicate_rows_and_drops_junk():
    raw = json.dumps([
        {"id": "1", "name": "A", "price": 10, "quantity": 1},
        "junk",
        {"name": "no id", "price": 1, "quantity": 1},
        {"variantId": "2", "id": "ignored", "name": "B", "price": 5.5, "quantity": 2},
        {"id": "1", "name": "A", "price": 10, "quantity": 3},
        {"id": "3", "name": "C", "price": 1, "quantity": 0},
    ])
    rows = c.decode(raw)
    assert [r["id"] for r in rows] == ["1", "2"]
    assert rows[0]["quantity"] == 4
    assert rows[1]["price"] == Decimal("5.50")
    assert rows[1]["image"] == "/placeholder-image.jpg"


def test_out_of_range_prices_drop_the_row():
    raw = json.dumps([
        {"id": "1", "name": "Huge", "price": 1e30, "quantity": 1},
        {"id": "2", "name": "Negative", "price": -4, "quantity": 1},
        {"id": "3", "name": "NaN", "price": "NaN", "quantity": 1},
        {"id": "4", "name": "Free", "quantity": 1},
        {"id": "5", "name": "Ok", "price": "12.345", "quantity": 1},
    ])
    rows = c.decode(raw)
    assert [(r["id"], r["price"]) for r in rows] == [("4", Decimal("0.00")), ("5", Decimal("12.34"))]


def test_deeply_nested_cookie_is_empty_cart():
    assert c.decode("[" * 3000 + "]" * 3000) == []


# ---- mutations ----

def test_add_existing_product_increments_instead_of_duplicating(cart_request):
    request = cart_request()
    assert c.add_item(request, pid=1, name="A", price=Decimal("24.99")) is True
    assert c.add_item(request, pid="1", name="A", price=Decimal("24.99")) is False
    rows = c.get_cart(request)
    assert len(rows) == 1
    assert rows[0]["quantity"] == 2


def test_set_quantity_zero_removes_and_unknown_id_is_ignored(cart_request):
    request = cart_request(rows=[
        {"id": "1", "name": "A", "price": 1, "quantity": 1},
        {"id": "2", "name": "B", "price": 2, "quantity": 1},
    ])
    c.set_quantity(request, pid="99", quantity=5)
    assert not getattr(request, c.MODIFIED_ATTR, False)

    c.set_quantity(request, pid="2", quantity=4)
    c.set_quantity(request, pid="1", quantity=0)
    assert [(r["id"], r["quantity"]) for r in c.get_cart(request)] == [("2", 4)]


def test_remove_and_clear(cart_request):
    request = cart_request(rows=[
        {"id": "1", "name": "A", "price": 1, "quantity": 1},
        {"id": "2", "name": "B", "price": 2, "quantity": 1},
    ])
    c.remove_item(request, pid="1")
    assert [r["id"] for r in c.get_cart(request)] == ["2"]
    c.clear(request)
    assert c.get_cart(request) == []


def test_totals_are_recomputed_from_rows(cart_request, settings):
    settings.CART_DELIVERY_FEE = "2.00"
    request = cart_request(rows=[
        {"id": "1", "name": "A", "price": 24.99, "quantity": 2},
        {"id": "2", "name": "B", "price": 18.50, "quantity": 1},
    ])
    assert c.totals(request) == {
        "total_items": 3,
        "subtotal_cents": 6848,
        "delivery_fee_cents": 200,
        "total_cents": 7048,
    }
    c.set_quantity(request, pid="1", quantity=1)
    assert c.totals(request)["subtotal_cents"] == 4349


def test_mutation_broadcast_updates_badge(cart_request):
    request = cart_request()
    c.add_item(request, pid="5", name="E", price=1, quantity=3)
    assert getattr(request, BADGE_ATTR) == 3
    c.clear(request)
    assert getattr(request, BADGE_ATTR) == 0


# ---- views ----

def test_add_to_cart_sets_cookie_and_redirects(client):
    resp = client.post("/cart/add/1/")
    assert resp.status_code == 302
    assert resp["Location"] == "/cart/"

    morsel = resp.cookies["cart"]
    assert morsel["max-age"] == 60 * 60 * 24 * 7
    assert morsel["httponly"]
    assert morsel["samesite"] == "Lax"
    assert _cookie_rows(resp) == [{
        "id": "1", "name": "The Pragmatic Reader", "price": 24.99, "quantity": 1,
        "image": "/books/books-1.jpg", "description": "Essays on reading well",
    }]

    resp = client.post("/cart/add/1/")
    assert _cookie_rows(resp)[0]["quantity"] == 2


def test_add_unknown_product_is_404(client):
    assert client.post("/cart/add/999/").status_code == 404


def test_add_requires_post(client):
    assert client.get("/cart/add/1/").status_code == 405


def test_ajax_add_returns_count(client):
    headers = {"HTTP_X_REQUESTED_WITH": "XMLHttpRequest"}
    data = client.post("/cart/add/2/", {"quantity": 2}, **headers).json()
    assert data == {"ok": True, "created": True, "cart_count": 2}
    data = client.post("/cart/add/2/", **headers).json()
    assert data == {"ok": True, "created": False, "cart_count": 3}


def test_update_rejects_non_integer_quantity(client):
    client.post("/cart/add/1/")
    assert client.post("/cart/update/1/", {"quantity": "lots"}).status_code == 400


def test_update_and_remove(client):
    client.post("/cart/add/1/")
    client.post("/cart/add/3/")

    resp = client.post("/cart/update/3/", {"quantity": 5})
    assert resp.status_code == 302
    assert {r["id"]: r["quantity"] for r in _cookie_rows(resp)} == {"1": 1, "3": 5}

    client.post("/cart/remove/1/")
    resp = client.post("/cart/remove/3/")
    # empty cart drops the cookie
    assert resp.cookies["cart"].value == ""
    assert resp.cookies["cart"]["max-age"] == 0


def test_cart_page_with_malformed_cookie(client):
    client.cookies["cart"] = "%7Bbroken"
    resp = client.get("/cart/")
    assert resp.status_code == 200
    assert b"Your cart is empty" in resp.content
    assert resp.context["cart_count"] == 0


def test_cart_page_summary(client):
    client.post("/cart/add/1/")
    client.post("/cart/add/1/")
    resp = client.get("/cart/")
    assert resp.context["total_items"] == 2
    assert resp.context["total_cents"] == 4998 + 200
    assert b"$49.98" in resp.content
    assert b"Cart (2)" in resp.content


def test_cart_count_endpoint(client):
    client.post("/cart/add/4/", {"quantity": 3})
    assert client.get("/api/cart/count/").json() == {"ok": True, "cart_count": 3}


def test_pages_survive_huge_price_in_cookie(client):
    client.cookies["cart"] = quote(json.dumps([{"id": "1", "price": 1e30, "quantity": 1}]), safe="")
    resp = client.get("/cart/")
    assert resp.status_code == 200
    assert b"Your cart is empty" in resp.content
    assert client.get("/").status_code == 200


def test_pages_survive_deeply_nested_cookie(client):
    client.cookies["cart"] = "[" * 3000 + "]" * 3000
    resp = client.get("/cart/")
    assert resp.status_code == 200
    assert resp.context["cart_count"] == 0


def test_oversized_cart_cookie_logs_warning(cart_request, caplog):
    request = cart_request()
    for i in range(40):
        c.add_item(request, pid=uuid.uuid4().hex, name="Book %d" % i, price=1,
                   description="A long description for the row " * 3)
    middleware = CartCookieMiddleware(lambda req: HttpResponse("ok"))
    with caplog.at_level(logging.WARNING, logger="cart.middleware"):
        resp = middleware(request)
    assert len(resp.cookies["cart"].value) > c.COOKIE_SIZE_LIMIT
    assert "browsers may drop it" in caplog.text


def test_small_cart_cookie_does_not_warn(cart_request, caplog):
    request = cart_request()
    c.add_item(request, pid="1", name="A", price=1)
    middleware = CartCookieMiddleware(lambda req: HttpResponse("ok"))
    with caplog.at_level(logging.WARNING, logger="cart.middleware"):
        middleware(request)
    assert "browsers may drop it" not in caplog.text
