import logging
import uuid
from datetime import date

import pytest
from django.http import HttpResponse

from cart.cart import COOKIE_SIZE_LIMIT
from payment import validators as val
from payment.forms import PaymentForm
from payment.templatetags.money import cents_to_money, money, price
from payment.utils import _to_cents, collect_checkout_items
from payment.views import _store_receipt

VALID = {
    "email": "reader@example.com",
    "card_name": "Jane Reader",
    "card_number": "4111 1111 1111 1111",
    "expiry_date": "12/99",
    "cvv": "123",
    "billing_address": "12 SW Longer Street",
}


# ---- validators ----

@pytest.mark.parametrize("number,expected", [
    ("4111111111111111", val.VISA),
    ("5555 5555 5555 4444", val.MASTERCARD),
    ("2223003122003222", val.MASTERCARD),
    ("378282246310005", val.AMEX),
    ("6011-1111-1111-1117", val.DISCOVER),
    ("6500000000000002", val.DISCOVER),
    ("9999999999999999", None),
    ("", None),
])
def test_detect_card_type(number, expected):
    assert val.detect_card_type(number) == expected


def test_format_card_number_groups_digits():
    assert val.format_card_number("4111-1111 1111x1111") == "4111 1111 1111 1111"
    assert val.format_card_number("37828224631") == "3782 8224 631"
    assert val.format_card_number("1" * 25) == "1111 1111 1111 1111 111"


def test_format_expiry():
    assert val.format_expiry("1") == "1"
    assert val.format_expiry("12") == "12"
    assert val.format_expiry("122") == "12/2"
    assert val.format_expiry("12/28") == "12/28"
    assert val.format_expiry("122899") == "12/28"


def test_expiry_valid_through_end_of_month():
    assert val.is_expiry_in_past("01/24", today=date(2024, 1, 31)) is False
    assert val.is_expiry_in_past("12/23", today=date(2024, 1, 1)) is True
    assert val.is_expiry_in_past("02/24", today=date(2024, 1, 15)) is False


def test_expiry_format_rejects_bad_month():
    assert not val.is_valid_expiry_format("13/25")
    assert not val.is_valid_expiry_format("00/25")
    assert val.is_valid_expiry_format("0925")


def test_cvv_length_depends_on_card_type():
    assert val.cvv_length(val.AMEX) == 4
    assert val.cvv_length(val.VISA) == 3
    assert val.is_valid_cvv("1234", val.AMEX)
    assert not val.is_valid_cvv("123", val.AMEX)
    assert val.is_valid_cvv("123", val.DISCOVER)
    assert not val.is_valid_cvv("12a", val.VISA)


def test_card_number_length_by_brand():
    assert val.is_valid_card_number("378282246310005")
    assert not val.is_valid_card_number("3782822463100051")
    assert val.is_valid_card_number("4111111111111111")
    assert not val.is_valid_card_number("411111111111")


def test_non_ascii_digits_are_not_card_digits():
    arabic_indic = "١٢٣"
    assert val.digits("4" + "١" * 15) == "4"
    assert not val.is_valid_card_number("4" + "١" * 15)
    assert not val.is_valid_cvv(arabic_indic, val.VISA)
    assert not val.is_valid_cvv("１２３", val.VISA)
    assert not val.is_valid_expiry_format("١٢/٢٨")


def test_billing_address_and_email():
    assert val.is_valid_billing_address("  12 Main Street ")
    assert not val.is_valid_billing_address("   12 Main ")
    assert val.is_valid_email("a@b.co")
    assert not val.is_valid_email("a@b")
    assert not val.is_valid_email("a b@c.de")


# ---- form ----

def test_payment_form_accepts_valid_input():
    form = PaymentForm(data={**VALID, "card_number": "4111111111111111"})
    assert form.is_valid(), form.errors
    assert form.cleaned_data["card_number"] == "4111 1111 1111 1111"
    assert form.cleaned_data["card_type"] == val.VISA
    assert form.last4 == "1111"


def test_payment_form_amex_needs_four_digit_cvv():
    form = PaymentForm(data={**VALID, "card_number": "378282246310005", "cvv": "123"})
    assert not form.is_valid()
    assert "cvv" in form.errors
    assert "4 digits" in form.errors["cvv"][0]


def test_payment_form_reports_each_bad_field():
    form = PaymentForm(data={
        "email": "nope",
        "card_name": "X",
        "card_number": "1234",
        "expiry_date": "01/20",
        "cvv": "1",
        "billing_address": "short",
    })
    assert not form.is_valid()
    assert set(form.errors) == {"email", "card_number", "expiry_date", "cvv", "billing_address"}
    assert form.errors["expiry_date"] == ["This card has expired."]


def test_payment_form_rejects_non_ascii_digits():
    form = PaymentForm(data={
        **VALID,
        "card_number": "4" + "١" * 15,
        "cvv": "١٢٣",
    })
    assert not form.is_valid()
    assert "card_number" in form.errors
    assert "cvv" in form.errors


# ---- money ----

def test_money_helpers():
    assert _to_cents("24.99") == 2499
    assert _to_cents(None) == 0
    assert cents_to_money(7048) == "70.48"
    assert cents_to_money("junk") == "0.00"
    assert money(200) == "$2.00"
    assert price("139.99") == "$139.99"
    assert price(None) == ""


def test_collect_checkout_items():
    items, subtotal = collect_checkout_items([
        {"id": "1", "name": "A", "price": "24.99", "quantity": 2},
        {"id": "2", "name": "B", "price": "1.00", "quantity": 1},
    ])
    assert subtotal == 5098
    assert items[0] == {"product_id": "1", "name": "A", "unit_amount": 2499, "quantity": 2}


# ---- checkout flow ----

@pytest.fixture
def fast_checkout(settings):
    settings.PAYMENT_SUBMIT_DELAY = 0
    settings.PAYMENT_PROCESSING_SECONDS = 10
    return settings


def test_payment_page_with_empty_cart_redirects(client):
    resp = client.get("/payment/")
    assert resp.status_code == 302
    assert resp["Location"] == "/cart/"


def test_payment_page_shows_totals(client):
    client.post("/cart/add/5/")
    resp = client.get("/payment/")
    assert resp.status_code == 200
    assert resp.context["total_cents"] == 1299 + 200
    assert b"Payment Details" in resp.content


def test_invalid_payment_rerenders_with_errors(client, fast_checkout):
    client.post("/cart/add/5/")
    resp = client.post("/payment/", {**VALID, "cvv": "9"})
    assert resp.status_code == 200
    assert resp.context["form"].errors["cvv"]
    assert "checkout_receipt" not in resp.cookies


def test_processing_without_receipt_goes_back_to_cart(client):
    resp = client.get("/payment/processing/")
    assert resp.status_code == 302
    assert resp["Location"] == "/cart/"


def test_full_checkout_flow(client, fast_checkout, mailoutbox):
    client.post("/cart/add/1/")
    client.post("/cart/add/2/", {"quantity": 2})

    resp = client.post("/payment/", VALID)
    assert resp.status_code == 302
    assert resp["Location"] == "/payment/processing/"
    assert "checkout_receipt" in resp.cookies

    resp = client.get("/payment/processing/")
    assert resp.status_code == 200
    assert b"Processing Your Payment" in resp.content
    assert b'content="10;url=/payment/complete/"' in resp.content
    reference = resp.context["receipt"]["reference"]
    assert reference.startswith("LH-")
    assert resp.context["receipt"]["total_cents"] == 2499 + 2 * 1850 + 200

    resp = client.get("/payment/complete/")
    assert resp.status_code == 200
    assert b"Thank You!" in resp.content
    assert resp.cookies["cart"].value == ""
    assert resp.context["cart_count"] == 0
    assert len(mailoutbox) == 1
    assert reference in mailoutbox[0].subject
    assert mailoutbox[0].to == ["reader@example.com"]

    # reload: still fine, no second email
    resp = client.get("/payment/complete/")
    assert resp.status_code == 200
    assert len(mailoutbox) == 1
    assert client.get("/api/cart/count/").json()["cart_count"] == 0


def test_receipt_cookie_is_compact(client, fast_checkout):
    for pid in range(1, 9):
        client.post(f"/cart/add/{pid}/")
    resp = client.post("/payment/", VALID)
    assert 0 < len(resp.cookies["checkout_receipt"].value) < COOKIE_SIZE_LIMIT


def test_tampered_receipt_cookie_is_ignored(client, caplog):
    client.cookies["checkout_receipt"] = "eyJyZWZlcmVuY2UiOiJMSC0xIn0:forged:sig"
    with caplog.at_level(logging.WARNING, logger="payment.views"):
        resp = client.get("/payment/processing/")
    assert resp.status_code == 302
    assert "bad or expired signature" in caplog.text


def test_oversized_receipt_logs_warning(caplog):
    receipt = {
        "reference": "LH-TESTTEST",
        "items": [
            {"product_id": uuid.uuid4().hex, "name": uuid.uuid4().hex, "unit_amount": 100, "quantity": 1}
            for _ in range(200)
        ],
    }
    response = HttpResponse()
    with caplog.at_level(logging.WARNING, logger="payment.views"):
        _store_receipt(response, receipt)
    assert len(response.cookies["checkout_receipt"].value) > COOKIE_SIZE_LIMIT
    assert "LH-TESTTEST" in caplog.text
    assert "browsers may drop it" in caplog.text
