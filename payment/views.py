# payment/views.py: mocked checkout (validate, "process", clear the cart)
import logging
import time

from django.conf import settings
from django.contrib import messages
from django.core import signing
from django.shortcuts import redirect, render
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods

from cart import cart as c
from .forms import PaymentForm
from .notifications import send_checkout_receipt
from .utils import collect_checkout_items, new_reference

logger = logging.getLogger(__name__)

# ----------------------------- Config -----------------------------

RECEIPT_SALT = "payment.receipt"
RECEIPT_MAX_AGE = 60 * 60  # 1 hour


def _receipt_cookie() -> str:
    return getattr(settings, "PAYMENT_RECEIPT_COOKIE", "checkout_receipt")


# ----------------------------- Helpers -----------------------------

def _load_receipt(request):
    raw = request.COOKIES.get(_receipt_cookie())
    if not raw:
        return None
    try:
        receipt = signing.loads(raw, salt=RECEIPT_SALT, max_age=RECEIPT_MAX_AGE)
    except signing.BadSignature:
        logger.warning("Ignoring receipt cookie with a bad or expired signature")
        return None
    return receipt if isinstance(receipt, dict) and receipt.get("reference") else None


def _store_receipt(response, receipt) -> None:
    value = signing.dumps(receipt, salt=RECEIPT_SALT, compress=True)
    if len(value) > c.COOKIE_SIZE_LIMIT:
        logger.warning(
            "Receipt cookie for %s is %d bytes (%d items); browsers may drop it",
            receipt.get("reference"), len(value), len(receipt.get("items") or []),
        )
    response.set_cookie(
        _receipt_cookie(),
        value,
        max_age=RECEIPT_MAX_AGE,
        secure=getattr(settings, "CART_COOKIE_SECURE", False),
        httponly=True,
        samesite="Lax",
    )


def _build_receipt(request, form: PaymentForm) -> dict:
    items, subtotal = collect_checkout_items(c.get_cart(request))
    fee = c.delivery_fee_cents()
    return {
        "reference": new_reference(),
        "email": form.cleaned_data["email"],
        "card_name": form.cleaned_data["card_name"],
        "card_type": form.cleaned_data.get("card_type", ""),
        "last4": form.last4,
        "items": items,
        "subtotal_cents": subtotal,
        "delivery_fee_cents": fee,
        "total_cents": subtotal + fee,
        "currency": (getattr(settings, "PAYMENT_CURRENCY", "usd") or "usd").lower(),
        "created_at": timezone.now().isoformat(),
        "emailed": False,
    }


# ----------------------------- Pages -----------------------------

@require_http_methods(["GET", "POST"])
def payment_page(request):
    if not c.get_cart(request):
        messages.error(request, "Your cart is empty.")
        return redirect("cart")

    if request.method == "POST":
        form = PaymentForm(request.POST)
        if form.is_valid():
            # pretend to talk to a gateway
            delay = float(getattr(settings, "PAYMENT_SUBMIT_DELAY", 0) or 0)
            if delay > 0:
                time.sleep(delay)
            receipt = _build_receipt(request, form)
            logger.info(
                "Checkout %s: %s ending %s, total %d cents",
                receipt["reference"], receipt["card_type"], receipt["last4"], receipt["total_cents"],
            )
            response = redirect("payment_processing")
            _store_receipt(response, receipt)
            return response
        messages.error(request, "Please fix the errors below.")
    else:
        form = PaymentForm()

    return render(request, "payment/payment.html", {
        "form": form,
        **c.totals(request),
    })


@require_GET
def payment_processing(request):
    receipt = _load_receipt(request)
    if receipt is None:
        return redirect("cart")
    return render(request, "payment/processing.html", {
        "receipt": receipt,
        "refresh_seconds": getattr(settings, "PAYMENT_PROCESSING_SECONDS", 10),
    })


@require_GET
def payment_complete(request):
    """
    Success page. Clears the cart and emails the receipt once per reference;
    safe to reload.
    """
    receipt = _load_receipt(request)
    c.clear(request)

    response = render(request, "payment/complete.html", {"receipt": receipt})
    if receipt and not receipt.get("emailed"):
        send_checkout_receipt(receipt)
        receipt["emailed"] = True
        _store_receipt(response, receipt)
    return response
