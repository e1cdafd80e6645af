# cart/cart.py
"""
Cookie-backed cart.

The cart is an ordered list of line items, each
``{"id", "name", "price", "quantity", "image", "description"}``, kept as JSON
in a single cookie. Every mutation reads the whole cart, changes it in memory
and hands the full list back to ``_save_cart``; ``CartCookieMiddleware``
rewrites the cookie on the way out.
"""
import json
import logging
from decimal import Decimal
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from django.conf import settings

from payment.utils import _to_cents
from .signals import cart_updated

logger = logging.getLogger(__name__)

ITEMS_ATTR = "_cart_items"
MODIFIED_ATTR = "_cart_modified"

MAX_PRICE = Decimal("1000000")
# browsers drop cookies past roughly 4 KB
COOKIE_SIZE_LIMIT = 4000


def cookie_name() -> str:
    return getattr(settings, "CART_COOKIE_NAME", "cart")


def _placeholder() -> str:
    return getattr(settings, "CART_PLACEHOLDER_IMAGE", "/placeholder-image.jpg")


def _positive_int(value) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return n if n > 0 else 0


def _price(value) -> Optional[Decimal]:
    """Two-place price; None when the value is not a usable price."""
    try:
        d = Decimal(str(value if value is not None else 0))
        if not d.is_finite() or d < 0 or d > MAX_PRICE:
            return None
        return d.quantize(Decimal("0.01"))
    except ArithmeticError:
        return None


def normalize(rows) -> List[Dict]:
    """
    One row per id, first position wins, quantities summed.
    Rows that are not dicts, have no id, no usable price or no positive
    quantity are dropped.
    """
    merged: Dict[str, Dict] = {}
    for r in rows or []:
        if not isinstance(r, dict):
            continue
        key = str(r.get("variantId") or r.get("id") or "").strip()
        if not key:
            continue
        qty = _positive_int(r.get("quantity", 1))
        if not qty:
            continue
        price = _price(r.get("price"))
        if price is None:
            continue
        if key in merged:
            merged[key]["quantity"] += qty
            continue
        merged[key] = {
            "id": key,
            "name": str(r.get("name") or "Product"),
            "price": price,
            "quantity": qty,
            "image": r.get("image") or _placeholder(),
            "description": r.get("description") or "",
        }
    return list(merged.values())


def decode(raw: Optional[str]) -> List[Dict]:
    """Parse a cookie value; anything malformed is an empty cart."""
    if not raw:
        return []
    try:
        data = json.loads(unquote(raw))
    except (ValueError, RecursionError):
        logger.warning("Discarding malformed cart cookie (%d bytes)", len(raw))
        return []
    if not isinstance(data, list):
        logger.warning("Discarding cart cookie holding %s instead of a list", type(data).__name__)
        return []
    return normalize(data)


def encode(cart: List[Dict]) -> str:
    rows = [
        {
            "id": r["id"],
            "name": r["name"],
            "price": float(r["price"]),
            "quantity": int(r["quantity"]),
            "image": r["image"],
            "description": r.get("description") or "",
        }
        for r in cart
    ]
    return quote(json.dumps(rows, separators=(",", ":")), safe="")


def _get_cart(request) -> List[Dict]:
    items = getattr(request, ITEMS_ATTR, None)
    if items is None:
        items = decode(request.COOKIES.get(cookie_name()))
        setattr(request, ITEMS_ATTR, items)
    return [dict(r) for r in items]


def _save_cart(request, cart: List[Dict]) -> None:
    items = normalize(cart)
    setattr(request, ITEMS_ATTR, items)
    setattr(request, MODIFIED_ATTR, True)
    cart_updated.send(sender=_save_cart, request=request, items=items)


def get_cart(request) -> List[Dict]:
    return _get_cart(request)


def in_cart(request, pid) -> bool:
    pid = str(pid)
    return any(r["id"] == pid for r in _get_cart(request))


def add_item(request, *, pid, name: str, price, image: Optional[str] = None,
             description: str = "", quantity: int = 1) -> bool:
    """
    Returns True if a new row was added, False if an existing row was
    incremented by ``quantity``.
    """
    pid = str(pid)
    quantity = _positive_int(quantity) or 1
    cart = _get_cart(request)
    for r in cart:
        if r["id"] == pid:
            r["quantity"] += quantity
            _save_cart(request, cart)
            logger.info("Cart: %s quantity -> %d", pid, r["quantity"])
            return False
    cart.append({
        "id": pid,
        "name": name,
        "price": price,
        "quantity": quantity,
        "image": image or _placeholder(),
        "description": description or "",
    })
    _save_cart(request, cart)
    logger.info("Cart: added %s x%d", pid, quantity)
    return True


def set_quantity(request, *, pid, quantity: int) -> None:
    """Quantity <= 0 removes the row; unknown ids are ignored."""
    pid = str(pid)
    cart = _get_cart(request)
    if not any(r["id"] == pid for r in cart):
        return
    if quantity <= 0:
        cart = [r for r in cart if r["id"] != pid]
    else:
        for r in cart:
            if r["id"] == pid:
                r["quantity"] = quantity
    _save_cart(request, cart)


def remove_item(request, *, pid) -> None:
    pid = str(pid)
    cart = [r for r in _get_cart(request) if r["id"] != pid]
    _save_cart(request, cart)


def clear(request) -> None:
    _save_cart(request, [])


def count(request) -> int:
    return sum(r["quantity"] for r in _get_cart(request))


def delivery_fee_cents() -> int:
    return _to_cents(getattr(settings, "CART_DELIVERY_FEE", "2.00"))


def totals(request) -> Dict:
    """Derived values, recomputed from the rows on every call (cents)."""
    cart = _get_cart(request)
    subtotal = sum(_to_cents(r["price"]) * r["quantity"] for r in cart)
    fee = delivery_fee_cents()
    return {
        "total_items": sum(r["quantity"] for r in cart),
        "subtotal_cents": subtotal,
        "delivery_fee_cents": fee,
        "total_cents": subtotal + fee,
    }


def line_total_cents(row: Dict) -> int:
    return _to_cents(row["price"]) * int(row["quantity"])
