# payment/utils.py
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Dict, Tuple


def _to_cents(amount) -> int:
    d = Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int(d * 100)


def _cents_to_str(c: int) -> str:
    return str((Decimal(int(c)) / Decimal("100")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def collect_checkout_items(rows) -> Tuple[List[Dict], int]:
    """
    Map cart rows to payment line items.
    Returns (items, subtotal_cents).
    """
    items: List[Dict] = []
    total = 0
    for r in rows:
        unit = _to_cents(r.get("price"))
        qty = int(r.get("quantity", 1) or 1)
        items.append({
            "product_id": str(r.get("id", "")),
            "name": r.get("name", "Product"),
            "unit_amount": unit,
            "quantity": qty,
        })
        total += unit * qty
    return items, total


def new_reference() -> str:
    """Friendly checkout number, e.g. LH-3F9A1C07."""
    return f"LH-{uuid.uuid4().hex[:8].upper()}"
