# payment/validators.py
"""
Card and contact field helpers for the checkout form.

All functions are pure: they take the raw string typed by the buyer and
return a formatted string, a label or a bool. ``PaymentForm`` turns the
bools into field errors.
"""
import re
from datetime import date
from typing import Optional

VISA = "Visa"
MASTERCARD = "Mastercard"
AMEX = "American Express"
DISCOVER = "Discover"

CARD_PATTERNS = [
    (VISA, re.compile(r"^4")),
    (MASTERCARD, re.compile(r"^(5[1-5]|2[2-7])")),
    (AMEX, re.compile(r"^3[47]")),
    (DISCOVER, re.compile(r"^6(011|5)")),
]

CARD_LENGTHS = {AMEX: 15}
DEFAULT_CARD_LENGTH = 16
MAX_CARD_DIGITS = 19

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/([0-9]{2})$")
MIN_BILLING_ADDRESS = 10


def digits(value) -> str:
    return re.sub(r"[^0-9]", "", value or "")


def detect_card_type(number) -> Optional[str]:
    n = digits(number)
    for label, pattern in CARD_PATTERNS:
        if pattern.match(n):
            return label
    return None


def format_card_number(value) -> str:
    """'4111111111111111' -> '4111 1111 1111 1111'"""
    n = digits(value)[:MAX_CARD_DIGITS]
    return " ".join(n[i:i + 4] for i in range(0, len(n), 4))


def format_expiry(value) -> str:
    """'1228' -> '12/28'; partial input is left as typed digits."""
    n = digits(value)[:4]
    if len(n) > 2:
        return f"{n[:2]}/{n[2:]}"
    return n


def _expiry_parts(value):
    m = EXPIRY_RE.match(format_expiry(value))
    if not m:
        return None
    return int(m.group(1)), 2000 + int(m.group(2))


def is_valid_expiry_format(value) -> bool:
    return _expiry_parts(value) is not None


def is_expiry_in_past(value, today: Optional[date] = None) -> bool:
    """A card works through the last day of its expiry month."""
    parts = _expiry_parts(value)
    if parts is None:
        return False
    month, year = parts
    today = today or date.today()
    return (year, month) < (today.year, today.month)


def cvv_length(card_type: Optional[str]) -> int:
    return 4 if card_type == AMEX else 3


def is_valid_cvv(cvv, card_type: Optional[str]) -> bool:
    cvv = (cvv or "").strip()
    return re.fullmatch(r"[0-9]{%d}" % cvv_length(card_type), cvv) is not None


def is_valid_card_number(number) -> bool:
    card_type = detect_card_type(number)
    if card_type is None:
        return False
    return len(digits(number)) == CARD_LENGTHS.get(card_type, DEFAULT_CARD_LENGTH)


def is_valid_billing_address(value) -> bool:
    return len((value or "").strip()) >= MIN_BILLING_ADDRESS


def is_valid_email(value) -> bool:
    return bool(EMAIL_RE.match((value or "").strip()))
