# payment/templatetags/money.py
from decimal import Decimal

from django import template

register = template.Library()


@register.filter
def cents_to_money(value):
    try:
        return f"{Decimal(int(value)) / 100:.2f}"
    except (TypeError, ValueError):
        return "0.00"


@register.filter
def money(value_cents):
    """12345 -> '$123.45'"""
    return f"${cents_to_money(value_cents)}"


@register.filter
def price(value):
    """Decimal price -> '$24.99'; empty stays empty."""
    if value is None or value == "":
        return ""
    try:
        return f"${Decimal(str(value)):.2f}"
    except ArithmeticError:
        return ""
