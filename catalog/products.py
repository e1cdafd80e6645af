# catalog/products.py
"""
Product queries over the static catalog in ``catalog.data``.

Everything returned here is a plain dict so templates and JSON views can use
it directly; prices stay ``Decimal``.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from .data import DEFAULT_IMAGE, PRODUCTS

SORT_CHOICES = {"price_asc", "price_desc", "newest"}
DEFAULT_LIMIT = 12
MAX_LIMIT = 48

# listing dates are derived from the id so "newest" has a stable order
_CATALOG_EPOCH = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)


@dataclass
class ProductFilters:
    search: Optional[str] = None
    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    sort: Optional[str] = None
    page: int = 1
    limit: int = DEFAULT_LIMIT


def _decimal_or_none(raw) -> Optional[Decimal]:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _int_or(raw, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def normalize_filters(params) -> ProductFilters:
    """Build ``ProductFilters`` from request.GET (or any mapping)."""
    search = (params.get("search") or params.get("q") or "").strip()
    sort = (params.get("sort") or "").strip()
    page = max(1, _int_or(params.get("page"), 1))
    limit = min(MAX_LIMIT, max(1, _int_or(params.get("limit"), DEFAULT_LIMIT)))
    return ProductFilters(
        search=search or None,
        price_min=_decimal_or_none(params.get("price_min")),
        price_max=_decimal_or_none(params.get("price_max")),
        sort=sort if sort in SORT_CHOICES else None,
        page=page,
        limit=limit,
    )


def _to_list_item(p: Dict) -> Dict:
    return {
        "id": str(p["id"]),
        "name": p["title"],
        "image_url": p.get("image_src") or None,
        "min_price": p.get("price"),
        "max_price": p.get("price"),
        "created_at": _CATALOG_EPOCH + timedelta(days=int(p["id"])),
        "subtitle": p.get("subtitle") or None,
    }


def find_product(product_id) -> Optional[Dict]:
    """Raw catalog record for ``product_id`` (str or int), or None."""
    pid = str(product_id).strip()
    return next((p for p in PRODUCTS if str(p["id"]) == pid), None)


def get_all_products(filters: ProductFilters) -> Tuple[List[Dict], int]:
    products = [_to_list_item(p) for p in PRODUCTS]

    if filters.search:
        term = filters.search.lower()
        products = [
            p for p in products
            if term in p["name"].lower() or (p["subtitle"] and term in p["subtitle"].lower())
        ]

    if filters.price_min is not None:
        products = [p for p in products if p["min_price"] is not None and p["min_price"] >= filters.price_min]
    if filters.price_max is not None:
        products = [p for p in products if p["max_price"] is not None and p["max_price"] <= filters.price_max]

    if filters.sort == "price_asc":
        products.sort(key=lambda p: p["min_price"] or 0)
    elif filters.sort == "price_desc":
        products.sort(key=lambda p: p["max_price"] or 0, reverse=True)
    elif filters.sort == "newest":
        products.sort(key=lambda p: p["created_at"], reverse=True)

    total_count = len(products)
    start = (filters.page - 1) * filters.limit
    return products[start:start + filters.limit], total_count


def get_product(product_id) -> Optional[Dict]:
    """
    Full product view: the product plus one synthesized default variant and
    one primary image. Returns None for unknown ids.
    """
    record = find_product(product_id)
    if record is None:
        return None

    pid = str(record["id"])
    created = _CATALOG_EPOCH + timedelta(days=int(record["id"]))
    variant = {
        "id": f"variant-{pid}-1",
        "product_id": pid,
        "sku": f"SKU-{pid}",
        "price": record["price"],
        "sale_price": None,
        "in_stock": True,
        "color": {"id": "color-1", "name": "Black", "slug": "black", "hex_code": "#000000"},
        "size": {"id": "size-1", "name": "M", "slug": "m", "sort_order": 1},
    }
    image = {
        "id": f"image-{pid}-1",
        "product_id": pid,
        "variant_id": None,
        "url": record.get("image_src") or DEFAULT_IMAGE,
        "sort_order": 0,
        "is_primary": True,
    }
    return {
        "product": {
            "id": pid,
            "name": record["title"],
            "description": f"This is a detailed description for {record['title']}. {record.get('subtitle', '')}".strip(),
            "is_published": True,
            "default_variant_id": variant["id"],
            "created_at": created,
            "brand": {"id": "brand-1", "name": "Premium Brand", "slug": "premium-brand"},
            "category": {"id": "category-1", "name": "Books", "slug": "books"},
            "gender": {"id": "gender-1", "label": "Unisex", "slug": "unisex"},
        },
        "variants": [variant],
        "images": [image],
    }


def get_product_reviews(product_id) -> List[Dict]:
    return []


def get_recommended_products(product_id) -> List[Dict]:
    return []


def display_price(full: Dict) -> Dict:
    """
    Price block for the detail page: the price to show, the struck-through
    ``compare_at`` price (only when on sale) and the discount percentage.
    """
    product = full["product"]
    variants = full.get("variants") or []
    default = next((v for v in variants if v["id"] == product.get("default_variant_id")), None)
    if default is None and variants:
        default = variants[0]

    price = default["price"] if default and default.get("price") is not None else None
    sale = default.get("sale_price") if default else None
    compare_at = price if sale else None

    discount = None
    if compare_at and sale and compare_at > sale:
        pct = (Decimal(compare_at) - Decimal(sale)) / Decimal(compare_at) * 100
        discount = int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return {
        "price": sale or price,
        "compare_at": compare_at,
        "discount": discount,
    }


def primary_image(full: Dict) -> str:
    images = full.get("images") or []
    img = next((i for i in images if i.get("is_primary")), None) or (images[0] if images else None)
    return (img or {}).get("url") or DEFAULT_IMAGE
