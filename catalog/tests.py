from decimal import Decimal

from django.http import QueryDict

from catalog import products as p


def _ids(items):
    return [i["id"] for i in items]


def test_normalize_filters_clamps_and_drops_bad_values():
    f = p.normalize_filters(QueryDict("search=+salt+&price_min=abc&price_max=20&sort=cheapest&page=-3&limit=500"))
    assert f.search == "salt"
    assert f.price_min is None
    assert f.price_max == Decimal("20")
    assert f.sort is None
    assert f.page == 1
    assert f.limit == p.MAX_LIMIT


def test_search_matches_name_or_subtitle_case_insensitive():
    items, total = p.get_all_products(p.ProductFilters(search="SALT"))
    assert _ids(items) == ["4"]
    items, total = p.get_all_products(p.ProductFilters(search="memoir"))
    assert _ids(items) == ["2"]
    assert total == 1


def test_price_bounds_are_inclusive():
    items, _ = p.get_all_products(p.ProductFilters(price_min=Decimal("18.50"), price_max=Decimal("24.99")))
    assert sorted(_ids(items)) == ["1", "2", "8"]


def test_sorting():
    items, _ = p.get_all_products(p.ProductFilters(sort="price_asc"))
    assert _ids(items)[0] == "5"
    items, _ = p.get_all_products(p.ProductFilters(sort="price_desc"))
    assert _ids(items)[0] == "7"
    items, _ = p.get_all_products(p.ProductFilters(sort="newest"))
    assert _ids(items)[:2] == ["8", "7"]


def test_pagination_counts_before_slicing():
    items, total = p.get_all_products(p.ProductFilters(page=3, limit=3))
    assert total == 8
    assert _ids(items) == ["7", "8"]
    items, total = p.get_all_products(p.ProductFilters(page=9, limit=3))
    assert items == [] and total == 8


def test_get_product_synthesizes_variant_and_image():
    full = p.get_product("3")
    assert full["product"]["name"] == "Gardens Without Walls"
    assert full["product"]["default_variant_id"] == "variant-3-1"
    assert full["variants"][0]["sku"] == "SKU-3"
    assert full["variants"][0]["price"] == Decimal("32.00")
    assert p.primary_image(full) == "/books/books-3.jpg"
    assert p.get_product("nope") is None
    assert p.get_product_reviews("3") == []
    assert p.get_recommended_products("3") == []


def test_display_price_with_and_without_sale():
    full = p.get_product("1")
    assert p.display_price(full) == {"price": Decimal("24.99"), "compare_at": None, "discount": None}

    full["variants"][0]["sale_price"] = Decimal("18.74")
    pricing = p.display_price(full)
    assert pricing["price"] == Decimal("18.74")
    assert pricing["compare_at"] == Decimal("24.99")
    assert pricing["discount"] == 25


def test_index_page(client):
    resp = client.get("/", {"sort": "price_asc", "limit": 4})
    assert resp.status_code == 200
    assert b"Available Products" in resp.content
    assert resp.context["num_pages"] == 2
    assert resp.context["has_next"] is True
    assert _ids(resp.context["products"])[0] == "5"


def test_product_detail_page(client):
    resp = client.get("/products/7/")
    assert resp.status_code == 200
    assert b"Letters from the Archive" in resp.content
    assert b"$139.99" in resp.content
    assert b"Unisex books" in resp.content


def test_unknown_product_is_404(client):
    resp = client.get("/products/999/")
    assert resp.status_code == 404
    assert b"Product not found" in resp.content
