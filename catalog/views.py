# catalog/views.py
from math import ceil

from django.shortcuts import render
from django.views.decorators.http import require_GET

from . import products as p


@require_GET
def index(request):
    filters = p.normalize_filters(request.GET)
    items, total_count = p.get_all_products(filters)

    # Build querystring for pagination (keep filters, drop page)
    qs = request.GET.copy()
    qs.pop("page", None)

    num_pages = max(1, ceil(total_count / filters.limit))
    return render(request, "catalog/index.html", {
        "products": items,
        "total_count": total_count,
        "filters": filters,
        "page": filters.page,
        "num_pages": num_pages,
        "has_previous": filters.page > 1,
        "has_next": filters.page < num_pages,
        "querystring": qs.urlencode(),
        "sort_choices": [
            ("", "Featured"),
            ("price_asc", "Price: Low to High"),
            ("price_desc", "Price: High to Low"),
            ("newest", "Newest"),
        ],
    })


@require_GET
def product_detail(request, pk):
    data = p.get_product(pk)
    if data is None:
        return render(request, "catalog/not_found.html", status=404)

    product = data["product"]
    gender = product.get("gender") or {}
    return render(request, "catalog/product_detail.html", {
        "product": product,
        "variants": data["variants"],
        "main_image": p.primary_image(data),
        "pricing": p.display_price(data),
        "subtitle": f"{gender['label']} books" if gender.get("label") else None,
        "reviews": p.get_product_reviews(product["id"]),
        "recommended": p.get_recommended_products(product["id"]),
    })
