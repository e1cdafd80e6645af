# cart/views.py
import logging

from django.contrib import messages
from django.http import Http404, HttpResponseBadRequest, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from catalog.products import find_product
from . import cart as c

logger = logging.getLogger(__name__)


def _is_ajax(request) -> bool:
    return request.headers.get("x-requested-with") == "XMLHttpRequest"


def _rows_for_display(request):
    rows = c.get_cart(request)
    for r in rows:
        r["sku"] = f"SKU-{r['id']}"
        r["line_total_cents"] = c.line_total_cents(r)
    return rows


def cart_view(request):
    rows = _rows_for_display(request)
    return render(request, "cart/cart.html", {
        "items": rows,
        **c.totals(request),
    })


@require_POST
def cart_add(request, product_id):
    product = find_product(product_id)
    if product is None:
        raise Http404("Product not found")

    try:
        qty = int(request.POST.get("quantity", 1))
    except (TypeError, ValueError):
        return HttpResponseBadRequest("quantity must be an integer")
    if qty < 1:
        return HttpResponseBadRequest("quantity must be positive")

    created = c.add_item(
        request,
        pid=product["id"],
        name=product["title"],
        price=product["price"],
        image=product.get("image_src"),
        description=product.get("subtitle") or "",
        quantity=qty,
    )

    # AJAX path
    if _is_ajax(request):
        return JsonResponse({
            "ok": True,
            "created": created,
            "cart_count": c.count(request),
        })

    # redirect so a reload does not add the product again
    return redirect("cart")


@require_POST
def cart_update(request, item_id):
    try:
        qty = int(request.POST.get("quantity", ""))
    except (TypeError, ValueError):
        return HttpResponseBadRequest("quantity must be an integer")
    c.set_quantity(request, pid=item_id, quantity=qty)
    if _is_ajax(request):
        return JsonResponse({"ok": True, "cart_count": c.count(request), **c.totals(request)})
    messages.info(request, "Cart updated.")
    return redirect("cart")


@require_POST
def cart_remove(request, item_id):
    c.remove_item(request, pid=item_id)
    if _is_ajax(request):
        return JsonResponse({"ok": True, "cart_count": c.count(request), **c.totals(request)})
    messages.warning(request, "Removed from cart.")
    return redirect("cart")


# ---- nav badge counter ----
@require_GET
def cart_count(request):
    return JsonResponse({"ok": True, "cart_count": c.count(request)})
