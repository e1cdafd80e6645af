# cart/middleware.py
import logging

from django.conf import settings

from .cart import COOKIE_SIZE_LIMIT, ITEMS_ATTR, MODIFIED_ATTR, cookie_name, encode

logger = logging.getLogger(__name__)


class CartCookieMiddleware:
    """
    Write the cart back to its cookie when a view changed it.
    An empty cart deletes the cookie.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        if not getattr(request, MODIFIED_ATTR, False):
            return response

        items = getattr(request, ITEMS_ATTR, None) or []
        name = cookie_name()
        if not items:
            response.delete_cookie(name, path="/", samesite="Lax")
            return response

        value = encode(items)
        if len(value) > COOKIE_SIZE_LIMIT:
            logger.warning(
                "Cart cookie is %d bytes (%d rows); browsers may drop it",
                len(value), len(items),
            )
        response.set_cookie(
            name,
            value,
            max_age=getattr(settings, "CART_COOKIE_AGE", 60 * 60 * 24 * 7),
            path="/",
            secure=getattr(settings, "CART_COOKIE_SECURE", False),
            httponly=True,
            samesite="Lax",
        )
        return response
