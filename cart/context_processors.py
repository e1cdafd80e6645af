# cart/context_processors.py
from .cart import count
from .signals import BADGE_ATTR


def cart_meta(request):
    badge = getattr(request, BADGE_ATTR, None)
    if badge is None:
        badge = count(request)
    return {"cart_count": badge}
