# cart/signals.py
from django.dispatch import Signal, receiver

# sent after every cart mutation with ``request`` and ``items``
cart_updated = Signal()

BADGE_ATTR = "cart_badge"


@receiver(cart_updated)
def refresh_nav_badge(sender, request, items, **kwargs):
    """Keep the navbar count on the request in step with the cart."""
    setattr(request, BADGE_ATTR, sum(int(r["quantity"]) for r in items))
