# payment/notifications.py
import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def _receipt_ctx(receipt):
    return {
        "receipt": receipt,
        "items": receipt.get("items", []),
        "site_name": getattr(settings, "SITE_NAME", "LH Books"),
        "support_email": getattr(settings, "SUPPORT_EMAIL", settings.DEFAULT_FROM_EMAIL),
    }


def send_checkout_receipt(receipt) -> bool:
    """Email the buyer a receipt. Returns False when there is nowhere to send it."""
    to = (receipt.get("email") or "").strip()
    if not to:
        return False

    ctx = _receipt_ctx(receipt)
    subject = f"{ctx['site_name']} receipt {receipt['reference']}"
    text_body = render_to_string("payment/emails/receipt.txt", ctx)
    html_body = render_to_string("payment/emails/receipt.html", ctx)

    msg = EmailMultiAlternatives(subject, text_body, settings.DEFAULT_FROM_EMAIL, [to])
    msg.attach_alternative(html_body, "text/html")
    sent = msg.send(fail_silently=True)
    logger.info("Receipt %s sent to %s (%s)", receipt["reference"], to, "ok" if sent else "not delivered")
    return True
