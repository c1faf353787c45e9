"""
WhatsApp enquiry composer.

Turns cart line items and the admin's enquiry settings into a pre-filled
message and a https://wa.me deep link. Nothing is persisted: the enquiry is
the checkout.
"""

import logging
import os
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional
from urllib.parse import quote

from schemas import CartLineItem, Enquiry, EnquirySettings

logger = logging.getLogger(__name__)

ITEMS_PLACEHOLDER = "{{items}}"
TOTAL_PLACEHOLDER = "{{total}}"
NO_TOTAL = "N/A"

DEFAULT_TEMPLATE = "Hello AS PRODUCTION, I'd like to enquire about the following items:\n\n{{items}}\n\nTotal: {{total}}"
FALLBACK_WHATSAPP_NUMBER = os.getenv("ENQUIRY_FALLBACK_NUMBER", "97430147881")

WHATSAPP_URL = "https://wa.me/{number}?text={text}"

# Characters encodeURIComponent leaves alone besides letters and digits
URI_COMPONENT_SAFE = "-_.!~*'()"

TWOPLACES = Decimal("0.01")


def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_price(amount) -> str:
    """Format an amount as Indian Rupees, e.g. 100000 -> "₹1,00,000.00"."""
    value = Decimal(str(amount)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    return f"{sign}₹{_group_indian(whole)}.{fraction}"


def render_line(item: CartLineItem) -> str:
    line = f"{item.name} (x{item.quantity})"
    if item.showPrice:
        line += f" - {format_price(item.price * item.quantity)}"
    return line


def encode_uri_component(text: str) -> str:
    return quote(text, safe=URI_COMPONENT_SAFE)


def compose_enquiry(items: Iterable[CartLineItem], settings: Optional[EnquirySettings] = None) -> Enquiry:
    """Build the enquiry message and its WhatsApp deep link.

    Missing settings fall back to DEFAULT_TEMPLATE and FALLBACK_WHATSAPP_NUMBER.
    Each placeholder is replaced once; a total of zero (every price hidden)
    renders as "N/A".
    """
    items = list(items)
    items_block = "\n".join(render_line(item) for item in items)
    total = sum(item.price * item.quantity for item in items if item.showPrice)
    total_text = format_price(total) if total > 0 else NO_TOTAL

    if settings is None:
        logger.warning("Enquiry settings unavailable, using defaults")
        template, number = DEFAULT_TEMPLATE, FALLBACK_WHATSAPP_NUMBER
    else:
        template, number = settings.prefilledText, settings.whatsappNumber

    # total first: item names may contain placeholder text
    message = template.replace(TOTAL_PLACEHOLDER, total_text, 1).replace(ITEMS_PLACEHOLDER, items_block, 1)
    url = WHATSAPP_URL.format(number=number, text=encode_uri_component(message))
    logger.info("Composed enquiry for %d line item(s) to %s", len(items), number)
    return Enquiry(message=message, deepLinkUrl=url)
