from decimal import Decimal, InvalidOperation

from django import template
from django.utils import formats, timezone
from django.utils.dateparse import parse_datetime

from store.schemas import ProofReview

register = template.Library()

STAR = "★"
EMPTY_STAR = "☆"


@register.filter
def etb(value):
    """ETB 1,234.50"""
    try:
        amount = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        amount = Decimal('0.00')
    return f"ETB {amount:,.2f}"


@register.filter
def short_date(value):
    if not value:
        return ""
    if isinstance(value, str):
        value = parse_datetime(value)
        if value is None:
            return ""
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return formats.date_format(value, "M j, Y")


@register.filter
def stars(value, out_of=5):
    try:
        filled = int(round(float(value or 0)))
    except (TypeError, ValueError):
        filled = 0
    filled = max(0, min(int(out_of), filled))
    return STAR * filled + EMPTY_STAR * (int(out_of) - filled)


@register.filter
def proof_state(proof):
    return {
        ProofReview.PENDING: "Awaiting review",
        ProofReview.APPROVED: "Approved",
        ProofReview.DECLINED: "Declined",
    }[proof.review]


@register.filter
def promotion_status(promotion):
    return promotion.status().value


@register.simple_tag
def list_url(query, **overrides):
    """Query string for the same list with some values changed."""
    return "?" + query.querystring(**overrides)
