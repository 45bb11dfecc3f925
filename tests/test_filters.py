from datetime import datetime, timedelta, timezone
from decimal import Decimal

from store.listing import ListQuery
from store.schemas import PaymentProof, Promotion
from store.templatetags.currency_filters import etb, list_url, promotion_status, proof_state, short_date, stars


def test_etb_formats_with_thousands_separator():
    assert etb(Decimal("1234.5")) == "ETB 1,234.50"
    assert etb("not a number") == "ETB 0.00"
    assert etb(None) == "ETB 0.00"


def test_short_date_accepts_strings_and_blanks():
    assert short_date("") == ""
    assert short_date("garbage") == ""
    assert short_date("2026-03-01T10:00:00") == "Mar 1, 2026"


def test_stars_are_clamped():
    assert stars(3.6) == "★★★★☆"
    assert stars(9) == "★★★★★"
    assert stars(None) == "☆☆☆☆☆"


def test_proof_and_promotion_labels():
    assert proof_state(PaymentProof(id="p", image_url="x")) == "Awaiting review"
    assert proof_state(PaymentProof(id="p", image_url="x", approved=False)) == "Declined"
    now = datetime.now(timezone.utc)
    promo = Promotion(id="1", title="t", started_at=now + timedelta(days=1), expires_at=now + timedelta(days=2))
    assert promotion_status(promo) == "upcoming"


def test_list_url():
    assert list_url(ListQuery(filters={"status": "active"}), page=2).startswith("?")
