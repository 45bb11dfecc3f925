from datetime import datetime, timedelta, timezone
from decimal import Decimal

from store.schemas import (
    Order, PaymentProof, PaymentStatus, Product, ProofReview, Promotion, PromotionStatus, User,
)

NOW = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)


def test_camel_case_payloads_and_numeric_ids():
    product = Product.model_validate({
        "id": 7, "name": "Mug", "price": "120.5", "categorySlug": "kitchen",
        "variants": [{"id": "v1", "name": "Blue", "price": 130, "stock": 0},
                     {"id": "v2", "name": "Red", "price": 125, "stock": 4}],
    })
    assert product.id == "7"
    assert product.category_slug == "kitchen"
    assert product.display_price() == Decimal("130")
    assert product.display_price("v2") == Decimal("125")
    assert not product.in_stock()
    assert product.in_stock("v2")


def test_product_without_variants_uses_its_own_price():
    product = Product(id="p", name="Pen", price=Decimal("10"), stock=3)
    assert product.variant() is None
    assert product.display_price() == Decimal("10")
    assert product.display_stock() == 3


def test_proof_review_is_tri_state():
    proof = {"id": "pr", "imageUrl": "https://img"}
    assert PaymentProof.model_validate(proof).review is ProofReview.PENDING
    assert PaymentProof.model_validate({**proof, "approved": True}).review is ProofReview.APPROVED
    assert PaymentProof.model_validate({**proof, "approved": False}).review is ProofReview.DECLINED


def test_paid_payment_status_means_approved():
    assert Order.model_validate({"id": "o", "paymentStatus": "paid"}).payment_status is PaymentStatus.APPROVED
    assert Order.model_validate({"id": "o", "paymentStatus": "declined"}).payment_status is PaymentStatus.DECLINED


def test_pending_proofs():
    order = Order.model_validate({"id": "o", "paymentProofs": [
        {"id": "a", "imageUrl": "x"}, {"id": "b", "imageUrl": "y", "approved": False},
    ]})
    assert [p.id for p in order.pending_proofs] == ["a"]


def test_promotion_status_is_derived_from_dates():
    promo = Promotion(id="1", title="Sale", started_at=NOW - timedelta(days=1), expires_at=NOW + timedelta(days=1))
    assert promo.status(NOW) is PromotionStatus.ACTIVE
    assert promo.status(NOW - timedelta(days=2)) is PromotionStatus.UPCOMING
    assert promo.status(NOW + timedelta(days=2)) is PromotionStatus.EXPIRED


def test_naive_promotion_dates_are_utc():
    promo = Promotion.model_validate({"id": "1", "title": "Sale",
                                      "startedAt": "2026-03-01T00:00:00", "expiresAt": "2026-03-02T00:00:00"})
    assert promo.started_at.tzinfo is timezone.utc


def test_user_serializes_back_to_camel_case():
    user = User.model_validate({"id": "u1", "firstName": "Abebe", "lastName": "Kebede", "role": "ADMIN"})
    assert user.full_name == "Abebe Kebede"
    assert user.to_api()["firstName"] == "Abebe"
