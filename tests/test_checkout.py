import pytest

from store.checkout import BuyNow, CheckoutFlow, CheckoutState, PaymentMethod
from store.schemas import Cart

from .conftest import FakeResponse


@pytest.fixture
def cart(cart_payload):
    return Cart.model_validate(cart_payload)


@pytest.fixture
def flow(api):
    return CheckoutFlow(api)


def test_empty_cart_is_rejected_before_any_request(flow, http):
    outcome = flow.finish_payment("Chapa", cart=Cart())
    assert outcome.level == "error"
    assert http.calls == []
    assert flow.state is CheckoutState.SELECTING_PAYMENT


def test_missing_payment_method_is_rejected_before_any_request(flow, http, cart):
    outcome = flow.finish_payment(None, cart=cart)
    assert outcome.level == "error"
    assert "payment method" in outcome.message
    assert http.calls == []


def test_cash_on_delivery_ends_pending(flow, http, cart):
    http.routes[("POST", "/orders")] = FakeResponse(201, {"id": "o1", "paymentMethod": "COD"})
    outcome = flow.finish_payment("COD", cart=cart)

    assert http.calls[0]["json"] == {"cartId": "c1", "paymentMethod": "COD"}
    assert outcome.level == "success"
    assert outcome.redirect == "my_orders"
    assert flow.state is CheckoutState.PENDING
    assert flow.finished
    assert "/payment/initialize/chapa" not in http.paths()


def test_chapa_opens_gateway_then_verifies(flow, http, cart):
    http.routes[("POST", "/orders")] = FakeResponse(201, {"id": "o1"})
    http.routes[("POST", "/payment/initialize/chapa")] = FakeResponse(200, {"paymentUrl": "https://pay"})
    http.routes[("GET", "/payment/verify/chapa/o1")] = FakeResponse(200, {"status": "succeeded"})

    outcome = flow.finish_payment(PaymentMethod.CHAPA, cart=cart)
    assert outcome.payment_url == "https://pay"
    assert http.calls[1]["json"] == {"orderId": "o1"}
    assert flow.awaiting_gateway
    assert flow.invoice_number == "o1"

    outcome = flow.verify_payment()
    assert outcome.level == "success"
    assert outcome.redirect == "my_orders"
    assert flow.state is CheckoutState.SUCCEEDED


def test_failed_payment_can_be_retried(flow, http):
    flow.state, flow.invoice_number = CheckoutState.AWAITING_GATEWAY, "o1"
    http.routes[("GET", "/payment/verify/chapa/o1")] = FakeResponse(200, {"status": "failed"})
    http.routes[("GET", "/payment/reinitialize/chapa/o1")] = FakeResponse(200, {"paymentUrl": "https://pay/2"})

    outcome = flow.verify_payment()
    assert outcome.level == "error"
    assert flow.state is CheckoutState.FAILED
    assert flow.can_retry_payment

    outcome = flow.retry_payment()
    assert outcome.payment_url == "https://pay/2"
    assert flow.state is CheckoutState.AWAITING_GATEWAY


def test_unknown_verification_status_is_treated_as_pending(flow, http):
    flow.state, flow.invoice_number = CheckoutState.AWAITING_GATEWAY, "o1"
    http.routes[("GET", "/payment/verify/chapa/o1")] = FakeResponse(200, {"status": "processing"})
    outcome = flow.verify_payment()
    assert outcome.level == "info"
    assert outcome.redirect == "my_orders"
    assert flow.state is CheckoutState.PENDING


def test_bad_request_gets_invalid_details_message(flow, http, cart):
    http.routes[("POST", "/orders")] = FakeResponse(400, {"message": "cartId must be a UUID"})
    outcome = flow.finish_payment("Chapa", cart=cart)
    assert outcome.level == "error"
    assert outcome.message.startswith("Invalid details")
    assert flow.state is CheckoutState.SELECTING_PAYMENT


def test_server_error_gets_generic_message(flow, http, cart):
    http.routes[("POST", "/orders")] = FakeResponse(500)
    outcome = flow.finish_payment("Chapa", cart=cart)
    assert outcome.message == "We could not process your payment. Please try again."


def test_buy_now_orders_a_single_product(flow, http):
    http.routes[("POST", "/orders")] = FakeResponse(201, {"id": "o2"})
    flow.finish_payment("COD", buy_now=BuyNow("p1", variant_id="v1", quantity=2))
    assert http.calls[0]["json"] == {
        "productId": "p1", "variantId": "v1", "quantity": 2, "paymentMethod": "COD",
    }


def test_session_round_trip(api, flow):
    flow.state, flow.method, flow.invoice_number = CheckoutState.AWAITING_GATEWAY, PaymentMethod.CHAPA, "o1"
    restored = CheckoutFlow.from_session(api, flow.to_session())
    assert restored.state is CheckoutState.AWAITING_GATEWAY
    assert restored.method is PaymentMethod.CHAPA
    assert restored.awaiting_gateway
