from decimal import Decimal

import pytest

from store.api import cart as cart_api
from store.api.client import ApiError
from store.cart import CartAction, CartController, calculate_total, recompute_cart
from store.schemas import Cart
from store.session_store import CART

from .conftest import FakeResponse


@pytest.fixture
def cart(cart_payload):
    return Cart.model_validate(cart_payload)


def test_calculate_total_rounds_to_cents():
    assert calculate_total(3, "19.999") == Decimal("60.00")


def test_recompute_derives_aggregates_from_items(cart_payload):
    cart_payload["items"].append({"id": "i2", "quantity": 1, "variantPrice": "50.5"})
    cart = recompute_cart(Cart.model_validate(cart_payload))
    assert [i.total for i in cart.items] == [Decimal("200.00"), Decimal("50.50")]
    assert cart.total == Decimal("250.50")
    assert cart.number_of_items == 3


def test_controller_normalizes_stale_server_totals(api, cart):
    controller = CartController(api, cart)
    assert controller.cart.total == Decimal("200.00")
    assert controller.cart.number_of_items == 2


def test_increment_patches_quantity_and_recomputes(api, http, cart):
    http.routes[("PATCH", "/cart/i1")] = FakeResponse(200, {"id": "i1", "quantity": 3})
    controller = CartController(api, cart)

    assert controller.increment("i1") is CartAction.UPDATED
    assert http.calls[0]["json"] == {"quantity": 3}
    assert controller.cart.items[0].total == Decimal("300.00")
    assert controller.cart.total == Decimal("300.00")
    assert controller.cart.number_of_items == 3


def test_decrement_to_zero_asks_for_confirmation_without_calling_api(api, http, cart):
    http.routes[("PATCH", "/cart/i1")] = FakeResponse(200, {})
    controller = CartController(api, cart)

    assert controller.decrement("i1") is CartAction.UPDATED
    assert controller.cart.number_of_items == 1
    calls = len(http.calls)

    assert controller.decrement("i1") is CartAction.CONFIRM_REMOVAL
    assert len(http.calls) == calls
    assert controller.cart.items[0].quantity == 1


def test_quantity_walk_keeps_aggregates_in_step(api, http, cart):
    http.routes[("PATCH", "/cart/i1")] = FakeResponse(200, {})
    controller = CartController(api, cart)

    def totals():
        return controller.cart.number_of_items, controller.cart.total

    assert totals() == (2, Decimal("200.00"))
    steps = [
        (controller.increment, CartAction.UPDATED, 3, (3, Decimal("300.00"))),
        (controller.decrement, CartAction.UPDATED, 2, (2, Decimal("200.00"))),
        (controller.decrement, CartAction.UPDATED, 1, (1, Decimal("100.00"))),
    ]
    for step, outcome, quantity, expected in steps:
        assert step("i1") is outcome
        assert http.calls[-1]["json"] == {"quantity": quantity}
        assert totals() == expected
        assert controller.cart.items[0].total == expected[1]

    assert controller.decrement("i1") is CartAction.CONFIRM_REMOVAL
    assert len(http.calls) == 3
    assert totals() == (1, Decimal("100.00"))


def test_remove_drops_item(api, http, cart):
    http.routes[("DELETE", "/cart/i1")] = FakeResponse(200, {"message": "removed"})
    controller = CartController(api, cart)
    assert controller.remove("i1") is CartAction.REMOVED
    assert controller.cart.is_empty
    assert controller.cart.total == Decimal("0.00")
    assert controller.cart.number_of_items == 0


def test_failed_update_leaves_cart_unchanged(api, http, cart):
    http.routes[("PATCH", "/cart/i1")] = FakeResponse(400, {"message": "Not enough stock"})
    controller = CartController(api, cart)
    with pytest.raises(ApiError, match="Not enough stock"):
        controller.increment("i1")
    assert controller.cart.items[0].quantity == 2
    assert controller.cart.total == Decimal("200.00")


def test_unknown_item_raises_key_error(api, cart):
    with pytest.raises(KeyError):
        CartController(api, cart).increment("nope")


def test_get_cart_remembers_cart_id(api, http, store, cart_payload):
    http.routes[("GET", "/cart")] = FakeResponse(200, cart_payload)
    cart_api.get_cart(api)
    assert store.get(CART) == "c1"
    cart_api.get_cart(api)
    assert http.calls[1]["params"] == {"cartId": "c1"}
