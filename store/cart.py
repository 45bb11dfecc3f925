# store/cart.py
"""
Cart mutations mirrored locally.

The cart item endpoints answer with the item only, so after every successful
mutation the aggregates are recomputed here from the items rather than
taken from the response.
"""

import logging
from decimal import Decimal
from enum import Enum

from .api import cart as cart_api

logger = logging.getLogger(__name__)


def calculate_total(quantity, unit_price):
    total = Decimal(quantity) * Decimal(unit_price)
    return total.quantize(Decimal('0.01'))


def recompute_cart(cart):
    """Return a copy of ``cart`` whose item totals and aggregates match its items."""
    items = [
        item.model_copy(update={'total': calculate_total(item.quantity, item.unit_price)})
        for item in cart.items
    ]
    return cart.model_copy(update={
        'items': items,
        'total': sum((item.total for item in items), Decimal('0.00')),
        'number_of_items': sum(item.quantity for item in items),
    })


class CartAction(Enum):
    UPDATED = 'updated'
    REMOVED = 'removed'
    CONFIRM_REMOVAL = 'confirm_removal'


class CartController:
    """
    Applies one user action to ``cart``. API errors propagate untouched and
    leave ``cart`` as it was, since nothing changes before the call resolves.
    """

    def __init__(self, client, cart):
        self.client = client
        self.cart = recompute_cart(cart)

    def _item(self, item_id):
        item = self.cart.item(item_id)
        if item is None:
            raise KeyError(item_id)
        return item

    def _set_quantity(self, item_id, quantity):
        cart_api.update_item_quantity(self.client, item_id, quantity)
        items = [
            item.model_copy(update={'quantity': quantity}) if item.id == item_id else item
            for item in self.cart.items
        ]
        self.cart = recompute_cart(self.cart.model_copy(update={'items': items}))
        return CartAction.UPDATED

    def increment(self, item_id):
        return self._set_quantity(item_id, self._item(item_id).quantity + 1)

    def decrement(self, item_id):
        new_quantity = self._item(item_id).quantity - 1
        if new_quantity <= 0:
            # removal goes through an explicit confirmation instead
            return CartAction.CONFIRM_REMOVAL
        return self._set_quantity(item_id, new_quantity)

    def remove(self, item_id):
        self._item(item_id)
        cart_api.remove_item(self.client, item_id)
        items = [item for item in self.cart.items if item.id != item_id]
        self.cart = recompute_cart(self.cart.model_copy(update={'items': items}))
        logger.info("Removed item %s from cart %s", item_id, self.cart.id)
        return CartAction.REMOVED
