# store/api/cart.py
from ..schemas import Cart, CartItem
from ..session_store import CART
from .client import parse


def _cart_params(client):
    cart_id = client.store.get(CART)
    return {"cartId": cart_id} if cart_id else None


def get_cart(client):
    cart = parse(Cart, client.get("/cart", params=_cart_params(client)) or {})
    if cart.id and cart.id != client.store.get(CART):
        client.store.set(CART, cart.id)
    return cart


def add_to_cart(client, product_id, variant_id=None, quantity=1):
    payload = {"productId": product_id, "quantity": quantity}
    if variant_id:
        payload["variantId"] = variant_id
    data = client.post("/cart", payload, params=_cart_params(client))
    if isinstance(data, dict) and data.get("cartId"):
        client.store.set(CART, str(data["cartId"]))
    return data


def update_item_quantity(client, item_id, quantity):
    data = client.patch(f"/cart/{item_id}", {"quantity": quantity}, params=_cart_params(client))
    return parse(CartItem, data) if isinstance(data, dict) and data.get("id") else None


def remove_item(client, item_id):
    client.delete(f"/cart/{item_id}", params=_cart_params(client))
