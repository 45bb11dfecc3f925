# store/api/orders.py
from ..schemas import Order
from .client import parse, parse_page


def create_order(client, payment_method, cart_id=None, product_id=None, variant_id=None, quantity=1):
    """Order from a cart, or a buy-now order for a single product."""
    if product_id:
        payload = {"productId": product_id, "quantity": quantity}
        if variant_id:
            payload["variantId"] = variant_id
    elif cart_id:
        payload = {"cartId": cart_id}
    else:
        raise ValueError("Either product_id or cart_id must be provided")
    payload["paymentMethod"] = payment_method
    return parse(Order, client.post("/orders", payload))


def get_my_orders(client, status=None, payment_status=None, search=None, page=1, limit=10,
                  sort_by="createdAt", sort_order="desc", date_from=None, date_to=None):
    params = {
        "status": status,
        "paymentStatus": payment_status,
        "search": search,
        "page": page,
        "limit": limit,
        "sortBy": sort_by,
        "sortOrder": sort_order,
        "dateFrom": date_from,
        "dateTo": date_to,
    }
    return parse_page(Order, client.get("/orders/my", params=params))


def get_order(client, order_id):
    return parse(Order, client.get(f"/orders/{order_id}"))


def get_all_orders(client, **query):
    """Admin listing; ``query`` is already in API (camelCase) form."""
    return parse_page(Order, client.get("/orders", params=query))


def upload_payment_proof(client, order_id, image_url, note=None):
    payload = {"orderId": order_id, "imageUrl": image_url}
    if note:
        payload["note"] = note
    return client.post("/orders/upload-proof", payload)


def review_payment_proof(client, proof_id, approved, note=None):
    payload = {"proofId": proof_id, "approved": bool(approved)}
    if note:
        payload["note"] = note
    return client.patch("/orders/admin/review", payload)


def assign_delivery(client, order_id, delivery_user_id):
    return client.patch("/orders/assign-delivery", {
        "orderId": order_id,
        "deliveryUserId": delivery_user_id,
    })


def mark_delivery_complete(client, order_id):
    return client.patch("/orders/delivery-complete", {"orderId": order_id})


def customer_approve_delivery(client, order_id, approved, note=None):
    payload = {"orderId": order_id, "approved": bool(approved)}
    if note:
        payload["note"] = note
    return client.patch("/orders/customer-approve", payload)
