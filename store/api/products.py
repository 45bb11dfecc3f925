# store/api/products.py
from ..schemas import Product, Variant
from .client import parse, parse_page

SORTS = ("NEWEST", "OLDEST", "PRICE_ASC", "PRICE_DESC")


def get_products(client, search=None, category_slug=None, min_price=None, max_price=None,
                 min_rating=None, max_rating=None, sort="NEWEST", page=1, page_size=12):
    params = {
        "search": search,
        "categorySlug": category_slug,
        "minPrice": min_price,
        "maxPrice": max_price,
        "minRating": min_rating,
        "maxRating": max_rating,
        "sort": sort if sort in SORTS else "NEWEST",
        "page": page,
        "pageSize": page_size,
    }
    return parse_page(Product, client.get("/products", params=params))


def get_product(client, product_id):
    return parse(Product, client.get(f"/products/{product_id}"))


def create_product(client, name, image, category_slug, price, stock, description=None):
    payload = {
        "name": name,
        "image": image,
        "categorySlug": category_slug,
        "price": float(price),
        "stock": int(stock),
    }
    if description:
        payload["description"] = description
    return parse(Product, client.post("/products", payload))


def update_product(client, product_id, **fields):
    keys = {"name": "name", "description": "description", "image": "image",
            "category_slug": "categorySlug", "price": "price", "stock": "stock"}
    payload = {}
    for name, value in fields.items():
        if value is None or value == "" or name not in keys:
            continue
        if name == "price":
            value = float(value)
        elif name == "stock":
            value = int(value)
        payload[keys[name]] = value
    return parse(Product, client.patch(f"/products/{product_id}", payload))


def delete_product(client, product_id):
    client.delete(f"/products/{product_id}")


def create_variant(client, product_id, name, price, stock, image):
    payload = {"name": name, "price": float(price), "stock": int(stock), "image": image}
    return parse(Variant, client.post(f"/products/{product_id}/variants", payload))


def update_variant(client, variant_id, **fields):
    payload = {k: v for k, v in fields.items() if v is not None and v != ""}
    if "price" in payload:
        payload["price"] = float(payload["price"])
    if "stock" in payload:
        payload["stock"] = int(payload["stock"])
    return parse(Variant, client.patch(f"/variants/{variant_id}", payload))


def delete_variant(client, variant_id):
    client.delete(f"/variants/{variant_id}")


def get_out_of_stock_products(client, search=None, category_id=None, min_price=None,
                              max_price=None, page=1, limit=20):
    params = {
        "search": search,
        "categoryId": category_id,
        "minPrice": min_price,
        "maxPrice": max_price,
        "page": page,
        "limit": limit,
    }
    return parse_page(Product, client.get("/products/out-of-stock", params=params))


def restock_product(client, product_id, quantity, variant_id=None):
    payload = {"quantity": int(quantity)}
    if variant_id:
        payload["variantId"] = variant_id
    return client.patch(f"/products/{product_id}/restock", payload)
