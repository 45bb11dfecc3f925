# store/api/categories.py
from ..schemas import Category
from .client import parse, parse_list


def get_categories(client, parent=None):
    """One level of the tree: roots, or the children of ``parent`` (a slug)."""
    params = {"parent": parent} if parent else {"root": "true"}
    return parse_list(Category, client.get("/categories", params=params))


def get_category(client, category_id):
    return parse(Category, client.get(f"/categories/{category_id}"))


def create_category(client, name, image, path=None):
    payload = {"name": name, "image": image}
    if path:
        payload["path"] = path
    return parse(Category, client.post("/categories", payload))


def update_category(client, category_id, name, image, path=None):
    payload = {"name": name, "image": image}
    if path:
        payload["path"] = path
    return parse(Category, client.patch(f"/categories/{category_id}", payload))


def delete_category(client, category_id):
    client.delete(f"/categories/{category_id}")
