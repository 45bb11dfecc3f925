# store/api/users.py
from ..schemas import Role, User
from .client import parse, parse_page

SORT_FIELDS = ("createdAt", "updatedAt", "firstName", "lastName", "role")


def get_users(client, **query):
    return parse_page(User, client.get("/users", params=query))


def get_user(client, user_id):
    return parse(User, client.get(f"/users/{user_id}"))


def change_role(client, user_id, role):
    return client.patch("/users/change-role", {"userId": user_id, "role": Role(role).value})
