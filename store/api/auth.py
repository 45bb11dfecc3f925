# store/api/auth.py
import logging

from ..schemas import TokenPair, User
from ..session_store import REFRESH_TOKEN, TOKEN, USER
from .client import parse

logger = logging.getLogger(__name__)


def _remember(client, data):
    tokens = parse(TokenPair, data)
    client.store.set(TOKEN, tokens.access_token)
    if tokens.refresh_token:
        client.store.set(REFRESH_TOKEN, tokens.refresh_token)
    if tokens.user:
        remember_user(client, tokens.user)
    return tokens


def remember_user(client, user):
    client.store.set_json(USER, user.to_api())


def login(client, phone, password):
    tokens = _remember(client, client.post("/auth/login", {"phone": phone, "password": password}))
    if tokens.user is None:
        tokens.user = get_profile(client)
    logger.info("User %s signed in", tokens.user.id)
    return tokens


def register(client, first_name, last_name, phone, password):
    data = client.post("/auth/register", {
        "firstName": first_name,
        "lastName": last_name,
        "phone": phone,
        "password": password,
    })
    return _remember(client, data)


def request_otp(client, phone):
    return client.post("/auth/request-otp", {"phone": phone})


def verify_otp(client, phone, code):
    return client.post("/auth/verify-otp", {"phone": phone, "code": code})


def forgot_password(client, phone):
    return client.post("/auth/forgot-password", {"phone": phone})


def reset_password(client, phone, code, new_password):
    return client.post("/auth/reset-password", {
        "phone": phone,
        "code": code,
        "newPassword": new_password,
    })


def get_profile(client):
    user = parse(User, client.get("/auth/profile"))
    remember_user(client, user)
    return user


def update_profile(client, first_name=None, last_name=None, image=None):
    payload = {"firstName": first_name, "lastName": last_name, "image": image}
    data = client.put("/auth/update-profile", {k: v for k, v in payload.items() if v})
    user = parse(User, data) if isinstance(data, dict) and data.get("id") else get_profile(client)
    remember_user(client, user)
    return user


def change_password(client, old_password, new_password):
    return client.post("/auth/change-password", {
        "oldPassword": old_password,
        "newPassword": new_password,
    })


def current_user(store):
    """The signed-in user as last stored in the session, or None."""
    data = store.get_json(USER)
    if not data:
        return None
    try:
        return User.model_validate(data)
    except ValueError:
        return None


def logout(client):
    client.store.clear()
