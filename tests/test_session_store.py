from django.http import HttpResponse
from django.test import RequestFactory

from store.session_store import (
    CART, REFRESH_TOKEN, TOKEN, USER, CookieSessionStore, MemorySessionStore,
)


def test_memory_store_clear_removes_only_session_keys():
    store = MemorySessionStore({TOKEN: "t", REFRESH_TOKEN: "r", USER: "{}", CART: "c1", "theme": "dark"})
    store.clear()
    assert store.values == {"theme": "dark"}


def test_json_helpers_round_trip_and_ignore_garbage():
    store = MemorySessionStore()
    store.set_json(USER, {"id": "u1", "role": "ADMIN"})
    assert store.get_json(USER) == {"id": "u1", "role": "ADMIN"}
    store.set(USER, "{not json")
    assert store.get_json(USER) is None


def test_cookie_store_reads_its_own_pending_writes():
    request = RequestFactory().get("/")
    request.COOKIES[TOKEN] = "old"
    store = CookieSessionStore(request)
    assert store.get(TOKEN) == "old"
    store.set(TOKEN, "new")
    assert store.get(TOKEN) == "new"
    store.delete(TOKEN)
    assert store.get(TOKEN) is None


def test_cookie_store_apply_sets_long_lived_httponly_cookies(settings):
    settings.SESSION_COOKIE_SECURE_DEFAULT = True
    store = CookieSessionStore(RequestFactory().get("/"))
    store.set(TOKEN, "abc")
    store.delete(CART)
    response = store.apply(HttpResponse())

    token = response.cookies[TOKEN]
    assert token.value == "abc"
    assert token["max-age"] == 45 * 24 * 60 * 60
    assert token["httponly"] is True
    assert token["secure"] is True
    assert token["samesite"] == "Lax"
    assert token["path"] == "/"
    # deleted cookies are expired
    assert response.cookies[CART]["max-age"] == 0
    assert store.pending == {}
