import pytest
import requests

from store.api import products
from store.api.client import ApiError, error_message, parse_page
from store.schemas import Product
from store.session_store import REFRESH_TOKEN, TOKEN, USER

from .conftest import FakeResponse


def test_bearer_token_is_sent(api, http, store):
    store.set(TOKEN, "abc")
    http.routes[("GET", "/products/p1")] = FakeResponse(200, {"id": "p1", "name": "Mug"})
    assert api.get("/products/p1")["name"] == "Mug"
    assert http.calls[0]["headers"]["Authorization"] == "Bearer abc"


def test_blank_params_are_dropped(api, http):
    http.routes[("GET", "/products")] = FakeResponse(200, [])
    api.get("/products", params={"search": "", "page": 1, "categorySlug": None})
    assert http.calls[0]["params"] == {"page": 1}


def test_401_refreshes_once_and_retries(api, http, store):
    store.set(TOKEN, "expired")
    store.set(REFRESH_TOKEN, "r1")
    http.routes[("GET", "/orders/my")] = [FakeResponse(401), FakeResponse(200, {"items": []})]
    http.routes[("POST", "/auth/refresh")] = FakeResponse(200, {"accessToken": "fresh", "refreshToken": "r2"})

    assert api.get("/orders/my") == {"items": []}
    assert http.paths() == ["/orders/my", "/auth/refresh", "/orders/my"]
    assert http.calls[1]["json"] == {"refreshToken": "r1"}
    assert http.calls[2]["headers"]["Authorization"] == "Bearer fresh"
    assert store.get(TOKEN) == "fresh"
    assert store.get(REFRESH_TOKEN) == "r2"


def test_second_401_is_not_refreshed_again(api, http, store):
    store.set(TOKEN, "expired")
    store.set(REFRESH_TOKEN, "r1")
    http.routes[("GET", "/orders/my")] = FakeResponse(401, {"message": "Unauthorized"})
    http.routes[("POST", "/auth/refresh")] = FakeResponse(200, {"accessToken": "fresh"})

    with pytest.raises(ApiError) as exc:
        api.get("/orders/my")
    assert exc.value.status == 401
    assert http.paths("POST") == ["/auth/refresh"]


def test_failed_refresh_clears_the_session(api, http, store):
    store.set(TOKEN, "expired")
    store.set(REFRESH_TOKEN, "r1")
    store.set_json(USER, {"id": "u1"})
    http.routes[("GET", "/auth/profile")] = FakeResponse(401, {"message": "jwt expired"})
    http.routes[("POST", "/auth/refresh")] = FakeResponse(401)

    with pytest.raises(ApiError) as exc:
        api.get("/auth/profile")
    assert exc.value.message == "jwt expired"
    assert store.get(TOKEN) is None
    assert store.get(REFRESH_TOKEN) is None
    assert store.get(USER) is None


def test_login_401_does_not_try_to_refresh(api, http, store):
    store.set(REFRESH_TOKEN, "r1")
    http.routes[("POST", "/auth/login")] = FakeResponse(401, {"message": "Invalid credentials"})
    with pytest.raises(ApiError, match="Invalid credentials"):
        api.post("/auth/login", {"phone": "0911", "password": "x"})
    assert http.paths() == ["/auth/login"]
    assert store.get(REFRESH_TOKEN) == "r1"


def test_network_failure_becomes_api_error(api, http):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("down")
    http.request = boom
    with pytest.raises(ApiError) as exc:
        api.get("/products")
    assert exc.value.message == "Something went wrong"
    assert exc.value.status is None


@pytest.mark.parametrize("payload, expected", [
    ({"details": {"message": "Stock exhausted"}, "message": "Bad Request"}, "Stock exhausted"),
    ({"message": "Bad Request"}, "Bad Request"),
    ({"message": ["phone is required", "password is too short"]}, "phone is required, password is too short"),
    ({"error": "nope"}, "Something went wrong"),
    (None, "Something went wrong"),
])
def test_error_message_precedence(payload, expected):
    assert error_message(payload) == expected


def test_parse_page_accepts_meta_envelope_and_bare_lists():
    page = parse_page(Product, {"data": [{"id": 1, "name": "Mug"}], "meta": {"total": 13, "page": 2, "limit": 12}})
    assert [p.id for p in page.items] == ["1"]
    assert (page.total, page.page, page.pages) == (13, 2, 2)

    page = parse_page(Product, [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}])
    assert page.total == 2 and page.pages == 1


def test_unexpected_payload_raises_api_error(api, http):
    http.routes[("GET", "/products/p1")] = FakeResponse(200, {"unexpected": True})
    with pytest.raises(ApiError, match="Unexpected response"):
        products.get_product(api, "p1")


def test_refresh_accepts_bare_token_key(api, http, store):
    store.set(TOKEN, "expired")
    store.set(REFRESH_TOKEN, "r1")
    http.routes[("GET", "/orders/my")] = [FakeResponse(401), FakeResponse(200, [])]
    http.routes[("POST", "/auth/refresh")] = FakeResponse(200, {"token": "fresh"})

    assert api.get("/orders/my") == []
    assert store.get(TOKEN) == "fresh"
    assert store.get(REFRESH_TOKEN) == "r1"


@pytest.mark.parametrize("body", [{"refreshToken": "r2"}, {"accessToken": ""}, None])
def test_malformed_refresh_response_ends_the_session(api, http, store, body):
    store.set(TOKEN, "expired")
    store.set(REFRESH_TOKEN, "r1")
    http.routes[("GET", "/orders/my")] = FakeResponse(401, {"message": "jwt expired"})
    http.routes[("POST", "/auth/refresh")] = FakeResponse(200, body)

    with pytest.raises(ApiError, match="jwt expired"):
        api.get("/orders/my")
    assert http.paths() == ["/orders/my", "/auth/refresh"]
    assert store.get(TOKEN) is None
    assert store.get(REFRESH_TOKEN) is None


def test_update_product_sends_only_filled_fields(api, http):
    http.routes[("PATCH", "/products/p1")] = FakeResponse(200, {"id": "p1", "name": "Mug"})
    products.update_product(api, "p1", name="Mug", category_slug="", description=None, stock=None, price="")
    assert http.calls[0]["json"] == {"name": "Mug"}


def test_update_variant_sends_only_filled_fields(api, http):
    http.routes[("PATCH", "/variants/v1")] = FakeResponse(200, {"id": "v1", "name": "Large"})
    products.update_variant(api, "v1", name="", price="120.50", stock=None, image=None)
    assert http.calls[0]["json"] == {"price": 120.5}
