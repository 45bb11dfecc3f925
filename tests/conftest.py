import json

import pytest

from store.api.client import ApiClient
from store.session_store import MemorySessionStore

BASE_URL = "http://api.test/api/v1"


class FakeResponse:
    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self.content = b"" if data is None else json.dumps(data).encode()
        self._data = data

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._data is None:
            raise ValueError("no body")
        return self._data


class FakeHttp:
    """
    Stands in for ``requests.Session``. Routes map ``(METHOD, path)`` to a
    response, or to a list of responses served in order.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = url[len(BASE_URL):]
        self.calls.append({"method": method, "path": path, "params": params,
                           "json": json, "headers": headers or {}})
        route = self.routes.get((method, path))
        if route is None:
            return FakeResponse(404, {"message": f"no route for {method} {path}"})
        if isinstance(route, list):
            return route.pop(0) if len(route) > 1 else route[0]
        return route

    def paths(self, method=None):
        return [c["path"] for c in self.calls if method is None or c["method"] == method]


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def api(store, http):
    return ApiClient(store, base_url=BASE_URL, timeout=5, http=http)


@pytest.fixture
def cart_payload():
    return {
        "id": "c1",
        "items": [
            {"id": "i1", "productName": "Mug", "quantity": 2, "variantPrice": "100.00", "total": "0"},
        ],
        "total": "0",
        "numberOfItems": 0,
    }
