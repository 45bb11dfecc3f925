# store/api/client.py
"""
Thin JSON client for the Zumbara REST API.

Every request carries the bearer token held by the session store. A 401 gets
exactly one silent refresh-and-retry; if the refresh itself fails the whole
session is cleared, which logs the user out.
"""

import logging

import requests
from django.conf import settings
from pydantic import ValidationError

from ..schemas import Paginated, TokenPair
from ..session_store import REFRESH_TOKEN, TOKEN

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Something went wrong"
REFRESH_PATH = "/auth/refresh"
# credential exchanges answer 401 for bad input, not for an expired token
NO_REFRESH_PATHS = (REFRESH_PATH, "/auth/login", "/auth/register")


class ApiError(Exception):
    """Any failed API call, with the backend's message already extracted."""

    def __init__(self, message=DEFAULT_ERROR, status=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    def __str__(self):
        return self.message


def error_message(payload, fallback=DEFAULT_ERROR):
    """details.message -> message -> fallback"""
    if not isinstance(payload, dict):
        return fallback
    details = payload.get("details")
    candidates = []
    if isinstance(details, dict):
        candidates.append(details.get("message"))
    candidates.append(payload.get("message"))
    for message in candidates:
        if isinstance(message, (list, tuple)):
            message = ", ".join(str(m) for m in message if m)
        if message:
            return str(message)
    return fallback


def parse(model, data):
    """Validate a payload at the API boundary."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning("Unexpected %s payload: %s", model.__name__, exc)
        raise ApiError("Unexpected response from server", payload=data) from exc


def parse_list(model, data):
    if isinstance(data, dict):
        # some list endpoints wrap their rows
        data = data.get("items", data.get("data", []))
    return [parse(model, row) for row in data or []]


def parse_page(model, data):
    """A paginated envelope whose rows are parsed as ``model``."""
    if isinstance(data, list):
        data = {"items": data, "total": len(data), "page": 1, "limit": len(data) or 10}
    data = dict(data or {})
    meta = data.get("meta") or {}
    data.setdefault("total", meta.get("total", 0))
    data.setdefault("page", meta.get("page", 1))
    data.setdefault("limit", meta.get("limit", data.get("pageSize", 10)))
    page = parse(Paginated, data)
    page.items = parse_list(model, data)
    return page


class ApiClient:
    def __init__(self, store, base_url=None, timeout=None, http=None):
        self.store = store
        self.base_url = (base_url or settings.ZUMBARA_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.ZUMBARA_API_TIMEOUT
        self.http = http or requests.Session()

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self):
        headers = {"Accept": "application/json"}
        token = self.store.get(TOKEN)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method, path, params=None, json=None):
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}
        try:
            return self.http.request(
                method,
                self.url(path),
                params=params or None,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(DEFAULT_ERROR) from exc

    @staticmethod
    def _decode(response):
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _raise_for(self, method, path, response):
        payload = self._decode(response)
        message = error_message(payload)
        logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
        raise ApiError(message, status=response.status_code, payload=payload)

    def refresh_token(self):
        """Swap the refresh token for a new access token. Returns True on success."""
        refresh = self.store.get(REFRESH_TOKEN)
        if not refresh:
            return False
        try:
            response = self.http.request(
                "POST",
                self.url(REFRESH_PATH),
                json={"refreshToken": refresh},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Token refresh failed: %s", exc)
            return False
        if not response.ok:
            logger.info("Token refresh rejected with %s", response.status_code)
            return False
        try:
            tokens = parse(TokenPair, self._decode(response))
        except ApiError:
            return False
        if not tokens.access_token:
            return False
        self.store.set(TOKEN, tokens.access_token)
        if tokens.refresh_token:
            self.store.set(REFRESH_TOKEN, tokens.refresh_token)
        return True

    def request(self, method, path, params=None, json=None):
        response = self._send(method, path, params=params, json=json)
        if response.status_code == 401 and path not in NO_REFRESH_PATHS:
            if not self.refresh_token():
                self.store.clear()
                self._raise_for(method, path, response)
            response = self._send(method, path, params=params, json=json)
        if not response.ok:
            self._raise_for(method, path, response)
        return self._decode(response)

    def get(self, path, params=None):
        return self.request("GET", path, params=params)

    def post(self, path, json=None, params=None):
        return self.request("POST", path, params=params, json=json)

    def put(self, path, json=None, params=None):
        return self.request("PUT", path, params=params, json=json)

    def patch(self, path, json=None, params=None):
        return self.request("PATCH", path, params=params, json=json)

    def delete(self, path, params=None):
        return self.request("DELETE", path, params=params)


def client_for(request):
    return ApiClient(request.session_store)
