# store/session_store.py
"""
Key/value persistence for the auth and cart state shared by every API call.

The API client and the auth helpers only depend on ``SessionStore``; the
request-bound implementation keeps the values in plain HTTP cookies.
"""

import json
import logging
from datetime import timedelta

from django.conf import settings

logger = logging.getLogger(__name__)

TOKEN = "token"
REFRESH_TOKEN = "refreshToken"
USER = "user"
CART = "cart"

SESSION_KEYS = (TOKEN, REFRESH_TOKEN, USER, CART)


class SessionStore:
    """Interface: get / set / delete / clear, plus JSON helpers."""

    def get(self, name):
        raise NotImplementedError

    def set(self, name, value, **options):
        raise NotImplementedError

    def delete(self, name):
        raise NotImplementedError

    def clear(self):
        for name in SESSION_KEYS:
            self.delete(name)

    def get_json(self, name):
        raw = self.get(name)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable %s cookie", name)
            return None

    def set_json(self, name, value, **options):
        self.set(name, json.dumps(value, separators=(",", ":")), **options)


class MemorySessionStore(SessionStore):
    def __init__(self, initial=None):
        self.values = dict(initial or {})

    def get(self, name):
        return self.values.get(name)

    def set(self, name, value, **options):
        self.values[name] = value

    def delete(self, name):
        self.values.pop(name, None)


def cookie_defaults():
    return {
        "path": "/",
        "max_age": int(timedelta(days=settings.SESSION_COOKIE_MAX_AGE_DAYS).total_seconds()),
        "httponly": True,
        "secure": settings.SESSION_COOKIE_SECURE_DEFAULT,
        "samesite": "Lax",
    }


class CookieSessionStore(SessionStore):
    """
    Reads from the incoming request cookies and queues writes until
    ``apply(response)``. Reads observe queued writes, so a token refreshed
    mid-request is used by the next call in the same request.
    """

    _DELETED = object()

    def __init__(self, request):
        self.request = request
        self.pending = {}

    def get(self, name):
        if name in self.pending:
            value, _ = self.pending[name]
            return None if value is self._DELETED else value
        return self.request.COOKIES.get(name)

    def set(self, name, value, **options):
        opts = cookie_defaults()
        opts.update(options)
        self.pending[name] = (value, opts)

    def delete(self, name):
        self.pending[name] = (self._DELETED, {"path": "/"})

    def apply(self, response):
        for name, (value, opts) in self.pending.items():
            if value is self._DELETED:
                response.delete_cookie(name, path=opts.get("path", "/"), samesite="Lax")
            else:
                response.set_cookie(name, value, **opts)
        self.pending = {}
        return response
