# store/middleware.py
from django.utils.deprecation import MiddlewareMixin

from .session_store import CookieSessionStore


class SessionCookieMiddleware(MiddlewareMixin):
    """
    Gives every request a cookie-backed session store and writes whatever
    the views changed (tokens, user, cart id) back onto the response.
    """
    def process_request(self, request):
        request.session_store = CookieSessionStore(request)

    def process_response(self, request, response):
        store = getattr(request, 'session_store', None)
        if store is not None:
            store.apply(response)
        return response
