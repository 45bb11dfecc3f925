# store/store_utils.py
from .api.auth import current_user

CART_COUNT_KEY = 'cart_count'


def get_cart_count(request):
    """
    Item count of the last cart this session loaded; refreshed by every
    cart page visit and cart mutation.
    """
    session = getattr(request, 'session', None)
    if session is None:
        return 0
    return int(session.get(CART_COUNT_KEY, 0) or 0)


def remember_cart(request, cart):
    request.session[CART_COUNT_KEY] = cart.number_of_items
    return cart


def store_context(request):
    store = getattr(request, 'session_store', None)
    return {
        'cart_count': get_cart_count(request),
        'current_user': current_user(store) if store is not None else None,
    }
