# store/guards.py
"""
View decorators that route visitors by the signed-in user's role.

They only shape navigation; the API enforces the real permissions.
"""

from functools import wraps
from urllib.parse import urlencode

from django.contrib import messages
from django.shortcuts import redirect
from django.urls import reverse
from django.utils.translation import gettext as _

from .api.auth import current_user
from .session_store import TOKEN


def login_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.session_store.get(TOKEN):
            messages.info(request, _("Please log in to continue."))
            return redirect(_login_redirect(request))
        return view(request, *args, **kwargs)
    return wrapper


def role_required(*roles):
    allowed = {getattr(r, 'value', r) for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if not request.session_store.get(TOKEN):
                return redirect(_login_redirect(request))
            user = current_user(request.session_store)
            if user is None or user.role.value not in allowed:
                messages.error(request, _("You do not have access to this page."))
                return redirect('home')
            return view(request, *args, **kwargs)
        return wrapper
    return decorator


def _login_redirect(request):
    return f"{reverse('login')}?{urlencode({'next': request.get_full_path()})}"
