import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _
from django.views.decorators.http import require_POST

from .api import ApiError, client_for
from .api import auth as auth_api
from .guards import login_required
from .schemas import Role
from .session_store import TOKEN
from .uploads import UploadError, image_from_request

logger = logging.getLogger(__name__)

# where each role lands after signing in
LANDING = {
    Role.ADMIN: 'dashboard',
    Role.ORDER_MANAGER: 'restock',
    Role.DELIVERY: 'deliveries',
}


def _after_login(request, user):
    target = request.POST.get('next') or request.GET.get('next')
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return redirect(target)
    return redirect(LANDING.get(user.role, 'home') if user else 'home')


def login(request):
    if request.method == 'POST':
        phone = request.POST.get('phone', '').strip()
        password = request.POST.get('password', '')
        try:
            tokens = auth_api.login(client_for(request), phone, password)
        except ApiError as e:
            messages.error(request, e.message)
            return render(request, 'store/auth/login.html', {'phone': phone}, status=400)
        messages.success(request, _("Welcome back, %(name)s!") % {'name': tokens.user.first_name})
        return _after_login(request, tokens.user)
    return render(request, 'store/auth/login.html')


def register(request):
    if request.method == 'POST':
        data = {k: request.POST.get(k, '').strip() for k in ('first_name', 'last_name', 'phone')}
        password = request.POST.get('password', '')
        if password != request.POST.get('confirm_password', ''):
            messages.error(request, _("Passwords do not match."))
            return render(request, 'store/auth/register.html', data, status=400)
        client = client_for(request)
        try:
            auth_api.register(client, password=password, **data)
            auth_api.request_otp(client, data['phone'])
        except ApiError as e:
            messages.error(request, e.message)
            return render(request, 'store/auth/register.html', data, status=400)
        request.session['otp_phone'] = data['phone']
        messages.info(request, _("We sent a verification code to your phone."))
        return redirect('verify_otp')
    return render(request, 'store/auth/register.html')


def verify_otp(request):
    phone = request.session.get('otp_phone') or request.GET.get('phone', '')
    if request.method == 'POST':
        client = client_for(request)
        phone = request.POST.get('phone', phone).strip()
        try:
            if request.POST.get('action') == 'resend':
                auth_api.request_otp(client, phone)
                messages.info(request, _("A new code is on its way."))
                return redirect('verify_otp')
            auth_api.verify_otp(client, phone, request.POST.get('code', '').strip())
            user = auth_api.get_profile(client) if client.store.get(TOKEN) else None
        except ApiError as e:
            messages.error(request, e.message)
            return render(request, 'store/auth/otp.html', {'phone': phone}, status=400)
        request.session.pop('otp_phone', None)
        messages.success(request, _("Your phone number is verified."))
        return redirect('home' if user else 'login')
    return render(request, 'store/auth/otp.html', {'phone': phone})


def forgot_password(request):
    if request.method == 'POST':
        phone = request.POST.get('phone', '').strip()
        try:
            auth_api.forgot_password(client_for(request), phone)
        except ApiError as e:
            messages.error(request, e.message)
            return render(request, 'store/auth/forgot_password.html', {'phone': phone}, status=400)
        request.session['reset_phone'] = phone
        messages.info(request, _("Enter the code we sent to reset your password."))
        return redirect('reset_password')
    return render(request, 'store/auth/forgot_password.html')


def reset_password(request):
    phone = request.session.get('reset_phone', '')
    if request.method == 'POST':
        phone = request.POST.get('phone', phone).strip()
        new_password = request.POST.get('new_password', '')
        if new_password != request.POST.get('confirm_password', ''):
            messages.error(request, _("Passwords do not match."))
            return render(request, 'store/auth/reset_password.html', {'phone': phone}, status=400)
        try:
            auth_api.reset_password(client_for(request), phone, request.POST.get('code', '').strip(),
                                    new_password)
        except ApiError as e:
            messages.error(request, e.message)
            return render(request, 'store/auth/reset_password.html', {'phone': phone}, status=400)
        request.session.pop('reset_phone', None)
        messages.success(request, _("Password reset. You can log in now."))
        return redirect('login')
    return render(request, 'store/auth/reset_password.html', {'phone': phone})


@require_POST
def logout(request):
    auth_api.logout(client_for(request))
    request.session.flush()
    messages.info(request, _("You have been logged out."))
    return redirect('home')


@login_required
def profile(request):
    client = client_for(request)
    if request.method == 'POST':
        action = request.POST.get('action', 'update')
        try:
            if action == 'password':
                new_password = request.POST.get('new_password', '')
                if new_password != request.POST.get('confirm_password', ''):
                    messages.error(request, _("Passwords do not match."))
                    return redirect('profile')
                auth_api.change_password(client, request.POST.get('old_password', ''), new_password)
                messages.success(request, _("Password changed."))
            else:
                auth_api.update_profile(
                    client,
                    first_name=request.POST.get('first_name', '').strip(),
                    last_name=request.POST.get('last_name', '').strip(),
                    image=image_from_request(request, 'image', 'avatars'),
                )
                messages.success(request, _("Profile updated."))
        except UploadError as e:
            messages.error(request, str(e))
        except ApiError as e:
            messages.error(request, e.message)
        return redirect('profile')

    try:
        user = auth_api.get_profile(client)
    except ApiError as e:
        messages.error(request, e.message)
        user = auth_api.current_user(client.store)
    return render(request, 'store/profile.html', {'user': user})
