"""
Back office: the admin, order-manager and delivery screens.

List screens share one pattern: filters, sort and page travel in the query
string (see ``ListQuery``) and every mutation is followed by a redirect, so
the page is always re-fetched and shows what the server computed.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.utils.translation import gettext as _
from django.views.decorators.http import require_POST

from .api import ApiError, client_for
from .api import analytics as analytics_api
from .api import categories as categories_api
from .api import orders as orders_api
from .api import products as products_api
from .api import promotions as promotions_api
from .api import users as users_api
from .api.auth import current_user
from .categories import CategoryNavigator
from .guards import role_required
from .listing import ListQuery
from .schemas import OrderStatus, PaymentStatus, PromotionStatus, Role
from .uploads import UploadError, image_from_request

logger = logging.getLogger(__name__)

ADMIN_CATEGORY_KEY = 'admin_category_path'

admin_only = role_required(Role.ADMIN)
order_staff = role_required(Role.ADMIN, Role.ORDER_MANAGER)
delivery_staff = role_required(Role.ADMIN, Role.DELIVERY)


def _back(request, name, *args):
    """Redirect to ``name`` keeping the current list state."""
    url = reverse(name, args=args)
    query = request.POST.get('return_query') or request.GET.urlencode()
    return redirect(f"{url}?{query}" if query else url)


def _get_or_404(fetch, *args):
    try:
        return fetch(*args)
    except ApiError as e:
        if e.status == 404:
            raise Http404(e.message)
        raise


def _parse_datetime(value):
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


# -------------------------------
# DASHBOARD
# -------------------------------
@admin_only
def dashboard(request):
    client = client_for(request)
    date_from = request.GET.get('from') or None
    date_to = request.GET.get('to') or None
    context = {'date_from': date_from, 'date_to': date_to, 'error': None}
    try:
        context.update(
            dashboard=analytics_api.get_dashboard(client),
            sales=analytics_api.get_sales(client, date_from, date_to),
            trends=analytics_api.get_order_trends(client, date_from, date_to),
            payments=analytics_api.get_payments(client),
            deliveries=analytics_api.get_deliveries(client),
        )
    except ApiError as e:
        context['error'] = e.message
    return render(request, 'store/backoffice/dashboard.html', context)


# -------------------------------
# PRODUCTS
# -------------------------------
PRODUCT_FILTERS = ('search', 'category_slug', 'min_price', 'max_price')


@admin_only
def product_list(request):
    query = ListQuery.from_request(request, filters=PRODUCT_FILTERS,
                                   sort_fields=('NEWEST', 'OLDEST', 'PRICE_ASC', 'PRICE_DESC'),
                                   default_sort='NEWEST')
    products, error = None, None
    try:
        products = products_api.get_products(
            client_for(request), sort=query.sort_by, page=query.page, page_size=query.limit,
            **query.filters)
    except ApiError as e:
        error = e.message
    return render(request, 'store/backoffice/products.html', {
        'products': products, 'query': query, 'error': error,
    })


def _number(request, field, label, whole=False):
    """Blank inputs come back as None so updates leave the field alone."""
    raw = request.POST.get(field, '').strip()
    if not raw:
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation:
        value = None
    if value is None or not value.is_finite() or value < 0 or (whole and value != value.to_integral_value()):
        raise ValueError(_("%(field)s must be a non-negative number.") % {'field': label})
    return int(value) if whole else value


def _product_fields(request):
    return {
        'name': request.POST.get('name', '').strip() or None,
        'description': request.POST.get('description', '').strip() or None,
        'category_slug': request.POST.get('category_slug', '').strip() or None,
        'price': _number(request, 'price', _("Price")),
        'stock': _number(request, 'stock', _("Stock"), whole=True),
    }


def _variant_fields(request):
    return {
        'name': request.POST.get('name', '').strip() or None,
        'price': _number(request, 'price', _("Price")),
        'stock': _number(request, 'stock', _("Stock"), whole=True),
    }


@admin_only
def product_create(request):
    client = client_for(request)
    if request.method == 'POST':
        try:
            fields = _product_fields(request)
            if fields['name'] is None or fields['price'] is None:
                raise ValueError(_("Name and price are required."))
            if fields['stock'] is None:
                fields['stock'] = 0
            image = image_from_request(request, 'image', 'products')
            product = products_api.create_product(client, image=image, **fields)
        except (ValueError, UploadError, ApiError) as e:
            messages.error(request, str(e))
            return render(request, 'store/backoffice/product_form.html', {'form': request.POST}, status=400)
        messages.success(request, _("Product created."))
        return redirect('backoffice_product_edit', product_id=product.id)
    try:
        categories = categories_api.get_categories(client)
    except ApiError:
        categories = []
    return render(request, 'store/backoffice/product_form.html', {'form': {}, 'categories': categories})


@admin_only
def product_edit(request, product_id):
    client = client_for(request)
    if request.method == 'POST':
        try:
            fields = _product_fields(request)
            image = image_from_request(request, 'image', 'products')
            products_api.update_product(client, product_id, image=image, **fields)
            messages.success(request, _("Product updated."))
        except (ValueError, UploadError, ApiError) as e:
            messages.error(request, str(e))
        return redirect('backoffice_product_edit', product_id=product_id)
    product = _get_or_404(products_api.get_product, client, product_id)
    return render(request, 'store/backoffice/product_form.html', {'product': product, 'form': product})


@require_POST
@admin_only
def product_delete(request, product_id):
    try:
        products_api.delete_product(client_for(request), product_id)
        messages.success(request, _("Product deleted."))
    except ApiError:
        messages.error(request, _("Failed to delete product. Please try again."))
    return _back(request, 'backoffice_products')


@require_POST
@admin_only
def variant_save(request, product_id, variant_id=None):
    client = client_for(request)
    try:
        fields = _variant_fields(request)
        image = image_from_request(request, 'image', 'variants')
        if variant_id:
            products_api.update_variant(client, variant_id, image=image, **fields)
        else:
            if fields['name'] is None or fields['price'] is None:
                raise ValueError(_("Name and price are required."))
            if fields['stock'] is None:
                fields['stock'] = 0
            products_api.create_variant(client, product_id, image=image, **fields)
        messages.success(request, _("Variant saved."))
    except (ValueError, UploadError, ApiError) as e:
        messages.error(request, str(e))
    return redirect('backoffice_product_edit', product_id=product_id)


@require_POST
@admin_only
def variant_delete(request, product_id, variant_id):
    try:
        products_api.delete_variant(client_for(request), variant_id)
        messages.success(request, _("Variant deleted."))
    except ApiError as e:
        messages.error(request, e.message)
    return redirect('backoffice_product_edit', product_id=product_id)


# -------------------------------
# CATEGORIES
# -------------------------------
def _admin_navigator(request, client):
    return CategoryNavigator.from_session(client, request.session.get(ADMIN_CATEGORY_KEY))


@admin_only
def category_list(request):
    client = client_for(request)
    navigator = _admin_navigator(request, client)
    action = request.GET.get('open')
    if action is not None:
        navigator.reload()
        category = next((c for c in navigator.categories if c.slug == action), None)
        if category is not None:
            navigator.descend(category)
    elif request.GET.get('up') is not None:
        try:
            navigator.ascend_to(int(request.GET['up']))
        except ValueError:
            navigator.reload()
    else:
        navigator.reload()
    request.session[ADMIN_CATEGORY_KEY] = navigator.to_session()

    search = request.GET.get('search', '').strip().lower()
    categories = [c for c in navigator.categories if search in c.name.lower()]
    return render(request, 'store/backoffice/categories.html', {
        'navigator': navigator,
        'categories': categories,
        'search': search,
    })


@admin_only
def category_create(request):
    client = client_for(request)
    navigator = _admin_navigator(request, client)
    parent = navigator.current
    if request.method == 'POST':
        name = request.POST.get('name', '').strip()
        try:
            image = image_from_request(request, 'image', 'categories')
            path = request.POST.get('path') or (parent.path if parent else None)
            categories_api.create_category(client, name, image, path=path)
        except (UploadError, ApiError) as e:
            messages.error(request, str(e))
            return render(request, 'store/backoffice/category_form.html',
                          {'parent': parent, 'form': {'name': name}}, status=400)
        messages.success(request, _("Category created."))
        return redirect('backoffice_categories')
    return render(request, 'store/backoffice/category_form.html', {'parent': parent, 'form': {}})


@admin_only
def category_edit(request, category_id):
    client = client_for(request)
    category = _get_or_404(categories_api.get_category, client, category_id)
    if request.method == 'POST':
        try:
            image = image_from_request(request, 'image', 'categories', fallback=category.image)
            categories_api.update_category(client, category_id, request.POST.get('name', '').strip(),
                                           image, path=request.POST.get('path') or category.path)
            messages.success(request, _("Category updated."))
            return redirect('backoffice_categories')
        except (UploadError, ApiError) as e:
            messages.error(request, str(e))
    return render(request, 'store/backoffice/category_form.html', {'category': category, 'form': category})


@require_POST
@admin_only
def category_delete(request, category_id):
    try:
        categories_api.delete_category(client_for(request), category_id)
        messages.success(request, _("Category deleted."))
    except ApiError:
        messages.error(request, _("Failed to delete category. Please try again."))
    return redirect('backoffice_categories')


# -------------------------------
# PROMOTIONS
# -------------------------------
@admin_only
def promotion_list(request):
    query = ListQuery.from_request(request, filters=('search', 'status'),
                                   sort_fields=promotions_api.SORT_FIELDS, default_sort='startedAt')
    promotions, error = [], None
    try:
        promotions = promotions_api.get_promotions(client_for(request), search=query.filters.get('search'),
                                                   sort_by=query.sort_by, sort_order=query.sort_order)
    except ApiError as e:
        error = e.message

    now = timezone.now()
    counts = {status.value: 0 for status in PromotionStatus}
    for promotion in promotions:
        counts[promotion.status(now).value] += 1
    wanted = query.filters.get('status')
    if wanted:
        promotions = [p for p in promotions if p.status(now).value == wanted]
    return render(request, 'store/backoffice/promotions.html', {
        'promotions': promotions,
        'counts': counts,
        'statuses': list(PromotionStatus),
        'query': query,
        'error': error,
    })


def _promotion_fields(request):
    return {
        'title': request.POST.get('title', '').strip(),
        'description': request.POST.get('description', '').strip() or None,
        'started_at': _parse_datetime(request.POST.get('started_at')),
        'expires_at': _parse_datetime(request.POST.get('expires_at')),
    }


@admin_only
def promotion_create(request):
    if request.method == 'POST':
        try:
            fields = _promotion_fields(request)
            if not (fields['started_at'] and fields['expires_at']):
                raise ValueError(_("Start and end dates are required."))
            if fields['expires_at'] <= fields['started_at']:
                raise ValueError(_("The promotion must end after it starts."))
            image = image_from_request(request, 'image', 'promotions')
            promotions_api.create_promotion(client_for(request), image=image, **fields)
        except (ValueError, UploadError, ApiError) as e:
            messages.error(request, str(e))
            return render(request, 'store/backoffice/promotion_form.html',
                          {'form': request.POST}, status=400)
        messages.success(request, _("Promotion created."))
        return redirect('backoffice_promotions')
    return render(request, 'store/backoffice/promotion_form.html', {'form': {}})


@admin_only
def promotion_edit(request, promotion_id):
    client = client_for(request)
    promotion = _get_or_404(promotions_api.get_promotion, client, promotion_id)
    if request.method == 'POST':
        try:
            fields = _promotion_fields(request)
            image = image_from_request(request, 'image', 'promotions')
            promotions_api.update_promotion(client, promotion_id, image=image, **fields)
            messages.success(request, _("Promotion updated."))
            return redirect('backoffice_promotions')
        except (ValueError, UploadError, ApiError) as e:
            messages.error(request, str(e))
    return render(request, 'store/backoffice/promotion_form.html', {'promotion': promotion, 'form': promotion})


@require_POST
@admin_only
def promotion_delete(request, promotion_id):
    try:
        promotions_api.delete_promotion(client_for(request), promotion_id)
        messages.success(request, _("Promotion deleted."))
    except ApiError as e:
        messages.error(request, e.message)
    return _back(request, 'backoffice_promotions')


# -------------------------------
# ORDERS / PAYMENT PROOFS
# -------------------------------
ORDER_FILTERS = ('status', 'paymentStatus', 'search', 'userId', 'deliveryId', 'dateFrom', 'dateTo')


@order_staff
def order_list(request):
    query = ListQuery.from_request(request, filters=ORDER_FILTERS,
                                   sort_fields=('createdAt', 'updatedAt', 'total'), default_sort='createdAt')
    orders, error = None, None
    try:
        orders = orders_api.get_all_orders(client_for(request), **query.params())
    except ApiError as e:
        error = e.message
    return render(request, 'store/backoffice/orders.html', {
        'orders': orders,
        'query': query,
        'statuses': list(OrderStatus),
        'payment_statuses': list(PaymentStatus),
        'error': error,
    })


@order_staff
def order_detail(request, order_id):
    client = client_for(request)
    if request.method == 'POST':
        action = request.POST.get('action')
        try:
            if action == 'assign_delivery':
                orders_api.assign_delivery(client, order_id, request.POST['delivery_user_id'])
                messages.success(request, _("Delivery assigned."))
            elif action in ('approve_proof', 'decline_proof'):
                orders_api.review_payment_proof(client, request.POST['proof_id'], action == 'approve_proof',
                                                request.POST.get('note'))
                messages.success(request, _("Payment proof reviewed."))
            else:
                messages.error(request, _("Unknown action."))
        except KeyError:
            messages.error(request, _("Missing form field."))
        except ApiError as e:
            messages.error(request, e.message)
        # refetch: the server decides the resulting order/payment status
        return redirect('backoffice_order_detail', order_id=order_id)

    order = _get_or_404(orders_api.get_order, client, order_id)
    try:
        couriers = users_api.get_users(client, role=Role.DELIVERY.value, limit=100).items
    except ApiError:
        couriers = []
    return render(request, 'store/backoffice/order_detail.html', {'order': order, 'couriers': couriers})


@order_staff
def payment_proofs(request):
    query = ListQuery.from_request(request, filters=('search',), default_sort='createdAt')
    orders, error = [], None
    try:
        page = orders_api.get_all_orders(client_for(request), paymentStatus=PaymentStatus.PENDING.value,
                                         **query.params())
        orders = [o for o in page.items if o.pending_proofs]
    except ApiError as e:
        error = e.message
    return render(request, 'store/backoffice/proofs.html', {'orders': orders, 'query': query, 'error': error})


# -------------------------------
# USERS
# -------------------------------
USER_FILTERS = ('role', 'otpVerified', 'search', 'dateFrom', 'dateTo')


@admin_only
def user_list(request):
    query = ListQuery.from_request(request, filters=USER_FILTERS, sort_fields=users_api.SORT_FIELDS,
                                   default_sort='createdAt')
    users, error = None, None
    try:
        users = users_api.get_users(client_for(request), **query.params())
    except ApiError as e:
        error = e.message
    return render(request, 'store/backoffice/users.html', {
        'users': users, 'query': query, 'roles': list(Role), 'error': error,
    })


@admin_only
def user_detail(request, user_id):
    client = client_for(request)
    if request.method == 'POST':
        try:
            users_api.change_role(client, user_id, request.POST.get('role', ''))
            messages.success(request, _("Role updated."))
        except ValueError:
            messages.error(request, _("Unknown role."))
        except ApiError as e:
            messages.error(request, e.message)
        return redirect('backoffice_user_detail', user_id=user_id)
    user = _get_or_404(users_api.get_user, client, user_id)
    return render(request, 'store/backoffice/user_detail.html', {'profile': user, 'roles': list(Role)})


# -------------------------------
# RESTOCK (order manager)
# -------------------------------
@order_staff
def restock(request):
    client = client_for(request)
    if request.method == 'POST':
        try:
            quantity = int(request.POST.get('quantity', ''))
            if quantity <= 0:
                raise ValueError
            products_api.restock_product(client, request.POST['product_id'], quantity,
                                         variant_id=request.POST.get('variant_id') or None)
            messages.success(request, _("Product restocked successfully"))
        except (KeyError, ValueError):
            messages.error(request, _("Enter a positive quantity."))
        except ApiError:
            messages.error(request, _("Error restocking product"))
        return _back(request, 'restock')

    query = ListQuery.from_request(request, filters=('search', 'category_id', 'min_price', 'max_price'), limit=20)
    products, error = None, None
    try:
        products = products_api.get_out_of_stock_products(client, page=query.page, limit=query.limit,
                                                          **query.filters)
    except ApiError:
        error = _("Error fetching out-of-stock products")
    return render(request, 'store/backoffice/restock.html', {'products': products, 'query': query, 'error': error})


# -------------------------------
# DELIVERIES
# -------------------------------
@delivery_staff
def deliveries(request):
    client = client_for(request)
    if request.method == 'POST':
        try:
            orders_api.mark_delivery_complete(client, request.POST['order_id'])
            messages.success(request, _("Delivery marked as complete."))
        except KeyError:
            messages.error(request, _("Missing form field."))
        except ApiError as e:
            messages.error(request, e.message)
        return redirect('deliveries')

    user = current_user(request.session_store)
    orders, error = None, None
    try:
        orders = orders_api.get_all_orders(client, status=OrderStatus.DELIVERING.value,
                                           deliveryId=user.id if user else None, limit=50)
    except ApiError as e:
        error = e.message
    return render(request, 'store/backoffice/deliveries.html', {'orders': orders, 'error': error})
