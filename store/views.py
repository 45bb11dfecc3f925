import json
import logging
from urllib.parse import urlencode

from anymail.message import AnymailMessage
from django.conf import settings
from django.contrib import messages
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.html import escape
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _
from django.views.decorators.http import require_POST

from .api import ApiError, client_for
from .api import cart as cart_api
from .api import categories as categories_api
from .api import orders as orders_api
from .api import products as products_api
from .api import promotions as promotions_api
from .api import reviews as reviews_api
from .api.auth import current_user
from .cart import CartAction, CartController
from .categories import SESSION_KEY as CATEGORY_SESSION_KEY
from .categories import CategoryNavigator
from .checkout import SESSION_KEY as CHECKOUT_SESSION_KEY
from .checkout import BuyNow, CheckoutFlow, PaymentMethod
from .guards import login_required
from .listing import ListQuery
from .schemas import Cart, OrderStatus, PaymentStatus, PromotionStatus
from .store_utils import remember_cart
from .uploads import UploadError, upload_image

logger = logging.getLogger(__name__)

PRODUCT_SORTS = (
    ('NEWEST', 'Newest'),
    ('OLDEST', 'Oldest'),
    ('PRICE_ASC', 'Price: low to high'),
    ('PRICE_DESC', 'Price: high to low'),
)


def _safe_next(request, default):
    target = request.POST.get('next') or request.GET.get('next')
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return target
    return default


def _notify(request, outcome):
    getattr(messages, outcome.level)(request, outcome.message)


# -------------------------------
# Basic Pages
# -------------------------------
def home(request):
    client = client_for(request)
    context = {'promotions': [], 'categories': [], 'products': [], 'error': None}
    try:
        context['promotions'] = [
            p for p in promotions_api.get_promotions(client)
            if p.status() is PromotionStatus.ACTIVE
        ]
        context['categories'] = categories_api.get_categories(client)
        context['products'] = products_api.get_products(client, page_size=8).items
    except ApiError as e:
        context['error'] = e.message
    return render(request, 'store/home.html', context)


def about(request):
    return render(request, 'store/about.html')


# -------------------------------
# SHOP / CATEGORIES
# -------------------------------
def _navigator(request, client):
    return CategoryNavigator.from_session(client, request.session.get(CATEGORY_SESSION_KEY))


def _save_navigator(request, navigator):
    request.session[CATEGORY_SESSION_KEY] = navigator.to_session()


def shop(request):
    client = client_for(request)
    navigator = _navigator(request, client)
    navigator.reload()

    data = request.GET
    category_slug = data.get('category') or (navigator.current.slug if navigator.current else None)
    filters = {
        'search': data.get('search', '').strip() or None,
        'category_slug': category_slug,
        'min_price': data.get('min_price') or None,
        'max_price': data.get('max_price') or None,
        'min_rating': data.get('min_rating') or None,
        'max_rating': data.get('max_rating') or None,
        'sort': data.get('sort', 'NEWEST'),
    }
    query = ListQuery.from_request(request, filters=('search', 'category', 'min_price', 'max_price',
                                                      'min_rating', 'max_rating', 'sort'), limit=12)
    products, error = None, None
    try:
        products = products_api.get_products(client, page=query.page, page_size=query.limit, **filters)
    except ApiError as e:
        error = e.message

    return render(request, 'store/shop.html', {
        'navigator': navigator,
        'products': products,
        'query': query,
        'sorts': PRODUCT_SORTS,
        'error': error,
    })


def category_descend(request, slug):
    client = client_for(request)
    navigator = _navigator(request, client)
    navigator.reload()
    category = next((c for c in navigator.categories if c.slug == slug), None)
    if category is None:
        messages.error(request, _("That category is no longer available."))
    elif not navigator.descend(category):
        messages.error(request, navigator.error)
    _save_navigator(request, navigator)
    return redirect(reverse('shop'))


def category_ascend(request, index):
    client = client_for(request)
    navigator = _navigator(request, client)
    if not navigator.ascend_to(index):
        messages.error(request, navigator.error)
    _save_navigator(request, navigator)
    return redirect(reverse('shop'))


def category_root(request):
    return category_ascend(request, -1)


def product_detail(request, pk):
    client = client_for(request)
    try:
        product = products_api.get_product(client, pk)
    except ApiError as e:
        if e.status == 404:
            raise Http404(e.message)
        messages.error(request, e.message)
        return redirect('shop')

    variant = product.variant(request.GET.get('variant'))
    reviews, can_review = [], False
    try:
        reviews = reviews_api.get_reviews(client, product.id)
        if current_user(request.session_store):
            can_review = reviews_api.can_review(client, product.id)
    except ApiError as e:
        logger.info("Reviews unavailable for %s: %s", product.id, e)

    return render(request, 'store/product_details.html', {
        'product': product,
        'variant': variant,
        'price': product.display_price(variant.id if variant else None),
        'stock': product.display_stock(variant.id if variant else None),
        'reviews': reviews,
        'can_review': can_review,
    })


@require_POST
@login_required
def post_review(request, pk):
    try:
        rating = int(request.POST.get('rating', ''))
    except ValueError:
        rating = 0
    if not 1 <= rating <= 5:
        messages.error(request, _("Please choose a rating from 1 to 5."))
        return redirect('product_detail', pk=pk)
    try:
        reviews_api.post_review(client_for(request), pk, rating,
                                request.POST.get('review_text', '').strip())
        messages.success(request, _("Thanks for your review."))
    except ApiError as e:
        messages.error(request, e.message)
    return redirect('product_detail', pk=pk)


# -------------------------------
# CART SYSTEM
# -------------------------------
@require_POST
def add_to_cart(request, product_id):
    variant_id = request.POST.get('variant_id') or None
    try:
        quantity = max(1, int(request.POST.get('quantity', 1)))
    except ValueError:
        quantity = 1
    client = client_for(request)
    try:
        cart_api.add_to_cart(client, product_id, variant_id=variant_id, quantity=quantity)
        remember_cart(request, cart_api.get_cart(client))
        messages.success(request, _("Added to cart."))
    except ApiError as e:
        messages.error(request, e.message)
    return redirect(_safe_next(request, reverse('product_detail', args=[product_id])))


@require_POST
def buy_now(request, product_id):
    params = {'product': product_id}
    if request.POST.get('variant_id'):
        params['variant'] = request.POST['variant_id']
    params['quantity'] = request.POST.get('quantity', 1)
    return redirect(f"{reverse('checkout')}?{urlencode(params)}")


def cart_view(request):
    client = client_for(request)
    cart, error = Cart(), None
    try:
        cart = remember_cart(request, CartController(client, cart_api.get_cart(client)).cart)
    except ApiError as e:
        error = e.message
        messages.error(request, _("Failed to load your cart."))
    confirm = request.GET.get('confirm')
    return render(request, 'store/cart.html', {
        'cart': cart,
        'error': error,
        'confirm_item': cart.item(confirm) if confirm else None,
    })


def _apply_cart_action(request, item_id, action):
    client = client_for(request)
    controller = CartController(client, cart_api.get_cart(client))
    if action == 'increase':
        result = controller.increment(item_id)
    elif action == 'decrease':
        result = controller.decrement(item_id)
    elif action == 'remove':
        result = controller.remove(item_id)
    else:
        raise ValueError(action)
    remember_cart(request, controller.cart)
    return controller.cart, result


@require_POST
def cart_item_action(request, item_id):
    action = request.POST.get('action', '')
    try:
        cart, result = _apply_cart_action(request, item_id, action)
    except (KeyError, ValueError):
        messages.error(request, _("That item is no longer in your cart."))
        return redirect('cart')
    except ApiError:
        if action == 'remove':
            messages.error(request, _("Failed to remove the item."))
        else:
            messages.error(request, _("Failed to update the quantity."))
        return redirect('cart')

    if result is CartAction.CONFIRM_REMOVAL:
        return redirect(f"{reverse('cart')}?confirm={item_id}")
    if result is CartAction.REMOVED:
        messages.success(request, _("Item removed from cart."))
    else:
        messages.success(request, _("Quantity updated."))
    return redirect('cart')


@require_POST
def update_cart_item(request):
    try:
        data = json.loads(request.body)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        item_id = str(data.get('item_id', ''))
        action = data.get('action')
        cart, result = _apply_cart_action(request, item_id, action)
    except (ValueError, KeyError):
        return JsonResponse({'status': 'error', 'message': 'Invalid request'}, status=400)
    except ApiError as e:
        return JsonResponse({'status': 'error', 'message': e.message}, status=e.status or 502)

    if result is CartAction.CONFIRM_REMOVAL:
        return JsonResponse({'status': 'confirm', 'item_id': item_id})
    return JsonResponse({
        'status': 'success',
        'cart': cart.model_dump(by_alias=True, mode='json'),
        'cart_count': cart.number_of_items,
    })


# -------------------------------
# CHECKOUT
# -------------------------------
def _buy_now_from(request):
    data = request.GET if request.method == 'GET' else request.POST
    product_id = data.get('product')
    if not product_id:
        return None
    try:
        quantity = max(1, int(data.get('quantity', 1)))
    except ValueError:
        quantity = 1
    return BuyNow(product_id=product_id, variant_id=data.get('variant') or None, quantity=quantity)


def checkout(request):
    client = client_for(request)
    flow = CheckoutFlow.from_session(client, request.session.get(CHECKOUT_SESSION_KEY))
    buy_now_item = _buy_now_from(request)

    if request.method == 'POST':
        action = request.POST.get('action', 'finish')
        if action == 'finish':
            cart = None
            if buy_now_item is None:
                try:
                    cart = cart_api.get_cart(client)
                except ApiError:
                    messages.error(request, _("Failed to load your cart."))
                    return redirect('checkout')
            outcome = flow.finish_payment(request.POST.get('payment_method'), cart=cart, buy_now=buy_now_item)
        elif action == 'verify':
            outcome = flow.verify_payment()
        elif action == 'retry':
            outcome = flow.retry_payment()
        else:
            request.session.pop(CHECKOUT_SESSION_KEY, None)
            return redirect('checkout')

        _notify(request, outcome)
        if flow.finished:
            request.session.pop(CHECKOUT_SESSION_KEY, None)
            if buy_now_item is None:
                request.session['cart_count'] = 0
        else:
            request.session[CHECKOUT_SESSION_KEY] = flow.to_session()
        if outcome.payment_url:
            request.session['open_payment_url'] = outcome.payment_url
        if outcome.redirect:
            return redirect(outcome.redirect)
        return redirect(request.get_full_path())

    context = {
        'flow': flow,
        'methods': list(PaymentMethod),
        'open_payment_url': request.session.pop('open_payment_url', None),
        'buy_now': None,
        'cart': Cart(),
    }
    try:
        if buy_now_item is not None:
            product = products_api.get_product(client, buy_now_item.product_id)
            variant = product.variant(buy_now_item.variant_id)
            price = product.display_price(variant.id if variant else None)
            context['buy_now'] = {
                'item': buy_now_item,
                'product': product,
                'variant': variant,
                'total': price * buy_now_item.quantity,
            }
        else:
            context['cart'] = remember_cart(request, CartController(client, cart_api.get_cart(client)).cart)
    except ApiError as e:
        messages.error(request, e.message)
    return render(request, 'store/checkout.html', context)


# -------------------------------
# ORDERS
# -------------------------------
@login_required
def my_orders(request):
    query = ListQuery.from_request(request, filters=('status', 'payment_status', 'search'),
                                   sort_fields=('createdAt', 'updatedAt'), default_sort='createdAt')
    orders, error = None, None
    try:
        orders = orders_api.get_my_orders(
            client_for(request),
            status=query.filters.get('status'),
            payment_status=query.filters.get('payment_status'),
            search=query.filters.get('search'),
            page=query.page,
            limit=query.limit,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )
    except ApiError as e:
        error = e.message
    return render(request, 'store/my_orders.html', {
        'orders': orders,
        'query': query,
        'error': error,
        'statuses': list(OrderStatus),
        'payment_statuses': list(PaymentStatus),
    })


@login_required
def order_detail(request, order_id):
    client = client_for(request)
    if request.method == 'POST':
        action = request.POST.get('action')
        try:
            if action == 'upload_proof' and request.FILES.get('proof'):
                image_url = upload_image(request.FILES['proof'], 'payment_proofs')
                orders_api.upload_payment_proof(client, order_id, image_url, request.POST.get('note'))
                messages.success(request, _("Payment proof uploaded successfully."))
            elif action in ('approve_delivery', 'reject_delivery'):
                orders_api.customer_approve_delivery(client, order_id, action == 'approve_delivery',
                                                     request.POST.get('note'))
                messages.success(request, _("Thanks for confirming your delivery."))
            else:
                messages.error(request, _("Nothing to submit."))
        except UploadError as e:
            messages.error(request, str(e))
        except ApiError as e:
            messages.error(request, e.message)
        return redirect('order_detail', order_id=order_id)

    try:
        order = orders_api.get_order(client, order_id)
    except ApiError as e:
        if e.status == 404:
            raise Http404(e.message)
        messages.error(request, e.message)
        return redirect('my_orders')
    return render(request, 'store/order_detail.html', {'order': order})


# -------------------------------
# CONTACT
# -------------------------------
def contact(request):
    if request.method == 'POST':
        name = request.POST.get('name', '').strip()
        email = request.POST.get('email', '').strip()
        message_text = request.POST.get('message', '').strip()
        if not (name and email and message_text):
            messages.error(request, _("Please fill in every field."))
            return render(request, 'store/contact.html', {'name': name, 'email': email,
                                                          'message': message_text}, status=400)

        body_html = escape(message_text).replace('\n', '<br>')
        try:
            admin_msg = AnymailMessage(
                subject=f"Contact Form: {name}",
                body=message_text,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[settings.CONTACT_RECEIVER],
                reply_to=[email],
            )
            admin_msg.attach_alternative(
                f"<p><strong>Name:</strong> {escape(name)}</p>"
                f"<p><strong>Email:</strong> {escape(email)}</p>"
                f"<p><strong>Message:</strong><br>{body_html}</p>",
                "text/html",
            )
            admin_msg.send()

            confirm_msg = AnymailMessage(
                subject=_("Thanks for contacting Zumbara Shop!"),
                body=_("We received your message and will get back to you soon.") + "\n\n" + message_text,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[email],
            )
            confirm_msg.send()
            success = True
        except Exception:
            logger.exception("Contact message from %s could not be sent", email)
            success = False

        return render(request, 'store/contact.html', {'success': success})

    return render(request, 'store/contact.html')
