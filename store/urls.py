from django.urls import path
from . import account_views, backoffice_views, views

urlpatterns = [
    path('', views.home, name='home'),  # homepage
    path('about/', views.about, name='about'),
    path('contact/', views.contact, name='contact'),

    # shop + category tree
    path('shop/', views.shop, name='shop'),
    path('shop/category/<slug:slug>/', views.category_descend, name='category_descend'),
    path('shop/up/<int:index>/', views.category_ascend, name='category_ascend'),
    path('shop/all/', views.category_root, name='category_root'),
    path('product/<str:pk>/', views.product_detail, name='product_detail'),
    path('product/<str:pk>/review/', views.post_review, name='post_review'),

    # cart + checkout
    path('cart/', views.cart_view, name='cart'),
    path('cart/add/<str:product_id>/', views.add_to_cart, name='add_to_cart'),
    path('cart/item/<str:item_id>/', views.cart_item_action, name='cart_item_action'),
    path('update-cart-item/', views.update_cart_item, name='update_cart_item'),
    path('buy-now/<str:product_id>/', views.buy_now, name='buy_now'),
    path('checkout/', views.checkout, name='checkout'),
    path('orders/', views.my_orders, name='my_orders'),
    path('orders/<str:order_id>/', views.order_detail, name='order_detail'),

    # account
    path('login/', account_views.login, name='login'),
    path('register/', account_views.register, name='register'),
    path('verify/', account_views.verify_otp, name='verify_otp'),
    path('forgot-password/', account_views.forgot_password, name='forgot_password'),
    path('reset-password/', account_views.reset_password, name='reset_password'),
    path('logout/', account_views.logout, name='logout'),
    path('profile/', account_views.profile, name='profile'),

    # back office
    path('backoffice/', backoffice_views.dashboard, name='dashboard'),
    path('backoffice/products/', backoffice_views.product_list, name='backoffice_products'),
    path('backoffice/products/new/', backoffice_views.product_create, name='backoffice_product_create'),
    path('backoffice/products/<str:product_id>/', backoffice_views.product_edit, name='backoffice_product_edit'),
    path('backoffice/products/<str:product_id>/delete/', backoffice_views.product_delete,
         name='backoffice_product_delete'),
    path('backoffice/products/<str:product_id>/variants/', backoffice_views.variant_save,
         name='backoffice_variant_create'),
    path('backoffice/products/<str:product_id>/variants/<str:variant_id>/', backoffice_views.variant_save,
         name='backoffice_variant_update'),
    path('backoffice/products/<str:product_id>/variants/<str:variant_id>/delete/',
         backoffice_views.variant_delete, name='backoffice_variant_delete'),
    path('backoffice/categories/', backoffice_views.category_list, name='backoffice_categories'),
    path('backoffice/categories/new/', backoffice_views.category_create, name='backoffice_category_create'),
    path('backoffice/categories/<str:category_id>/', backoffice_views.category_edit,
         name='backoffice_category_edit'),
    path('backoffice/categories/<str:category_id>/delete/', backoffice_views.category_delete,
         name='backoffice_category_delete'),
    path('backoffice/promotions/', backoffice_views.promotion_list, name='backoffice_promotions'),
    path('backoffice/promotions/new/', backoffice_views.promotion_create, name='backoffice_promotion_create'),
    path('backoffice/promotions/<str:promotion_id>/', backoffice_views.promotion_edit,
         name='backoffice_promotion_edit'),
    path('backoffice/promotions/<str:promotion_id>/delete/', backoffice_views.promotion_delete,
         name='backoffice_promotion_delete'),
    path('backoffice/orders/', backoffice_views.order_list, name='backoffice_orders'),
    path('backoffice/orders/<str:order_id>/', backoffice_views.order_detail, name='backoffice_order_detail'),
    path('backoffice/proofs/', backoffice_views.payment_proofs, name='backoffice_proofs'),
    path('backoffice/users/', backoffice_views.user_list, name='backoffice_users'),
    path('backoffice/users/<str:user_id>/', backoffice_views.user_detail, name='backoffice_user_detail'),
    path('backoffice/restock/', backoffice_views.restock, name='restock'),
    path('backoffice/deliveries/', backoffice_views.deliveries, name='deliveries'),
]
