# storefront/urls.py
from django.urls import path

from catalog import views as v
from cart import views as cart_views
from payment import views as payment_views

urlpatterns = [
    # Home + details
    path("", v.index, name="home"),
    path("products/<str:pk>/", v.product_detail, name="product_detail"),

    # ---- CART ----
    path("cart/", cart_views.cart_view, name="cart"),
    path("cart/add/<str:product_id>/", cart_views.cart_add, name="cart_add"),
    path("cart/update/<str:item_id>/", cart_views.cart_update, name="cart_update"),
    path("cart/remove/<str:item_id>/", cart_views.cart_remove, name="cart_remove"),
    path("api/cart/count/", cart_views.cart_count, name="cart_count"),

    # ---- MOCK CHECKOUT ----
    path("payment/", payment_views.payment_page, name="payment"),
    path("payment/processing/", payment_views.payment_processing, name="payment_processing"),
    path("payment/complete/", payment_views.payment_complete, name="payment_complete"),
]
