"""Cart URL routes (v1)."""

from django.urls import path

from .views import (
    CartAddItemView,
    CartClearView,
    CartConfigView,
    CartCouponView,
    CartDetailView,
    CartItemView,
    CartReconcileView,
    CartShippingQuoteView,
    CartShippingSelectView,
)

app_name = "cart"

urlpatterns = [
    path("", CartDetailView.as_view(), name="cart-detail"),
    path("items/", CartAddItemView.as_view(), name="cart-add-item"),
    path("items/<str:item_id>/", CartItemView.as_view(), name="cart-item"),
    path("clear/", CartClearView.as_view(), name="cart-clear"),
    path("coupon/", CartCouponView.as_view(), name="cart-coupon"),
    path("reconcile/", CartReconcileView.as_view(), name="cart-reconcile"),
    path("shipping/quote/", CartShippingQuoteView.as_view(), name="cart-shipping-quote"),
    path("shipping/select/", CartShippingSelectView.as_view(), name="cart-shipping-select"),
    path("config/", CartConfigView.as_view(), name="cart-config"),
]
