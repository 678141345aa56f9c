"""Admin registrations for coupons."""

from django.contrib import admin

from .models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "kind", "value", "starts_at", "ends_at", "is_active", "times_used", "usage_limit")
    list_filter = ("kind", "is_active")
    search_fields = ("code", "description")
    readonly_fields = ("times_used", "created_at", "updated_at")
