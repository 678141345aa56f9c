"""Admin registrations for inventory app."""

from django.contrib import admin

from .models import LedgerEntry


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "product",
        "variant",
        "kind",
        "signed_quantity",
        "stock_before",
        "stock_after",
        "reference",
        "actor",
        "created_at",
    )
    list_filter = ("kind",)
    search_fields = ("product__sku", "variant__sku", "reference", "reason")

    # Movements are recorded through inventory.services only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# EOF
