"""Admin registration for catalog models.

Stock is read-only here: it changes only through ledger movements.
"""

from django.contrib import admin

from .models import Product, ProductVariant


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ("sku", "label", "price", "offer_price", "weight", "stock", "is_active")
    readonly_fields = ("stock",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "price", "offer_price", "stock", "is_active")
    search_fields = ("name", "slug", "sku")
    list_filter = ("is_active",)
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("stock",)
    inlines = [ProductVariantInline]


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ("product", "sku", "label", "price", "stock", "is_active")
    search_fields = ("sku", "product__name")
    list_filter = ("is_active",)
    readonly_fields = ("stock",)
