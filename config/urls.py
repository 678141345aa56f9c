"""
URL configuration for the storefront ledger project.

Versioned API routes live under /api/v1/; schema and Swagger UI under /api/.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health
from .tokens import TokenObtainView, TokenRefreshScopedView

admin.site.site_header = "Storefront Ledger Admin"
admin.site.index_title = "Admin"

urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    # Versioned v1 routes only
    path("api/v1/auth/token/", TokenObtainView.as_view(), name="token_obtain"),
    path("api/v1/auth/token/refresh/", TokenRefreshScopedView.as_view(), name="token_refresh"),
    path("api/v1/inventory/", include("inventory.urls")),
    path("api/v1/cart/", include("cart.urls")),
]
