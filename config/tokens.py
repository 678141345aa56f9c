"""JWT endpoints for staff clients of the inventory API."""

from drf_spectacular.utils import extend_schema
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


class TokenObtainView(TokenObtainPairView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_obtain"

    @extend_schema(tags=["Auth Endpoints"], summary="Obtain access and refresh tokens")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class TokenRefreshScopedView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["Auth Endpoints"], summary="Refresh an access token")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)
