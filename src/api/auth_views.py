"""Token endpoints. Tokens travel in HttpOnly cookies, optionally in the body."""

import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from api.v1.serializers import AgencyTokenObtainPairSerializer

logger = logging.getLogger("agency")


class SafeScopedRateThrottle(ScopedRateThrottle):
    """Scoped throttle with a strict fallback when the scope has no rate."""

    def get_rate(self):
        try:
            return super().get_rate()
        except ImproperlyConfigured:
            logger.warning("Throttle scope '%s' has no rate configured, using 5/min.", self.scope)
            return "5/min"


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": getattr(settings, "JWT_AUTH_COOKIE_SECURE", not settings.DEBUG),
        "samesite": getattr(settings, "JWT_AUTH_COOKIE_SAMESITE", "Lax"),
        "path": getattr(settings, "JWT_AUTH_COOKIE_PATH", "/"),
        "domain": getattr(settings, "JWT_AUTH_COOKIE_DOMAIN", None),
    }


def _seconds(delta: timedelta) -> int:
    return int(delta.total_seconds())


def set_auth_cookies(response: Response, *, access: str, refresh: str | None) -> None:
    options = _cookie_options()
    response.set_cookie(
        getattr(settings, "JWT_AUTH_COOKIE", "access_token"),
        access,
        max_age=_seconds(settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]),
        **options,
    )
    if refresh:
        response.set_cookie(
            getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token"),
            refresh,
            max_age=_seconds(settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"]),
            **options,
        )


def clear_auth_cookies(response: Response) -> None:
    path = getattr(settings, "JWT_AUTH_COOKIE_PATH", "/")
    domain = getattr(settings, "JWT_AUTH_COOKIE_DOMAIN", None)
    response.delete_cookie(getattr(settings, "JWT_AUTH_COOKIE", "access_token"), path=path, domain=domain)
    response.delete_cookie(getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token"), path=path, domain=domain)


class CookieTokenObtainPairView(TokenObtainPairView):
    """Log in with email and password."""

    serializer_class = AgencyTokenObtainPairSerializer
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_burst"
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated = serializer.validated_data

        body = {"user": validated["user"]}
        if getattr(settings, "JWT_RETURN_TOKENS_IN_BODY", False):
            body.update({"access": validated["access"], "refresh": validated["refresh"]})

        response = Response(body, status=status.HTTP_200_OK)
        set_auth_cookies(response, access=validated["access"], refresh=validated["refresh"])
        logger.info("User %s logged in", validated["user"]["email"])
        return response


class CookieTokenRefreshView(TokenRefreshView):
    """Issue a new access token from the refresh token (body or cookie)."""

    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_sustained"
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        payload = request.data.copy()
        if not payload.get("refresh"):
            cookie_token = request.COOKIES.get(getattr(settings, "JWT_AUTH_REFRESH_COOKIE", "refresh_token"))
            if cookie_token:
                payload["refresh"] = cookie_token

        serializer = self.get_serializer(data=payload)
        serializer.is_valid(raise_exception=True)
        access = serializer.validated_data["access"]
        refresh = serializer.validated_data.get("refresh", payload.get("refresh"))

        body = {"detail": "Token renovado."}
        if getattr(settings, "JWT_RETURN_TOKENS_IN_BODY", False):
            body.update({"access": access, "refresh": refresh})

        response = Response(body, status=status.HTTP_200_OK)
        set_auth_cookies(response, access=access, refresh=refresh)
        return response


class LogoutAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        response = Response(status=status.HTTP_204_NO_CONTENT)
        clear_auth_cookies(response)
        return response
