"""JWT authentication for the API: bearer header or HttpOnly cookie."""

from django.conf import settings
from django.middleware.csrf import CsrfViewMiddleware
from rest_framework import exceptions
from rest_framework.request import Request
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError


class CookieJWTAuthentication(JWTAuthentication):
    """Accept the access token from the ``Authorization`` header or a cookie.

    A bad header token is an error (401). A bad cookie token only means
    "not logged in", so the refresh endpoint keeps working with a stale
    access cookie. Cookie-authenticated requests must pass the CSRF check.
    """

    def authenticate(self, request: Request):
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
            if raw_token is not None:
                validated_token = self.get_validated_token(raw_token)
                return self.get_user(validated_token), validated_token

        raw_cookie = request.COOKIES.get(getattr(settings, "JWT_AUTH_COOKIE", "access_token"))
        if not raw_cookie:
            return None
        try:
            validated_token = self.get_validated_token(raw_cookie)
        except (InvalidToken, TokenError):
            return None

        self.enforce_csrf(request)
        return self.get_user(validated_token), validated_token

    def enforce_csrf(self, request: Request) -> None:
        check = CsrfViewMiddleware(lambda req: None)
        check.process_request(request._request)
        reason = check.process_view(request._request, None, (), {})
        if reason:
            raise exceptions.PermissionDenied(f"CSRF falló: {reason}")
