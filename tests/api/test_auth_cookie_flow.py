import pytest
from django.conf import settings

pytestmark = pytest.mark.django_db

LOGIN_URL = "/api/v1/auth/token/"


def _login(api_client, email="closer@test.com", password="testpass123"):
    return api_client.post(LOGIN_URL, {"email": email, "password": password}, format="json")


def test_login_sets_http_only_cookies(api_client, closer_user):
    response = _login(api_client)

    assert response.status_code == 200
    assert response.data["user"]["email"] == "closer@test.com"
    assert response.data["user"]["role"] == "closer"
    assert "access" not in response.data

    access = response.cookies[settings.JWT_AUTH_COOKIE]
    refresh = response.cookies[settings.JWT_AUTH_REFRESH_COOKIE]
    assert access["httponly"]
    assert refresh["httponly"]
    assert access["samesite"] == "Lax"


def test_cookie_authenticates_api_requests(api_client, closer_user):
    _login(api_client)

    response = api_client.get("/api/v1/auth/me/")

    assert response.status_code == 200
    assert response.data["email"] == "closer@test.com"
    assert response.data["is_admin"] is False


def test_wrong_password(api_client, closer_user):
    response = _login(api_client, password="nope")

    assert response.status_code == 401
    assert settings.JWT_AUTH_COOKIE not in response.cookies


def test_refresh_reads_the_cookie(api_client, closer_user):
    _login(api_client)

    response = api_client.post("/api/v1/auth/token/refresh/", {}, format="json")

    assert response.status_code == 200
    assert response.data == {"detail": "Token renovado."}
    assert response.cookies[settings.JWT_AUTH_COOKIE].value


def test_stale_access_cookie_does_not_block_refresh(api_client, closer_user):
    _login(api_client)
    api_client.cookies[settings.JWT_AUTH_COOKIE] = "not-a-token"

    assert api_client.get("/api/v1/auth/me/").status_code == 401
    assert api_client.post("/api/v1/auth/token/refresh/", {}, format="json").status_code == 200


def test_bad_bearer_header_is_rejected(api_client, closer_user):
    api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")

    assert api_client.get("/api/v1/auth/me/").status_code == 401


def test_logout_clears_cookies(api_client, closer_user):
    _login(api_client)

    response = api_client.post("/api/v1/auth/logout/")

    assert response.status_code == 204
    assert response.cookies[settings.JWT_AUTH_COOKIE].value == ""
    assert api_client.get("/api/v1/auth/me/").status_code == 401
