import pytest
from creators.models import Creator
from creators.tests.factories import CreatorFactory
from django.contrib.auth import get_user_model
from django.core import mail
from rest_framework.test import APIClient
from users.tokens import magic_link_token

pytestmark = pytest.mark.django_db


def test_magic_link_request_creates_creator_and_sends_email():
    client = APIClient()
    resp = client.post("/api/v1/auth/magic-link/", {"email": " New@Example.com "}, format="json")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "isNewCreator": True}

    user = get_user_model().objects.get(email="new@example.com")
    assert not user.has_usable_password()
    creator = Creator.objects.get(user=user)
    assert creator.store_name.startswith("creator-")
    assert len(mail.outbox) == 1
    assert "http://frontend.test/creator/verify?" in mail.outbox[0].body


def test_magic_link_request_for_onboarded_creator_is_not_new():
    creator = CreatorFactory()
    resp = APIClient().post("/api/v1/auth/magic-link/", {"email": creator.user.email}, format="json")
    assert resp.status_code == 200
    assert resp.json()["isNewCreator"] is False
    assert Creator.objects.count() == 1


def test_magic_link_request_rejects_invalid_email():
    resp = APIClient().post("/api/v1/auth/magic-link/", {"email": "nope"}, format="json")
    assert resp.status_code == 400
    assert len(mail.outbox) == 0


def test_verify_issues_tokens_and_link_is_single_use():
    creator = CreatorFactory()
    user = creator.user
    token = magic_link_token.make_token(user)
    client = APIClient()

    resp = client.get("/api/v1/auth/verify/", {"email": user.email, "token": token})
    assert resp.status_code == 200
    body = resp.json()
    assert body["creator"]["storeName"] == creator.store_name
    assert body["creator"]["isVerified"] is True
    assert body["sessionToken"]
    assert body["refreshToken"]

    again = client.get("/api/v1/auth/verify/", {"email": user.email, "token": token})
    assert again.status_code == 400
    assert again.json()["detail"] == "Invalid or expired link."


def test_verify_rejects_bad_token_and_missing_params():
    creator = CreatorFactory()
    client = APIClient()
    bad = client.get("/api/v1/auth/verify/", {"email": creator.user.email, "token": "1-abc"})
    assert bad.status_code == 400
    missing = client.get("/api/v1/auth/verify/")
    assert missing.status_code == 400


def test_session_token_authenticates_current_creator_and_logout_blacklists():
    creator = CreatorFactory()
    token = magic_link_token.make_token(creator.user)
    client = APIClient()
    session = client.get("/api/v1/auth/verify/", {"email": creator.user.email, "token": token}).json()

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {session['sessionToken']}")
    me = client.get("/api/v1/auth/me/")
    assert me.status_code == 200
    assert me.json()["creator"]["email"] == creator.user.email

    out = client.post("/api/v1/auth/logout/", {"refresh": session["refreshToken"]}, format="json")
    assert out.status_code == 200
    refresh = client.post("/api/v1/auth/refresh/", {"refresh": session["refreshToken"]}, format="json")
    assert refresh.status_code == 401


def test_current_creator_requires_authentication():
    assert APIClient().get("/api/v1/auth/me/").status_code == 401
