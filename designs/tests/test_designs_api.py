from unittest.mock import patch

import pytest
from creators.tests.factories import CreatorFactory
from designs.models import Design
from designs.providers import ProviderError
from designs.tests.factories import DesignFactory
from orders.models import Order
from orders.tests.factories import OrderFactory, OrderItemFactory
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db

PNG = b"\x89PNG\r\n\x1a\nfake"


@patch("designs.providers.generate_image", return_value=PNG)
def test_generate_stores_image_and_returns_url(mock_generate):
    resp = APIClient().post(
        "/api/v1/designs/generate/", {"prompt": "a raccoon on a skateboard", "userId": "u-1"}, format="json"
    )
    assert resp.status_code == 201
    body = resp.json()
    design = Design.objects.get(id=body["id"])
    assert body["imageUrl"] == design.image_url
    assert design.image_url.startswith("http://testserver/media/designs/")
    assert design.user_key == "u-1"
    mock_generate.assert_called_once_with("a raccoon on a skateboard", reference_url=None)


@patch("designs.providers.generate_image", return_value=PNG)
def test_generate_reuses_previous_result_unless_regenerate(mock_generate):
    client = APIClient()
    payload = {"prompt": "cosmic cat", "userId": "u-2"}
    first = client.post("/api/v1/designs/generate/", payload, format="json").json()
    second = client.post("/api/v1/designs/generate/", payload, format="json").json()
    assert first["id"] == second["id"]
    assert mock_generate.call_count == 1

    third = client.post("/api/v1/designs/generate/", {**payload, "regenerate": True}, format="json").json()
    assert third["id"] != first["id"]
    assert mock_generate.call_count == 2


@patch("designs.providers.generate_image", return_value=PNG)
def test_generate_in_creator_mode_attaches_creator(mock_generate):
    creator = CreatorFactory()
    client = APIClient()
    client.force_authenticate(user=creator.user)
    resp = client.post("/api/v1/designs/generate/", {"prompt": "neon frog", "creatorMode": True}, format="json")
    assert resp.status_code == 201
    assert Design.objects.get(id=resp.json()["id"]).creator == creator


def test_generate_creator_mode_requires_creator():
    resp = APIClient().post("/api/v1/designs/generate/", {"prompt": "x", "creatorMode": True}, format="json")
    assert resp.status_code == 403


def test_generate_rejects_blank_prompt():
    resp = APIClient().post("/api/v1/designs/generate/", {"prompt": "   "}, format="json")
    assert resp.status_code == 400
    assert Design.objects.count() == 0


@patch("designs.providers.generate_image", side_effect=ProviderError("boom"))
def test_generate_provider_failure_is_502(mock_generate):
    resp = APIClient().post("/api/v1/designs/generate/", {"prompt": "a cat"}, format="json")
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Image generation failed."
    assert Design.objects.count() == 0


@patch("designs.providers.remove_background", return_value=PNG)
def test_remove_background_is_idempotent(mock_remove):
    design = DesignFactory()
    client = APIClient()
    first = client.post("/api/v1/designs/remove-background/", {"imageId": design.id}, format="json")
    assert first.status_code == 200
    url = first.json()["noBackgroundUrl"]
    assert "/media/designs/no-background/" in url

    second = client.post("/api/v1/designs/remove-background/", {"imageId": design.id}, format="json")
    assert second.json()["noBackgroundUrl"] == url
    mock_remove.assert_called_once_with(design.image_url)
    design.refresh_from_db()
    assert design.effective_image_url == url


def test_remove_background_unknown_design_404():
    resp = APIClient().post("/api/v1/designs/remove-background/", {"imageId": 999}, format="json")
    assert resp.status_code == 404


@patch("designs.providers.remove_background", side_effect=ProviderError("quota"))
def test_remove_background_provider_failure_is_502(mock_remove):
    design = DesignFactory()
    resp = APIClient().post("/api/v1/designs/remove-background/", {"imageId": design.id}, format="json")
    assert resp.status_code == 502


def test_recent_designs_paginates_public_designs():
    for _ in range(3):
        DesignFactory()
    DesignFactory(is_public=False)
    resp = APIClient().get("/api/v1/designs/recent/", {"page": 2, "limit": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["designs"]) == 1
    assert body["pagination"] == {"currentPage": 2, "pageSize": 2, "totalItems": 3, "totalPages": 2}


def test_user_designs_only_for_that_key():
    mine = DesignFactory(user_key="abc")
    DesignFactory(user_key="other")
    resp = APIClient().get("/api/v1/designs/user/abc/")
    assert [d["id"] for d in resp.json()["designs"]] == [mine.id]


def test_purchased_designs_by_email_excludes_unpaid_orders():
    paid = OrderFactory(email="buyer@example.com", status=Order.STATUS_PAID)
    pending = OrderFactory(email="buyer@example.com")
    bought = OrderItemFactory(order=paid).design
    OrderItemFactory(order=pending)

    client = APIClient()
    resp = client.get("/api/v1/designs/purchased/", {"email": "BUYER@example.com"})
    assert resp.status_code == 200
    assert [d["id"] for d in resp.json()["designs"]] == [bought.id]
    assert client.get("/api/v1/designs/purchased/").status_code == 400
