from decimal import Decimal

import pytest
from creators.tests.factories import CreatorFactory
from designs.tests.factories import DesignFactory
from drops.tests.factories import DropFactory
from orders.models import Order
from orders.tests.factories import OrderFactory
from rest_framework.test import APIClient
from users.tests.factories import UserFactory

pytestmark = pytest.mark.django_db


def _client(creator):
    client = APIClient()
    client.force_authenticate(user=creator.user)
    return client


def test_profile_update_completes_onboarding():
    creator = CreatorFactory(store_name="creator-1a2b3c4d", is_onboarded=False)
    resp = _client(creator).put(
        "/api/v1/creators/profile/",
        {"name": "Ada", "storeName": "Ada-Draws", "bio": "Weird little stickers"},
        format="json",
    )
    assert resp.status_code == 200
    body = resp.json()["creator"]
    assert body["storeName"] == "ada-draws"
    assert body["needsOnboarding"] is False
    creator.refresh_from_db()
    assert creator.is_onboarded is True


def test_profile_update_rejects_taken_store_name():
    CreatorFactory(store_name="ada-draws")
    creator = CreatorFactory()
    resp = _client(creator).put(
        "/api/v1/creators/profile/", {"name": "Ada", "storeName": "ada-draws"}, format="json"
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "This store name is already taken."


def test_profile_requires_creator_account():
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    resp = client.put("/api/v1/creators/profile/", {"name": "x", "storeName": "abc"}, format="json")
    assert resp.status_code == 403


def test_analytics_counts_sold_orders_and_payout():
    creator = CreatorFactory()
    drop = DropFactory(creator=creator, published=True)
    DropFactory(creator=creator)
    DesignFactory(creator=creator)
    OrderFactory(drop=drop, status=Order.STATUS_PAID, subtotal=Decimal("16.80"), total=Decimal("16.80"))
    OrderFactory(drop=drop, status=Order.STATUS_PENDING, subtotal=Decimal("99.00"), total=Decimal("99.00"))

    resp = _client(creator).get("/api/v1/creators/me/analytics/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["drops"] == {"total": 2, "published": 1, "draft": 1}
    assert body["designs"] == {"total": 1}
    assert body["orders"] == {"total": 1}
    assert body["earnings"] == {"totalGross": "16.80", "totalPayout": "13.44"}


def test_images_lists_only_own_designs():
    creator = CreatorFactory()
    mine = DesignFactory(creator=creator)
    DesignFactory(creator=CreatorFactory())
    resp = _client(creator).get("/api/v1/creators/me/images/")
    assert resp.status_code == 200
    assert [d["id"] for d in resp.json()["images"]] == [mine.id]


def test_public_storefront_hides_drafts_and_email():
    creator = CreatorFactory(store_name="ada-draws")
    published = DropFactory(creator=creator, published=True)
    DropFactory(creator=creator)
    resp = APIClient().get("/api/v1/creators/ada-draws/")
    assert resp.status_code == 200
    body = resp.json()
    assert "email" not in body["creator"]
    assert [d["id"] for d in body["drops"]] == [published.id]


def test_public_storefront_unknown_store_404():
    assert APIClient().get("/api/v1/creators/nobody-here/").status_code == 404
