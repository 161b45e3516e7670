from unittest.mock import patch

import pytest
from creators.tests.factories import CreatorFactory
from designs.tests.factories import DesignFactory
from drops.models import Drop
from drops.tests.factories import DropDesignFactory, DropFactory, PackFactory
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def _client(creator):
    client = APIClient()
    client.force_authenticate(user=creator.user)
    return client


def test_creator_builds_and_publishes_a_drop():
    creator = CreatorFactory()
    client = _client(creator)
    designs = [DesignFactory(creator=creator) for _ in range(6)]

    created = client.post("/api/v1/drops/", {"title": "Spooky Season", "description": "Ghosts"}, format="json")
    assert created.status_code == 201
    drop_id = created.json()["drop"]["id"]
    assert created.json()["drop"]["slug"] == "spooky-season"

    for index, design in enumerate(designs):
        resp = client.post(
            f"/api/v1/drops/{drop_id}/designs/", {"imageId": design.id, "isHero": index == 2}, format="json"
        )
        assert resp.status_code == 201

    packs = client.post(f"/api/v1/drops/{drop_id}/default-packs/")
    assert packs.status_code == 201
    assert {p["type"] for p in packs.json()["packs"]} == {"BUILD_A_PACK", "FULL_SET"}

    published = client.post(f"/api/v1/drops/{drop_id}/publish/")
    assert published.status_code == 200
    body = published.json()["drop"]
    assert body["status"] == "PUBLISHED"
    assert body["heroImage"] == designs[2].image_url
    assert body["_count"] == {"designs": 6, "orders": 0}

    listing = client.get("/api/v1/drops/")
    assert [d["id"] for d in listing.json()["drops"]] == [drop_id]


def test_publish_failure_lists_details():
    creator = CreatorFactory()
    drop = DropFactory(creator=creator)
    resp = _client(creator).post(f"/api/v1/drops/{drop.id}/publish/")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Drop cannot be published."
    assert "Add at least one design." in resp.json()["details"]


def test_other_creators_drop_is_not_found():
    drop = DropFactory()
    client = _client(CreatorFactory())
    assert client.get(f"/api/v1/drops/{drop.id}/").status_code == 404
    assert client.post(f"/api/v1/drops/{drop.id}/publish/").status_code == 404


def test_drop_endpoints_require_creator():
    assert APIClient().get("/api/v1/drops/").status_code == 401


def test_remove_design_and_custom_pack():
    creator = CreatorFactory()
    drop = DropFactory(creator=creator)
    drop_design = DropDesignFactory(drop=drop)
    client = _client(creator)

    pack = client.post(
        f"/api/v1/drops/{drop.id}/packs/",
        {"type": "BUILD_A_PACK", "name": "Pick 2", "description": "Any two", "designCount": 2, "price": "5.00"},
        format="json",
    )
    assert pack.status_code == 201
    assert pack.json()["description"] == "Any two"
    assert pack.json()["price"] == "5.00"

    assert client.delete(f"/api/v1/drops/{drop.id}/designs/{drop_design.id}/").status_code == 204
    assert client.delete(f"/api/v1/drops/{drop.id}/designs/{drop_design.id}/").status_code == 404


def test_patch_and_archive():
    creator = CreatorFactory()
    drop = DropFactory(creator=creator)
    client = _client(creator)
    resp = client.patch(f"/api/v1/drops/{drop.id}/", {"title": "Renamed Drop"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["drop"]["slug"] == "renamed-drop"

    archived = client.post(f"/api/v1/drops/{drop.id}/archive/")
    assert archived.json()["drop"]["status"] == "ARCHIVED"
    assert client.patch(f"/api/v1/drops/{drop.id}/", {"title": "Again"}, format="json").status_code == 400


def _published_drop():
    creator = CreatorFactory(store_name="ada-draws")
    drop = DropFactory(creator=creator, slug="spooky", published=True)
    designs = [DropDesignFactory(drop=drop).design for _ in range(3)]
    pack = PackFactory(drop=drop, design_count=3)
    return drop, designs, pack


def test_shop_lists_and_details_published_drops():
    drop, designs, pack = _published_drop()
    DropFactory()
    PackFactory(drop=drop, is_active=False, name="Hidden", price="1.00")

    client = APIClient()
    listing = client.get("/api/v1/shop/drops/").json()["drops"]
    assert [d["id"] for d in listing] == [drop.id]
    assert listing[0]["designCount"] == 3
    assert listing[0]["startingPrice"] == "8.40"

    detail = client.get("/api/v1/shop/drops/ada-draws/spooky/")
    assert detail.status_code == 200
    body = detail.json()["drop"]
    assert [p["id"] for p in body["packs"]] == [pack.id]
    assert [d["designId"] for d in body["designs"]] == [d.id for d in designs]
    assert client.get("/api/v1/shop/drops/ada-draws/missing/").status_code == 404


def test_shop_list_filters_by_store_and_search():
    drop, _, _ = _published_drop()
    other = DropFactory(title="Frog Party", description="ribbit", published=True)

    client = APIClient()
    by_store = client.get("/api/v1/shop/drops/", {"store": "ADA-DRAWS"}).json()["drops"]
    assert [d["id"] for d in by_store] == [drop.id]
    by_text = client.get("/api/v1/shop/drops/", {"q": "frog"}).json()["drops"]
    assert [d["id"] for d in by_text] == [other.id]


def test_shop_calculate_price():
    drop, designs, pack = _published_drop()
    resp = APIClient().post(
        "/api/v1/shop/calculate-price/",
        {"packId": pack.id, "selectedDesignIds": [d.id for d in designs], "quantity": 2, "country": "CA"},
        format="json",
    )
    assert resp.status_code == 200
    assert resp.json()["pricing"] == {
        "subtotal": "16.80",
        "shipping": "4.99",
        "savings": "43.20",
        "savingsLabel": "Save $43.20",
        "total": "21.79",
    }


def test_shop_calculate_price_rejects_bad_selection():
    _, designs, pack = _published_drop()
    resp = APIClient().post(
        "/api/v1/shop/calculate-price/",
        {"packId": pack.id, "selectedDesignIds": [designs[0].id]},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Select exactly 3 designs."


@patch("orders.services.create_checkout_session")
def test_shop_pack_checkout_creates_pending_pack_order(mock_session):
    from orders.models import Order
    from orders.tests.factories import shipping_details

    mock_session.return_value.id = "cs_test_pack"
    mock_session.return_value.url = "https://checkout.stripe.com/c/pay/cs_test_pack"
    drop, designs, pack = _published_drop()

    resp = APIClient().post(
        "/api/v1/shop/checkout/",
        {
            "packId": pack.id,
            "selectedDesignIds": [d.id for d in designs],
            "shippingDetails": shipping_details(),
        },
        format="json",
        HTTP_X_SESSION_ID="sess-pack",
    )
    assert resp.status_code == 200
    assert resp.json()["sessionId"] == "cs_test_pack"
    order = Order.objects.get(public_id=resp.json()["orderId"])
    assert order.source == "pack"
    assert order.pack == pack
    assert order.total == pack.price
    assert order.items.count() == 3
    cancel_url = mock_session.call_args.kwargs["cancel_url"]
    assert cancel_url == "http://frontend.test/shop/ada-draws/spooky"
    assert Drop.objects.get(id=drop.id).status == Drop.STATUS_PUBLISHED
