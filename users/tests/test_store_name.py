import pytest
from creators.tests.factories import CreatorFactory
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "store_name,available",
    [
        ("ada-draws", True),
        ("ab", False),
        ("Has Spaces", False),
        ("-leading", False),
        ("admin", False),
    ],
)
def test_check_store_name_format(store_name, available):
    resp = APIClient().get("/api/v1/auth/check-store-name/", {"storeName": store_name})
    assert resp.status_code == 200
    assert resp.json()["available"] is available


def test_check_store_name_taken_unless_own():
    creator = CreatorFactory(store_name="taken-name")
    client = APIClient()
    taken = client.get("/api/v1/auth/check-store-name/", {"storeName": "taken-name"}).json()
    assert taken == {"available": False, "error": "This store name is already taken."}

    client.force_authenticate(user=creator.user)
    own = client.get("/api/v1/auth/check-store-name/", {"storeName": "taken-name"}).json()
    assert own == {"available": True}
