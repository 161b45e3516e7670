"""Thin Printify REST client.

Only the calls needed to turn a paid order into a print job are wrapped:
image upload, product creation, order creation and send-to-production.
"""

import logging

import httpx
from django.conf import settings

logger = logging.getLogger("chaos.fulfillment")


class FulfillmentError(Exception):
    """Raised when Printify rejects a request or cannot be reached."""


class PrintifyClient:
    def __init__(self, *, token=None, shop_id=None, base_url=None, timeout=None):
        self.token = token if token is not None else settings.PRINTIFY_API_TOKEN
        self.shop_id = str(shop_id if shop_id is not None else settings.PRINTIFY_SHOP_ID)
        self.base_url = (base_url or settings.PRINTIFY_BASE_URL).rstrip("/")
        seconds = float(timeout if timeout is not None else settings.PRINTIFY_TIMEOUT_SECONDS)
        self.timeout = httpx.Timeout(timeout=seconds, connect=min(seconds, 10.0))

    def _request(self, method: str, path: str, payload: dict | None = None):
        if not self.token:
            raise FulfillmentError("Printify is not configured.")
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"Authorization": f"Bearer {self.token}", "Accept": "application/json"}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(method, url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise FulfillmentError(f"Printify request timed out: {path}") from exc
        except httpx.RequestError as exc:
            raise FulfillmentError(f"Printify request failed: {exc}") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
                detail = body.get("message") or body.get("error") or response.text
            except ValueError:
                detail = response.text
            logger.warning(
                "printify.request_failed",
                extra={"event": "printify.request_failed", "path": path, "status_code": response.status_code},
            )
            raise FulfillmentError(f"Printify error {response.status_code}: {detail}")
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise FulfillmentError("Printify returned an invalid response.") from exc

    def _require_shop(self) -> str:
        if not self.shop_id:
            raise FulfillmentError("Printify shop id is not configured.")
        return self.shop_id

    def list_shops(self) -> list:
        return self._request("GET", "shops.json")

    def upload_image(self, url: str, file_name: str) -> str:
        data = self._request("POST", "uploads/images.json", {"file_name": file_name, "url": url})
        if not data.get("id"):
            raise FulfillmentError("Printify upload returned no image id.")
        return str(data["id"])

    def create_product(self, title: str, image_id: str) -> tuple[str, int]:
        """Create a single-variant sticker product and return (product_id, variant_id)."""
        variant_id = int(settings.PRINTIFY_VARIANT_ID)
        payload = {
            "title": title,
            "description": "Custom die-cut sticker",
            "blueprint_id": int(settings.PRINTIFY_BLUEPRINT_ID),
            "print_provider_id": int(settings.PRINTIFY_PRINT_PROVIDER_ID),
            "variants": [{"id": variant_id, "price": 100, "is_enabled": True}],
            "print_areas": [
                {
                    "variant_ids": [variant_id],
                    "placeholders": [
                        {
                            "position": "front",
                            "images": [{"id": image_id, "x": 0.5, "y": 0.5, "scale": 1, "angle": 0}],
                        }
                    ],
                }
            ],
        }
        data = self._request("POST", f"shops/{self._require_shop()}/products.json", payload)
        if not data.get("id"):
            raise FulfillmentError("Printify product creation returned no id.")
        return str(data["id"]), variant_id

    def create_order(self, external_id: str, line_items: list, address: dict) -> str:
        payload = {
            "external_id": external_id,
            "label": external_id,
            "line_items": line_items,
            "shipping_method": 1,
            "send_shipping_notification": True,
            "address_to": address,
        }
        data = self._request("POST", f"shops/{self._require_shop()}/orders.json", payload)
        if not data.get("id"):
            raise FulfillmentError("Printify order creation returned no id.")
        return str(data["id"])

    def send_to_production(self, order_id: str):
        return self._request("POST", f"shops/{self._require_shop()}/orders/{order_id}/send_to_production.json")
