"""Checkout Items: the `{id, imageUrl, quantity}` records the storefront keeps
in local storage.

Pure functions only; the database-backed cart mirrors these rules in
`cart.services`.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class CheckoutItem:
    id: int
    image_url: str
    quantity: int = 1

    def as_dict(self) -> dict:
        return {"id": self.id, "imageUrl": self.image_url, "quantity": self.quantity}


def _positive_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number > 0 else None
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    return None


def parse_checkout_items(raw) -> list[CheckoutItem]:
    """Turn untrusted JSON into Checkout Items.

    Entries without a positive integer id, with an empty imageUrl or with a
    quantity below 1 are dropped. Repeated ids are folded into one item whose
    quantity is the sum; the last imageUrl wins. A missing quantity means 1.
    """

    if not isinstance(raw, list):
        return []
    items: list[CheckoutItem] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        item_id = _positive_int(entry.get("id"))
        image_url = entry.get("imageUrl")
        quantity = _positive_int(entry.get("quantity", 1))
        if item_id is None or quantity is None:
            continue
        if not isinstance(image_url, str) or not image_url.strip():
            continue
        items = merge_checkout_item(items, CheckoutItem(id=item_id, image_url=image_url.strip(), quantity=quantity))
    return items


def merge_checkout_item(items: list[CheckoutItem], item: CheckoutItem) -> list[CheckoutItem]:
    """Return a new list with `item` added.

    An item whose id is already present increments that entry's quantity and
    replaces its imageUrl; otherwise it is appended. `items` is not mutated.
    """

    merged = []
    found = False
    for existing in items:
        if existing.id == item.id and not found:
            merged.append(replace(existing, quantity=existing.quantity + item.quantity, image_url=item.image_url))
            found = True
        else:
            merged.append(existing)
    if not found:
        merged.append(item)
    return merged


def total_quantity(items: list[CheckoutItem]) -> int:
    return sum(item.quantity for item in items)
