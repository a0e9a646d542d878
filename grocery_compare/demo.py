from __future__ import annotations

from dataclasses import dataclass

from .items import list_items_from_lines
from .models import InvalidRequest, ListItem, StorePrice, search_url, store_name
from .units import compute_unit_price

DEMO_LISTS: dict[str, list[str]] = {
    "weekly": [
        "Milk 4L",
        "Bread 2 ea",
        "Bananas 6 ea",
        "Ground Beef 1 kg",
        "Rice 2 kg",
    ],
    "party": [
        "Chips 3 ea",
        "Soda 2L",
        "Ice Cream 2 ea",
        "Paper Plates 1 ea",
    ],
}


def string_hash(text: str) -> int:
    """Non-negative 32-bit rolling hash (h = h*31 + c), stable across runs."""
    h = 0
    for ch in text:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return abs(h)


@dataclass(frozen=True)
class DemoQuoteProvider:
    """Synthetic but repeatable quotes, for running without a scraping key."""

    store: str

    def quote(self, item: ListItem, postal_code: str) -> StorePrice:
        h = string_hash(item.raw_text + self.store)
        base_price = (h % 1000) / 100 + 1  # $1.00 .. $10.99
        unit = item.unit or "ea"

        qty = item.quantity
        if self.store == "costco":
            qty = qty * 2 if qty else None
            size = f"{_fmt_qty(qty)} {unit}" if qty else "bulk"
        else:
            size = f"{_fmt_qty(qty)} {unit}" if qty else "each"

        price = round(base_price, 2)
        return StorePrice(
            price=price,
            unit_price=compute_unit_price(price, qty, unit),
            available=(h % 10) > 1,  # ~80%
            product_name=f"{store_name(self.store)} {item.raw_text}",
            size=size,
            url=search_url(self.store, item.raw_text),
        )


def _fmt_qty(qty: float) -> str:
    return str(int(qty)) if float(qty).is_integer() else str(qty)


def load_demo_list(name: str | None) -> list[ListItem]:
    if not name or not name.strip():
        raise InvalidRequest("List ID is required")
    lines = DEMO_LISTS.get(name.strip().lower())
    if lines is None:
        raise InvalidRequest(f"List not found: {name}")
    return list_items_from_lines(lines)
