from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Literal
from urllib.parse import quote_plus

StoreId = Literal["nofrills", "foodbasics", "walmart", "costco"]

# Canonical iteration order; also the tie-break order.
STORE_IDS: tuple[str, ...] = ("nofrills", "foodbasics", "walmart", "costco")

STORE_NAMES: dict[str, str] = {
    "nofrills": "No Frills",
    "foodbasics": "Food Basics",
    "walmart": "Walmart",
    "costco": "Costco",
}

SEARCH_URLS: dict[str, str] = {
    "nofrills": "https://www.nofrills.ca/search?search-bar={q}",
    "foodbasics": "https://www.foodbasics.ca/search?filter={q}",
    "walmart": "https://www.walmart.ca/search?q={q}",
    "costco": "https://www.costco.ca/CatalogSearch?keyword={q}",
}

# When no store has a usable quote, the item goes to the first store of the
# run's store order.
DEFAULT_STORE_POLICY = "first-requested"


class InvalidRequest(ValueError):
    """A comparison request that cannot be run (no items, no stores, ...)."""


def store_order(stores) -> list[str]:
    """Validate requested store ids and arrange them in canonical order."""
    requested = [s.strip().lower() for s in stores if s and s.strip()]
    unknown = sorted({s for s in requested if s not in STORE_IDS})
    if unknown:
        raise InvalidRequest(f"Unknown store(s): {', '.join(unknown)}")
    if not requested:
        raise InvalidRequest("At least one store must be selected")
    return [s for s in STORE_IDS if s in requested]


def default_store(stores: list[str]) -> str:
    if not stores:
        raise InvalidRequest("At least one store must be selected")
    return stores[0]


def store_name(store: str) -> str:
    return STORE_NAMES.get(store, store)


def search_url(store: str, text: str) -> str:
    return SEARCH_URLS[store].format(q=quote_plus(text))


@dataclass(frozen=True)
class ListItem:
    id: str
    raw_text: str
    quantity: float | None = None
    unit: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class StorePrice:
    """One retailer's answer for one list item."""

    price: float
    available: bool
    unit_price: float | None = None
    product_name: str | None = None
    size: str | None = None
    url: str | None = None

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"price must be non-negative, got {self.price}")
        if self.unit_price is not None and self.unit_price < 0:
            raise ValueError(f"unit_price must be non-negative, got {self.unit_price}")

    @property
    def usable(self) -> bool:
        # available=False and price=0 both mean "no quote"
        return self.available and self.price > 0

    @classmethod
    def unavailable(cls, product_name: str | None = None) -> "StorePrice":
        return cls(price=0.0, available=False, product_name=product_name)


@dataclass(frozen=True)
class PriceResult:
    item_id: str
    raw_text: str
    best_store: str
    # Every requested store is a key; None when that store returned nothing.
    quotes: dict[str, StorePrice | None] = field(default_factory=dict)

    def quote(self, store: str) -> StorePrice | None:
        return self.quotes.get(store)

    @property
    def best_quote(self) -> StorePrice | None:
        return self.quotes.get(self.best_store)

    def to_dict(self) -> dict:
        out: dict = {"item_id": self.item_id, "raw_text": self.raw_text}
        for store, q in self.quotes.items():
            out[store] = asdict(q) if q is not None else None
        out["best_store"] = self.best_store
        return out
