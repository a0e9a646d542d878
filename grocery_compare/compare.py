from __future__ import annotations

import math
from dataclasses import dataclass, replace

from .models import ListItem, PriceResult, StorePrice, default_store
from .size import parse_size
from .units import compute_unit_price, format_unit_price


@dataclass(frozen=True)
class StoreSummary:
    store: str
    total: float
    available_items: int
    total_items: int


@dataclass(frozen=True)
class StoreAllocation:
    store: str
    item_ids: tuple[str, ...]
    total: float

    @property
    def item_count(self) -> int:
        return len(self.item_ids)


def enrich_quote(quote: StorePrice | None) -> StorePrice | None:
    """Fill in ``unit_price`` from the quote's size text when the store left it out."""
    if quote is None or quote.unit_price is not None or not quote.size:
        return quote
    if quote.price <= 0:
        return quote

    parsed = parse_size(quote.size)
    return replace(quote, unit_price=compute_unit_price(quote.price, parsed.qty, parsed.unit))


def unit_price_label(quote: StorePrice | None) -> str:
    if quote is None or quote.unit_price is None:
        return ""
    return format_unit_price(quote.unit_price, parse_size(quote.size).unit)


def choose_best_store(quotes: dict[str, StorePrice | None], stores: list[str]) -> str:
    """Cheapest usable quote wins; ties keep the earlier store.

    With no usable quote at all the default store is returned.
    """
    best = default_store(stores)
    best_price = math.inf

    for store in stores:
        q = quotes.get(store)
        if q is not None and q.usable and q.price < best_price:
            best_price = q.price
            best = store

    return best


def build_price_result(
    item: ListItem,
    quotes: dict[str, StorePrice | None],
    stores: list[str],
) -> PriceResult:
    filled = {store: enrich_quote(quotes.get(store)) for store in stores}
    return PriceResult(
        item_id=item.id,
        raw_text=item.raw_text,
        best_store=choose_best_store(filled, stores),
        quotes=filled,
    )


def summarize_stores(results: list[PriceResult], stores: list[str]) -> list[StoreSummary]:
    """Per requested store: total of its usable quotes and how many items it has."""
    out: list[StoreSummary] = []
    for store in stores:
        usable = [q for q in (r.quote(store) for r in results) if q is not None and q.usable]
        out.append(
            StoreSummary(
                store=store,
                total=round(sum(q.price for q in usable), 2),
                available_items=len(usable),
                total_items=len(results),
            )
        )
    return out


def optimize_shopping(results: list[PriceResult], stores: list[str]) -> list[StoreAllocation]:
    """Group items by their best store; stores that won nothing are left out."""
    out: list[StoreAllocation] = []
    for store in stores:
        won = [r for r in results if r.best_store == store]
        if not won:
            continue
        total = 0.0
        for r in won:
            q = r.quote(store)
            if q is not None and q.usable:
                total += q.price
        out.append(StoreAllocation(store=store, item_ids=tuple(r.item_id for r in won), total=round(total, 2)))
    return out


def optimized_total(allocations: list[StoreAllocation]) -> float:
    return round(sum(a.total for a in allocations), 2)
