from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

from .compare import unit_price_label
from .models import store_name
from .quotes import ComparisonRun


@dataclass
class QuoteCell:
    price: float | None
    available: bool
    unit_price_label: str
    product_name: str | None
    url: str | None


@dataclass
class ItemReport:
    item_id: str
    raw_text: str
    best_store: str
    best_price: float | None
    quotes: dict[str, QuoteCell | None]


@dataclass
class StoreTotals:
    store: str
    total: float
    available_items: int
    total_items: int


@dataclass
class ShoppingStop:
    store: str
    item_count: int
    total: float


@dataclass
class ComparisonReport:
    timestamp: str
    stores: list[str]
    items: list[ItemReport]
    totals: list[StoreTotals]
    shopping: list[ShoppingStop]
    optimized_total: float

    def summary_text(self) -> str:
        lines = [f"Run: {self.timestamp}", "", "Summary"]
        for t in self.totals:
            lines.append(
                f"  {store_name(t.store):<12} ${t.total:>8.2f}  "
                f"{t.available_items} of {t.total_items} items available"
            )

        lines += ["", "Optimized shopping"]
        for s in self.shopping:
            lines.append(f"  {store_name(s.store):<12} {s.item_count} items, ${s.total:.2f}")
        lines.append(f"  {'Total':<12} ${self.optimized_total:.2f}")

        lines += ["", "Items"]
        for i, it in enumerate(self.items, 1):
            lines.append(f"  {i}. {it.raw_text}  -> {store_name(it.best_store)}")
            for store in self.stores:
                cell = it.quotes.get(store)
                if cell is None or not cell.available or not cell.price:
                    lines.append(f"     {store_name(store):<12} not available")
                    continue
                label = f"  ({cell.unit_price_label})" if cell.unit_price_label else ""
                lines.append(f"     {store_name(store):<12} ${cell.price:.2f}{label}")
        return "\n".join(lines)

    def write_json(self, path: str = "artifacts/price_report.json") -> str:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(asdict(self), indent=2))
        return str(out)


def build_report(run: ComparisonRun) -> ComparisonReport:
    items: list[ItemReport] = []
    for r in run.results:
        cells: dict[str, QuoteCell | None] = {}
        for store in run.stores:
            q = r.quote(store)
            cells[store] = None if q is None else QuoteCell(
                price=q.price,
                available=q.usable,
                unit_price_label=unit_price_label(q),
                product_name=q.product_name,
                url=q.url,
            )
        best = r.best_quote
        items.append(
            ItemReport(
                item_id=r.item_id,
                raw_text=r.raw_text,
                best_store=r.best_store,
                best_price=best.price if best is not None and best.usable else None,
                quotes=cells,
            )
        )

    return ComparisonReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        stores=list(run.stores),
        items=items,
        totals=[StoreTotals(**asdict(s)) for s in run.summaries],
        shopping=[ShoppingStop(store=a.store, item_count=a.item_count, total=a.total) for a in run.allocations],
        optimized_total=run.optimized_total,
    )
