"""Collect store quotes for a shopping list and run the comparison.

One provider call is made per (item, store) on a thread pool. Each item waits
for all of its stores before its result is built; a store that errors or runs
past the timeout is recorded as unavailable instead of failing the run.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Protocol

from .compare import (
    StoreAllocation,
    StoreSummary,
    build_price_result,
    optimize_shopping,
    optimized_total,
    summarize_stores,
)
from .config import Config
from .demo import DemoQuoteProvider
from .http import ScrapingBeeClient
from .models import InvalidRequest, ListItem, PriceResult, StorePrice, store_order
from .scrapingbee import SELECTORS, ScrapingBeeProvider

logger = logging.getLogger(__name__)


class QuoteProvider(Protocol):
    store: str

    def quote(self, item: ListItem, postal_code: str) -> StorePrice: ...


@dataclass(frozen=True)
class ComparisonRun:
    stores: list[str]
    results: list[PriceResult]
    summaries: list[StoreSummary]
    allocations: list[StoreAllocation]

    @property
    def optimized_total(self) -> float:
        return optimized_total(self.allocations)


def build_providers(config: Config, stores: list[str]) -> dict[str, QuoteProvider]:
    """Live ScrapingBee providers where possible, demo quotes for the rest."""
    client = None
    if config.live_quotes:
        client = ScrapingBeeClient(api_key=config.scrapingbee_api_key, timeout_s=config.fetch_timeout_s)

    providers: dict[str, QuoteProvider] = {}
    for store in stores:
        if client is not None and store in SELECTORS:
            providers[store] = ScrapingBeeProvider(store=store, client=client)
        else:
            if client is not None:
                logger.info("No live adapter for %s; using demo quotes", store)
            providers[store] = DemoQuoteProvider(store=store)
    return providers


class _Fetch:
    """One provider call that records when a worker actually picks it up."""

    def __init__(self, provider: QuoteProvider, item: ListItem, postal_code: str):
        self.provider = provider
        self.item = item
        self.postal_code = postal_code
        self.started = threading.Event()
        self.started_at = 0.0

    def __call__(self) -> StorePrice:
        self.started_at = time.monotonic()
        self.started.set()
        return self.provider.quote(self.item, self.postal_code)


def _join(fut: Future, fetch: _Fetch, store: str, timeout_s: float) -> StorePrice:
    item = fetch.item
    try:
        # Time spent queued behind other fetches does not count against this one.
        fetch.started.wait()
        quote = fut.result(timeout=max(0.0, fetch.started_at + timeout_s - time.monotonic()))
    except FutureTimeout:
        logger.warning("Timed out fetching %s quote for %r", store, item.raw_text)
        return StorePrice.unavailable(item.raw_text)
    except Exception as e:
        logger.warning("Error fetching %s quote for %r: %s", store, item.raw_text, e)
        return StorePrice.unavailable(item.raw_text)

    if quote is None:
        return StorePrice.unavailable(item.raw_text)
    return quote


def collect_quotes(
    items: list[ListItem],
    providers: dict[str, QuoteProvider],
    postal_code: str,
    *,
    timeout_s: float,
    max_workers: int = 8,
) -> list[dict[str, StorePrice]]:
    """Fetch every (item, store) quote; returns one store->quote dict per item, in order.

    Each call gets *timeout_s* from the moment it starts running. A call that
    overruns is abandoned and keeps its worker until it returns, so providers
    are expected to bound their own I/O.
    """
    pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="quote")
    try:
        pending = []
        for item in items:
            fetches = {store: _Fetch(p, item, postal_code) for store, p in providers.items()}
            pending.append({store: (pool.submit(f), f) for store, f in fetches.items()})

        out: list[dict[str, StorePrice]] = []
        for futures in pending:
            out.append({store: _join(fut, f, store, timeout_s) for store, (fut, f) in futures.items()})
        return out
    finally:
        # Drops queued fetches if the caller bails out early.
        pool.shutdown(wait=False, cancel_futures=True)


def run_comparison(
    items: list[ListItem],
    stores,
    *,
    config: Config | None = None,
    providers: dict[str, QuoteProvider] | None = None,
) -> ComparisonRun:
    if not items:
        raise InvalidRequest("List has no items")

    cfg = config or Config()
    order = store_order(stores)
    if providers is None:
        providers = build_providers(cfg, order)
    active = {s: providers[s] for s in order if s in providers}

    logger.info("Pricing %d item(s) at %s", len(items), ", ".join(order))
    quotes = collect_quotes(
        items,
        active,
        cfg.postal_code,
        timeout_s=cfg.fetch_timeout_s,
        max_workers=cfg.max_workers,
    )

    results = [build_price_result(item, q, order) for item, q in zip(items, quotes)]
    return ComparisonRun(
        stores=order,
        results=results,
        summaries=summarize_stores(results, order),
        allocations=optimize_shopping(results, order),
    )
