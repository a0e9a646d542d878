from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

from .http import ScrapingBeeClient
from .models import ListItem, StorePrice, search_url
from .units import compute_unit_price, is_known_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreSelectors:
    """Where the first search result's fields live on a chain's search page."""

    site: str
    tile: str
    price: str
    name: str
    link: str
    size: str
    unit_price: str | None = None


SELECTORS: dict[str, StoreSelectors] = {
    "nofrills": StoreSelectors(
        site="https://www.nofrills.ca",
        tile=".product-tile",
        price=".price__value",
        name=".product-name__item",
        link="a.product-tile__link",
        size=".product-package-size",
        unit_price=".comparison-price__value",
    ),
    "walmart": StoreSelectors(
        site="https://www.walmart.ca",
        tile='[data-automation="product-card"]',
        price='[data-automation="price"]',
        name='[data-automation="name"]',
        link="a",
        size='[data-automation="product-size"]',
        unit_price='[data-automation="unit-price"]',
    ),
    "costco": StoreSelectors(
        site="https://www.costco.ca",
        tile=".product",
        price=".price",
        name=".description",
        link="a",
        size=".product-tile-size",
    ),
}


_MONEY_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def parse_money(text: str | None) -> float | None:
    """First amount in a price string: '$5.99' -> 5.99, '$0.15/100ml' -> 0.15."""
    if not text:
        return None
    m = _MONEY_RE.search(text)
    if not m:
        return None
    return float(m.group(0).replace(",", ""))


_PER_RE = re.compile(r"/\s*(\d+(?:\.\d+)?)?\s*([a-zA-Z]+)")


def parse_unit_price(text: str | None) -> float | None:
    """Shelf comparison price -> price per base unit (per g, ml or each).

    '$0.15/100ml' -> 0.0015, '$1.32/1kg' -> 0.00132, '13.3¢/100g' -> 0.00133.
    Labels without a recognizable '/<qty><unit>' part give None.
    """
    amount = parse_money(text)
    if amount is None:
        return None
    m = _PER_RE.search(text)
    if not m or not is_known_unit(m.group(2)):
        return None
    if "¢" in text:
        amount /= 100
    qty = float(m.group(1)) if m.group(1) else 1.0
    return compute_unit_price(amount, qty, m.group(2)) or None


def _text(tile, selector: str) -> str:
    el = tile.select_one(selector)
    return el.get_text(strip=True) if el else ""


def parse_first_product(html: str, selectors: StoreSelectors, *, fallback_name: str) -> StorePrice:
    """Read the first product tile of a search results page into a quote."""
    soup = BeautifulSoup(html, "html.parser")
    tile = soup.select_one(selectors.tile)
    if tile is None:
        return StorePrice.unavailable(fallback_name)

    price = parse_money(_text(tile, selectors.price)) or 0.0
    unit_price = parse_unit_price(_text(tile, selectors.unit_price)) if selectors.unit_price else None

    link = tile.select_one(selectors.link)
    href = link.get("href") if link else None
    url = None
    if href:
        url = selectors.site + href if href.startswith("/") else href

    return StorePrice(
        price=price,
        unit_price=unit_price,
        available=price > 0,
        product_name=_text(tile, selectors.name) or fallback_name,
        size=_text(tile, selectors.size) or None,
        url=url,
    )


@dataclass(frozen=True)
class ScrapingBeeProvider:
    store: str
    client: ScrapingBeeClient

    def quote(self, item: ListItem, postal_code: str) -> StorePrice:
        selectors = SELECTORS[self.store]
        url = search_url(self.store, item.raw_text)
        logger.info("Fetching %s quote for %r", self.store, item.raw_text)
        # Transport errors propagate; the collector turns them into unavailable quotes.
        html = self.client.fetch(url, render_js=True, country_code="ca")
        return parse_first_product(html, selectors, fallback_name=item.raw_text)
