from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Literal

StandardUnit = Literal["ea", "dozen", "g", "kg", "ml", "l"]
BaseUnit = Literal["ea", "g", "ml"]

STANDARD_UNITS: tuple[str, ...] = ("ea", "dozen", "g", "kg", "ml", "l")
BASE_UNITS: tuple[str, ...] = ("ea", "g", "ml")


_UNIT_ALIASES: dict[str, str] = {
    # count
    "ea": "ea",
    "each": "ea",
    "piece": "ea",
    "pc": "ea",
    "pcs": "ea",
    "ct": "ea",
    "count": "ea",
    "item": "ea",
    "items": "ea",
    # dozen
    "dozen": "dozen",
    "dz": "dozen",
    "doz": "dozen",
    "12pk": "dozen",
    # weight
    "g": "g",
    "gram": "g",
    "grams": "g",
    "gr": "g",
    "kg": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    # volume
    "ml": "ml",
    "milliliter": "ml",
    "millilitre": "ml",
    "milliliters": "ml",
    "millilitres": "ml",
    "l": "l",
    "liter": "l",
    "litre": "l",
    "liters": "l",
    "litres": "l",
}

# Order matters: "ml" has to reach the millilitre pattern before the litre one.
_UNIT_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^(ea|each|piece|pc|pcs|ct|count|item|items)s?$"), "ea"),
    (re.compile(r"^doz(en)?s?$"), "dozen"),
    (re.compile(r"^g(ram)?s?$"), "g"),
    (re.compile(r"^k(ilo)?g(ram)?s?$"), "kg"),
    (re.compile(r"^m(illi)?l(iter|itre)?s?$"), "ml"),
    (re.compile(r"^l(iter|itre)?s?$"), "l"),
]

# standard unit -> (base unit, factor)
_TO_BASE: dict[str, tuple[str, float]] = {
    "ea": ("ea", 1.0),
    "dozen": ("ea", 12.0),
    "g": ("g", 1.0),
    "kg": ("g", 1000.0),
    "ml": ("ml", 1.0),
    "l": ("ml", 1000.0),
}

_DISPLAY: dict[str, tuple[str, float]] = {
    "g": ("/100g", 100.0),
    "ml": ("/100ml", 100.0),
    "ea": ("/ea", 1.0),
}


@dataclass(frozen=True)
class BaseQuantity:
    qty: float
    base: BaseUnit


def normalize_unit(unit: str | None) -> StandardUnit:
    """Map a free-text unit ("Kg.", "litres", "pcs") to one of the standard units.

    Unknown or empty input falls back to ``"ea"``; this never raises.
    """
    if not unit or not isinstance(unit, str):
        return "ea"

    clean = unit.lower().replace(".", "").strip()

    if clean in _UNIT_ALIASES:
        return _UNIT_ALIASES[clean]  # type: ignore[return-value]

    for pattern, std in _UNIT_PATTERNS:
        if pattern.match(clean):
            return std  # type: ignore[return-value]

    return "ea"


def is_known_unit(unit: str | None) -> bool:
    """True when *unit* is a recognized spelling rather than the ``"ea"`` fallback."""
    if not unit or not isinstance(unit, str):
        return False
    clean = unit.lower().replace(".", "").strip()
    return clean in _UNIT_ALIASES or any(p.match(clean) for p, _ in _UNIT_PATTERNS)


def _valid_number(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        f = float(value)
    except (TypeError, ValueError):
        return False
    return not math.isnan(f)


def to_base_quantity(qty: float | None, unit: str | None) -> BaseQuantity:
    """Convert *qty* of *unit* into its base-unit magnitude.

    A missing, non-positive or NaN quantity yields ``BaseQuantity(1, "ea")``.
    """
    if not _valid_number(qty) or float(qty) <= 0:
        return BaseQuantity(qty=1.0, base="ea")

    base, factor = _TO_BASE[normalize_unit(unit)]
    return BaseQuantity(qty=float(qty) * factor, base=base)  # type: ignore[arg-type]


def compute_unit_price(price: float | None, qty: float | None, unit: str | None) -> float:
    """Price per base unit (per gram, per millilitre or per each)."""
    if not _valid_number(price) or float(price) <= 0:
        return 0.0
    if not _valid_number(qty) or float(qty) <= 0:
        return float(price)

    return float(price) / to_base_quantity(qty, unit).qty


def format_unit_price(unit_price: float | None, unit: str | None) -> str:
    """Human label for a per-base-unit price, e.g. ``"$0.50/100g"``."""
    if not _valid_number(unit_price) or float(unit_price) <= 0:
        return ""

    base, _ = _TO_BASE[normalize_unit(unit)]
    suffix, scale = _DISPLAY[base]
    return f"${float(unit_price) * scale:.2f}{suffix}"
