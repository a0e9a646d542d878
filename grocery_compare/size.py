from __future__ import annotations

import re
from dataclasses import dataclass

from .units import StandardUnit, normalize_unit

_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([a-zA-Z\-]+)$")
_PACK_RE = re.compile(r"pack\s+of\s+(\d+)|(\d+)[\s\-]pack", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedSize:
    qty: float
    unit: StandardUnit


DEFAULT_SIZE = ParsedSize(qty=1.0, unit="ea")


def parse_size(text: str | None) -> ParsedSize:
    """Parse vendor size copy like '500g', '2 L', '12-pack' or 'pack of 6'.

    Anything unrecognised is one each.
    """
    if not text or not isinstance(text, str):
        return DEFAULT_SIZE

    m = _SIZE_RE.match(text.strip())
    if m:
        return ParsedSize(qty=float(m.group(1)), unit=normalize_unit(m.group(2)))

    m = _PACK_RE.search(text)
    if m:
        return ParsedSize(qty=float(int(m.group(1) or m.group(2))), unit="ea")

    return DEFAULT_SIZE
