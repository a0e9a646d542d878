from __future__ import annotations

import re

from .models import ListItem
from .units import is_known_unit

# A number that starts a token ("V8" is not a quantity), followed by a word.
_QTY_UNIT_RE = re.compile(r"(?<![\w.])(\d+(?:\.\d+)?)\s*([a-zA-Z]+)\b")


def list_item_from_text(raw: str, *, item_id: str, notes: str | None = None) -> ListItem:
    """Build a ListItem from one typed line such as 'bananas 2 kg' or 'milk 2% 1L'.

    The first number+unit pair whose unit is recognized becomes quantity/unit
    and is removed from the search text. Lines without one keep quantity and
    unit unset and are searched as typed.
    """
    text = " ".join(raw.split())
    m = next((m for m in _QTY_UNIT_RE.finditer(text) if is_known_unit(m.group(2))), None)
    if not m:
        return ListItem(id=item_id, raw_text=text, notes=notes)

    qty = float(m.group(1))
    name = " ".join((text[: m.start()] + " " + text[m.end():]).split())
    return ListItem(
        id=item_id,
        raw_text=name or text,
        quantity=qty if qty > 0 else None,
        unit=m.group(2).lower(),
        notes=notes,
    )


def list_items_from_lines(lines: list[str]) -> list[ListItem]:
    return [
        list_item_from_text(line, item_id=str(i))
        for i, line in enumerate((ln for ln in lines if ln.strip()), 1)
    ]
