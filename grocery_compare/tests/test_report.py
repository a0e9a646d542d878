import json
from dataclasses import dataclass

from grocery_compare.models import ListItem, StorePrice
from grocery_compare.quotes import run_comparison
from grocery_compare.report import build_report


@dataclass
class TableProvider:
    store: str
    table: dict

    def quote(self, item, postal_code):
        return self.table.get(item.raw_text) or StorePrice.unavailable(item.raw_text)


def _run():
    items = [ListItem(id="1", raw_text="milk"), ListItem(id="2", raw_text="flour")]
    providers = {
        "nofrills": TableProvider("nofrills", {"milk": StorePrice(price=4.5, available=True, size="4 L")}),
        "walmart": TableProvider(
            "walmart",
            {
                "milk": StorePrice(price=4.75, available=True),
                "flour": StorePrice(price=6.0, available=True, size="2.5 kg"),
            },
        ),
    }
    return run_comparison(items, ["nofrills", "walmart"], providers=providers)


def test_report_rows():
    report = build_report(_run())
    assert report.stores == ["nofrills", "walmart"]
    assert report.items[0].best_store == "nofrills"
    assert report.items[0].best_price == 4.5
    assert report.items[0].quotes["nofrills"].unit_price_label == "$0.11/100ml"
    assert not report.items[1].quotes["nofrills"].available
    assert report.items[1].quotes["walmart"].unit_price_label == "$0.24/100g"
    assert report.optimized_total == 10.5


def test_summary_text():
    text = build_report(_run()).summary_text()
    assert "No Frills" in text
    assert "1 of 2 items available" in text
    assert "not available" in text
    assert "Optimized shopping" in text
    assert "$10.50" in text


def test_write_json(tmp_path):
    path = build_report(_run()).write_json(str(tmp_path / "out" / "report.json"))
    data = json.loads(open(path).read())
    assert data["stores"] == ["nofrills", "walmart"]
    assert [s["store"] for s in data["shopping"]] == ["nofrills", "walmart"]
    assert data["items"][1]["quotes"]["walmart"]["price"] == 6.0
