import pytest

from grocery_compare.compare import (
    build_price_result,
    choose_best_store,
    enrich_quote,
    optimize_shopping,
    optimized_total,
    summarize_stores,
    unit_price_label,
)
from grocery_compare.models import STORE_IDS, InvalidRequest, ListItem, StorePrice, store_order


def _item(item_id="1", text="milk"):
    return ListItem(id=item_id, raw_text=text)


def _q(price, available=True, size=None, unit_price=None):
    return StorePrice(price=price, available=available, size=size, unit_price=unit_price)


ALL = list(STORE_IDS)


def test_cheapest_available_store_wins():
    quotes = {
        "nofrills": _q(4.50),
        "foodbasics": _q(4.75),
        "walmart": _q(3.00, available=False),
        "costco": _q(9.00),
    }
    assert choose_best_store(quotes, ALL) == "nofrills"


def test_tie_keeps_earlier_store():
    quotes = {"nofrills": _q(5.00), "foodbasics": _q(4.00), "walmart": _q(4.00)}
    assert choose_best_store(quotes, ALL) == "foodbasics"


def test_zero_price_is_treated_like_unavailable():
    quotes = {"nofrills": _q(0.0), "walmart": _q(2.00)}
    assert choose_best_store(quotes, ALL) == "walmart"


def test_no_usable_quote_falls_back_to_first_store():
    quotes = {"foodbasics": _q(0, available=False), "costco": None}
    assert choose_best_store(quotes, ["foodbasics", "costco"]) == "foodbasics"
    assert choose_best_store({}, ALL) == "nofrills"


def test_empty_store_list_is_rejected():
    with pytest.raises(InvalidRequest):
        choose_best_store({}, [])


def test_store_order_is_canonical_and_validated():
    assert store_order(["costco", "Walmart", "nofrills"]) == ["nofrills", "walmart", "costco"]
    with pytest.raises(InvalidRequest):
        store_order([])
    with pytest.raises(InvalidRequest):
        store_order(["nofrills", "loblaws"])


def test_price_result_has_every_requested_store():
    r = build_price_result(_item(), {"walmart": _q(3.0)}, ["nofrills", "walmart"])
    assert set(r.quotes) == {"nofrills", "walmart"}
    assert r.quotes["nofrills"] is None
    assert r.best_store == "walmart"

    d = r.to_dict()
    assert d["nofrills"] is None
    assert d["walmart"]["price"] == 3.0
    assert d["best_store"] == "walmart"


def test_best_store_is_minimum_over_available_quotes():
    quotes = {"nofrills": _q(7.0), "foodbasics": _q(2.0, available=False), "walmart": _q(6.5), "costco": _q(6.5)}
    r = build_price_result(_item(), quotes, ALL)
    best = r.best_quote
    assert best.usable
    assert all(best.price <= q.price for q in r.quotes.values() if q is not None and q.usable)
    assert r.best_store == "walmart"


def test_missing_optional_fields_are_fine():
    r = build_price_result(_item(), {"nofrills": StorePrice(price=2.0, available=True)}, ["nofrills"])
    assert r.best_store == "nofrills"
    assert r.quotes["nofrills"].unit_price is None
    assert unit_price_label(r.quotes["nofrills"]) == ""


def test_enrich_fills_unit_price_from_size():
    q = enrich_quote(_q(10.0, size="2 kg"))
    assert abs(q.unit_price - 0.005) < 1e-12
    assert unit_price_label(q) == "$0.50/100g"


def test_enrich_keeps_store_unit_price():
    q = enrich_quote(_q(10.0, size="2 kg", unit_price=0.4))
    assert q.unit_price == 0.4


def test_enrich_skips_unpriced_quotes():
    q = enrich_quote(_q(0.0, available=False, size="2 kg"))
    assert q.unit_price is None
    assert enrich_quote(None) is None


def test_negative_prices_rejected():
    with pytest.raises(ValueError):
        StorePrice(price=-1.0, available=True)
    with pytest.raises(ValueError):
        StorePrice(price=1.0, available=True, unit_price=-0.1)


def test_milk_scenario_summaries():
    milk = build_price_result(
        _item("1", "milk 4L"),
        {
            "nofrills": _q(4.50),
            "foodbasics": _q(4.75),
            "walmart": _q(0, available=False),
            "costco": _q(9.00, size="8 L"),
        },
        ALL,
    )
    bread = build_price_result(
        _item("2", "bread"),
        {"nofrills": _q(2.99), "foodbasics": _q(2.49), "walmart": _q(0, available=False), "costco": None},
        ALL,
    )
    assert milk.best_store == "nofrills"

    summaries = {s.store: s for s in summarize_stores([milk, bread], ALL)}
    assert set(summaries) == set(ALL)
    assert abs(summaries["nofrills"].total - 7.49) < 1e-9
    assert summaries["nofrills"].available_items == 2
    assert summaries["walmart"].available_items == 0
    assert summaries["walmart"].total_items == 2
    assert summaries["walmart"].total == 0
    assert summaries["costco"].available_items == 1


def test_optimized_grouping():
    results = [
        build_price_result(_item("1"), {"nofrills": _q(1.00), "walmart": _q(2.00)}, ["nofrills", "walmart"]),
        build_price_result(_item("2"), {"nofrills": _q(3.00), "walmart": _q(4.00)}, ["nofrills", "walmart"]),
        build_price_result(_item("3"), {"nofrills": _q(6.00), "walmart": _q(5.00)}, ["nofrills", "walmart"]),
    ]
    groups = optimize_shopping(results, ["nofrills", "walmart"])

    assert [g.store for g in groups] == ["nofrills", "walmart"]
    assert groups[0].item_count == 2
    assert groups[0].item_ids == ("1", "2")
    assert abs(groups[0].total - 4.00) < 1e-9
    assert groups[1].item_count == 1
    assert abs(groups[1].total - 5.00) < 1e-9

    best_sum = sum(r.best_quote.price for r in results)
    assert abs(optimized_total(groups) - best_sum) < 1e-9


def test_stores_without_wins_are_left_out_of_grouping():
    results = [build_price_result(_item(), {"nofrills": _q(1.00), "costco": _q(8.00)}, ["nofrills", "costco"])]
    groups = optimize_shopping(results, ["nofrills", "costco"])
    assert [g.store for g in groups] == ["nofrills"]
