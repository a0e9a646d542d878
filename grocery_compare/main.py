from __future__ import annotations

import argparse
import logging

from .config import OPTIONAL_KEYS, REQUIRED_KEYS, Config
from .demo import load_demo_list
from .items import list_items_from_lines
from .models import STORE_IDS, InvalidRequest
from .quotes import run_comparison
from .report import build_report
from .size import parse_size
from .units import compute_unit_price, format_unit_price, normalize_unit, to_base_quantity

__version__ = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="grocery-compare")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Log fetch progress")

    sub = p.add_subparsers(dest="cmd", required=False)

    p_compare = sub.add_parser("compare", help="Price a shopping list across stores")
    p_compare.add_argument("items", nargs="*", help="List lines, e.g. 'milk 4L' 'bananas 2 kg'")
    p_compare.add_argument("--demo-list", default=None, help="Use a built-in sample list (weekly, party)")
    p_compare.add_argument("--stores", default=",".join(STORE_IDS), help="Comma-separated store ids")
    p_compare.add_argument("--postal", default=None, help="Postal code (default from config)")
    p_compare.add_argument("--timeout", type=float, default=None, help="Seconds per store fetch")
    p_compare.add_argument("--workers", type=int, default=None, help="Concurrent fetches")
    p_compare.add_argument("--offline", action="store_true", help="Demo quotes only, no network")
    p_compare.add_argument("--json", default=None, help="Write the report JSON here")

    p_units = sub.add_parser("units", help="Unit helpers")
    sub_units = p_units.add_subparsers(dest="units_cmd", required=True)

    p_norm = sub_units.add_parser("normalize", help="Normalize a unit string")
    p_norm.add_argument("unit")

    p_size = sub_units.add_parser("size", help="Parse a product size text")
    p_size.add_argument("text")

    p_price = sub_units.add_parser("price", help="Unit price for price, quantity and unit")
    p_price.add_argument("price", type=float)
    p_price.add_argument("qty", type=float)
    p_price.add_argument("unit")

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)

    sub_config.add_parser("keys", help="List config keys")

    p_check = sub_config.add_parser("check", help="Load config and report what will be used")
    p_check.add_argument("--source", choices=("env", "infisical"), default="env")
    p_check.add_argument("--env", default="dev")

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.version:
        print(__version__)
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    if args.cmd == "units":
        return _run_units(args)

    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in REQUIRED_KEYS + OPTIONAL_KEYS:
                print(k)
            return 0

        if args.config_cmd == "check":
            # Never print the API key itself
            if args.source == "infisical":
                cfg = Config.load_from_infisical(env=args.env)
            else:
                cfg = Config.from_env()
            mode = "live (ScrapingBee)" if cfg.live_quotes else "demo"
            print(f"OK: quotes={mode} postal={cfg.postal_code} timeout={cfg.fetch_timeout_s}s workers={cfg.max_workers}")
            return 0

    if args.cmd == "compare":
        try:
            return _run_compare(args)
        except InvalidRequest as exc:
            print(f"ERROR: {exc}")
            return 2

    raise RuntimeError("unreachable")


def _run_units(args) -> int:
    if args.units_cmd == "normalize":
        std = normalize_unit(args.unit)
        base = to_base_quantity(1, std)
        print(f"{args.unit!r} -> {std} (1 {std} = {base.qty:g} {base.base})")
        return 0

    if args.units_cmd == "size":
        parsed = parse_size(args.text)
        print(f"{args.text!r} -> {parsed.qty:g} {parsed.unit}")
        return 0

    if args.units_cmd == "price":
        unit_price = compute_unit_price(args.price, args.qty, args.unit)
        label = format_unit_price(unit_price, args.unit)
        print(label or "n/a")
        return 0

    raise RuntimeError("unreachable")


def _config_for(args) -> Config:
    if args.timeout is not None and args.timeout <= 0:
        raise InvalidRequest("--timeout must be positive")
    if args.workers is not None and args.workers <= 0:
        raise InvalidRequest("--workers must be positive")

    cfg = Config.from_env()
    return Config(
        scrapingbee_api_key=None if args.offline else cfg.scrapingbee_api_key,
        postal_code=args.postal or cfg.postal_code,
        fetch_timeout_s=args.timeout if args.timeout is not None else cfg.fetch_timeout_s,
        max_workers=args.workers if args.workers is not None else cfg.max_workers,
    )


def _run_compare(args) -> int:
    if args.demo_list is not None:
        items = load_demo_list(args.demo_list)
    else:
        items = list_items_from_lines(args.items)

    stores = [s for s in args.stores.split(",") if s.strip()]
    cfg = _config_for(args)

    print(f"Pricing {len(items)} items ({'live' if cfg.live_quotes else 'demo'} quotes, postal {cfg.postal_code}).")

    run = run_comparison(items, stores, config=cfg)
    report = build_report(run)
    print("\n" + report.summary_text())

    if args.json:
        path = report.write_json(args.json)
        print(f"\nReport written to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
