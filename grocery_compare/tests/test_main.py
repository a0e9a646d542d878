import json

import pytest

from grocery_compare.main import main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("SCRAPINGBEE_API_KEY", "DEFAULT_POSTAL_CODE", "PRICE_FETCH_TIMEOUT", "PRICE_FETCH_WORKERS"):
        monkeypatch.delenv(key, raising=False)


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "0.1.0"


def test_units_commands(capsys):
    assert main(["units", "normalize", "Kilograms"]) == 0
    assert "-> kg (1 kg = 1000 g)" in capsys.readouterr().out

    assert main(["units", "size", "12-pack"]) == 0
    assert "-> 12 ea" in capsys.readouterr().out

    assert main(["units", "price", "10", "2", "kg"]) == 0
    assert capsys.readouterr().out.strip() == "$0.50/100g"


def test_compare_offline(capsys, tmp_path):
    out_path = tmp_path / "report.json"
    rc = main(["compare", "--offline", "--stores", "nofrills,walmart", "--json", str(out_path), "milk 4L", "bread"])
    assert rc == 0

    out = capsys.readouterr().out
    assert "demo quotes" in out
    assert "Optimized shopping" in out

    data = json.loads(out_path.read_text())
    assert data["stores"] == ["nofrills", "walmart"]
    assert [i["raw_text"] for i in data["items"]] == ["milk", "bread"]


def test_compare_demo_list(capsys):
    assert main(["compare", "--offline", "--demo-list", "party"]) == 0
    assert "Pricing 4 items" in capsys.readouterr().out


def test_compare_validation_errors(capsys):
    assert main(["compare", "--offline"]) == 2
    assert "ERROR: List has no items" in capsys.readouterr().out

    assert main(["compare", "--offline", "--stores", ",", "milk"]) == 2
    assert "At least one store" in capsys.readouterr().out

    assert main(["compare", "--offline", "--stores", "target", "milk"]) == 2
    assert "Unknown store" in capsys.readouterr().out

    assert main(["compare", "--offline", "--workers", "0", "milk"]) == 2


def test_config_keys(capsys):
    assert main(["config", "keys"]) == 0
    assert "SCRAPINGBEE_API_KEY" in capsys.readouterr().out


def test_config_check_env(capsys):
    assert main(["config", "check"]) == 0
    assert "quotes=demo" in capsys.readouterr().out
