import json
from decimal import Decimal

import pandas as pd
import pytest

from retail_pricing.config.settings import RULE_SET_ENV, Settings
from retail_pricing.data.price_catalog import price_catalog, price_catalog_frame, read_catalog
from retail_pricing.engine import PricingEngine


CATALOG_CSV = """sku,name,costPrice,productRole,price
PAD001,Pão Francês,0.40,CONVENIENCIA,0.75
LAT001,Leite Integral 1L,3.50,ANCHOR,5.49
CAR001,Peito de Frango,11.00,PREMIUM,16.90
BEB003,Água Mineral 500ml,,,2.49
LIM001,Detergente Líquido,1.50,,2.99
FRI001,Presunto Cozido,20.00,IMPULSE,29.90
"""


@pytest.fixture
def engine():
    return PricingEngine()


@pytest.fixture
def catalog_frame():
    return pd.DataFrame({
        "sku": ["A1", "A2", "A3", "A4", "A5"],
        "costPrice": ["2", "100", None, "-1", "10"],
        "productRole": ["CONVENIENCE", "ANCHOR", "PREMIUM", "IMPULSE", "VIP"],
    })


def test_price_catalog_frame(engine, catalog_frame):
    priced, report = price_catalog_frame(catalog_frame, engine)

    assert list(priced["pricingStatus"]) == ["priced", "priced", "skipped", "error", "error"]
    assert priced.loc[0, "price"] == Decimal("2.99")
    assert priced.loc[1, "price"] == Decimal("108.59")
    assert priced.loc[1, "appliedMargin"] == Decimal("0.0859")
    assert priced.loc[2, "price"] is None
    assert priced.loc[0, "pricingRuleVersion"] == "v1.1"

    metrics = report["metrics"]
    assert metrics["row_count"] == 5
    assert metrics["priced"] == 2
    assert metrics["skipped"] == 1
    assert metrics["errors"] == 2
    assert metrics["by_role"] == {"ANCHOR": 1, "CONVENIENCE": 1}
    # (0.4950 + 0.0859) / 2
    assert metrics["average_margin"] == pytest.approx(0.2905)

    assert report["status"] == "completed_with_errors"
    assert any("A4" in e and "greater than zero" in e for e in report["errors"])
    assert any("A5" in e and "Unknown strategic role" in e for e in report["errors"])


def test_price_catalog_frame_keeps_input_untouched(engine, catalog_frame):
    original = catalog_frame.copy()
    price_catalog_frame(catalog_frame, engine)
    pd.testing.assert_frame_equal(catalog_frame, original)


def test_price_catalog_frame_numeric_costs(engine):
    df = pd.DataFrame({"sku": ["N1", "N2"], "costPrice": [0.65, 30.0], "productRole": ["CONVENIENCE"] * 2})
    priced, report = price_catalog_frame(df, engine)
    assert list(priced["price"]) == [Decimal("0.90"), Decimal("34.99")]
    assert report["status"] == "success"


def test_price_catalog_frame_missing_columns(engine):
    df = pd.DataFrame({"sku": ["X"], "cost": ["1"]})
    priced, report = price_catalog_frame(df, engine)
    assert report["status"] == "failed"
    assert "costPrice" in report["errors"][0]
    assert "productRole" in report["errors"][0]
    assert "pricingStatus" not in priced.columns


def test_price_catalog_frame_empty(engine):
    df = pd.DataFrame({"sku": [], "costPrice": [], "productRole": []})
    priced, report = price_catalog_frame(df, engine)
    assert report["status"] == "success"
    assert report["metrics"]["row_count"] == 0
    assert report["metrics"]["average_margin"] is None


def test_price_catalog_file(tmp_path):
    input_path = tmp_path / "catalog.csv"
    input_path.write_text(CATALOG_CSV, encoding="utf-8")
    settings = Settings.load(tmp_path)

    report = price_catalog(settings=settings, input_path=input_path)

    assert report["status"] == "completed_with_errors"
    assert report["metrics"]["priced"] == 4
    assert report["metrics"]["skipped"] == 1
    assert report["metrics"]["errors"] == 1
    assert report["input_files"]["catalog"]["hash"]
    assert "LIM001" in report["errors"][0]

    priced = pd.read_csv(settings.priced_output, dtype={"sku": str, "price": str})
    prices = dict(zip(priced["sku"], priced["price"]))
    assert prices["PAD001"] == "0.60"     # 0.40 × 1.30 = 0.52 → 0.60
    assert prices["LAT001"] == "4.59"     # 3.50 × 1.15 = 4.025
    assert prices["CAR001"] == "13.99"    # 11 × 1.23 = 13.53
    assert prices["FRI001"] == "25.59"    # 20 × 1.25 = 25.00
    assert prices["BEB003"] == "2.49"     # manually priced, left alone
    assert prices["LIM001"] == "2.99"

    with open(settings.pricing_report, encoding="utf-8") as f:
        saved = json.load(f)
    assert saved["metrics"] == report["metrics"]
    assert saved["rule_version"] == "v1.1"


def test_price_catalog_missing_input(tmp_path):
    settings = Settings.load(tmp_path)
    report = price_catalog(settings=settings)
    assert report["status"] == "failed"
    assert "not found" in report["errors"][0]
    assert not settings.priced_output.exists()


def test_price_catalog_excel(tmp_path):
    input_path = tmp_path / "catalog.xlsx"
    pd.DataFrame({
        "sku": ["X1", "X2"],
        "costPrice": ["14.90", "59.90"],
        "productRole": ["CONVENIENCE", "ANCHOR"],
    }).to_excel(input_path, index=False)

    catalog = read_catalog(input_path)
    assert list(catalog["costPrice"]) == ["14.90", "59.90"]

    settings = Settings.load(tmp_path)
    report = price_catalog(settings=settings, input_path=input_path)

    assert report["status"] == "success"
    priced = pd.read_csv(settings.priced_output, dtype={"price": str})
    assert list(priced["price"]) == ["17.99", "65.99"]


def test_price_catalog_frame_cost_too_large_is_row_error(engine):
    df = pd.DataFrame({"sku": ["OK1", "BIG1"], "costPrice": ["10", "1e30"], "productRole": ["CONVENIENCE"] * 2})
    priced, report = price_catalog_frame(df, engine)

    assert list(priced["pricingStatus"]) == ["priced", "error"]
    assert priced.loc[0, "price"] == Decimal("12.59")
    assert report["status"] == "completed_with_errors"
    assert "BIG1" in report["errors"][0]
    assert "must be below" in report["errors"][0]


def test_price_catalog_unsupported_format(tmp_path):
    input_path = tmp_path / "catalog.xls"
    input_path.write_bytes(b"\xd0\xcf\x11\xe0")
    settings = Settings.load(tmp_path)

    report = price_catalog(settings=settings, input_path=input_path)

    assert report["status"] == "failed"
    assert "Unsupported catalog format" in report["errors"][0]
    assert not settings.priced_output.exists()


def test_rule_set_file_recorded_only_when_it_priced_the_run(tmp_path, monkeypatch):
    rules_path = tmp_path / "rules.json"
    rules_path.write_text(json.dumps({
        "version": "v2.0-test",
        "cost_bands": [{"max_cost": None, "margin": "0.25"}],
        "role_adjustments": {"ANCHOR": "0", "CONVENIENCE": "0", "IMPULSE": "0", "PREMIUM": "0"},
    }), encoding="utf-8")
    monkeypatch.setenv(RULE_SET_ENV, str(rules_path))
    input_path = tmp_path / "catalog.csv"
    input_path.write_text(CATALOG_CSV, encoding="utf-8")
    settings = Settings.load(tmp_path)

    report = price_catalog(settings=settings, input_path=input_path)
    assert report["rule_version"] == "v2.0-test"
    assert report["input_files"]["rule_set"]["path"] == str(rules_path)

    report = price_catalog(settings=settings, input_path=input_path, engine=PricingEngine())
    assert report["rule_version"] == "v1.1"
    assert "rule_set" not in report["input_files"]
