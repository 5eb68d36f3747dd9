"""
Catalog Pricer - Prices a product catalog export in one pass.

Reads a CSV or Excel catalog with sku, costPrice and productRole columns,
auto-prices every product that has a cost, and writes the priced catalog
plus a JSON pricing report.
"""
import hashlib
import json
from collections import Counter
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.exceptions import PricingError
from ..engine.models import BASIS_POINT, StrategicRole
from ..engine.pricing_engine import PricingEngine
from ..services.product_pricing import ProductPricingService, has_value
from ..utils.logger import get_logger


logger = get_logger(__name__)

REQUIRED_COLUMNS = ('sku', 'costPrice', 'productRole')
OUTPUT_COLUMNS = ('price', 'appliedMargin', 'pricingRuleVersion', 'pricingStatus')

# Read as text so costs convert to Decimal exactly
READ_DTYPES = {'sku': str, 'costPrice': str, 'productRole': str}


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def read_catalog(path: Path) -> pd.DataFrame:
    """Read a catalog export (.csv or .xlsx)."""
    suffix = path.suffix.lower()
    if suffix == '.xlsx':
        return pd.read_excel(path, dtype=READ_DTYPES)
    if suffix == '.csv':
        return pd.read_csv(path, dtype=READ_DTYPES)
    raise ValueError(f"Unsupported catalog format '{suffix}', expected .csv or .xlsx")


def _clean_value(value):
    """Map pandas missing markers to None."""
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    return value


def _keep_existing(outputs: dict, record: dict):
    """Unpriced rows keep whatever pricing they already carried."""
    for column in ('price', 'appliedMargin', 'pricingRuleVersion'):
        outputs[column].append(record.get(column))


def _new_report(rule_version: str) -> dict:
    return {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "rule_version": rule_version,
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }


def price_catalog_frame(
    df: pd.DataFrame,
    engine: Optional[PricingEngine] = None
) -> tuple[pd.DataFrame, dict]:
    """
    Price every row of a catalog DataFrame.

    Args:
        df: Catalog with sku, costPrice and productRole columns
        engine: Optional engine override (defaults to the configured rule set)

    Returns:
        (priced DataFrame, report dict). Rows without cost are skipped,
        rows with invalid cost or role are marked "error".
    """
    service = ProductPricingService(engine)
    report = _new_report(service.engine.rule_version)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        msg = f"Catalog is missing required columns: {', '.join(missing)}"
        logger.error(msg)
        report["errors"].append(msg)
        report["status"] = "failed"
        return df.copy(), report

    priced = df.copy()
    outputs = {column: [] for column in OUTPUT_COLUMNS}
    by_role = Counter()
    margins = []

    for idx, row in priced.iterrows():
        record = {key: _clean_value(value) for key, value in row.items()}
        sku = record.get('sku') or f"row {idx}"

        if not has_value(record.get('costPrice')):
            _keep_existing(outputs, record)
            outputs['pricingStatus'].append("skipped")
            continue

        try:
            result = service.price_new_product(record)
        except PricingError as e:
            msg = f"SKU {sku}: {e}"
            logger.warning("Skipping %s", msg)
            report["errors"].append(msg)
            _keep_existing(outputs, record)
            outputs['pricingStatus'].append("error")
            continue

        outputs['price'].append(result['price'])
        outputs['appliedMargin'].append(result['appliedMargin'])
        outputs['pricingRuleVersion'].append(result['pricingRuleVersion'])
        outputs['pricingStatus'].append("priced")

        by_role[StrategicRole.parse(record['productRole']).value] += 1
        margins.append(result['appliedMargin'])

    for column, values in outputs.items():
        priced[column] = pd.Series(values, index=priced.index, dtype=object)

    status_counts = Counter(outputs['pricingStatus'])
    report["metrics"]["row_count"] = len(priced)
    report["metrics"]["priced"] = status_counts["priced"]
    report["metrics"]["skipped"] = status_counts["skipped"]
    report["metrics"]["errors"] = status_counts["error"]
    report["metrics"]["by_role"] = dict(sorted(by_role.items()))

    if margins:
        average = (sum(margins, Decimal("0")) / len(margins)).quantize(BASIS_POINT, rounding=ROUND_HALF_UP)
        report["metrics"]["average_margin"] = float(average)
    else:
        report["metrics"]["average_margin"] = None

    if status_counts["skipped"]:
        report["warnings"].append(
            f"{status_counts['skipped']} products have no cost price and were left manually priced"
        )

    report["status"] = "completed_with_errors" if report["errors"] else "success"
    return priced, report


def price_catalog(
    settings: Optional[Settings] = None,
    input_path: Optional[Path] = None,
    output_path: Optional[Path] = None,
    report_path: Optional[Path] = None,
    engine: Optional[PricingEngine] = None
) -> dict:
    """
    Price a catalog file and write the priced catalog and report.

    Args:
        settings: Optional settings override
        input_path: Catalog to read (defaults to settings.catalog_input)
        output_path: Priced catalog CSV (defaults to settings.priced_output)
        report_path: JSON report (defaults to settings.pricing_report)
        engine: Optional engine override

    Returns:
        Pricing report dictionary
    """
    settings = settings or get_settings()
    # The configured rule file only describes the run when it built the engine
    rule_set_file = settings.rule_set_file if engine is None else None
    engine = engine or PricingEngine(settings.rule_set)

    input_path = Path(input_path or settings.catalog_input)
    output_path = Path(output_path or settings.priced_output)
    report_path = Path(report_path or settings.pricing_report)

    if not input_path.exists():
        report = _new_report(engine.rule_version)
        msg = f"CRITICAL ERROR: {input_path} not found."
        logger.error(msg)
        report["errors"].append(msg)
        report["status"] = "failed"
        return report

    try:
        catalog = read_catalog(input_path)
    except (OSError, ValueError) as e:
        report = _new_report(engine.rule_version)
        msg = f"ERROR: Failed to read {input_path}. {e}"
        logger.error(msg)
        report["errors"].append(msg)
        report["status"] = "failed"
        return report

    logger.info("Pricing %d products from %s with rules %s", len(catalog), input_path, engine.rule_version)
    priced, report = price_catalog_frame(catalog, engine)
    report["input_files"]["catalog"] = {
        "path": str(input_path),
        "hash": get_file_hash(input_path)
    }
    if rule_set_file:
        report["input_files"]["rule_set"] = {
            "path": str(rule_set_file),
            "hash": get_file_hash(rule_set_file)
        }

    if report["status"] != "failed":
        output_path.parent.mkdir(parents=True, exist_ok=True)
        priced.to_csv(output_path, index=False)
        report["output_file"] = str(output_path)
        logger.info(
            "Priced %d of %d products, wrote %s",
            report["metrics"]["priced"], report["metrics"]["row_count"], output_path
        )

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2)
    report["report_file"] = str(report_path)

    return report


if __name__ == "__main__":
    price_catalog()
