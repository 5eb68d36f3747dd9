#!/usr/bin/env python
"""
Catalog pricing pipeline - prices a catalog export and writes a report.

Usage:
    python scripts/price_catalog.py [--input data/catalog.csv] [--output ...] [--report ...]
"""
import argparse
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from retail_pricing.data.price_catalog import price_catalog


def main(argv=None):
    parser = argparse.ArgumentParser(description="Price a product catalog from cost and strategic role.")
    parser.add_argument('--input', type=Path, help="Catalog CSV or Excel file")
    parser.add_argument('--output', type=Path, help="Priced catalog CSV")
    parser.add_argument('--report', type=Path, help="Pricing report JSON")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("CATALOG PRICING")
    print("=" * 60)
    print()

    report = price_catalog(input_path=args.input, output_path=args.output, report_path=args.report)

    if report["status"] == "failed":
        print("\n❌ PRICING FAILED")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        return 1

    metrics = report["metrics"]
    print(f"Rule version: {report['rule_version']}")
    print(f"  Products: {metrics['row_count']}")
    print(f"  Priced: {metrics['priced']}")
    print(f"  Skipped (no cost): {metrics['skipped']}")
    print(f"  Errors: {metrics['errors']}")
    if metrics['average_margin'] is not None:
        print(f"  Average margin: {metrics['average_margin'] * 100:.2f}%")
    print()
    print("By role:")
    for role, count in metrics['by_role'].items():
        print(f"  {role}: {count}")

    for error in report["errors"]:
        print(f"  ERROR: {error}")

    print()
    print(f"Output: {report.get('output_file')}")
    print(f"Report: {report.get('report_file')}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
