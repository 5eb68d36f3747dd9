#!/usr/bin/env python
"""
Price a single product and show how the price was resolved.

Usage:
    python scripts/quote.py 14.90 IMPULSE
"""
import argparse
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from retail_pricing.engine import PricingError, StrategicRole
from retail_pricing.engine.pricing_engine import get_engine


def main(argv=None):
    parser = argparse.ArgumentParser(description="Quote a retail price from cost and strategic role.")
    parser.add_argument('cost', help="Wholesale cost, e.g. 14.90")
    parser.add_argument('role', help=f"One of: {', '.join(r.value for r in StrategicRole)}")
    args = parser.parse_args(argv)

    try:
        result = get_engine().calculate_price(args.cost, args.role)
    except PricingError as e:
        print(f"ERROR: {e}")
        return 1

    print(result.get_trace_text())
    print()
    print(f"Final price: {result.final_price}")
    print(f"Applied margin: {result.applied_margin * 100:.2f}%")
    print(f"Rule version: {result.rule_version}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
