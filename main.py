#!/usr/bin/env python3
"""
Tax Gain Harvester - Main Entry Point

Reads Groww exports, computes realized gains with loss set-off for the
fiscal year, and recommends holdings to sell and buy back so that LTCG
uses up the remaining Section 112A exemption.

Usage:
    python main.py
    python main.py --filter fund
    python main.py --stock-holdings path/to/Stocks_Holdings_Statement.xlsx --history
"""

import argparse
import os
import sys
from datetime import datetime
from typing import Optional

# Set UTF-8 encoding for console output (fixes Windows encoding issues)
if sys.platform == 'win32':
    sys.stdout.reconfigure(encoding='utf-8')

from gain_harvester import (
    AssetFilter,
    FiscalYear,
    HarvestContext,
    TaxGainHarvester,
    TaxRegime,
    current_fiscal_year,
    load_regime,
)
from gain_harvester.parsers import (
    GrowwMFHoldingsParser,
    GrowwStockHoldingsParser,
    GrowwMFCapitalGainsParser,
    GrowwStockCapitalGainsParser,
    GrowwMFOrderHistoryParser,
)
from gain_harvester.reports import ConsoleReporter, ExcelReporter
from gain_harvester.utils import FILE_TYPE_LABELS, find_statements_by_type


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Tax Gain Harvester for Groww Mutual Funds & Stocks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
    (Auto-detects Groww exports in the statements folder)

  python main.py --filter fund
    (Only recommend mutual fund redemptions)

  python main.py --fiscal-year "FY 2024-25" --history --excel harvest.xlsx
    (Summarize a past year, show exemption history and export to Excel)
"""
    )

    parser.add_argument('--statements', '-d', dest='statements_dir',
                        help='Folder with Groww exports (default: ./statements)')
    parser.add_argument('--mf-holdings', dest='mf_holdings_file',
                        help='Path to Groww Mutual Funds holdings XLSX file')
    parser.add_argument('--mf-gains', dest='mf_gains_file',
                        help='Path to Groww Mutual Funds capital gains XLSX file')
    parser.add_argument('--mf-orders', dest='mf_orders_file',
                        help='Path to Groww Mutual Funds order history XLSX file')
    parser.add_argument('--stock-holdings', dest='stock_holdings_file',
                        help='Path to Groww Stocks holdings statement XLSX file')
    parser.add_argument('--stock-gains', dest='stock_gains_file',
                        help='Path to Groww Stocks capital gains XLSX file')
    parser.add_argument('--filter', '-f', dest='asset_filter', default='both',
                        help='Holdings to harvest from: fund, equity or both (default: both)')
    parser.add_argument('--fiscal-year', '-y', dest='fiscal_year',
                        help='Fiscal year to summarize, e.g. "FY 2025-26" (default: current)')
    parser.add_argument('--regime', '-r', dest='regime_file',
                        help='Path to a JSON file overriding exemption limits and LTCG rate')
    parser.add_argument('--history', action='store_true',
                        help='Show exemption usage for every fiscal year in the data')
    parser.add_argument('--excel', '-x', dest='excel_file',
                        help='Export the report to this XLSX path')

    return parser


def find_input_files(args, statements_folder: str) -> dict:
    """Find all input files based on arguments or auto-detection."""
    detected = find_statements_by_type(statements_folder)
    return {
        'mf-holdings': args.mf_holdings_file or detected.get('mf-holdings'),
        'mf-capital-gains': args.mf_gains_file or detected.get('mf-capital-gains'),
        'mf-order-history': args.mf_orders_file or detected.get('mf-order-history'),
        'stock-holdings': args.stock_holdings_file or detected.get('stock-holdings'),
        'stock-capital-gains': args.stock_gains_file or detected.get('stock-capital-gains'),
    }


def print_header(fiscal_year: FiscalYear, files: dict, asset_filter: AssetFilter):
    """Print the application header."""
    print("=" * 80)
    print("  TAX GAIN HARVESTER")
    print("=" * 80)
    print(f"\n[*] Fiscal year: {fiscal_year}")
    print(f"[*] Harvest from: {asset_filter.value}")

    print("\n[*] Input Files:")
    for file_type, label in FILE_TYPE_LABELS.items():
        print(f"   {(label + ':').ljust(22)} {files.get(file_type) or 'Not found'}")


def resolve_regime(regime_file: Optional[str]) -> TaxRegime:
    """
    Load the tax regime.

    Raises:
        ValueError: If the file holds an invalid regime
        OSError: If the file cannot be read
    """
    if not regime_file:
        return TaxRegime()
    return load_regime(regime_file)


def load_context(files: dict, asset_filter: AssetFilter, regime: TaxRegime) -> HarvestContext:
    """Parse every available export into a HarvestContext."""
    context = HarvestContext(asset_filter=asset_filter)

    loaders = [
        ('mf-holdings', GrowwMFHoldingsParser(regime), context.holdings),
        ('stock-holdings', GrowwStockHoldingsParser(), context.holdings),
        ('mf-capital-gains', GrowwMFCapitalGainsParser(), context.capital_gains),
        ('stock-capital-gains', GrowwStockCapitalGainsParser(), context.capital_gains),
    ]

    for file_type, parser, target in loaders:
        path = files.get(file_type)
        if not path:
            continue
        if not os.path.exists(path):
            print(f"\n[WARN] {FILE_TYPE_LABELS[file_type]} file not found: {path}")
            continue
        print(f"\n[+] Loading {FILE_TYPE_LABELS[file_type]} from: {os.path.basename(path)}")
        target.extend(parser.parse(path))
        context.loaded_files[file_type] = path

    orders_path = files.get('mf-order-history')
    if orders_path and os.path.exists(orders_path):
        print(f"\n[+] Loading {FILE_TYPE_LABELS['mf-order-history']} from: {os.path.basename(orders_path)}")
        context.order_history = GrowwMFOrderHistoryParser().parse(orders_path)
        context.loaded_files['mf-order-history'] = orders_path

    return context


def main(argv=None, now: Optional[datetime] = None):
    """Main function to run the tax gain harvester."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    now = now or datetime.now()

    try:
        asset_filter = AssetFilter.parse(args.asset_filter)
        fiscal_year = FiscalYear.from_label(args.fiscal_year) if args.fiscal_year else None
        regime = resolve_regime(args.regime_file)
    except (ValueError, OSError) as e:
        print(f"[ERROR] {e}")
        return 1

    harvester = TaxGainHarvester(regime)
    fiscal_year = fiscal_year or current_fiscal_year(now)

    script_dir = os.path.dirname(os.path.abspath(__file__))
    statements_folder = args.statements_dir or os.path.join(script_dir, "statements")

    files = find_input_files(args, statements_folder)
    print_header(fiscal_year, files, asset_filter)

    context = load_context(files, asset_filter, regime)

    if not context.capital_gains and not context.holdings:
        print("\n[ERROR] No Groww exports could be loaded.")
        return 1

    unreconciled = [r for r in context.capital_gains if not r.is_reconciled()]
    if unreconciled:
        print(f"\n[WARN] {len(unreconciled)} lots report a gain different from sale minus cost "
              "(grandfathered NAV or rounding)")

    summary = harvester.summarize_current_year(context.capital_gains, now, fiscal_year)
    plan = None
    if fiscal_year == current_fiscal_year(now):
        plan = harvester.recommend_disposals(
            summary.remaining_exemption, context.holdings, context.asset_filter
        )
    else:
        print(f"\n[WARN] {fiscal_year} is closed; skipping harvesting recommendations")
    history = harvester.analyze_history(context.capital_gains, now) if args.history else None

    buy_dates = context.order_history.buy_dates_for if context.order_history else None
    ConsoleReporter().generate(summary, plan, history, buy_dates=buy_dates)

    if args.excel_file:
        ExcelReporter().export(
            args.excel_file,
            summary,
            plan=plan,
            history=history,
            records=context.capital_gains,
        )

    print("\n" + "=" * 80)
    print("  CALCULATION COMPLETE")
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
