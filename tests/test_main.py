"""
Tests for the command-line entry point.
"""

import json
import os
import tempfile
from datetime import datetime

import pytest
from openpyxl import load_workbook

from gain_harvester import AssetFilter, TaxRegime
from main import create_argument_parser, find_input_files, load_context, main


NOW = datetime(2025, 6, 1, 9, 0)


class TestArgumentParser:
    """Tests for create_argument_parser."""

    def test_defaults(self):
        """Test default argument values."""
        args = create_argument_parser().parse_args([])

        assert args.asset_filter == 'both'
        assert args.fiscal_year is None
        assert args.history is False
        assert args.excel_file is None

    def test_all_flags(self):
        """Test every flag is wired."""
        args = create_argument_parser().parse_args([
            '-d', 'stmts', '--mf-holdings', 'a.xlsx', '--mf-gains', 'b.xlsx',
            '--mf-orders', 'c.xlsx', '--stock-holdings', 'd.xlsx', '--stock-gains', 'e.xlsx',
            '-f', 'fund', '-y', 'FY 2024-25', '-r', 'regime.json', '--history', '-x', 'out.xlsx',
        ])

        assert args.statements_dir == 'stmts'
        assert args.mf_orders_file == 'c.xlsx'
        assert args.stock_gains_file == 'e.xlsx'
        assert args.asset_filter == 'fund'
        assert args.fiscal_year == 'FY 2024-25'
        assert args.regime_file == 'regime.json'
        assert args.history is True
        assert args.excel_file == 'out.xlsx'


class TestFindInputFiles:
    """Tests for find_input_files."""

    def test_auto_detect(self, statements_dir):
        """Test every export is found in the statements folder."""
        args = create_argument_parser().parse_args([])
        files = find_input_files(args, statements_dir)

        assert all(files.values())
        assert os.path.basename(files['stock-holdings']).startswith("Stocks_Holdings_Statement_")

    def test_explicit_path_wins(self, statements_dir):
        """Test explicit paths override detection."""
        args = create_argument_parser().parse_args(['--mf-holdings', '/tmp/custom.xlsx'])
        files = find_input_files(args, statements_dir)

        assert files['mf-holdings'] == '/tmp/custom.xlsx'


class TestLoadContext:
    """Tests for load_context."""

    def test_loads_everything(self, statements_dir):
        """Test all exports land in the context."""
        args = create_argument_parser().parse_args([])
        files = find_input_files(args, statements_dir)
        context = load_context(files, AssetFilter.FUND, TaxRegime())

        assert len(context.holdings) == 4
        assert len(context.capital_gains) == 6
        assert len(context.order_history) == 2
        assert context.asset_filter is AssetFilter.FUND
        assert set(context.loaded_files) == set(files)

    def test_missing_file_warns(self, capsys):
        """Test an explicit path that does not exist is reported and skipped."""
        context = load_context({'mf-holdings': '/nonexistent/Mutual_Funds_1_2_3.xlsx'},
                               AssetFilter.BOTH, TaxRegime())

        assert context.holdings == []
        assert "[WARN] MF Holdings file not found" in capsys.readouterr().out


class TestMain:
    """Tests for main."""

    def test_end_to_end(self, statements_dir, capsys):
        """Test a full run over a statements folder."""
        exit_code = main(['--statements', statements_dir], now=NOW)
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "[*] Fiscal year: FY 2025-26" in out
        assert "REALIZED CAPITAL GAINS - FY 2025-26" in out
        assert "₹75,000.00" in out
        assert "1. Parag Parikh Flexi Cap Fund Direct Growth" in out
        assert "bought 15 Apr 2022 → 15 Apr 2024" in out
        assert "2. RELIANCE INDUSTRIES LTD" in out
        assert "Axis Long Term Equity" not in out.split("LTCG HARVESTING RECOMMENDATIONS")[1]
        assert "₹65,000.00" in out
        assert "Exemption left unused" in out
        assert "CALCULATION COMPLETE" in out

    def test_fund_filter(self, statements_dir, capsys):
        """Test the filter keeps stocks out of the plan."""
        assert main(['-d', statements_dir, '--filter', 'mf'], now=NOW) == 0
        out = capsys.readouterr().out

        assert "RELIANCE INDUSTRIES LTD" not in out.split("LTCG HARVESTING RECOMMENDATIONS")[1]
        assert "₹60,000.00" in out

    def test_current_year_exhausted(self, statements_dir, capsys):
        """Test a low limit exhausts the current year."""
        with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.json') as tmp:
            json.dump({'exemption_limit_from': 30000}, tmp)
            regime_path = tmp.name
        try:
            exit_code = main(['-d', statements_dir, '-r', regime_path], now=NOW)
        finally:
            os.unlink(regime_path)
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "REALIZED CAPITAL GAINS - FY 2025-26" in out
        assert "LTCG limit already exhausted" in out

    def test_closed_year_has_no_recommendations(self, statements_dir, capsys):
        """Test a past fiscal year is summarized without a disposal plan."""
        exit_code = main(['-d', statements_dir, '-y', 'FY 2022-23'], now=NOW)
        out = capsys.readouterr().out

        assert exit_code == 0
        assert "REALIZED CAPITAL GAINS - FY 2022-23" in out
        assert "[WARN] FY 2022-23 is closed; skipping harvesting recommendations" in out
        assert "LTCG HARVESTING RECOMMENDATIONS" not in out
        assert "TOTAL LTCG TO HARVEST" not in out
        assert "Sell " not in out

    def test_closed_year_excel_has_no_recommendations(self, statements_dir, capsys):
        """Test the Excel export of a past year omits the plan sheet."""
        with tempfile.TemporaryDirectory() as out_dir:
            excel_path = os.path.join(out_dir, "harvest.xlsx")
            assert main(['-d', statements_dir, '-y', 'FY 2024-25', '-x', excel_path], now=NOW) == 0

            assert "Recommendations" not in load_workbook(excel_path).sheetnames

    def test_history_and_excel(self, statements_dir, capsys):
        """Test history output and Excel export."""
        with tempfile.TemporaryDirectory() as out_dir:
            excel_path = os.path.join(out_dir, "harvest.xlsx")
            exit_code = main(['-d', statements_dir, '--history', '-x', excel_path], now=NOW)
            out = capsys.readouterr().out

            assert exit_code == 0
            assert "FY 2025-26*" in out
            assert "FY 2024-25" in out
            assert "[OK] Excel exported to:" in out
            assert load_workbook(excel_path).sheetnames == [
                "Summary", "Recommendations", "History", "Realized"
            ]

    def test_no_files(self, capsys):
        """Test an empty statements folder fails cleanly."""
        with tempfile.TemporaryDirectory() as folder:
            exit_code = main(['-d', folder], now=NOW)

        assert exit_code == 1
        assert "[ERROR] No Groww exports could be loaded." in capsys.readouterr().out

    @pytest.mark.parametrize("argv,message", [
        (['--filter', 'bonds'], "Unknown asset filter"),
        (['--fiscal-year', 'FY 2024-27'], "Invalid fiscal year label"),
        (['--regime', '/nonexistent/regime.json'], "[ERROR]"),
    ])
    def test_bad_arguments(self, argv, message, capsys):
        """Test invalid options stop before any computation."""
        assert main(argv, now=NOW) == 1
        out = capsys.readouterr().out

        assert message in out
        assert "REALIZED CAPITAL GAINS" not in out

    def test_invalid_regime_file(self, capsys):
        """Test an invalid regime value is reported."""
        with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.json') as tmp:
            json.dump({'ltcg_tax_rate': 3}, tmp)
            regime_path = tmp.name
        try:
            assert main(['-r', regime_path], now=NOW) == 1
        finally:
            os.unlink(regime_path)

        assert "[ERROR] ltcg_tax_rate" in capsys.readouterr().out
