"""
Pytest configuration and shared fixtures.
"""

import sys
import os
import tempfile
from datetime import datetime

import pytest
from openpyxl import Workbook

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gain_harvester.models import AssetClass, CapitalGainRecord, HoldingPosition


@pytest.fixture
def sample_now():
    """Wall-clock time inside FY 2025-26."""
    return datetime(2025, 6, 1, 10, 30)


@pytest.fixture
def sample_records():
    """Realized lots across FY 2023-24, FY 2024-25 and FY 2025-26."""
    return [
        # FY 2025-26
        CapitalGainRecord(
            name="Parag Parikh Flexi Cap Fund Direct Growth",
            asset_class=AssetClass.FUND,
            acquisition_date="2022-05-10",
            disposal_date="2025-05-20",
            quantity=100.0,
            cost_basis=5000.0,
            proceeds=35000.0,
            long_term_gain=30000.0,
        ),
        CapitalGainRecord(
            name="INFOSYS LIMITED",
            asset_class=AssetClass.EQUITY,
            acquisition_date="2025-01-10",
            disposal_date="2025-04-15",
            quantity=10.0,
            cost_basis=18000.0,
            proceeds=16000.0,
            short_term_gain=-2000.0,
        ),
        # FY 2024-25
        CapitalGainRecord(
            name="HDFC BANK LIMITED",
            asset_class=AssetClass.EQUITY,
            acquisition_date="2021-06-01",
            disposal_date="2025-03-31",
            quantity=50.0,
            cost_basis=60000.0,
            proceeds=200000.0,
            long_term_gain=140000.0,
        ),
        # FY 2023-24
        CapitalGainRecord(
            name="Axis Bluechip Fund Direct Growth",
            asset_class=AssetClass.FUND,
            acquisition_date="2020-01-15",
            disposal_date="15 Jan 2024",
            quantity=200.0,
            cost_basis=8000.0,
            proceeds=48000.0,
            long_term_gain=40000.0,
        ),
    ]


@pytest.fixture
def sample_holdings():
    """Open positions: equity A and fund B from the 125000 walkthrough."""
    return [
        HoldingPosition(
            name="A",
            asset_class=AssetClass.EQUITY,
            quantity=100,
            invested_value=120000.0,
            current_value=200000.0,
        ),
        HoldingPosition(
            name="B",
            asset_class=AssetClass.FUND,
            quantity=300.0,
            invested_value=90000.0,
            current_value=150000.0,
        ),
    ]


@pytest.fixture
def make_workbook():
    """
    Build an .xlsx file from rows and return its path.

    Files are removed after the test.
    """
    paths = []

    def _make(rows, suffix='.xlsx'):
        wb = Workbook()
        ws = wb.active
        for row in rows:
            ws.append(list(row))
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
            wb.save(tmp.name)
            paths.append(tmp.name)
        return tmp.name

    yield _make

    for path in paths:
        if os.path.exists(path):
            os.unlink(path)


GROWW_EXPORTS = {
    "Mutual_Funds_4821_01-04-2025_01-06-2025.xlsx": [
        ["Scheme Name", "AMC", "Category", "Sub-category", "Folio No.", "Source",
         "Units", "Invested Value", "Current Value", "Returns", "XIRR"],
        ["Parag Parikh Flexi Cap Fund Direct Growth", "PPFAS", "Equity", "Flexi Cap", "12345", "Groww",
         300.5, 90000, 150000, 60000, "15%"],
        ["Axis Long Term Equity Fund Direct Growth", "Axis", "Equity", "ELSS", "999", "Groww",
         100, 10000, 15000, 5000, "10%"],
    ],
    "Stocks_Holdings_Statement_4821_2025-06-01.xlsx": [
        ["Stock Name", "ISIN", "Quantity", "Average buy price", "Buy value",
         "Closing price", "Closing value", "Unrealised P&L"],
        ["RELIANCE INDUSTRIES LTD", "INE002A01018", 10, 2400, 24000, 2900, 29000, 5000],
        ["TATA STEEL LIMITED", "INE081A01020", 100, 150, 15000, 140, 14000, -1000],
    ],
    "Mutual_Funds_Capital_Gains_Report_01-04-2024_01-06-2025.xlsx": [
        ["Scheme Name", "Scheme Code", "Category", "Folio Number", "Purchase Txn ID", "Purchase Date",
         "Matched Quantity", "Purchase Price", "Redeem Txn ID", "Redeem Date", "Grandfathered NAV",
         "Redeem Price", "Short Term Capital Gain", "Long Term Capital Gain"],
        ["HDFC Index Fund", "INF179K01XZ1", "Equity", "F1", "P1", "2022-05-10",
         100, 50, "R1", "2025-05-20", None, 350, 0, 30000],
        ["Quant Small Cap Fund", "INF966L01689", "Equity", "F2", "P2", "2024-11-01",
         10, 200, "R2", "2025-04-20", None, 180, -200, 0],
        ["Axis Bluechip Fund", "INF846K01DP8", "Equity", "F3", "P3", "2020-01-15",
         200, 40, "R3", "2025-01-15", None, 240, 0, 40000],
        ["Note: grandfathered NAV applies to units bought before 31-01-2018"],
    ],
    "Stocks_Capital_Gains_Report_4821_2025-04-01_2025-06-01.xlsx": [
        ["Short Term P&L", 1500],
        ["Long Term P&L", 20000],
        ["Short Term trades"],
        ["Stock name", "ISIN", "Quantity", "Buy date", "Buy price", "Buy value",
         "Sell date", "Sell price", "Sell value", "Realised P&L"],
        ["INFOSYS LIMITED", "INE009A01021", 10, "2025-01-10", 1800, 18000, "2025-04-15", 1600, 16000, -2000],
        ["TCS LTD", "INE467B01029", 5, "2024-12-01", 3500, 17500, "2025-05-01", 4200, 21000, 3500],
        ["Total Short Term", None, None, None, None, 35500, None, None, 37000, 1500],
        ["Long Term trades"],
        ["Stock name", "ISIN", "Quantity", "Buy date", "Buy price", "Buy value",
         "Sell date", "Sell price", "Sell value", "Realised P&L"],
        ["HDFC BANK LIMITED", "INE040A01034", 50, "2021-06-01", 1200, 60000, "2025-05-31", 1600, 80000, 20000],
        ["Total Long Term", None, None, None, None, 60000, None, None, 80000, 20000],
    ],
    "Mutual_Funds_Order_History_01-04-2020_01-06-2025.xlsx": [
        ["Scheme Name", "Transaction Type", "Units", "NAV", "Amount", "Date"],
        ["Parag Parikh Flexi Cap Fund", "PURCHASE", 10, 70, 700, "15 Apr 2024"],
        ["Parag Parikh Flexi Cap Fund", "PURCHASE", 10, 60, 600, "15 Apr 2022"],
    ],
}


@pytest.fixture
def statements_dir():
    """
    A statements folder holding one of each Groww export.

    FY 2025-26 (as of 1 June 2025): LTCG 50000, STCG 3500, STCL 2200.
    FY 2024-25: LTCG 40000.
    """
    with tempfile.TemporaryDirectory() as folder:
        for filename, rows in GROWW_EXPORTS.items():
            wb = Workbook()
            for row in rows:
                wb.active.append(row)
            wb.save(os.path.join(folder, filename))
        yield folder
