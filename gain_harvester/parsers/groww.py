"""
Parsers for Groww export workbooks.

This module converts the positional rows of Groww's mutual fund and
stock exports (holdings statements, capital gains reports and the mutual
fund order history) into typed records for the harvesting engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import TaxRegime, DEFAULT_REGIME
from ..interfaces import BaseWorkbookParser, cell
from ..models import AssetClass, BuyDateRange, CapitalGainRecord, HoldingPosition
from ..utils import cell_to_date, is_lock_in_scheme, parse_number


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ''


class GrowwMFHoldingsParser(BaseWorkbookParser):
    """
    Parser for Groww Mutual Funds holdings statement.

    Expected format:
    - Header row starting with "Scheme Name"
    - Columns: Scheme Name, AMC, Category, Sub-category, Folio No.,
      Source, Units, Invested Value, Current Value, Returns, XIRR

    ELSS / tax saver schemes are flagged as lock-in excluded.
    """

    SOURCE_LABEL = "MF Holdings"

    def __init__(self, regime: Optional[TaxRegime] = None):
        self.regime = regime or DEFAULT_REGIME

    def parse(self, source: Any) -> List[HoldingPosition]:
        """
        Parse mutual fund holdings.

        Args:
            source: Path or file-like object of the workbook

        Returns:
            List of HoldingPosition objects
        """
        holdings = []

        try:
            rows = self._read_rows(source)
            start = self._find_header(rows, 'Scheme Name')
            if start == -1:
                print(f"   [WARN] {self.SOURCE_LABEL}: header row not found in {self._describe(source)}")
                return holdings

            for row in rows[start:]:
                name = _text(cell(row, 0))
                if not name:
                    continue
                holdings.append(self._parse_row(row, name))

            locked = sum(1 for h in holdings if h.lock_in_excluded)
            print(f"   [OK] {self.SOURCE_LABEL}: {len(holdings)} schemes ({locked} under lock-in)")

        except Exception as e:
            print(f"   [ERROR] Error reading {self._describe(source)}: {e}")

        return holdings

    def _parse_row(self, row: tuple, name: str) -> HoldingPosition:
        """Parse a single holding row."""
        category = _text(cell(row, 2))
        sub_category = _text(cell(row, 3))
        return HoldingPosition(
            name=name,
            asset_class=AssetClass.FUND,
            quantity=parse_number(cell(row, 6)),
            invested_value=parse_number(cell(row, 7)),
            current_value=parse_number(cell(row, 8)),
            lock_in_excluded=is_lock_in_scheme(name, sub_category, self.regime.lock_in_keywords),
            instrument_id=_text(cell(row, 4)) or None,
            category=f"{category} / {sub_category}" if sub_category else category,
        )


class GrowwStockHoldingsParser(BaseWorkbookParser):
    """
    Parser for Groww Stocks holdings statement.

    Expected format:
    - Header row starting with "Stock Name"
    - Columns: Stock Name, ISIN, Quantity, Average buy price, Buy value,
      Closing price, Closing value, Unrealised P&L
    """

    SOURCE_LABEL = "Stock Holdings"

    def parse(self, source: Any) -> List[HoldingPosition]:
        """
        Parse stock holdings.

        Args:
            source: Path or file-like object of the workbook

        Returns:
            List of HoldingPosition objects
        """
        holdings = []

        try:
            rows = self._read_rows(source)
            start = self._find_header(rows, 'Stock Name')
            if start == -1:
                print(f"   [WARN] {self.SOURCE_LABEL}: header row not found in {self._describe(source)}")
                return holdings

            for row in rows[start:]:
                name = _text(cell(row, 0))
                if not name:
                    continue
                holdings.append(HoldingPosition(
                    name=name,
                    asset_class=AssetClass.EQUITY,
                    quantity=parse_number(cell(row, 2)),
                    invested_value=parse_number(cell(row, 4)),
                    current_value=parse_number(cell(row, 6)),
                    instrument_id=_text(cell(row, 1)) or None,
                ))

            print(f"   [OK] {self.SOURCE_LABEL}: {len(holdings)} stocks")

        except Exception as e:
            print(f"   [ERROR] Error reading {self._describe(source)}: {e}")

        return holdings


class GrowwMFCapitalGainsParser(BaseWorkbookParser):
    """
    Parser for Groww Mutual Funds Capital Gains Report.

    Expected format:
    - Header row starting with "Scheme Name", "Scheme Code"
    - Columns: Scheme Name, Scheme Code, Category, Folio Number,
      Purchase Txn ID, Purchase Date, Matched Quantity, Purchase Price,
      Redeem Txn ID, Redeem Date, Grandfathered NAV, Redeem Price,
      Short Term Capital Gain, Long Term Capital Gain
    - Footer notes starting with "Category", "Note" or "Disclaimer"
    """

    SOURCE_LABEL = "MF Capital Gains"
    FOOTER_MARKERS = ('Category', 'Note', 'Disclaimer')

    def parse(self, source: Any) -> List[CapitalGainRecord]:
        """
        Parse mutual fund redemptions.

        Args:
            source: Path or file-like object of the workbook

        Returns:
            List of CapitalGainRecord objects, one per matched lot
        """
        records = []

        try:
            rows = self._read_rows(source)
            start = self._find_header(rows, 'Scheme Name', 'Scheme Code')
            if start == -1:
                print(f"   [WARN] {self.SOURCE_LABEL}: header row not found in {self._describe(source)}")
                return records

            for row in rows[start:]:
                name = _text(cell(row, 0))
                if not name or name == 'Scheme Name':
                    continue
                if any(marker in name for marker in self.FOOTER_MARKERS):
                    break
                records.append(self._parse_row(row, name))

            stcg = sum(r.short_term_gain for r in records)
            ltcg = sum(r.long_term_gain for r in records)
            print(f"   [OK] {self.SOURCE_LABEL}: STCG = Rs.{stcg:,.2f}, LTCG = Rs.{ltcg:,.2f}")
            print(f"      {len(records)} redemption lots loaded")

        except Exception as e:
            print(f"   [ERROR] Error reading {self._describe(source)}: {e}")

        return records

    def _parse_row(self, row: tuple, name: str) -> CapitalGainRecord:
        """Parse a single redemption lot."""
        quantity = parse_number(cell(row, 6))
        return CapitalGainRecord(
            name=name,
            asset_class=AssetClass.FUND,
            acquisition_date=cell_to_date(cell(row, 5)),
            disposal_date=cell_to_date(cell(row, 9)),
            quantity=quantity,
            cost_basis=quantity * parse_number(cell(row, 7)),
            proceeds=quantity * parse_number(cell(row, 11)),
            short_term_gain=parse_number(cell(row, 12)),
            long_term_gain=parse_number(cell(row, 13)),
            instrument_id=_text(cell(row, 1)) or None,
        )


class GrowwStockCapitalGainsParser(BaseWorkbookParser):
    """
    Parser for Groww Stocks Capital Gains Report.

    Expected format:
    - Summary rows "Short Term P&L" / "Long Term P&L" -> value in next column
    - Section headers: "Intraday trades", "Short Term trades", "Long Term trades"
    - Trade rows: Stock name, ISIN, Quantity, Buy date, Buy price,
      Buy value, Sell date, Sell price, Sell value, Realised P&L

    Intraday trades are speculative business income, not capital gains,
    and are skipped.
    """

    SOURCE_LABEL = "Stock Capital Gains"
    SECTIONS = {
        'Intraday trades': None,
        'Short Term trades': 'short',
        'Long Term trades': 'long',
    }

    def __init__(self):
        self.summary: Dict[str, float] = {}

    def parse(self, source: Any) -> List[CapitalGainRecord]:
        """
        Parse realized stock trades.

        Args:
            source: Path or file-like object of the workbook

        Returns:
            List of CapitalGainRecord objects
        """
        records = []
        self.summary = {}
        skipped_intraday = 0

        try:
            rows = self._read_rows(source)
            in_section = False
            term = None

            for row in rows:
                first = _text(cell(row, 0))
                if not first:
                    continue

                if first == 'Short Term P&L':
                    self.summary['short_term'] = parse_number(cell(row, 1))
                    continue
                if first == 'Long Term P&L':
                    self.summary['long_term'] = parse_number(cell(row, 1))
                    continue

                if first in self.SECTIONS:
                    in_section = True
                    term = self.SECTIONS[first]
                    continue

                if not in_section or first == 'Stock name' or 'trades' in first:
                    continue

                # Totals rows like "Total Long Term" close the section
                if 'Term' in first:
                    in_section = False
                    continue

                if cell(row, 2) is None or cell(row, 3) is None:
                    continue

                if term is None:
                    skipped_intraday += 1
                    continue

                records.append(self._parse_trade(row, first, term))

            short = sum(r.short_term_gain for r in records)
            long = sum(r.long_term_gain for r in records)
            print(f"   [OK] {self.SOURCE_LABEL}: STCG = Rs.{short:,.2f}, LTCG = Rs.{long:,.2f}")
            print(f"      {len(records)} trades loaded")
            if skipped_intraday:
                print(f"      {skipped_intraday} intraday trades skipped")

        except Exception as e:
            print(f"   [ERROR] Error reading {self._describe(source)}: {e}")

        return records

    def _parse_trade(self, row: tuple, name: str, term: str) -> CapitalGainRecord:
        """Parse a single trade row."""
        pnl = parse_number(cell(row, 9))
        return CapitalGainRecord(
            name=name,
            asset_class=AssetClass.EQUITY,
            acquisition_date=cell_to_date(cell(row, 3)),
            disposal_date=cell_to_date(cell(row, 6)),
            quantity=parse_number(cell(row, 2)),
            cost_basis=parse_number(cell(row, 5)),
            proceeds=parse_number(cell(row, 8)),
            short_term_gain=pnl if term == 'short' else 0.0,
            long_term_gain=pnl if term == 'long' else 0.0,
            instrument_id=_text(cell(row, 1)) or None,
        )


@dataclass
class PurchaseOrder:
    """A mutual fund purchase from the order history."""
    scheme_name: str
    units: float
    nav: float
    amount: float
    date: str


@dataclass
class OrderHistory:
    """
    Mutual fund purchases, newest first as exported.
    """
    orders: List[PurchaseOrder] = field(default_factory=list)

    def buy_dates_for(self, scheme_name: str) -> Optional[BuyDateRange]:
        """
        Get the purchase date range for a scheme.

        Order history names don't always match holdings names exactly, so
        schemes are matched on their first word in either direction.

        Returns:
            BuyDateRange, or None if no purchase matches
        """
        wanted = scheme_name.lower()
        wanted_first = wanted.split(' ')[0]
        dates = [
            o.date for o in self.orders
            if o.date and (
                wanted_first in o.scheme_name.lower()
                or o.scheme_name.lower().split(' ')[0] in wanted
            )
        ]
        if not dates:
            return None
        return BuyDateRange(first=dates[-1], last=dates[0], count=len(dates))

    def __len__(self) -> int:
        return len(self.orders)


class GrowwMFOrderHistoryParser(BaseWorkbookParser):
    """
    Parser for Groww Mutual Funds Order History.

    Expected format:
    - Header row starting with "Scheme Name", "Transaction Type"
    - Columns: Scheme Name, Transaction Type, Units, NAV, Amount, Date
    - Dates as text like "15 Apr 2024", newest first

    Only PURCHASE orders are kept.
    """

    SOURCE_LABEL = "MF Order History"

    def parse(self, source: Any) -> OrderHistory:
        """
        Parse mutual fund purchases.

        Args:
            source: Path or file-like object of the workbook

        Returns:
            OrderHistory
        """
        history = OrderHistory()

        try:
            rows = self._read_rows(source)
            start = self._find_header(rows, 'Scheme Name', 'Transaction Type')
            if start == -1:
                print(f"   [WARN] {self.SOURCE_LABEL}: header row not found in {self._describe(source)}")
                return history

            for row in rows[start:]:
                name = _text(cell(row, 0))
                if not name or _text(cell(row, 1)).upper() != 'PURCHASE':
                    continue
                history.orders.append(PurchaseOrder(
                    scheme_name=name,
                    units=parse_number(cell(row, 2)),
                    nav=parse_number(cell(row, 3)),
                    amount=parse_number(cell(row, 4)),
                    date=_text(cell(row, 5)),
                ))

            print(f"   [OK] {self.SOURCE_LABEL}: {len(history)} purchases")

        except Exception as e:
            print(f"   [ERROR] Error reading {self._describe(source)}: {e}")

        return history
