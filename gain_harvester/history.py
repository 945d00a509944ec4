"""
Historical exemption utilization.

Replays aggregation and set-off for every fiscal year found in the
realized gains, showing how much of each year's LTCG exemption was used
and how much was left on the table.
"""

import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .aggregator import GainLossAggregator
from .config import TaxRegime, DEFAULT_REGIME
from .fiscal_year import current_fiscal_year
from .models import CapitalGainRecord, FiscalYearReport
from .offset import OffsetEngine


def round_half_up(value: float) -> int:
    """Round to the nearest rupee, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class HistoricalAnalyzer:
    """
    Analyzer for exemption usage across fiscal years.

    Attributes:
        regime: Tax regime supplying exemption limits and the LTCG rate
    """

    def __init__(
        self,
        regime: Optional[TaxRegime] = None,
        aggregator: Optional[GainLossAggregator] = None,
        offset_engine: Optional[OffsetEngine] = None
    ):
        self.regime = regime or DEFAULT_REGIME
        self.aggregator = aggregator or GainLossAggregator()
        self.offset_engine = offset_engine or OffsetEngine()

    def analyze_all(
        self,
        records: Iterable[CapitalGainRecord],
        as_of_now: datetime
    ) -> List[FiscalYearReport]:
        """
        Report exemption usage for every fiscal year in the records.

        Args:
            records: Realized capital-gain records across all years
            as_of_now: Current timestamp, used to flag the running year

        Returns:
            One FiscalYearReport per year, most recent first
        """
        records = list(records)
        running_year = current_fiscal_year(as_of_now)
        rate = self.regime.ltcg_tax_rate

        reports = []
        for fiscal_year in self.aggregator.fiscal_years(records):
            summary = self.aggregator.aggregate(records, fiscal_year)
            result = self.offset_engine.offset_totals(summary.combined)

            limit = self.regime.exemption_limit(fiscal_year)
            used = min(result.net_long_gain, limit)
            wasted = max(0.0, limit - result.net_long_gain)

            reports.append(FiscalYearReport(
                fiscal_year=fiscal_year,
                net_long_gain=result.net_long_gain,
                net_short_gain=result.net_short_gain,
                exemption_limit=limit,
                exemption_used=used,
                exemption_wasted=wasted,
                tax_saved=round_half_up(used * rate),
                missed_savings=round_half_up(wasted * rate),
                is_current=fiscal_year == running_year,
            ))

        return reports

    @staticmethod
    def totals(reports: Iterable[FiscalYearReport]) -> Dict[str, float]:
        """Sum exemption usage across years."""
        totals = {
            'exemption_used': 0.0,
            'exemption_wasted': 0.0,
            'tax_saved': 0,
            'missed_savings': 0,
        }
        for report in reports:
            totals['exemption_used'] += report.exemption_used
            totals['exemption_wasted'] += report.exemption_wasted
            totals['tax_saved'] += report.tax_saved
            totals['missed_savings'] += report.missed_savings
        return totals
