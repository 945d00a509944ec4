"""
Entry points of the harvesting engine.

This module ties fiscal year attribution, aggregation, loss set-off,
exemption allocation and the historical replay together behind the
TaxGainHarvester class and three module-level functions.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Union

from .aggregator import GainLossAggregator
from .allocator import ExemptionAllocator
from .config import TaxRegime, DEFAULT_REGIME
from .fiscal_year import current_fiscal_year
from .history import HistoricalAnalyzer
from .models import (
    AssetFilter,
    CapitalGainRecord,
    FilingYearSummary,
    FiscalYear,
    FiscalYearReport,
    HarvestContext,
    HarvestPlan,
    HoldingPosition,
)
from .offset import OffsetEngine


class TaxGainHarvester:
    """
    Facade over the harvesting engine.

    Everything here is a pure computation over the records and holdings
    passed in; nothing is cached between calls.

    Example:
        >>> harvester = TaxGainHarvester()
        >>> summary = harvester.summarize_current_year(records, now=datetime.now())
        >>> plan = harvester.recommend_disposals(
        ...     summary.remaining_exemption, holdings, AssetFilter.BOTH
        ... )
        >>> for rec in plan.recommendations:
        ...     print(rec.name, rec.get_units_str())
    """

    def __init__(self, regime: Optional[TaxRegime] = None):
        """
        Initialize the harvester.

        Args:
            regime: Tax regime to use. Defaults to the current rules.
        """
        self.regime = regime or DEFAULT_REGIME
        self.aggregator = GainLossAggregator()
        self.offset_engine = OffsetEngine()
        self.allocator = ExemptionAllocator()
        self.analyzer = HistoricalAnalyzer(self.regime, self.aggregator, self.offset_engine)

    def compute_filing_year_summary(
        self,
        records: Iterable[CapitalGainRecord],
        target_fiscal_year: Optional[FiscalYear],
        exemption_limit: float
    ) -> FilingYearSummary:
        """
        Compute realized gains, set-off and remaining exemption for a year.

        Args:
            records: Realized capital-gain records
            target_fiscal_year: Year to summarize. None uses every record.
            exemption_limit: Exemption limit for that year

        Returns:
            FilingYearSummary
        """
        breakdown = self.aggregator.aggregate(records, target_fiscal_year)
        totals = breakdown.combined
        result = self.offset_engine.offset_totals(totals)

        return FilingYearSummary(
            fiscal_year=target_fiscal_year,
            exemption_limit=exemption_limit,
            total_long_gain=totals.long_gain,
            total_short_gain=totals.short_gain,
            total_long_loss=totals.long_loss,
            total_short_loss=totals.short_loss,
            net_long_gain=result.net_long_gain,
            net_short_gain=result.net_short_gain,
            remaining_exemption=max(0.0, exemption_limit - result.net_long_gain),
            breakdown=breakdown,
            offset=result,
        )

    def summarize_current_year(
        self,
        records: Iterable[CapitalGainRecord],
        now: datetime,
        fiscal_year: Optional[FiscalYear] = None
    ) -> FilingYearSummary:
        """
        Summarize a year using the regime's exemption limit.

        Args:
            records: Realized capital-gain records
            now: Current timestamp; picks the year when none is given
            fiscal_year: Explicit year to summarize (optional)
        """
        fiscal_year = fiscal_year or current_fiscal_year(now)
        return self.compute_filing_year_summary(
            records,
            fiscal_year,
            self.regime.exemption_limit(fiscal_year),
        )

    def recommend_disposals(
        self,
        remaining_exemption: float,
        holdings: Iterable[HoldingPosition],
        asset_filter: Union[AssetFilter, str] = AssetFilter.BOTH
    ) -> HarvestPlan:
        """
        Recommend holdings to sell and buy back to use the exemption.

        Args:
            remaining_exemption: Unused exemption for the year
            holdings: Currently held positions
            asset_filter: 'fund', 'equity' or 'both'

        Returns:
            HarvestPlan
        """
        return self.allocator.allocate_remaining(remaining_exemption, holdings, asset_filter)

    def plan_for_context(
        self,
        summary: FilingYearSummary,
        context: HarvestContext,
        asset_filter: Union[AssetFilter, str, None] = None
    ) -> HarvestPlan:
        """
        Build the disposal plan for a loaded session.

        A new asset_filter replaces the one stored on the context, so a
        changed filter re-runs the allocation over the same holdings.
        """
        if asset_filter is not None:
            context.asset_filter = AssetFilter.parse(asset_filter)
        return self.recommend_disposals(
            summary.remaining_exemption, context.holdings, context.asset_filter
        )

    def analyze_history(
        self,
        records: Iterable[CapitalGainRecord],
        now: Optional[datetime] = None
    ) -> List[FiscalYearReport]:
        """
        Report exemption usage for every fiscal year in the records.

        Args:
            records: Realized capital-gain records
            now: Current timestamp (defaults to the system clock)
        """
        return self.analyzer.analyze_all(records, now or datetime.now())


def compute_filing_year_summary(
    records: Iterable[CapitalGainRecord],
    target_fiscal_year: Optional[FiscalYear],
    exemption_limit: float
) -> FilingYearSummary:
    """Compute the filing-year summary with the default regime."""
    return TaxGainHarvester().compute_filing_year_summary(
        records, target_fiscal_year, exemption_limit
    )


def recommend_disposals(
    remaining_exemption: float,
    holdings: Iterable[HoldingPosition],
    asset_filter: Union[AssetFilter, str] = AssetFilter.BOTH
) -> HarvestPlan:
    """Recommend disposals for the remaining exemption."""
    return TaxGainHarvester().recommend_disposals(remaining_exemption, holdings, asset_filter)


def analyze_history(
    records: Iterable[CapitalGainRecord],
    now: Optional[datetime] = None,
    regime: Optional[TaxRegime] = None
) -> List[FiscalYearReport]:
    """Report exemption usage per fiscal year."""
    return TaxGainHarvester(regime).analyze_history(records, now)
