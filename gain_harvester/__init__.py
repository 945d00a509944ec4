"""
Tax Gain Harvester Package

Computes realized capital gains with loss set-off for Indian mutual fund
and stock investors, and recommends holdings to sell and buy back so that
long-term gains use up the annual Section 112A exemption.
"""

__version__ = "2.0.0"

from .models import (
    AssetClass,
    AssetFilter,
    CapitalGainRecord,
    DisposalRecommendation,
    FilingYearSummary,
    FiscalYear,
    FiscalYearReport,
    HarvestContext,
    HarvestPlan,
    HarvestStatus,
    HoldingPosition,
    Term,
)
from .config import ExemptionSchedule, TaxRegime, load_regime
from .fiscal_year import classify, current_fiscal_year, parse_date
from .aggregator import GainLossAggregator
from .offset import OffsetEngine
from .allocator import ExemptionAllocator
from .history import HistoricalAnalyzer
from .harvester import (
    TaxGainHarvester,
    compute_filing_year_summary,
    recommend_disposals,
    analyze_history,
)
from .interfaces import (
    IHoldingsParser,
    ICapitalGainsParser,
    IReporter,
    BaseWorkbookParser,
)

__all__ = [
    # Models
    "AssetClass",
    "AssetFilter",
    "CapitalGainRecord",
    "DisposalRecommendation",
    "FilingYearSummary",
    "FiscalYear",
    "FiscalYearReport",
    "HarvestContext",
    "HarvestPlan",
    "HarvestStatus",
    "HoldingPosition",
    "Term",
    # Configuration
    "ExemptionSchedule",
    "TaxRegime",
    "load_regime",
    # Engine
    "classify",
    "current_fiscal_year",
    "parse_date",
    "GainLossAggregator",
    "OffsetEngine",
    "ExemptionAllocator",
    "HistoricalAnalyzer",
    "TaxGainHarvester",
    "compute_filing_year_summary",
    "recommend_disposals",
    "analyze_history",
    # Interfaces
    "IHoldingsParser",
    "ICapitalGainsParser",
    "IReporter",
    "BaseWorkbookParser",
]
