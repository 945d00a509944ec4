"""
Data models for the Tax Gain Harvester.

This module contains dataclasses representing realized capital-gain lots,
open holdings, aggregated totals and the results produced by the
harvesting engine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple, Union


DateLike = Union[date, datetime, str, None]


class AssetClass(Enum):
    """Asset class of a record or holding."""
    FUND = "fund"       # Mutual fund
    EQUITY = "equity"   # Listed equity share

    @property
    def label(self) -> str:
        return "MF" if self is AssetClass.FUND else "Stock"


class Term(Enum):
    """Holding-period classification of a realized gain."""
    SHORT = "short"
    LONG = "long"


class AssetFilter(Enum):
    """Which asset classes the allocator may pick from."""
    FUND = "fund"
    EQUITY = "equity"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Union[str, "AssetFilter"]) -> "AssetFilter":
        """
        Parse a filter from user input.

        Accepts the enum values plus the aliases used by the broker UI
        ('mf', 'stock').

        Raises:
            ValueError: If the value is not a known filter
        """
        if isinstance(value, cls):
            return value
        aliases = {
            'fund': cls.FUND, 'mf': cls.FUND, 'mutual_fund': cls.FUND,
            'equity': cls.EQUITY, 'stock': cls.EQUITY, 'stocks': cls.EQUITY,
            'both': cls.BOTH, 'all': cls.BOTH,
        }
        key = str(value or '').strip().lower()
        if key not in aliases:
            raise ValueError(f"Unknown asset filter: {value!r}")
        return aliases[key]

    def accepts(self, asset_class: AssetClass) -> bool:
        """Check whether holdings of the given asset class pass the filter."""
        if self is AssetFilter.BOTH:
            return True
        return self.value == asset_class.value


class HarvestStatus(Enum):
    """Outcome of an exemption allocation."""
    FILLED = "filled"               # Remaining exemption fully used
    PARTIAL = "partial"             # Candidates ran out first
    EXHAUSTED = "exhausted"         # Nothing left to fill this year
    NO_CANDIDATES = "no_candidates" # No eligible holding with gains


@dataclass(frozen=True, order=True)
class FiscalYear:
    """
    Indian financial year running from 1 April to 31 March.

    Attributes:
        start_year: Calendar year in which the fiscal year starts
    """
    start_year: int

    @property
    def label(self) -> str:
        """Label like 'FY 2024-25'."""
        return f"FY {self.start_year}-{(self.start_year + 1) % 100:02d}"

    @property
    def start_date(self) -> date:
        return date(self.start_year, 4, 1)

    @property
    def end_date(self) -> date:
        return date(self.start_year + 1, 3, 31)

    def contains(self, value: date) -> bool:
        if isinstance(value, datetime):
            value = value.date()
        return self.start_date <= value <= self.end_date

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_label(cls, label: str) -> "FiscalYear":
        """
        Parse a label like 'FY 2024-25' (the 'FY' prefix is optional).

        Raises:
            ValueError: If the label is malformed or the years don't follow
        """
        text = str(label or '').strip().upper()
        if text.startswith('FY'):
            text = text[2:].strip()
        try:
            start_str, end_str = text.split('-')
            start_year = int(start_str)
            end_suffix = int(end_str)
        except ValueError:
            raise ValueError(f"Invalid fiscal year label: {label!r}")
        if (start_year + 1) % 100 != end_suffix % 100:
            raise ValueError(f"Invalid fiscal year label: {label!r}")
        return cls(start_year)


@dataclass
class CapitalGainRecord:
    """
    Represents one matched buy/sell lot that has already been disposed of.

    Attributes:
        name: Scheme or stock name
        asset_class: FUND or EQUITY
        acquisition_date: Purchase date of the lot
        disposal_date: Redemption/sale date of the lot
        quantity: Units or shares matched
        cost_basis: Total purchase value of the lot
        proceeds: Total redemption/sale value of the lot
        short_term_gain: Signed short-term gain/loss reported for the lot
        long_term_gain: Signed long-term gain/loss reported for the lot
        instrument_id: ISIN or scheme code (optional)
    """
    name: str
    asset_class: AssetClass
    acquisition_date: DateLike = None
    disposal_date: DateLike = None
    quantity: float = 0.0
    cost_basis: float = 0.0
    proceeds: float = 0.0
    short_term_gain: float = 0.0
    long_term_gain: float = 0.0
    instrument_id: Optional[str] = None

    @property
    def gain(self) -> float:
        """Gain implied by the lot values."""
        return self.proceeds - self.cost_basis

    @property
    def reported_gain(self) -> float:
        """Gain as reported by the broker (short + long)."""
        return self.short_term_gain + self.long_term_gain

    @property
    def term(self) -> Term:
        return Term.LONG if self.long_term_gain != 0 else Term.SHORT

    def is_reconciled(self, tolerance: float = 1.0) -> bool:
        """
        Check that the reported gain matches proceeds minus cost basis.

        Records without cost basis or proceeds cannot be checked and are
        treated as reconciled. Grandfathered fund lots legitimately differ.
        """
        if not self.cost_basis or not self.proceeds:
            return True
        return abs(self.gain - self.reported_gain) <= tolerance


@dataclass
class HoldingPosition:
    """
    Represents a currently open, undisposed position.

    Attributes:
        name: Scheme or stock name
        asset_class: FUND or EQUITY
        quantity: Units or shares held
        invested_value: Total purchase value
        current_value: Current market value
        lock_in_excluded: True for instruments under statutory lock-in (ELSS)
        instrument_id: ISIN or folio (optional)
        category: Broker category / sub-category (optional)
    """
    name: str
    asset_class: AssetClass
    quantity: float
    invested_value: float
    current_value: float
    lock_in_excluded: bool = False
    instrument_id: Optional[str] = None
    category: str = ""

    @property
    def unrealized_gain(self) -> float:
        return self.current_value - self.invested_value

    @property
    def price_per_unit(self) -> float:
        return self.current_value / self.quantity if self.quantity else 0.0

    @property
    def gain_per_unit(self) -> float:
        return self.unrealized_gain / self.quantity if self.quantity else 0.0

    @property
    def efficiency(self) -> float:
        """Fraction of the position value that is gain."""
        return self.unrealized_gain / self.current_value if self.current_value else 0.0

    @property
    def is_harvestable(self) -> bool:
        """Whether the position may be sold to realize gains."""
        return (
            not self.lock_in_excluded
            and self.quantity > 0
            and self.current_value > 0
            and self.unrealized_gain > 0
        )


@dataclass
class GainLossTotals:
    """
    Gains and losses for one bucket, losses kept as absolute values.
    """
    short_gain: float = 0.0
    short_loss: float = 0.0
    long_gain: float = 0.0
    long_loss: float = 0.0

    def __add__(self, other: "GainLossTotals") -> "GainLossTotals":
        return GainLossTotals(
            short_gain=self.short_gain + other.short_gain,
            short_loss=self.short_loss + other.short_loss,
            long_gain=self.long_gain + other.long_gain,
            long_loss=self.long_loss + other.long_loss,
        )

    @property
    def net_short(self) -> float:
        return self.short_gain - self.short_loss

    @property
    def net_long(self) -> float:
        return self.long_gain - self.long_loss

    def to_dict(self) -> Dict[str, float]:
        return {
            'short_gain': self.short_gain,
            'short_loss': self.short_loss,
            'long_gain': self.long_gain,
            'long_loss': self.long_loss,
        }


@dataclass(frozen=True)
class AggregateSummary:
    """Totals per asset class plus the combined totals."""
    fund: GainLossTotals
    equity: GainLossTotals
    record_count: int = 0

    @property
    def combined(self) -> GainLossTotals:
        return self.fund + self.equity


@dataclass(frozen=True)
class OffsetResult:
    """
    Net taxable gains after loss set-off.

    Attributes:
        net_short_gain: Short-term gain left after short-term losses
        net_long_gain: Long-term gain left after all permitted set-offs
        remaining_short_loss: Short-term loss left after netting short gains
        short_loss_applied_to_long: Part of remaining_short_loss absorbed by long gain
        long_loss_applied: Long-term loss absorbed by long gain
        unabsorbed_short_loss: Short-term loss nothing could absorb
        unabsorbed_long_loss: Long-term loss nothing could absorb
    """
    net_short_gain: float = 0.0
    net_long_gain: float = 0.0
    remaining_short_loss: float = 0.0
    short_loss_applied_to_long: float = 0.0
    long_loss_applied: float = 0.0
    unabsorbed_short_loss: float = 0.0
    unabsorbed_long_loss: float = 0.0


@dataclass(frozen=True)
class DisposalRecommendation:
    """A suggested sale (and immediate repurchase) of one holding."""
    name: str
    asset_class: AssetClass
    units_to_sell: float
    gain_from_sale: float
    capital_required: float
    efficiency: float
    total_units: float
    is_full_exit: bool
    instrument_id: Optional[str] = None

    def get_units_str(self) -> str:
        """Get units formatted like '12.34 units' or '7 shares'."""
        if self.asset_class is AssetClass.EQUITY:
            return f"{int(self.units_to_sell)} shares"
        return f"{self.units_to_sell:.2f} units"


@dataclass(frozen=True)
class HarvestPlan:
    """Result of an exemption allocation."""
    status: HarvestStatus
    remaining_exemption: float
    recommendations: Tuple[DisposalRecommendation, ...] = ()
    total_gain_harvested: float = 0.0
    total_capital_required: float = 0.0

    @property
    def unfilled_exemption(self) -> float:
        return max(0.0, self.remaining_exemption - self.total_gain_harvested)


@dataclass(frozen=True)
class FilingYearSummary:
    """Realized position for one fiscal year."""
    fiscal_year: FiscalYear
    exemption_limit: float
    total_long_gain: float
    total_short_gain: float
    total_long_loss: float
    total_short_loss: float
    net_long_gain: float
    net_short_gain: float
    remaining_exemption: float
    breakdown: Optional[AggregateSummary] = None
    offset: Optional[OffsetResult] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for Excel export."""
        return {
            'fiscal_year': str(self.fiscal_year) if self.fiscal_year else '',
            'exemption_limit': self.exemption_limit,
            'total_long_gain': self.total_long_gain,
            'total_short_gain': self.total_short_gain,
            'total_long_loss': self.total_long_loss,
            'total_short_loss': self.total_short_loss,
            'net_long_gain': self.net_long_gain,
            'net_short_gain': self.net_short_gain,
            'remaining_exemption': self.remaining_exemption,
        }


@dataclass(frozen=True)
class FiscalYearReport:
    """Exemption utilization for one historical fiscal year."""
    fiscal_year: FiscalYear
    net_long_gain: float
    net_short_gain: float
    exemption_limit: float
    exemption_used: float
    exemption_wasted: float
    tax_saved: int
    missed_savings: int
    is_current: bool = False


@dataclass(frozen=True)
class BuyDateRange:
    """Purchase dates found for a scheme in the order history."""
    first: str
    last: str
    count: int

    def __str__(self) -> str:
        return f"{self.first} → {self.last}" if self.count > 1 else self.first


@dataclass
class HarvestContext:
    """
    Everything loaded for one harvesting session.

    Owned by the caller (CLI run or web session) and passed explicitly
    into the engine.
    """
    capital_gains: List[CapitalGainRecord] = field(default_factory=list)
    holdings: List[HoldingPosition] = field(default_factory=list)
    order_history: Optional[Any] = None
    asset_filter: AssetFilter = AssetFilter.BOTH
    loaded_files: Dict[str, str] = field(default_factory=dict)
