"""
Console reporting module for the Tax Gain Harvester.

This module provides the ConsoleReporter class for printing the filing
year summary, the disposal plan and the exemption history.
"""

from typing import Callable, List, Optional

from ..models import (
    AssetClass,
    BuyDateRange,
    FilingYearSummary,
    FiscalYearReport,
    HarvestPlan,
    HarvestStatus,
)
from ..utils import format_currency_inr


WIDTH = 90


def _line(text: str = "") -> None:
    print("║   " + text.ljust(WIDTH - 3) + "║")


def _amount_line(label: str, amount: float, indent: int = 0) -> None:
    amount_str = format_currency_inr(amount, decimals=2)
    print("║   " + " " * indent + label.ljust(50 - indent) + amount_str.rjust(WIDTH - 56) + "   ║")


def _section(title: str) -> None:
    _line()
    _line(title)
    print("╟" + "─" * WIDTH + "╢")


class ConsoleReporter:
    """
    Reporter for generating console output.

    Provides methods for printing the realized gains summary with loss
    set-off, harvesting recommendations and year-by-year exemption usage.
    """

    def generate(
        self,
        summary: FilingYearSummary,
        plan: Optional[HarvestPlan] = None,
        history: Optional[List[FiscalYearReport]] = None,
        **kwargs
    ) -> None:
        """Print every available section."""
        self.print_filing_summary(summary)
        if plan is not None:
            self.print_recommendations(plan, kwargs.get('buy_dates'))
        if history:
            self.print_history(history)

    def print_filing_summary(self, summary: FilingYearSummary) -> None:
        """
        Print realized gains, losses, set-off and remaining exemption.

        Args:
            summary: Filing-year summary
        """
        title = f" REALIZED CAPITAL GAINS - {summary.fiscal_year} " if summary.fiscal_year else " REALIZED CAPITAL GAINS "

        print("\n")
        print("╔" + "═" * WIDTH + "╗")
        print("║" + title.center(WIDTH) + "║")
        print("╠" + "═" * WIDTH + "╣")

        _section("STEP 1: GAINS AND LOSSES")
        breakdown = summary.breakdown
        _amount_line("Total LTCG", summary.total_long_gain)
        if breakdown:
            _amount_line("MF", breakdown.fund.long_gain, indent=2)
            _amount_line("Stocks", breakdown.equity.long_gain, indent=2)
        _amount_line("Total STCG", summary.total_short_gain)
        if breakdown:
            _amount_line("MF", breakdown.fund.short_gain, indent=2)
            _amount_line("Stocks", breakdown.equity.short_gain, indent=2)
        _amount_line("Total LTCL", -summary.total_long_loss)
        _amount_line("Total STCL", -summary.total_short_loss)

        _section("STEP 2: LOSS SET-OFF")
        offset = summary.offset
        if offset and (offset.long_loss_applied > 0 or offset.remaining_short_loss > 0):
            if offset.long_loss_applied > 0:
                _amount_line("LTCL → LTCG", -offset.long_loss_applied)
            if offset.short_loss_applied_to_long > 0:
                _amount_line("STCL → LTCG", -offset.short_loss_applied_to_long)
            if offset.unabsorbed_short_loss > 0 or offset.unabsorbed_long_loss > 0:
                _amount_line("Loss left to carry forward",
                             -(offset.unabsorbed_short_loss + offset.unabsorbed_long_loss))
        else:
            _line("No losses to offset")
        print("╟" + "─" * WIDTH + "╢")
        _amount_line("NET LTCG", summary.net_long_gain)
        _amount_line("NET STCG", summary.net_short_gain)

        _section("STEP 3: LTCG EXEMPTION (Section 112A)")
        _amount_line("Exemption limit", summary.exemption_limit)
        _amount_line("Less: Net LTCG realized", -min(summary.net_long_gain, summary.exemption_limit))
        print("╟" + "─" * WIDTH + "╢")
        _amount_line("REMAINING EXEMPTION", summary.remaining_exemption)

        _line()
        print("╚" + "═" * WIDTH + "╝")

    def print_recommendations(
        self,
        plan: HarvestPlan,
        buy_dates: Optional[Callable[[str], Optional[BuyDateRange]]] = None
    ) -> None:
        """
        Print the disposal plan.

        Args:
            plan: Harvest plan from the allocator
            buy_dates: Optional lookup of fund purchase dates by scheme name
        """
        print("\n")
        print("╔" + "═" * WIDTH + "╗")
        print("║" + " LTCG HARVESTING RECOMMENDATIONS ".center(WIDTH) + "║")
        print("╠" + "═" * WIDTH + "╣")

        if plan.status is HarvestStatus.EXHAUSTED:
            _line("⚠ LTCG limit already exhausted")
            _line("Net LTCG realized this year has used the full exemption.")
        elif plan.status is HarvestStatus.NO_CANDIDATES:
            _line("No eligible holdings")
            _line("No non-ELSS holdings with unrealized gains available.")
        elif not plan.recommendations:
            _line("No holding can be sold within the remaining exemption.")
        else:
            for i, rec in enumerate(plan.recommendations, 1):
                self._print_recommendation(i, rec, buy_dates)

        print("╟" + "─" * WIDTH + "╢")
        _amount_line("Remaining exemption", plan.remaining_exemption)
        _amount_line("TOTAL LTCG TO HARVEST", plan.total_gain_harvested)
        _amount_line("CAPITAL TO REINVEST", plan.total_capital_required)
        if plan.status is HarvestStatus.PARTIAL:
            _amount_line("Exemption left unused", plan.unfilled_exemption)
        _line()
        print("╚" + "═" * WIDTH + "╝")

    def _print_recommendation(self, index: int, rec, buy_dates) -> None:
        """Print a single recommendation."""
        details = f"{rec.asset_class.label} • {rec.efficiency * 100:.0f}% eff"
        if buy_dates and rec.asset_class is AssetClass.FUND:
            dates = buy_dates(rec.name)
            if dates:
                details += f" • bought {dates}"
        exit_str = "full exit" if rec.is_full_exit else "partial"

        _line(f"{index}. {rec.name}"[:WIDTH - 4])
        _line(f"   {details}"[:WIDTH - 4])
        _line(f"   Sell {rec.get_units_str()} ({exit_str})")
        _amount_line("LTCG realized", rec.gain_from_sale, indent=3)
        _amount_line("Capital", rec.capital_required, indent=3)
        _line()

    def print_history(self, reports: List[FiscalYearReport]) -> None:
        """
        Print exemption usage per fiscal year.

        Args:
            reports: Reports from the historical analyzer, newest first
        """
        print("\n")
        print("╔" + "═" * WIDTH + "╗")
        print("║" + " LTCG EXEMPTION HISTORY ".center(WIDTH) + "║")
        print("╠" + "═" * WIDTH + "╣")

        header = f"{'Year':<12}{'Net LTCG':>15}{'Limit':>13}{'Used':>13}{'Wasted':>13}{'Saved':>10}{'Missed':>8}"
        _line(header)
        print("╟" + "─" * WIDTH + "╢")

        for r in reports:
            year = f"{r.fiscal_year}{'*' if r.is_current else ''}"
            _line(
                f"{year:<12}"
                f"{format_currency_inr(r.net_long_gain):>15}"
                f"{format_currency_inr(r.exemption_limit):>13}"
                f"{format_currency_inr(r.exemption_used):>13}"
                f"{format_currency_inr(r.exemption_wasted):>13}"
                f"{format_currency_inr(r.tax_saved):>10}"
                f"{format_currency_inr(r.missed_savings):>8}"
            )

        if any(r.is_current for r in reports):
            _line()
            _line("* Current fiscal year (still open)")
        print("╚" + "═" * WIDTH + "╝")
