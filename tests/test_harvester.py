"""
Unit tests for the harvesting entry points.
"""

import pytest

from gain_harvester import (
    AssetFilter,
    FiscalYear,
    HarvestContext,
    HarvestStatus,
    TaxGainHarvester,
    TaxRegime,
    analyze_history,
    compute_filing_year_summary,
    recommend_disposals,
)
from gain_harvester.config import ExemptionSchedule


class TestComputeFilingYearSummary:
    """Tests for compute_filing_year_summary."""

    def test_current_year(self, sample_records):
        """Test totals, set-off and remaining exemption for one year."""
        summary = compute_filing_year_summary(sample_records, FiscalYear(2025), 125000.0)

        assert summary.fiscal_year == FiscalYear(2025)
        assert summary.total_long_gain == pytest.approx(30000.0)
        assert summary.total_short_loss == pytest.approx(2000.0)
        assert summary.net_long_gain == pytest.approx(28000.0)
        assert summary.net_short_gain == 0.0
        assert summary.remaining_exemption == pytest.approx(97000.0)
        assert summary.offset.short_loss_applied_to_long == pytest.approx(2000.0)

    def test_breakdown_by_asset_class(self, sample_records):
        """Test per-class totals are kept alongside the combined ones."""
        summary = compute_filing_year_summary(sample_records, FiscalYear(2025), 125000.0)

        assert summary.breakdown.fund.long_gain == pytest.approx(30000.0)
        assert summary.breakdown.equity.short_loss == pytest.approx(2000.0)

    def test_remaining_never_negative(self, sample_records):
        """Test a year above the limit has zero remaining exemption."""
        summary = compute_filing_year_summary(sample_records, FiscalYear(2024), 125000.0)

        assert summary.net_long_gain == pytest.approx(140000.0)
        assert summary.remaining_exemption == 0.0

    def test_empty_year(self, sample_records):
        """Test a year without records leaves the full limit."""
        summary = compute_filing_year_summary(sample_records, FiscalYear(2019), 100000.0)

        assert summary.net_long_gain == 0.0
        assert summary.remaining_exemption == pytest.approx(100000.0)

    def test_to_dict(self, sample_records):
        """Test dictionary export."""
        data = compute_filing_year_summary(sample_records, FiscalYear(2025), 125000.0).to_dict()

        assert data['fiscal_year'] == "FY 2025-26"
        assert data['remaining_exemption'] == pytest.approx(97000.0)


class TestTaxGainHarvester:
    """Tests for TaxGainHarvester class."""

    @pytest.fixture
    def harvester(self):
        """Create harvester with the default regime."""
        return TaxGainHarvester()

    def test_summarize_current_year(self, harvester, sample_records, sample_now):
        """Test the running year and its limit come from now."""
        summary = harvester.summarize_current_year(sample_records, sample_now)

        assert summary.fiscal_year == FiscalYear(2025)
        assert summary.exemption_limit == pytest.approx(125000.0)
        assert summary.remaining_exemption == pytest.approx(97000.0)

    def test_summarize_explicit_year(self, harvester, sample_records, sample_now):
        """Test an explicit year overrides now."""
        summary = harvester.summarize_current_year(sample_records, sample_now, FiscalYear(2023))

        assert summary.exemption_limit == pytest.approx(100000.0)
        assert summary.remaining_exemption == pytest.approx(60000.0)

    def test_summary_feeds_allocator(self, harvester, sample_records, sample_holdings, sample_now):
        """Test the remaining exemption drives the plan."""
        summary = harvester.summarize_current_year(sample_records, sample_now)
        plan = harvester.recommend_disposals(summary.remaining_exemption, sample_holdings, "both")

        assert plan.status is HarvestStatus.FILLED
        assert plan.total_gain_harvested == pytest.approx(97000.0)
        assert plan.recommendations[0].name == "A"
        assert plan.recommendations[1].units_to_sell == pytest.approx(85.0)

    def test_regime_changes_limit(self, sample_records, sample_now):
        """Test a custom regime changes the limit used."""
        regime = TaxRegime(exemption=ExemptionSchedule(limit_from=150000.0))
        summary = TaxGainHarvester(regime).summarize_current_year(sample_records, sample_now)

        assert summary.remaining_exemption == pytest.approx(122000.0)

    def test_analyze_history(self, harvester, sample_records, sample_now):
        """Test history via the facade."""
        reports = harvester.analyze_history(sample_records, sample_now)

        assert len(reports) == 3
        assert reports[0].is_current

    def test_plan_for_context_follows_filter_changes(
        self, harvester, sample_records, sample_holdings, sample_now
    ):
        """Test switching the filter on a loaded session re-runs the allocation."""
        context = HarvestContext(holdings=sample_holdings)
        summary = harvester.summarize_current_year(sample_records, sample_now)

        both = harvester.plan_for_context(summary, context)
        funds = harvester.plan_for_context(summary, context, "fund")
        stocks = harvester.plan_for_context(summary, context, AssetFilter.EQUITY)

        assert [r.name for r in both.recommendations] == ["A", "B"]
        assert [r.name for r in funds.recommendations] == ["B"]
        assert funds.total_gain_harvested == pytest.approx(60000.0)
        assert [r.name for r in stocks.recommendations] == ["A"]
        assert stocks.total_gain_harvested == pytest.approx(80000.0)
        assert context.asset_filter is AssetFilter.EQUITY

    def test_plan_for_context_keeps_stored_filter(
        self, harvester, sample_records, sample_holdings, sample_now
    ):
        """Test no filter argument reuses the context's filter."""
        context = HarvestContext(holdings=sample_holdings, asset_filter=AssetFilter.FUND)
        summary = harvester.summarize_current_year(sample_records, sample_now)

        plan = harvester.plan_for_context(summary, context)

        assert [r.name for r in plan.recommendations] == ["B"]


class TestModuleFunctions:
    """Tests for the module-level entry points."""

    def test_recommend_disposals(self, sample_holdings):
        """Test module-level recommend_disposals."""
        plan = recommend_disposals(125000.0, sample_holdings, AssetFilter.BOTH)

        assert plan.total_gain_harvested == pytest.approx(125000.0)
        assert plan.total_capital_required == pytest.approx(312500.0)

    def test_recommend_disposals_exhausted(self, sample_holdings):
        """Test zero remaining exemption."""
        plan = recommend_disposals(0.0, sample_holdings)

        assert plan.status is HarvestStatus.EXHAUSTED
        assert plan.recommendations == ()

    def test_recommend_disposals_idempotent(self, sample_holdings):
        """Test identical calls give identical output."""
        assert recommend_disposals(50000.0, sample_holdings) == recommend_disposals(50000.0, sample_holdings)

    def test_analyze_history_with_regime(self, sample_records, sample_now):
        """Test module-level analyze_history accepts a regime."""
        regime = TaxRegime(ltcg_tax_rate=0.1)
        reports = analyze_history(sample_records, sample_now, regime)

        assert reports[1].tax_saved == 12500
