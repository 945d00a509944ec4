"""
Unit tests for gain/loss aggregation.
"""

import pytest

from gain_harvester.aggregator import GainLossAggregator
from gain_harvester.models import AssetClass, CapitalGainRecord, FiscalYear


class TestGainLossAggregator:
    """Tests for GainLossAggregator class."""

    @pytest.fixture
    def aggregator(self):
        """Create aggregator instance."""
        return GainLossAggregator()

    def test_filters_by_fiscal_year(self, aggregator, sample_records):
        """Test only records disposed of in the target year are counted."""
        summary = aggregator.aggregate(sample_records, FiscalYear(2025))

        assert summary.record_count == 2
        assert summary.fund.long_gain == pytest.approx(30000.0)
        assert summary.equity.short_loss == pytest.approx(2000.0)
        assert summary.equity.long_gain == 0.0

    def test_combined_totals(self, aggregator, sample_records):
        """Test combined totals add fund and equity buckets."""
        summary = aggregator.aggregate(sample_records, FiscalYear(2025))
        combined = summary.combined

        assert combined.long_gain == pytest.approx(30000.0)
        assert combined.short_loss == pytest.approx(2000.0)
        assert combined.short_gain == 0.0
        assert combined.long_loss == 0.0

    def test_losses_are_absolute(self, aggregator):
        """Test losses accumulate as positive values."""
        records = [
            CapitalGainRecord("X", AssetClass.FUND, disposal_date="2024-06-01", long_term_gain=-500.0),
            CapitalGainRecord("Y", AssetClass.FUND, disposal_date="2024-07-01", long_term_gain=-250.0),
        ]
        summary = aggregator.aggregate(records, FiscalYear(2024))

        assert summary.fund.long_loss == pytest.approx(750.0)
        assert summary.fund.long_gain == 0.0

    def test_short_and_long_accumulate_independently(self, aggregator):
        """Test a record with both fields contributes to both terms."""
        records = [
            CapitalGainRecord(
                "Mixed", AssetClass.FUND, disposal_date="2024-06-01",
                short_term_gain=100.0, long_term_gain=-40.0,
            ),
        ]
        totals = aggregator.aggregate(records, FiscalYear(2024)).fund

        assert totals.short_gain == pytest.approx(100.0)
        assert totals.long_loss == pytest.approx(40.0)

    def test_unparsable_date_excluded(self, aggregator):
        """Test records without a parsable date drop out of year-scoped totals."""
        records = [
            CapitalGainRecord("Bad", AssetClass.EQUITY, disposal_date="n/a", long_term_gain=999.0),
            CapitalGainRecord("Good", AssetClass.EQUITY, disposal_date="2024-06-01", long_term_gain=1.0),
        ]
        summary = aggregator.aggregate(records, FiscalYear(2024))

        assert summary.record_count == 1
        assert summary.equity.long_gain == pytest.approx(1.0)

    def test_no_target_counts_everything(self, aggregator, sample_records):
        """Test a None target counts every record."""
        summary = aggregator.aggregate(sample_records, None)

        assert summary.record_count == 4
        assert summary.combined.long_gain == pytest.approx(210000.0)

    def test_empty_records(self, aggregator):
        """Test empty input gives zero totals."""
        summary = aggregator.aggregate([], FiscalYear(2024))

        assert summary.record_count == 0
        assert summary.combined.to_dict() == {
            'short_gain': 0.0, 'short_loss': 0.0, 'long_gain': 0.0, 'long_loss': 0.0,
        }

    def test_fiscal_year_boundaries(self, aggregator):
        """Test March 31 and April 1 fall on either side of the year end."""
        records = [
            CapitalGainRecord("A", AssetClass.FUND, disposal_date="2025-03-31", long_term_gain=1000.0),
            CapitalGainRecord("B", AssetClass.FUND, disposal_date="2025-04-01", long_term_gain=2000.0),
            CapitalGainRecord("C", AssetClass.FUND, disposal_date="not a date", long_term_gain=4000.0),
        ]

        summary = aggregator.aggregate(records, FiscalYear(2024))

        assert summary.record_count == 1
        assert summary.combined.long_gain == pytest.approx(1000.0)


class TestFiscalYears:
    """Tests for GainLossAggregator.fiscal_years."""

    def test_most_recent_first(self, sample_records):
        """Test years are distinct and sorted descending."""
        years = GainLossAggregator().fiscal_years(sample_records)

        assert years == [FiscalYear(2025), FiscalYear(2024), FiscalYear(2023)]

    def test_ignores_unparsable(self):
        """Test unparsable dates contribute no year."""
        records = [CapitalGainRecord("Bad", AssetClass.FUND, disposal_date="??")]

        assert GainLossAggregator().fiscal_years(records) == []
