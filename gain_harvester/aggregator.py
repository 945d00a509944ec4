"""
Gain/loss aggregation.

This module provides the GainLossAggregator class that buckets realized
capital-gain records by term, fiscal year and asset class.
"""

from typing import Iterable, List, Optional

from .fiscal_year import classify, parse_date
from .models import AggregateSummary, AssetClass, CapitalGainRecord, FiscalYear, GainLossTotals


class GainLossAggregator:
    """
    Aggregator for realized gains and losses.

    Gains and losses are summed separately so that the offset rules can
    be applied to the totals afterwards. Losses are kept as absolute
    values.

    Example:
        >>> aggregator = GainLossAggregator()
        >>> summary = aggregator.aggregate(records, FiscalYear(2024))
        >>> summary.combined.long_gain
        150000.0
    """

    def aggregate(
        self,
        records: Iterable[CapitalGainRecord],
        target_fiscal_year: Optional[FiscalYear] = None
    ) -> AggregateSummary:
        """
        Sum gains and losses for one fiscal year.

        Args:
            records: Realized capital-gain records
            target_fiscal_year: Only records disposed of in this year are
                                counted. None counts every record.

        Returns:
            AggregateSummary with fund, equity and combined totals
        """
        fund = GainLossTotals()
        equity = GainLossTotals()
        count = 0

        for record in records:
            if target_fiscal_year is not None:
                disposed = parse_date(record.disposal_date)
                if disposed is None or not target_fiscal_year.contains(disposed):
                    continue

            bucket = fund if record.asset_class is AssetClass.FUND else equity
            self._add_record(bucket, record)
            count += 1

        return AggregateSummary(fund=fund, equity=equity, record_count=count)

    @staticmethod
    def _add_record(bucket: GainLossTotals, record: CapitalGainRecord) -> None:
        """Accumulate the short and long fields of a record independently."""
        if record.short_term_gain > 0:
            bucket.short_gain += record.short_term_gain
        elif record.short_term_gain < 0:
            bucket.short_loss += abs(record.short_term_gain)

        if record.long_term_gain > 0:
            bucket.long_gain += record.long_term_gain
        elif record.long_term_gain < 0:
            bucket.long_loss += abs(record.long_term_gain)

    def fiscal_years(self, records: Iterable[CapitalGainRecord]) -> List[FiscalYear]:
        """
        Get the fiscal years present in the records, most recent first.

        Records with unparsable disposal dates are ignored.
        """
        years = {classify(r.disposal_date) for r in records}
        years.discard(None)
        return sorted(years, reverse=True)
