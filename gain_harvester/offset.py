"""
Loss set-off between short-term and long-term heads.
"""

from .models import GainLossTotals, OffsetResult


class OffsetEngine:
    """
    Applies the loss set-off rules to aggregated totals.

    Rules:
    - STCL can be set off against STCG and LTCG
    - LTCL can ONLY be set off against LTCG

    Order of set-off:
    1. STCL against STCG
    2. LTCL against LTCG
    3. Remaining STCL against what is left of LTCG
    """

    def offset(
        self,
        total_short_gain: float,
        total_short_loss: float,
        total_long_gain: float,
        total_long_loss: float
    ) -> OffsetResult:
        """
        Net losses against gains.

        Args:
            total_short_gain: Sum of short-term gains
            total_short_loss: Sum of short-term losses (absolute)
            total_long_gain: Sum of long-term gains
            total_long_loss: Sum of long-term losses (absolute)

        Returns:
            OffsetResult with net taxable gains and set-off amounts
        """
        net_short_gain = max(0.0, total_short_gain - total_short_loss)
        remaining_short_loss = max(0.0, total_short_loss - total_short_gain)

        net_long_gain = max(0.0, total_long_gain - total_long_loss - remaining_short_loss)

        # Amounts actually absorbed, for display
        long_loss_applied = min(total_long_loss, max(0.0, total_long_gain))
        long_after_long_loss = max(0.0, total_long_gain - total_long_loss)
        short_loss_applied_to_long = min(remaining_short_loss, long_after_long_loss)

        return OffsetResult(
            net_short_gain=net_short_gain,
            net_long_gain=net_long_gain,
            remaining_short_loss=remaining_short_loss,
            short_loss_applied_to_long=short_loss_applied_to_long,
            long_loss_applied=long_loss_applied,
            unabsorbed_short_loss=remaining_short_loss - short_loss_applied_to_long,
            unabsorbed_long_loss=max(0.0, total_long_loss - long_loss_applied),
        )

    def offset_totals(self, totals: GainLossTotals) -> OffsetResult:
        """Net the losses of an aggregated bucket."""
        return self.offset(
            totals.short_gain,
            totals.short_loss,
            totals.long_gain,
            totals.long_loss,
        )
