"""
LTCG exemption allocation.

This module provides the ExemptionAllocator class that picks holdings to
sell (and buy back) so that realized LTCG fills the unused Section 112A
exemption for the year without going over it.
"""

import math
from typing import Iterable, List, Union

from .models import (
    AssetClass,
    AssetFilter,
    DisposalRecommendation,
    HarvestPlan,
    HarvestStatus,
    HoldingPosition,
)


class ExemptionAllocator:
    """
    Greedy allocator for the remaining LTCG exemption.

    Candidates are ranked by efficiency (unrealized gain / current value),
    highest first, so the plan realizes the most gain per rupee withdrawn
    and redeployed. This is a heuristic: it does not search for the subset
    that best fits the headroom (a bounded knapsack), and it does not
    re-rank after a partial sale.

    Equity quantities are floored to whole shares. Fund units stay
    fractional.

    Example:
        >>> allocator = ExemptionAllocator()
        >>> plan = allocator.allocate(
        ...     net_long_gain=40000.0,
        ...     exemption_limit=125000.0,
        ...     holdings=holdings,
        ...     asset_filter=AssetFilter.BOTH
        ... )
        >>> print(f"Harvest ₹{plan.total_gain_harvested:,.0f}")
    """

    def allocate(
        self,
        net_long_gain: float,
        exemption_limit: float,
        holdings: Iterable[HoldingPosition],
        asset_filter: Union[AssetFilter, str] = AssetFilter.BOTH
    ) -> HarvestPlan:
        """
        Build a disposal plan for the current year.

        Args:
            net_long_gain: LTCG already realized this year, after set-off
            exemption_limit: Exemption limit for this year
            holdings: Currently held positions
            asset_filter: Restrict candidates to funds, equities or both

        Returns:
            HarvestPlan with ordered recommendations
        """
        remaining_exemption = max(0.0, exemption_limit - net_long_gain)
        return self.allocate_remaining(remaining_exemption, holdings, asset_filter)

    def allocate_remaining(
        self,
        remaining_exemption: float,
        holdings: Iterable[HoldingPosition],
        asset_filter: Union[AssetFilter, str] = AssetFilter.BOTH
    ) -> HarvestPlan:
        """
        Build a disposal plan for a known remaining exemption.

        Args:
            remaining_exemption: Unused exemption for this year
            holdings: Currently held positions
            asset_filter: Restrict candidates to funds, equities or both

        Returns:
            HarvestPlan with ordered recommendations
        """
        asset_filter = AssetFilter.parse(asset_filter)
        remaining_exemption = max(0.0, remaining_exemption)

        if remaining_exemption <= 0:
            return HarvestPlan(status=HarvestStatus.EXHAUSTED, remaining_exemption=0.0)

        candidates = self.rank_candidates(holdings, asset_filter)
        if not candidates:
            return HarvestPlan(
                status=HarvestStatus.NO_CANDIDATES,
                remaining_exemption=remaining_exemption,
            )

        recommendations = []
        accumulated_gain = 0.0
        total_capital_required = 0.0

        for holding in candidates:
            if accumulated_gain >= remaining_exemption:
                break

            remaining_to_fill = remaining_exemption - accumulated_gain
            recommendation = self._size_disposal(holding, remaining_to_fill)
            if recommendation is None:
                continue

            recommendations.append(recommendation)
            # Summing float gains can land a hair above the headroom
            accumulated_gain = min(
                accumulated_gain + recommendation.gain_from_sale, remaining_exemption
            )
            total_capital_required += recommendation.capital_required

        status = (
            HarvestStatus.FILLED if accumulated_gain >= remaining_exemption
            else HarvestStatus.PARTIAL
        )
        return HarvestPlan(
            status=status,
            remaining_exemption=remaining_exemption,
            recommendations=tuple(recommendations),
            total_gain_harvested=accumulated_gain,
            total_capital_required=total_capital_required,
        )

    def rank_candidates(
        self,
        holdings: Iterable[HoldingPosition],
        asset_filter: AssetFilter = AssetFilter.BOTH
    ) -> List[HoldingPosition]:
        """
        Get harvestable holdings ordered by efficiency, highest first.

        Lock-in schemes, positions without gains and zero-quantity or
        zero-value positions are dropped. Ties keep their input order.
        """
        candidates = [
            h for h in holdings
            if h.is_harvestable and asset_filter.accepts(h.asset_class)
        ]
        return sorted(candidates, key=lambda h: h.efficiency, reverse=True)

    def _size_disposal(self, holding: HoldingPosition, remaining_to_fill: float):
        """
        Decide how much of a holding to sell.

        Returns:
            DisposalRecommendation, or None when nothing can be sold
        """
        total_gain = holding.unrealized_gain

        if total_gain <= remaining_to_fill:
            units_to_sell = holding.quantity
            gain_from_sale = total_gain
            capital_required = holding.current_value
            is_full_exit = True
        else:
            gain_per_unit = holding.gain_per_unit
            units_to_sell = remaining_to_fill / gain_per_unit
            if holding.asset_class is AssetClass.EQUITY:
                units_to_sell = math.floor(units_to_sell)
            # Float noise must not push the sale past the headroom
            gain_from_sale = min(units_to_sell * gain_per_unit, remaining_to_fill)
            capital_required = units_to_sell * holding.price_per_unit
            is_full_exit = False

        if units_to_sell <= 0 or gain_from_sale <= 0:
            return None

        return DisposalRecommendation(
            name=holding.name,
            asset_class=holding.asset_class,
            units_to_sell=units_to_sell,
            gain_from_sale=gain_from_sale,
            capital_required=capital_required,
            efficiency=holding.efficiency,
            total_units=holding.quantity,
            is_full_exit=is_full_exit,
            instrument_id=holding.instrument_id,
        )
