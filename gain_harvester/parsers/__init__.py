"""
Parsers for broker export formats.
"""

from .groww import (
    GrowwMFHoldingsParser,
    GrowwStockHoldingsParser,
    GrowwMFCapitalGainsParser,
    GrowwStockCapitalGainsParser,
    GrowwMFOrderHistoryParser,
    OrderHistory,
    PurchaseOrder,
)

__all__ = [
    "GrowwMFHoldingsParser",
    "GrowwStockHoldingsParser",
    "GrowwMFCapitalGainsParser",
    "GrowwStockCapitalGainsParser",
    "GrowwMFOrderHistoryParser",
    "OrderHistory",
    "PurchaseOrder",
]
