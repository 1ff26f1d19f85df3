# collateral_auction/__init__.py

"""
Increasing-discount collateral auction engine, with an agent-based
liquidation simulation that drives it.
"""
from .core import (
    AuctionHouseError,
    AuctionHouseSettings,
    BalanceLedger,
    FailureReason,
    IncreasingDiscountCollateralAuctionHouse,
)

__version__ = "0.1.0"
