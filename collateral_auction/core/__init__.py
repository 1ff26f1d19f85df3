# collateral_auction/core/__init__.py

"""
Makes the core components importable.
"""
from .auction import Auction, DiscountSchedule
from .auction_house import AuctionEvent, IncreasingDiscountCollateralAuctionHouse
from .errors import AuctionHouseError, FailureReason, LedgerError
from .ledger import BalanceLedger
from .liquidation_engine import LiquidationEngine, Vault
from .market_state import ProtocolState
from .oracle import (
    CollateralMarket,
    DelayedOracle,
    MedianOracle,
    OracleRelayer,
    PriceReading,
    SystemCoinMarketOracle,
)
from .price_reconciler import PriceReconciler
from .settings import AuctionHouseSettings
