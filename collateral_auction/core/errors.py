# collateral_auction/core/errors.py

from enum import Enum


class FailureReason(Enum):
    """Closed set of reasons an auction house or ledger operation can fail with."""
    UNAUTHORIZED = "account-not-authorized"
    INEXISTENT_AUCTION = "inexistent-auction"
    INVALID_BID = "invalid-bid"
    COLLATERAL_FSM_INVALID_VALUE = "collateral-fsm-invalid-value"
    INVALID_REDEMPTION_PRICE = "invalid-redemption-price-provided"
    NULL_BOUGHT_AMOUNT = "null-bought-amount"
    INVALID_LEFT_TO_RAISE = "invalid-left-to-raise"
    NO_COLLATERAL_FOR_SALE = "no-collateral-for-sale"
    NOTHING_TO_RAISE = "nothing-to-raise"
    DUSTY_AUCTION = "dusty-auction"
    AUCTION_COUNTER_OVERFLOW = "overflow"
    UNRECOGNIZED_PARAMETER = "modify-unrecognized-param"
    INVALID_PARAMETER_VALUE = "invalid-parameter-value"
    ARITHMETIC_OVERFLOW = "arithmetic-overflow"
    ARITHMETIC_UNDERFLOW = "arithmetic-underflow"
    INSUFFICIENT_COLLATERAL = "insufficient-collateral"
    INSUFFICIENT_COINS = "insufficient-coins"


class AuctionHouseError(Exception):
    """Raised when an operation is refused. State is left exactly as it was before the call."""
    def __init__(self, reason: FailureReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)


class LedgerError(AuctionHouseError):
    """Raised by the balance ledger when a transfer cannot be honoured."""
