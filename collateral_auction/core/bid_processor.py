# collateral_auction/core/bid_processor.py

"""
Bid validation and fill planning.

Everything here works on values only. ``plan_fill`` returns the complete
outcome of a bid so the auction house can check every invariant before it
touches the record or the ledger.
"""

from dataclasses import dataclass

from .. import config
from .auction import Auction
from .errors import AuctionHouseError, FailureReason
from .fixed_point import add, minimum, multiply, subtract, wdivide

RAY = config.RAY


@dataclass(frozen=True)
class Fill:
    """Outcome of one bid against one auction."""
    bought_collateral: int
    adjusted_bid: int
    amount_to_sell: int       # left for sale after the fill
    amount_to_raise: int      # left to raise after the fill
    buffer_reduction: int     # RAD reported to the debt buffer
    leftover_collateral: int  # sent to the forgone collateral receiver when settled
    settled: bool

    @property
    def coins_paid(self) -> int:
        return multiply(self.adjusted_bid, RAY)


def is_valid_bid_size(wad: int, minimum_bid: int) -> bool:
    return wad > 0 and wad >= minimum_bid


def cap_bid(auction: Auction, wad: int) -> int:
    """Caps ``wad`` so it does not pay for more than the auction still needs to raise."""
    if multiply(wad, RAY) > auction.amount_to_raise:
        return add(auction.amount_to_raise // RAY, 1)
    return wad


def get_adjusted_bid(auction: Auction | None, wad: int, minimum_bid: int) -> tuple[bool, int]:
    """
    Returns ``(valid, adjusted_bid)`` for a quote.

    A bid is invalid against a missing auction, below the minimum bid, or when
    it would leave a remaining raise that is positive but under one RAY.
    """
    if auction is None or not auction.exists or not is_valid_bid_size(wad, minimum_bid):
        return False, wad

    adjusted_bid = cap_bid(auction, wad)

    remaining_to_raise = 0 if multiply(wad, RAY) > auction.amount_to_raise \
        else subtract(auction.amount_to_raise, multiply(wad, RAY))
    if 0 < remaining_to_raise < RAY:
        return False, adjusted_bid

    return True, adjusted_bid


def get_bought_collateral(auction: Auction, discounted_collateral_price: int, adjusted_bid: int) -> int:
    """Collateral ``adjusted_bid`` buys at the discounted price, capped to what is left for sale."""
    bought_collateral = wdivide(adjusted_bid, discounted_collateral_price)
    return minimum(bought_collateral, auction.amount_to_sell)


def plan_fill(auction: Auction, wad: int, adjusted_bid: int, bought_collateral: int) -> Fill:
    """
    Computes the state an auction moves to after a bid, without applying it.

    The buffer report uses the uncapped ``wad`` while the new remaining raise
    uses ``adjusted_bid``; the two formulas are intentionally different.
    """
    if bought_collateral == 0:
        raise AuctionHouseError(FailureReason.NULL_BOUGHT_AMOUNT)

    new_amount_to_sell = subtract(auction.amount_to_sell, bought_collateral)

    wad_as_rad = multiply(wad, RAY)
    if wad_as_rad >= auction.amount_to_raise or new_amount_to_sell == 0:
        remaining_to_raise = auction.amount_to_raise
    else:
        remaining_to_raise = subtract(auction.amount_to_raise, wad_as_rad)

    adjusted_as_rad = multiply(adjusted_bid, RAY)
    if adjusted_as_rad > auction.amount_to_raise:
        new_amount_to_raise = 0
    else:
        new_amount_to_raise = subtract(auction.amount_to_raise, adjusted_as_rad)

    if not (new_amount_to_raise == 0 or new_amount_to_raise >= RAY):
        raise AuctionHouseError(FailureReason.INVALID_LEFT_TO_RAISE, str(new_amount_to_raise))

    settled = new_amount_to_raise == 0 or new_amount_to_sell == 0
    return Fill(
        bought_collateral=bought_collateral,
        adjusted_bid=adjusted_bid,
        amount_to_sell=new_amount_to_sell,
        amount_to_raise=new_amount_to_raise,
        buffer_reduction=remaining_to_raise if settled else adjusted_as_rad,
        leftover_collateral=new_amount_to_sell if settled else 0,
        settled=settled,
    )
