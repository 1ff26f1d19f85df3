# collateral_auction/core/discount_curve.py

"""
Lazy per-auction discount schedule.

The discount is a WAD multiplier on the collateral price: a smaller value
sells collateral more cheaply. It starts at the auction's min discount, decays
every second by the per-second rate and never goes below the max discount,
which applies unconditionally once the deadline passes. Nothing ticks in the
background; the curve is evaluated whenever a bid or quote needs it.
"""

from .. import config
from .auction import Auction
from .fixed_point import rmultiply, rpower, subtract

RAY = config.RAY


def get_next_current_discount(auction: Auction | None, now: int) -> int:
    """Discount the auction would have at ``now``. RAY (no discount) for an absent auction."""
    if auction is None or not auction.forgone_collateral_receiver:
        return RAY

    next_discount = auction.current_discount
    max_discount = auction.max_discount

    if now < auction.discount_increase_deadline and auction.current_discount > max_discount:
        elapsed = subtract(now, auction.latest_discount_update_time)
        next_discount = rmultiply(
            rpower(auction.per_second_discount_update_rate, elapsed, RAY),
            auction.current_discount
        )
        if next_discount <= max_discount:
            next_discount = max_discount
    else:
        current_zero_max_non_zero = auction.current_discount == 0 and max_discount > 0
        done_updating = now >= auction.discount_increase_deadline and auction.current_discount != max_discount
        if current_zero_max_non_zero or done_updating:
            next_discount = max_discount

    return next_discount


def update_current_discount(auction: Auction, now: int) -> int:
    """Advances the stored discount to ``now`` and returns it."""
    auction.current_discount = get_next_current_discount(auction, now)
    auction.latest_discount_update_time = int(now)
    return auction.current_discount
