# collateral_auction/core/price_reconciler.py

"""
Turns the trusted collateral feed, the collateral median and the system coin
market feed into the single discounted collateral price a bid is filled at.

Nothing here is stored between calls: each evaluation reads the feeds and the
deviation bounds from the shared settings handle as they are right now.
"""

from .errors import AuctionHouseError, FailureReason
from .fixed_point import WAD, maximum, minimum, multiply, rdivide, subtract, wmultiply
from .settings import AuctionHouseSettings

# The system coin market feed reports a WAD, redemption prices are RAYs
WAD_TO_RAY = 10**9


class PriceReconciler:
    def __init__(self, settings: AuctionHouseSettings, collateral_fsm, system_coin_oracle=None):
        self.settings = settings
        self.collateral_fsm = collateral_fsm
        self.system_coin_oracle = system_coin_oracle

    # --- Feed reads ---

    def get_collateral_median_price(self) -> int:
        """Median price reached through the trusted feed's price source, or 0 if absent or invalid."""
        collateral_median = getattr(self.collateral_fsm, 'price_source', None)
        if collateral_median is None:
            return 0
        return collateral_median.read().price_or_zero()

    def get_system_coin_market_price(self) -> int:
        """System coin market price scaled to a RAY, or 0 if there is no valid market price."""
        if self.system_coin_oracle is None:
            return 0
        reading = self.system_coin_oracle.read()
        if not reading.is_valid:
            return 0
        return multiply(reading.value, WAD_TO_RAY)

    # --- Collateral ---

    def get_final_base_collateral_price(self, collateral_fsm_price: int, collateral_median_price: int) -> int:
        floor_price = wmultiply(collateral_fsm_price, self.settings.lower_collateral_median_deviation)
        ceiling_price = wmultiply(
            collateral_fsm_price, subtract(2 * WAD, self.settings.upper_collateral_median_deviation)
        )

        if collateral_median_price == 0:
            return collateral_fsm_price
        if collateral_median_price < collateral_fsm_price:
            return maximum(collateral_median_price, floor_price)
        return minimum(collateral_median_price, ceiling_price)

    # --- System coin ---

    def get_system_coin_floor_deviated_price(self, redemption_price: int) -> int:
        min_floor_deviated_price = wmultiply(redemption_price, self.settings.min_system_coin_median_deviation)
        floor_price = wmultiply(redemption_price, self.settings.lower_system_coin_median_deviation)
        return floor_price if floor_price <= min_floor_deviated_price else redemption_price

    def get_system_coin_ceiling_deviated_price(self, redemption_price: int) -> int:
        min_ceiling_deviated_price = wmultiply(
            redemption_price, subtract(2 * WAD, self.settings.min_system_coin_median_deviation)
        )
        ceiling_price = wmultiply(
            redemption_price, subtract(2 * WAD, self.settings.upper_system_coin_median_deviation)
        )
        return ceiling_price if ceiling_price >= min_ceiling_deviated_price else redemption_price

    def get_final_system_coin_price(self, redemption_price: int, market_price: int) -> int:
        floor_price = self.get_system_coin_floor_deviated_price(redemption_price)
        ceiling_price = self.get_system_coin_ceiling_deviated_price(redemption_price)
        if market_price < redemption_price:
            return maximum(market_price, floor_price)
        return minimum(market_price, ceiling_price)

    # --- Combined ---

    def get_collateral_fsm_and_final_system_coin_prices(self, redemption_price: int) -> tuple[int, int]:
        """
        Returns ``(collateral_fsm_price, system_coin_price)``.

        ``(0, 0)`` means the trusted collateral feed has no valid price; callers
        decide whether that is a quote of zero or a refused bid.
        """
        if redemption_price <= 0:
            raise AuctionHouseError(FailureReason.INVALID_REDEMPTION_PRICE)

        fsm_reading = self.collateral_fsm.read()
        if not fsm_reading.is_valid or fsm_reading.value == 0:
            return 0, 0

        system_coin_adjusted_price = redemption_price
        system_coin_market_price = self.get_system_coin_market_price()
        if system_coin_market_price > 0:
            system_coin_adjusted_price = self.get_final_system_coin_price(redemption_price, system_coin_market_price)

        return fsm_reading.value, system_coin_adjusted_price

    def get_discounted_collateral_price(self, collateral_fsm_price: int, collateral_median_price: int,
                                        system_coin_price: int, custom_discount: int) -> int:
        base_price = self.get_final_base_collateral_price(collateral_fsm_price, collateral_median_price)
        return wmultiply(rdivide(base_price, system_coin_price), custom_discount)
