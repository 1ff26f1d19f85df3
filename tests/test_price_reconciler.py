import pytest

from collateral_auction.config import RAY, WAD
from collateral_auction.core import AuctionHouseSettings, PriceReading, PriceReconciler, SystemCoinMarketOracle
from collateral_auction.core.errors import AuctionHouseError, FailureReason


class StaticFeed:
    def __init__(self, reading, price_source=None):
        self.reading = reading
        self.price_source = price_source

    def read(self):
        return self.reading


def reconciler_with(fsm_price=100 * WAD, median=None, system_coin_oracle=None, **settings):
    fsm_reading = PriceReading.valid(fsm_price) if fsm_price else PriceReading.invalid()
    return PriceReconciler(AuctionHouseSettings(**settings), StaticFeed(fsm_reading, price_source=median),
                           system_coin_oracle)


class TestCollateralPrice:
    def test_median_unset_uses_trusted_price(self):
        reconciler = reconciler_with()
        assert reconciler.get_final_base_collateral_price(100 * WAD, 0) == 100 * WAD

    @pytest.mark.parametrize("median, expected", [
        (80 * WAD, 90 * WAD),    # clamped up to the floor
        (95 * WAD, 95 * WAD),    # cheaper median inside the corridor wins
        (102 * WAD, 102 * WAD),
        (120 * WAD, 105 * WAD),  # clamped down to the ceiling
    ])
    def test_median_is_clamped_around_trusted_price(self, median, expected):
        reconciler = reconciler_with()
        assert reconciler.get_final_base_collateral_price(100 * WAD, median) == expected

    def test_bounds_are_read_live(self):
        reconciler = reconciler_with()
        assert reconciler.get_final_base_collateral_price(100 * WAD, 50 * WAD) == 90 * WAD
        reconciler.settings.lower_collateral_median_deviation = 50 * WAD // 100
        assert reconciler.get_final_base_collateral_price(100 * WAD, 50 * WAD) == 50 * WAD

    def test_median_is_reached_through_trusted_feed(self):
        median = StaticFeed(PriceReading.valid(97 * WAD))
        assert reconciler_with(median=median).get_collateral_median_price() == 97 * WAD

    def test_invalid_or_missing_median_reads_as_zero(self):
        assert reconciler_with().get_collateral_median_price() == 0
        median = StaticFeed(PriceReading.invalid())
        assert reconciler_with(median=median).get_collateral_median_price() == 0


class TestSystemCoinPrice:
    def test_default_bounds_pin_to_redemption_price(self):
        reconciler = reconciler_with()
        assert reconciler.get_final_system_coin_price(RAY, 95 * RAY // 100) == RAY
        assert reconciler.get_final_system_coin_price(RAY, 105 * RAY // 100) == RAY

    @pytest.mark.parametrize("market, expected", [
        (95 * RAY // 100, 95 * RAY // 100),
        (50 * RAY // 100, 90 * RAY // 100),
        (150 * RAY // 100, 110 * RAY // 100),
        (RAY, RAY),
    ])
    def test_market_price_clamped_within_corridor(self, market, expected):
        reconciler = reconciler_with(lower_system_coin_median_deviation=90 * WAD // 100,
                                     upper_system_coin_median_deviation=90 * WAD // 100)
        assert reconciler.get_final_system_coin_price(RAY, market) == expected

    def test_bound_tighter_than_minimum_deviation_falls_back_to_redemption_price(self):
        reconciler = reconciler_with(lower_system_coin_median_deviation=9995 * WAD // 10000,
                                     upper_system_coin_median_deviation=9995 * WAD // 10000)
        assert reconciler.get_system_coin_floor_deviated_price(RAY) == RAY
        assert reconciler.get_system_coin_ceiling_deviated_price(RAY) == RAY
        assert reconciler.get_final_system_coin_price(RAY, 90 * RAY // 100) == RAY

    def test_market_feed_is_scaled_to_ray(self):
        oracle = SystemCoinMarketOracle(95 * WAD // 100)
        assert reconciler_with(system_coin_oracle=oracle).get_system_coin_market_price() == 95 * RAY // 100
        oracle.invalidate()
        assert reconciler_with(system_coin_oracle=oracle).get_system_coin_market_price() == 0


class TestCombinedPrices:
    def test_invalid_trusted_feed_gives_no_price(self):
        assert reconciler_with(fsm_price=0).get_collateral_fsm_and_final_system_coin_prices(RAY) == (0, 0)

    def test_zero_redemption_price_is_refused(self):
        with pytest.raises(AuctionHouseError) as excinfo:
            reconciler_with().get_collateral_fsm_and_final_system_coin_prices(0)
        assert excinfo.value.reason is FailureReason.INVALID_REDEMPTION_PRICE

    def test_market_price_used_when_available(self):
        oracle = SystemCoinMarketOracle(95 * WAD // 100)
        reconciler = reconciler_with(system_coin_oracle=oracle,
                                     lower_system_coin_median_deviation=90 * WAD // 100,
                                     upper_system_coin_median_deviation=90 * WAD // 100)
        assert reconciler.get_collateral_fsm_and_final_system_coin_prices(RAY) == (100 * WAD, 95 * RAY // 100)

    def test_discounted_price(self):
        reconciler = reconciler_with()
        # Collateral at 200, a coin worth 2.0, 5% discount
        price = reconciler.get_discounted_collateral_price(200 * WAD, 0, 2 * RAY, 95 * WAD // 100)
        assert price == 95 * WAD
