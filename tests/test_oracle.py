import random

from collateral_auction.config import WAD
from collateral_auction.core import CollateralMarket, DelayedOracle, MedianOracle, PriceReading


def still_market(**kwargs) -> CollateralMarket:
    return CollateralMarket(initial_price=100.0, volatility=0.0, time_step_seconds=60,
                            rng=random.Random(0), drift=0.0, **kwargs)


def test_market_without_shock_is_flat_at_zero_volatility():
    market = still_market()
    assert [market.advance(step) for step in range(1, 4)] == [100.0, 100.0, 100.0]
    assert market.price_history == [100.0] * 4


def test_shock_applies_exactly_once():
    market = still_market(shock_step=2, shock_factor=0.5)
    assert [market.advance(step) for step in range(1, 5)] == [100.0, 50.0, 50.0, 50.0]
    assert market.pending_shock is None


def test_missed_shock_step_still_fires():
    market = still_market(shock_step=2, shock_factor=0.5)
    assert market.advance(7) == 50.0


def test_price_never_drops_below_floor():
    market = still_market(shock_step=1, shock_factor=0.0)
    assert market.advance(1) == CollateralMarket.PRICE_FLOOR


def test_delayed_oracle_releases_after_delay():
    median = MedianOracle(100 * WAD)
    fsm = DelayedOracle(median, delay_updates=1)
    assert fsm.read() == PriceReading.invalid()

    fsm.update_result()
    assert not fsm.read().is_valid
    median.update_result(90 * WAD)
    fsm.update_result()
    assert fsm.read() == PriceReading.valid(100 * WAD)

    fsm.stop()
    assert not fsm.read().is_valid
    fsm.start()
    assert fsm.read().price_or_zero() == 100 * WAD
