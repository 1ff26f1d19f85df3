# collateral_auction/core/oracle.py

import math
from collections import deque
from dataclasses import dataclass

from .. import config
from .fixed_point import from_number


@dataclass(frozen=True)
class PriceReading:
    """Result of a single feed read: a price, or the fact that there is no trustworthy one."""
    value: int
    is_valid: bool

    @classmethod
    def valid(cls, value: int) -> "PriceReading":
        return cls(value=int(value), is_valid=True)

    @classmethod
    def invalid(cls) -> "PriceReading":
        return cls(value=0, is_valid=False)

    def price_or_zero(self) -> int:
        return self.value if self.is_valid else 0


class CollateralMarket:
    """
    External market price of the collateral, in reference units (float).

    Each ``advance`` takes one geometric-Brownian-motion step. A scheduled
    shock multiplies the price once, on the first advance at or after
    ``shock_step``, and is then spent.
    """
    PRICE_FLOOR = 0.01

    def __init__(self, initial_price: float, volatility: float, time_step_seconds: float, rng,
                 drift: float = config.PRICE_DRIFT, shock_step: int = -1, shock_factor: float = 1.0):
        self.rng = rng
        self.current_price = float(initial_price)
        self.volatility = min(float(volatility), 1.0)
        self.drift = float(drift)
        self.dt = float(time_step_seconds) / (60 * 60 * 24 * 365)
        self.pending_shock = (int(shock_step), float(shock_factor)) if shock_step >= 0 else None
        self.price_history = [self.current_price]

    def _diffusion_return(self) -> float:
        dW = self.rng.normalvariate(0, math.sqrt(self.dt))
        return self.drift * self.dt + self.volatility * dW

    def advance(self, step: int) -> float:
        """Moves the price one step forward and returns it."""
        price = self.current_price * (1 + self._diffusion_return())

        if self.pending_shock is not None and step >= self.pending_shock[0]:
            factor = self.pending_shock[1]
            self.pending_shock = None
            if config.VERBOSE_LOGGING:
                print(f"    !!!! MARKET SHOCK at step {step}: {price:.2f} x {factor:.2f} !!!!")
            price *= factor

        self.current_price = max(price, self.PRICE_FLOOR)
        self.price_history.append(self.current_price)
        return self.current_price


class MedianOracle:
    """Collateral median feed. Holds the latest aggregated price as a WAD."""
    def __init__(self, initial_price: int = 0):
        self.price = int(initial_price)
        self.is_valid = initial_price > 0

    def update_result(self, price: int):
        self.price = int(price)
        self.is_valid = self.price > 0

    def invalidate(self):
        self.is_valid = False

    def read(self) -> PriceReading:
        if not self.is_valid:
            return PriceReading.invalid()
        return PriceReading.valid(self.price)


class DelayedOracle:
    """
    Trusted collateral feed. Releases the median's price after a fixed number of
    updates, so bidders cannot react to a price before the auction house sees it.
    The median it follows is exposed as ``price_source``.
    """
    def __init__(self, price_source: MedianOracle | None, delay_updates: int = config.ORACLE_DELAY_STEPS):
        self.price_source = price_source
        self.delay_updates = int(delay_updates)
        self._queued = deque()
        self.current = PriceReading.invalid()
        self.stopped = False

    def update_result(self):
        """Queues the median's current reading and releases the one that has waited long enough."""
        if self.price_source is None:
            return
        self._queued.append(self.price_source.read())
        while len(self._queued) > self.delay_updates:
            self.current = self._queued.popleft()

    def stop(self):
        self.stopped = True

    def start(self):
        self.stopped = False

    def read(self) -> PriceReading:
        if self.stopped:
            return PriceReading.invalid()
        return self.current


class SystemCoinMarketOracle:
    """Market price of the system coin, as a WAD."""
    def __init__(self, initial_price: int = 0):
        self.price = int(initial_price)
        self.is_valid = initial_price > 0

    def update_result(self, price: int):
        self.price = int(price)
        self.is_valid = self.price > 0

    def invalidate(self):
        self.is_valid = False

    def read(self) -> PriceReading:
        if not self.is_valid:
            return PriceReading.invalid()
        return PriceReading.valid(self.price)

    def update_from_redemption_price(self, redemption_price: int, random_source, noise: float = config.SYSTEM_COIN_MARKET_NOISE):
        """Moves the market price to a noisy observation of the redemption price."""
        redemption_as_number = redemption_price / config.RAY
        observed = redemption_as_number * (1 + random_source.uniform(-noise, noise))
        self.update_result(from_number(max(observed, 0.0)))


class OracleRelayer:
    """Reference-price authority: always answers with the current redemption price (RAY)."""
    def __init__(self, redemption_price: int = config.RAY):
        self._redemption_price = int(redemption_price)
        self.reads = 0

    def redemption_price(self) -> int:
        self.reads += 1
        return self._redemption_price

    def set_redemption_price(self, redemption_price: int):
        self._redemption_price = int(redemption_price)
