import pytest

from collateral_auction import config
from collateral_auction.core import (
    AuctionHouseSettings,
    BalanceLedger,
    DelayedOracle,
    IncreasingDiscountCollateralAuctionHouse,
    LiquidationEngine,
    MedianOracle,
    OracleRelayer,
    PriceReading,
)

WAD = config.WAD
RAY = config.RAY
RAD = config.RAD

GOVERNANCE = 'governance'
LIQUIDATION_ENGINE = config.LIQUIDATION_ENGINE_ADDRESS
ACCOUNTING_ENGINE = config.ACCOUNTING_ENGINE_ADDRESS
FORGONE_RECEIVER = 'vault-owner'
BIDDER = 'bidder'
COLLATERAL_TYPE = config.COLLATERAL_TYPE


class FakeClock:
    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int):
        self.now += seconds


class StaticFeed:
    """Feed returning a fixed reading, optionally pointing at a median."""
    def __init__(self, reading: PriceReading, price_source=None):
        self.reading = reading
        self.price_source = price_source

    def read(self) -> PriceReading:
        return self.reading


class Deployment:
    """An auction house wired to in-memory collaborators, plus shortcuts for tests."""
    def __init__(self, settings: AuctionHouseSettings | None = None, collateral_price: int = 200 * WAD,
                 redemption_price: int = RAY, system_coin_oracle=None):
        self.clock = FakeClock()
        self.ledger = BalanceLedger()
        self.median = MedianOracle(collateral_price)
        self.fsm = DelayedOracle(self.median, delay_updates=0)
        self.fsm.update_result()
        self.oracle_relayer = OracleRelayer(redemption_price)
        self.liquidation_engine = LiquidationEngine(self.ledger)
        self.settings = settings if settings is not None else AuctionHouseSettings()
        self.house = IncreasingDiscountCollateralAuctionHouse(
            ledger=self.ledger,
            collateral_type=COLLATERAL_TYPE,
            liquidation_engine=self.liquidation_engine,
            oracle_relayer=self.oracle_relayer,
            collateral_fsm=self.fsm,
            system_coin_oracle=system_coin_oracle,
            settings=self.settings,
            clock=self.clock,
            deployer=GOVERNANCE,
        )
        self.house.add_authorization(LIQUIDATION_ENGINE, caller=GOVERNANCE)
        self.liquidation_engine.auction_house = self.house

    def start(self, amount_to_sell: int = 10 * WAD, amount_to_raise: int = 1000 * RAD) -> int:
        self.ledger.modify_collateral_balance(COLLATERAL_TYPE, LIQUIDATION_ENGINE, amount_to_sell)
        auction_id = self.house.start_auction(
            forgone_collateral_receiver=FORGONE_RECEIVER,
            auction_income_recipient=ACCOUNTING_ENGINE,
            amount_to_raise=amount_to_raise,
            amount_to_sell=amount_to_sell,
            caller=LIQUIDATION_ENGINE,
        )
        self.liquidation_engine.current_on_auction_system_coins += amount_to_raise
        return auction_id

    def fund(self, account: str = BIDDER, coins: int = 100_000):
        self.ledger.create_unbacked_debt(ACCOUNTING_ENGINE, account, coins * RAD)

    def collateral(self, account: str) -> int:
        return self.ledger.token_collateral(COLLATERAL_TYPE, account)

    def coins(self, account: str) -> int:
        return self.ledger.coin_balance(account)


@pytest.fixture
def deployment() -> Deployment:
    d = Deployment()
    d.fund()
    return d


@pytest.fixture(scope="session")
def deployment_factory():
    def make(**kwargs) -> Deployment:
        d = Deployment(**kwargs)
        d.fund()
        return d
    return make


@pytest.fixture
def decaying_settings() -> AuctionHouseSettings:
    """A schedule that actually moves: 0.95 down to 0.80 over at most an hour."""
    return AuctionHouseSettings(
        min_discount=95 * WAD // 100,
        max_discount=80 * WAD // 100,
        per_second_discount_update_rate=999_900_000_000_000_000_000_000_000,  # 0.9999 per second
        max_discount_update_rate_timeline=3600,
    )
