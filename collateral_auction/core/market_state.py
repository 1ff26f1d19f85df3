# collateral_auction/core/market_state.py

from .auction_house import IncreasingDiscountCollateralAuctionHouse
from .fixed_point import from_number
from .ledger import BalanceLedger
from .liquidation_engine import LiquidationEngine, Vault
from .oracle import DelayedOracle, MedianOracle, OracleRelayer, SystemCoinMarketOracle
from .settings import AuctionHouseSettings
from .. import config


class ProtocolState:
    """
    Holds the simulated protocol: the ledger, the feeds, the liquidation engine,
    the auction house they are wired into, and all vaults.
    """
    def __init__(self, model, settings: AuctionHouseSettings | None = None):
        self.model = model # Mesa model instance
        self.vaults = {} # Stores Vault objects, keyed by owner_id
        self.collateral_type = config.COLLATERAL_TYPE

        self.ledger = BalanceLedger()
        self.collateral_median = MedianOracle(from_number(model.market.current_price))
        self.collateral_fsm = DelayedOracle(self.collateral_median, delay_updates=config.ORACLE_DELAY_STEPS)
        self.oracle_relayer = OracleRelayer(config.INITIAL_REDEMPTION_PRICE)
        self.system_coin_oracle = SystemCoinMarketOracle(config.INITIAL_REDEMPTION_PRICE // 10**9)
        self.liquidation_engine = LiquidationEngine(self.ledger)

        if settings is None:
            settings = AuctionHouseSettings(
                minimum_bid=config.SIM_MINIMUM_BID,
                min_discount=config.SIM_MIN_DISCOUNT,
                max_discount=config.SIM_MAX_DISCOUNT,
                per_second_discount_update_rate=config.SIM_PER_SECOND_DISCOUNT_UPDATE_RATE,
                max_discount_update_rate_timeline=config.SIM_MAX_DISCOUNT_UPDATE_RATE_TIMELINE,
            )
        self.auction_house = IncreasingDiscountCollateralAuctionHouse(
            ledger=self.ledger,
            collateral_type=self.collateral_type,
            liquidation_engine=self.liquidation_engine,
            oracle_relayer=self.oracle_relayer,
            collateral_fsm=self.collateral_fsm,
            system_coin_oracle=self.system_coin_oracle,
            settings=settings,
            clock=lambda: int(model.current_time),
            deployer=config.GLOBAL_SETTLEMENT_ADDRESS,
        )
        self.auction_house.add_authorization(self.liquidation_engine.address, caller=config.GLOBAL_SETTLEMENT_ADDRESS)
        self.liquidation_engine.auction_house = self.auction_house

        # Prime the delayed feed so the first steps already have a trusted price
        for _ in range(config.ORACLE_DELAY_STEPS + 1):
            self.collateral_fsm.update_result()

    def refresh_feeds(self, market_price: float):
        """Pushes the market price into the median and lets the delayed feed advance one update."""
        self.collateral_median.update_result(from_number(market_price))
        self.collateral_fsm.update_result()
        self.system_coin_oracle.update_from_redemption_price(
            self.oracle_relayer.redemption_price(), self.model.random
        )

    def add_vault(self, vault: Vault):
        """Adds a new vault to the system state."""
        if vault.owner_id in self.vaults:
            print(f"Warning: Vault with owner_id {vault.owner_id} already exists. Overwriting.")
        self.vaults[vault.owner_id] = vault

    def get_vault(self, owner_id: str) -> Vault | None:
        return self.vaults.get(owner_id)

    def fund_account(self, account: str, coins: float):
        """Mints ``coins`` to ``account`` against unbacked debt held by the accounting engine."""
        self.ledger.create_unbacked_debt(config.ACCOUNTING_ENGINE_ADDRESS, account, from_number(coins, config.RAD))

    def coin_balance(self, account: str) -> float:
        return self.ledger.coin_balance(account) / config.RAD

    def collateral_balance(self, account: str) -> float:
        return self.ledger.token_collateral(self.collateral_type, account) / config.WAD

    def get_all_active_auctions(self) -> list:
        return list(self.auction_house.auctions.values())
