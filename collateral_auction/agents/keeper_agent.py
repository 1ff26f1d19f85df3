# collateral_auction/agents/keeper_agent.py

import mesa

from ..processing.transaction import Transaction
from ..core.fixed_point import from_number
from .. import config


class KeeperAgent(mesa.Agent):
    """
    Watches vaults and liquidates unsafe ones, then buys discounted collateral
    from running auctions whenever the quoted price is below its own valuation.
    """
    def __init__(self, model: mesa.Model,
                 profit_margin: float = config.KEEPER_PROFIT_MARGIN,
                 bid_fraction: float = config.KEEPER_BID_FRACTION,
                 gas_strategy: str = 'medium'):
        super().__init__(model)
        self.address = f"keeper-{self.unique_id}"
        self.profit_margin = float(profit_margin)
        self.bid_fraction = float(bid_fraction)
        self.gas_strategy = gas_strategy

        self.acquired_collateral = 0.0
        self.profit_from_bids = 0.0
        self.gas_spent = 0.0
        self.liquidations_triggered = 0
        self.buys_executed = 0

    @property
    def total_profit(self) -> float:
        return self.profit_from_bids - self.gas_spent

    def coin_balance(self) -> float:
        return self.model.protocol_state.coin_balance(self.address)

    def collateral_value_in_coins(self) -> float:
        """What one unit of collateral is worth to this keeper, in system coins."""
        redemption_price = self.model.protocol_state.oracle_relayer.redemption_price() / config.RAY
        if redemption_price <= 0:
            return 0.0
        return self.model.market.current_price / redemption_price

    def get_gas_price(self) -> float:
        multiplier = 1.0
        if self.gas_strategy == 'high':
            multiplier = 1.5
        elif self.gas_strategy == 'low':
            multiplier = 0.8
        return config.BASE_GAS_PRICE * multiplier * self.model.random.uniform(0.95, 1.05)

    def pay_gas(self, gas_units: float):
        collateral_cost = gas_units * config.BASE_GAS_PRICE / (10**9)
        self.gas_spent += collateral_cost * self.collateral_value_in_coins()

    def record_executed(self, tx: Transaction):
        if tx.tx_type == 'liquidate':
            self.liquidations_triggered += 1
        elif tx.tx_type == 'buy':
            bought_collateral, adjusted_bid = tx.result
            bought = bought_collateral / config.WAD
            paid = adjusted_bid / config.WAD
            self.acquired_collateral += bought
            self.profit_from_bids += bought * self.collateral_value_in_coins() - paid
            self.buys_executed += 1

    def _submit(self, tx_type: str, params: dict):
        tx = Transaction(
            tx_type=tx_type,
            sender_id=self.address,
            params=params,
            gas_price=self.get_gas_price(),
            submission_time=self.model.current_time
        )
        self.model.mempool.add_transaction(tx)
        return tx

    def monitor_trigger(self):
        state = self.model.protocol_state
        # Vault debt is in system coins, so collateral is priced in coins too
        price_in_coins = self.collateral_value_in_coins()
        if price_in_coins <= 0:
            return

        for vault_id, vault in state.vaults.items():
            if state.liquidation_engine.can_liquidate(vault, price_in_coins, config.MIN_LIQUIDATION_RATIO):
                if config.VERBOSE_LOGGING:
                    print(f"    >>>> [Keeper {self.unique_id}] Found liquidatable Vault {vault_id} "
                          f"(CR: {vault.get_collateralization_ratio(price_in_coins):.2f}). Submitting liquidation... <<<<")
                self._submit('liquidate', {'vault_id': vault_id})
                return

    def choose_bid(self, auction) -> int:
        """Bid size in coins (WAD): a share of the remaining raise, limited by balance, never leaving dust."""
        remaining_to_raise = auction.amount_to_raise / config.RAD
        affordable = self.coin_balance() * config.KEEPER_MAX_BALANCE_SHARE
        bid = min(remaining_to_raise * self.bid_fraction, affordable)

        minimum_bid = self.model.protocol_state.auction_house.settings.minimum_bid / config.WAD
        if remaining_to_raise - bid < minimum_bid and remaining_to_raise <= affordable:
            # Take the whole remainder rather than leave a residue nobody can bid on
            return auction.amount_to_raise // config.RAY + 1
        # Oversized bids are capped by the auction house
        return from_number(max(bid, minimum_bid))

    def bid_submit(self):
        state = self.model.protocol_state
        valuation = self.collateral_value_in_coins()
        if valuation <= 0 or self.coin_balance() <= 1e-6:
            return

        for auction in state.get_all_active_auctions():
            wad = self.choose_bid(auction)
            bought_collateral, adjusted_bid = state.auction_house.preview_buy(auction.id, wad)
            if bought_collateral == 0:
                continue
            if adjusted_bid / config.WAD > self.coin_balance():
                continue

            quoted_price = adjusted_bid / bought_collateral
            target_buy_price = valuation * (1 - self.profit_margin)
            if quoted_price < target_buy_price:
                if config.VERBOSE_LOGGING:
                    print(f"  [Keeper {self.unique_id}] Opportunity in Auction {auction.id}. "
                          f"Quoted: {quoted_price:.4f} < Target: {target_buy_price:.4f}")
                self._submit('buy', {'auction_id': auction.id, 'wad': wad})
                return

    def __repr__(self):
        return (f"KeeperAgent(id={self.unique_id}, profit={self.total_profit:.2f}, "
                f"coins={self.coin_balance():.2f}, gas_spent={self.gas_spent:.2f})")
