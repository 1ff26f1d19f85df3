# collateral_auction/core/liquidation_engine.py

from dataclasses import dataclass

from .. import config
from .errors import AuctionHouseError
from .fixed_point import RAY, add, from_number, multiply, subtract


@dataclass
class Vault:
    """A borrower position, as seen by the simulation's liquidation trigger."""
    owner_id: str
    collateral_amount: float
    debt_amount: float
    collateral_type: str = config.COLLATERAL_TYPE
    status: str = "Active"  # "Active" or "Liquidating"

    def get_collateralization_ratio(self, current_price: float) -> float:
        if current_price <= 0 or self.debt_amount <= 1e-9:
            return float('inf')
        return (self.collateral_amount * current_price) / self.debt_amount


class LiquidationEngine:
    """
    Debt buffer for coins expected back from auctions, plus the trigger that
    confiscates unsafe vaults and hands their collateral to the auction house.
    """
    def __init__(self, ledger, auction_house=None, address: str = config.LIQUIDATION_ENGINE_ADDRESS,
                 accounting_engine: str = config.ACCOUNTING_ENGINE_ADDRESS,
                 liquidation_penalty: float = config.LIQUIDATION_PENALTY):
        self.ledger = ledger
        self.auction_house = auction_house
        self.address = address
        self.accounting_engine = accounting_engine
        self.liquidation_penalty = float(liquidation_penalty)
        self.current_on_auction_system_coins = 0  # RAD
        self.buffer_reductions = []

    def remove_coins_from_auction(self, rad: int):
        self.current_on_auction_system_coins = subtract(self.current_on_auction_system_coins, rad)
        self.buffer_reductions.append(rad)

    def snapshot(self) -> tuple:
        return self.current_on_auction_system_coins, list(self.buffer_reductions)

    def restore(self, snapshot: tuple):
        self.current_on_auction_system_coins, buffer_reductions = snapshot
        self.buffer_reductions = list(buffer_reductions)

    def can_liquidate(self, vault: Vault, current_price: float, liquidation_ratio: float) -> bool:
        if vault.status != "Active":
            return False
        return vault.get_collateralization_ratio(current_price) < liquidation_ratio

    def liquidate_vault(self, vault: Vault) -> int:
        """Confiscates ``vault`` and starts an auction for its collateral. Returns the auction id."""
        if self.auction_house is None:
            raise RuntimeError("liquidation engine has no auction house connected")
        if vault.status != "Active":
            raise ValueError(f"vault {vault.owner_id} is {vault.status}, not Active")

        amount_to_sell = from_number(vault.collateral_amount)
        amount_to_raise = multiply(from_number(vault.debt_amount * (1 + self.liquidation_penalty)), RAY)

        # Confiscation: the vault's collateral moves into the engine's custody, its debt to the accounting engine
        self.ledger.modify_collateral_balance(vault.collateral_type, self.address, amount_to_sell)
        try:
            auction_id = self.auction_house.start_auction(
                forgone_collateral_receiver=vault.owner_id,
                auction_income_recipient=self.accounting_engine,
                amount_to_raise=amount_to_raise,
                amount_to_sell=amount_to_sell,
                caller=self.address,
            )
        except AuctionHouseError:
            self.ledger.modify_collateral_balance(vault.collateral_type, self.address, -amount_to_sell)
            raise

        self.current_on_auction_system_coins = add(self.current_on_auction_system_coins, amount_to_raise)
        vault.status = "Liquidating"
        vault.collateral_amount = 0.0
        vault.debt_amount = 0.0
        return auction_id
