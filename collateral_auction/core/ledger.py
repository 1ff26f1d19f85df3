# collateral_auction/core/ledger.py

from contextlib import contextmanager

from .errors import FailureReason, LedgerError


class BalanceLedger:
    """
    In-memory ledger of collateral (WAD) and internal coin (RAD) balances.

    Transfers either complete or raise ``LedgerError`` without moving anything.
    ``atomic()`` groups several transfers so a later failure undoes earlier ones.
    """
    def __init__(self):
        self.collateral_balances = {}  # (collateral_type, account) -> WAD
        self.coin_balances = {}        # account -> RAD
        self.debt_balances = {}        # account -> RAD of unbacked debt
        self.transfer_count = 0

    # --- Reads ---

    def token_collateral(self, collateral_type: str, account: str) -> int:
        return self.collateral_balances.get((collateral_type, account), 0)

    def coin_balance(self, account: str) -> int:
        return self.coin_balances.get(account, 0)

    def debt_balance(self, account: str) -> int:
        return self.debt_balances.get(account, 0)

    # --- Seeding ---

    def modify_collateral_balance(self, collateral_type: str, account: str, wad: int):
        """Adds (or with a negative ``wad`` removes) collateral from outside the ledger."""
        new_balance = self.token_collateral(collateral_type, account) + int(wad)
        if new_balance < 0:
            raise LedgerError(FailureReason.INSUFFICIENT_COLLATERAL, f"{account} ({collateral_type})")
        self.collateral_balances[(collateral_type, account)] = new_balance

    def create_unbacked_debt(self, debt_destination: str, coin_destination: str, rad: int):
        """Mints coins to ``coin_destination`` against unbacked debt held by ``debt_destination``."""
        if rad < 0:
            raise LedgerError(FailureReason.ARITHMETIC_UNDERFLOW, str(rad))
        self.debt_balances[debt_destination] = self.debt_balance(debt_destination) + int(rad)
        self.coin_balances[coin_destination] = self.coin_balance(coin_destination) + int(rad)

    # --- Transfers ---

    def transfer_collateral(self, collateral_type: str, src: str, dst: str, wad: int):
        if wad < 0:
            raise LedgerError(FailureReason.ARITHMETIC_UNDERFLOW, str(wad))
        src_balance = self.token_collateral(collateral_type, src)
        if src_balance < wad:
            raise LedgerError(FailureReason.INSUFFICIENT_COLLATERAL,
                              f"{src} holds {src_balance}, needs {wad} ({collateral_type})")
        self.collateral_balances[(collateral_type, src)] = src_balance - wad
        self.collateral_balances[(collateral_type, dst)] = self.token_collateral(collateral_type, dst) + wad
        self.transfer_count += 1

    def transfer_internal_coins(self, src: str, dst: str, rad: int):
        if rad < 0:
            raise LedgerError(FailureReason.ARITHMETIC_UNDERFLOW, str(rad))
        src_balance = self.coin_balance(src)
        if src_balance < rad:
            raise LedgerError(FailureReason.INSUFFICIENT_COINS, f"{src} holds {src_balance}, needs {rad}")
        self.coin_balances[src] = src_balance - rad
        self.coin_balances[dst] = self.coin_balance(dst) + rad
        self.transfer_count += 1

    # --- Atomicity ---

    def snapshot(self) -> tuple:
        return (dict(self.collateral_balances), dict(self.coin_balances),
                dict(self.debt_balances), self.transfer_count)

    def restore(self, snapshot: tuple):
        collateral, coins, debt, transfer_count = snapshot
        self.collateral_balances = dict(collateral)
        self.coin_balances = dict(coins)
        self.debt_balances = dict(debt)
        self.transfer_count = transfer_count

    @contextmanager
    def atomic(self):
        """Restores every balance to its state on entry if the block raises."""
        saved = self.snapshot()
        try:
            yield self
        except Exception:
            self.restore(saved)
            raise
