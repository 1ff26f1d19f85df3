import pytest

from collateral_auction.config import RAD, WAD
from collateral_auction.core import BalanceLedger
from collateral_auction.core.errors import AuctionHouseError, FailureReason, LedgerError

ETH = 'ETH-A'


@pytest.fixture
def ledger():
    ledger = BalanceLedger()
    ledger.modify_collateral_balance(ETH, 'alice', 10 * WAD)
    ledger.create_unbacked_debt('accounting-engine', 'alice', 500 * RAD)
    return ledger


def test_seeding(ledger):
    assert ledger.token_collateral(ETH, 'alice') == 10 * WAD
    assert ledger.coin_balance('alice') == 500 * RAD
    assert ledger.debt_balance('accounting-engine') == 500 * RAD
    assert ledger.token_collateral(ETH, 'bob') == 0


def test_transfers_move_balances(ledger):
    ledger.transfer_collateral(ETH, 'alice', 'bob', 4 * WAD)
    ledger.transfer_internal_coins('alice', 'bob', 100 * RAD)
    assert ledger.token_collateral(ETH, 'alice') == 6 * WAD
    assert ledger.token_collateral(ETH, 'bob') == 4 * WAD
    assert ledger.coin_balance('alice') == 400 * RAD
    assert ledger.coin_balance('bob') == 100 * RAD
    assert ledger.transfer_count == 2


def test_overdraft_is_refused_without_moving_anything(ledger):
    with pytest.raises(LedgerError) as excinfo:
        ledger.transfer_collateral(ETH, 'alice', 'bob', 11 * WAD)
    assert excinfo.value.reason is FailureReason.INSUFFICIENT_COLLATERAL

    with pytest.raises(LedgerError) as excinfo:
        ledger.transfer_internal_coins('bob', 'alice', 1)
    assert excinfo.value.reason is FailureReason.INSUFFICIENT_COINS

    assert ledger.token_collateral(ETH, 'alice') == 10 * WAD
    assert ledger.coin_balance('alice') == 500 * RAD
    assert ledger.transfer_count == 0


def test_ledger_errors_are_auction_house_errors(ledger):
    with pytest.raises(AuctionHouseError):
        ledger.modify_collateral_balance(ETH, 'alice', -11 * WAD)


def test_atomic_block_undoes_earlier_transfers(ledger):
    with pytest.raises(LedgerError):
        with ledger.atomic():
            ledger.transfer_collateral(ETH, 'alice', 'bob', 4 * WAD)
            ledger.transfer_internal_coins('alice', 'bob', 600 * RAD)
    assert ledger.token_collateral(ETH, 'bob') == 0
    assert ledger.token_collateral(ETH, 'alice') == 10 * WAD
    assert ledger.transfer_count == 0


def test_zero_transfer_is_allowed(ledger):
    ledger.transfer_collateral(ETH, 'bob', 'alice', 0)
    assert ledger.token_collateral(ETH, 'alice') == 10 * WAD
