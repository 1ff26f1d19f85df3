# collateral_auction/analysis/metrics.py

"""
Functions to calculate metrics from the simulation model's state.
These are used as model reporters in Mesa's DataCollector.
"""

import numpy as np

from ..agents.keeper_agent import KeeperAgent
from .. import config


def get_settled_auction_count(model) -> int:
    return sum(1 for record in model.finished_auctions if record['status'] == 'Settled')


def get_terminated_auction_count(model) -> int:
    return sum(1 for record in model.finished_auctions if record['status'] == 'Terminated')


def get_debt_on_auction(model) -> float:
    """Coins the liquidation engine still expects back from running auctions."""
    return model.protocol_state.liquidation_engine.current_on_auction_system_coins / config.RAD


def get_total_coins_raised(model) -> float:
    return float(sum(record['coins_raised'] for record in model.finished_auctions))


def get_total_bad_debt(model) -> float:
    """
    Debt that finished auctions did not cover: terminated auctions, and
    auctions that ran out of collateral before meeting their raise target.
    """
    return float(sum(record['shortfall'] for record in model.finished_auctions))


def get_keeper_profit(model) -> float:
    keepers = model.agents_by_type.get(KeeperAgent)
    if not keepers:
        return 0.0
    return float(sum(keeper.total_profit for keeper in keepers))


def get_average_auction_duration(model) -> float:
    """Average duration, in seconds, of SETTLED auctions."""
    durations = [record['duration_seconds'] for record in model.finished_auctions if record['status'] == 'Settled']
    if not durations:
        return 0.0
    return float(np.mean(durations))


def get_average_discount_paid(model) -> float:
    """
    Average discount multiplier buyers paid at, weighted by collateral bought.
    1.0 means no discount; lower values mean cheaper collateral.
    """
    discounts = []
    weights = []
    for auction in model.protocol_state.get_all_active_auctions():
        for bid in auction.bids:
            discounts.append(bid['discount'] / config.WAD)
            weights.append(bid['bought_collateral'] / config.WAD)
    for record in model.finished_auctions:
        if record['collateral_sold'] > 0:
            discounts.append(record['average_discount'])
            weights.append(record['collateral_sold'])
    if not weights or sum(weights) <= 0:
        return 0.0
    return float(np.average(discounts, weights=weights))


def get_failed_buy_count(model) -> int:
    return sum(1 for tx in model.transaction_log if tx.tx_type == 'buy' and tx.status == 'Failed')
