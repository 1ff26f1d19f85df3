# collateral_auction/analysis/__init__.py

"""
Makes the analysis components (metrics, plotting) importable.
"""
from .metrics import (
    get_settled_auction_count,
    get_terminated_auction_count,
    get_debt_on_auction,
    get_total_coins_raised,
    get_total_bad_debt,
    get_keeper_profit,
    get_average_auction_duration,
    get_average_discount_paid,
    get_failed_buy_count
)

from .plotting import (
    plot_metric_boxplots,
    plot_auction_outcomes,
    plot_debt_on_auction_path,
    format_val,
    format_agg
)
