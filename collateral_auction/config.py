# collateral_auction/config.py

"""
Global constants and parameters for the increasing-discount collateral auction
engine and the liquidation simulation that drives it.
"""

# --- Logging Configuration ---
VERBOSE_LOGGING = False  # Set to True to print per-transaction detail during simulation steps


# Fixed-point scales
WAD = 10**18
RAY = 10**27
RAD = 10**45
MAX_UINT = 2**256 - 1
MAX_UINT48 = 2**48 - 1

# Auction house defaults (each one can be changed later through modify_parameters)
MINIMUM_BID = 5 * WAD                          # Smallest bid accepted, in coins (WAD)
MIN_DISCOUNT = 95 * WAD // 100                 # Discount applied when an auction starts (5% off)
MAX_DISCOUNT = 95 * WAD // 100                 # Deepest discount an auction can reach
PER_SECOND_DISCOUNT_UPDATE_RATE = RAY          # RAY means the discount never moves
MAX_DISCOUNT_UPDATE_RATE_TIMELINE = 3600       # Seconds until max_discount applies unconditionally
LOWER_COLLATERAL_MEDIAN_DEVIATION = 90 * WAD // 100
UPPER_COLLATERAL_MEDIAN_DEVIATION = 95 * WAD // 100
LOWER_SYSTEM_COIN_MEDIAN_DEVIATION = WAD
UPPER_SYSTEM_COIN_MEDIAN_DEVIATION = WAD
MIN_SYSTEM_COIN_MEDIAN_DEVIATION = 999 * WAD // 1000

COLLATERAL_TYPE = 'ETH-A'
AUCTION_HOUSE_ADDRESS = 'collateral-auction-house'
ACCOUNTING_ENGINE_ADDRESS = 'accounting-engine'
LIQUIDATION_ENGINE_ADDRESS = 'liquidation-engine'
GLOBAL_SETTLEMENT_ADDRESS = 'global-settlement'

# Market & Simulation Setup
INITIAL_COLLATERAL_PRICE = 3200.0
PRICE_VOLATILITY = 0.75     # Annualized
PRICE_DRIFT = -0.03         # Slight negative drift to push vaults toward liquidation
INITIAL_REDEMPTION_PRICE = 3 * RAY  # Reference price of one system coin, in the collateral's quote unit
SYSTEM_COIN_MARKET_NOISE = 0.002    # Relative noise of the system coin market price around redemption
ORACLE_DELAY_STEPS = 1      # The trusted feed releases the median with this many steps of delay
N_VAULTS = 60
N_KEEPERS = 5
SIMULATION_STEPS = 720      # 12 hours of 60 second steps
TIME_STEP_DURATION_SECONDS = 60

# Simulation-side discount schedule (overrides the conservative engine defaults above)
SIM_MIN_DISCOUNT = 95 * WAD // 100
SIM_MAX_DISCOUNT = 80 * WAD // 100
SIM_PER_SECOND_DISCOUNT_UPDATE_RATE = 999_950_000_000_000_000_000_000_000  # ~0.005% per second
SIM_MAX_DISCOUNT_UPDATE_RATE_TIMELINE = 2700
SIM_MINIMUM_BID = 25 * WAD

# Liquidation trigger
MIN_LIQUIDATION_RATIO = 1.50
LIQUIDATION_PENALTY = 0.13

# Keeper behaviour
KEEPER_PROFIT_MARGIN = 0.02   # Keeper buys only if the auction price is this far below its own valuation
KEEPER_BID_FRACTION = 0.25    # Share of the remaining raise a keeper bids for at once
KEEPER_MAX_BALANCE_SHARE = 0.5
BASE_GAS_PRICE = 20           # Gwei per gas unit
LIQUIDATE_GAS = 500_000
BUY_GAS = 300_000

# --- Parameters for Main Simulation Loop ---
SCENARIOS = ['Baseline', 'MarketShock_Drop', 'GlobalSettlement']
MARKET_SHOCK_FACTOR = 0.65    # 35% drop halfway through the run
NUM_RUNS = 20
