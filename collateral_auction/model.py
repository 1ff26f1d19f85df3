# collateral_auction/model.py

import mesa

from . import config
from .core.oracle import CollateralMarket
from .core.market_state import ProtocolState
from .core.liquidation_engine import Vault
from .processing.mempool import Mempool
from .processing.block_producer import BlockProducer
from .processing.transaction import Transaction
from .agents.keeper_agent import KeeperAgent
from .analysis import metrics


class LiquidationAuctionModel(mesa.Model):
    """Agent-based model of vault liquidations sold through increasing-discount auctions."""
    def __init__(self, n_vaults: int = config.N_VAULTS,
                 n_keepers: int = config.N_KEEPERS,
                 n_steps: int = config.SIMULATION_STEPS,
                 scenario: str = 'Baseline',
                 market_shock_step: int = -1,
                 market_shock_factor: float = 1.0,
                 global_settlement_step: int = -1,
                 settings=None,
                 seed=None):

        super().__init__(seed=seed)

        self.num_vaults = n_vaults
        self.num_keepers = n_keepers
        self.n_steps = n_steps
        self.scenario = scenario
        self.market_shock_step = market_shock_step
        self.market_shock_factor = market_shock_factor
        self.global_settlement_step = global_settlement_step
        self.run_number = 0

        self.current_time = 0.0
        self.time_step_duration = float(config.TIME_STEP_DURATION_SECONDS)

        self.market = CollateralMarket(
            initial_price=config.INITIAL_COLLATERAL_PRICE,
            volatility=config.PRICE_VOLATILITY,
            time_step_seconds=self.time_step_duration,
            rng=self.random,
            shock_step=market_shock_step,
            shock_factor=market_shock_factor,
        )
        self.protocol_state = ProtocolState(model=self, settings=settings)
        self.protocol_state.auction_house.subscribe(self.on_auction_event)
        self.mempool = Mempool()
        self.block_producer = BlockProducer(model=self)

        self.transaction_log = []
        self.finished_auctions = []
        self.agents_by_address = {}

        for i in range(self.num_vaults):
            initial_collateral = self.random.uniform(5, 45)
            safe_cr_target = self.random.uniform(
                config.MIN_LIQUIDATION_RATIO + 0.02,
                config.MIN_LIQUIDATION_RATIO + 0.40
            )
            initial_debt = (initial_collateral * config.INITIAL_COLLATERAL_PRICE) / safe_cr_target
            # Vault debt is denominated in system coins
            initial_debt /= config.INITIAL_REDEMPTION_PRICE / config.RAY
            self.protocol_state.add_vault(Vault(
                owner_id=f"vault-{i}",
                collateral_amount=initial_collateral,
                debt_amount=max(1000.0, initial_debt),
            ))

        for _ in range(self.num_keepers):
            keeper = KeeperAgent(model=self)
            self.agents_by_address[keeper.address] = keeper
            self.protocol_state.fund_account(keeper.address, self.random.uniform(100_000, 500_000))

        print(f"--- Model Initialized: Scenario = {self.scenario}, ShockStep = {self.market_shock_step}, "
              f"SettlementStep = {self.global_settlement_step} ---")
        print(f"Vaults: {self.num_vaults}, Keepers: {self.num_keepers}")

        self.datacollector = mesa.DataCollector(
            model_reporters={
                "Steps": "steps", "Time": "current_time", "Scenario": "scenario",
                "CollateralPrice": lambda m: m.market.current_price,
                "ActiveAuctions": lambda m: len(m.protocol_state.auction_house.auctions),
                "AuctionsStarted": lambda m: m.protocol_state.auction_house.auctions_started,
                "SettledAuctions": metrics.get_settled_auction_count,
                "TerminatedAuctions": metrics.get_terminated_auction_count,
                "DebtOnAuction": metrics.get_debt_on_auction,
                "CoinsRaised": metrics.get_total_coins_raised,
                "BadDebt": metrics.get_total_bad_debt,
                "KeeperProfit": metrics.get_keeper_profit,
                "AvgAuctionDuration": metrics.get_average_auction_duration,
                "AvgDiscountPaid": metrics.get_average_discount_paid,
                "FailedBuys": metrics.get_failed_buy_count,
            },
            agent_reporters={
                "CoinBalance": lambda a: a.coin_balance(),
                "TotalProfit": "total_profit",
                "GasSpent": "gas_spent",
                "AcquiredCollateral": "acquired_collateral",
            }
        )
        self.running = True
        self.datacollector.collect(self)

    def on_auction_event(self, event):
        """Records a finished auction when the auction house settles or terminates it."""
        if event.name == 'SettleAuction':
            self.record_auction_end(event.auction, "Settled", event.timestamp)
        elif event.name == 'TerminateAuctionPrematurely':
            self.record_auction_end(event.auction, "Terminated", event.timestamp)

    def record_auction_end(self, auction, status: str, end_time: int):
        coins_raised = sum(bid['adjusted_bid'] for bid in auction.bids) / config.WAD
        collateral_sold = sum(bid['bought_collateral'] for bid in auction.bids) / config.WAD
        amount_to_raise = auction.initial_amount_to_raise / config.RAD
        # A settled auction pays its income recipient at least what it owed unless collateral ran out first
        shortfall = max(0.0, amount_to_raise - coins_raised)

        self.finished_auctions.append({
            'auction_id': auction.id,
            'scenario': self.scenario,
            'run': self.run_number,
            'status': status,
            'amount_to_raise': amount_to_raise,
            'coins_raised': coins_raised,
            'shortfall': shortfall,
            'start_time': auction.start_time,
            'end_time': end_time,
            'duration_seconds': end_time - auction.start_time,
            'initial_amount_to_sell': auction.initial_amount_to_sell / config.WAD,
            'collateral_sold': collateral_sold,
            'collateral_returned': (auction.initial_amount_to_sell / config.WAD) - collateral_sold,
            'num_bids': len(auction.bids),
            'final_discount': auction.current_discount / config.WAD,
            'average_discount': (sum(bid['discount'] for bid in auction.bids) / len(auction.bids) / config.WAD)
                                if auction.bids else 0.0,
            'market_price_at_end': self.market.current_price,
        })

    def submit_global_settlement(self):
        """Terminates every running auction, as a global settlement would."""
        for auction_id in list(self.protocol_state.auction_house.auctions):
            self.mempool.add_transaction(Transaction(
                tx_type='terminate',
                sender_id=config.GLOBAL_SETTLEMENT_ADDRESS,
                params={'auction_id': auction_id},
                gas_price=float('inf'),
                submission_time=self.current_time
            ))

    def step(self):
        new_price = self.market.advance(self.steps)
        self.protocol_state.refresh_feeds(new_price)
        if config.VERBOSE_LOGGING:
            print(f"[Step {self.steps}, Time {self.current_time:.0f}] Collateral Price: {new_price:.2f}")

        self.agents.do("monitor_trigger")
        self.agents.do("bid_submit")
        if self.global_settlement_step != -1 and self.steps == self.global_settlement_step:
            self.submit_global_settlement()

        transactions_for_block = self.mempool.get_transactions_for_block()
        if transactions_for_block:
            self.block_producer.process_transactions(transactions_for_block)

        self.current_time += self.time_step_duration
        self.datacollector.collect(self)
        if self.steps >= self.n_steps:
            self.running = False
