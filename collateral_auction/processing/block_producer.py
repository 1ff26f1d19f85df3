# collateral_auction/processing/block_producer.py

from .transaction import Transaction
from ..core.errors import AuctionHouseError
from .. import config


class BlockProducer:
    """Executes mempool transactions one at a time against the protocol state."""
    def __init__(self, model):
        self.model = model

    def process_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        executed_txs = []
        if not transactions:
            return executed_txs

        if config.VERBOSE_LOGGING:
            print(f"  [BlockProducer] Processing {len(transactions)} transactions for block at time {self.model.current_time:.0f}...")

        for tx in transactions:
            tx.execution_time = self.model.current_time
            try:
                tx.result = self._execute(tx)
                tx.status = "Executed"
                details = f"{tx.tx_type} -> {tx.result}"
            except AuctionHouseError as e:
                tx.status = "Failed"
                tx.failure_reason = e.reason
                details = str(e)
            except ValueError as e:
                # Stale liquidation: the vault was already taken by an earlier transaction in this block
                tx.status = "Failed"
                details = str(e)

            agent = self.model.agents_by_address.get(tx.sender_id)
            if agent is not None:
                agent.pay_gas(config.LIQUIDATE_GAS if tx.tx_type == 'liquidate' else config.BUY_GAS)
                if tx.status == "Executed":
                    agent.record_executed(tx)

            executed_txs.append(tx)
            self.model.transaction_log.append(tx)
            if tx.status == "Failed" or config.VERBOSE_LOGGING:
                print(f"      Tx Result: {tx.tx_type} from {tx.sender_id}: {tx.status}. Details: {details}")

        return executed_txs

    def _execute(self, tx: Transaction):
        state = self.model.protocol_state
        auction_house = state.auction_house

        if tx.tx_type == 'liquidate':
            vault = state.get_vault(tx.params['vault_id'])
            if vault is None:
                raise ValueError(f"Vault {tx.params['vault_id']} not found for liquidation.")
            return state.liquidation_engine.liquidate_vault(vault)

        if tx.tx_type == 'buy':
            return auction_house.buy_collateral(tx.params['auction_id'], tx.params['wad'], caller=tx.sender_id)

        # terminate
        return auction_house.terminate_auction_prematurely(tx.params['auction_id'], caller=tx.sender_id)
