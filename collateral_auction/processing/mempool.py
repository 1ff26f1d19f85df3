# collateral_auction/processing/mempool.py

from .transaction import Transaction


class Mempool:
    """Pending transactions, handed to the block producer in priority order."""
    def __init__(self):
        self.pending_txs = []

    def add_transaction(self, tx: Transaction):
        if not isinstance(tx, Transaction):
            raise TypeError(f"Mempool only accepts Transaction objects, got {type(tx).__name__}")
        self.pending_txs.append(tx)

    def get_transactions_for_block(self, max_txs: int = -1) -> list[Transaction]:
        """
        Retrieves transactions for the next block, highest gas price first,
        and removes them from the mempool.

        Args:
            max_txs (int): Maximum number of transactions in the block; -1 means no limit.

        Returns:
            list[Transaction]: The transactions selected for the block, in execution order.
        """
        ordered_txs = sorted(self.pending_txs)
        if max_txs > 0:
            selected_txs = ordered_txs[:max_txs]
            self.pending_txs = ordered_txs[max_txs:]
        else:
            selected_txs = ordered_txs
            self.pending_txs = []
        return selected_txs

    def view_transactions(self) -> list[Transaction]:
        return list(self.pending_txs)

    def __len__(self):
        return len(self.pending_txs)
