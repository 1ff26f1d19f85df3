# collateral_auction/processing/transaction.py

class Transaction:
    """
    A call against the protocol waiting in the mempool or already executed.

    ``tx_type`` is one of 'liquidate', 'buy' or 'terminate'; ``params`` holds
    that call's arguments.
    """
    TX_TYPES = ('liquidate', 'buy', 'terminate')

    def __init__(self, tx_type: str, sender_id, params: dict,
                 gas_price: float, submission_time: float):
        if tx_type not in self.TX_TYPES:
            raise ValueError(f"Unknown transaction type: {tx_type}")
        self.tx_type = tx_type
        self.sender_id = sender_id # unique_id of the submitting agent, or a protocol address
        self.params = params
        self.gas_price = float(gas_price)
        self.submission_time = float(submission_time)

        self.status = "Pending"  # "Pending", "Executed" or "Failed"
        self.execution_time = -1.0
        self.failure_reason = None # FailureReason of a refused call
        self.result = None # Return value of an executed call

    def __lt__(self, other):
        """Higher gas price sorts first; ties go to the earlier submission."""
        if not isinstance(other, Transaction):
            return NotImplemented
        if self.gas_price != other.gas_price:
            return self.gas_price > other.gas_price
        return self.submission_time < other.submission_time

    def __repr__(self):
        return (f"Tx(type='{self.tx_type}', sender={self.sender_id}, gas={self.gas_price:.1f}, "
                f"status='{self.status}', submit_time={self.submission_time:.0f})")
