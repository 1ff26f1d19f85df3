# collateral_auction/processing/__init__.py

"""
Makes the processing components importable.
"""
from .transaction import Transaction
from .mempool import Mempool
from .block_producer import BlockProducer
