# collateral_auction/agents/__init__.py

"""
Makes the agent classes importable.
"""
from .keeper_agent import KeeperAgent
