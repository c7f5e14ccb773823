from node_staking.staking.aggregator import StakingAggregator
from node_staking.staking.context import StakingContext, WalletContext
from node_staking.staking.executor import TransactionExecutor
from node_staking.staking.facade import StakingService
from node_staking.staking.tracker import TransactionTracker

__all__ = [
    "StakingAggregator",
    "StakingContext",
    "StakingService",
    "TransactionExecutor",
    "TransactionTracker",
    "WalletContext",
]
