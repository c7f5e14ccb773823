__version__ = "0.1.0"

from node_staking.core import (
    BaseAdapter,
    ConfigStore,
    StakePosition,
    StakingSummary,
    TransactionOutcome,
)
from node_staking.staking import StakingService

__all__ = [
    "__version__",
    "BaseAdapter",
    "ConfigStore",
    "StakePosition",
    "StakingService",
    "StakingSummary",
    "TransactionOutcome",
]
