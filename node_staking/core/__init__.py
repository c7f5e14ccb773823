from node_staking.core.adapters.BaseAdapter import BaseAdapter
from node_staking.core.adapters.models import (
    AutoClaimPreference,
    StakePosition,
    StakingSummary,
    TransactionOutcome,
)
from node_staking.core.config import ConfigStore

__all__ = [
    "AutoClaimPreference",
    "BaseAdapter",
    "ConfigStore",
    "StakePosition",
    "StakingSummary",
    "TransactionOutcome",
]
