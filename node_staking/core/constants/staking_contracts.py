from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from eth_utils import is_address, to_checksum_address

from node_staking.core.constants import NATIVE_TOKEN_SYMBOL
from node_staking.core.constants.staking_abi import (
    COMPUTE_STAKING_ABI,
    NODE_STAKING_MANAGER_ABI,
)


@dataclass(frozen=True)
class ServiceEntry:
    service_id: str
    name: str
    address: str
    abi: list[dict[str, Any]]
    stake_token: str
    min_stake_wei: int
    # View returning the staker's position; ``stake_field`` indexes the amount
    # when the view returns a tuple.
    stake_view: str
    stake_field: int | None = None
    rewards_view: str = "pendingRewards"
    stake_fn: str | None = None
    unstake_fn: str | None = None
    claim_fn: str | None = None

    @property
    def supports_stake(self) -> bool:
        return self.stake_fn is not None

    @property
    def supports_unstake(self) -> bool:
        return self.unstake_fn is not None

    @property
    def supports_claim(self) -> bool:
        return self.claim_fn is not None


# Deployment addresses are placeholders until the network config supplies real
# ones via ``staking.contracts.<service_id>``.
STAKING_SERVICES: tuple[ServiceEntry, ...] = (
    ServiceEntry(
        service_id="compute",
        name="Compute Provider",
        address=to_checksum_address("0x0000000000000000000000000000000000000001"),
        abi=COMPUTE_STAKING_ABI,
        stake_token=NATIVE_TOKEN_SYMBOL,
        min_stake_wei=100_000_000_000_000_000,
        stake_view="getStake",
        stake_field=0,
        stake_fn="stakeAsProvider",
        unstake_fn="unstake",
        claim_fn="claimRewards",
    ),
    ServiceEntry(
        service_id="node",
        name="Node Operator",
        address=to_checksum_address("0x0000000000000000000000000000000000000002"),
        abi=NODE_STAKING_MANAGER_ABI,
        stake_token=NATIVE_TOKEN_SYMBOL,
        min_stake_wei=0,
        stake_view="getNodeInfo",
        stake_field=1,
        claim_fn="claimRewards",
    ),
)


def resolve_registry(
    overrides: dict[str, str] | None = None,
    registry: tuple[ServiceEntry, ...] = STAKING_SERVICES,
) -> tuple[ServiceEntry, ...]:
    """Apply per-service address overrides, keeping registry order."""
    if not overrides:
        return registry
    resolved: list[ServiceEntry] = []
    for entry in registry:
        address = overrides.get(entry.service_id)
        if address is None:
            resolved.append(entry)
            continue
        if not is_address(address):
            raise ValueError(
                f"Invalid contract address for service {entry.service_id}: {address}"
            )
        resolved.append(replace(entry, address=to_checksum_address(address)))
    return tuple(resolved)
