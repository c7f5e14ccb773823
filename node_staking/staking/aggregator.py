from __future__ import annotations

import asyncio

from loguru import logger

from node_staking.adapters.staking_adapter.adapter import StakingAdapter
from node_staking.core.adapters.models import StakePosition, StakingSummary
from node_staking.core.constants.staking_contracts import ServiceEntry
from node_staking.core.utils.web3 import web3_from_rpc_url
from node_staking.staking.context import WalletContext


class StakingAggregator:
    """Folds per-contract stake and reward reads into one summary.

    Reads are best effort: a contract whose stake view fails is left out, a
    failed rewards view counts as zero. Only a malformed endpoint (raised as
    ``StakingPreconditionError`` before any I/O) fails the whole call.
    """

    def __init__(self, web3_factory=web3_from_rpc_url):
        self.web3_factory = web3_factory
        self.logger = logger.bind(component=self.__class__.__name__)

    async def get_staking_summary(self, wallet: WalletContext) -> StakingSummary:
        if not wallet.connected:
            return StakingSummary.from_positions([], wallet.auto_claim)

        async with self.web3_factory(
            wallet.rpc_endpoint, timeout=wallet.request_timeout
        ) as web3:
            adapter = StakingAdapter(
                web3,
                wallet_address=wallet.address,
                request_timeout=wallet.request_timeout,
            )
            rows = await asyncio.gather(
                *[
                    self._read_position(adapter, entry, wallet.address)
                    for entry in wallet.registry
                ]
            )

        positions = [p for p in rows if p is not None]
        return StakingSummary.from_positions(positions, wallet.auto_claim)

    async def get_pending_reward_positions(
        self, wallet: WalletContext
    ) -> list[StakePosition]:
        if not wallet.connected:
            return []

        async with self.web3_factory(
            wallet.rpc_endpoint, timeout=wallet.request_timeout
        ) as web3:
            adapter = StakingAdapter(
                web3,
                wallet_address=wallet.address,
                request_timeout=wallet.request_timeout,
            )
            results = await asyncio.gather(
                *[
                    adapter.get_pending_rewards(entry, account=wallet.address)
                    for entry in wallet.registry
                ]
            )

        positions: list[StakePosition] = []
        for entry, (ok, pending) in zip(wallet.registry, results, strict=True):
            if not ok:
                self.logger.warning(
                    f"Skipping {entry.service_id}: pending rewards query failed:"
                    f" {pending}"
                )
                continue
            if pending > 0:
                positions.append(_position(entry, staked=0, pending=pending))
        return positions

    async def _read_position(
        self, adapter: StakingAdapter, entry: ServiceEntry, account: str
    ) -> StakePosition | None:
        (stake_ok, staked), (rewards_ok, pending) = await asyncio.gather(
            adapter.get_stake(entry, account=account),
            adapter.get_pending_rewards(entry, account=account),
        )
        if not stake_ok:
            self.logger.warning(
                f"Skipping {entry.service_id}: stake query failed: {staked}"
            )
            return None
        if not rewards_ok:
            self.logger.warning(
                f"{entry.service_id}: pending rewards query failed, counting 0:"
                f" {pending}"
            )
            pending = 0
        if staked == 0 and pending == 0:
            return None
        return _position(entry, staked=staked, pending=pending)


def _position(entry: ServiceEntry, *, staked: int, pending: int) -> StakePosition:
    return StakePosition(
        service_id=entry.service_id,
        service_name=entry.name,
        staked_amount=staked,
        pending_rewards=pending,
        stake_token=entry.stake_token,
        min_stake=entry.min_stake_wei,
    )
