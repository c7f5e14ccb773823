from __future__ import annotations

from typing import Any

from loguru import logger

from node_staking.core.adapters.models import (
    AutoClaimPreference,
    StakePosition,
    StakingSummary,
    TrackedTransaction,
    TransactionOutcome,
)
from node_staking.core.config import ConfigStore
from node_staking.core.constants.staking_contracts import (
    STAKING_SERVICES,
    ServiceEntry,
)
from node_staking.core.errors import StakingPreconditionError
from node_staking.core.utils.wallets import WalletManager, wallet_from_config
from node_staking.core.utils.web3 import web3_from_rpc_url
from node_staking.staking.aggregator import StakingAggregator
from node_staking.staking.context import StakingContext
from node_staking.staking.executor import TransactionExecutor
from node_staking.staking.tracker import TransactionTracker


class StakingService:
    """Command surface for the application layer.

    Every call resolves wallet and provider context afresh; nothing about the
    chain is cached between calls.
    """

    def __init__(
        self,
        wallet_manager: WalletManager | None,
        config: ConfigStore,
        *,
        registry: tuple[ServiceEntry, ...] = STAKING_SERVICES,
        web3_factory=web3_from_rpc_url,
    ):
        self.context = StakingContext(
            wallet_manager=wallet_manager, config=config, registry=registry
        )
        self.aggregator = StakingAggregator(web3_factory)
        self.executor = TransactionExecutor(web3_factory)
        self.tracker = TransactionTracker(web3_factory)

    @classmethod
    def from_config(cls, config: ConfigStore, **kwargs: Any) -> "StakingService":
        return cls(wallet_from_config(config.wallet), config, **kwargs)

    async def get_staking_summary(self) -> StakingSummary:
        wallet = await self.context.resolve()
        return await self.aggregator.get_staking_summary(wallet)

    async def get_pending_reward_positions(self) -> list[StakePosition]:
        wallet = await self.context.resolve()
        return await self.aggregator.get_pending_reward_positions(wallet)

    async def stake(
        self, service_id: str, amount: str | int, token: str | None = None
    ) -> TransactionOutcome:
        try:
            wallet = await self.context.resolve()
        except StakingPreconditionError as exc:
            return TransactionOutcome.failed(str(exc))
        return await self.executor.stake(wallet, service_id, amount, token)

    async def unstake(
        self, service_id: str, amount: str | int | None = None
    ) -> TransactionOutcome:
        try:
            wallet = await self.context.resolve()
        except StakingPreconditionError as exc:
            return TransactionOutcome.failed(str(exc))
        return await self.executor.unstake(wallet, service_id, amount)

    async def claim_rewards(self, service_id: str | None = None) -> TransactionOutcome:
        try:
            wallet = await self.context.resolve()
        except StakingPreconditionError as exc:
            return TransactionOutcome.failed(str(exc))
        return await self.executor.claim_rewards(wallet, service_id)

    async def set_auto_claim_preference(
        self,
        enabled: bool,
        threshold: str | int | None = None,
        interval: int | None = None,
    ) -> tuple[bool, AutoClaimPreference | str]:
        return await self.executor.set_auto_claim_preference(
            self.context, enabled, threshold, interval
        )

    async def get_transaction_status(self, tx_hash: str) -> TrackedTransaction:
        wallet = await self.context.resolve()
        logger.debug(f"Checking status of {tx_hash}")
        return await self.tracker.check(wallet, tx_hash)
