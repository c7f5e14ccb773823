from __future__ import annotations

from dataclasses import dataclass, field

from node_staking.core.adapters.models import AutoClaimPreference
from node_staking.core.config import ConfigStore
from node_staking.core.constants.base import DEFAULT_RPC_TIMEOUT
from node_staking.core.constants.staking_contracts import (
    STAKING_SERVICES,
    ServiceEntry,
    resolve_registry,
)
from node_staking.core.errors import (
    SIGNER_NOT_INITIALIZED,
    WALLET_NOT_CONNECTED,
    StakingPreconditionError,
)
from node_staking.core.utils.locks import AsyncRWLock
from node_staking.core.utils.transaction import SignCallback
from node_staking.core.utils.wallets import WalletManager


@dataclass(frozen=True)
class WalletContext:
    """Everything one operation needs, captured under the read lock."""

    address: str | None
    sign_callback: SignCallback | None
    rpc_endpoint: str
    registry: tuple[ServiceEntry, ...]
    auto_claim: AutoClaimPreference
    chain_id: int | None = None
    request_timeout: float = DEFAULT_RPC_TIMEOUT

    @property
    def connected(self) -> bool:
        return bool(self.address)

    def require_address(self) -> str:
        if not self.address:
            raise StakingPreconditionError(WALLET_NOT_CONNECTED)
        return self.address

    def require_signer(self) -> SignCallback:
        self.require_address()
        if self.sign_callback is None:
            raise StakingPreconditionError(SIGNER_NOT_INITIALIZED)
        return self.sign_callback

    def service(self, service_id: str) -> ServiceEntry:
        entry = next((e for e in self.registry if e.service_id == service_id), None)
        if entry is None:
            known = ", ".join(e.service_id for e in self.registry)
            raise StakingPreconditionError(
                f"Unknown staking service {service_id!r} (known: {known})"
            )
        return entry


@dataclass
class StakingContext:
    """Wallet manager and config store shared by every facade call.

    Passed explicitly to the aggregator and executor instead of living in
    process-wide state.
    """

    wallet_manager: WalletManager | None
    config: ConfigStore
    registry: tuple[ServiceEntry, ...] = STAKING_SERVICES
    lock: AsyncRWLock = field(default_factory=AsyncRWLock)

    async def resolve(self) -> WalletContext:
        async with self.lock.read():
            return self._snapshot()

    def _snapshot(self) -> WalletContext:
        wallet = self.wallet_manager
        address = wallet.current_address() if wallet is not None else None
        signer = wallet.signer() if wallet is not None and address else None
        try:
            registry = resolve_registry(self.config.contract_overrides, self.registry)
            auto_claim = self.config.auto_claim
            chain_id = self.config.chain_id
            request_timeout = self.config.request_timeout_seconds
        except ValueError as exc:
            raise StakingPreconditionError(str(exc)) from exc
        return WalletContext(
            address=address,
            sign_callback=signer,
            rpc_endpoint=self.config.rpc_endpoint,
            registry=registry,
            auto_claim=auto_claim,
            chain_id=chain_id,
            request_timeout=request_timeout,
        )
