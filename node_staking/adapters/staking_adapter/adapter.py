from __future__ import annotations

import asyncio
from typing import Any

from eth_utils import to_checksum_address
from web3 import AsyncWeb3

from node_staking.core.adapters.BaseAdapter import (
    BaseAdapter,
    require_signer,
    require_wallet,
)
from node_staking.core.adapters.decorators import status_tuple
from node_staking.core.constants.base import DEFAULT_RPC_TIMEOUT
from node_staking.core.constants.staking_contracts import ServiceEntry
from node_staking.core.utils.transaction import (
    SignCallback,
    encode_call,
    send_transaction,
)


class StakingAdapter(BaseAdapter):
    """Read and write bindings for the registered staking contracts.

    One adapter is bound to one provider session. Which view and entrypoints a
    contract exposes is read from its ``ServiceEntry``; nothing here branches
    on a service id.
    """

    adapter_type = "STAKING"

    def __init__(
        self,
        web3: AsyncWeb3,
        config: dict[str, Any] | None = None,
        *,
        wallet_address: str | None = None,
        sign_callback: SignCallback | None = None,
        chain_id: int | None = None,
        request_timeout: float = DEFAULT_RPC_TIMEOUT,
    ) -> None:
        super().__init__("staking_adapter", config)
        self.web3 = web3
        self.sign_callback = sign_callback
        self.chain_id = chain_id
        self.request_timeout = request_timeout
        self.wallet_address: str | None = (
            to_checksum_address(wallet_address) if wallet_address else None
        )

    def _contract(self, service: ServiceEntry):
        return self.web3.eth.contract(address=service.address, abi=service.abi)

    async def _view(self, service: ServiceEntry, fn_name: str, account: str) -> Any:
        fn = getattr(self._contract(service).functions, fn_name)
        return await asyncio.wait_for(
            fn(to_checksum_address(account)).call(block_identifier="latest"),
            timeout=self.request_timeout,
        )

    @status_tuple
    async def get_stake(self, service: ServiceEntry, *, account: str) -> int:
        result = await self._view(service, service.stake_view, account)
        if service.stake_field is not None:
            result = result[service.stake_field]
        return int(result)

    @status_tuple
    async def get_pending_rewards(self, service: ServiceEntry, *, account: str) -> int:
        result = await self._view(service, service.rewards_view, account)
        if isinstance(result, (list, tuple)):
            result = result[0]
        return int(result)

    async def _resolve_chain_id(self) -> int:
        if self.chain_id is None:
            self.chain_id = int(await self.web3.eth.chain_id)
        return self.chain_id

    async def _submit(
        self, service: ServiceEntry, fn_name: str, *, value: int = 0
    ) -> str:
        tx = await encode_call(
            self.web3,
            target=service.address,
            abi=service.abi,
            fn_name=fn_name,
            args=[],
            from_address=self.wallet_address,
            chain_id=await self._resolve_chain_id(),
            value=value,
        )
        tx_hash = await send_transaction(self.web3, tx, self.sign_callback)
        self.logger.info(f"{service.service_id}.{fn_name} submitted: {tx_hash}")
        return tx_hash

    @require_wallet
    @require_signer
    @status_tuple
    async def stake(self, service: ServiceEntry, *, amount_wei: int) -> str:
        if not service.supports_stake:
            raise ValueError(f"Service {service.service_id} does not support staking")
        return await self._submit(service, service.stake_fn, value=int(amount_wei))

    @require_wallet
    @require_signer
    @status_tuple
    async def unstake(self, service: ServiceEntry) -> str:
        if not service.supports_unstake:
            raise ValueError(
                f"Service {service.service_id} does not support unstaking"
            )
        return await self._submit(service, service.unstake_fn)

    @require_wallet
    @require_signer
    @status_tuple
    async def claim_rewards(self, service: ServiceEntry) -> str:
        if not service.supports_claim:
            raise ValueError(
                f"Service {service.service_id} does not support claiming rewards"
            )
        return await self._submit(service, service.claim_fn)
