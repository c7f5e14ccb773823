from __future__ import annotations

import asyncio
import weakref
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from eth_utils import is_address
from loguru import logger

from node_staking.adapters.staking_adapter.adapter import StakingAdapter
from node_staking.core.adapters.models import AutoClaimPreference, TransactionOutcome
from node_staking.core.constants import ZERO_ADDRESS
from node_staking.core.constants.staking_contracts import ServiceEntry
from node_staking.core.errors import ConfigPersistError, StakingPreconditionError
from node_staking.core.utils.units import format_wei, parse_wei_amount
from node_staking.core.utils.web3 import validate_rpc_url, web3_from_rpc_url
from node_staking.staking.context import StakingContext, WalletContext

AdapterCall = Callable[[StakingAdapter], Awaitable[tuple[bool, Any]]]


def _parse_amount(value: str | int, field: str = "amount") -> int:
    try:
        return parse_wei_amount(value, field=field)
    except ValueError as exc:
        raise StakingPreconditionError(str(exc)) from exc


def _check_stake_token(entry: ServiceEntry, token: str | None) -> None:
    if token is None:
        return
    token = str(token).strip()
    if not token or token.upper() == entry.stake_token.upper():
        return
    if is_address(token) and token.lower() == ZERO_ADDRESS:
        return
    raise StakingPreconditionError(
        f"Unsupported stake token {token!r} for service {entry.service_id}"
        f" (expected {entry.stake_token})"
    )


def _parse_interval(value: int) -> int:
    if isinstance(value, bool):
        raise StakingPreconditionError(f"Invalid interval: {value!r}")
    try:
        hours = int(value)
    except (TypeError, ValueError) as exc:
        raise StakingPreconditionError(f"Invalid interval: {value!r}") from exc
    if hours < 1:
        raise StakingPreconditionError("Invalid interval: must be at least 1 hour")
    return hours


class TransactionExecutor:
    """Submits stake / unstake / claim transactions, at most once per call.

    Preconditions are checked before any provider is opened. Submissions from
    one wallet address are serialized so nonce assignment and broadcast never
    interleave.
    """

    def __init__(self, web3_factory=web3_from_rpc_url):
        self.web3_factory = web3_factory
        self.logger = logger.bind(component=self.__class__.__name__)
        # Entries live only while a submission holds or awaits the lock.
        self._submission_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @asynccontextmanager
    async def _submission_lock(self, address: str):
        lock = self._submission_locks.setdefault(address.lower(), asyncio.Lock())
        async with lock:
            yield

    def _reject(self, op: str, exc: Exception) -> TransactionOutcome:
        self.logger.warning(f"{op} rejected: {exc}")
        return TransactionOutcome.failed(str(exc))

    def _preflight(self, wallet: WalletContext, service_id: str) -> ServiceEntry:
        wallet.require_signer()
        entry = wallet.service(service_id)
        validate_rpc_url(wallet.rpc_endpoint)
        return entry

    async def _submit(
        self,
        wallet: WalletContext,
        op: str,
        call: AdapterCall,
        *,
        resulting_amount: int,
    ) -> TransactionOutcome:
        try:
            async with self._submission_lock(wallet.address):
                async with self.web3_factory(
                    wallet.rpc_endpoint, timeout=wallet.request_timeout
                ) as web3:
                    adapter = StakingAdapter(
                        web3,
                        wallet_address=wallet.address,
                        sign_callback=wallet.sign_callback,
                        chain_id=wallet.chain_id,
                        request_timeout=wallet.request_timeout,
                    )
                    ok, result = await call(adapter)
        except StakingPreconditionError as exc:
            return self._reject(op, exc)
        except Exception as exc:
            self.logger.error(f"{op} failed before submission: {exc}")
            return TransactionOutcome.failed(
                f"Failed to send {op} transaction: {exc}"
            )

        if not ok:
            self.logger.error(f"{op} failed: {result}")
            return TransactionOutcome.failed(
                f"Failed to send {op} transaction: {result}"
            )
        return TransactionOutcome.succeeded(result, resulting_amount)

    async def stake(
        self,
        wallet: WalletContext,
        service_id: str,
        amount: str | int,
        token: str | None = None,
    ) -> TransactionOutcome:
        """Stake ``amount`` base units into ``service_id``.

        ``resulting_amount`` echoes the requested amount; it is not re-read from
        chain.
        """
        try:
            entry = self._preflight(wallet, service_id)
            amount_wei = _parse_amount(amount)
            _check_stake_token(entry, token)
            if not entry.supports_stake:
                raise StakingPreconditionError(
                    f"Service {entry.service_id} does not support staking"
                )
        except StakingPreconditionError as exc:
            return self._reject("stake", exc)

        self.logger.info(
            f"Staking {format_wei(amount_wei)} {entry.stake_token}"
            f" into {entry.service_id}"
        )
        return await self._submit(
            wallet,
            "stake",
            lambda adapter: adapter.stake(entry, amount_wei=amount_wei),
            resulting_amount=amount_wei,
        )

    async def unstake(
        self,
        wallet: WalletContext,
        service_id: str,
        amount: str | int | None = None,
    ) -> TransactionOutcome:
        # Contracts hold a single position per service, so unstake is always full;
        # ``amount`` is validated but not sent.
        try:
            entry = self._preflight(wallet, service_id)
            if amount is not None:
                _parse_amount(amount)
            if not entry.supports_unstake:
                raise StakingPreconditionError(
                    f"Service {entry.service_id} does not support unstaking"
                )
        except StakingPreconditionError as exc:
            return self._reject("unstake", exc)

        return await self._submit(
            wallet,
            "unstake",
            lambda adapter: adapter.unstake(entry),
            resulting_amount=0,
        )

    async def claim_rewards(
        self, wallet: WalletContext, service_id: str | None = None
    ) -> TransactionOutcome:
        # The claimed amount is only recoverable from the receipt logs, so the
        # outcome reports 0.
        try:
            if service_id is None:
                entry = next((e for e in wallet.registry if e.supports_claim), None)
                if entry is None:
                    raise StakingPreconditionError(
                        "No registered service supports claiming rewards"
                    )
                service_id = entry.service_id
            entry = self._preflight(wallet, service_id)
            if not entry.supports_claim:
                raise StakingPreconditionError(
                    f"Service {entry.service_id} does not support claiming rewards"
                )
        except StakingPreconditionError as exc:
            return self._reject("claim", exc)

        return await self._submit(
            wallet,
            "claim",
            lambda adapter: adapter.claim_rewards(entry),
            resulting_amount=0,
        )

    async def set_auto_claim_preference(
        self,
        context: StakingContext,
        enabled: bool,
        threshold: str | int | None = None,
        interval: int | None = None,
    ) -> tuple[bool, AutoClaimPreference | str]:
        """Update and persist the auto-claim preference.

        Omitted ``threshold`` / ``interval`` keep their stored values. When the
        config file cannot be written the in-memory change is rolled back.
        """
        try:
            threshold_wei = (
                _parse_amount(threshold, "threshold") if threshold is not None else None
            )
            interval_hours = _parse_interval(interval) if interval is not None else None
        except StakingPreconditionError as exc:
            self.logger.warning(f"auto-claim update rejected: {exc}")
            return False, str(exc)

        async with context.lock.write():
            previous = context.config.snapshot()
            try:
                preference = context.config.set_auto_claim(
                    enabled=enabled,
                    threshold=threshold_wei,
                    interval_hours=interval_hours,
                )
                context.config.persist()
            except (ConfigPersistError, ValueError) as exc:
                context.config.restore(previous)
                self.logger.error(f"auto-claim update failed: {exc}")
                return False, str(exc)

        self.logger.info(
            f"Auto-claim updated: enabled={preference.enabled}"
            f" threshold={preference.threshold} interval={preference.interval_hours}h"
        )
        return True, preference
