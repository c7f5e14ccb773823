"""In-memory stand-in for an RPC endpoint, exposed as the ``fake_chain`` fixture.

Only the surface the staking code touches is implemented: contract views,
``encode_abi``, the gas / nonce / fee reads, raw broadcasts and receipts.
"""

from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_utils import keccak
from web3.exceptions import TransactionNotFound

from node_staking.core.utils.web3 import validate_rpc_url


async def _value(v: Any) -> Any:
    return v


class _Call:
    def __init__(self, chain: "FakeChain", address: str, fn_name: str, args: tuple):
        self._chain = chain
        self._address = address
        self._fn_name = fn_name
        self._args = args

    async def call(self, block_identifier: Any = None) -> Any:
        self._chain.calls.append((self._address, self._fn_name, self._args))
        key = (self._address.lower(), self._fn_name)
        if key not in self._chain.views:
            raise RuntimeError("execution reverted")
        value = self._chain.views[key]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            value = value(*self._args)
        return value


class _Functions:
    def __init__(self, chain: "FakeChain", address: str):
        self._chain = chain
        self._address = address

    def __getattr__(self, fn_name: str):
        return lambda *args: _Call(self._chain, self._address, fn_name, args)


class _Contract:
    def __init__(self, chain: "FakeChain", address: str):
        self._chain = chain
        self.address = address
        self.functions = _Functions(chain, address)

    def encode_abi(self, fn_name: str, args: list[Any]) -> str:
        self._chain.encoded.append((self.address, fn_name, list(args)))
        return "0x" + fn_name.encode().hex()


class _FakeEth:
    def __init__(self, chain: "FakeChain"):
        self._chain = chain

    def contract(self, address: str, abi: list[dict[str, Any]]):
        return _Contract(self._chain, address)

    @property
    def chain_id(self):
        return _value(self._chain.chain_id)

    @property
    def block_number(self):
        return _value(self._chain.block_number)

    @property
    def gas_price(self):
        return _value(self._chain.gas_price)

    @property
    def max_priority_fee(self):
        return _value(self._chain.priority_fee)

    async def estimate_gas(self, transaction: dict, block_identifier: Any = None):
        return self._chain.gas_estimate

    async def get_transaction_count(self, address: str, block_identifier: Any = None):
        return self._chain.nonces.get(address.lower(), 0)

    async def get_block(self, block_identifier: Any):
        if self._chain.base_fee is None:
            return {"number": self._chain.block_number}
        return {
            "number": self._chain.block_number,
            "baseFeePerGas": self._chain.base_fee,
        }

    async def send_raw_transaction(self, raw: bytes) -> bytes:
        if self._chain.send_error is not None:
            raise self._chain.send_error
        self._chain.sent.append(raw)
        return keccak(raw)

    async def get_transaction_receipt(self, tx_hash: str) -> dict:
        receipt = self._chain.receipts.get(tx_hash.lower())
        if receipt is None:
            raise TransactionNotFound(f"Transaction {tx_hash} not found")
        return receipt


class FakeChain:
    def __init__(self) -> None:
        self.chain_id = 31337
        self.block_number = 100
        self.gas_price = 1_000_000_000
        self.priority_fee = 1_000_000_000
        self.base_fee: int | None = 1_000_000_000
        self.gas_estimate = 100_000
        self.nonces: dict[str, int] = {}
        self.views: dict[tuple[str, str], Any] = {}
        self.receipts: dict[str, dict] = {}
        self.send_error: Exception | None = None

        self.calls: list[tuple] = []
        self.encoded: list[tuple] = []
        self.sent: list[bytes] = []
        self.opened = 0

        self.web3 = MagicMock()
        self.web3.eth = _FakeEth(self)
        self.web3.provider.disconnect = AsyncMock()

    def set_view(self, address: str, fn_name: str, value: Any) -> None:
        self.views[(address.lower(), fn_name)] = value

    @property
    def network_calls(self) -> int:
        return len(self.calls) + len(self.sent) + len(self.encoded)

    @asynccontextmanager
    async def factory(self, rpc_url: str, *, timeout: float | None = None):
        validate_rpc_url(rpc_url)
        self.opened += 1
        yield self.web3


@pytest.fixture
def fake_chain() -> FakeChain:
    return FakeChain()
