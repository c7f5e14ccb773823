import math
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger
from web3 import AsyncWeb3
from web3.exceptions import TransactionNotFound

from node_staking.core.constants.base import (
    GAS_BUFFER_MULTIPLIER,
    MAX_BASE_FEE_GROWTH_MULTIPLIER,
    SUGGESTED_GAS_PRICE_MULTIPLIER,
    SUGGESTED_PRIORITY_FEE_MULTIPLIER,
)

SignCallback = Callable[[dict[str, Any]], Awaitable[bytes]]


def _get_transaction_from_address(transaction: dict) -> str:
    if "from" not in transaction:
        raise ValueError("Transaction does not contain from address")
    return AsyncWeb3.to_checksum_address(transaction["from"])


def _normalize_hash(txn_hash: Any) -> str:
    if isinstance(txn_hash, (bytes, bytearray)):
        txn_hash = bytes(txn_hash).hex()
    elif hasattr(txn_hash, "hex") and not isinstance(txn_hash, str):
        txn_hash = txn_hash.hex()
    txn_hash = str(txn_hash)
    if not txn_hash.startswith("0x"):
        txn_hash = f"0x{txn_hash}"
    return txn_hash


async def nonce_transaction(web3: AsyncWeb3, transaction: dict) -> dict:
    transaction = transaction.copy()
    from_address = _get_transaction_from_address(transaction)
    transaction["nonce"] = await web3.eth.get_transaction_count(
        from_address, block_identifier="pending"
    )
    return transaction


async def gas_price_transaction(web3: AsyncWeb3, transaction: dict) -> dict:
    transaction = transaction.copy()

    latest_block = await web3.eth.get_block("latest")
    base_fee = latest_block.get("baseFeePerGas")
    if base_fee is None:
        # pre-EIP-1559 network
        gas_price = await web3.eth.gas_price
        transaction["gasPrice"] = int(gas_price * SUGGESTED_GAS_PRICE_MULTIPLIER)
        return transaction

    priority_fee = await web3.eth.max_priority_fee
    transaction["maxFeePerGas"] = int(
        base_fee * MAX_BASE_FEE_GROWTH_MULTIPLIER
        + priority_fee * SUGGESTED_PRIORITY_FEE_MULTIPLIER
    )
    transaction["maxPriorityFeePerGas"] = int(
        priority_fee * SUGGESTED_PRIORITY_FEE_MULTIPLIER
    )
    return transaction


async def gas_limit_transaction(web3: AsyncWeb3, transaction: dict) -> dict:
    transaction = transaction.copy()

    # prevents RPCs from taking this as a serious limit
    transaction.pop("gas", None)

    try:
        gas_limit = await web3.eth.estimate_gas(transaction, block_identifier="latest")
    except Exception as exc:
        raise RuntimeError(f"Gas estimation failed: {exc}") from exc

    transaction["gas"] = int(math.ceil(gas_limit * GAS_BUFFER_MULTIPLIER))
    return transaction


async def broadcast_transaction(web3: AsyncWeb3, signed_transaction: bytes) -> str:
    tx_hash = await web3.eth.send_raw_transaction(signed_transaction)
    return _normalize_hash(tx_hash)


async def get_transaction_receipt(
    web3: AsyncWeb3, txn_hash: str
) -> dict[str, Any] | None:
    """Return the receipt, or None while the transaction is not yet mined."""
    try:
        receipt = await web3.eth.get_transaction_receipt(_normalize_hash(txn_hash))
    except TransactionNotFound:
        return None
    return dict(receipt) if receipt is not None else None


async def send_transaction(
    web3: AsyncWeb3, transaction: dict, sign_callback: SignCallback | None
) -> str:
    """Fill gas, nonce and fees, sign, broadcast. Returns the transaction hash.

    The hash only means the node accepted the transaction; nothing here waits
    for it to be mined.
    """
    if sign_callback is None:
        raise ValueError("sign_callback must be provided to send transaction")

    logger.info(f"Broadcasting transaction {transaction}...")
    transaction = await gas_limit_transaction(web3, transaction)
    transaction = await nonce_transaction(web3, transaction)
    transaction = await gas_price_transaction(web3, transaction)
    signed_transaction = await sign_callback(transaction)
    txn_hash = await broadcast_transaction(web3, signed_transaction)
    logger.info(f"Transaction broadcasted: {txn_hash}")
    return txn_hash


async def encode_call(
    web3: AsyncWeb3,
    *,
    target: str,
    abi: list[dict[str, Any]],
    fn_name: str,
    args: list[Any],
    from_address: str,
    chain_id: int,
    value: int = 0,
) -> dict[str, Any]:
    try:
        contract = web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(target),
            abi=abi,
        )
        data = contract.encode_abi(fn_name, args)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Failed to encode {fn_name}: {exc}") from exc

    return {
        "chainId": int(chain_id),
        "from": AsyncWeb3.to_checksum_address(from_address),
        "to": AsyncWeb3.to_checksum_address(target),
        "data": data,
        "value": int(value),
    }
