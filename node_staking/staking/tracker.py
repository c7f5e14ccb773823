from __future__ import annotations

import re

from loguru import logger

from node_staking.core.adapters.models import TrackedTransaction, TransactionStatus
from node_staking.core.constants.base import DEFAULT_FINALITY_CONFIRMATIONS
from node_staking.core.errors import StakingPreconditionError
from node_staking.core.utils.transaction import get_transaction_receipt
from node_staking.core.utils.web3 import web3_from_rpc_url
from node_staking.staking.context import WalletContext

_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


class TransactionTracker:
    """Reports where a submitted transaction is: submitted, confirmed, finalized
    or reverted.

    Stateless: each ``check`` re-reads the receipt and the chain head.
    """

    def __init__(
        self,
        web3_factory=web3_from_rpc_url,
        *,
        finality_confirmations: int = DEFAULT_FINALITY_CONFIRMATIONS,
    ):
        if finality_confirmations < 1:
            raise ValueError("finality_confirmations must be >= 1")
        self.web3_factory = web3_factory
        self.finality_confirmations = finality_confirmations

    async def check(self, wallet: WalletContext, tx_hash: str) -> TrackedTransaction:
        tx_hash = str(tx_hash).strip()
        if not _TX_HASH_RE.match(tx_hash):
            raise StakingPreconditionError(f"Invalid transaction hash: {tx_hash!r}")
        async with self.web3_factory(
            wallet.rpc_endpoint, timeout=wallet.request_timeout
        ) as web3:
            receipt = await get_transaction_receipt(web3, tx_hash)
            if receipt is None:
                return TrackedTransaction(
                    transaction_id=tx_hash, status=TransactionStatus.SUBMITTED
                )
            head = int(await web3.eth.block_number)

        block_number = int(receipt["blockNumber"])
        gas_used = receipt.get("gasUsed")
        confirmations = max(0, head - block_number + 1)

        if int(receipt.get("status", 1)) == 0:
            status = TransactionStatus.REVERTED
            logger.warning(f"Transaction {tx_hash} reverted in block {block_number}")
        elif confirmations >= self.finality_confirmations:
            status = TransactionStatus.FINALIZED
        else:
            status = TransactionStatus.CONFIRMED

        return TrackedTransaction(
            transaction_id=tx_hash,
            status=status,
            block_number=block_number,
            confirmations=confirmations,
            gas_used=int(gas_used) if gas_used is not None else None,
        )
