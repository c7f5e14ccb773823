import pytest

from node_staking.core.adapters.models import AutoClaimPreference, TransactionStatus
from node_staking.core.constants.staking_contracts import STAKING_SERVICES
from node_staking.core.errors import StakingPreconditionError
from node_staking.staking.context import WalletContext
from node_staking.staking.tracker import TransactionTracker

TX = "0x" + "ab" * 32
WALLET = WalletContext(
    address=None,
    sign_callback=None,
    rpc_endpoint="http://127.0.0.1:8545",
    registry=STAKING_SERVICES,
    auto_claim=AutoClaimPreference(),
)


@pytest.fixture
def tracker(fake_chain):
    return TransactionTracker(fake_chain.factory, finality_confirmations=3)


@pytest.mark.asyncio
async def test_unknown_receipt_is_submitted(tracker):
    tracked = await tracker.check(WALLET, TX)

    assert tracked.status == TransactionStatus.SUBMITTED
    assert tracked.block_number is None
    assert tracked.confirmations == 0


@pytest.mark.asyncio
async def test_recent_receipt_is_confirmed(tracker, fake_chain):
    fake_chain.block_number = 100
    fake_chain.receipts[TX] = {"status": 1, "blockNumber": 99, "gasUsed": 51_000}

    tracked = await tracker.check(WALLET, TX)

    assert tracked.status == TransactionStatus.CONFIRMED
    assert tracked.block_number == 99
    assert tracked.confirmations == 2
    assert tracked.gas_used == 51_000


@pytest.mark.asyncio
async def test_deep_receipt_is_finalized(tracker, fake_chain):
    fake_chain.block_number = 100
    fake_chain.receipts[TX] = {"status": 1, "blockNumber": 98}

    tracked = await tracker.check(WALLET, TX)

    assert tracked.status == TransactionStatus.FINALIZED
    assert tracked.confirmations == 3
    assert tracked.gas_used is None


@pytest.mark.asyncio
async def test_failed_receipt_is_reverted(tracker, fake_chain):
    fake_chain.receipts[TX] = {"status": 0, "blockNumber": 10, "gasUsed": 30_000}

    tracked = await tracker.check(WALLET, TX)

    assert tracked.status == TransactionStatus.REVERTED
    assert tracked.model_dump(mode="json")["status"] == "REVERTED"


@pytest.mark.asyncio
@pytest.mark.parametrize("tx_hash", ["", "0x1234", "ab" * 32, "0x" + "zz" * 32])
async def test_malformed_hash_rejected_without_io(tracker, fake_chain, tx_hash):
    with pytest.raises(StakingPreconditionError, match="Invalid transaction hash"):
        await tracker.check(WALLET, tx_hash)
    assert fake_chain.opened == 0


def test_finality_must_be_positive(fake_chain):
    with pytest.raises(ValueError):
        TransactionTracker(fake_chain.factory, finality_confirmations=0)
