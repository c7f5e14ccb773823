from typing import Any, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, to_checksum_address

from node_staking.core.utils.transaction import SignCallback

_DEFAULT_EVM_ACCOUNT_PATH_TEMPLATE = "m/44'/60'/0'/0/{index}"

_HD_WALLET_ENABLED = False


def _enable_hd_wallet_features() -> None:
    global _HD_WALLET_ENABLED
    if _HD_WALLET_ENABLED:
        return
    Account.enable_unaudited_hdwallet_features()
    _HD_WALLET_ENABLED = True


def default_evm_account_path(index: int) -> str:
    idx = int(index)
    if idx < 0:
        raise ValueError("account index must be non-negative")
    return _DEFAULT_EVM_ACCOUNT_PATH_TEMPLATE.format(index=idx)


class WalletManager(Protocol):
    def current_address(self) -> str | None: ...

    def signer(self) -> SignCallback | None: ...


class LocalWalletManager:
    """Wallet backed by an in-process key (or nothing, when disconnected)."""

    def __init__(self, account: LocalAccount | None = None):
        self._account = account

    @classmethod
    def from_private_key(cls, private_key: str) -> "LocalWalletManager":
        return cls(Account.from_key(private_key))

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        *,
        account_index: int = 0,
        account_path: str | None = None,
    ) -> "LocalWalletManager":
        """Derive via MetaMask's default path ``m/44'/60'/0'/0/{index}``."""
        _enable_hd_wallet_features()
        path = (
            str(account_path).strip()
            if account_path
            else default_evm_account_path(account_index)
        )
        return cls(Account.from_mnemonic(str(mnemonic).strip(), account_path=path))

    @classmethod
    def from_config(cls, wallet: dict[str, Any]) -> "LocalWalletManager":
        if wallet.get("private_key"):
            return cls.from_private_key(str(wallet["private_key"]).strip())
        if wallet.get("mnemonic"):
            return cls.from_mnemonic(
                str(wallet["mnemonic"]),
                account_index=int(wallet.get("account_index", 0)),
                account_path=wallet.get("account_path"),
            )
        return cls()

    def current_address(self) -> str | None:
        return self._account.address if self._account else None

    def signer(self) -> SignCallback | None:
        if self._account is None:
            return None
        account = self._account

        async def sign_callback(tx: dict) -> bytes:
            signed = account.sign_transaction(tx)
            return signed.raw_transaction

        return sign_callback


class WatchOnlyWallet:
    """An address with no signing capability (read-only views)."""

    def __init__(self, address: str | None):
        self._address = address

    def current_address(self) -> str | None:
        return self._address

    def signer(self) -> SignCallback | None:
        return None


def wallet_from_config(wallet: dict[str, Any]) -> WalletManager:
    """Signing wallet from a key or mnemonic, else watch-only from ``address``."""
    if not wallet.get("private_key") and not wallet.get("mnemonic"):
        address = str(wallet.get("address") or "").strip()
        if address:
            if not is_address(address):
                raise ValueError(f"Invalid wallet address: {address}")
            return WatchOnlyWallet(to_checksum_address(address))
    return LocalWalletManager.from_config(wallet)
