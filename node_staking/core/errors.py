WALLET_NOT_CONNECTED = "Wallet not connected"
SIGNER_NOT_INITIALIZED = "Wallet not initialized: no signer available"


class StakingPreconditionError(ValueError):
    """Raised before any network I/O when a call cannot proceed."""


class ConfigPersistError(RuntimeError):
    def __init__(self, path, cause: Exception | None = None):
        self.path = path
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to persist config to {path}{detail}")
