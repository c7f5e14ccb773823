GAS_BUFFER_MULTIPLIER = 1.1
SUGGESTED_PRIORITY_FEE_MULTIPLIER = 1.5
SUGGESTED_GAS_PRICE_MULTIPLIER = 1.5
MAX_BASE_FEE_GROWTH_MULTIPLIER = 2

# Timeout constants (seconds)
DEFAULT_RPC_TIMEOUT = 10.0  # per read call / HTTP request

# Confirmations before a mined transaction is reported as finalized.
DEFAULT_FINALITY_CONFIRMATIONS = 12

DEFAULT_RPC_ENDPOINT = "http://127.0.0.1:8545"

DEFAULT_AUTO_CLAIM_THRESHOLD_WEI = 0
DEFAULT_AUTO_CLAIM_INTERVAL_HOURS = 24

MAX_UINT256 = 2**256 - 1
