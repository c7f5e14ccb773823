ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_TOKEN_SYMBOL = "ETH"
