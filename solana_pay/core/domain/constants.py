"""Protocol constants for Solana Pay transfer-request URLs."""

SOLANA_SCHEME = "solana:"

# 1 SOL = 10**9 lamports
NATIVE_SOL_DECIMALS = 9

# Largest value an SPL mint can store in its u8 decimals field
MAX_MINT_DECIMALS = 255

# Max accounts in one transaction, excluding the recipient and the payer
MAX_REFERENCES = 254

ADDRESS_LENGTH = 32

# Query keys
QUERY_AMOUNT = "amount"
QUERY_SPL_TOKEN = "spl-token"
QUERY_REFERENCE = "reference"
QUERY_LABEL = "label"
QUERY_MESSAGE = "message"
QUERY_MEMO = "memo"
