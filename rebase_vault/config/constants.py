"""
Protocol constants.

Fixed values shared by the ledger, the token facade and the vault.
Anything an operator may want to tune lives in settings instead.
"""

# uint256 range; every stored quantity must fit
MAX_UINT256: int = 2**256 - 1

# "Whole balance" sentinel accepted by burn, transfer and redeem
MAX_AMOUNT: int = MAX_UINT256

# Fixed-point scale for interest rates (rate / PRECISION_FACTOR per second)
DEFAULT_PRECISION_FACTOR: int = 10**18

# 5e10 / 1e18 per second, roughly 0.43% per day
DEFAULT_INTEREST_RATE: int = 5 * 10**10

# Mint source / burn destination in Transfer events
ZERO_ADDRESS: str = "0x0000000000000000000000000000000000000000"

# Placeholder custody address used when none is configured
DEFAULT_VAULT_ADDRESS: str = "0x000000000000000000000000000000000000dEaD"

# Base asset is exchanged 1:1 for ledger units
EXCHANGE_RATE: int = 1
