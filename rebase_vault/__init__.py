"""
Rebase Vault.

Interest-accruing rebase token with a custodial vault that exchanges a
base asset for token units 1:1.

Example:
    >>> from rebase_vault import (
    ...     InMemoryAssetTransport, ManualClock, Vault, create_rebase_token,
    ... )
    >>> owner = "0x" + "11" * 20
    >>> vault_address = "0x" + "22" * 20
    >>> alice = "0x" + "aa" * 20
    >>>
    >>> clock = ManualClock()
    >>> token = create_rebase_token(owner, clock)
    >>> token.grant_mint_and_burn_role(owner, vault_address)
    >>> vault = Vault(token, InMemoryAssetTransport({alice: 10**18}), vault_address)
    >>>
    >>> vault.deposit(alice, 10**18)
    1000000000000000000
    >>> _ = clock.advance(3600)
    >>> token.balance_of(alice) > 10**18
    True
"""

from rebase_vault.config.constants import MAX_AMOUNT
from rebase_vault.models.enums import Role
from rebase_vault.models.holder import HolderRecord, LedgerSnapshot
from rebase_vault.services.access_control import AccessControl
from rebase_vault.services.ledger import (
    AccrualLedger,
    TransferProtocol,
    create_rebase_token,
)
from rebase_vault.services.vault import (
    AssetTransport,
    InMemoryAssetTransport,
    Vault,
    Web3AssetTransport,
)
from rebase_vault.utils.clock import ManualClock, SystemClock
from rebase_vault.utils.exceptions import (
    ArithmeticOverflow,
    AssetReleaseFailed,
    AssetReleasePending,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAddress,
    LedgerError,
    RateMustNotIncrease,
    RedeemTransferFailed,
    Unauthorized,
)


__version__ = "1.0.0"
__all__ = [
    # Core
    "AccrualLedger",
    "TransferProtocol",
    "Vault",
    "create_rebase_token",
    # Collaborators
    "AccessControl",
    "AssetTransport",
    "InMemoryAssetTransport",
    "Web3AssetTransport",
    "ManualClock",
    "SystemClock",
    # Models
    "HolderRecord",
    "LedgerSnapshot",
    "Role",
    # Constants
    "MAX_AMOUNT",
    # Errors
    "ArithmeticOverflow",
    "AssetReleaseFailed",
    "AssetReleasePending",
    "InsufficientAllowance",
    "InsufficientBalance",
    "InvalidAddress",
    "LedgerError",
    "RateMustNotIncrease",
    "RedeemTransferFailed",
    "Unauthorized",
]
