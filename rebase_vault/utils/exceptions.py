"""
Ledger exceptions.

Every failure of a ledger, token or vault operation is raised as a
LedgerError subclass. Operations are transactional, so by the time a
caller sees one of these the state has already been restored.
"""


class LedgerError(Exception):
    """Base class for all rebase ledger failures."""

    code = "ledger_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class InsufficientBalance(LedgerError):
    """Withdraw, burn or transfer amount exceeds the available balance."""

    code = "insufficient_balance"

    def __init__(self, holder: str, requested: int, available: int) -> None:
        self.holder = holder
        self.requested = requested
        self.available = available
        super().__init__(
            f"{holder} has {available}, {requested} requested"
        )


class InsufficientAllowance(LedgerError):
    """Spender tried to move more than it was approved for."""

    code = "insufficient_allowance"

    def __init__(
        self, owner: str, spender: str, requested: int, available: int
    ) -> None:
        self.owner = owner
        self.spender = spender
        self.requested = requested
        self.available = available
        super().__init__(
            f"{spender} may spend {available} of {owner}, {requested} requested"
        )


class RateMustNotIncrease(LedgerError):
    """Attempted to raise the global interest rate."""

    code = "rate_must_not_increase"

    def __init__(self, current: int, requested: int) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"global rate can only decrease: {current} -> {requested}"
        )


class Unauthorized(LedgerError):
    """Caller lacks the role or ownership the operation requires."""

    code = "unauthorized"

    def __init__(self, caller: str, required: str) -> None:
        self.caller = caller
        self.required = required
        super().__init__(f"{caller} is not authorized: requires {required}")


class AssetReleaseFailed(LedgerError):
    """Vault could not deliver the base asset on redeem."""

    code = "asset_release_failed"

    def __init__(self, holder: str, amount: int) -> None:
        self.holder = holder
        self.amount = amount
        super().__init__(f"failed to release {amount} to {holder}")


# Name used by the vault contract this design follows
RedeemTransferFailed = AssetReleaseFailed


class AssetReleasePending(LedgerError):
    """Release was broadcast but its outcome is not known yet.

    Not a failure: the transfer may still confirm. The burn stays in
    place until the release is resolved.
    """

    code = "asset_release_pending"

    def __init__(self, holder: str, amount: int, tx_hash: str) -> None:
        self.holder = holder
        self.amount = amount
        self.tx_hash = tx_hash
        super().__init__(
            f"release of {amount} to {holder} pending in {tx_hash}"
        )


class ArithmeticOverflow(LedgerError):
    """A computed quantity left the uint256 range."""

    code = "arithmetic_overflow"

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"arithmetic overflow in {operation}")


class InvalidAddress(LedgerError, ValueError):
    """Holder identity is malformed or not allowed here."""

    code = "invalid_address"

    def __init__(self, address: object, reason: str) -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"invalid address {address!r}: {reason}")


# Raised for caller mistakes; state was never touched
CALLER_ERRORS = (
    InsufficientBalance,
    InsufficientAllowance,
    RateMustNotIncrease,
    Unauthorized,
    InvalidAddress,
)


def is_ledger_error(exc: BaseException) -> bool:
    """
    Check if exception belongs to the ledger error hierarchy.

    Args:
        exc: Exception to check

    Returns:
        True if exception is a LedgerError
    """
    return isinstance(exc, LedgerError)


def is_caller_error(exc: BaseException) -> bool:
    """
    Check if exception was caused by invalid caller input.

    Args:
        exc: Exception to check

    Returns:
        True if the caller can fix the request and retry
    """
    return isinstance(exc, CALLER_ERRORS)
