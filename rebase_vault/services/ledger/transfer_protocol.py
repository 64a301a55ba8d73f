"""
Transfer protocol.

Token-facing facade over the accrual ledger. Every value-moving action
(mint, burn, transfer, transfer-from) settles each account it touches
before principal changes, and first-time recipients of a transfer
inherit the sender's rate.
"""

from loguru import logger

from rebase_vault.config.constants import MAX_AMOUNT
from rebase_vault.models.enums import Role
from rebase_vault.models.holder import AllowanceRecord, HolderRecord, LedgerSnapshot
from rebase_vault.services.access_control import AccessControl
from rebase_vault.services.ledger.accrual_ledger import AccrualLedger
from rebase_vault.services.token.base_token import BaseTokenState
from rebase_vault.utils.arithmetic import ensure_uint256
from rebase_vault.utils.exceptions import InsufficientBalance
from rebase_vault.utils.validation import normalize_address


def validate_amount(amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")
    return ensure_uint256(amount, "amount")


class TransferProtocol:
    """
    Rebase token.

    Balances reported by balance_of include interest accrued since each
    holder's last settlement; total_supply counts settled principal only.
    """

    def __init__(self, ledger: AccrualLedger, access: AccessControl) -> None:
        """
        Initialize transfer protocol.

        Args:
            ledger: Accrual ledger shared with the vault
            access: Ownership and role registry
        """
        self.ledger = ledger
        self.access = access

    # Queries

    def balance_of(self, holder: str) -> int:
        """Effective balance: principal plus accrued interest."""
        return self.ledger.effective_balance_of(normalize_address(holder))

    def principal_balance_of(self, holder: str) -> int:
        return self.ledger.principal_of(normalize_address(holder))

    def total_supply(self) -> int:
        return self.ledger.token.total_supply()

    def get_interest_rate(self) -> int:
        """Current global rate for new depositors."""
        return self.ledger.global_rate

    def get_user_interest_rate(self, holder: str) -> int:
        return self.ledger.rate_of(normalize_address(holder))

    def holder_record(self, holder: str) -> HolderRecord:
        return self.ledger.holder_record(normalize_address(holder))

    def allowance(self, owner: str, spender: str) -> int:
        return self.ledger.token.allowance(
            normalize_address(owner), normalize_address(spender)
        )

    # Owner operations

    def set_interest_rate(self, caller: str, new_rate: int) -> None:
        """
        Lower the global rate.

        Raises:
            Unauthorized: If caller is not the owner
            RateMustNotIncrease: If new_rate is above the current rate
        """
        self.access.require_owner(caller)
        self.ledger.set_global_rate(validate_amount(new_rate))

    def grant_mint_and_burn_role(self, caller: str, account: str) -> None:
        self.access.grant_role(caller, Role.MINT_AND_BURN, account)

    # Value movement

    def mint(self, caller: str, to: str, amount: int, rate: int) -> None:
        """
        Mint amount to holder at rate.

        The rate only takes effect if the holder is currently empty.

        Args:
            caller: Must hold MINT_AND_BURN
            to: Recipient
            amount: Units to mint
            rate: Rate for a freshly funded recipient
        """
        self.access.require_role(caller, Role.MINT_AND_BURN)
        to = normalize_address(to, allow_zero=False)
        amount = validate_amount(amount)
        rate = validate_amount(rate)

        with self.ledger.transaction():
            self.ledger.fund(to, amount, rate)

    def burn(self, caller: str, holder: str, amount: int) -> int:
        """
        Burn amount from holder.

        Args:
            caller: Must hold MINT_AND_BURN
            holder: Account to burn from
            amount: Units to burn, or MAX_AMOUNT for the effective balance

        Returns:
            Amount burned
        """
        self.access.require_role(caller, Role.MINT_AND_BURN)
        holder = normalize_address(holder)
        amount = validate_amount(amount)

        with self.ledger.transaction():
            if amount == MAX_AMOUNT:
                amount = self.ledger.effective_balance_of(holder)
            self.ledger.settle(holder)
            return self.ledger.withdraw(holder, amount)

    def move_value(self, sender: str, recipient: str, amount: int) -> int:
        """
        Settle both ends, apply rate inheritance, then move principal.

        MAX_AMOUNT is resolved against the sender's effective balance
        before settlement; settlement does not change that value.

        Returns:
            Amount moved

        Raises:
            InsufficientBalance: If amount exceeds sender's settled principal
        """
        sender = normalize_address(sender)
        recipient = normalize_address(recipient, allow_zero=False)
        amount = validate_amount(amount)

        with self.ledger.transaction():
            if amount == MAX_AMOUNT:
                amount = self.ledger.effective_balance_of(sender)

            self.ledger.settle(sender)
            self.ledger.settle(recipient)
            self.ledger.inherit_rate(recipient, sender)

            if not self.ledger.token.move_raw(sender, recipient, amount):
                available = self.ledger.principal_of(sender)
                logger.warning(
                    "Insufficient balance for transfer",
                    extra={
                        "sender": sender,
                        "recipient": recipient,
                        "available": str(available),
                        "requested": str(amount),
                    },
                )
                raise InsufficientBalance(sender, amount, available)

            logger.info(
                "Value moved",
                extra={
                    "sender": sender,
                    "recipient": recipient,
                    "amount": str(amount),
                },
            )
            return amount

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        self.move_value(caller, to, amount)
        return True

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        self.ledger.token.approve(
            normalize_address(caller),
            normalize_address(spender, allow_zero=False),
            validate_amount(amount),
        )
        return True

    def transfer_from(
        self, caller: str, sender: str, to: str, amount: int
    ) -> bool:
        """
        Move sender's value on their behalf, consuming caller's allowance.

        Raises:
            InsufficientAllowance: If caller was approved for less
            InsufficientBalance: If sender's balance is too low
        """
        caller = normalize_address(caller)
        sender = normalize_address(sender)
        amount = validate_amount(amount)

        with self.ledger.transaction():
            if amount == MAX_AMOUNT:
                amount = self.ledger.effective_balance_of(sender)
            self.ledger.token.spend_allowance(sender, caller, amount)
            self.move_value(sender, to, amount)
        return True

    # Persistence

    def export_state(self) -> LedgerSnapshot:
        """Capture ledger, allowances and roles as a snapshot."""
        with self.ledger.transaction():
            return LedgerSnapshot(
                holders=self.ledger.holder_records(),
                allowances=[
                    AllowanceRecord(owner=o, spender=s, amount=a)
                    for (o, s), a in sorted(self.ledger.token.allowances().items())
                ],
                global_rate=self.ledger.global_rate,
                precision_factor=self.ledger.precision_factor,
                owner=self.access.owner,
                role_members=self.access.export_members(),
                taken_at=self.ledger.clock.now(),
            )

    def restore_state(self, snapshot: LedgerSnapshot) -> None:
        """
        Replace all state with a snapshot.

        Raises:
            ValueError: If the snapshot was taken at a different precision
        """
        if snapshot.precision_factor != self.ledger.precision_factor:
            raise ValueError(
                "snapshot precision factor "
                f"{snapshot.precision_factor} != {self.ledger.precision_factor}"
            )

        balances = {h.address: h.principal for h in snapshot.holders if h.principal}
        token_state = BaseTokenState(
            balances=balances,
            allowances={(a.owner, a.spender): a.amount for a in snapshot.allowances},
            total_supply=sum(balances.values()),
        )

        with self.ledger.transaction():
            self.ledger.token.restore(token_state)
            self.ledger.restore_accrual_state(snapshot.holders, snapshot.global_rate)
            self.access.restore(snapshot.owner, snapshot.role_members)

        logger.info(
            "Ledger state restored",
            extra={
                "holders": len(snapshot.holders),
                "taken_at": snapshot.taken_at,
            },
        )
