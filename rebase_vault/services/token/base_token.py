"""
Base token ledger.

Plain fungible-token bookkeeping underneath the accrual layer: raw
(principal) balances, total supply and allowances. Knows nothing about
interest. Addresses are expected to be normalised by the caller.
"""

from dataclasses import dataclass, field

from loguru import logger

from rebase_vault.config.constants import MAX_AMOUNT, ZERO_ADDRESS
from rebase_vault.models.events import Transfer
from rebase_vault.services.events import EventLog
from rebase_vault.utils.arithmetic import checked_add
from rebase_vault.utils.clock import Clock
from rebase_vault.utils.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
)


@dataclass
class BaseTokenState:
    """Copyable raw state, used for rollback and persistence."""

    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)
    total_supply: int = 0

    def copy(self) -> "BaseTokenState":
        return BaseTokenState(
            balances=dict(self.balances),
            allowances=dict(self.allowances),
            total_supply=self.total_supply,
        )


class BaseTokenLedger:
    """
    Fungible token primitive.

    Every mutation emits an ERC-20 style Transfer event; mints come from
    and burns go to the zero address.
    """

    def __init__(self, events: EventLog, clock: Clock) -> None:
        """
        Initialize base token.

        Args:
            events: Event log shared with the ledger
            clock: Time source for event timestamps
        """
        self._state = BaseTokenState()
        self._events = events
        self._clock = clock

    # Queries

    def raw_balance(self, holder: str) -> int:
        """Principal only, no accrual applied."""
        return self._state.balances.get(holder, 0)

    def total_supply(self) -> int:
        return self._state.total_supply

    def allowance(self, owner: str, spender: str) -> int:
        return self._state.allowances.get((owner, spender), 0)

    def holders(self) -> list[str]:
        """Addresses that have ever held a balance."""
        return list(self._state.balances)

    def allowances(self) -> dict[tuple[str, str], int]:
        return dict(self._state.allowances)

    # Mutations

    def increase_supply(self, holder: str, amount: int) -> None:
        """
        Mint amount to holder.

        Raises:
            ArithmeticOverflow: If supply or balance leaves uint256
        """
        if amount == 0:
            return
        new_supply = checked_add(
            self._state.total_supply, amount, "total supply"
        )
        new_balance = checked_add(self.raw_balance(holder), amount, "balance")
        self._state.total_supply = new_supply
        self._state.balances[holder] = new_balance
        self._emit_transfer(ZERO_ADDRESS, holder, amount)

    def decrease_supply(self, holder: str, amount: int) -> None:
        """
        Burn amount from holder.

        Raises:
            InsufficientBalance: If holder has less than amount
        """
        balance = self.raw_balance(holder)
        if amount > balance:
            logger.warning(
                "Insufficient balance for burn",
                extra={
                    "holder": holder,
                    "available": str(balance),
                    "requested": str(amount),
                },
            )
            raise InsufficientBalance(holder, amount, balance)
        if amount == 0:
            return
        self._state.balances[holder] = balance - amount
        self._state.total_supply -= amount
        self._emit_transfer(holder, ZERO_ADDRESS, amount)

    def move_raw(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Move principal between holders.

        Returns:
            True on success, False if sender's balance is too low
        """
        balance = self.raw_balance(sender)
        if amount > balance:
            return False

        self._state.balances[sender] = balance - amount
        self._state.balances[recipient] = self.raw_balance(recipient) + amount
        self._emit_transfer(sender, recipient, amount)
        return True

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self._state.allowances[(owner, spender)] = amount
        logger.info(
            "Allowance set",
            extra={"owner": owner, "spender": spender, "amount": str(amount)},
        )

    def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        """
        Consume allowance; the MAX_AMOUNT allowance is never decremented.

        Raises:
            InsufficientAllowance: If approved amount is below amount
        """
        current = self.allowance(owner, spender)
        if current == MAX_AMOUNT:
            return
        if amount > current:
            raise InsufficientAllowance(owner, spender, amount, current)
        self._state.allowances[(owner, spender)] = current - amount

    # State capture

    def capture(self) -> BaseTokenState:
        return self._state.copy()

    def restore(self, state: BaseTokenState) -> None:
        self._state = state.copy()

    def _emit_transfer(self, sender: str, recipient: str, amount: int) -> None:
        self._events.emit(
            Transfer(
                timestamp=self._clock.now(),
                sender=sender,
                recipient=recipient,
                amount=amount,
            )
        )
