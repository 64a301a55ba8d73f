"""
Accrual ledger.

Holds per-holder interest rates and settlement timestamps on top of the
base token's principal balances, computes effective (accrued) balances
on demand and folds accrued interest into principal when settled.

Accrual is linear, not compounding:

    effective = principal * (P + rate * elapsed) // P

where P is the precision factor and elapsed is seconds since the
holder's last settlement.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from loguru import logger

from rebase_vault.config.constants import MAX_AMOUNT
from rebase_vault.models.events import GlobalRateChanged, InterestSettled
from rebase_vault.models.holder import HolderRecord
from rebase_vault.services.events import EventLog
from rebase_vault.services.token.base_token import BaseTokenLedger, BaseTokenState
from rebase_vault.utils.arithmetic import accrual_multiplier, apply_multiplier
from rebase_vault.utils.clock import Clock
from rebase_vault.utils.exceptions import InsufficientBalance, RateMustNotIncrease


@dataclass
class _Checkpoint:
    rates: dict[str, int]
    last_settlement: dict[str, int]
    global_rate: int
    token: BaseTokenState


class AccrualLedger:
    """
    Interest accrual engine.

    All mutations run under one re-entrant lock and inside transaction(),
    so a failure at any step restores rates, timestamps, principal and
    pending events to their state at the start of the outermost operation.
    The checkpoint is taken once per outermost operation.
    """

    def __init__(
        self,
        token: BaseTokenLedger,
        events: EventLog,
        clock: Clock,
        precision_factor: int,
        global_rate: int,
    ) -> None:
        """
        Initialize accrual ledger.

        Args:
            token: Base token holding principal balances
            events: Event log shared with the token
            clock: Time source
            precision_factor: Fixed-point scale for rates
            global_rate: Initial rate for newly funded holders
        """
        if precision_factor <= 0:
            raise ValueError(
                f"precision_factor must be positive, got {precision_factor}"
            )
        if global_rate < 0:
            raise ValueError(f"global_rate must be non-negative, got {global_rate}")

        self.token = token
        self.events = events
        self.clock = clock
        self.precision_factor = precision_factor

        self._global_rate = global_rate
        self._rates: dict[str, int] = {}
        self._last_settlement: dict[str, int] = {}
        self._lock = threading.RLock()
        self._depth = 0

    # Transactions

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run a block atomically.

        Only the outermost block captures a checkpoint; nested blocks join
        it. An exception escaping any level restores rates, timestamps,
        principal and pending events once it reaches the outermost block.
        """
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            checkpoint = self._capture()
            mark = self.events.begin()
            self._depth = 1
            try:
                yield
            except BaseException as e:
                self._restore(checkpoint)
                self.events.rollback(mark)
                logger.warning(
                    "Ledger operation rolled back",
                    extra={"error": type(e).__name__, "reason": str(e)},
                )
                raise
            finally:
                self._depth = 0
            self.events.commit()

    def _capture(self) -> _Checkpoint:
        return _Checkpoint(
            rates=dict(self._rates),
            last_settlement=dict(self._last_settlement),
            global_rate=self._global_rate,
            token=self.token.capture(),
        )

    def _restore(self, checkpoint: _Checkpoint) -> None:
        self._rates = checkpoint.rates
        self._last_settlement = checkpoint.last_settlement
        self._global_rate = checkpoint.global_rate
        self.token.restore(checkpoint.token)

    # Queries

    @property
    def global_rate(self) -> int:
        with self._lock:
            return self._global_rate

    def principal_of(self, holder: str) -> int:
        """Settled principal, no accrual applied."""
        with self._lock:
            return self.token.raw_balance(holder)

    def rate_of(self, holder: str) -> int:
        with self._lock:
            return self._rates.get(holder, 0)

    def last_settlement_of(self, holder: str) -> int:
        with self._lock:
            return self._last_settlement.get(holder, 0)

    def effective_balance_of(self, holder: str) -> int:
        """
        Principal plus interest accrued since last settlement.

        Returns 0 for an empty holder regardless of elapsed time.

        Raises:
            ArithmeticOverflow: If the accrued value leaves uint256
        """
        with self._lock:
            principal = self.token.raw_balance(holder)
            if principal == 0:
                return 0
            return apply_multiplier(
                principal,
                self._multiplier(holder),
                self.precision_factor,
            )

    def accrued_interest_of(self, holder: str) -> int:
        """Interest not yet folded into principal."""
        with self._lock:
            return self.effective_balance_of(holder) - self.principal_of(holder)

    def holder_record(self, holder: str) -> HolderRecord:
        with self._lock:
            return HolderRecord(
                address=holder,
                principal=self.token.raw_balance(holder),
                rate=self._rates.get(holder, 0),
                last_settlement=self._last_settlement.get(holder, 0),
            )

    def holder_records(self) -> list[HolderRecord]:
        with self._lock:
            known = set(self.token.holders()) | set(self._rates)
            known |= set(self._last_settlement)
            return [self.holder_record(h) for h in sorted(known)]

    def _multiplier(self, holder: str) -> int:
        elapsed = self.clock.now() - self._last_settlement.get(holder, 0)
        return accrual_multiplier(
            self._rates.get(holder, 0),
            max(elapsed, 0),
            self.precision_factor,
        )

    # Mutations

    def settle(self, holder: str) -> int:
        """
        Fold accrued interest into principal and restart the accrual clock.

        The timestamp is updated even when nothing accrued. Effective
        balance is the same before and after.

        Args:
            holder: Holder address

        Returns:
            Interest realised (0 if none)
        """
        with self.transaction():
            delta = self.effective_balance_of(holder) - self.token.raw_balance(holder)
            if delta > 0:
                self.token.increase_supply(holder, delta)
                self.events.emit(
                    InterestSettled(
                        timestamp=self.clock.now(),
                        holder=holder,
                        amount=delta,
                        rate=self._rates.get(holder, 0),
                    )
                )
                logger.debug(
                    "Interest settled",
                    extra={"holder": holder, "amount": str(delta)},
                )
            self._last_settlement[holder] = self.clock.now()
            return delta

    def fund(self, holder: str, amount: int, rate: int) -> None:
        """
        Settle holder, then add amount to principal.

        The rate is assigned only when the holder is empty at funding time,
        so a funded holder's rate never changes. Zero-amount funding settles
        but assigns no rate.

        Args:
            holder: Recipient address
            amount: Units to add
            rate: Rate for a freshly funded holder
        """
        if rate < 0:
            raise ValueError(f"rate must be non-negative, got {rate}")

        with self.transaction():
            self.settle(holder)
            if amount == 0:
                return
            if self.token.raw_balance(holder) == 0:
                self._rates[holder] = rate
            self.token.increase_supply(holder, amount)

            logger.info(
                "Holder funded",
                extra={
                    "holder": holder,
                    "amount": str(amount),
                    "rate": str(self._rates[holder]),
                },
            )

    def withdraw(self, holder: str, amount: int) -> int:
        """
        Settle holder, then remove amount from principal.

        Args:
            holder: Holder address
            amount: Units to remove, or MAX_AMOUNT for the whole balance

        Returns:
            Amount actually withdrawn

        Raises:
            InsufficientBalance: If amount exceeds the settled balance
        """
        with self.transaction():
            self.settle(holder)
            available = self.token.raw_balance(holder)
            if amount == MAX_AMOUNT:
                amount = available
            if amount > available:
                logger.warning(
                    "Insufficient balance for withdrawal",
                    extra={
                        "holder": holder,
                        "available": str(available),
                        "requested": str(amount),
                    },
                )
                raise InsufficientBalance(holder, amount, available)
            self.token.decrease_supply(holder, amount)

            logger.info(
                "Holder withdrawn",
                extra={
                    "holder": holder,
                    "amount": str(amount),
                    "balance_after": str(available - amount),
                },
            )
            return amount

    def inherit_rate(self, recipient: str, sender: str) -> bool:
        """
        Give an empty recipient the sender's rate.

        Returns:
            True if the rate was assigned
        """
        with self.transaction():
            if self.token.raw_balance(recipient) != 0:
                return False
            self._rates[recipient] = self._rates.get(sender, 0)
            logger.debug(
                "Rate inherited",
                extra={
                    "recipient": recipient,
                    "sender": sender,
                    "rate": str(self._rates[recipient]),
                },
            )
            return True

    def set_global_rate(self, new_rate: int) -> None:
        """
        Lower the rate given to newly funded holders.

        Raises:
            RateMustNotIncrease: If new_rate is above the current rate
        """
        if new_rate < 0:
            raise ValueError(f"rate must be non-negative, got {new_rate}")

        with self.transaction():
            previous = self._global_rate
            if new_rate > previous:
                logger.warning(
                    "Rejected global rate increase",
                    extra={"current": str(previous), "requested": str(new_rate)},
                )
                raise RateMustNotIncrease(previous, new_rate)

            self._global_rate = new_rate
            self.events.emit(
                GlobalRateChanged(
                    timestamp=self.clock.now(),
                    previous=previous,
                    new=new_rate,
                )
            )

    # Persistence

    def restore_accrual_state(
        self, records: list[HolderRecord], global_rate: int
    ) -> None:
        """
        Replace rates, timestamps and the global rate wholesale.

        Principal lives in the base token and is restored there; this
        bypasses the non-increase check because it reinstates saved state
        rather than changing policy.
        """
        with self._lock:
            self._rates = {r.address: r.rate for r in records}
            self._last_settlement = {r.address: r.last_settlement for r in records}
            self._global_rate = global_rate
