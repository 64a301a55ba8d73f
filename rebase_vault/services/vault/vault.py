"""
Vault.

Custodial bridge between the base asset and the rebase token at a
fixed 1:1 rate. Deposits mint at the current global rate; redemptions
burn and then release the asset. The vault needs the MINT_AND_BURN role
on the token and never touches rates or the ledger directly.

Releases run outside the ledger lock so a slow transport never blocks
other holders. A release that fails is compensated by minting the burned
amount back at the holder's previous rate; a release whose outcome is
unknown keeps the burn and is tracked until resolve_pending_release.
"""

import threading
from dataclasses import dataclass

from loguru import logger

from rebase_vault.config.constants import EXCHANGE_RATE, MAX_AMOUNT
from rebase_vault.config.settings import LedgerSettings, get_settings
from rebase_vault.models.events import Deposited, Redeemed
from rebase_vault.services.ledger.accrual_ledger import AccrualLedger
from rebase_vault.services.ledger.transfer_protocol import (
    TransferProtocol,
    validate_amount,
)
from rebase_vault.services.vault.asset_transport import AssetTransport
from rebase_vault.utils.exceptions import AssetReleaseFailed, AssetReleasePending
from rebase_vault.utils.validation import normalize_address


@dataclass(frozen=True)
class PendingRelease:
    """Burn whose asset release has not been confirmed."""

    holder: str
    burned: int
    released: int
    rate: int


class Vault:
    """Deposit and redeem the base asset against rebase token units."""

    def __init__(
        self,
        token: TransferProtocol,
        transport: AssetTransport,
        address: str | None = None,
        config: LedgerSettings | None = None,
    ) -> None:
        """
        Initialize vault.

        Args:
            token: Rebase token the vault mints and burns
            transport: Custody of the base asset
            address: Vault identity; must hold MINT_AND_BURN on token.
                Defaults to config.vault_address
            config: Settings, process settings by default
        """
        self.token = token
        self.transport = transport
        config = config or get_settings()
        self.address = normalize_address(
            address or config.vault_address, allow_zero=False
        )
        self._pending: dict[str, PendingRelease] = {}
        self._pending_lock = threading.Lock()

    @property
    def _ledger(self) -> AccrualLedger:
        return self.token.ledger

    def custody_balance(self) -> int:
        return self.transport.custody_balance()

    @property
    def pending_releases(self) -> dict[str, PendingRelease]:
        """Unresolved releases keyed by transaction hash."""
        with self._pending_lock:
            return dict(self._pending)

    def deposit(self, caller: str, amount: int) -> int:
        """
        Take amount of base asset from caller and mint 1:1.

        The caller receives the current global rate if they hold nothing.

        Args:
            caller: Depositor
            amount: Base asset units

        Returns:
            Ledger units minted
        """
        caller = normalize_address(caller, allow_zero=False)
        amount = validate_amount(amount)
        minted = amount * EXCHANGE_RATE

        with self._ledger.transaction():
            rate = self.token.get_interest_rate()
            self.token.mint(self.address, caller, minted, rate)
            self.transport.receive_asset(caller, amount)
            self._ledger.events.emit(
                Deposited(
                    timestamp=self._ledger.clock.now(),
                    holder=caller,
                    amount=amount,
                )
            )

        logger.info(
            "Deposit completed",
            extra={"holder": caller, "amount": str(amount), "rate": str(rate)},
        )
        return minted

    def redeem(self, caller: str, amount: int) -> int:
        """
        Burn caller's units and release the base asset 1:1.

        Burn and release succeed together or not at all: if the release
        fails the burned amount is minted back at the caller's old rate.

        Args:
            caller: Redeemer
            amount: Units to redeem, or MAX_AMOUNT for the full balance

        Returns:
            Base asset units released

        Raises:
            InsufficientBalance: If amount exceeds caller's balance
            AssetReleaseFailed: If the transport could not deliver
            AssetReleasePending: If delivery was sent but not confirmed;
                the burn stays until resolve_pending_release
        """
        caller = normalize_address(caller, allow_zero=False)
        amount = validate_amount(amount)

        with self._ledger.transaction():
            if amount == MAX_AMOUNT:
                amount = self.token.balance_of(caller)
            rate = self.token.get_user_interest_rate(caller)
            burned = self.token.burn(self.address, caller, amount)
        released = burned // EXCHANGE_RATE

        try:
            delivered = self.transport.send_asset(caller, released)
        except AssetReleasePending as e:
            with self._pending_lock:
                self._pending[e.tx_hash] = PendingRelease(
                    holder=caller, burned=burned, released=released, rate=rate
                )
            logger.warning(
                "Redeem pending: release not confirmed",
                extra={"holder": caller, "amount": str(released), "tx_hash": e.tx_hash},
            )
            raise

        if not delivered:
            self._mint_back(caller, burned, rate)
            logger.error(
                "Redeem aborted: asset release failed",
                extra={"holder": caller, "amount": str(released)},
            )
            raise AssetReleaseFailed(caller, released)

        self._record_redeemed(caller, released)
        logger.info(
            "Redeem completed",
            extra={"holder": caller, "amount": str(released)},
        )
        return released

    def resolve_pending_release(self, tx_hash: str) -> bool | None:
        """
        Settle a pending redeem once its transaction outcome is known.

        Confirmed releases record the redemption; reverted ones mint the
        burned amount back.

        Args:
            tx_hash: Hash carried by AssetReleasePending

        Returns:
            True if confirmed, False if reverted and compensated,
            None if still pending

        Raises:
            KeyError: If tx_hash is not a pending release
        """
        with self._pending_lock:
            pending = self._pending[tx_hash]

        status = self.transport.release_status(tx_hash)
        if status is None:
            return None

        with self._pending_lock:
            if self._pending.pop(tx_hash, None) is None:
                # resolved concurrently
                return status

        if status:
            self._record_redeemed(pending.holder, pending.released)
            logger.info(
                "Pending redeem confirmed",
                extra={"holder": pending.holder, "tx_hash": tx_hash},
            )
        else:
            self._mint_back(pending.holder, pending.burned, pending.rate)
            logger.error(
                "Pending redeem reverted, burn compensated",
                extra={"holder": pending.holder, "tx_hash": tx_hash},
            )
        return status

    def receive_rewards(self, sender: str, amount: int) -> None:
        """
        Add base asset to custody without minting.

        Backs interest that holders redeem on top of their deposits.

        Raises:
            ValueError: If amount is negative
        """
        sender = normalize_address(sender)
        amount = validate_amount(amount)
        self.transport.receive_asset(sender, amount)
        logger.info(
            "Rewards received",
            extra={
                "sender": sender,
                "amount": str(amount),
                "custody": str(self.transport.custody_balance()),
            },
        )

    def _mint_back(self, holder: str, burned: int, rate: int) -> None:
        # Holder's rate is kept if they still hold units, restored otherwise
        with self._ledger.transaction():
            self.token.mint(self.address, holder, burned, rate)

    def _record_redeemed(self, holder: str, released: int) -> None:
        with self._ledger.transaction():
            self._ledger.events.emit(
                Redeemed(
                    timestamp=self._ledger.clock.now(),
                    holder=holder,
                    amount=released,
                )
            )
