"""
Base asset transports.

How the vault takes custody of and releases the base asset. send_asset
returns False only when nothing was delivered; a release that was
broadcast but not confirmed raises AssetReleasePending and is resolved
later through release_status.
"""

from typing import Any, Protocol

from loguru import logger
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from rebase_vault.utils.exceptions import AssetReleasePending, InsufficientBalance
from rebase_vault.utils.validation import normalize_address


def _require_non_negative(amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")
    return amount


class AssetTransport(Protocol):
    """Custody of the vault's base asset."""

    def receive_asset(self, sender: str, amount: int) -> None:
        ...

    def send_asset(self, to: str, amount: int) -> bool:
        ...

    def release_status(self, tx_hash: str) -> bool | None:
        ...

    def custody_balance(self) -> int:
        ...


class InMemoryAssetTransport:
    """
    Wallet balances and a custody pool held in memory.

    Used for simulations and tests; send_asset fails when custody is short.
    Releases settle immediately, so nothing is ever pending.
    """

    def __init__(self, wallets: dict[str, int] | None = None) -> None:
        self._wallets: dict[str, int] = {
            normalize_address(a): _require_non_negative(v)
            for a, v in (wallets or {}).items()
        }
        self._custody = 0

    def wallet_balance(self, holder: str) -> int:
        return self._wallets.get(normalize_address(holder), 0)

    def fund_wallet(self, holder: str, amount: int) -> None:
        """Credit base asset to a wallet from outside the system."""
        holder = normalize_address(holder)
        amount = _require_non_negative(amount)
        self._wallets[holder] = self._wallets.get(holder, 0) + amount

    def custody_balance(self) -> int:
        return self._custody

    def receive_asset(self, sender: str, amount: int) -> None:
        """
        Move base asset from sender's wallet into custody.

        Raises:
            ValueError: If amount is negative
            InsufficientBalance: If the wallet holds less than amount
        """
        sender = normalize_address(sender)
        amount = _require_non_negative(amount)
        available = self._wallets.get(sender, 0)
        if amount > available:
            raise InsufficientBalance(sender, amount, available)
        self._wallets[sender] = available - amount
        self._custody += amount

    def send_asset(self, to: str, amount: int) -> bool:
        to = normalize_address(to)
        amount = _require_non_negative(amount)
        if amount > self._custody:
            logger.error(
                "Custody too low for asset release",
                extra={
                    "to": to,
                    "custody": str(self._custody),
                    "requested": str(amount),
                },
            )
            return False
        self._custody -= amount
        self._wallets[to] = self._wallets.get(to, 0) + amount
        return True

    def release_status(self, tx_hash: str) -> bool | None:
        """Always None: in-memory releases never go pending."""
        return None


class Web3AssetTransport:
    """
    Native-coin custody in an on-chain vault wallet.

    Deposits arrive as ordinary value transfers to the vault wallet, so
    receive_asset only records them; releases are signed and sent from
    the vault wallet and succeed only with a status-1 receipt.
    """

    def __init__(
        self,
        web3: Web3,
        vault_address: str,
        private_key: str | None = None,
        receipt_timeout: int = 120,
    ) -> None:
        """
        Initialize transport.

        Args:
            web3: Connected Web3 instance
            vault_address: Wallet holding custody
            private_key: Signs releases; None uses the node's unlocked account
            receipt_timeout: Seconds to wait for a receipt
        """
        self.web3 = web3
        self.vault_address = Web3.to_checksum_address(vault_address)
        self._private_key = private_key
        self.receipt_timeout = receipt_timeout

    def custody_balance(self) -> int:
        return int(self.web3.eth.get_balance(self.vault_address))

    def receive_asset(self, sender: str, amount: int) -> None:
        amount = _require_non_negative(amount)
        logger.info(
            "Deposit received on-chain",
            extra={"sender": sender, "amount": str(amount)},
        )

    def send_asset(self, to: str, amount: int) -> bool:
        """
        Send amount from the vault wallet.

        Returns:
            True once confirmed, False if nothing was broadcast or the
            transaction reverted

        Raises:
            AssetReleasePending: If the transaction was broadcast but no
                receipt arrived; it may still confirm
        """
        amount = _require_non_negative(amount)
        try:
            to_checksum = Web3.to_checksum_address(to)
            tx_hash = self._broadcast(to_checksum, amount)
        except (Web3Exception, ValueError, TimeoutError) as e:
            logger.error(
                "Asset release not sent",
                extra={"to": to, "amount": str(amount), "error": str(e)},
            )
            return False

        tx_hash_hex = Web3.to_hex(tx_hash)
        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except (Web3Exception, ValueError, TimeoutError) as e:
            # Broadcast already happened; the outcome is unknown, not failed
            logger.warning(
                "Asset release pending",
                extra={
                    "to": to_checksum,
                    "amount": str(amount),
                    "tx_hash": tx_hash_hex,
                    "error": str(e),
                },
            )
            raise AssetReleasePending(to_checksum, amount, tx_hash_hex) from e

        if receipt["status"] != 1:
            logger.error(
                "Asset release reverted",
                extra={"to": to, "amount": str(amount), "tx_hash": tx_hash_hex},
            )
            return False

        logger.info(
            "Asset released",
            extra={
                "to": to_checksum,
                "amount": str(amount),
                "tx_hash": tx_hash_hex,
                "block_number": receipt["blockNumber"],
            },
        )
        return True

    def release_status(self, tx_hash: str) -> bool | None:
        """
        Check a previously broadcast release.

        Args:
            tx_hash: Transaction hash

        Returns:
            True if confirmed, False if reverted, None while unknown
        """
        try:
            receipt = self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            logger.info(f"Release {tx_hash} not mined yet")
            return None
        except (Web3Exception, ValueError, TimeoutError) as e:
            logger.error(f"Could not check release {tx_hash}: {e}")
            return None

        confirmed = receipt["status"] == 1
        logger.info(
            "Release status checked",
            extra={"tx_hash": tx_hash, "confirmed": confirmed},
        )
        return confirmed

    def _broadcast(self, to: str, amount: int) -> Any:
        tx: dict[str, Any] = {
            "from": self.vault_address,
            "to": to,
            "value": amount,
        }

        if not self._private_key:
            return self.web3.eth.send_transaction(tx)

        tx["nonce"] = self.web3.eth.get_transaction_count(
            self.vault_address, "pending"
        )
        tx["gas"] = self.web3.eth.estimate_gas(tx)
        tx["gasPrice"] = self.web3.eth.gas_price
        tx["chainId"] = self.web3.eth.chain_id
        signed = self.web3.eth.account.sign_transaction(tx, self._private_key)
        return self.web3.eth.send_raw_transaction(signed.raw_transaction)
