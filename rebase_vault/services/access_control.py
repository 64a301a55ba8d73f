"""
Access control.

Ownership plus an enumerated role set. Privileged operations call
require_owner / require_role before touching any state.
"""

import threading

from loguru import logger

from rebase_vault.models.enums import Role
from rebase_vault.utils.exceptions import Unauthorized
from rebase_vault.utils.validation import normalize_address


class AccessControl:
    """Owner-administered role membership."""

    def __init__(self, owner: str) -> None:
        """
        Initialize access control.

        Args:
            owner: Initial owner address
        """
        self._owner = normalize_address(owner, allow_zero=False)
        self._members: dict[Role, set[str]] = {role: set() for role in Role}
        self._lock = threading.RLock()

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, caller: str) -> bool:
        return normalize_address(caller) == self._owner

    def has_role(self, caller: str, role: Role) -> bool:
        with self._lock:
            return normalize_address(caller) in self._members[Role(role)]

    def members(self, role: Role) -> list[str]:
        with self._lock:
            return sorted(self._members[Role(role)])

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            logger.warning(
                "Owner-only call rejected",
                extra={"caller": caller},
            )
            raise Unauthorized(caller, "owner")

    def require_role(self, caller: str, role: Role) -> None:
        if not self.has_role(caller, role):
            logger.warning(
                "Role check failed",
                extra={"caller": caller, "role": str(role)},
            )
            raise Unauthorized(caller, f"role {role}")

    def grant_role(self, caller: str, role: Role, account: str) -> None:
        """
        Grant role to account.

        Raises:
            Unauthorized: If caller is not the owner
            InvalidAddress: If account is malformed or the zero address
        """
        self.require_owner(caller)
        account = normalize_address(account, allow_zero=False)
        with self._lock:
            self._members[Role(role)].add(account)
        logger.info(
            "Role granted",
            extra={"role": str(role), "account": account},
        )

    def revoke_role(self, caller: str, role: Role, account: str) -> None:
        self.require_owner(caller)
        account = normalize_address(account)
        with self._lock:
            self._members[Role(role)].discard(account)
        logger.info(
            "Role revoked",
            extra={"role": str(role), "account": account},
        )

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.require_owner(caller)
        new_owner = normalize_address(new_owner, allow_zero=False)
        with self._lock:
            previous, self._owner = self._owner, new_owner
        logger.info(
            "Ownership transferred",
            extra={"previous": previous, "new": new_owner},
        )

    # Persistence

    def export_members(self) -> dict[str, list[str]]:
        with self._lock:
            return {str(role): sorted(m) for role, m in self._members.items() if m}

    def restore(self, owner: str, members: dict[str, list[str]]) -> None:
        restored_owner = normalize_address(owner, allow_zero=False)
        restored: dict[Role, set[str]] = {role: set() for role in Role}
        for role_name, accounts in members.items():
            restored[Role(role_name)] = {normalize_address(a) for a in accounts}

        with self._lock:
            self._owner = restored_owner
            self._members = restored
