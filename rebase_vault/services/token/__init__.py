"""Base fungible-token bookkeeping."""

from rebase_vault.services.token.base_token import BaseTokenLedger


__all__ = ["BaseTokenLedger"]
