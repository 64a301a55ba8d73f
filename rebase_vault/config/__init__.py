"""Configuration package."""

from rebase_vault.config.settings import LedgerSettings, get_settings, settings


__all__ = ["LedgerSettings", "get_settings", "settings"]
