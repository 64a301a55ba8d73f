"""
Logging setup.

Configures loguru sinks from LedgerSettings.
"""

import sys

from loguru import logger

from rebase_vault.config.settings import LedgerSettings, get_settings


def setup_logging(config: LedgerSettings | None = None) -> None:
    """Replace default sinks with stderr and an optional rotating file."""
    config = config or get_settings()

    logger.remove()
    logger.add(sys.stderr, level=config.log_level)

    if config.log_file:
        logger.add(
            config.log_file,
            rotation=config.log_rotation,
            retention=config.log_retention,
            level=config.log_level,
            encoding="utf-8",
        )

    logger.info(
        "Rebase ledger logging configured",
        extra={"level": config.log_level, "file": config.log_file},
    )
