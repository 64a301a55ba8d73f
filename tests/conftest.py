"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Keep tests independent from any local .env
os.environ.setdefault("REBASE_DATABASE_URL", "sqlite://")
os.environ.setdefault("REBASE_LOG_LEVEL", "DEBUG")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unittest.mock import MagicMock

import pytest

from rebase_vault import (
    InMemoryAssetTransport,
    ManualClock,
    TransferProtocol,
    Vault,
    create_rebase_token,
)
from rebase_vault.utils.validation import normalize_address

from tests.constants import PRECISION, RATE, WALLET_FUNDS


@pytest.fixture
def owner() -> str:
    return normalize_address("0x" + "11" * 20)


@pytest.fixture
def vault_address() -> str:
    return normalize_address("0x" + "22" * 20)


@pytest.fixture
def alice() -> str:
    return normalize_address("0x" + "aa" * 20)


@pytest.fixture
def bob() -> str:
    return normalize_address("0x" + "bb" * 20)


@pytest.fixture
def carol() -> str:
    return normalize_address("0x" + "cc" * 20)


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at a fixed timestamp."""
    return ManualClock(start=1_700_000_000)


@pytest.fixture
def token(owner, clock) -> TransferProtocol:
    """Rebase token at 1e18 precision and 5e10 global rate."""
    return create_rebase_token(
        owner,
        clock,
        precision_factor=PRECISION,
        initial_interest_rate=RATE,
    )


@pytest.fixture
def minter(token, owner, vault_address) -> str:
    """Vault address with the mint-and-burn role granted."""
    token.grant_mint_and_burn_role(owner, vault_address)
    return vault_address


@pytest.fixture
def transport(alice, bob, carol) -> InMemoryAssetTransport:
    return InMemoryAssetTransport(
        {alice: WALLET_FUNDS, bob: WALLET_FUNDS, carol: WALLET_FUNDS}
    )


@pytest.fixture
def vault(token, transport, minter) -> Vault:
    return Vault(token, transport, minter)


@pytest.fixture
def mock_web3():
    """Mock Web3 instance for transport tests."""
    web3 = MagicMock()
    web3.eth.get_balance.return_value = 10**18
    web3.eth.send_transaction.return_value = b"\x01" * 32
    web3.eth.send_raw_transaction.return_value = b"\x02" * 32
    web3.eth.wait_for_transaction_receipt.return_value = {
        "status": 1,
        "blockNumber": 12345,
    }
    web3.eth.get_transaction_count.return_value = 7
    web3.eth.estimate_gas.return_value = 21000
    web3.eth.gas_price = 3 * 10**9
    web3.eth.chain_id = 56
    return web3
