"""
Tests for the transfer protocol (token facade).

Tests cover:
- Role-guarded mint and burn
- Owner-guarded rate changes and role grants
- Transfers settling both ends and rate inheritance
- transfer_from allowances
- Atomicity of failed transfers
"""

import pytest

from rebase_vault.config.constants import MAX_AMOUNT, ZERO_ADDRESS
from rebase_vault.models.events import Transfer
from rebase_vault.utils.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAddress,
    RateMustNotIncrease,
    Unauthorized,
)
from tests.constants import RATE


class TestAuthorization:
    """Test role and ownership checks."""

    def test_mint_requires_role(self, token, alice):
        with pytest.raises(Unauthorized):
            token.mint(alice, alice, 100, RATE)
        assert token.balance_of(alice) == 0

    def test_burn_requires_role(self, token, fund, alice):
        fund(alice, 100)
        with pytest.raises(Unauthorized):
            token.burn(alice, alice, 100)
        assert token.balance_of(alice) == 100

    def test_set_interest_rate_requires_owner(self, token, alice):
        with pytest.raises(Unauthorized):
            token.set_interest_rate(alice, RATE // 2)
        assert token.get_interest_rate() == RATE

    def test_set_interest_rate_increase_rejected(self, token, owner):
        with pytest.raises(RateMustNotIncrease):
            token.set_interest_rate(owner, RATE * 2)
        assert token.get_interest_rate() == RATE

    def test_owner_lowers_rate(self, token, owner):
        token.set_interest_rate(owner, RATE // 2)
        assert token.get_interest_rate() == RATE // 2

    def test_grant_role_requires_owner(self, token, alice, bob):
        with pytest.raises(Unauthorized):
            token.grant_mint_and_burn_role(alice, bob)

    def test_granted_account_can_mint(self, token, owner, alice):
        token.grant_mint_and_burn_role(owner, alice)
        token.mint(alice, alice, 100, RATE)
        assert token.balance_of(alice) == 100


class TestMintBurn:
    """Test mint and burn."""

    def test_mint_sets_user_rate(self, token, minter, alice):
        token.mint(minter, alice, 100, RATE // 3)
        assert token.get_user_interest_rate(alice) == RATE // 3

    def test_mint_to_zero_address_rejected(self, token, minter):
        with pytest.raises(InvalidAddress):
            token.mint(minter, ZERO_ADDRESS, 100, RATE)

    def test_mint_negative_amount_rejected(self, token, minter, alice):
        with pytest.raises(ValueError):
            token.mint(minter, alice, -1, RATE)

    def test_mint_accepts_any_address_case(self, token, minter, alice):
        token.mint(minter, alice.lower(), 100, RATE)
        assert token.balance_of(alice.upper().replace("0X", "0x")) == 100

    def test_burn_max_burns_accrued_balance(self, token, fund, minter, alice, clock):
        fund(alice, 10**18)
        clock.advance(3600)
        expected = token.balance_of(alice)

        burned = token.burn(minter, alice, MAX_AMOUNT)

        assert burned == expected
        assert token.balance_of(alice) == 0
        assert token.total_supply() == 0

    def test_burn_too_much_rolls_back(self, token, fund, minter, alice, clock):
        fund(alice, 10**18)
        clock.advance(3600)
        record_before = token.holder_record(alice)

        with pytest.raises(InsufficientBalance):
            token.burn(minter, alice, 2 * 10**18)

        assert token.holder_record(alice) == record_before

    def test_total_supply_counts_principal_only(self, token, fund, alice, clock):
        fund(alice, 10**18)
        clock.advance(3600)

        assert token.total_supply() == 10**18
        assert token.balance_of(alice) > token.total_supply()


class TestTransfer:
    """Test transfers and rate inheritance."""

    def test_transfer_moves_value(self, token, fund, alice, bob):
        fund(alice, 1000)

        assert token.transfer(alice, bob, 400) is True

        assert token.balance_of(alice) == 600
        assert token.balance_of(bob) == 400

    def test_transfer_settles_both_ends(self, token, fund, owner, alice, bob, clock):
        fund(alice, 10**18)
        fund(bob, 10**18)
        clock.advance(3600)
        alice_before = token.balance_of(alice)
        bob_before = token.balance_of(bob)

        token.transfer(alice, bob, 10**17)

        assert token.principal_balance_of(alice) == alice_before - 10**17
        assert token.principal_balance_of(bob) == bob_before + 10**17
        assert token.holder_record(alice).last_settlement == clock.now()
        assert token.holder_record(bob).last_settlement == clock.now()

    def test_empty_recipient_inherits_sender_rate(self, token, fund, owner, alice, bob):
        fund(alice, 1000)
        token.set_interest_rate(owner, RATE // 2)

        token.transfer(alice, bob, 100)

        assert token.get_user_interest_rate(bob) == RATE

    def test_funded_recipient_keeps_rate(self, token, fund, owner, alice, bob):
        fund(alice, 1000)
        token.set_interest_rate(owner, RATE // 2)
        fund(bob, 1000)

        token.transfer(alice, bob, 100)

        assert token.get_user_interest_rate(bob) == RATE // 2

    def test_inherits_lower_rate_too(self, token, fund, owner, alice, bob, carol):
        """Inheritance is not a best-rate rule: a worse sender rate passes on."""
        token.set_interest_rate(owner, RATE // 10)
        fund(carol, 1000)

        token.transfer(carol, bob, 100)

        assert token.get_user_interest_rate(bob) == RATE // 10

    def test_transfer_max(self, token, fund, alice, bob, clock):
        fund(alice, 10**18)
        clock.advance(3600)
        expected = token.balance_of(alice)

        token.transfer(alice, bob, MAX_AMOUNT)

        assert token.balance_of(alice) == 0
        assert token.balance_of(bob) == expected

    def test_transfer_accrued_interest(self, token, fund, alice, bob, clock):
        """Interest accrued but not yet settled is transferable."""
        fund(alice, 10**18)
        clock.advance(3600)

        token.transfer(alice, bob, 10**18 + 10**14)

        assert token.balance_of(bob) == 10**18 + 10**14

    def test_insufficient_balance_rolls_back(self, token, fund, alice, bob, clock):
        fund(alice, 1000)
        clock.advance(3600)
        alice_before = token.holder_record(alice)
        bob_before = token.holder_record(bob)

        with pytest.raises(InsufficientBalance):
            token.transfer(alice, bob, 10**6)

        assert token.holder_record(alice) == alice_before
        assert token.holder_record(bob) == bob_before
        assert token.get_user_interest_rate(bob) == 0

    def test_transfer_to_self(self, token, fund, alice, clock):
        fund(alice, 10**18)
        clock.advance(3600)
        before = token.balance_of(alice)

        token.transfer(alice, alice, 10**17)

        assert token.balance_of(alice) == before
        assert token.get_user_interest_rate(alice) == RATE

    def test_transfer_emits_event(self, token, fund, alice, bob):
        fund(alice, 1000)

        token.transfer(alice, bob, 250)

        transfers = token.ledger.events.of_type(Transfer)
        assert transfers[-1].sender == alice
        assert transfers[-1].recipient == bob
        assert transfers[-1].amount == 250

    def test_failed_transfer_emits_nothing(self, token, fund, alice, bob):
        fund(alice, 1000)
        count_before = len(token.ledger.events.events)

        with pytest.raises(InsufficientBalance):
            token.transfer(alice, bob, 5000)

        assert len(token.ledger.events.events) == count_before


class TestTransferFrom:
    """Test approvals and transfer_from."""

    def test_transfer_from_spends_allowance(self, token, fund, alice, bob, carol):
        fund(alice, 1000)
        token.approve(alice, bob, 600)

        token.transfer_from(bob, alice, carol, 400)

        assert token.balance_of(carol) == 400
        assert token.allowance(alice, bob) == 200

    def test_transfer_from_over_allowance(self, token, fund, alice, bob, carol):
        fund(alice, 1000)
        token.approve(alice, bob, 100)

        with pytest.raises(InsufficientAllowance):
            token.transfer_from(bob, alice, carol, 400)

        assert token.balance_of(alice) == 1000
        assert token.allowance(alice, bob) == 100

    def test_unlimited_allowance_not_decremented(self, token, fund, alice, bob, carol):
        fund(alice, 1000)
        token.approve(alice, bob, MAX_AMOUNT)

        token.transfer_from(bob, alice, carol, 400)

        assert token.allowance(alice, bob) == MAX_AMOUNT

    def test_transfer_from_balance_failure_restores_allowance(
        self, token, fund, alice, bob, carol
    ):
        fund(alice, 100)
        token.approve(alice, bob, 1000)

        with pytest.raises(InsufficientBalance):
            token.transfer_from(bob, alice, carol, 500)

        assert token.allowance(alice, bob) == 1000

    def test_transfer_from_max(self, token, fund, alice, bob, carol, clock):
        fund(alice, 10**18)
        clock.advance(60)
        expected = token.balance_of(alice)
        token.approve(alice, bob, MAX_AMOUNT)

        token.transfer_from(bob, alice, carol, MAX_AMOUNT)

        assert token.balance_of(carol) == expected
        assert token.get_user_interest_rate(carol) == RATE
