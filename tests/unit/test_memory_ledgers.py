"""Unit tests for the in-memory token ledgers."""
from __future__ import annotations

import pytest

from cdp_engine.engine import ENGINE_ACCOUNT
from cdp_engine.ledgers import InMemoryCollateral, InMemoryDebtToken


class TestInMemoryCollateral:
    def test_transfer_from_moves_balance(self) -> None:
        token = InMemoryCollateral("WETH")
        token.credit("alice", 10)
        assert token.transfer_from("alice", ENGINE_ACCOUNT, 4)
        assert token.balance_of("alice") == 6
        assert token.balance_of(ENGINE_ACCOUNT) == 4

    def test_insufficient_balance_refused(self) -> None:
        token = InMemoryCollateral("WETH")
        token.credit("alice", 1)
        assert not token.transfer_from("alice", "bob", 2)
        assert token.balance_of("alice") == 1
        assert token.balance_of("bob") == 0

    def test_transfer_draws_from_holder(self) -> None:
        token = InMemoryCollateral("WETH")
        token.credit(ENGINE_ACCOUNT, 5)
        assert token.transfer("bob", 5)
        assert token.balance_of("bob") == 5
        assert not token.transfer("bob", 1)

    def test_negative_credit_rejected(self) -> None:
        with pytest.raises(ValueError):
            InMemoryCollateral("WETH").credit("alice", -1)


class TestInMemoryDebtToken:
    def test_mint_and_burn_change_supply(self) -> None:
        token = InMemoryDebtToken("DSC")
        assert token.mint("alice", 100)
        assert token.transfer_from("alice", ENGINE_ACCOUNT, 40)
        token.burn(40)
        assert token.total_supply == 60
        assert token.balance_of(ENGINE_ACCOUNT) == 0

    def test_zero_mint_refused(self) -> None:
        assert not InMemoryDebtToken("DSC").mint("alice", 0)

    def test_burn_over_holder_balance_raises(self) -> None:
        token = InMemoryDebtToken("DSC")
        with pytest.raises(ValueError):
            token.burn(1)
