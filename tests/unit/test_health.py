"""Unit tests for the health factor calculation."""
from __future__ import annotations

import pytest

from cdp_engine.errors import HealthFactorBroken
from cdp_engine.models import MAX_HEALTH_FACTOR, AssetRegistry, EngineConstants
from cdp_engine.oracles import StaticPriceSource
from cdp_engine.services import (
    HealthFactorCalculator,
    PositionLedger,
    ValueConverter,
    calc_health_factor,
)
from tests.conftest import ETHER

CONSTANTS = EngineConstants()


class TestCalcHealthFactor:
    def test_zero_debt_is_max(self) -> None:
        assert calc_health_factor(0, 0, CONSTANTS) == MAX_HEALTH_FACTOR
        assert calc_health_factor(0, 10**30, CONSTANTS) == MAX_HEALTH_FACTOR

    def test_formula(self) -> None:
        # (20000 * 50/100) * 1e18 / 100 = 100e18
        assert calc_health_factor(100 * ETHER, 20_000 * ETHER, CONSTANTS) == 100 * ETHER

    def test_exactly_two_times_collateralized_is_one(self) -> None:
        assert calc_health_factor(100 * ETHER, 200 * ETHER, CONSTANTS) == ETHER

    def test_below_minimum(self) -> None:
        assert calc_health_factor(100 * ETHER, 180 * ETHER, CONSTANTS) == ETHER * 9 // 10

    def test_threshold_is_configurable(self) -> None:
        strict = EngineConstants(liquidation_threshold=80)
        assert calc_health_factor(100 * ETHER, 200 * ETHER, strict) == ETHER * 16 // 10


class TestAssertSolvent:
    @pytest.fixture()
    def setup(self, prices: StaticPriceSource) -> tuple[PositionLedger, HealthFactorCalculator]:
        registry = AssetRegistry(("WETH",), ("ETH_USD",))
        ledger = PositionLedger(registry, ValueConverter(registry, prices, CONSTANTS))
        return ledger, HealthFactorCalculator(ledger, CONSTANTS)

    def test_no_debt_is_solvent_without_collateral(self, setup) -> None:
        _, health = setup
        health.assert_solvent("nobody")

    def test_at_minimum_is_solvent(self, setup) -> None:
        ledger, health = setup
        ledger.add_collateral("alice", "WETH", ETHER)  # $2000
        ledger.add_debt("alice", 1_000 * ETHER)
        assert health.account_health_factor("alice") == ETHER
        health.assert_solvent("alice")

    def test_one_wei_over_breaks(self, setup) -> None:
        ledger, health = setup
        ledger.add_collateral("alice", "WETH", ETHER)
        ledger.add_debt("alice", 1_000 * ETHER + 1)
        with pytest.raises(HealthFactorBroken) as exc:
            health.assert_solvent("alice")
        assert exc.value.ratio < ETHER
