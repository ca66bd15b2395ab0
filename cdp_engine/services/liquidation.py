"""Partial liquidation of undercollateralized positions."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import HealthFactorNotImproved, HealthFactorOK
from ..models import EngineConstants
from .collateral import CollateralOperations
from .debt import DebtOperations
from .health import HealthFactorCalculator
from .operation import Operation
from .position_ledger import PositionLedger
from .value_converter import ValueConverter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiquidationResult:
    """What one liquidation moved."""

    debt_covered: int
    seized_quantity: int
    bonus_quantity: int
    starting_health_factor: int
    ending_health_factor: int

    @property
    def total_collateral(self) -> int:
        return self.seized_quantity + self.bonus_quantity


class LiquidationEngine:
    """Seize collateral plus bonus from an unhealthy account against repaid debt.

    The bonus comes out of the target's collateral, never from new issuance,
    so system debt shrinks by exactly the covered amount.

    All ledger effects and both postconditions are evaluated before any
    external move, then the liquidator's tokens are collected and burned and
    the seized collateral is released to the liquidator.
    """

    def __init__(
        self,
        ledger: PositionLedger,
        converter: ValueConverter,
        health: HealthFactorCalculator,
        collateral: CollateralOperations,
        debt: DebtOperations,
        constants: EngineConstants,
    ) -> None:
        self._ledger = ledger
        self._converter = converter
        self._health = health
        self._collateral = collateral
        self._debt = debt
        self._constants = constants

    def liquidate(
        self,
        op: Operation,
        liquidator: str,
        asset: str,
        target: str,
        debt_to_cover: int,
    ) -> LiquidationResult:
        c = self._constants
        self._collateral.validate(asset, debt_to_cover)

        starting = self._health.account_health_factor(target)
        if starting >= c.min_health_factor:
            raise HealthFactorOK(target, starting)

        seized = self._converter.quantity_from_value(asset, debt_to_cover)
        bonus = seized * c.liquidation_bonus // c.liquidation_precision
        total = seized + bonus

        self._ledger.sub_collateral(target, asset, total)
        self._ledger.sub_debt(target, debt_to_cover)

        ending = self._health.account_health_factor(target)
        if ending < c.min_health_factor:
            raise HealthFactorNotImproved(ending)
        self._health.assert_solvent(liquidator)

        self._debt.collect_and_destroy(op, debt_to_cover, liquidator)
        self._collateral.release(op, asset, total, liquidator)

        logger.info(
            "Liquidated %s by %s: covered %d debt for %d %s (bonus %d), "
            "health factor %d -> %d",
            target,
            liquidator,
            debt_to_cover,
            total,
            asset,
            bonus,
            starting,
            ending,
        )
        return LiquidationResult(
            debt_covered=debt_to_cover,
            seized_quantity=seized,
            bonus_quantity=bonus,
            starting_health_factor=starting,
            ending_health_factor=ending,
        )
