"""Health factor calculation and the solvency check every mutation goes through."""
from __future__ import annotations

import logging

from ..errors import HealthFactorBroken
from ..models import EngineConstants
from .position_ledger import PositionLedger, PositionReader

logger = logging.getLogger(__name__)


def calc_health_factor(debt: int, collateral_value: int, constants: EngineConstants) -> int:
    """Calculate health factor in ``precision`` units.

    health_factor = (collateral * liquidation_threshold / 100) * precision / debt

    A position without debt is never liquidatable and gets the maximum ratio.
    """
    if debt == 0:
        return constants.max_health_factor
    adjusted = (
        collateral_value * constants.liquidation_threshold // constants.liquidation_precision
    )
    return adjusted * constants.precision // debt


class HealthFactorCalculator:
    """Solvency ratio of positions recorded in a PositionLedger."""

    def __init__(self, ledger: PositionLedger, constants: EngineConstants) -> None:
        self._ledger = ledger
        self._constants = constants

    def health_factor(self, debt: int, collateral_value: int) -> int:
        return calc_health_factor(debt, collateral_value, self._constants)

    def account_health_factor(self, account: str, ledger: PositionReader | None = None) -> int:
        ledger = ledger or self._ledger
        debt = ledger.debt_of(account)
        if debt == 0:
            return self._constants.max_health_factor
        return self.health_factor(debt, ledger.total_collateral_value(account))

    def assert_solvent(self, account: str) -> None:
        """Raise HealthFactorBroken if ``account`` is under the minimum ratio."""
        ratio = self.account_health_factor(account)
        if ratio < self._constants.min_health_factor:
            logger.debug("Account %s below minimum health factor: %d", account, ratio)
            raise HealthFactorBroken(ratio)
