"""Deposit and redeem flows."""
from __future__ import annotations

import logging
from collections.abc import Mapping

from ..errors import AmountMustBePositive, AssetNotAllowed, TransferFailed
from ..interfaces.custody import CollateralCustody
from ..models import AssetRegistry
from .health import HealthFactorCalculator
from .operation import Operation, call_collaborator
from .position_ledger import PositionLedger

logger = logging.getLogger(__name__)


class CollateralOperations:
    """Moves collateral between accounts and the engine's custody."""

    def __init__(
        self,
        registry: AssetRegistry,
        ledger: PositionLedger,
        health: HealthFactorCalculator,
        custody: Mapping[str, CollateralCustody],
        engine_account: str,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._health = health
        self._custody = custody
        self._engine_account = engine_account

    def validate(self, asset: str, quantity: int) -> None:
        if quantity <= 0:
            raise AmountMustBePositive(quantity)
        if asset not in self._registry:
            raise AssetNotAllowed(asset)

    def deposit(self, op: Operation, account: str, asset: str, quantity: int) -> None:
        """Record ``quantity`` of ``asset`` for ``account`` and take custody of it."""
        self.validate(asset, quantity)
        self._ledger.add_collateral(account, asset, quantity)

        custody = self._custody[asset]
        call_collaborator(
            TransferFailed,
            f"Pulling {quantity} {asset} from {account}",
            lambda: custody.transfer_from(account, self._engine_account, quantity),
        )
        op.on_rollback(
            f"return {quantity} {asset} to {account}",
            lambda: call_collaborator(
                TransferFailed,
                f"Returning {quantity} {asset} to {account}",
                lambda: custody.transfer(account, quantity),
            ),
        )
        logger.info("Collateral deposited: %s %d %s", account, quantity, asset)

    def redeem(
        self,
        op: Operation,
        account: str,
        asset: str,
        quantity: int,
        destination: str,
    ) -> None:
        """Release ``quantity`` of ``account``'s ``asset`` to ``destination``.

        The ledger is decremented and the account's solvency asserted before
        custody moves, so a refused redemption never leaves the engine.
        """
        self.validate(asset, quantity)
        self._ledger.sub_collateral(account, asset, quantity)
        self._health.assert_solvent(account)
        self.release(op, asset, quantity, destination)
        logger.info(
            "Collateral redeemed: %s %d %s to %s", account, quantity, asset, destination
        )

    def release(self, op: Operation, asset: str, quantity: int, destination: str) -> None:
        """Move ``quantity`` of ``asset`` out of the engine's custody."""
        custody = self._custody[asset]
        call_collaborator(
            TransferFailed,
            f"Sending {quantity} {asset} to {destination}",
            lambda: custody.transfer(destination, quantity),
        )
        op.on_rollback(
            f"recover {quantity} {asset} from {destination}",
            lambda: call_collaborator(
                TransferFailed,
                f"Recovering {quantity} {asset} from {destination}",
                lambda: custody.transfer_from(destination, self._engine_account, quantity),
            ),
        )
