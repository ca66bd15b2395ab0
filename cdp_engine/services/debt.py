"""Mint and burn flows."""
from __future__ import annotations

import logging

from ..errors import AmountMustBePositive, MintFailed, TransferFailed
from ..interfaces.debt_token import DebtToken
from .health import HealthFactorCalculator
from .operation import Operation, call_collaborator
from .position_ledger import PositionLedger

logger = logging.getLogger(__name__)


class DebtOperations:
    """Records minted debt and drives the external debt-token ledger."""

    def __init__(
        self,
        ledger: PositionLedger,
        health: HealthFactorCalculator,
        debt_token: DebtToken,
        engine_account: str,
    ) -> None:
        self._ledger = ledger
        self._health = health
        self._token = debt_token
        self._engine_account = engine_account

    def mint(self, op: Operation, account: str, amount: int) -> None:
        """Mint ``amount`` of debt token to ``account``.

        Debt is recorded first and solvency is checked on the post-mint
        figure; the token ledger is only credited once that check passed.
        """
        if amount <= 0:
            raise AmountMustBePositive(amount)
        self._ledger.add_debt(account, amount)
        self._health.assert_solvent(account)
        call_collaborator(
            MintFailed,
            f"Minting {amount} to {account}",
            lambda: self._token.mint(account, amount),
        )
        logger.info("Debt minted: %s %d", account, amount)

    def burn(self, op: Operation, amount: int, on_behalf_of: str, payer: str) -> None:
        """Repay ``amount`` of ``on_behalf_of``'s debt with tokens held by ``payer``."""
        if amount <= 0:
            raise AmountMustBePositive(amount)
        self._ledger.sub_debt(on_behalf_of, amount)
        self.collect_and_destroy(op, amount, payer)
        logger.info("Debt burned: %s %d paid by %s", on_behalf_of, amount, payer)

    def collect_and_destroy(self, op: Operation, amount: int, payer: str) -> None:
        """Pull ``amount`` tokens from ``payer`` into the engine and burn them."""
        engine = self._engine_account
        call_collaborator(
            TransferFailed,
            f"Pulling {amount} debt token from {payer}",
            lambda: self._token.transfer_from(payer, engine, amount),
        )
        op.on_rollback(
            f"return {amount} debt token to {payer}",
            lambda: call_collaborator(
                TransferFailed,
                f"Returning {amount} debt token to {payer}",
                lambda: self._token.transfer_from(engine, payer, amount),
            ),
        )

        call_collaborator(
            TransferFailed,
            f"Burning {amount} debt token",
            lambda: self._token.burn(amount),
            returns_flag=False,
        )
        op.on_rollback(
            f"reissue {amount} burned debt token",
            lambda: call_collaborator(
                MintFailed,
                f"Reissuing {amount} debt token",
                lambda: self._token.mint(engine, amount),
            ),
        )
