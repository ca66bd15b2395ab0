"""Per-account collateral and debt balances."""
from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager

from ..errors import InsufficientCollateral, InsufficientDebtRecorded
from ..models import AssetRegistry
from .value_converter import ValueConverter

# (account, asset) -> quantity before the open operation; None if never set
CollateralUndo = dict[tuple[str, str], int | None]
DebtUndo = dict[str, int | None]


class PositionReader:
    """Read side shared by the live ledger and its committed view."""

    def __init__(self, registry: AssetRegistry, converter: ValueConverter) -> None:
        self._registry = registry
        self._converter = converter

    def collateral_balance(self, account: str, asset: str) -> int:
        raise NotImplementedError

    def debt_of(self, account: str) -> int:
        raise NotImplementedError

    def total_debt(self) -> int:
        raise NotImplementedError

    def total_collateral_value(self, account: str) -> int:
        total = 0
        for asset in self._registry.assets:
            quantity = self.collateral_balance(account, asset)
            total += self._converter.value_of(asset, quantity)
        return total


class PositionLedger(PositionReader):
    """Sparse store of positions; accounts default to all-zero balances.

    Holds no business rules. Removing more than is recorded raises, nothing
    is ever clamped.

    An operation brackets its mutations with ``begin()`` and either
    ``commit()`` or ``rollback()``. While one is open every touched key keeps
    its prior value in an undo log, and ``committed()`` reads through that log
    to answer with the balances as they were at ``begin()``.
    """

    def __init__(self, registry: AssetRegistry, converter: ValueConverter) -> None:
        super().__init__(registry, converter)
        self._collateral: dict[str, dict[str, int]] = defaultdict(dict)
        self._debt: dict[str, int] = {}
        self._collateral_undo: CollateralUndo | None = None
        self._debt_undo: DebtUndo | None = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_collateral(self, account: str, asset: str, quantity: int) -> None:
        with self._lock:
            self._touch_collateral(account, asset)
            balances = self._collateral[account]
            balances[asset] = balances.get(asset, 0) + quantity

    def sub_collateral(self, account: str, asset: str, quantity: int) -> None:
        with self._lock:
            available = self.collateral_balance(account, asset)
            if quantity > available:
                raise InsufficientCollateral(account, asset, quantity, available)
            self._touch_collateral(account, asset)
            self._collateral[account][asset] = available - quantity

    def add_debt(self, account: str, amount: int) -> None:
        with self._lock:
            self._touch_debt(account)
            self._debt[account] = self._debt.get(account, 0) + amount

    def sub_debt(self, account: str, amount: int) -> None:
        with self._lock:
            recorded = self.debt_of(account)
            if amount > recorded:
                raise InsufficientDebtRecorded(account, amount, recorded)
            self._touch_debt(account)
            self._debt[account] = recorded - amount

    def _touch_collateral(self, account: str, asset: str) -> None:
        undo = self._collateral_undo
        if undo is not None and (account, asset) not in undo:
            undo[(account, asset)] = self._collateral.get(account, {}).get(asset)

    def _touch_debt(self, account: str) -> None:
        undo = self._debt_undo
        if undo is not None and account not in undo:
            undo[account] = self._debt.get(account)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def collateral_balance(self, account: str, asset: str) -> int:
        return self._collateral.get(account, {}).get(asset, 0)

    def debt_of(self, account: str) -> int:
        return self._debt.get(account, 0)

    def total_debt(self) -> int:
        return sum(self._debt.values())

    # ------------------------------------------------------------------
    # Operation scope
    # ------------------------------------------------------------------

    @property
    def in_operation(self) -> bool:
        return self._debt_undo is not None

    def begin(self) -> None:
        with self._lock:
            if self.in_operation:
                raise RuntimeError("A ledger operation is already open")
            self._collateral_undo = {}
            self._debt_undo = {}

    def commit(self) -> None:
        with self._lock:
            self._collateral_undo = None
            self._debt_undo = None

    def rollback(self) -> None:
        with self._lock:
            if self._collateral_undo is None or self._debt_undo is None:
                raise RuntimeError("No ledger operation is open")
            for (account, asset), original in self._collateral_undo.items():
                if original is None:
                    self._collateral[account].pop(asset, None)
                    if not self._collateral[account]:
                        del self._collateral[account]
                else:
                    self._collateral[account][asset] = original
            for account, original in self._debt_undo.items():
                if original is None:
                    self._debt.pop(account, None)
                else:
                    self._debt[account] = original
            self._collateral_undo = None
            self._debt_undo = None

    def committed(self) -> PositionReader:
        """Balances as of the start of the open operation, or live if none."""
        if self.in_operation:
            return CommittedPositions(self)
        return self

    @contextmanager
    def reading(self) -> Iterator[PositionReader]:
        """Hold off mutations from other threads while reading committed balances."""
        with self._lock:
            yield self.committed()


class CommittedPositions(PositionReader):
    """Read-only view of a ledger with its open operation's changes hidden."""

    def __init__(self, ledger: PositionLedger) -> None:
        super().__init__(ledger._registry, ledger._converter)
        self._ledger = ledger

    def collateral_balance(self, account: str, asset: str) -> int:
        undo = self._ledger._collateral_undo or {}
        if (account, asset) in undo:
            return undo[(account, asset)] or 0
        return self._ledger.collateral_balance(account, asset)

    def debt_of(self, account: str) -> int:
        undo = self._ledger._debt_undo or {}
        if account in undo:
            return undo[account] or 0
        return self._ledger.debt_of(account)

    def total_debt(self) -> int:
        undo = self._ledger._debt_undo or {}
        changed = sum(self._ledger.debt_of(a) - (original or 0) for a, original in undo.items())
        return self._ledger.total_debt() - changed
