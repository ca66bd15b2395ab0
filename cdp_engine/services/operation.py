"""All-or-nothing scope for one mutating engine call."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from ..errors import CollaboratorFailure, EngineError
from .position_ledger import PositionLedger

logger = logging.getLogger(__name__)


class Operation:
    """Collects compensations for external moves made inside one call.

    Ledger changes are undone by the ledger's own undo log. External moves
    that already succeeded are undone by their registered compensations,
    newest first.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._compensations: list[tuple[str, Callable[[], object]]] = []

    def on_rollback(self, description: str, undo: Callable[[], object]) -> None:
        self._compensations.append((description, undo))

    def compensate(self) -> list[tuple[str, Exception]]:
        """Run every compensation, newest first, and return the ones that failed.

        A failing compensation does not stop the others.
        """
        failures: list[tuple[str, Exception]] = []
        while self._compensations:
            description, undo = self._compensations.pop()
            logger.warning("Compensating %s: %s", self.name, description)
            try:
                undo()
            except Exception as e:
                logger.error(
                    "Compensation of %s failed (%s): %s", self.name, description, e
                )
                failures.append((description, e))
        return failures


def call_collaborator(
    error: type[CollaboratorFailure],
    description: str,
    call: Callable[[], bool | None],
    *,
    returns_flag: bool = True,
) -> None:
    """Invoke an external ledger, turning a refusal or a crash into ``error``.

    Engine errors raised from inside the collaborator (a rejected reentrant
    call, for instance) propagate unchanged.
    """
    try:
        ok = call()
    except EngineError:
        raise
    except Exception as e:
        raise error(f"{description} failed: {e}") from e
    if returns_flag and not ok:
        raise error(f"{description} was refused")


@contextmanager
def atomic(ledger: PositionLedger, name: str) -> Iterator[Operation]:
    """Run a block so that on any exception no partial effect persists.

    The block's own exception is always the one raised. Compensations that
    failed on the way out are attached to it as notes.
    """
    operation = Operation(name)
    ledger.begin()
    try:
        yield operation
    except BaseException as e:
        ledger.rollback()
        for description, failure in operation.compensate():
            e.add_note(f"compensation failed: {description}: {failure}")
        raise
    ledger.commit()
