"""Engine errors, grouped by who has to act on them."""
from __future__ import annotations


class EngineError(Exception):
    """Base class for every failure raised by the engine."""


# ---------------------------------------------------------------------------
# Caller errors: safe to retry with corrected input
# ---------------------------------------------------------------------------


class InvalidInput(EngineError):
    pass


class AmountMustBePositive(InvalidInput):
    def __init__(self, amount: int) -> None:
        super().__init__(f"Amount must be positive, got {amount}")
        self.amount = amount


class AssetNotAllowed(InvalidInput):
    def __init__(self, asset: str) -> None:
        super().__init__(f"Asset '{asset}' is not an approved collateral")
        self.asset = asset


class ConfigurationError(InvalidInput):
    pass


class ConfigurationLengthMismatch(ConfigurationError):
    def __init__(self, assets: int, price_feeds: int) -> None:
        super().__init__(
            f"{assets} collateral assets configured but {price_feeds} price feeds"
        )
        self.assets = assets
        self.price_feeds = price_feeds


# ---------------------------------------------------------------------------
# Ledger state errors: retry only after the position changes
# ---------------------------------------------------------------------------


class StatePrecondition(EngineError):
    pass


class InsufficientCollateral(StatePrecondition):
    def __init__(self, account: str, asset: str, requested: int, available: int) -> None:
        super().__init__(
            f"Account '{account}' holds {available} {asset}, cannot remove {requested}"
        )
        self.account = account
        self.asset = asset
        self.requested = requested
        self.available = available


class InsufficientDebtRecorded(StatePrecondition):
    def __init__(self, account: str, requested: int, recorded: int) -> None:
        super().__init__(
            f"Account '{account}' has {recorded} debt recorded, cannot remove {requested}"
        )
        self.account = account
        self.requested = requested
        self.recorded = recorded


class HealthFactorOK(StatePrecondition):
    def __init__(self, account: str, ratio: int) -> None:
        super().__init__(f"Account '{account}' is not liquidatable (health factor {ratio})")
        self.account = account
        self.ratio = ratio


# ---------------------------------------------------------------------------
# Solvency invariant refusals
# ---------------------------------------------------------------------------


class InvariantViolation(EngineError):
    def __init__(self, message: str, ratio: int) -> None:
        super().__init__(message)
        self.ratio = ratio


class HealthFactorBroken(InvariantViolation):
    def __init__(self, ratio: int) -> None:
        super().__init__(f"Health factor broken: {ratio}", ratio)


class HealthFactorNotImproved(InvariantViolation):
    def __init__(self, ratio: int) -> None:
        super().__init__(f"Liquidation did not restore health factor: {ratio}", ratio)


# ---------------------------------------------------------------------------
# Collaborator failures: surfaced verbatim, never retried
# ---------------------------------------------------------------------------


class CollaboratorFailure(EngineError):
    pass


class TransferFailed(CollaboratorFailure):
    pass


class MintFailed(CollaboratorFailure):
    pass


class PriceUnavailable(CollaboratorFailure):
    pass


class ReentrantCallRejected(CollaboratorFailure):
    pass
