"""CollateralEngine: public entry points and queries of the debt engine."""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager

from .config import AppConfig
from .errors import AssetNotAllowed, ConfigurationError, ConfigurationLengthMismatch, EngineError
from .interfaces.custody import CollateralCustody
from .interfaces.debt_token import DebtToken
from .interfaces.price_source import PriceSource
from .models import AccountInformation, AssetRegistry, EngineConstants
from .services import (
    CollateralOperations,
    DebtOperations,
    HealthFactorCalculator,
    LiquidationEngine,
    LiquidationResult,
    Operation,
    PositionLedger,
    ReentrancyGuard,
    ValueConverter,
    atomic,
)

logger = logging.getLogger(__name__)

ENGINE_ACCOUNT = "cdp-engine"


class CollateralEngine:
    """Over-collateralized debt positions across several collateral assets.

    Every mutating entry point runs under the reentrancy guard inside a single
    all-or-nothing operation. Queries may be called at any time; while a
    mutation is running they answer from the balances committed before it.
    """

    def __init__(
        self,
        assets: Sequence[str],
        price_feeds: Sequence[str],
        debt_token: DebtToken,
        price_source: PriceSource,
        custody: Mapping[str, CollateralCustody],
        constants: EngineConstants | None = None,
        engine_account: str = ENGINE_ACCOUNT,
    ) -> None:
        if len(assets) != len(price_feeds):
            raise ConfigurationLengthMismatch(len(assets), len(price_feeds))
        if len(set(assets)) != len(assets):
            raise ConfigurationError("Collateral assets must be unique")
        missing = [asset for asset in assets if asset not in custody]
        if missing:
            raise ConfigurationError(f"No custody ledger for {', '.join(missing)}")

        self._constants = constants or EngineConstants()
        self._registry = AssetRegistry(tuple(assets), tuple(price_feeds))

        self._converter = ValueConverter(self._registry, price_source, self._constants)
        self._ledger = PositionLedger(self._registry, self._converter)
        self._health = HealthFactorCalculator(self._ledger, self._constants)
        self._guard = ReentrancyGuard()
        self._collateral = CollateralOperations(
            self._registry, self._ledger, self._health, dict(custody), engine_account
        )
        self._debt = DebtOperations(self._ledger, self._health, debt_token, engine_account)
        self._liquidation = LiquidationEngine(
            self._ledger,
            self._converter,
            self._health,
            self._collateral,
            self._debt,
            self._constants,
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        debt_token: DebtToken,
        price_source: PriceSource,
        custody: Mapping[str, CollateralCustody],
    ) -> CollateralEngine:
        return cls(
            config.collateral.assets,
            config.collateral.price_feeds,
            debt_token,
            price_source,
            custody,
            constants=config.engine,
        )

    @contextmanager
    def _mutation(self, name: str) -> Iterator[Operation]:
        with self._guard.enter(name):
            try:
                with atomic(self._ledger, name) as op:
                    yield op
            except EngineError as e:
                logger.warning("%s refused: %s: %s", name, type(e).__name__, e)
                raise

    # ------------------------------------------------------------------
    # Collateral
    # ------------------------------------------------------------------

    def deposit(self, account: str, asset: str, quantity: int) -> None:
        with self._mutation("deposit") as op:
            self._collateral.deposit(op, account, asset, quantity)

    def redeem(
        self, account: str, asset: str, quantity: int, destination: str | None = None
    ) -> None:
        with self._mutation("redeem") as op:
            self._collateral.redeem(op, account, asset, quantity, destination or account)

    # ------------------------------------------------------------------
    # Debt
    # ------------------------------------------------------------------

    def mint(self, account: str, amount: int) -> None:
        with self._mutation("mint") as op:
            self._debt.mint(op, account, amount)

    def burn(self, account: str, amount: int) -> None:
        with self._mutation("burn") as op:
            self._debt.burn(op, amount, account, account)
            self._health.assert_solvent(account)

    # ------------------------------------------------------------------
    # Composite entry points
    # ------------------------------------------------------------------

    def deposit_and_mint(self, account: str, asset: str, quantity: int, amount: int) -> None:
        with self._mutation("deposit_and_mint") as op:
            self._collateral.deposit(op, account, asset, quantity)
            self._debt.mint(op, account, amount)

    def redeem_for_debt(self, account: str, asset: str, quantity: int, amount: int) -> None:
        """Burn ``amount`` of debt, then redeem ``quantity`` of collateral."""
        with self._mutation("redeem_for_debt") as op:
            self._debt.burn(op, amount, account, account)
            self._collateral.redeem(op, account, asset, quantity, account)

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    def liquidate(
        self, liquidator: str, asset: str, target: str, debt_to_cover: int
    ) -> LiquidationResult:
        with self._mutation("liquidate") as op:
            return self._liquidation.liquidate(op, liquidator, asset, target, debt_to_cover)

    # ------------------------------------------------------------------
    # Queries: committed balances, read under the ledger lock
    # ------------------------------------------------------------------

    def account_collateral_value(self, account: str) -> int:
        with self._ledger.reading() as ledger:
            return ledger.total_collateral_value(account)

    def account_information(self, account: str) -> AccountInformation:
        with self._ledger.reading() as ledger:
            return AccountInformation(
                debt=ledger.debt_of(account),
                collateral_value=ledger.total_collateral_value(account),
            )

    def collateral_balance(self, account: str, asset: str) -> int:
        with self._ledger.reading() as ledger:
            return ledger.collateral_balance(account, asset)

    def debt_of(self, account: str) -> int:
        with self._ledger.reading() as ledger:
            return ledger.debt_of(account)

    def total_debt(self) -> int:
        with self._ledger.reading() as ledger:
            return ledger.total_debt()

    def health_factor(self, account: str) -> int:
        with self._ledger.reading() as ledger:
            return self._health.account_health_factor(account, ledger)

    def calculate_health_factor(self, debt: int, collateral_value: int) -> int:
        return self._health.health_factor(debt, collateral_value)

    def value_of(self, asset: str, quantity: int) -> int:
        return self._converter.value_of(asset, quantity)

    def quantity_from_value(self, asset: str, value: int) -> int:
        return self._converter.quantity_from_value(asset, value)

    @property
    def collateral_assets(self) -> tuple[str, ...]:
        return self._registry.assets

    def price_feed_of(self, asset: str) -> str:
        if asset not in self._registry:
            raise AssetNotAllowed(asset)
        return self._registry.price_feed_of(asset)

    @property
    def constants(self) -> EngineConstants:
        return self._constants

    @property
    def liquidation_threshold(self) -> int:
        return self._constants.liquidation_threshold

    @property
    def liquidation_bonus(self) -> int:
        return self._constants.liquidation_bonus

    @property
    def liquidation_precision(self) -> int:
        return self._constants.liquidation_precision

    @property
    def precision(self) -> int:
        return self._constants.precision

    @property
    def additional_feed_precision(self) -> int:
        return self._constants.additional_feed_precision

    @property
    def min_health_factor(self) -> int:
        return self._constants.min_health_factor
