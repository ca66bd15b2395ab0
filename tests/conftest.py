"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from cdp_engine.config import AppConfig, CollateralConfig, OracleConfig, PythConfig
from cdp_engine.engine import CollateralEngine
from cdp_engine.ledgers import InMemoryCollateral, InMemoryDebtToken
from cdp_engine.models import EngineConstants
from cdp_engine.oracles import StaticPriceSource

ETHER = 10**18
ETH_USD_PRICE = 2000 * 10**8
BTC_USD_PRICE = 1000 * 10**8
NOW = 1_700_000_000

COLLATERAL_AMOUNT = 10 * ETHER
AMOUNT_TO_MINT = 100 * ETHER
COLLATERAL_TO_COVER = 20 * ETHER

USER = "alice"
LIQUIDATOR = "liquidator"


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def prices() -> StaticPriceSource:
    return StaticPriceSource(
        {"ETH_USD": ETH_USD_PRICE, "BTC_USD": BTC_USD_PRICE}, clock=lambda: NOW
    )


@pytest.fixture()
def weth() -> InMemoryCollateral:
    token = InMemoryCollateral("WETH")
    token.credit(USER, COLLATERAL_AMOUNT)
    token.credit(LIQUIDATOR, COLLATERAL_TO_COVER)
    return token


@pytest.fixture()
def wbtc() -> InMemoryCollateral:
    token = InMemoryCollateral("WBTC")
    token.credit(USER, COLLATERAL_AMOUNT)
    return token


@pytest.fixture()
def dsc() -> InMemoryDebtToken:
    return InMemoryDebtToken("DSC")


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine(
    prices: StaticPriceSource,
    weth: InMemoryCollateral,
    wbtc: InMemoryCollateral,
    dsc: InMemoryDebtToken,
) -> CollateralEngine:
    return CollateralEngine(
        ["WETH", "WBTC"],
        ["ETH_USD", "BTC_USD"],
        debt_token=dsc,
        price_source=prices,
        custody={"WETH": weth, "WBTC": wbtc},
    )


@pytest.fixture()
def deposited(engine: CollateralEngine) -> CollateralEngine:
    engine.deposit(USER, "WETH", COLLATERAL_AMOUNT)
    return engine


@pytest.fixture()
def minted(deposited: CollateralEngine) -> CollateralEngine:
    deposited.mint(USER, AMOUNT_TO_MINT)
    return deposited


@pytest.fixture()
def liquidator_ready(minted: CollateralEngine) -> CollateralEngine:
    """USER holds 10 WETH / 100 DSC; LIQUIDATOR holds 20 WETH / 100 DSC."""
    minted.deposit_and_mint(LIQUIDATOR, "WETH", COLLATERAL_TO_COVER, AMOUNT_TO_MINT)
    return minted


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        engine=EngineConstants(liquidation_threshold=50, liquidation_bonus=10),
        collateral=CollateralConfig(
            assets=("WETH", "WBTC"), price_feeds=("ETH_USD", "BTC_USD")
        ),
        debt_token="DSC",
        oracle=OracleConfig(
            provider="pyth",
            stale_after_seconds=10800,
            pyth=PythConfig(
                hermes_url="https://hermes.example.com",
                feeds={"ETH_USD": "aaa111", "BTC_USD": "bbb222"},
            ),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    engine:
      liquidation_threshold: 50
      liquidation_bonus: 10
    collateral:
      assets: [WETH, WBTC]
      price_feeds: [ETH_USD, BTC_USD]
    debt_token: DSC
    oracle:
      provider: pyth
      stale_after_seconds: 3600
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {ETH_USD: "aaa111", BTC_USD: "bbb222"}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
