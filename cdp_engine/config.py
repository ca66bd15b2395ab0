"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationLengthMismatch
from .models import EngineConstants

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollateralConfig:
    assets: tuple[str, ...] = ()
    price_feeds: tuple[str, ...] = ()


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OracleConfig:
    provider: str = "pyth"
    stale_after_seconds: int = 3 * 60 * 60
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConstants = field(default_factory=EngineConstants)
    collateral: CollateralConfig = field(default_factory=CollateralConfig)
    debt_token: str = "DSC"
    oracle: OracleConfig = field(default_factory=OracleConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML -> dataclass builders
# ---------------------------------------------------------------------------


def _build_engine(raw: dict[str, Any]) -> EngineConstants:
    return EngineConstants(
        liquidation_threshold=int(raw.get("liquidation_threshold", 50)),
        liquidation_bonus=int(raw.get("liquidation_bonus", 10)),
    )


def _build_collateral(raw: dict[str, Any]) -> CollateralConfig:
    return CollateralConfig(
        assets=tuple(str(a) for a in raw.get("assets", [])),
        price_feeds=tuple(str(f) for f in raw.get("price_feeds", [])),
    )


def _build_oracle(raw: dict[str, Any]) -> OracleConfig:
    pyth_raw = raw.get("pyth", {})
    return OracleConfig(
        provider=raw.get("provider", "pyth"),
        stale_after_seconds=int(raw.get("stale_after_seconds", 3 * 60 * 60)),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url") or PythConfig.hermes_url,
            feeds=dict(pyth_raw.get("feeds", {})),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate engine configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {})),
        collateral=_build_collateral(raw.get("collateral", {})),
        debt_token=str(raw.get("debt_token", "DSC")),
        oracle=_build_oracle(raw.get("oracle", {})),
    )

    _validate(cfg)
    logger.info(
        "Configuration loaded from %s (%d collateral assets)",
        config_path,
        len(cfg.collateral.assets),
    )
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    engine = cfg.engine
    if not 0 < engine.liquidation_threshold < engine.liquidation_precision:
        raise ValueError(
            f"liquidation_threshold must be between 1 and "
            f"{engine.liquidation_precision - 1}, got {engine.liquidation_threshold}"
        )
    if not 0 < engine.liquidation_bonus < engine.liquidation_precision:
        raise ValueError(
            f"liquidation_bonus must be between 1 and "
            f"{engine.liquidation_precision - 1}, got {engine.liquidation_bonus}"
        )

    collateral = cfg.collateral
    if not collateral.assets:
        raise ValueError("At least one collateral asset must be configured")
    if len(collateral.assets) != len(collateral.price_feeds):
        raise ConfigurationLengthMismatch(
            len(collateral.assets), len(collateral.price_feeds)
        )
    if len(set(collateral.assets)) != len(collateral.assets):
        raise ValueError("Collateral assets must be unique")

    if cfg.oracle.stale_after_seconds <= 0:
        raise ValueError("stale_after_seconds must be positive")
    if cfg.oracle.provider == "pyth":
        for feed in collateral.price_feeds:
            if feed not in cfg.oracle.pyth.feeds:
                raise ValueError(f"Price feed '{feed}' has no pyth feed id")
