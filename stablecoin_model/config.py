"""
Configuration loading.

Reads engine parameters and per-network collateral wiring from config.yaml.
Values may reference environment variables as ${VAR}; a .env file is loaded
first. The result is a tree of frozen dataclasses, validated before use.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from dotenv import load_dotenv

from .constants import (
    LIQUIDATION_BONUS,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
    ORACLE_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineParams:
    """
    Protocol parameters passed to the engine at deployment.
    """
    liquidation_threshold: int = LIQUIDATION_THRESHOLD
    liquidation_bonus: int = LIQUIDATION_BONUS
    min_health_factor: int = MIN_HEALTH_FACTOR
    oracle_timeout_seconds: int = ORACLE_TIMEOUT_SECONDS


@dataclass(frozen=True)
class AssetConfig:
    symbol: str = ""              # Token symbol, also its address in the model
    decimals: int = 18            # Native unit scale of the token
    feed_decimals: int = 8        # Scale of the price feed answers
    initial_price: int = 0        # Whole USD per unit, scaled by feed_decimals at deploy time


@dataclass(frozen=True)
class NetworkConfig:
    name: str = ""
    debt_token_symbol: str = "DSC"
    assets: Tuple[AssetConfig, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    engine: EngineParams = field(default_factory=EngineParams)
    networks: Dict[str, NetworkConfig] = field(default_factory=dict)
    log_level: str = "INFO"

    def network(self, name: str) -> NetworkConfig:
        try:
            return self.networks[name]
        except KeyError:
            raise ValueError(f"Unknown network '{name}'") from None


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


def _build_engine(raw: Dict[str, Any]) -> EngineParams:
    return EngineParams(
        liquidation_threshold=int(raw.get("liquidation_threshold", LIQUIDATION_THRESHOLD)),
        liquidation_bonus=int(raw.get("liquidation_bonus", LIQUIDATION_BONUS)),
        min_health_factor=int(raw.get("min_health_factor", MIN_HEALTH_FACTOR)),
        oracle_timeout_seconds=int(raw.get("oracle_timeout_seconds", ORACLE_TIMEOUT_SECONDS)),
    )


def _build_assets(raw: List[Dict[str, Any]]) -> Tuple[AssetConfig, ...]:
    assets: List[AssetConfig] = []
    for a in raw:
        assets.append(
            AssetConfig(
                symbol=a.get("symbol", ""),
                decimals=int(a.get("decimals", 18)),
                feed_decimals=int(a.get("feed_decimals", 8)),
                initial_price=int(a.get("initial_price", 0)),
            )
        )
    return tuple(assets)


def _build_networks(raw: Dict[str, Any]) -> Dict[str, NetworkConfig]:
    networks: Dict[str, NetworkConfig] = {}
    for name, cfg in raw.items():
        networks[name] = NetworkConfig(
            name=name,
            debt_token_symbol=cfg.get("debt_token_symbol", "DSC"),
            assets=_build_assets(cfg.get("assets", [])),
        )
    return networks


def load_config(config_path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Loads and validates the configuration.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package)

    Returns:
        AppConfig with every section filled in

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if a value is out of range or a network is malformed
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
        networks=_build_networks(raw.get("networks", {})),
        log_level=str(raw.get("log_level", "INFO")),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    params = cfg.engine
    if not 1 <= params.liquidation_threshold <= 100:
        raise ValueError("liquidation_threshold must be between 1 and 100")
    if params.liquidation_bonus < 0:
        raise ValueError("liquidation_bonus must not be negative")
    if params.min_health_factor <= 0:
        raise ValueError("min_health_factor must be positive")
    if params.oracle_timeout_seconds <= 0:
        raise ValueError("oracle_timeout_seconds must be positive")

    if not cfg.networks:
        raise ValueError("At least one network must be configured")

    for network in cfg.networks.values():
        if not network.assets:
            raise ValueError(f"Network '{network.name}' has no collateral assets")
        symbols = [a.symbol for a in network.assets]
        if len(set(symbols)) != len(symbols):
            raise ValueError(f"Network '{network.name}' has duplicate asset symbols")
        for asset in network.assets:
            if not asset.symbol:
                raise ValueError(f"Network '{network.name}' has an asset without a symbol")
            if asset.decimals <= 0 or asset.feed_decimals <= 0:
                raise ValueError(f"Asset '{asset.symbol}' must have positive decimals")
            if asset.initial_price <= 0:
                raise ValueError(f"Asset '{asset.symbol}' must have a positive initial_price")
