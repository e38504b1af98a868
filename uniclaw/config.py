"""
Configuration loading

Environment settings come from the process environment (and a .env file via
python-dotenv). The YAML file supplies safety limits and the injected tables
(gas multipliers, gas benchmarks, bridge fees, tick-gap thresholds).

Precedence: explicit path > UNICLAW_CONFIG_PATH > packaged defaults.yaml,
then UNICLAW_* safety overrides from the environment on top.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from .errors import ConfigError
from .opportunity.cross_chain import BridgeFee
from .safety.gate import SafetyConfig
from .safety.operation import OperationType
from .schemas import UniclawConfigSchema

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


class Settings:
    """Environment settings (read when instantiated)"""

    ENV_OVERRIDES = {
        "UNICLAW_MAX_OPERATION_PCT": "max_operation_pct",
        "UNICLAW_MIN_PROFIT_USD": "min_profit_usd",
        "UNICLAW_MAX_SLIPPAGE_PCT": "max_slippage_pct",
        "UNICLAW_MAX_GAS_PRICE_GWEI": "max_gas_price_gwei",
    }

    def __init__(self):
        self.CONFIG_PATH: Optional[str] = os.getenv("UNICLAW_CONFIG_PATH") or None
        self.safety_overrides = self._read_overrides()

    def _read_overrides(self) -> dict:
        overrides = {}
        for env_name, field_name in self.ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[field_name] = float(raw)
            except ValueError:
                raise ConfigError(f"{env_name} must be a number, got {raw!r}") from None
        return overrides


@dataclass(frozen=True)
class TickGapThresholds:
    min_gap_ticks: int
    liquidity_threshold: int
    low_resistance_threshold: int


@dataclass(frozen=True)
class UniclawConfig:
    """Immutable runtime configuration"""
    safety: SafetyConfig
    hourly_gas_multipliers: Tuple[float, ...]
    gas_benchmarks: Mapping[OperationType, int]
    bridge_fees: Mapping[str, BridgeFee]
    tick_gap: TickGapThresholds
    source: str


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}: {path}")
    return data


def _merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_config(
    path: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None
) -> UniclawConfig:
    """
    Load and validate configuration.

    A user file only needs the sections it changes; everything else falls back
    to the packaged defaults.

    Raises:
        ConfigError: Missing file, malformed YAML, schema violation or bad env value.
    """
    settings = settings or Settings()
    chosen = path or settings.CONFIG_PATH

    data = _read_yaml(DEFAULT_CONFIG_PATH)
    if chosen:
        data = _merge(data, _read_yaml(Path(chosen)))
    if settings.safety_overrides:
        data = _merge(data, {"safety": settings.safety_overrides})

    try:
        schema = UniclawConfigSchema(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration ({chosen or DEFAULT_CONFIG_PATH}): {e}") from e

    config = UniclawConfig(
        safety=SafetyConfig(**schema.safety.model_dump()),
        hourly_gas_multipliers=tuple(schema.gas.hourly_multipliers),
        gas_benchmarks=MappingProxyType({
            OperationType.parse(name): units for name, units in schema.gas.benchmarks.items()
        }),
        bridge_fees=MappingProxyType({
            name.lower(): BridgeFee(fee.fee_pct, fee.fixed_usd) for name, fee in schema.bridges.items()
        }),
        tick_gap=TickGapThresholds(**schema.tick_gap.model_dump()),
        source=str(chosen or DEFAULT_CONFIG_PATH),
    )
    logger.debug(f"Loaded config from {config.source}: {config.safety}")
    return config
