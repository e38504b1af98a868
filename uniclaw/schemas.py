"""
Configuration file schemas using Pydantic

Validates the YAML configuration before it is turned into runtime objects.
"""
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator

from .safety.operation import OperationType


class SafetySchema(BaseModel):
    """Capital safety limits"""
    max_operation_pct: float = Field(default=0.05, description="Max capital at risk as a fraction of portfolio", gt=0, le=1)
    min_profit_usd: float = Field(default=15.0, description="Minimum net profit (USD)", ge=0)
    max_slippage_pct: float = Field(default=1.0, description="Max slippage in percent", ge=0)
    max_gas_price_gwei: float = Field(default=100.0, description="Gas price ceiling (gwei)", gt=0)

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "max_operation_pct": 0.05,
                "min_profit_usd": 15.0,
                "max_slippage_pct": 1.0,
                "max_gas_price_gwei": 100.0
            }
        }


class BridgeFeeSchema(BaseModel):
    """Bridge fee: percent of amount plus a fixed USD charge"""
    fee_pct: float = Field(..., description="Fee in percent of the bridged amount", ge=0)
    fixed_usd: float = Field(default=0.0, description="Fixed fee (USD)", ge=0)

    class Config:
        extra = "forbid"


class GasSchema(BaseModel):
    """Gas projection tables"""
    hourly_multipliers: List[float] = Field(..., description="24 hour-of-day multipliers (UTC)")
    benchmarks: Dict[str, int] = Field(..., description="Gas units per operation type")

    class Config:
        extra = "forbid"

    @field_validator("hourly_multipliers")
    @classmethod
    def check_hours(cls, v: List[float]) -> List[float]:
        if len(v) != 24:
            raise ValueError(f"hourly_multipliers needs 24 entries, got {len(v)}")
        if any(m <= 0 for m in v):
            raise ValueError("hourly_multipliers must all be > 0")
        return v

    @field_validator("benchmarks")
    @classmethod
    def check_benchmarks(cls, v: Dict[str, int]) -> Dict[str, int]:
        known = {t.value for t in OperationType}
        for name, units in v.items():
            if name not in known:
                raise ValueError(f"unknown operation type '{name}' (supported: {', '.join(sorted(known))})")
            if units < 0:
                raise ValueError(f"gas units for '{name}' must be >= 0")
        return v


class TickGapSchema(BaseModel):
    """Tick gap scan thresholds"""
    min_gap_ticks: int = Field(default=100, description="Minimum width (ticks) for a gap", ge=0)
    liquidity_threshold: int = Field(default=10 ** 15, description="Gap if active liquidity is below this", ge=0)
    low_resistance_threshold: int = Field(default=10 ** 12, description="LOW resistance below this", ge=0)

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_thresholds(self) -> "TickGapSchema":
        if self.low_resistance_threshold > self.liquidity_threshold:
            raise ValueError("low_resistance_threshold must not exceed liquidity_threshold")
        return self


class UniclawConfigSchema(BaseModel):
    """Top-level configuration file"""
    safety: SafetySchema = Field(default_factory=SafetySchema)
    gas: GasSchema
    bridges: Dict[str, BridgeFeeSchema] = Field(default_factory=dict)
    tick_gap: TickGapSchema = Field(default_factory=TickGapSchema)

    class Config:
        extra = "forbid"
