"""
Candidate operations evaluated by the safety gate.

A CandidateOperation is created per evaluation cycle and consumed by a single
gate decision; it is never persisted.
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum

from ..errors import InputValidationError


class OperationType(str, Enum):
    ARB = "arb"
    FLASH_SWAP = "flash_swap"
    SINGLE_SIDE_DEPOSIT = "single_side_deposit"
    GAP_EDGE_LP = "gap_edge_lp"
    REBALANCE = "rebalance"
    CROSS_CHAIN_TRANSFER = "cross_chain_transfer"

    @property
    def is_arbitrage(self) -> bool:
        return self in ARBITRAGE_TYPES

    @classmethod
    def parse(cls, value) -> "OperationType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InputValidationError(
                f"Unknown operation type: {value!r} "
                f"(supported: {', '.join(t.value for t in cls)})"
            ) from None


ARBITRAGE_TYPES = frozenset({OperationType.ARB, OperationType.FLASH_SWAP})


@dataclass(frozen=True)
class CandidateOperation:
    """
    A proposed capital-deploying action.

    Attributes:
        op_type: Operation type tag.
        capital_at_risk_usd: Capital exposed by the operation.
        expected_profit_usd: Expected gross profit before gas.
        gas_estimate_usd: Estimated gas cost.
        slippage_pct: Expected slippage in percent (0.3 = 0.3%).
        is_atomic: Whether the operation executes in a single transaction.
    """

    op_type: OperationType
    capital_at_risk_usd: float
    expected_profit_usd: float
    gas_estimate_usd: float
    slippage_pct: float
    is_atomic: bool

    def __post_init__(self):
        object.__setattr__(self, "op_type", OperationType.parse(self.op_type))
        for name in ("capital_at_risk_usd", "expected_profit_usd", "gas_estimate_usd", "slippage_pct"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InputValidationError(f"{name} must be a finite number, got {value!r}")
        if not isinstance(self.is_atomic, bool):
            raise InputValidationError(f"is_atomic must be a bool, got {self.is_atomic!r}")
        if self.capital_at_risk_usd < 0:
            raise InputValidationError(f"capital_at_risk_usd must be >= 0, got {self.capital_at_risk_usd}")
        if self.gas_estimate_usd < 0:
            raise InputValidationError(f"gas_estimate_usd must be >= 0, got {self.gas_estimate_usd}")
        if self.slippage_pct < 0:
            raise InputValidationError(f"slippage_pct must be >= 0, got {self.slippage_pct}")

    @property
    def net_profit_usd(self) -> float:
        return self.expected_profit_usd - self.gas_estimate_usd

    def to_dict(self) -> dict:
        data = asdict(self)
        data["op_type"] = self.op_type.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CandidateOperation":
        try:
            return cls(
                op_type=OperationType.parse(data["type"]),
                capital_at_risk_usd=data["capitalAtRisk"],
                expected_profit_usd=data["expectedProfit"],
                gas_estimate_usd=data["gasEstimate"],
                slippage_pct=data["slippagePct"],
                is_atomic=data["isAtomic"],
            )
        except KeyError as e:
            raise InputValidationError(f"Missing operation field: {e.args[0]}") from None
