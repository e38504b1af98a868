"""
Capital safety gate.

Every candidate operation passes through five ordered gates before execution.
The first failing gate short-circuits the rest and its reason is the one reported:

    1. size        SIZE_EXCEEDS_LIMIT
    2. gas         GAS_PRICE_TOO_HIGH, GAS_EXCEEDS_PROFIT
    3. min profit  BELOW_MIN_PROFIT
    4. slippage    SLIPPAGE_TOO_HIGH
    5. atomicity   NON_ATOMIC_ARB_FORBIDDEN (arb / flash_swap only)

Evaluation is stateless given (operation, portfolio_value, config). A rejection
is a normal return value, never an exception.

Example:
    >>> gate = SafetyGate(SafetyConfig(max_operation_pct=0.05, min_profit_usd=15, max_slippage_pct=1.0))
    >>> op = CandidateOperation("arb", 4000, 50, 30, 0.3, True)
    >>> gate.evaluate(op, portfolio_value=100_000).reason_code
    'APPROVED'
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from ..data.types import GasObservation
from ..errors import InputValidationError
from .operation import CandidateOperation

logger = logging.getLogger(__name__)

APPROVED = "APPROVED"
SIZE_EXCEEDS_LIMIT = "SIZE_EXCEEDS_LIMIT"
GAS_PRICE_TOO_HIGH = "GAS_PRICE_TOO_HIGH"
GAS_EXCEEDS_PROFIT = "GAS_EXCEEDS_PROFIT"
BELOW_MIN_PROFIT = "BELOW_MIN_PROFIT"
SLIPPAGE_TOO_HIGH = "SLIPPAGE_TOO_HIGH"
NON_ATOMIC_ARB_FORBIDDEN = "NON_ATOMIC_ARB_FORBIDDEN"

GATE_ORDER = ("size", "gas", "min_profit", "slippage", "atomicity")


@dataclass(frozen=True)
class SafetyConfig:
    """
    Safety limits, fixed for the lifetime of a gate.

    Attributes:
        max_operation_pct: Max capital at risk as a fraction of portfolio (0.05 = 5%).
        min_profit_usd: Minimum net profit worth acting on.
        max_slippage_pct: Max slippage in percent (1.0 = 1%).
        max_gas_price_gwei: Gas price ceiling, checked when an observation is supplied.
    """

    max_operation_pct: float = 0.05
    min_profit_usd: float = 15.0
    max_slippage_pct: float = 1.0
    max_gas_price_gwei: float = 100.0

    def __post_init__(self):
        if not 0 < self.max_operation_pct <= 1:
            raise InputValidationError(
                f"max_operation_pct must be in (0, 1], got {self.max_operation_pct}"
            )
        if self.min_profit_usd < 0:
            raise InputValidationError(f"min_profit_usd must be >= 0, got {self.min_profit_usd}")
        if self.max_slippage_pct < 0:
            raise InputValidationError(f"max_slippage_pct must be >= 0, got {self.max_slippage_pct}")
        if self.max_gas_price_gwei <= 0:
            raise InputValidationError(
                f"max_gas_price_gwei must be > 0, got {self.max_gas_price_gwei}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "SafetyConfig":
        defaults = cls()
        return cls(
            max_operation_pct=float(data.get("max_operation_pct", defaults.max_operation_pct)),
            min_profit_usd=float(data.get("min_profit_usd", defaults.min_profit_usd)),
            max_slippage_pct=float(data.get("max_slippage_pct", defaults.max_slippage_pct)),
            max_gas_price_gwei=float(data.get("max_gas_price_gwei", defaults.max_gas_price_gwei)),
        )


@dataclass(frozen=True)
class GateDecision:
    """
    Outcome of a gate evaluation.

    Attributes:
        approved: True only if every gate passed.
        reason_code: APPROVED or the first failing gate's reason.
        gate: Name of the failing gate (None when approved).
        details: The numbers that drove the decision, for audit and display.
    """

    approved: bool
    reason_code: str
    gate: Optional[str] = None
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "approved": self.approved,
            "reason_code": self.reason_code,
            "gate": self.gate,
            "details": dict(self.details),
        }


class SafetyGate:
    """
    Sequential approve/reject filter for candidate operations.

    Usage:
        gate = SafetyGate(config)
        decision = gate.evaluate(operation, portfolio_value=100_000)
        if decision.approved:
            executor.submit(operation)
    """

    def __init__(self, config: Optional[SafetyConfig] = None):
        self.config = config or SafetyConfig()

    def evaluate(
        self,
        operation: CandidateOperation,
        portfolio_value: float,
        gas_price_gwei: Optional[Union[float, GasObservation]] = None,
    ) -> GateDecision:
        """
        Run the operation through all gates in order.

        Args:
            operation: Candidate operation.
            portfolio_value: Current portfolio value in USD.
            gas_price_gwei: Observed gas price in gwei, or a GasObservation (base + priority
                fee). The ceiling check is skipped when None.

        Returns:
            GateDecision with the first failing reason, or APPROVED.

        Raises:
            InputValidationError: If portfolio_value is not positive.
        """
        if not portfolio_value > 0 or math.isinf(portfolio_value):
            raise InputValidationError(f"portfolio_value must be positive, got {portfolio_value}")
        if isinstance(gas_price_gwei, GasObservation):
            gas_price_gwei = gas_price_gwei.gas_price_gwei

        cfg = self.config
        net = operation.net_profit_usd
        details = {
            "op_type": operation.op_type.value,
            "portfolio_value": portfolio_value,
            "capital_at_risk_usd": operation.capital_at_risk_usd,
            "max_operation_usd": portfolio_value * cfg.max_operation_pct,
            "expected_profit_usd": operation.expected_profit_usd,
            "gas_estimate_usd": operation.gas_estimate_usd,
            "net_profit_usd": net,
            "min_profit_usd": cfg.min_profit_usd,
            "slippage_pct": operation.slippage_pct,
            "max_slippage_pct": cfg.max_slippage_pct,
            "is_atomic": operation.is_atomic,
        }
        if gas_price_gwei is not None:
            details["gas_price_gwei"] = gas_price_gwei
            details["max_gas_price_gwei"] = cfg.max_gas_price_gwei

        # 1. size
        if operation.capital_at_risk_usd > details["max_operation_usd"]:
            return self._reject(SIZE_EXCEEDS_LIMIT, "size", details)

        # 2. gas
        if gas_price_gwei is not None and gas_price_gwei > cfg.max_gas_price_gwei:
            return self._reject(GAS_PRICE_TOO_HIGH, "gas", details)
        if net <= 0:
            return self._reject(GAS_EXCEEDS_PROFIT, "gas", details)

        # 3. min profit
        if net < cfg.min_profit_usd:
            return self._reject(BELOW_MIN_PROFIT, "min_profit", details)

        # 4. slippage
        if operation.slippage_pct > cfg.max_slippage_pct:
            return self._reject(SLIPPAGE_TOO_HIGH, "slippage", details)

        # 5. atomicity
        if operation.op_type.is_arbitrage and not operation.is_atomic:
            return self._reject(NON_ATOMIC_ARB_FORBIDDEN, "atomicity", details)

        logger.info(
            f"Gate APPROVED {operation.op_type.value}: capital=${operation.capital_at_risk_usd:.2f}, "
            f"net=${net:.2f}, slippage={operation.slippage_pct:.2f}%"
        )
        return GateDecision(approved=True, reason_code=APPROVED, gate=None, details=details)

    def evaluate_many(
        self,
        operations: Iterable[CandidateOperation],
        portfolio_value: float,
        gas_price_gwei: Optional[Union[float, GasObservation]] = None,
    ) -> List[GateDecision]:
        """Evaluate a batch independently; decisions are returned in input order."""
        return [self.evaluate(op, portfolio_value, gas_price_gwei) for op in operations]

    def _reject(self, reason: str, gate: str, details: dict) -> GateDecision:
        logger.info(
            f"Gate REJECTED {details['op_type']} at {gate}: {reason} "
            f"(capital=${details['capital_at_risk_usd']:.2f}, net=${details['net_profit_usd']:.2f}, "
            f"slippage={details['slippage_pct']:.2f}%)"
        )
        return GateDecision(approved=False, reason_code=reason, gate=gate, details=details)
