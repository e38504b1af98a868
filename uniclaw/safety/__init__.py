"""
Safety layer: candidate operations and the five-gate capital safety filter.
"""

from .operation import OperationType, CandidateOperation, ARBITRAGE_TYPES
from .gate import (
    SafetyConfig,
    SafetyGate,
    GateDecision,
    GATE_ORDER,
    APPROVED,
    SIZE_EXCEEDS_LIMIT,
    GAS_PRICE_TOO_HIGH,
    GAS_EXCEEDS_PROFIT,
    BELOW_MIN_PROFIT,
    SLIPPAGE_TOO_HIGH,
    NON_ATOMIC_ARB_FORBIDDEN,
)
