"""
UniClaw - Uniswap V3 Concentrated Liquidity Analytics

집중화된 유동성 수학(틱 / 유동성 / 수수료 / IL / P&L), 기회 평가기
(차익거래 / flash swap / tick gap / 가스 / 크로스체인), 그리고 자본 안전 게이트.
"""

__version__ = "0.1.0"

from .constants import Q96, Q128, FEE_TIERS, TICK_SPACINGS, MIN_TICK, MAX_TICK
from .errors import (
    UniclawError,
    InputValidationError,
    InvalidTickRange,
    ConfigError,
    UNDEFINED,
    is_undefined,
)
from .data import Token, Pool, Tick, Position, GasObservation
from .safety import SafetyConfig, SafetyGate, GateDecision, CandidateOperation, OperationType
from .config import Settings, UniclawConfig, load_config
