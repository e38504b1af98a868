"""
UniClaw 상수 정의

집중화된 유동성 계산에 사용되는 상수들:
- Q96: sqrt price 인코딩에 사용 (2^96)
- Q128: fee growth 인코딩에 사용 (2^128)
- FEE_TIERS: 지원되는 수수료 티어
- TICK_SPACINGS: 각 수수료 티어별 틱 간격
"""

import math
from typing import Dict

# Fixed-point 인코딩 상수
Q96: int = 2 ** 96
Q128: int = 2 ** 128

# fee growth 누산기는 uint256 폭으로 랩어라운드
FEE_GROWTH_MODULUS: int = 2 ** 256

# 수수료 티어 (백만분율)
# 500 = 0.05%, 3000 = 0.30%, 10000 = 1.00%
FEE_TIERS: Dict[int, str] = {
    100: "0.01%",
    500: "0.05%",
    3000: "0.30%",
    10000: "1.00%",
}

FEE_DENOMINATOR: int = 1_000_000

# 각 수수료 티어별 틱 간격
TICK_SPACINGS: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# price = 1.0001^tick
TICK_BASE: float = 1.0001
LOG_TICK_BASE: float = math.log(TICK_BASE)

# 가스 예측 안전 버퍼 (20%)
GAS_SAFETY_BUFFER: float = 0.20

# 크로스체인 비용 판정 기준 (금액 대비 %)
CROSS_CHAIN_ARB_MAX_COST_PCT: float = 0.5
CROSS_CHAIN_REBALANCE_MAX_COST_PCT: float = 2.0
