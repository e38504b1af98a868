"""
Math layer for UniClaw

집중화된 유동성 수학 함수들:
- tick_math: Tick ↔ Price 변환
- sqrt_price_math: sqrtPriceX96 관련 계산
- liquidity_math: 유동성 ↔ 토큰 수량
- fee_math: 백서 기반 수수료 계산
- il_math: Impermanent Loss 계산
- pnl_math: 수익 분해 (fee / price / IL / ONL)
- position_math: 포지션 라이프사이클
"""

from .tick_math import (
    tick_to_price,
    price_to_tick,
    tick_to_sqrt_price,
    snap_tick_to_spacing,
    get_tick_spacing_for_fee,
    validate_tick_range,
    price_range_to_ticks,
)
from .sqrt_price_math import (
    sqrt_price_x96_to_price,
    price_to_sqrt_price_x96,
)
from .liquidity_math import (
    DepositQuote,
    liquidity_from_amounts,
    amounts_from_liquidity,
    deposit_for_amounts,
    position_amounts,
)
from .fee_math import (
    FeeCalculationResult,
    fee_growth_inside,
    fee_growth_delta,
    fees_owed,
    calculate_position_fees,
    liquidity_share,
    estimate_position_fees_24h,
    fee_apr,
)
from .il_math import (
    ILResult,
    il_full_range,
    impermanent_loss,
    optimal_token_split,
    calculate_il,
)
from .pnl_math import (
    Fingerprint,
    PnLBreakdown,
    opportunity_loss,
    net_profit,
)
from .position_math import (
    accrue_fees,
    accrue_from_snapshot,
    increase_liquidity,
    decrease_liquidity,
    collect_fees,
)
