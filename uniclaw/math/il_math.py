"""
Impermanent Loss Math - IL 계산

집중화된 유동성의 Impermanent Loss 계산.

References:
- Uniswap V3 Whitepaper: Section 6.4.1
- IL = (LP_value - HODL_value) / HODL_value

핵심 공식:
    전체 범위: IL = 2√r / (1 + r) - 1,  r = P_now / P_entry
    집중 범위: 평가 가격을 [P_lower, P_upper]로 clamp한 뒤
              IL = V_LP(P_eval) / V_HODL(P_eval) - 1

전체 범위 공식은 P_lower → 0, P_upper → ∞ 인 집중 범위 공식의 특수한 경우입니다.
가격이 범위를 벗어나면 IL은 경계값에서 고정됩니다.
"""

import math
from typing import NamedTuple, Optional, Tuple

from ..errors import InputValidationError
from .liquidity_math import amounts_from_liquidity


class ILResult(NamedTuple):
    """투자금 기준 IL 계산 결과 (가치는 현재 시장 가격 기준)"""
    il_pct: float  # impermanent_loss() 비율 (음수 = 손실)
    hodl_value: float  # 진입 시 토큰을 그대로 보유했을 때 가치
    lp_value: float  # LP 포지션 가치
    liquidity: float
    amount0_entry: float
    amount1_entry: float
    amount0_now: float
    amount1_now: float


def _resolve_range(price_lower: Optional[float], price_upper: Optional[float]) -> Tuple[float, float]:
    pa = 0.0 if price_lower is None else price_lower
    pb = math.inf if price_upper is None else price_upper
    if pa < 0 or pb <= pa:
        raise InputValidationError(f"가격 범위가 잘못되었습니다: [{price_lower}, {price_upper}]")
    return pa, pb


def il_full_range(price_ratio: float) -> float:
    """전체 범위(V2 스타일) IL

    IL = 2 * sqrt(r) / (1 + r) - 1

    Args:
        price_ratio: 현재가격 / 진입가격 (예: 2.0 = 100% 상승)

    Returns:
        IL 비율 (음수 = 손실)
    """
    if price_ratio <= 0:
        raise InputValidationError(f"가격 비율은 양수여야 합니다: {price_ratio}")
    return 2 * math.sqrt(price_ratio) / (1 + price_ratio) - 1


def impermanent_loss(
    entry_price: float,
    current_price: float,
    price_lower: Optional[float] = None,
    price_upper: Optional[float] = None
) -> float:
    """Impermanent Loss 비율

    Args:
        entry_price: 포지션 생성 시 가격
        current_price: 현재 가격
        price_lower: 하한 가격 (None = 0, 전체 범위)
        price_upper: 상한 가격 (None = ∞, 전체 범위)

    Returns:
        IL 비율. 진입 가격에서 0, 범위 내에서 항상 <= 0
    """
    if entry_price <= 0 or current_price <= 0:
        raise InputValidationError(
            f"가격은 양수여야 합니다: entry={entry_price}, current={current_price}"
        )

    if price_lower is None and price_upper is None:
        return il_full_range(current_price / entry_price)

    pa, pb = _resolve_range(price_lower, price_upper)
    eval_price = min(max(current_price, pa), pb)

    # 유동성 1 기준 진입 시 분할과 평가 가격에서의 분할 (비율이므로 L은 상쇄됨)
    x0, y0 = amounts_from_liquidity(1.0, entry_price, pa, pb)
    x1, y1 = amounts_from_liquidity(1.0, eval_price, pa, pb)

    hodl_value = x0 * eval_price + y0
    lp_value = x1 * eval_price + y1
    if hodl_value <= 0:
        return 0.0

    # 범위 내에서는 LP 가치가 HODL 접선 아래에 있으나 부동소수점 잡음은 제거
    return min(lp_value / hodl_value - 1, 0.0)


def optimal_token_split(
    investment: float,
    price: float,
    price_lower: Optional[float] = None,
    price_upper: Optional[float] = None
) -> Tuple[float, float]:
    """LP 포지션을 위한 토큰 분할 계산

    범위 내에서는 L_from_x = L_from_y가 되도록 분할합니다.

    Args:
        investment: 총 투자금 (token1 단위, 보통 USD)
        price: 현재 가격 (token1/token0)

    Returns:
        (x, y) = (token0 수량, token1 수량)
    """
    if investment < 0:
        raise InputValidationError(f"투자금은 음수일 수 없습니다: {investment}")
    pa, pb = _resolve_range(price_lower, price_upper)

    x, y = amounts_from_liquidity(1.0, price, pa, pb)
    value = x * price + y
    scale = investment / value
    return x * scale, y * scale


def calculate_il(
    investment: float,
    entry_price: float,
    current_price: float,
    price_lower: Optional[float] = None,
    price_upper: Optional[float] = None
) -> ILResult:
    """투자금 기준 Impermanent Loss 계산

    hodl_value와 lp_value는 실제 현재 가격으로 평가합니다. 가격이 범위를 벗어나면
    il_pct는 경계에서 고정되지만 두 가치의 차이는 계속 벌어질 수 있습니다.
    """
    if investment <= 0:
        raise InputValidationError(f"투자금은 양수여야 합니다: {investment}")
    pa, pb = _resolve_range(price_lower, price_upper)

    x0, y0 = optimal_token_split(investment, entry_price, price_lower, price_upper)
    x_unit, y_unit = amounts_from_liquidity(1.0, entry_price, pa, pb)
    # 한쪽 토큰만 보유하는 경우에도 0이 아닌 쪽으로 L 복원
    liquidity = x0 / x_unit if x_unit > 0 else y0 / y_unit

    x1, y1 = amounts_from_liquidity(liquidity, current_price, pa, pb)

    return ILResult(
        il_pct=impermanent_loss(entry_price, current_price, price_lower, price_upper),
        hodl_value=x0 * current_price + y0,
        lp_value=x1 * current_price + y1,
        liquidity=liquidity,
        amount0_entry=x0,
        amount1_entry=y0,
        amount0_now=x1,
        amount1_now=y1,
    )
