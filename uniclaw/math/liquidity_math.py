"""
Liquidity Math - 유동성 계산

집중화된 유동성(Concentrated Liquidity)에서 가격 범위의 토큰 수량과
유동성 간의 변환.

References:
- 백서 Section 6.2.1: Concentrated Liquidity

핵심 공식:
    L = Δy / (√P_upper - √P_lower)          # token1 기준
    L = Δx / (1/√P_lower - 1/√P_upper)      # token0 기준

가격을 직접 빼지 않고 √가격 공식만 사용하여 큰 가격에서의 정밀도 손실을 피합니다.
price_lower=0, price_upper=inf 로 전체 범위(V2) 포지션도 표현할 수 있습니다.
"""

import math
from typing import NamedTuple, Tuple

from ..errors import InputValidationError
from .tick_math import tick_to_sqrt_price, validate_tick_range


class DepositQuote(NamedTuple):
    """예치 견적: 실제 예치되는 수량과 반환되는 잔여 토큰"""
    liquidity: float
    amount0: float  # 실제 예치 token0
    amount1: float  # 실제 예치 token1
    refund0: float  # 구속되지 않은 쪽의 잔여 token0
    refund1: float  # 구속되지 않은 쪽의 잔여 token1


def get_amount0_delta(sqrt_a: float, sqrt_b: float, liquidity: float) -> float:
    """두 √가격 사이에서 유동성이 보유하는 token0 양

    공식: Δx = L × (1/√P_a - 1/√P_b)
    """
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    # 1/inf == 0.0 이므로 상한이 무한대인 전체 범위도 그대로 처리됨
    return liquidity * (1.0 / sqrt_a - 1.0 / sqrt_b)


def get_amount1_delta(sqrt_a: float, sqrt_b: float, liquidity: float) -> float:
    """두 √가격 사이에서 유동성이 보유하는 token1 양

    공식: Δy = L × (√P_b - √P_a)
    """
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    return liquidity * (sqrt_b - sqrt_a)


def get_liquidity_for_amount0(sqrt_a: float, sqrt_b: float, amount0: float) -> float:
    """token0 양으로 얻을 수 있는 최대 유동성

    공식: L = Δx / (1/√P_a - 1/√P_b)
    """
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    denominator = 1.0 / sqrt_a - 1.0 / sqrt_b
    if denominator <= 0:
        return 0.0
    return amount0 / denominator


def get_liquidity_for_amount1(sqrt_a: float, sqrt_b: float, amount1: float) -> float:
    """token1 양으로 얻을 수 있는 최대 유동성

    공식: L = Δy / (√P_b - √P_a)
    """
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    denominator = sqrt_b - sqrt_a
    if denominator <= 0:
        return 0.0
    return amount1 / denominator


def _validate_prices(current_price: float, price_lower: float, price_upper: float) -> None:
    if current_price <= 0 or math.isnan(current_price):
        raise InputValidationError(f"현재 가격은 양수여야 합니다: {current_price}")
    if price_lower < 0 or price_upper <= price_lower:
        raise InputValidationError(
            f"가격 범위가 잘못되었습니다: [{price_lower}, {price_upper}]"
        )


def liquidity_from_amounts(
    amount0: float,
    amount1: float,
    current_price: float,
    price_lower: float,
    price_upper: float
) -> float:
    """토큰 수량에서 유동성 계산

    Args:
        amount0: token0 수량
        amount1: token1 수량
        current_price: 현재 가격 (token1/token0)
        price_lower: 하한 가격
        price_upper: 상한 가격

    Returns:
        유동성. 범위 내에서는 두 제약 조건 중 작은 값
    """
    _validate_prices(current_price, price_lower, price_upper)
    if amount0 < 0 or amount1 < 0:
        raise InputValidationError(f"토큰 수량은 음수일 수 없습니다: ({amount0}, {amount1})")

    sqrt_p = math.sqrt(current_price)
    sqrt_a = math.sqrt(price_lower)
    sqrt_b = math.sqrt(price_upper)

    if current_price <= price_lower:
        # 가격이 범위 아래: token0만 사용
        return get_liquidity_for_amount0(sqrt_a, sqrt_b, amount0)

    elif current_price < price_upper:
        # 가격이 범위 내: 양쪽 토큰 사용, 작은 값 반환
        liquidity0 = get_liquidity_for_amount0(sqrt_p, sqrt_b, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_a, sqrt_p, amount1)
        return min(liquidity0, liquidity1)

    else:
        # 가격이 범위 위: token1만 사용
        return get_liquidity_for_amount1(sqrt_a, sqrt_b, amount1)


def amounts_from_liquidity(
    liquidity: float,
    current_price: float,
    price_lower: float,
    price_upper: float
) -> Tuple[float, float]:
    """유동성에서 토큰 수량 계산 (liquidity_from_amounts의 역함수)

    Returns:
        (amount0, amount1) 튜플
    """
    _validate_prices(current_price, price_lower, price_upper)
    if liquidity < 0:
        raise InputValidationError(f"유동성은 음수일 수 없습니다: {liquidity}")

    sqrt_p = math.sqrt(current_price)
    sqrt_a = math.sqrt(price_lower)
    sqrt_b = math.sqrt(price_upper)

    if current_price <= price_lower:
        # 가격이 범위 아래: token0만 보유
        return get_amount0_delta(sqrt_a, sqrt_b, liquidity), 0.0

    elif current_price < price_upper:
        # 가격이 범위 내: 양쪽 토큰 보유
        amount0 = get_amount0_delta(sqrt_p, sqrt_b, liquidity)
        amount1 = get_amount1_delta(sqrt_a, sqrt_p, liquidity)
        return amount0, amount1

    else:
        # 가격이 범위 위: token1만 보유
        return 0.0, get_amount1_delta(sqrt_a, sqrt_b, liquidity)


def deposit_for_amounts(
    amount0: float,
    amount1: float,
    current_price: float,
    price_lower: float,
    price_upper: float
) -> DepositQuote:
    """예치 견적 계산

    구속 조건이 되는 토큰이 유동성을 결정하고, 나머지 토큰의 잉여분은
    예치되지 않고 refund로 반환됩니다.
    """
    liquidity = liquidity_from_amounts(amount0, amount1, current_price, price_lower, price_upper)
    used0, used1 = amounts_from_liquidity(liquidity, current_price, price_lower, price_upper)

    # 부동소수점 오차로 제공량을 살짝 넘는 경우 제공량으로 자름
    used0 = min(used0, amount0)
    used1 = min(used1, amount1)

    return DepositQuote(
        liquidity=liquidity,
        amount0=used0,
        amount1=used1,
        refund0=amount0 - used0,
        refund1=amount1 - used1,
    )


def position_amounts(position, current_tick: int) -> Tuple[float, float]:
    """포지션이 현재 틱에서 보유한 토큰 수량 (raw 단위)

    Args:
        position: Position (tick_lower, tick_upper, liquidity)
        current_tick: 현재 풀 틱

    Returns:
        (amount0, amount1) 튜플
    """
    validate_tick_range(position.tick_lower, position.tick_upper)

    sqrt_p = tick_to_sqrt_price(current_tick)
    sqrt_a = tick_to_sqrt_price(position.tick_lower)
    sqrt_b = tick_to_sqrt_price(position.tick_upper)
    liquidity = float(position.liquidity)

    if current_tick < position.tick_lower:
        return get_amount0_delta(sqrt_a, sqrt_b, liquidity), 0.0
    elif current_tick < position.tick_upper:
        return (
            get_amount0_delta(sqrt_p, sqrt_b, liquidity),
            get_amount1_delta(sqrt_a, sqrt_p, liquidity),
        )
    else:
        return 0.0, get_amount1_delta(sqrt_a, sqrt_b, liquidity)
