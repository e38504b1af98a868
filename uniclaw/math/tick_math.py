"""
Tick Math - Tick ↔ Price 변환

집중화된 유동성의 틱 수학 함수들.

핵심 공식:
    price = 1.0001^tick
    tick = floor(log₁.₀₀₀₁(price))
    sqrtPrice = 1.0001^(tick/2)

거듭제곱은 exp(tick × ln 1.0001)로 계산하여 |tick| ≈ 887272 근처에서도
오버플로우 없이 안정적입니다.
"""

import math
from typing import Optional, Tuple

from ..constants import MIN_TICK, MAX_TICK, TICK_SPACINGS, LOG_TICK_BASE
from ..errors import InputValidationError, InvalidTickRange


SNAP_DIRECTIONS = ("nearest", "floor", "ceil")


def tick_to_price(tick: int, token0_decimals: int = 0, token1_decimals: int = 0) -> float:
    """틱을 가격으로 변환

    price = 1.0001^tick × 10^(token0_decimals - token1_decimals)

    Args:
        tick: 틱 인덱스
        token0_decimals: token0 소수점 자릿수 (예: WETH = 18)
        token1_decimals: token1 소수점 자릿수 (예: USDC = 6)

    Returns:
        가격 (token1/token0)
    """
    ratio = math.exp(tick * LOG_TICK_BASE)
    if token0_decimals == token1_decimals:
        return ratio
    return ratio * (10 ** (token0_decimals - token1_decimals))


def price_to_tick(price: float, token0_decimals: int = 0, token1_decimals: int = 0) -> int:
    """가격을 틱으로 변환 (항상 내림)

    tick = floor(log₁.₀₀₀₁(price × 10^(token1_decimals - token0_decimals)))

    정확히 틱 경계에 있는 가격은 부동소수점 오차로 한 칸 아래로 떨어질 수 있어
    인접 틱의 가격과 비교해 보정합니다.

    Raises:
        InputValidationError: 가격이 양수가 아니거나 틱 범위를 벗어나는 경우
    """
    if not (price > 0 and math.isfinite(price)):
        raise InputValidationError(f"가격은 유한한 양수여야 합니다: {price}")

    ratio = price * (10 ** (token1_decimals - token0_decimals))
    if not (ratio > 0 and math.isfinite(ratio)):
        raise InputValidationError(f"가격이 틱 범위를 벗어났습니다: {price}")
    tick = math.floor(math.log(ratio) / LOG_TICK_BASE)

    if tick_to_price(tick + 1) <= ratio:
        tick += 1
    elif tick_to_price(tick) > ratio:
        tick -= 1

    if tick < MIN_TICK or tick > MAX_TICK:
        raise InputValidationError(
            f"가격이 틱 범위를 벗어났습니다: {price} (tick {tick}, 범위: {MIN_TICK} ~ {MAX_TICK})"
        )
    return tick


def tick_to_sqrt_price(tick: int) -> float:
    """틱에서 sqrtPrice 계산: 1.0001^(tick/2)"""
    return math.exp(tick * LOG_TICK_BASE / 2)


def snap_tick_to_spacing(tick: int, tick_spacing: int, direction: str = "nearest") -> int:
    """틱을 유효한 틱 간격으로 정렬

    Args:
        tick: 정렬할 틱
        tick_spacing: 틱 간격 (예: 60 for 0.3% fee)
        direction: "nearest" (같은 거리면 올림), "floor", "ceil"

    Returns:
        정렬된 틱. 전역 범위 밖으로 나가면 한 간격 안쪽으로 당깁니다.
    """
    if tick_spacing <= 0:
        raise InputValidationError(f"틱 간격은 양수여야 합니다: {tick_spacing}")
    if direction not in SNAP_DIRECTIONS:
        raise InputValidationError(
            f"지원하지 않는 정렬 방향: {direction} (지원: {', '.join(SNAP_DIRECTIONS)})"
        )

    # Python의 floor division은 음수에서도 -inf 방향
    lower = (tick // tick_spacing) * tick_spacing
    upper = lower if lower == tick else lower + tick_spacing

    if direction == "floor":
        snapped = lower
    elif direction == "ceil":
        snapped = upper
    else:
        snapped = lower if abs(tick - lower) < abs(tick - upper) else upper

    if snapped < MIN_TICK:
        snapped += tick_spacing
    elif snapped > MAX_TICK:
        snapped -= tick_spacing
    return snapped


def get_tick_spacing_for_fee(fee_tier: int) -> int:
    """수수료 티어에 해당하는 틱 간격 반환

    Args:
        fee_tier: 수수료 티어 (100, 500, 3000, 10000)
    """
    if fee_tier not in TICK_SPACINGS:
        raise InputValidationError(f"지원하지 않는 수수료 티어: {fee_tier}")
    return TICK_SPACINGS[fee_tier]


def validate_tick_range(
    tick_lower: int,
    tick_upper: int,
    tick_spacing: Optional[int] = None
) -> None:
    """틱 범위 검증

    Raises:
        InvalidTickRange: tick_upper <= tick_lower, 전역 범위 초과,
            또는 tick_spacing이 주어졌을 때 간격 미정렬
    """
    if tick_upper <= tick_lower:
        raise InvalidTickRange(
            f"tick_upper는 tick_lower보다 커야 합니다: [{tick_lower}, {tick_upper}]"
        )
    if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
        raise InvalidTickRange(
            f"틱이 유효 범위를 벗어났습니다: [{tick_lower}, {tick_upper}] "
            f"(범위: {MIN_TICK} ~ {MAX_TICK})"
        )
    if tick_spacing is not None:
        if tick_lower % tick_spacing != 0 or tick_upper % tick_spacing != 0:
            raise InvalidTickRange(
                f"틱이 간격 {tick_spacing}의 배수가 아닙니다: [{tick_lower}, {tick_upper}]"
            )


def price_range_to_ticks(
    price_lower: float,
    price_upper: float,
    tick_spacing: int,
    token0_decimals: int = 0,
    token1_decimals: int = 0
) -> Tuple[int, int]:
    """가격 범위를 간격에 맞는 (tick_lower, tick_upper)로 변환

    하한은 floor, 상한은 ceil로 정렬하여 요청한 가격 범위를 포함합니다.
    """
    if price_upper <= price_lower:
        raise InvalidTickRange(
            f"price_upper는 price_lower보다 커야 합니다: [{price_lower}, {price_upper}]"
        )

    tick_lower = snap_tick_to_spacing(
        price_to_tick(price_lower, token0_decimals, token1_decimals), tick_spacing, "floor"
    )
    raw_upper = price_to_tick(price_upper, token0_decimals, token1_decimals)
    # price_to_tick은 내림이므로 경계 위의 가격은 한 틱 더 올려야 포함됨
    if tick_to_price(raw_upper, token0_decimals, token1_decimals) < price_upper:
        raw_upper += 1
    tick_upper = snap_tick_to_spacing(raw_upper, tick_spacing, "ceil")

    if tick_upper <= tick_lower:
        tick_upper = tick_lower + tick_spacing

    validate_tick_range(tick_lower, tick_upper, tick_spacing)
    return tick_lower, tick_upper
