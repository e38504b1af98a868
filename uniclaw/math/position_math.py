"""
Position Math - 포지션 라이프사이클

deposit / increase / decrease / collect 시 포지션 상태 전이.
모든 함수는 입력 포지션을 변경하지 않고 새 Position을 반환합니다.

    1. 건드릴 때마다 fee growth inside 체크포인트를 갱신하고
       그 사이 수수료를 tokens_owed로 이동 (accrue)
    2. tokens_owed는 collect 전까지 단조 증가
    3. 유동성 0 + tokens_owed 0 이면 종료된 포지션
"""

from dataclasses import replace
from typing import Optional, Tuple

from ..errors import InputValidationError
from .fee_math import fees_owed, calculate_position_fees
from .liquidity_math import position_amounts


def accrue_fees(position, fee_growth_inside_0: int, fee_growth_inside_1: int):
    """fee growth inside 체크포인트 갱신

    Args:
        position: Position
        fee_growth_inside_0: 현재 범위 내 fee growth token0 (f_r,0(t_1))
        fee_growth_inside_1: 현재 범위 내 fee growth token1 (f_r,1(t_1))

    Returns:
        tokens_owed에 수수료가 적립되고 스냅샷이 갱신된 새 Position
    """
    earned_0 = fees_owed(position.liquidity, fee_growth_inside_0, position.fee_growth_inside_0_last_x128)
    earned_1 = fees_owed(position.liquidity, fee_growth_inside_1, position.fee_growth_inside_1_last_x128)

    return replace(
        position,
        fee_growth_inside_0_last_x128=fee_growth_inside_0,
        fee_growth_inside_1_last_x128=fee_growth_inside_1,
        tokens_owed_0=position.tokens_owed_0 + earned_0,
        tokens_owed_1=position.tokens_owed_1 + earned_1,
    )


def accrue_from_snapshot(position, pool, lower_tick, upper_tick):
    """풀 / 틱 스냅샷으로 fee growth inside를 계산해 accrue_fees 적용"""
    result = calculate_position_fees(position, pool, lower_tick, upper_tick)
    return accrue_fees(position, result.fee_growth_inside_0, result.fee_growth_inside_1)


def increase_liquidity(
    position,
    liquidity_delta: int,
    fee_growth_inside_0: int,
    fee_growth_inside_1: int
):
    """유동성 추가 (기존 유동성의 수수료를 먼저 적립)"""
    if liquidity_delta <= 0:
        raise InputValidationError(f"추가 유동성은 양수여야 합니다: {liquidity_delta}")

    accrued = accrue_fees(position, fee_growth_inside_0, fee_growth_inside_1)
    return replace(accrued, liquidity=accrued.liquidity + liquidity_delta)


def decrease_liquidity(
    position,
    liquidity_delta: int,
    fee_growth_inside_0: int,
    fee_growth_inside_1: int,
    current_tick: int
) -> Tuple[object, float, float]:
    """유동성 제거

    Returns:
        (새 Position, 반환되는 원금 token0, 반환되는 원금 token1)

    Raises:
        InputValidationError: 제거량이 0 이하이거나 보유 유동성보다 큰 경우
    """
    if liquidity_delta <= 0:
        raise InputValidationError(f"제거 유동성은 양수여야 합니다: {liquidity_delta}")
    if liquidity_delta > position.liquidity:
        raise InputValidationError(
            f"제거 유동성이 보유 유동성보다 큽니다: {liquidity_delta} > {position.liquidity}"
        )

    accrued = accrue_fees(position, fee_growth_inside_0, fee_growth_inside_1)
    released = replace(accrued, liquidity=liquidity_delta)
    amount0, amount1 = position_amounts(released, current_tick)

    return replace(accrued, liquidity=accrued.liquidity - liquidity_delta), amount0, amount1


def collect_fees(
    position,
    amount0_requested: Optional[int] = None,
    amount1_requested: Optional[int] = None
) -> Tuple[object, int, int]:
    """적립된 수수료 수령

    요청량이 None이면 전액. 요청량이 적립액보다 크면 적립액만 수령합니다.

    Returns:
        (새 Position, 수령 token0, 수령 token1)
    """
    for requested in (amount0_requested, amount1_requested):
        if requested is not None and requested < 0:
            raise InputValidationError(f"수령 요청량은 음수일 수 없습니다: {requested}")

    collect_0 = position.tokens_owed_0 if amount0_requested is None \
        else min(amount0_requested, position.tokens_owed_0)
    collect_1 = position.tokens_owed_1 if amount1_requested is None \
        else min(amount1_requested, position.tokens_owed_1)

    updated = replace(
        position,
        tokens_owed_0=position.tokens_owed_0 - collect_0,
        tokens_owed_1=position.tokens_owed_1 - collect_1,
    )
    return updated, collect_0, collect_1
