"""
Fee Math - 백서 기반 수수료 계산

백서 Section 6.3, 6.4의 fee growth 공식.

References:
- 백서 Section 6.3: Tick-Indexed State (feeGrowthOutside)
- 백서 Section 6.4.1: Position-Indexed State (uncollected fees)

핵심 공식:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)     # 틱 i 위 수수료
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # 틱 i 아래 수수료
    f_r = f_g - f_b(i_l) - f_a(i_u)                     # 범위 내 수수료
    f_u = l × (f_r(t_1) - f_r(t_0))                     # 미수령 수수료

모든 뺄셈은 2^256 모듈러 연산입니다. 누산기가 랩어라운드해도 음수 fee growth로
해석되지 않습니다. 한 번의 계산에 들어가는 값들은 같은 블록의 스냅샷이어야 합니다.
"""

from typing import NamedTuple, Union

from ..constants import Q128, FEE_GROWTH_MODULUS, FEE_DENOMINATOR
from ..errors import InputValidationError, UNDEFINED, UndefinedResult
from .tick_math import validate_tick_range


class FeeCalculationResult(NamedTuple):
    """수수료 계산 결과"""
    uncollected_fees_0: int  # token0 미수령 수수료 (tokens_owed 포함, 최소 단위)
    uncollected_fees_1: int  # token1 미수령 수수료 (tokens_owed 포함, 최소 단위)
    fee_growth_inside_0: int  # 현재 범위 내 fee growth token0
    fee_growth_inside_1: int  # 현재 범위 내 fee growth token1


def _wrap(value: int) -> int:
    return value % FEE_GROWTH_MODULUS


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 위에서 발생한 수수료 성장률 (f_a)

    백서 Section 6.3 공식:
        f_a(i) = f_g - f_o(i)  if i_c >= i
        f_a(i) = f_o(i)        if i_c < i
    """
    if current_tick >= tick_idx:
        return _wrap(fee_growth_global - fee_growth_outside)
    else:
        return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 아래에서 발생한 수수료 성장률 (f_b)

    백서 Section 6.3 공식:
        f_b(i) = f_o(i)        if i_c >= i
        f_b(i) = f_g - f_o(i)  if i_c < i
    """
    if current_tick >= tick_idx:
        return fee_growth_outside
    else:
        return _wrap(fee_growth_global - fee_growth_outside)


def fee_growth_inside(
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int,
    current_tick: int,
    tick_lower: int,
    tick_upper: int
) -> int:
    """범위 내 fee growth 계산 (f_r)

    백서 Section 6.3 공식:
        f_r = f_g - f_b(i_l) - f_a(i_u)

    Args:
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside_lower: 하한 틱의 fee growth outside (f_o(i_l))
        fee_growth_outside_upper: 상한 틱의 fee growth outside (f_o(i_u))
        current_tick: 현재 틱 (i_c)
        tick_lower: 하한 틱 (i_l)
        tick_upper: 상한 틱 (i_u)

    Returns:
        범위 내 fee growth (f_r), [0, 2^256) 구간

    Raises:
        InvalidTickRange: tick_upper <= tick_lower
    """
    validate_tick_range(tick_lower, tick_upper)
    for name, value in (
        ("fee_growth_global", fee_growth_global),
        ("fee_growth_outside_lower", fee_growth_outside_lower),
        ("fee_growth_outside_upper", fee_growth_outside_upper),
    ):
        if value < 0:
            raise InputValidationError(f"{name}은 음수일 수 없습니다: {value}")

    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)

    # Solidity unchecked 블록의 uint256 랩어라운드와 동일
    return _wrap(fee_growth_global - f_b - f_a)


def fee_growth_delta(fee_growth_current: int, fee_growth_previous: int) -> int:
    """두 시점 간 fee growth 변화량 (uint256 랩어라운드 고려)"""
    return _wrap(fee_growth_current - fee_growth_previous)


def fees_owed(
    liquidity: int,
    fee_growth_inside_now: int,
    fee_growth_inside_last: int
) -> int:
    """미수령 수수료 계산 (f_u)

    백서 Section 6.4.1 공식:
        f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128

    Args:
        liquidity: 포지션 유동성 (l)
        fee_growth_inside_now: 현재 범위 내 fee growth (f_r(t_1))
        fee_growth_inside_last: 마지막 업데이트 시 fee growth (f_r(t_0))

    Returns:
        미수령 수수료 (토큰 최소 단위, 내림)
    """
    if liquidity < 0:
        raise InputValidationError(f"유동성은 음수일 수 없습니다: {liquidity}")

    delta = fee_growth_delta(fee_growth_inside_now, fee_growth_inside_last)
    return liquidity * delta // Q128


def calculate_position_fees(position, pool, lower_tick, upper_tick) -> FeeCalculationResult:
    """포지션의 두 토큰 미수령 수수료 계산

    백서 Section 6.3, 6.4의 전체 수수료 계산 파이프라인.

    필수 데이터:
    - Pool: f_g,0, f_g,1, i_c
    - Lower tick: f_o,0(i_l), f_o,1(i_l)
    - Upper tick: f_o,0(i_u), f_o,1(i_u)
    - Position: l, f_r,0(t_0), f_r,1(t_0), tokens_owed

    Args:
        position: Position
        pool: PoolSnapshot (같은 블록)
        lower_tick: position.tick_lower의 TickSnapshot
        upper_tick: position.tick_upper의 TickSnapshot

    Returns:
        FeeCalculationResult: 미수령 수수료 및 현재 fee growth inside
    """
    if lower_tick.tick_idx != position.tick_lower or upper_tick.tick_idx != position.tick_upper:
        raise InputValidationError(
            f"틱 스냅샷이 포지션 범위와 맞지 않습니다: "
            f"[{lower_tick.tick_idx}, {upper_tick.tick_idx}] vs "
            f"[{position.tick_lower}, {position.tick_upper}]"
        )

    # Step 1: 현재 범위 내 fee growth 계산 (f_r(t_1))
    inside_0 = fee_growth_inside(
        pool.fee_growth_global_0_x128,
        lower_tick.fee_growth_outside_0_x128,
        upper_tick.fee_growth_outside_0_x128,
        pool.tick, position.tick_lower, position.tick_upper
    )
    inside_1 = fee_growth_inside(
        pool.fee_growth_global_1_x128,
        lower_tick.fee_growth_outside_1_x128,
        upper_tick.fee_growth_outside_1_x128,
        pool.tick, position.tick_lower, position.tick_upper
    )

    # Step 2: 미수령 수수료 계산 (f_u) + 이미 적립된 tokens_owed
    owed_0 = position.tokens_owed_0 + fees_owed(
        position.liquidity, inside_0, position.fee_growth_inside_0_last_x128
    )
    owed_1 = position.tokens_owed_1 + fees_owed(
        position.liquidity, inside_1, position.fee_growth_inside_1_last_x128
    )

    return FeeCalculationResult(
        uncollected_fees_0=owed_0,
        uncollected_fees_1=owed_1,
        fee_growth_inside_0=inside_0,
        fee_growth_inside_1=inside_1
    )


def decode_fee_growth(fee_growth_x128: int, decimals: int = 18) -> float:
    """Q128 인코딩된 fee growth를 토큰 단위 값으로 변환"""
    return fee_growth_x128 / Q128 / (10 ** decimals)


def liquidity_share(
    position_liquidity: int,
    active_liquidity: int,
    in_range: bool = True
) -> Union[float, UndefinedResult]:
    """활성 유동성 중 포지션 비율 (raw 유동성 단위)

    수수료는 활성 유동성 L에 비례해 분배되므로 USD 자본이 아닌
    raw 유동성으로 비율을 계산합니다. 범위 밖이면 0.

    Returns:
        비율 [0, 1], 활성 유동성이 0이면 UNDEFINED
    """
    if not in_range:
        return 0.0
    if active_liquidity <= 0:
        return UNDEFINED
    return min(position_liquidity / active_liquidity, 1.0)


def estimate_position_fees_24h(pool, position) -> Union[float, UndefinedResult]:
    """24시간 거래량 기준 포지션 예상 수수료 (USD)

    fees = volume_24h × fee_rate × (L_position / L_active)

    범위 밖 포지션은 0. 풀 활성 유동성이 0이거나 거래량 데이터가 없으면 UNDEFINED.
    """
    if pool.volume_usd_24h is None:
        return UNDEFINED

    in_range = position.tick_lower <= pool.tick < position.tick_upper
    share = liquidity_share(position.liquidity, pool.liquidity, in_range)
    if share is UNDEFINED:
        return UNDEFINED

    fee_rate = pool.fee_tier / FEE_DENOMINATOR
    return pool.volume_usd_24h * fee_rate * share


def fee_apr(fee_income_usd: float, position_value_usd: float, days: float) -> Union[float, UndefinedResult]:
    """수수료 연환산 수익률 (APR, 비율)"""
    if position_value_usd <= 0 or days <= 0:
        return UNDEFINED
    return fee_income_usd / position_value_usd * (365.0 / days)
