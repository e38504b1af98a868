"""
Tick Gap Analysis - 유동성 공백 구간 탐지

초기화된 틱을 오름차순 정렬(O(n log n))한 뒤 liquidityNet 누적합으로
각 구간의 활성 유동성을 구하고(O(n)), 폭이 넓고 유동성이 얇은 구간을 gap으로 표시합니다.

    구간 [t_i, t_{i+1}) 의 활성 유동성 = Σ_{j<=i} liquidityNet(t_j)
    gap 조건: (t_{i+1} - t_i) > min_gap_ticks  and  유동성 < liquidity_threshold
    저항도:   유동성 < low_resistance_threshold 이면 LOW, 아니면 MEDIUM

결과는 폭 내림차순(같으면 하한 틱 오름차순)으로 정렬되어 입력 순서와 무관합니다.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

import numpy as np

from ..errors import InputValidationError
from ..math.tick_math import tick_to_price

logger = logging.getLogger(__name__)

RESISTANCE_LOW = "LOW"
RESISTANCE_MEDIUM = "MEDIUM"

VIABLE = "VIABLE"
PRICE_OUTSIDE_GAP = "PRICE_OUTSIDE_GAP"
NET_SPREAD_NOT_POSITIVE = "NET_SPREAD_NOT_POSITIVE"
NO_GAP_LIQUIDITY = "NO_GAP_LIQUIDITY"


@dataclass(frozen=True)
class TickGap:
    """유동성 공백 구간 (분석 1회 동안만 유효한 읽기 전용 뷰)"""
    tick_lower: int
    tick_upper: int
    width: int
    liquidity: int
    resistance: str
    price_lower: float
    price_upper: float


@dataclass(frozen=True)
class GapArbScore:
    """gap 차익거래 점수

    estimated_profit은 gap 유동성 × 가격 × net spread의 근사치이며
    유동성 곡선의 정확한 적분이 아닙니다.
    """
    exists: bool
    external_price: float
    pool_price: float
    spread: float
    net_spread: float
    estimated_profit: float
    viable: bool
    reason: str
    approximate: bool = True


def analyse_tick_gaps(
    ticks: Iterable,
    min_gap_ticks: int,
    liquidity_threshold: int,
    low_resistance_threshold: int,
    token0_decimals: int = 0,
    token1_decimals: int = 0
) -> List[TickGap]:
    """틱 스냅샷에서 유동성 공백 구간 탐지

    Args:
        ticks: Tick 스냅샷 목록 (정렬 여부 무관)
        min_gap_ticks: 이 틱 수를 초과하는 폭만 gap으로 인정
        liquidity_threshold: 이 값 미만의 활성 유동성만 gap으로 인정
        low_resistance_threshold: 이 값 미만이면 LOW 저항
        token0_decimals: 가격 표시용 token0 소수점
        token1_decimals: 가격 표시용 token1 소수점

    Returns:
        TickGap 목록 (폭 내림차순)

    Raises:
        InputValidationError: 틱 목록이 비었거나 중복 틱 인덱스가 있는 경우
    """
    ticks = list(ticks)
    if not ticks:
        raise InputValidationError("틱 목록이 비어 있습니다")
    if min_gap_ticks < 0:
        raise InputValidationError(f"min_gap_ticks는 음수일 수 없습니다: {min_gap_ticks}")
    if low_resistance_threshold > liquidity_threshold:
        raise InputValidationError(
            f"low_resistance_threshold({low_resistance_threshold})는 "
            f"liquidity_threshold({liquidity_threshold})보다 클 수 없습니다"
        )

    tick_idx = np.array([t.tick_idx for t in ticks], dtype=np.int64)
    order = np.argsort(tick_idx, kind="stable")
    sorted_idx = tick_idx[order]

    widths = np.diff(sorted_idx)
    if np.any(widths == 0):
        duplicated = sorted(set(sorted_idx[1:][widths == 0].tolist()))
        raise InputValidationError(f"중복된 틱 인덱스: {duplicated}")

    # liquidityNet은 uint128 범위라 int64를 넘을 수 있어 object(int)로 누적
    net = np.array([ticks[i].liquidity_net for i in order], dtype=object)
    active = np.cumsum(net)[:-1]

    is_wide = widths > min_gap_ticks
    is_thin = np.fromiter((liq < liquidity_threshold for liq in active), dtype=bool, count=len(active))

    gaps = []
    for i in np.flatnonzero(is_wide & is_thin):
        lower = int(sorted_idx[i])
        upper = int(sorted_idx[i + 1])
        liquidity = int(active[i])
        gaps.append(TickGap(
            tick_lower=lower,
            tick_upper=upper,
            width=upper - lower,
            liquidity=liquidity,
            resistance=RESISTANCE_LOW if liquidity < low_resistance_threshold else RESISTANCE_MEDIUM,
            price_lower=tick_to_price(lower, token0_decimals, token1_decimals),
            price_upper=tick_to_price(upper, token0_decimals, token1_decimals),
        ))

    gaps.sort(key=lambda g: (-g.width, g.tick_lower))
    logger.debug(f"Tick gap scan: {len(ticks)} ticks, {len(gaps)} gaps")
    return gaps


def score_tick_gap_arb(
    gap: TickGap,
    external_price: float,
    pool_price: float,
    fee_rate: float,
    liquidity_scale: float = 1e18
) -> GapArbScore:
    """외부 가격으로 gap 차익거래 점수 계산

    외부 가격이 gap 가격 구간 안(경계 제외)에 있을 때만 차익거래가 존재합니다.

    Args:
        gap: TickGap
        external_price: CEX 등 외부 기준 가격
        pool_price: 현재 풀 가격
        fee_rate: 풀 수수료율
        liquidity_scale: raw 유동성 → 토큰 단위 환산 계수

    Returns:
        GapArbScore
    """
    if external_price <= 0 or pool_price <= 0:
        raise InputValidationError(
            f"가격은 양수여야 합니다: external={external_price}, pool={pool_price}"
        )
    if liquidity_scale <= 0:
        raise InputValidationError(f"liquidity_scale은 양수여야 합니다: {liquidity_scale}")

    spread = abs(external_price - pool_price) / pool_price
    net_spread = spread - fee_rate
    exists = gap.price_lower < external_price < gap.price_upper

    if not exists:
        return GapArbScore(
            exists=False, external_price=external_price, pool_price=pool_price,
            spread=spread, net_spread=net_spread, estimated_profit=0.0,
            viable=False, reason=PRICE_OUTSIDE_GAP,
        )

    if net_spread <= 0:
        return GapArbScore(
            exists=True, external_price=external_price, pool_price=pool_price,
            spread=spread, net_spread=net_spread, estimated_profit=0.0,
            viable=False, reason=NET_SPREAD_NOT_POSITIVE,
        )

    # TODO: gap 유동성 곡선 적분으로 교체 (백테스트로 보정 필요)
    estimated_profit = gap.liquidity / liquidity_scale * external_price * net_spread

    return GapArbScore(
        exists=True, external_price=external_price, pool_price=pool_price,
        spread=spread, net_spread=net_spread, estimated_profit=estimated_profit,
        viable=estimated_profit > 0, reason=VIABLE if estimated_profit > 0 else NO_GAP_LIQUIDITY,
    )
