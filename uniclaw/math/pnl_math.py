"""
PnL Math - 수익 분해

LP 포지션의 총 수익을 네 가지 요소로 분해합니다:
    - fee_income: 수수료 수익
    - price_return: 포지션 가치 변화 (close - entry)
    - il: HODL 대비 손실 (close - hodl)
    - onl: 비교 전략(벤치마크) 대비 손실 (close + fees - benchmark)

판정: fee_income + il > 0 이면 BEAT_HODL (수수료가 IL을 상쇄)
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


class Fingerprint(str, Enum):
    BEAT_HODL = "BEAT_HODL"
    LOST_TO_HODL = "LOST_TO_HODL"


@dataclass(frozen=True)
class PnLBreakdown:
    """P&L 분해 결과 (USD)"""
    fee_income: float
    price_return: float
    il: float
    onl: float
    net_usd: float
    fingerprint: Fingerprint

    def to_dict(self) -> dict:
        data = asdict(self)
        data["fingerprint"] = self.fingerprint.value
        return data


def opportunity_loss(lp_total_value: float, benchmark_value: float) -> float:
    """Opportunity Notional Loss

    벤치마크(HODL, 렌딩 수익, 경쟁 전략)는 호출자가 선택합니다.
    음수 = LP 전략이 벤치마크보다 뒤처짐.
    """
    return lp_total_value - benchmark_value


def net_profit(
    entry_value: float,
    fee_income: float,
    close_value: float,
    hodl_value: Optional[float] = None,
    benchmark_value: Optional[float] = None
) -> PnLBreakdown:
    """포지션 P&L 분해

    Args:
        entry_value: 진입 시 포지션 가치
        fee_income: 기간 중 수수료 수익
        close_value: 종료 시 포지션 가치 (수수료 제외)
        hodl_value: 진입 토큰을 그대로 보유했을 때 종료 시 가치 (기본: entry_value)
        benchmark_value: 비교 전략의 종료 시 가치 (기본: hodl_value)

    Returns:
        PnLBreakdown
    """
    if hodl_value is None:
        hodl_value = entry_value
    if benchmark_value is None:
        benchmark_value = hodl_value

    price_return = close_value - entry_value
    il = close_value - hodl_value
    onl = opportunity_loss(close_value + fee_income, benchmark_value)

    fingerprint = Fingerprint.BEAT_HODL if fee_income + il > 0 else Fingerprint.LOST_TO_HODL

    return PnLBreakdown(
        fee_income=fee_income,
        price_return=price_return,
        il=il,
        onl=onl,
        net_usd=price_return + fee_income,
        fingerprint=fingerprint,
    )
