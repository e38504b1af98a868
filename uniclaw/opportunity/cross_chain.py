"""
Cross-Chain Cost - 브릿지 이동 비용 판정

    total_cost     = bridge_fee + source_gas + dest_gas + source_slippage + dest_slippage
    total_cost_pct = total_cost / amount × 100

    arb_viable       : total_cost_pct < 0.5%
    rebalance_viable : total_cost_pct < 2.0%

브릿지 수수료 표는 설정에서 주입합니다 (bridge -> BridgeFee 또는 수수료 %).
"""

import logging
from dataclasses import dataclass
from typing import Mapping, NamedTuple, Union

from ..constants import CROSS_CHAIN_ARB_MAX_COST_PCT, CROSS_CHAIN_REBALANCE_MAX_COST_PCT
from ..errors import InputValidationError
from ..safety.operation import CandidateOperation, OperationType

logger = logging.getLogger(__name__)


class BridgeFee(NamedTuple):
    """브릿지 수수료: 금액 대비 %(fee_pct) + 고정 USD(fixed_usd)"""
    fee_pct: float
    fixed_usd: float = 0.0


@dataclass(frozen=True)
class CrossChainCost:
    """크로스체인 이동 비용 내역 (USD)"""
    amount_usd: float
    bridge: str
    bridge_fee_usd: float
    source_gas_usd: float
    dest_gas_usd: float
    source_slippage_usd: float
    dest_slippage_usd: float
    total_cost_usd: float
    total_cost_pct: float
    arb_viable: bool
    rebalance_viable: bool

    def to_operation(self, expected_profit_usd: float) -> CandidateOperation:
        """브릿지 이동을 CandidateOperation으로 변환 (비원자적)

        가스를 제외한 비용은 expected_profit에서 차감합니다.
        """
        gas = self.source_gas_usd + self.dest_gas_usd
        non_gas_cost = self.total_cost_usd - gas
        return CandidateOperation(
            op_type=OperationType.CROSS_CHAIN_TRANSFER,
            capital_at_risk_usd=self.amount_usd,
            expected_profit_usd=expected_profit_usd - non_gas_cost,
            gas_estimate_usd=gas,
            slippage_pct=(self.source_slippage_usd + self.dest_slippage_usd) / self.amount_usd * 100,
            is_atomic=False,
        )


def _as_bridge_fee(value) -> BridgeFee:
    if isinstance(value, BridgeFee):
        return value
    if isinstance(value, Mapping):
        return BridgeFee(float(value.get("fee_pct", 0.0)), float(value.get("fixed_usd", 0.0)))
    return BridgeFee(float(value))


def estimate_cross_chain_cost(
    amount_usd: float,
    bridge: str,
    source_gas_usd: float,
    dest_gas_usd: float,
    source_slippage_pct: float,
    dest_slippage_pct: float,
    bridge_fees: Mapping[str, Union[BridgeFee, float]],
) -> CrossChainCost:
    """브릿지 이동의 총 비용 계산

    Args:
        amount_usd: 이동 금액 (USD)
        bridge: 브릿지 이름 (대소문자 무관)
        source_gas_usd: 출발 체인 가스 비용
        dest_gas_usd: 도착 체인 가스 비용
        source_slippage_pct: 출발 체인 스왑 슬리피지 (%)
        dest_slippage_pct: 도착 체인 스왑 슬리피지 (%)
        bridge_fees: 브릿지 수수료 표 (load_config().bridge_fees)

    Returns:
        CrossChainCost

    Raises:
        InputValidationError: 금액이 양수가 아니거나 알 수 없는 브릿지인 경우
    """
    if amount_usd <= 0:
        raise InputValidationError(f"이동 금액은 양수여야 합니다: {amount_usd}")
    for name, value in (
        ("source_gas_usd", source_gas_usd),
        ("dest_gas_usd", dest_gas_usd),
        ("source_slippage_pct", source_slippage_pct),
        ("dest_slippage_pct", dest_slippage_pct),
    ):
        if value < 0:
            raise InputValidationError(f"{name}는 음수일 수 없습니다: {value}")

    table = {str(k).lower(): v for k, v in bridge_fees.items()}
    key = str(bridge).lower()
    if key not in table:
        raise InputValidationError(
            f"알 수 없는 브릿지: {bridge!r} (지원: {', '.join(sorted(table))})"
        )
    fee = _as_bridge_fee(table[key])

    bridge_fee = amount_usd * fee.fee_pct / 100 + fee.fixed_usd
    source_slippage = amount_usd * source_slippage_pct / 100
    dest_slippage = amount_usd * dest_slippage_pct / 100
    total = bridge_fee + source_gas_usd + dest_gas_usd + source_slippage + dest_slippage
    total_pct = total / amount_usd * 100

    result = CrossChainCost(
        amount_usd=amount_usd,
        bridge=key,
        bridge_fee_usd=bridge_fee,
        source_gas_usd=source_gas_usd,
        dest_gas_usd=dest_gas_usd,
        source_slippage_usd=source_slippage,
        dest_slippage_usd=dest_slippage,
        total_cost_usd=total,
        total_cost_pct=total_pct,
        arb_viable=total_pct < CROSS_CHAIN_ARB_MAX_COST_PCT,
        rebalance_viable=total_pct < CROSS_CHAIN_REBALANCE_MAX_COST_PCT,
    )
    logger.debug(
        f"Cross-chain {key} ${amount_usd:,.0f}: cost=${total:.2f} ({total_pct:.3f}%), "
        f"arb={result.arb_viable}, rebalance={result.rebalance_viable}"
    )
    return result
