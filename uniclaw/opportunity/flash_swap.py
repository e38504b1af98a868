"""
Flash Swap - 플래시 스왑 수익성 판정

풀에서 빌린 자금을 같은 트랜잭션 안에서 사용하고 상환합니다.
상환에 실패하면 트랜잭션 전체가 되돌려집니다.
차입 수수료 = 차입 금액 × 풀 수수료율

    net_profit              = gross_profit - borrow_fee - gas_cost
    min_spread_to_breakeven = (borrow_fee + gas_cost) / borrowed_amount
"""

import logging
from dataclasses import dataclass
from typing import Union

from ..errors import InputValidationError, UNDEFINED, UndefinedResult
from ..safety.operation import CandidateOperation, OperationType

logger = logging.getLogger(__name__)

VIABLE = "VIABLE"
COSTS_EXCEED_PROFIT = "COSTS_EXCEED_PROFIT"


@dataclass(frozen=True)
class FlashSwapResult:
    """플래시 스왑 평가 결과 (비용 내역 포함)"""
    borrowed_amount: float
    gross_profit: float
    borrow_fee: float
    gas_cost: float
    net_profit: float
    min_spread_to_breakeven: Union[float, UndefinedResult]
    viable: bool
    reason: str

    def to_operation(self, slippage_pct: float, capital_at_risk_usd: float = 0.0) -> CandidateOperation:
        """CandidateOperation으로 변환

        차입 자금은 원자적으로 상환되므로 호출자가 직접 넣는 자본
        (담보, 선납 가스)만 capital_at_risk로 봅니다.
        """
        return CandidateOperation(
            op_type=OperationType.FLASH_SWAP,
            capital_at_risk_usd=capital_at_risk_usd,
            expected_profit_usd=self.gross_profit - self.borrow_fee,
            gas_estimate_usd=self.gas_cost,
            slippage_pct=slippage_pct,
            is_atomic=True,
        )


def evaluate_flash_swap(
    borrowed_amount: float,
    gross_profit: float,
    borrow_fee_rate: float,
    gas_cost: float,
) -> FlashSwapResult:
    """플래시 스왑 평가

    Args:
        borrowed_amount: 차입 금액 (USD)
        gross_profit: 차입 자금으로 얻는 수익 (수수료, 가스 차감 전)
        borrow_fee_rate: 차입 수수료율 (0.0005 = 0.05%)
        gas_cost: 가스 비용 (USD)

    Returns:
        FlashSwapResult (차입 금액이 0이면 min_spread_to_breakeven은 UNDEFINED)
    """
    if borrowed_amount < 0:
        raise InputValidationError(f"차입 금액은 음수일 수 없습니다: {borrowed_amount}")
    if not 0 <= borrow_fee_rate < 1:
        raise InputValidationError(f"차입 수수료율은 [0, 1) 범위여야 합니다: {borrow_fee_rate}")
    if gas_cost < 0:
        raise InputValidationError(f"가스 비용은 음수일 수 없습니다: {gas_cost}")

    borrow_fee = borrowed_amount * borrow_fee_rate
    net = gross_profit - borrow_fee - gas_cost
    breakeven = (borrow_fee + gas_cost) / borrowed_amount if borrowed_amount > 0 else UNDEFINED

    viable = net > 0
    result = FlashSwapResult(
        borrowed_amount=borrowed_amount,
        gross_profit=gross_profit,
        borrow_fee=borrow_fee,
        gas_cost=gas_cost,
        net_profit=net,
        min_spread_to_breakeven=breakeven,
        viable=viable,
        reason=VIABLE if viable else COSTS_EXCEED_PROFIT,
    )
    logger.debug(
        f"Flash swap borrow=${borrowed_amount:.2f}: fee=${borrow_fee:.2f}, gas=${gas_cost:.2f}, "
        f"net=${net:.2f} ({result.reason})"
    )
    return result
