"""
Arbitrage Evaluators - 두 풀 / 삼각 차익거래 판정

"수익 없음"은 오류가 아니라 viable=False + reason 코드가 붙은 반환값입니다.
잘못된 입력(음수 가격, 닫히지 않은 경로 등)만 InputValidationError를 발생시킵니다.

핵심 공식:
    spread     = (P_high - P_low) / P_low
    net_spread = spread - fee_buy - fee_sell
    viable     = net_spread > 0 and gross_profit - gas > 0
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Mapping, NamedTuple, Optional, Sequence, Tuple

from ..errors import InputValidationError
from ..safety.operation import CandidateOperation, OperationType

logger = logging.getLogger(__name__)

VIABLE = "VIABLE"
NET_SPREAD_NOT_POSITIVE = "NET_SPREAD_NOT_POSITIVE"
GAS_EXCEEDS_PROFIT = "GAS_EXCEEDS_PROFIT"
NO_PATH = "NO_PATH"
NOT_PROFITABLE = "NOT_PROFITABLE"


def _check_fee(name: str, fee: float) -> None:
    if not 0 <= fee < 1:
        raise InputValidationError(f"{name}는 [0, 1) 범위여야 합니다: {fee}")


# ==============================================================================
# 두 풀 차익거래
# ==============================================================================

@dataclass(frozen=True)
class TwoPoolArb:
    """두 풀 차익거래 평가 결과 (A에서 매수, B에서 매도)"""
    buy_price: float
    sell_price: float
    fee_buy: float
    fee_sell: float
    spread: float
    net_spread: float
    trade_size_usd: float
    gross_profit_usd: float
    gas_cost_usd: float
    net_profit_usd: float
    viable: bool
    reason: str
    direction: str = "A->B"

    def to_operation(self, slippage_pct: float, is_atomic: bool = True) -> CandidateOperation:
        """SafetyGate에 넣을 CandidateOperation으로 변환"""
        return CandidateOperation(
            op_type=OperationType.ARB,
            capital_at_risk_usd=self.trade_size_usd,
            expected_profit_usd=self.gross_profit_usd,
            gas_estimate_usd=self.gas_cost_usd,
            slippage_pct=slippage_pct,
            is_atomic=is_atomic,
        )


def find_two_pool_arb(
    price_a: float,
    price_b: float,
    fee_a: float,
    fee_b: float,
    trade_size_usd: float,
    gas_cost_usd: float = 0.0
) -> Optional[TwoPoolArb]:
    """A에서 매수 → B에서 매도 방향의 차익거래 평가

    방향은 고정입니다. price_b <= price_a 이면 이 방향에는 스프레드가 없으므로
    None을 반환합니다. 반대 방향은 인자를 바꿔 다시 호출하거나
    find_best_two_pool_arb를 사용하세요.

    Args:
        price_a: 풀 A 가격 (매수)
        price_b: 풀 B 가격 (매도)
        fee_a: 풀 A 수수료율 (0.0005 = 0.05%)
        fee_b: 풀 B 수수료율
        trade_size_usd: 거래 규모 (USD)
        gas_cost_usd: 가스 비용 (USD)

    Returns:
        TwoPoolArb 또는 None
    """
    if price_a <= 0 or price_b <= 0:
        raise InputValidationError(f"가격은 양수여야 합니다: A={price_a}, B={price_b}")
    _check_fee("fee_a", fee_a)
    _check_fee("fee_b", fee_b)
    if trade_size_usd <= 0:
        raise InputValidationError(f"거래 규모는 양수여야 합니다: {trade_size_usd}")
    if gas_cost_usd < 0:
        raise InputValidationError(f"가스 비용은 음수일 수 없습니다: {gas_cost_usd}")

    if price_b <= price_a:
        return None

    spread = (price_b - price_a) / price_a
    net_spread = spread - fee_a - fee_b
    gross_profit = trade_size_usd * net_spread
    net = gross_profit - gas_cost_usd

    if net_spread <= 0:
        reason = NET_SPREAD_NOT_POSITIVE
    elif net <= 0:
        reason = GAS_EXCEEDS_PROFIT
    else:
        reason = VIABLE

    result = TwoPoolArb(
        buy_price=price_a,
        sell_price=price_b,
        fee_buy=fee_a,
        fee_sell=fee_b,
        spread=spread,
        net_spread=net_spread,
        trade_size_usd=trade_size_usd,
        gross_profit_usd=gross_profit,
        gas_cost_usd=gas_cost_usd,
        net_profit_usd=net,
        viable=reason == VIABLE,
        reason=reason,
    )
    logger.debug(
        f"[ARB] two-pool {price_a} -> {price_b}: spread={spread:.4%}, "
        f"net_spread={net_spread:.4%}, net=${net:.2f} ({reason})"
    )
    return result


def find_best_two_pool_arb(
    price_a: float,
    price_b: float,
    fee_a: float,
    fee_b: float,
    trade_size_usd: float,
    gas_cost_usd: float = 0.0
) -> Optional[TwoPoolArb]:
    """양방향을 모두 확인하여 스프레드가 있는 방향의 결과 반환

    가격이 같으면 None.
    """
    forward = find_two_pool_arb(price_a, price_b, fee_a, fee_b, trade_size_usd, gas_cost_usd)
    if forward is not None:
        return forward

    backward = find_two_pool_arb(price_b, price_a, fee_b, fee_a, trade_size_usd, gas_cost_usd)
    if backward is None:
        return None
    return replace(backward, direction="B->A")


# ==============================================================================
# 삼각 차익거래
# ==============================================================================

class PairQuote(NamedTuple):
    """(base, quote) 쌍의 호가: 1 base = price quote"""
    price: float
    fee: float = 0.0


class Hop(NamedTuple):
    token_in: str
    token_out: str
    rate: float  # token_in 1개당 token_out (수수료 전)
    fee: float
    amount_in: float
    amount_out: float
    reversed: bool  # 역방향 호가 사용 여부


@dataclass(frozen=True)
class TriangularArb:
    """삼각 차익거래 평가 결과 (금액은 시작 토큰 단위)"""
    path: Tuple[str, ...]
    start_amount: float
    final_amount: float
    profit: float
    profit_pct: float
    viable: bool
    reason: str
    hops: List[Hop] = field(default_factory=list)
    missing_edge: Optional[Tuple[str, str]] = None


def _validate_path(path: Sequence[str]) -> None:
    if len(path) < 4:
        raise InputValidationError(
            f"삼각 경로는 최소 3홉(토큰 4개, 시작=끝)이어야 합니다: {list(path)}"
        )
    if path[0] != path[-1]:
        raise InputValidationError(f"경로가 시작 토큰으로 돌아오지 않습니다: {list(path)}")
    for token_in, token_out in zip(path, path[1:]):
        if token_in == token_out:
            raise InputValidationError(f"같은 토큰 간 홉은 허용되지 않습니다: {token_in}")


def find_triangular_arb(
    path: Sequence[str],
    quotes: Mapping[Tuple[str, str], PairQuote],
    start_amount: float = 1.0
) -> TriangularArb:
    """순환 경로를 따라 금액을 복리로 환산

    각 홉은 (token_in, token_out) 정방향 호가가 있으면 amount × price,
    (token_out, token_in) 역방향 호가만 있으면 amount / price로 환산하고
    (1 - fee)를 적용합니다.

    Args:
        path: 토큰 경로 (예: ["USDC", "WETH", "WBTC", "USDC"])
        quotes: {(base, quote): PairQuote}
        start_amount: 시작 금액

    Returns:
        TriangularArb. 호가가 없는 홉이 있으면 reason=NO_PATH
    """
    _validate_path(path)
    if start_amount <= 0:
        raise InputValidationError(f"시작 금액은 양수여야 합니다: {start_amount}")

    amount = start_amount
    hops: List[Hop] = []

    for token_in, token_out in zip(path, path[1:]):
        quote = quotes.get((token_in, token_out))
        is_reversed = False
        if quote is None:
            quote = quotes.get((token_out, token_in))
            is_reversed = True
        if quote is None:
            logger.debug(f"[ARB] triangular {'->'.join(path)}: no quote for {token_in}/{token_out}")
            return TriangularArb(
                path=tuple(path),
                start_amount=start_amount,
                final_amount=0.0,
                profit=0.0,
                profit_pct=0.0,
                viable=False,
                reason=NO_PATH,
                hops=hops,
                missing_edge=(token_in, token_out),
            )

        quote = PairQuote(*quote)
        if quote.price <= 0:
            raise InputValidationError(f"호가는 양수여야 합니다: {token_in}/{token_out}={quote.price}")
        _check_fee(f"{token_in}/{token_out} fee", quote.fee)

        rate = 1.0 / quote.price if is_reversed else quote.price
        amount_out = amount * rate * (1 - quote.fee)
        hops.append(Hop(token_in, token_out, rate, quote.fee, amount, amount_out, is_reversed))
        amount = amount_out

    profit = amount - start_amount
    viable = amount > start_amount
    return TriangularArb(
        path=tuple(path),
        start_amount=start_amount,
        final_amount=amount,
        profit=profit,
        profit_pct=profit / start_amount,
        viable=viable,
        reason=VIABLE if viable else NOT_PROFITABLE,
        hops=hops,
    )
