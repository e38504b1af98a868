"""
Gas Cost - 가스 비용 예측

    cost_usd = gas_units × (base_fee + priority_fee) gwei × 1e-9 × eth_price
    buffered = cost_usd × (1 + GAS_SAFETY_BUFFER)

시간대별 배수 표(UTC 0~23시)와 작업 유형별 가스 사용량 표는 설정에서 주입합니다.
(load_config().hourly_gas_multipliers / .gas_benchmarks)
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence, Union

from ..constants import GAS_SAFETY_BUFFER
from ..data.types import GasObservation
from ..errors import InputValidationError
from ..safety.operation import OperationType

logger = logging.getLogger(__name__)

GWEI = 1e-9
HOURS_PER_DAY = 24


@dataclass(frozen=True)
class GasEstimate:
    """트랜잭션 1건의 가스 비용 예측"""
    gas_units: int
    gas_price_gwei: float
    eth_price_usd: float
    cost_usd: float
    buffered_cost_usd: float

    @property
    def buffer_usd(self) -> float:
        return self.buffered_cost_usd - self.cost_usd


def predict_gas_cost(
    gas_units: int,
    base_fee_gwei: float,
    priority_fee_gwei: float,
    eth_price_usd: float,
) -> GasEstimate:
    """트랜잭션의 USD 비용 예측 (안전 버퍼 20% 포함)

    Args:
        gas_units: 소모 가스량
        base_fee_gwei: EIP-1559 base fee
        priority_fee_gwei: priority tip
        eth_price_usd: ETH 가격 (USD)

    Returns:
        GasEstimate (작업 규모 산정에는 buffered_cost_usd 사용)
    """
    if gas_units < 0:
        raise InputValidationError(f"gas_units는 음수일 수 없습니다: {gas_units}")
    if base_fee_gwei < 0 or priority_fee_gwei < 0:
        raise InputValidationError(
            f"가스 수수료는 음수일 수 없습니다: base={base_fee_gwei}, priority={priority_fee_gwei}"
        )
    if eth_price_usd <= 0:
        raise InputValidationError(f"ETH 가격은 양수여야 합니다: {eth_price_usd}")

    gas_price = base_fee_gwei + priority_fee_gwei
    cost = gas_units * gas_price * GWEI * eth_price_usd
    return GasEstimate(
        gas_units=gas_units,
        gas_price_gwei=gas_price,
        eth_price_usd=eth_price_usd,
        cost_usd=cost,
        buffered_cost_usd=cost * (1 + GAS_SAFETY_BUFFER),
    )


def _check_hour(name: str, hour: int) -> None:
    if not 0 <= hour < HOURS_PER_DAY:
        raise InputValidationError(f"{name}은 0~23 사이여야 합니다: {hour}")


def _check_multipliers(multipliers: Sequence[float]) -> None:
    if len(multipliers) != HOURS_PER_DAY:
        raise InputValidationError(
            f"시간대 배수 표는 {HOURS_PER_DAY}개여야 합니다: {len(multipliers)}개"
        )
    if any(m <= 0 for m in multipliers):
        raise InputValidationError("시간대 배수는 모두 양수여야 합니다")


def project_gas_cost(
    observed_cost_usd: float,
    observed_hour: int,
    target_hour: int,
    multipliers: Sequence[float],
) -> float:
    """관측 시각의 비용을 다른 시각(UTC)으로 환산

    projected = observed × multipliers[target] / multipliers[observed]
    """
    _check_multipliers(multipliers)
    if observed_cost_usd < 0:
        raise InputValidationError(f"observed_cost_usd는 음수일 수 없습니다: {observed_cost_usd}")
    _check_hour("observed_hour", observed_hour)
    _check_hour("target_hour", target_hour)

    return observed_cost_usd * multipliers[target_hour] / multipliers[observed_hour]


def estimate_operation_gas(
    op_type: Union[OperationType, str],
    base_fee_gwei: float,
    priority_fee_gwei: float,
    eth_price_usd: float,
    benchmarks: Mapping,
) -> GasEstimate:
    """작업 유형별 가스 사용량 표로 비용 예측

    Raises:
        InputValidationError: 표에 해당 작업 유형이 없는 경우
    """
    op_type = OperationType.parse(op_type)
    table = {OperationType.parse(k): v for k, v in benchmarks.items()}
    if op_type not in table:
        raise InputValidationError(f"가스 사용량 표에 '{op_type.value}' 항목이 없습니다")

    estimate = predict_gas_cost(table[op_type], base_fee_gwei, priority_fee_gwei, eth_price_usd)
    logger.debug(
        f"Gas {op_type.value}: {estimate.gas_units} units @ {estimate.gas_price_gwei:.1f} gwei "
        f"= ${estimate.buffered_cost_usd:.2f} (buffered)"
    )
    return estimate


def estimate_gas_at_hour(
    op_type: Union[OperationType, str],
    observation: GasObservation,
    eth_price_usd: float,
    target_hour: int,
    benchmarks: Mapping,
    multipliers: Sequence[float],
) -> float:
    """가스 시장 관측값으로 target_hour 시점의 작업 비용 예측 (버퍼 포함, USD)

    관측 시각(observation.hour_utc)의 비용을 구한 뒤 시간대 배수로 환산합니다.
    """
    estimate = estimate_operation_gas(
        op_type,
        observation.base_fee_gwei,
        observation.priority_fee_gwei,
        eth_price_usd,
        benchmarks,
    )
    return project_gas_cost(estimate.buffered_cost_usd, observation.hour_utc, target_hour, multipliers)
