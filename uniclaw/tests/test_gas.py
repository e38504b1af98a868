"""
Gas Cost 테스트
"""

import pytest

from ..opportunity.gas import (
    predict_gas_cost,
    project_gas_cost,
    estimate_operation_gas,
    estimate_gas_at_hour,
)
from ..config import load_config, DEFAULT_CONFIG_PATH
from ..data.types import GasObservation
from ..safety.operation import OperationType
from ..errors import InputValidationError


@pytest.fixture(scope="module")
def config():
    return load_config(DEFAULT_CONFIG_PATH)


class TestPredictGasCost:
    """predict_gas_cost 테스트"""

    def test_cost_and_buffer(self):
        estimate = predict_gas_cost(200_000, base_fee_gwei=30.0, priority_fee_gwei=2.0, eth_price_usd=3000.0)
        assert estimate.gas_price_gwei == 32.0
        assert estimate.cost_usd == pytest.approx(19.2)
        assert estimate.buffered_cost_usd == pytest.approx(23.04)
        assert estimate.buffer_usd == pytest.approx(3.84)

    def test_zero_units(self):
        assert predict_gas_cost(0, 30.0, 2.0, 3000.0).buffered_cost_usd == 0.0

    def test_invalid(self):
        with pytest.raises(InputValidationError):
            predict_gas_cost(-1, 30.0, 2.0, 3000.0)
        with pytest.raises(InputValidationError):
            predict_gas_cost(1, -30.0, 2.0, 3000.0)
        with pytest.raises(InputValidationError):
            predict_gas_cost(1, 30.0, 2.0, 0.0)


class TestProjectGasCost:
    """project_gas_cost 테스트"""

    def test_configured_table(self, config):
        """새벽 4시(0.70) → 오후 4시(1.30)"""
        projected = project_gas_cost(10.0, 4, 16, config.hourly_gas_multipliers)
        assert projected == pytest.approx(10.0 * 1.30 / 0.70)

    def test_same_hour_unchanged(self, config):
        assert project_gas_cost(12.5, 9, 9, config.hourly_gas_multipliers) == pytest.approx(12.5)

    def test_injected_table(self):
        table = [1.0] * 24
        table[5] = 2.0
        assert project_gas_cost(10.0, 0, 5, table) == pytest.approx(20.0)

    def test_table_must_have_24_entries(self):
        with pytest.raises(InputValidationError):
            project_gas_cost(10.0, 0, 5, [1.0] * 23)

    def test_non_positive_multiplier(self):
        table = [1.0] * 24
        table[3] = 0.0
        with pytest.raises(InputValidationError):
            project_gas_cost(10.0, 0, 5, table)

    def test_hour_out_of_range(self, config):
        with pytest.raises(InputValidationError):
            project_gas_cost(10.0, 0, 24, config.hourly_gas_multipliers)
        with pytest.raises(InputValidationError):
            project_gas_cost(10.0, -1, 5, config.hourly_gas_multipliers)

    def test_configured_table_size(self, config):
        assert len(config.hourly_gas_multipliers) == 24


class TestEstimateOperationGas:
    """estimate_operation_gas 테스트"""

    def test_configured_benchmark(self, config):
        estimate = estimate_operation_gas("arb", 30.0, 2.0, 3000.0, config.gas_benchmarks)
        assert estimate.gas_units == config.gas_benchmarks[OperationType.ARB] == 250_000
        assert estimate.buffered_cost_usd == pytest.approx(250_000 * 32e-9 * 3000.0 * 1.2)

    def test_string_keyed_benchmarks(self):
        estimate = estimate_operation_gas(OperationType.REBALANCE, 10.0, 0.0, 2000.0, {"rebalance": 100_000})
        assert estimate.cost_usd == pytest.approx(2.0)

    def test_unknown_type(self, config):
        with pytest.raises(InputValidationError):
            estimate_operation_gas("teleport", 30.0, 2.0, 3000.0, config.gas_benchmarks)

    def test_missing_benchmark(self):
        with pytest.raises(InputValidationError):
            estimate_operation_gas("rebalance", 30.0, 2.0, 3000.0, {"arb": 250_000})


class TestEstimateGasAtHour:
    """estimate_gas_at_hour 테스트 (GasObservation 입력)"""

    def test_projects_from_observed_hour(self):
        table = [1.0] * 24
        table[16] = 1.5
        observation = GasObservation(base_fee_gwei=30.0, priority_fee_gwei=2.0, hour_utc=4)
        cost = estimate_gas_at_hour("arb", observation, 3000.0, 16, {"arb": 250_000}, table)
        assert cost == pytest.approx(250_000 * 32e-9 * 3000.0 * 1.2 * 1.5)

    def test_same_hour_is_buffered_estimate(self, config):
        observation = GasObservation(base_fee_gwei=20.0, priority_fee_gwei=1.0, hour_utc=9)
        cost = estimate_gas_at_hour(
            OperationType.FLASH_SWAP, observation, 2500.0, 9,
            config.gas_benchmarks, config.hourly_gas_multipliers,
        )
        expected = estimate_operation_gas("flash_swap", 20.0, 1.0, 2500.0, config.gas_benchmarks)
        assert cost == pytest.approx(expected.buffered_cost_usd)

    def test_observed_hour_validated(self):
        observation = GasObservation(base_fee_gwei=20.0, priority_fee_gwei=1.0, hour_utc=30)
        with pytest.raises(InputValidationError):
            estimate_gas_at_hour("arb", observation, 2500.0, 9, {"arb": 1}, [1.0] * 24)
