"""
Cross-Chain Cost 테스트
"""

import pytest

from ..opportunity.cross_chain import estimate_cross_chain_cost, BridgeFee
from ..config import load_config, DEFAULT_CONFIG_PATH
from ..safety.operation import OperationType
from ..errors import InputValidationError


@pytest.fixture(scope="module")
def fees():
    return load_config(DEFAULT_CONFIG_PATH).bridge_fees


class TestEstimateCrossChainCost:
    """estimate_cross_chain_cost 테스트"""

    def test_cheap_transfer_viable_for_both(self, fees):
        cost = estimate_cross_chain_cost(10_000, "across", 2.0, 1.0, 0.1, 0.1, fees)
        assert cost.bridge_fee_usd == pytest.approx(5.0)
        assert cost.total_cost_usd == pytest.approx(28.0)
        assert cost.total_cost_pct == pytest.approx(0.28)
        assert cost.arb_viable
        assert cost.rebalance_viable

    def test_rebalance_only(self, fees):
        """0.5% 이상 2% 미만: 리밸런싱만 가능"""
        cost = estimate_cross_chain_cost(1_000, "across", 2.0, 1.0, 0.1, 0.1, fees)
        assert cost.total_cost_pct == pytest.approx(0.55)
        assert not cost.arb_viable
        assert cost.rebalance_viable

    def test_too_expensive(self, fees):
        cost = estimate_cross_chain_cost(100, "hop", 2.0, 1.0, 0.1, 0.1, fees)
        assert not cost.rebalance_viable

    def test_bridge_name_case_insensitive(self, fees):
        assert estimate_cross_chain_cost(10_000, "Across", 0, 0, 0, 0, fees).bridge == "across"

    def test_injected_fee_table(self):
        fees = {"mybridge": 0.1, "other": {"fee_pct": 0.0, "fixed_usd": 4.0}, "typed": BridgeFee(0.2)}
        assert estimate_cross_chain_cost(1_000, "mybridge", 0, 0, 0, 0, fees).bridge_fee_usd == pytest.approx(1.0)
        assert estimate_cross_chain_cost(1_000, "other", 0, 0, 0, 0, fees).bridge_fee_usd == pytest.approx(4.0)
        assert estimate_cross_chain_cost(1_000, "typed", 0, 0, 0, 0, fees).bridge_fee_usd == pytest.approx(2.0)

    def test_unknown_bridge(self, fees):
        with pytest.raises(InputValidationError):
            estimate_cross_chain_cost(10_000, "wormhole-x", 0, 0, 0, 0, fees)

    def test_invalid_amount(self, fees):
        with pytest.raises(InputValidationError):
            estimate_cross_chain_cost(0, "across", 0, 0, 0, 0, fees)

    def test_to_operation(self, fees):
        cost = estimate_cross_chain_cost(10_000, "across", 2.0, 1.0, 0.1, 0.1, fees)
        op = cost.to_operation(expected_profit_usd=100.0)
        assert op.op_type is OperationType.CROSS_CHAIN_TRANSFER
        assert not op.is_atomic
        assert op.gas_estimate_usd == pytest.approx(3.0)
        assert op.net_profit_usd == pytest.approx(72.0)
        assert op.slippage_pct == pytest.approx(0.2)
