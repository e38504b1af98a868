"""
Capital safety gate tests.
"""

import itertools
import logging

import pytest

from ..safety.gate import (
    SafetyConfig,
    SafetyGate,
    GATE_ORDER,
    APPROVED,
    SIZE_EXCEEDS_LIMIT,
    GAS_PRICE_TOO_HIGH,
    GAS_EXCEEDS_PROFIT,
    BELOW_MIN_PROFIT,
    SLIPPAGE_TOO_HIGH,
    NON_ATOMIC_ARB_FORBIDDEN,
)
from ..safety.operation import CandidateOperation, OperationType
from ..opportunity.arbitrage import find_two_pool_arb
from ..data.types import GasObservation
from ..errors import InputValidationError

PORTFOLIO = 100_000


@pytest.fixture
def gate():
    return SafetyGate(SafetyConfig(max_operation_pct=0.05, min_profit_usd=15, max_slippage_pct=1.0))


def make_op(op_type="arb", capital=4000, profit=50, gas=30, slippage=0.3, atomic=True):
    return CandidateOperation(op_type, capital, profit, gas, slippage, atomic)


class TestSafetyConfig:

    def test_defaults(self):
        config = SafetyConfig()
        assert config.max_operation_pct == 0.05
        assert config.min_profit_usd == 15.0

    @pytest.mark.parametrize("kwargs", [
        {"max_operation_pct": 0},
        {"max_operation_pct": 1.5},
        {"min_profit_usd": -1},
        {"max_slippage_pct": -0.1},
        {"max_gas_price_gwei": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(InputValidationError):
            SafetyConfig(**kwargs)

    def test_from_dict(self):
        config = SafetyConfig.from_dict({"min_profit_usd": "20"})
        assert config.min_profit_usd == 20.0
        assert config.max_operation_pct == 0.05


class TestGates:
    """Each gate in isolation."""

    def test_approved(self, gate):
        decision = gate.evaluate(make_op(), PORTFOLIO)
        assert decision.approved
        assert decision.reason_code == APPROVED
        assert decision.gate is None
        assert decision.details["net_profit_usd"] == 20

    def test_size(self, gate):
        decision = gate.evaluate(make_op(capital=6000), PORTFOLIO)
        assert not decision.approved
        assert decision.reason_code == SIZE_EXCEEDS_LIMIT
        assert decision.gate == "size"

    def test_size_at_limit_passes(self, gate):
        assert gate.evaluate(make_op(capital=5000), PORTFOLIO).approved

    def test_gas_exceeds_profit(self, gate):
        assert gate.evaluate(make_op(profit=30, gas=30), PORTFOLIO).reason_code == GAS_EXCEEDS_PROFIT

    def test_gas_price_ceiling(self, gate):
        decision = gate.evaluate(make_op(), PORTFOLIO, gas_price_gwei=150)
        assert decision.reason_code == GAS_PRICE_TOO_HIGH
        assert decision.gate == "gas"

    def test_gas_price_skipped_without_observation(self, gate):
        assert gate.evaluate(make_op(), PORTFOLIO, gas_price_gwei=None).approved

    def test_gas_observation_ceiling(self, gate):
        """base + priority fee is compared against the ceiling"""
        observation = GasObservation(base_fee_gwei=95.0, priority_fee_gwei=10.0, hour_utc=15)
        decision = gate.evaluate(make_op(), PORTFOLIO, gas_price_gwei=observation)
        assert decision.reason_code == GAS_PRICE_TOO_HIGH
        assert decision.details["gas_price_gwei"] == 105.0

    def test_gas_observation_below_ceiling(self, gate):
        observation = GasObservation(base_fee_gwei=20.0, priority_fee_gwei=2.0)
        assert gate.evaluate(make_op(), PORTFOLIO, observation).approved

    def test_below_min_profit(self, gate):
        """net > 0 but below the threshold"""
        assert gate.evaluate(make_op(profit=40), PORTFOLIO).reason_code == BELOW_MIN_PROFIT

    def test_slippage(self, gate):
        assert gate.evaluate(make_op(slippage=1.5), PORTFOLIO).reason_code == SLIPPAGE_TOO_HIGH

    @pytest.mark.parametrize("op_type", ["arb", "flash_swap"])
    def test_non_atomic_arb(self, gate, op_type):
        decision = gate.evaluate(make_op(op_type=op_type, atomic=False), PORTFOLIO)
        assert decision.reason_code == NON_ATOMIC_ARB_FORBIDDEN

    @pytest.mark.parametrize("op_type", ["single_side_deposit", "gap_edge_lp", "rebalance", "cross_chain_transfer"])
    def test_non_arb_exempt_from_atomicity(self, gate, op_type):
        assert gate.evaluate(make_op(op_type=op_type, atomic=False), PORTFOLIO).approved

    def test_invalid_portfolio(self, gate):
        with pytest.raises(InputValidationError):
            gate.evaluate(make_op(), 0)
        with pytest.raises(InputValidationError):
            gate.evaluate(make_op(), -100)


class TestGateOrdering:
    """The first failing gate in the fixed order is always the one reported."""

    FAILURES = {
        "size": {"capital": 6000},
        "gas": {"profit": 30, "gas": 30},
        "min_profit": {"profit": 40},
        "slippage": {"slippage": 1.5},
        "atomicity": {"atomic": False},
    }
    REASONS = {
        "size": SIZE_EXCEEDS_LIMIT,
        "gas": GAS_EXCEEDS_PROFIT,
        "min_profit": BELOW_MIN_PROFIT,
        "slippage": SLIPPAGE_TOO_HIGH,
        "atomicity": NON_ATOMIC_ARB_FORBIDDEN,
    }

    def test_all_combinations(self, gate):
        for size in range(1, len(GATE_ORDER) + 1):
            for combo in itertools.combinations(GATE_ORDER, size):
                # earlier gates applied last so they win on shared fields
                kwargs = {}
                for name in reversed(combo):
                    kwargs.update(self.FAILURES[name])
                first = next(name for name in GATE_ORDER if name in combo)
                decision = gate.evaluate(make_op(**kwargs), PORTFOLIO)
                assert decision.reason_code == self.REASONS[first], combo
                assert decision.gate == first


class TestEndToEnd:

    def test_arb_to_gate_approved(self, gate):
        arb = find_two_pool_arb(100.0, 100.5, 0.0005, 0.0005, trade_size_usd=4000, gas_cost_usd=0.0)
        op = CandidateOperation(OperationType.ARB, arb.trade_size_usd, 50, 30, 0.3, True)
        assert gate.evaluate(op, PORTFOLIO).reason_code == APPROVED
        assert arb.viable

    def test_oversized_rejected(self, gate):
        op = CandidateOperation("arb", 6000, 50, 30, 0.3, True)
        assert gate.evaluate(op, PORTFOLIO).reason_code == SIZE_EXCEEDS_LIMIT

    def test_evaluate_many_keeps_order(self, gate):
        ops = [make_op(), make_op(capital=6000), make_op(slippage=2.0)]
        reasons = [d.reason_code for d in gate.evaluate_many(ops, PORTFOLIO)]
        assert reasons == [APPROVED, SIZE_EXCEEDS_LIMIT, SLIPPAGE_TOO_HIGH]

    def test_rejection_logged(self, gate, caplog):
        with caplog.at_level(logging.INFO, logger="uniclaw.safety.gate"):
            gate.evaluate(make_op(capital=6000), PORTFOLIO)
        assert "SIZE_EXCEEDS_LIMIT" in caplog.text

    def test_decision_to_dict(self, gate):
        data = gate.evaluate(make_op(), PORTFOLIO).to_dict()
        assert data["approved"] is True
        assert data["reason_code"] == APPROVED


class TestCandidateOperation:

    def test_from_dict(self):
        op = CandidateOperation.from_dict({
            "type": "flash_swap", "capitalAtRisk": 0, "expectedProfit": 120,
            "gasEstimate": 20, "slippagePct": 0.1, "isAtomic": True,
        })
        assert op.op_type is OperationType.FLASH_SWAP
        assert op.net_profit_usd == 100

    def test_missing_field(self):
        with pytest.raises(InputValidationError):
            CandidateOperation.from_dict({"type": "arb"})

    def test_unknown_type(self):
        with pytest.raises(InputValidationError):
            make_op(op_type="sandwich")

    def test_negative_capital(self):
        with pytest.raises(InputValidationError):
            make_op(capital=-1)

    def test_to_dict(self):
        assert make_op().to_dict()["op_type"] == "arb"

    @pytest.mark.parametrize("flag", ["false", "no", 0, 1, None])
    def test_is_atomic_must_be_bool(self, flag):
        with pytest.raises(InputValidationError):
            make_op(op_type="flash_swap", capital=0, atomic=flag)

    def test_from_dict_string_flag_rejected(self):
        """A string flag is never read as atomic."""
        with pytest.raises(InputValidationError):
            CandidateOperation.from_dict({
                "type": "arb", "capitalAtRisk": 4000, "expectedProfit": 50,
                "gasEstimate": 30, "slippagePct": 0.3, "isAtomic": "false",
            })

    def test_from_dict_non_atomic_arb_rejected_by_gate(self, gate):
        op = CandidateOperation.from_dict({
            "type": "arb", "capitalAtRisk": 4000, "expectedProfit": 50,
            "gasEstimate": 30, "slippagePct": 0.3, "isAtomic": False,
        })
        assert gate.evaluate(op, PORTFOLIO).reason_code == NON_ATOMIC_ARB_FORBIDDEN

    @pytest.mark.parametrize("field", ["capital", "profit", "gas", "slippage"])
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "50", True])
    def test_non_finite_or_non_numeric_rejected(self, field, value):
        with pytest.raises(InputValidationError):
            make_op(**{field: value})
