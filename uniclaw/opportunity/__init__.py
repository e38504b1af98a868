"""
Opportunity evaluators: arbitrage, flash swap, tick gap, gas and cross-chain cost.

Every evaluator returns a result object; "not viable" is a reason code, not an error.
"""

from .arbitrage import (
    TwoPoolArb,
    TriangularArb,
    PairQuote,
    Hop,
    find_two_pool_arb,
    find_best_two_pool_arb,
    find_triangular_arb,
)
from .flash_swap import FlashSwapResult, evaluate_flash_swap
from .tick_gap import TickGap, GapArbScore, analyse_tick_gaps, score_tick_gap_arb
from .gas import (
    GasEstimate,
    predict_gas_cost,
    project_gas_cost,
    estimate_operation_gas,
    estimate_gas_at_hour,
)
from .cross_chain import BridgeFee, CrossChainCost, estimate_cross_chain_cost
