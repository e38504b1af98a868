"""
Position Math 테스트

포지션 라이프사이클 (accrue / increase / decrease / collect) 상태 전이를 테스트합니다.
"""

import pytest

from ..math.position_math import (
    accrue_fees,
    accrue_from_snapshot,
    increase_liquidity,
    decrease_liquidity,
    collect_fees,
)
from ..math.liquidity_math import position_amounts
from ..constants import Q96, Q128
from ..data.types import Pool, Tick, Position
from ..errors import InputValidationError


@pytest.fixture
def position():
    return Position(owner="0xabc", tick_lower=-600, tick_upper=600, liquidity=1000)


class TestAccrueFees:
    """accrue_fees 테스트"""

    def test_moves_fees_to_owed(self, position):
        updated = accrue_fees(position, 2 * Q128, 3 * Q128)
        assert updated.tokens_owed_0 == 2000
        assert updated.tokens_owed_1 == 3000
        assert updated.fee_growth_inside_0_last_x128 == 2 * Q128
        assert updated.fee_growth_inside_1_last_x128 == 3 * Q128

    def test_input_unchanged(self, position):
        accrue_fees(position, 2 * Q128, 3 * Q128)
        assert position.tokens_owed_0 == 0
        assert position.fee_growth_inside_0_last_x128 == 0

    def test_second_accrue_only_adds_delta(self, position):
        once = accrue_fees(position, 2 * Q128, 0)
        twice = accrue_fees(once, 2 * Q128, 0)
        assert twice.tokens_owed_0 == once.tokens_owed_0

    def test_from_snapshot(self, position):
        pool = Pool(id="0xpool", fee_tier=3000, tick=0, sqrt_price_x96=Q96, liquidity=10 ** 6,
                    fee_growth_global_0_x128=4 * Q128, fee_growth_global_1_x128=0)
        lower = Tick(tick_idx=-600, liquidity_net=1000)
        upper = Tick(tick_idx=600, liquidity_net=-1000)
        updated = accrue_from_snapshot(position, pool, lower, upper)
        assert updated.tokens_owed_0 == 4000
        assert updated.fee_growth_inside_0_last_x128 == 4 * Q128


class TestIncreaseLiquidity:
    def test_increase(self, position):
        updated = increase_liquidity(position, 500, Q128, 0)
        assert updated.liquidity == 1500
        # 추가 전 유동성(1000)으로 적립
        assert updated.tokens_owed_0 == 1000

    def test_non_positive_delta(self, position):
        with pytest.raises(InputValidationError):
            increase_liquidity(position, 0, 0, 0)


class TestDecreaseLiquidity:
    def test_partial_decrease(self, position):
        updated, amount0, amount1 = decrease_liquidity(position, 400, 0, 0, current_tick=0)
        assert updated.liquidity == 600
        released = Position(owner="0xabc", tick_lower=-600, tick_upper=600, liquidity=400)
        expected0, expected1 = position_amounts(released, 0)
        assert amount0 == pytest.approx(expected0)
        assert amount1 == pytest.approx(expected1)

    def test_full_decrease_then_collect_closes(self, position):
        updated, _, _ = decrease_liquidity(position, 1000, Q128, Q128, current_tick=0)
        assert updated.liquidity == 0
        assert not updated.is_closed
        closed, c0, c1 = collect_fees(updated)
        assert (c0, c1) == (1000, 1000)
        assert closed.is_closed

    def test_decrease_more_than_held(self, position):
        with pytest.raises(InputValidationError):
            decrease_liquidity(position, 1001, 0, 0, current_tick=0)


class TestCollectFees:
    def test_partial_collect(self, position):
        accrued = accrue_fees(position, 2 * Q128, 3 * Q128)
        updated, c0, c1 = collect_fees(accrued, amount0_requested=500)
        assert c0 == 500
        assert c1 == 3000
        assert updated.tokens_owed_0 == 1500
        assert updated.tokens_owed_1 == 0

    def test_request_capped_at_owed(self, position):
        accrued = accrue_fees(position, Q128, 0)
        _, c0, _ = collect_fees(accrued, amount0_requested=10 ** 9)
        assert c0 == 1000

    def test_negative_request(self, position):
        with pytest.raises(InputValidationError):
            collect_fees(position, amount0_requested=-1)
