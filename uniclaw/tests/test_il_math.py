"""
Impermanent Loss 테스트

전체 범위 closed form과 집중 범위(clamp) IL을 테스트합니다.
"""

import pytest
import math

from ..math.il_math import (
    il_full_range,
    impermanent_loss,
    optimal_token_split,
    calculate_il,
)
from ..errors import InputValidationError


class TestFullRange:
    """전체 범위 IL = 2√r/(1+r) - 1"""

    @pytest.mark.parametrize("ratio,expected", [
        (2.0, -0.0572),
        (0.5, -0.0572),
        (1.5, -0.0202),
        (4.0, -0.2000),
    ])
    def test_reference_values(self, ratio, expected):
        assert il_full_range(ratio) == pytest.approx(expected, abs=1e-4)

    def test_zero_at_entry(self):
        assert il_full_range(1.0) == 0.0
        assert impermanent_loss(1500.0, 1500.0) == 0.0

    def test_symmetric_in_log_price(self):
        """r와 1/r의 IL은 같음"""
        assert il_full_range(3.0) == pytest.approx(il_full_range(1 / 3.0))

    def test_explicit_unbounded_range_matches_closed_form(self):
        """price_lower=0, price_upper=∞ 는 전체 범위와 동일"""
        general = impermanent_loss(1.0, 2.0, 0.0, math.inf)
        assert general == pytest.approx(il_full_range(2.0), rel=1e-9)

    def test_invalid_ratio(self):
        with pytest.raises(InputValidationError):
            il_full_range(0.0)


class TestConcentrated:
    """집중 범위 IL 테스트"""

    def test_zero_at_entry(self):
        assert impermanent_loss(2000.0, 2000.0, 1800.0, 2200.0) == pytest.approx(0.0, abs=1e-12)

    @pytest.mark.parametrize("current", [1810.0, 1900.0, 1999.0, 2001.0, 2100.0, 2190.0])
    def test_non_positive_in_range(self, current):
        assert impermanent_loss(2000.0, current, 1800.0, 2200.0) <= 0.0

    def test_larger_than_full_range(self):
        """같은 가격 변화에서 집중 범위 IL이 더 큼"""
        concentrated = impermanent_loss(2000.0, 2150.0, 1800.0, 2200.0)
        full = impermanent_loss(2000.0, 2150.0)
        assert concentrated < full < 0

    def test_freezes_outside_range(self):
        """범위 밖에서는 경계값에서 고정"""
        at_upper = impermanent_loss(2000.0, 2200.0, 1800.0, 2200.0)
        beyond = impermanent_loss(2000.0, 5000.0, 1800.0, 2200.0)
        assert beyond == pytest.approx(at_upper)
        at_lower = impermanent_loss(2000.0, 1800.0, 1800.0, 2200.0)
        below = impermanent_loss(2000.0, 100.0, 1800.0, 2200.0)
        assert below == pytest.approx(at_lower)

    def test_monotone_as_price_diverges(self):
        values = [impermanent_loss(2000.0, p, 1800.0, 2200.0) for p in (2000.0, 2050.0, 2100.0, 2200.0)]
        assert values == sorted(values, reverse=True)

    def test_invalid_inputs(self):
        with pytest.raises(InputValidationError):
            impermanent_loss(0.0, 1.0)
        with pytest.raises(InputValidationError):
            impermanent_loss(2000.0, 2000.0, 2200.0, 1800.0)


class TestOptimalTokenSplit:
    def test_full_range_half_half(self):
        """전체 범위: 가치 50:50"""
        x, y = optimal_token_split(1000.0, 100.0)
        assert x * 100.0 == pytest.approx(500.0)
        assert y == pytest.approx(500.0)

    def test_value_preserved(self):
        x, y = optimal_token_split(1000.0, 2000.0, 1800.0, 2500.0)
        assert x * 2000.0 + y == pytest.approx(1000.0)

    def test_below_range_all_token0(self):
        x, y = optimal_token_split(1000.0, 1500.0, 1800.0, 2200.0)
        assert y == 0.0
        assert x * 1500.0 == pytest.approx(1000.0)


class TestCalculateIL:
    def test_no_move(self):
        result = calculate_il(1000.0, 100.0, 100.0)
        assert result.hodl_value == pytest.approx(1000.0)
        assert result.lp_value == pytest.approx(1000.0)
        assert result.il_pct == 0.0

    def test_4x_full_range(self):
        """4배 상승: IL -20%, LP = 0.8 × HODL"""
        result = calculate_il(1000.0, 100.0, 400.0)
        assert result.amount0_entry == pytest.approx(5.0)
        assert result.amount1_entry == pytest.approx(500.0)
        assert result.hodl_value == pytest.approx(2500.0)
        assert result.lp_value == pytest.approx(2000.0)
        assert result.il_pct == pytest.approx(-0.2)

    def test_concentrated_above_range_all_token1(self):
        result = calculate_il(1000.0, 2000.0, 3000.0, 1800.0, 2200.0)
        assert result.amount0_now == 0.0
        assert result.amount1_now > 0
        assert result.lp_value < result.hodl_value

    def test_invalid_investment(self):
        with pytest.raises(InputValidationError):
            calculate_il(0.0, 100.0, 120.0)
