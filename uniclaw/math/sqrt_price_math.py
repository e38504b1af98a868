"""
Sqrt Price Math - sqrtPriceX96 관련 계산

풀 스냅샷의 가격은 sqrtPriceX96 형식으로 전달됩니다.
sqrtPriceX96 = sqrt(price) * 2^96
"""

import math

from ..constants import Q96
from ..errors import InputValidationError


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    decimal0: int = 0,
    decimal1: int = 0
) -> float:
    """sqrtPriceX96을 가격으로 변환

    가격 = (sqrtPriceX96 / 2^96)^2 × 10^(decimal0 - decimal1)

    Args:
        sqrt_price_x96: sqrtPriceX96 값
        decimal0: token0 소수점 자릿수
        decimal1: token1 소수점 자릿수

    Returns:
        가격 (token1/token0 기준)
    """
    if sqrt_price_x96 <= 0:
        raise InputValidationError(f"sqrtPriceX96은 양수여야 합니다: {sqrt_price_x96}")

    price_raw = sqrt_price_x96_to_sqrt_price(sqrt_price_x96) ** 2
    return price_raw * (10 ** (decimal0 - decimal1))


def price_to_sqrt_price_x96(
    price: float,
    decimal0: int = 0,
    decimal1: int = 0
) -> int:
    """가격을 sqrtPriceX96으로 변환

    sqrtPriceX96 = sqrt(price × 10^(decimal1 - decimal0)) × 2^96
    """
    if price <= 0:
        raise InputValidationError(f"가격은 양수여야 합니다: {price}")

    adjusted_price = price * (10 ** (decimal1 - decimal0))
    return int(math.sqrt(adjusted_price) * Q96)


def sqrt_price_x96_to_sqrt_price(sqrt_price_x96: int) -> float:
    """Q64.96 고정소수점 → 부동소수점 sqrtPrice"""
    return sqrt_price_x96 / Q96
