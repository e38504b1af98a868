"""
UniClaw 데이터 타입 정의

수집기(subgraph / RPC)가 넘겨주는 스냅샷을 Python dataclass로 정의.
fee growth / 유동성 필드는 정밀도를 위해 int 타입 사용.
"""

from dataclasses import dataclass
from typing import Optional

from ..constants import FEE_DENOMINATOR
from ..errors import InputValidationError
from ..math.sqrt_price_math import sqrt_price_x96_to_price
from ..math.tick_math import get_tick_spacing_for_fee, validate_tick_range


def _optional_float(value) -> Optional[float]:
    return float(value) if value not in (None, "") else None


@dataclass
class Token:
    """ERC20 토큰 정보"""
    id: str  # 컨트랙트 주소
    symbol: str
    decimals: int

    @classmethod
    def from_dict(cls, data: dict) -> "Token":
        return cls(
            id=data["id"],
            symbol=data["symbol"],
            decimals=int(data["decimals"])
        )


@dataclass
class Pool:
    """풀 스냅샷 (읽기 전용, 한 블록 기준)

    tick / sqrt_price_x96 / liquidity는 현재 가격 상태, fee_growth_global_*은
    단위 유동성당 누적 수수료(Q128)입니다.
    """
    id: str
    fee_tier: int  # 수수료 티어 (100, 500, 3000, 10000)
    tick: int  # i_c
    sqrt_price_x96: int
    liquidity: int  # 활성 유동성 (L)
    fee_growth_global_0_x128: int  # f_g,0
    fee_growth_global_1_x128: int  # f_g,1
    tvl_usd: Optional[float] = None
    volume_usd_24h: Optional[float] = None
    token0: Optional[Token] = None
    token1: Optional[Token] = None

    @property
    def tick_spacing(self) -> int:
        return get_tick_spacing_for_fee(self.fee_tier)

    @property
    def fee_rate(self) -> float:
        return self.fee_tier / FEE_DENOMINATOR

    @property
    def price(self) -> float:
        """token1/token0 가격 (토큰 정보가 있으면 소수점 보정)"""
        decimals0 = self.token0.decimals if self.token0 else 0
        decimals1 = self.token1.decimals if self.token1 else 0
        return sqrt_price_x96_to_price(self.sqrt_price_x96, decimals0, decimals1)

    @classmethod
    def from_dict(cls, data: dict) -> "Pool":
        return cls(
            id=data["id"],
            fee_tier=int(data["feeTier"]),
            tick=int(data["tick"]),
            sqrt_price_x96=int(data["sqrtPrice"]),
            liquidity=int(data["liquidity"]),
            fee_growth_global_0_x128=int(data.get("feeGrowthGlobal0X128", 0)),
            fee_growth_global_1_x128=int(data.get("feeGrowthGlobal1X128", 0)),
            tvl_usd=_optional_float(data.get("totalValueLockedUSD")),
            volume_usd_24h=_optional_float(data.get("volumeUSD24h")),
            token0=Token.from_dict(data["token0"]) if data.get("token0") else None,
            token1=Token.from_dict(data["token1"]) if data.get("token1") else None,
        )


@dataclass
class Tick:
    """초기화된 틱 스냅샷

    liquidity_net은 왼쪽에서 오른쪽으로 틱을 건널 때 활성 유동성에 더해지는 값,
    fee_growth_outside_*는 이 틱 바깥쪽에 쌓인 수수료(f_o)입니다.
    """
    tick_idx: int
    liquidity_net: int
    liquidity_gross: int = 0
    fee_growth_outside_0_x128: int = 0  # f_o,0
    fee_growth_outside_1_x128: int = 0  # f_o,1

    @classmethod
    def from_dict(cls, data: dict) -> "Tick":
        return cls(
            tick_idx=int(data["tickIdx"]),
            liquidity_net=int(data.get("liquidityNet", 0)),
            liquidity_gross=int(data.get("liquidityGross", 0)),
            fee_growth_outside_0_x128=int(data.get("feeGrowthOutside0X128", 0)),
            fee_growth_outside_1_x128=int(data.get("feeGrowthOutside1X128", 0)),
        )


@dataclass
class Position:
    """LP 포지션 상태

    fee_growth_inside_*_last_x128은 마지막으로 건드린 시점의 범위 내 fee growth
    체크포인트, tokens_owed_*는 적립됐지만 아직 수령하지 않은 수수료입니다.
    """
    owner: str
    tick_lower: int  # i_l
    tick_upper: int  # i_u
    liquidity: int  # l
    fee_growth_inside_0_last_x128: int = 0  # f_r,0(t_0)
    fee_growth_inside_1_last_x128: int = 0  # f_r,1(t_0)
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0

    def __post_init__(self):
        validate_tick_range(self.tick_lower, self.tick_upper)
        if self.liquidity < 0:
            raise InputValidationError(f"유동성은 음수일 수 없습니다: {self.liquidity}")
        if self.tokens_owed_0 < 0 or self.tokens_owed_1 < 0:
            raise InputValidationError(
                f"미수령 수수료는 음수일 수 없습니다: ({self.tokens_owed_0}, {self.tokens_owed_1})"
            )

    def is_in_range(self, current_tick: int) -> bool:
        return self.tick_lower <= current_tick < self.tick_upper

    @property
    def is_closed(self) -> bool:
        """유동성과 미수령 수수료가 모두 0이면 종료된 포지션"""
        return self.liquidity == 0 and self.tokens_owed_0 == 0 and self.tokens_owed_1 == 0

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        return cls(
            owner=data.get("owner", ""),
            tick_lower=int(data["tickLower"]),
            tick_upper=int(data["tickUpper"]),
            liquidity=int(data["liquidity"]),
            fee_growth_inside_0_last_x128=int(data.get("feeGrowthInside0LastX128", 0)),
            fee_growth_inside_1_last_x128=int(data.get("feeGrowthInside1LastX128", 0)),
            tokens_owed_0=int(data.get("tokensOwed0", 0)),
            tokens_owed_1=int(data.get("tokensOwed1", 0)),
        )


@dataclass(frozen=True)
class GasObservation:
    """가스 시장 관측값"""
    base_fee_gwei: float
    priority_fee_gwei: float
    hour_utc: int = 0

    @property
    def gas_price_gwei(self) -> float:
        return self.base_fee_gwei + self.priority_fee_gwei

    @classmethod
    def from_dict(cls, data: dict) -> "GasObservation":
        return cls(
            base_fee_gwei=float(data["baseFeeGwei"]),
            priority_fee_gwei=float(data.get("priorityFeeGwei", 0)),
            hour_utc=int(data.get("hourUtc", 0)),
        )
