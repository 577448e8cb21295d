from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Context, Decimal, localcontext


# Wide enough for wei-scale amounts multiplied by window lengths and rates.
POINTS_DECIMAL_CONTEXT = Context(prec=80, rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class LiquiditySnapshot:
    id: str
    lp: Decimal
    # Running liquidity integral up to `timestamp`, not an lp amount.
    base_points: Decimal
    timestamp: int


@dataclass(frozen=True)
class LiquidityRecord:
    account: str
    lp: Decimal
    start: LiquiditySnapshot | None = None
    ended: LiquiditySnapshot | None = None

    @classmethod
    def empty(cls, account: str = "") -> "LiquidityRecord":
        return cls(account=account, lp=Decimal("0"))


@dataclass(frozen=True)
class TradingSnapshot:
    trading_volume: Decimal
    condition_trade_volume: Decimal
    swap: Decimal
    net_profit: Decimal


@dataclass(frozen=True)
class UserRecord:
    account: str
    trading_volume: Decimal
    condition_trade_volume: Decimal
    swap: Decimal
    net_profit: Decimal
    latest_update_timestamp: int
    start: TradingSnapshot | None
    ended: TradingSnapshot | None
    liquidity: LiquidityRecord


@dataclass(frozen=True)
class CalculationConfig:
    liquidity_rate: Decimal
    trade_rate: Decimal
    trade_profit_rate: Decimal
    liquidity_limit: Decimal | None = None
    trade_limit: Decimal | None = None
    trade_profit_limit: Decimal | None = None


@dataclass(frozen=True)
class PointResult:
    account: str
    liquidity_points: Decimal
    trade_points: Decimal
    trade_profit_points: Decimal

    @property
    def total_points(self) -> Decimal:
        with localcontext(POINTS_DECIMAL_CONTEXT):
            return self.liquidity_points + self.trade_points + self.trade_profit_points


@dataclass(frozen=True)
class PointsTotals:
    liquidity_points: Decimal
    trade_points: Decimal
    trade_profit_points: Decimal
    total_points: Decimal
