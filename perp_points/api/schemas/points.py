from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class LiquiditySnapshotRequest(BaseModel):
    id: str = Field("", description="Snapshot ID.")
    lp: Decimal = Field(Decimal("0"), description="Liquidity amount at the snapshot.")
    base_points: Decimal = Field(
        Decimal("0"),
        description="Running liquidity integral up to the snapshot timestamp.",
    )
    timestamp: int = Field(..., ge=0, description="Snapshot time (unix seconds).")


class LiquidityRecordRequest(BaseModel):
    account: str = ""
    lp: Decimal = Decimal("0")
    start: LiquiditySnapshotRequest | None = Field(
        None, description="Latest snapshot at or before window_start."
    )
    ended: LiquiditySnapshotRequest | None = Field(
        None, description="Latest snapshot at or before window_end."
    )


class TradingSnapshotRequest(BaseModel):
    trading_volume: Decimal = Decimal("0")
    condition_trade_volume: Decimal = Decimal("0")
    swap: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")


class UserRecordRequest(BaseModel):
    account: str = Field(..., min_length=1, description="User account address.")
    trading_volume: Decimal = Field(Decimal("0"), description="Latest cumulative trading volume.")
    condition_trade_volume: Decimal = Decimal("0")
    swap: Decimal = Decimal("0")
    net_profit: Decimal = Field(Decimal("0"), description="Latest cumulative net profit.")
    latest_update_timestamp: int = Field(..., ge=0, description="Time of the latest update.")
    start: TradingSnapshotRequest | None = None
    ended: TradingSnapshotRequest | None = None
    liquidity: LiquidityRecordRequest | None = None


class CalculationConfigRequest(BaseModel):
    liquidity_rate: Decimal = Field(..., ge=0, description="Points per liquidity-second.")
    trade_rate: Decimal = Field(..., ge=0, description="Points per unit of traded volume.")
    trade_profit_rate: Decimal = Field(..., ge=0, description="Points per unit of net profit.")
    liquidity_limit: Decimal | None = Field(None, ge=0)
    trade_limit: Decimal | None = Field(None, ge=0)
    trade_profit_limit: Decimal | None = Field(None, ge=0)


class CalculatePointsRequest(BaseModel):
    window_start: int = Field(..., ge=0, description="Window start (unix seconds).")
    window_end: int = Field(..., ge=0, description="Window end (unix seconds).")
    overtime: bool = Field(False, description="Pin end baselines to the ended snapshots.")
    config: CalculationConfigRequest | None = Field(
        None, description="Rates and limits. Defaults to the configured program values."
    )
    records: list[UserRecordRequest] = Field(default_factory=list)


class CalculateEpochPointsRequest(BaseModel):
    window_start: int = Field(..., ge=0, description="Window start (unix seconds).")
    window_end: int = Field(..., ge=0, description="Window end (unix seconds).")
    overtime: bool | None = Field(
        None, description="Defaults to whether the window has already closed."
    )
    config: CalculationConfigRequest | None = None
    max_records: int | None = Field(None, ge=1)
    strict: bool = Field(False, description="Fail when any source record is invalid.")


class PointResultResponse(BaseModel):
    account: str
    liquidity_points: Decimal
    trade_points: Decimal
    trade_profit_points: Decimal
    total_points: Decimal


class PointsTotalsResponse(BaseModel):
    liquidity_points: Decimal
    trade_points: Decimal
    trade_profit_points: Decimal
    total_points: Decimal


class CalculatePointsResponse(BaseModel):
    results: list[PointResultResponse]
    totals: PointsTotalsResponse


class RecordValidationIssueResponse(BaseModel):
    index: int
    account: str
    errors: list[str]


class CalculateEpochPointsResponse(BaseModel):
    results: list[PointResultResponse]
    totals: PointsTotalsResponse
    overtime: bool
    fetched_count: int
    valid_count: int
    invalid_count: int
    issues: list[RecordValidationIssueResponse]
