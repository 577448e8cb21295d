from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from perp_points.api.deps import (
    get_calculate_epoch_points_use_case,
    get_calculate_points_use_case,
    get_default_calculation_config,
)
from perp_points.api.schemas.points import (
    CalculateEpochPointsRequest,
    CalculateEpochPointsResponse,
    CalculatePointsRequest,
    CalculatePointsResponse,
    CalculationConfigRequest,
    LiquidityRecordRequest,
    LiquiditySnapshotRequest,
    PointResultResponse,
    PointsTotalsResponse,
    RecordValidationIssueResponse,
    TradingSnapshotRequest,
    UserRecordRequest,
)
from perp_points.application.dto.points import CalculateEpochPointsInput, CalculatePointsInput
from perp_points.application.use_cases.calculate_epoch_points import CalculateEpochPointsUseCase
from perp_points.application.use_cases.calculate_points import CalculatePointsUseCase
from perp_points.domain.entities.points import (
    CalculationConfig,
    LiquidityRecord,
    LiquiditySnapshot,
    PointResult,
    PointsTotals,
    TradingSnapshot,
    UserRecord,
)
from perp_points.domain.exceptions import (
    LeaderboardDataInvalidError,
    LeaderboardQueryInputError,
    PointsConfigInputError,
    PointsWindowInputError,
)
from perp_points.infrastructure.clients.perp_subgraph_client import SubgraphError

router = APIRouter()


def _to_config(
    req: CalculationConfigRequest | None,
    default: CalculationConfig,
) -> CalculationConfig:
    if req is None:
        return default
    return CalculationConfig(
        liquidity_rate=req.liquidity_rate,
        trade_rate=req.trade_rate,
        trade_profit_rate=req.trade_profit_rate,
        liquidity_limit=req.liquidity_limit,
        trade_limit=req.trade_limit,
        trade_profit_limit=req.trade_profit_limit,
    )


def _to_liquidity_snapshot(req: LiquiditySnapshotRequest | None) -> LiquiditySnapshot | None:
    if req is None:
        return None
    return LiquiditySnapshot(
        id=req.id,
        lp=req.lp,
        base_points=req.base_points,
        timestamp=req.timestamp,
    )


def _to_liquidity_record(req: LiquidityRecordRequest | None, *, account: str) -> LiquidityRecord:
    if req is None:
        return LiquidityRecord.empty(account)
    return LiquidityRecord(
        account=req.account or account,
        lp=req.lp,
        start=_to_liquidity_snapshot(req.start),
        ended=_to_liquidity_snapshot(req.ended),
    )


def _to_trading_snapshot(req: TradingSnapshotRequest | None) -> TradingSnapshot | None:
    if req is None:
        return None
    return TradingSnapshot(
        trading_volume=req.trading_volume,
        condition_trade_volume=req.condition_trade_volume,
        swap=req.swap,
        net_profit=req.net_profit,
    )


def _to_user_record(req: UserRecordRequest) -> UserRecord:
    return UserRecord(
        account=req.account,
        trading_volume=req.trading_volume,
        condition_trade_volume=req.condition_trade_volume,
        swap=req.swap,
        net_profit=req.net_profit,
        latest_update_timestamp=req.latest_update_timestamp,
        start=_to_trading_snapshot(req.start),
        ended=_to_trading_snapshot(req.ended),
        liquidity=_to_liquidity_record(req.liquidity, account=req.account),
    )


def _to_result_response(row: PointResult) -> PointResultResponse:
    return PointResultResponse(
        account=row.account,
        liquidity_points=row.liquidity_points,
        trade_points=row.trade_points,
        trade_profit_points=row.trade_profit_points,
        total_points=row.total_points,
    )


def _to_totals_response(totals: PointsTotals) -> PointsTotalsResponse:
    return PointsTotalsResponse(
        liquidity_points=totals.liquidity_points,
        trade_points=totals.trade_points,
        trade_profit_points=totals.trade_profit_points,
        total_points=totals.total_points,
    )


@router.post("/v1/points/calculate", response_model=CalculatePointsResponse)
def calculate_points(
    req: CalculatePointsRequest,
    use_case: CalculatePointsUseCase = Depends(get_calculate_points_use_case),
    default_config: CalculationConfig = Depends(get_default_calculation_config),
):
    try:
        result = use_case.execute(
            CalculatePointsInput(
                records=[_to_user_record(row) for row in req.records],
                config=_to_config(req.config, default_config),
                window_start=req.window_start,
                window_end=req.window_end,
                overtime=req.overtime,
            )
        )
    except (PointsWindowInputError, PointsConfigInputError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CalculatePointsResponse(
        results=[_to_result_response(row) for row in result.results],
        totals=_to_totals_response(result.totals),
    )


@router.post("/v1/points/epoch", response_model=CalculateEpochPointsResponse)
def calculate_epoch_points(
    req: CalculateEpochPointsRequest,
    use_case: CalculateEpochPointsUseCase = Depends(get_calculate_epoch_points_use_case),
    default_config: CalculationConfig = Depends(get_default_calculation_config),
):
    try:
        result = use_case.execute(
            CalculateEpochPointsInput(
                config=_to_config(req.config, default_config),
                window_start=req.window_start,
                window_end=req.window_end,
                overtime=req.overtime,
                max_records=req.max_records,
                strict=req.strict,
            )
        )
    except (PointsWindowInputError, PointsConfigInputError, LeaderboardQueryInputError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except LeaderboardDataInvalidError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except SubgraphError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return CalculateEpochPointsResponse(
        results=[_to_result_response(row) for row in result.results],
        totals=_to_totals_response(result.totals),
        overtime=result.overtime,
        fetched_count=result.fetched_count,
        valid_count=result.valid_count,
        invalid_count=result.invalid_count,
        issues=[
            RecordValidationIssueResponse(index=issue.index, account=issue.account, errors=issue.errors)
            for issue in result.issues
        ],
    )
