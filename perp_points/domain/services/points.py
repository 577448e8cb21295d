from __future__ import annotations

from collections.abc import Callable, Sequence
from decimal import Decimal, localcontext

from perp_points.domain.entities.points import (
    POINTS_DECIMAL_CONTEXT,
    CalculationConfig,
    PointResult,
    PointsTotals,
    TradingSnapshot,
    UserRecord,
)
from perp_points.domain.services.liquidity_integral import integrate_liquidity


def clamp_non_negative(value: Decimal) -> Decimal:
    return value if value > 0 else Decimal("0")


def apply_limit(value: Decimal, limit: Decimal | None) -> Decimal:
    if limit is None:
        return value
    return min(value, limit)


def is_overtime_record(*, record: UserRecord, window_end: int, overtime: bool) -> bool:
    return overtime and record.latest_update_timestamp > window_end and record.ended is not None


def _window_delta(
    *,
    record: UserRecord,
    current: Decimal,
    pick: Callable[[TradingSnapshot], Decimal],
    window_end: int,
    overtime: bool,
) -> Decimal:
    value = current
    if is_overtime_record(record=record, window_end=window_end, overtime=overtime):
        value = pick(record.ended)
    if record.start is not None:
        value -= pick(record.start)
    return value


def calculate_liquidity_points(
    *,
    record: UserRecord,
    config: CalculationConfig,
    window_start: int,
    window_end: int,
) -> Decimal:
    with localcontext(POINTS_DECIMAL_CONTEXT):
        integral = integrate_liquidity(
            liquidity=record.liquidity,
            window_start=window_start,
            window_end=window_end,
        )
        points = clamp_non_negative(integral * config.liquidity_rate)
        return apply_limit(points, config.liquidity_limit)


def calculate_trade_points(
    *,
    record: UserRecord,
    config: CalculationConfig,
    window_end: int,
    overtime: bool,
) -> Decimal:
    with localcontext(POINTS_DECIMAL_CONTEXT):
        volume = _window_delta(
            record=record,
            current=record.trading_volume,
            pick=lambda snap: snap.trading_volume,
            window_end=window_end,
            overtime=overtime,
        )
        points = clamp_non_negative(volume * config.trade_rate)
        return apply_limit(points, config.trade_limit)


def calculate_trade_profit_points(
    *,
    record: UserRecord,
    config: CalculationConfig,
    window_end: int,
    overtime: bool,
) -> Decimal:
    with localcontext(POINTS_DECIMAL_CONTEXT):
        net_profit = _window_delta(
            record=record,
            current=record.net_profit,
            pick=lambda snap: snap.net_profit,
            window_end=window_end,
            overtime=overtime,
        )
        # Losses never produce points and never offset other categories.
        if net_profit <= 0:
            return Decimal("0")
        points = clamp_non_negative(net_profit * config.trade_profit_rate)
        return apply_limit(points, config.trade_profit_limit)


def calculate_user_points(
    *,
    records: Sequence[UserRecord],
    config: CalculationConfig,
    window_start: int,
    window_end: int,
    overtime: bool,
) -> list[PointResult]:
    """Points per record for one evaluation window.

    One result per input record, in input order. Accounts are not merged.
    `overtime` switches the end baseline to the `ended` snapshot for records
    whose latest update is past `window_end`.
    """
    results: list[PointResult] = []
    with localcontext(POINTS_DECIMAL_CONTEXT):
        for record in records:
            results.append(
                PointResult(
                    account=record.account,
                    liquidity_points=calculate_liquidity_points(
                        record=record,
                        config=config,
                        window_start=window_start,
                        window_end=window_end,
                    ),
                    trade_points=calculate_trade_points(
                        record=record,
                        config=config,
                        window_end=window_end,
                        overtime=overtime,
                    ),
                    trade_profit_points=calculate_trade_profit_points(
                        record=record,
                        config=config,
                        window_end=window_end,
                        overtime=overtime,
                    ),
                )
            )
    return results


def summarize_points(results: Sequence[PointResult]) -> PointsTotals:
    with localcontext(POINTS_DECIMAL_CONTEXT):
        liquidity = sum((row.liquidity_points for row in results), Decimal("0"))
        trade = sum((row.trade_points for row in results), Decimal("0"))
        trade_profit = sum((row.trade_profit_points for row in results), Decimal("0"))
        total = liquidity + trade + trade_profit
    return PointsTotals(
        liquidity_points=liquidity,
        trade_points=trade,
        trade_profit_points=trade_profit,
        total_points=total,
    )
