from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from perp_points.domain.entities.points import (
    LiquidityRecord,
    LiquiditySnapshot,
    TradingSnapshot,
    UserRecord,
)


def _dec(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(str(value))


def _first(rows: Any) -> Mapping[str, Any] | None:
    if not rows:
        return None
    return rows[0]


def map_row_to_trading_snapshot(row: Mapping[str, Any]) -> TradingSnapshot:
    return TradingSnapshot(
        trading_volume=_dec(row.get("tradingVolume")),
        condition_trade_volume=_dec(row.get("conditionTradeVolume")),
        swap=_dec(row.get("swap")),
        net_profit=_dec(row.get("netProfit")),
    )


def map_row_to_liquidity_snapshot(row: Mapping[str, Any]) -> LiquiditySnapshot:
    return LiquiditySnapshot(
        id=str(row.get("id") or ""),
        lp=_dec(row.get("lp")),
        base_points=_dec(row.get("basePoints")),
        timestamp=_int(row.get("timestamp")),
    )


def map_row_to_liquidity_record(row: Mapping[str, Any] | None, *, account: str = "") -> LiquidityRecord:
    if not row:
        return LiquidityRecord.empty(account)

    start = _first(row.get("start"))
    ended = _first(row.get("ended"))
    return LiquidityRecord(
        account=str(row.get("account") or account),
        lp=_dec(row.get("lp")),
        start=map_row_to_liquidity_snapshot(start) if start is not None else None,
        ended=map_row_to_liquidity_snapshot(ended) if ended is not None else None,
    )


def map_row_to_user_record(row: Mapping[str, Any]) -> UserRecord:
    account = str(row.get("account") or "")
    start = _first(row.get("start"))
    ended = _first(row.get("ended"))
    return UserRecord(
        account=account,
        trading_volume=_dec(row.get("tradingVolume")),
        condition_trade_volume=_dec(row.get("conditionTradeVolume")),
        swap=_dec(row.get("swap")),
        net_profit=_dec(row.get("netProfit")),
        latest_update_timestamp=_int(row.get("latestUpdateTimestamp")),
        start=map_row_to_trading_snapshot(start) if start is not None else None,
        ended=map_row_to_trading_snapshot(ended) if ended is not None else None,
        liquidity=map_row_to_liquidity_record(row.get("liquidity"), account=account),
    )


def map_rows_to_user_records(rows: list[Mapping[str, Any]]) -> list[UserRecord]:
    return [map_row_to_user_record(row) for row in rows]
