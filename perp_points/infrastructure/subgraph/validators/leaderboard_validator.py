from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from perp_points.domain.entities.leaderboard import (
    LeaderboardValidationSummary,
    RecordValidationIssue,
)


LEADERBOARD_NUMERIC_FIELDS = (
    "tradingVolume",
    "conditionTradeVolume",
    "swap",
    "netProfit",
)


def is_valid_numeric_string(value: Any) -> bool:
    if value is None or value == "":
        return False
    try:
        return Decimal(str(value)).is_finite()
    except InvalidOperation:
        return False


def is_valid_timestamp(value: Any) -> bool:
    if value is None or value == "":
        return False
    try:
        int(str(value))
    except ValueError:
        return False
    return True


def validate_trading_snap(row: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    for field in LEADERBOARD_NUMERIC_FIELDS:
        value = row.get(field)
        if value and not is_valid_numeric_string(value):
            errors.append(f"Invalid numeric value for {field}: {value}")
    return errors


def validate_liquidity_snap(row: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    if not row.get("id"):
        errors.append("Missing snapshot ID")
    if not row.get("timestamp"):
        errors.append("Missing timestamp")
    elif not is_valid_timestamp(row.get("timestamp")):
        errors.append(f"Invalid timestamp: {row.get('timestamp')}")
    if not is_valid_numeric_string(row.get("lp")):
        errors.append(f"Invalid LP value: {row.get('lp')}")
    if not is_valid_numeric_string(row.get("basePoints")):
        errors.append(f"Invalid basePoints value: {row.get('basePoints')}")
    return errors


def validate_liquidity(row: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    if not row.get("account"):
        errors.append("Missing liquidity account address")
    if not row.get("lp"):
        errors.append("Missing LP amount")
    elif not is_valid_numeric_string(row.get("lp")):
        errors.append(f"Invalid LP amount: {row.get('lp')}")

    for snap in row.get("start") or []:
        errors.extend(f"Start snap: {err}" for err in validate_liquidity_snap(snap))
    for snap in row.get("ended") or []:
        errors.extend(f"End snap: {err}" for err in validate_liquidity_snap(snap))
    return errors


def validate_leaderboard(row: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    if not row.get("account"):
        errors.append("Missing account address")
    if not row.get("tradingVolume"):
        errors.append("Missing trading volume")
    if not row.get("latestUpdateTimestamp"):
        errors.append("Missing latest update timestamp")
    elif not is_valid_timestamp(row.get("latestUpdateTimestamp")):
        errors.append(f"Invalid latest update timestamp: {row.get('latestUpdateTimestamp')}")

    errors.extend(validate_trading_snap(row))
    for snap in row.get("start") or []:
        errors.extend(f"Start snap: {err}" for err in validate_trading_snap(snap))
    for snap in row.get("ended") or []:
        errors.extend(f"End snap: {err}" for err in validate_trading_snap(snap))
    return errors


def validate_leaderboards(rows: Sequence[Mapping[str, Any]]) -> LeaderboardValidationSummary:
    issues: list[RecordValidationIssue] = []
    valid_count = 0

    for index, row in enumerate(rows):
        errors = validate_leaderboard(row)
        liquidity = row.get("liquidity")
        if liquidity:
            errors.extend(validate_liquidity(liquidity))

        if errors:
            issues.append(
                RecordValidationIssue(
                    index=index,
                    account=str(row.get("account") or "unknown"),
                    errors=errors,
                )
            )
        else:
            valid_count += 1

    return LeaderboardValidationSummary(
        valid_count=valid_count,
        invalid_count=len(issues),
        issues=issues,
    )
