from __future__ import annotations

from dataclasses import dataclass, field

from perp_points.domain.entities.leaderboard import RecordValidationIssue
from perp_points.domain.entities.points import (
    CalculationConfig,
    PointResult,
    PointsTotals,
    UserRecord,
)


@dataclass(frozen=True)
class CalculatePointsInput:
    records: list[UserRecord]
    config: CalculationConfig
    window_start: int
    window_end: int
    overtime: bool


@dataclass(frozen=True)
class CalculatePointsOutput:
    results: list[PointResult]
    totals: PointsTotals


@dataclass(frozen=True)
class CalculateEpochPointsInput:
    config: CalculationConfig
    window_start: int
    window_end: int
    overtime: bool | None = None
    max_records: int | None = None
    strict: bool = False


@dataclass(frozen=True)
class CalculateEpochPointsOutput:
    results: list[PointResult]
    totals: PointsTotals
    overtime: bool
    fetched_count: int
    valid_count: int
    invalid_count: int
    issues: list[RecordValidationIssue] = field(default_factory=list)
