from __future__ import annotations

from dataclasses import dataclass, field

from perp_points.domain.entities.points import UserRecord


@dataclass(frozen=True)
class RecordValidationIssue:
    index: int
    account: str
    errors: list[str]


@dataclass(frozen=True)
class LeaderboardValidationSummary:
    valid_count: int
    invalid_count: int
    issues: list[RecordValidationIssue] = field(default_factory=list)


@dataclass(frozen=True)
class LeaderboardFetchResult:
    records: list[UserRecord]
    fetched_count: int
    issues: list[RecordValidationIssue] = field(default_factory=list)
