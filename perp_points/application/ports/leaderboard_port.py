from __future__ import annotations

from typing import Protocol

from perp_points.domain.entities.leaderboard import LeaderboardFetchResult


class LeaderboardPort(Protocol):
    def fetch_leaderboards(
        self,
        *,
        window_start: int,
        window_end: int,
        max_records: int | None = None,
    ) -> LeaderboardFetchResult:
        ...
