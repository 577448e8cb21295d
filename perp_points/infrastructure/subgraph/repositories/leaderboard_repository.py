from __future__ import annotations

import logging

from perp_points.domain.entities.leaderboard import LeaderboardFetchResult
from perp_points.infrastructure.clients.perp_subgraph_client import PerpSubgraphClient
from perp_points.infrastructure.subgraph.mappers.leaderboard_mapper import map_row_to_user_record
from perp_points.infrastructure.subgraph.validators.leaderboard_validator import (
    validate_leaderboards,
)


logger = logging.getLogger(__name__)


class SubgraphLeaderboardRepository:
    def __init__(self, subgraph_client: PerpSubgraphClient):
        self._subgraph_client = subgraph_client

    def fetch_leaderboards(
        self,
        *,
        window_start: int,
        window_end: int,
        max_records: int | None = None,
    ) -> LeaderboardFetchResult:
        rows = self._subgraph_client.fetch_all(
            epoch_begin=window_start,
            epoch_end=window_end,
            max_records=max_records,
        )
        validation = validate_leaderboards(rows)
        invalid_indexes = {issue.index for issue in validation.issues}

        for issue in validation.issues[:3]:
            logger.warning(
                "leaderboard_repo: invalid_record index=%s account=%s errors=%s",
                issue.index,
                issue.account,
                "; ".join(issue.errors),
            )
        if validation.invalid_count > 3:
            logger.warning(
                "leaderboard_repo: invalid_records_truncated more=%s",
                validation.invalid_count - 3,
            )

        records = [
            map_row_to_user_record(row)
            for index, row in enumerate(rows)
            if index not in invalid_indexes
        ]
        logger.info(
            "leaderboard_repo: fetched_leaderboards fetched=%s valid=%s invalid=%s window_start=%s window_end=%s",
            len(rows),
            validation.valid_count,
            validation.invalid_count,
            window_start,
            window_end,
        )
        return LeaderboardFetchResult(
            records=records,
            fetched_count=len(rows),
            issues=validation.issues,
        )
