from __future__ import annotations

from collections.abc import Callable
import logging
import time

from perp_points.application.dto.points import (
    CalculateEpochPointsInput,
    CalculateEpochPointsOutput,
    CalculatePointsInput,
)
from perp_points.application.ports.leaderboard_port import LeaderboardPort
from perp_points.application.use_cases.calculate_points import (
    CalculatePointsUseCase,
    validate_config,
    validate_window,
)
from perp_points.domain.exceptions import LeaderboardDataInvalidError, LeaderboardQueryInputError


logger = logging.getLogger(__name__)


class CalculateEpochPointsUseCase:
    def __init__(
        self,
        *,
        leaderboard_port: LeaderboardPort,
        clock: Callable[[], float] = time.time,
    ):
        self._leaderboard_port = leaderboard_port
        self._clock = clock
        self._calculate_points = CalculatePointsUseCase()

    def execute(self, command: CalculateEpochPointsInput) -> CalculateEpochPointsOutput:
        validate_window(window_start=command.window_start, window_end=command.window_end)
        validate_config(command.config)
        if command.max_records is not None and command.max_records <= 0:
            raise LeaderboardQueryInputError("max_records must be a positive integer when provided.")

        fetched = self._leaderboard_port.fetch_leaderboards(
            window_start=command.window_start,
            window_end=command.window_end,
            max_records=command.max_records,
        )
        if fetched.issues and command.strict:
            first = fetched.issues[0]
            raise LeaderboardDataInvalidError(
                f"{len(fetched.issues)} leaderboard records failed validation; "
                f"first account={first.account}: {', '.join(first.errors)}"
            )

        # The source keeps accruing after the window closes; history runs
        # must pin trading totals to the `ended` snapshots.
        overtime = command.overtime
        if overtime is None:
            overtime = int(self._clock()) > command.window_end

        calculated = self._calculate_points.execute(
            CalculatePointsInput(
                records=fetched.records,
                config=command.config,
                window_start=command.window_start,
                window_end=command.window_end,
                overtime=overtime,
            )
        )

        logger.info(
            "calculate_epoch_points: done fetched=%s valid=%s invalid=%s overtime=%s",
            fetched.fetched_count,
            len(fetched.records),
            len(fetched.issues),
            overtime,
        )
        return CalculateEpochPointsOutput(
            results=calculated.results,
            totals=calculated.totals,
            overtime=overtime,
            fetched_count=fetched.fetched_count,
            valid_count=len(fetched.records),
            invalid_count=len(fetched.issues),
            issues=fetched.issues,
        )
