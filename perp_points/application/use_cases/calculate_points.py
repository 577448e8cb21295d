from __future__ import annotations

import logging
from decimal import Decimal

from perp_points.application.dto.points import CalculatePointsInput, CalculatePointsOutput
from perp_points.domain.entities.points import CalculationConfig
from perp_points.domain.exceptions import PointsConfigInputError, PointsWindowInputError
from perp_points.domain.services.points import calculate_user_points, summarize_points


logger = logging.getLogger(__name__)


def validate_window(*, window_start: int, window_end: int) -> None:
    if window_start < 0 or window_end < 0:
        raise PointsWindowInputError("window bounds must be non-negative unix seconds.")
    if window_end < window_start:
        raise PointsWindowInputError("window_end must be greater than or equal to window_start.")


def validate_config(config: CalculationConfig) -> None:
    values: dict[str, Decimal | None] = {
        "liquidity_rate": config.liquidity_rate,
        "trade_rate": config.trade_rate,
        "trade_profit_rate": config.trade_profit_rate,
        "liquidity_limit": config.liquidity_limit,
        "trade_limit": config.trade_limit,
        "trade_profit_limit": config.trade_profit_limit,
    }
    for name, value in values.items():
        if value is None:
            continue
        if not value.is_finite():
            raise PointsConfigInputError(f"{name} must be a finite number.")
        if value < 0:
            raise PointsConfigInputError(f"{name} must be non-negative.")


class CalculatePointsUseCase:
    def execute(self, command: CalculatePointsInput) -> CalculatePointsOutput:
        validate_window(window_start=command.window_start, window_end=command.window_end)
        validate_config(command.config)

        results = calculate_user_points(
            records=command.records,
            config=command.config,
            window_start=command.window_start,
            window_end=command.window_end,
            overtime=command.overtime,
        )
        totals = summarize_points(results)

        logger.info(
            "calculate_points: calculated users=%s window_start=%s window_end=%s overtime=%s total_points=%s",
            len(results),
            command.window_start,
            command.window_end,
            command.overtime,
            totals.total_points,
        )
        return CalculatePointsOutput(results=results, totals=totals)
