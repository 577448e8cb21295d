from __future__ import annotations

from functools import lru_cache

from perp_points.application.use_cases.calculate_epoch_points import CalculateEpochPointsUseCase
from perp_points.application.use_cases.calculate_points import CalculatePointsUseCase
from perp_points.domain.entities.points import CalculationConfig
from perp_points.infrastructure.clients.perp_subgraph_client import (
    PerpSubgraphClient,
    PerpSubgraphClientSettings,
)
from perp_points.infrastructure.subgraph.repositories.leaderboard_repository import (
    SubgraphLeaderboardRepository,
)
from perp_points.shared.config import get_settings


@lru_cache(maxsize=1)
def _get_perp_subgraph_client() -> PerpSubgraphClient:
    settings = get_settings()
    return PerpSubgraphClient(
        PerpSubgraphClientSettings(
            endpoint=settings.perp_subgraph_endpoint,
            timeout_seconds=settings.perp_subgraph_timeout_seconds,
            max_retries=settings.perp_subgraph_max_retries,
            retry_delay_ms=settings.perp_subgraph_retry_delay_ms,
            requests_per_second=settings.perp_subgraph_requests_per_second,
            page_size=settings.perp_subgraph_page_size,
            rate_limit_cooldown_seconds=settings.perp_subgraph_rate_limit_cooldown_seconds,
            max_rate_limit_waits=settings.perp_subgraph_max_rate_limit_waits,
        )
    )


def get_default_calculation_config() -> CalculationConfig:
    return get_settings().default_calculation_config()


def get_calculate_points_use_case() -> CalculatePointsUseCase:
    return CalculatePointsUseCase()


def get_calculate_epoch_points_use_case() -> CalculateEpochPointsUseCase:
    return CalculateEpochPointsUseCase(
        leaderboard_port=SubgraphLeaderboardRepository(_get_perp_subgraph_client()),
    )
