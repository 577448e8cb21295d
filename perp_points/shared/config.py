from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
import os

from dotenv import load_dotenv

from perp_points.domain.entities.points import POINTS_DECIMAL_CONTEXT, CalculationConfig
from perp_points.infrastructure.clients.perp_subgraph_client import DEFAULT_PERP_SUBGRAPH_ENDPOINT


load_dotenv()


SECONDS_PER_HOUR = Decimal("3600")


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _decimal_or_none(name: str) -> Decimal | None:
    value = (_env(name) or "").strip()
    if not value:
        return None
    return Decimal(value)


@dataclass(frozen=True)
class Settings:
    perp_subgraph_endpoint: str
    perp_subgraph_timeout_seconds: float
    perp_subgraph_max_retries: int
    perp_subgraph_retry_delay_ms: int
    perp_subgraph_requests_per_second: float
    perp_subgraph_page_size: int
    perp_subgraph_rate_limit_cooldown_seconds: float
    perp_subgraph_max_rate_limit_waits: int
    points_liquidity_rate_per_hour: Decimal
    points_trade_rate: Decimal
    points_trade_profit_rate: Decimal
    points_liquidity_limit: Decimal | None
    points_trade_limit: Decimal | None
    points_trade_profit_limit: Decimal | None

    def default_calculation_config(self) -> CalculationConfig:
        with localcontext(POINTS_DECIMAL_CONTEXT):
            liquidity_rate = self.points_liquidity_rate_per_hour / SECONDS_PER_HOUR
        return CalculationConfig(
            liquidity_rate=liquidity_rate,
            trade_rate=self.points_trade_rate,
            trade_profit_rate=self.points_trade_profit_rate,
            liquidity_limit=self.points_liquidity_limit,
            trade_limit=self.points_trade_limit,
            trade_profit_limit=self.points_trade_profit_limit,
        )


def get_settings() -> Settings:
    return Settings(
        perp_subgraph_endpoint=_env("PERP_SUBGRAPH_ENDPOINT", DEFAULT_PERP_SUBGRAPH_ENDPOINT),
        perp_subgraph_timeout_seconds=float(_env("PERP_SUBGRAPH_TIMEOUT_SECONDS", "15")),
        perp_subgraph_max_retries=int(_env("PERP_SUBGRAPH_MAX_RETRIES", "3")),
        perp_subgraph_retry_delay_ms=int(_env("PERP_SUBGRAPH_RETRY_DELAY_MS", "1000")),
        perp_subgraph_requests_per_second=float(_env("PERP_SUBGRAPH_REQUESTS_PER_SECOND", "5")),
        perp_subgraph_page_size=int(_env("PERP_SUBGRAPH_PAGE_SIZE", "1000")),
        perp_subgraph_rate_limit_cooldown_seconds=float(
            _env("PERP_SUBGRAPH_RATE_LIMIT_COOLDOWN_SECONDS", "5")
        ),
        perp_subgraph_max_rate_limit_waits=int(_env("PERP_SUBGRAPH_MAX_RATE_LIMIT_WAITS", "5")),
        points_liquidity_rate_per_hour=Decimal(_env("POINTS_LIQUIDITY_RATE_PER_HOUR", "0.1")),
        points_trade_rate=Decimal(_env("POINTS_TRADE_RATE", "5")),
        points_trade_profit_rate=Decimal(_env("POINTS_TRADE_PROFIT_RATE", "1")),
        points_liquidity_limit=_decimal_or_none("POINTS_LIQUIDITY_LIMIT"),
        points_trade_limit=_decimal_or_none("POINTS_TRADE_LIMIT"),
        points_trade_profit_limit=_decimal_or_none("POINTS_TRADE_PROFIT_LIMIT"),
    )
