from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from threading import Lock
import time

import httpx


logger = logging.getLogger(__name__)


DEFAULT_PERP_SUBGRAPH_ENDPOINT = (
    "https://api.goat.0xgraph.xyz/api/public/484b3c49-8f28-4a57-b4ae-dc6be91dd78f"
    "/subgraphs/goat-perp/v1.0.0/gn"
)


LEADERBOARD_QUERY = """
query Leaderboards($first: Int!, $skip: Int!, $epochBegin: Int!, $epochEnded: Int!) {
  data: leaderboards(first: $first, skip: $skip) {
    account: id
    swap
    tradingVolume
    conditionTradeVolume
    netProfit
    latestUpdateTimestamp
    start: snap(first: 1, orderBy: timestamp, orderDirection: desc, where: { timestamp_lte: $epochBegin }) {
      id
      timestamp
      tradingVolume
      conditionTradeVolume
      swap
      netProfit
    }
    ended: snap(first: 1, orderBy: timestamp, orderDirection: desc, where: { timestamp_lte: $epochEnded }) {
      id
      timestamp
      tradingVolume
      conditionTradeVolume
      swap
      netProfit
    }
    liquidity {
      account: id
      lp
      start: snap(first: 1, orderBy: timestamp, orderDirection: desc, where: { timestamp_lte: $epochBegin }) {
        id
        lp
        basePoints
        timestamp
      }
      ended: snap(first: 1, orderBy: timestamp, orderDirection: desc, where: { timestamp_lte: $epochEnded }) {
        id
        lp
        basePoints
        timestamp
      }
    }
  }
}
"""


class SubgraphError(RuntimeError):
    def __init__(self, message: str, *, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class SubgraphRateLimitError(SubgraphError):
    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, code="RATE_LIMIT", status_code=429)


class SubgraphNetworkError(SubgraphError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message, code="NETWORK_ERROR", status_code=status_code)


class _RetryableError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class PerpSubgraphClientSettings:
    endpoint: str = DEFAULT_PERP_SUBGRAPH_ENDPOINT
    timeout_seconds: float = 15.0
    max_retries: int = 3
    retry_delay_ms: int = 1000
    requests_per_second: float = 5.0
    page_size: int = 1000
    rate_limit_cooldown_seconds: float = 5.0
    max_rate_limit_waits: int = 5


@dataclass(frozen=True)
class PaginationInfo:
    skip: int
    has_more: bool
    total_fetched: int


@dataclass(frozen=True)
class LeaderboardPage:
    rows: list[dict]
    pagination: PaginationInfo


class PerpSubgraphClient:
    def __init__(
        self,
        settings: PerpSubgraphClientSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport
        self._lock = Lock()
        self._last_request_at = 0.0

    @property
    def settings(self) -> PerpSubgraphClientSettings:
        return self._settings

    def fetch_page(self, *, epoch_begin: int, epoch_end: int, skip: int = 0) -> LeaderboardPage:
        page_size = max(1, self._settings.page_size)
        payload = self._post_graphql(
            query=LEADERBOARD_QUERY,
            variables={
                "first": page_size,
                "skip": int(skip),
                "epochBegin": int(epoch_begin),
                "epochEnded": int(epoch_end),
            },
        )
        rows = (payload.get("data") or {}).get("data") or []
        return LeaderboardPage(
            rows=rows,
            pagination=PaginationInfo(
                skip=skip,
                has_more=len(rows) == page_size,
                total_fetched=skip + len(rows),
            ),
        )

    def fetch_all(
        self,
        *,
        epoch_begin: int,
        epoch_end: int,
        max_records: int | None = None,
        start_from: int = 0,
        on_progress: Callable[[PaginationInfo], None] | None = None,
    ) -> list[dict]:
        page_size = max(1, self._settings.page_size)
        skip = max(0, start_from)
        result: list[dict] = []
        seen_accounts: set[str] = set()
        duplicates = 0
        pages = 0
        rate_limit_waits = 0

        logger.info(
            "perp_subgraph_client: fetch_all_started epoch_begin=%s epoch_end=%s start_from=%s max_records=%s",
            epoch_begin,
            epoch_end,
            skip,
            max_records,
        )

        while max_records is None or len(result) < max_records:
            try:
                page = self.fetch_page(epoch_begin=epoch_begin, epoch_end=epoch_end, skip=skip)
            except SubgraphRateLimitError:
                rate_limit_waits += 1
                if rate_limit_waits > self._settings.max_rate_limit_waits:
                    raise
                logger.warning(
                    "perp_subgraph_client: rate_limited skip=%s wait=%s/%s cooldown_seconds=%s",
                    skip,
                    rate_limit_waits,
                    self._settings.max_rate_limit_waits,
                    self._settings.rate_limit_cooldown_seconds,
                )
                time.sleep(self._settings.rate_limit_cooldown_seconds)
                continue

            pages += 1
            for row in page.rows:
                if max_records is not None and len(result) >= max_records:
                    break
                account = str(row.get("account") or "")
                if account and account in seen_accounts:
                    duplicates += 1
                    continue
                if account:
                    seen_accounts.add(account)
                result.append(row)

            skip += page_size
            has_more = page.pagination.has_more and (
                max_records is None or len(result) < max_records
            )
            if on_progress is not None:
                on_progress(PaginationInfo(skip=skip, has_more=has_more, total_fetched=len(result)))

            logger.info(
                "perp_subgraph_client: fetched_page page=%s rows=%s total=%s",
                pages,
                len(page.rows),
                len(result),
            )
            if not has_more:
                break

        logger.info(
            "perp_subgraph_client: fetch_all_completed records=%s pages=%s duplicates=%s",
            len(result),
            pages,
            duplicates,
        )
        return result

    def _post_graphql(self, *, query: str, variables: dict) -> dict:
        retries = max(0, self._settings.max_retries)
        delay = max(0, self._settings.retry_delay_ms) / 1000.0
        last_exc: _RetryableError | None = None

        for attempt in range(retries + 1):
            self._respect_rate_limit()
            try:
                return self._send(query=query, variables=variables)
            except _RetryableError as exc:
                last_exc = exc
                if attempt == retries:
                    break
                logger.warning(
                    "perp_subgraph_client: graphql_retry attempt=%s/%s error=%s",
                    attempt + 1,
                    retries,
                    exc,
                )
                time.sleep(delay * (2**attempt))

        status_code = last_exc.status_code if last_exc is not None else None
        if status_code is not None and status_code >= 500:
            raise SubgraphNetworkError(f"Server error: {last_exc}", status_code=status_code) from last_exc
        raise SubgraphNetworkError(f"Network error: {last_exc}", status_code=status_code) from last_exc

    def _send(self, *, query: str, variables: dict) -> dict:
        try:
            with httpx.Client(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = client.post(
                    self._settings.endpoint,
                    json={"query": query, "variables": variables},
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise _RetryableError(str(exc)) from exc

        status = response.status_code
        if status == 429:
            raise SubgraphRateLimitError()
        if status >= 500:
            raise _RetryableError(f"HTTP {status}", status_code=status)
        if status >= 400:
            raise SubgraphError(f"Client error: HTTP {status}", code="CLIENT_ERROR", status_code=status)

        try:
            payload = response.json()
        except ValueError as exc:
            raise _RetryableError(f"Invalid JSON response: {exc}") from exc

        errors = payload.get("errors") or []
        if errors:
            message = " | ".join(str(err.get("message", err)) for err in errors)
            raise _RetryableError(message)
        return payload

    def _respect_rate_limit(self) -> None:
        if self._settings.requests_per_second <= 0:
            return
        min_interval = 1.0 / self._settings.requests_per_second

        with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_at
            if elapsed < min_interval:
                time.sleep(min_interval - elapsed)
            self._last_request_at = time.monotonic()
