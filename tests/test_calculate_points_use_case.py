from __future__ import annotations

from decimal import Decimal
import unittest

from perp_points.application.dto.points import CalculatePointsInput
from perp_points.application.use_cases.calculate_points import CalculatePointsUseCase
from perp_points.domain.entities.points import CalculationConfig, LiquidityRecord, UserRecord
from perp_points.domain.exceptions import PointsConfigInputError, PointsWindowInputError


def _record(account: str, volume: str, net_profit: str = "0") -> UserRecord:
    return UserRecord(
        account=account,
        trading_volume=Decimal(volume),
        condition_trade_volume=Decimal("0"),
        swap=Decimal("0"),
        net_profit=Decimal(net_profit),
        latest_update_timestamp=1500,
        start=None,
        ended=None,
        liquidity=LiquidityRecord.empty(account),
    )


class CalculatePointsUseCaseTests(unittest.TestCase):
    def _base_input(self, **overrides) -> CalculatePointsInput:
        payload = {
            "records": [_record("user1", "1000", "50"), _record("user2", "2000", "-10")],
            "config": CalculationConfig(
                liquidity_rate=Decimal("1"),
                trade_rate=Decimal("1"),
                trade_profit_rate=Decimal("1"),
            ),
            "window_start": 1000,
            "window_end": 1500,
            "overtime": False,
        }
        payload.update(overrides)
        return CalculatePointsInput(**payload)

    def test_returns_results_in_order_with_totals(self):
        result = CalculatePointsUseCase().execute(self._base_input())

        self.assertEqual([row.account for row in result.results], ["user1", "user2"])
        self.assertEqual(result.results[0].trade_points, Decimal("1000"))
        self.assertEqual(result.results[1].trade_points, Decimal("2000"))
        self.assertEqual(result.results[1].trade_profit_points, Decimal("0"))
        self.assertEqual(result.totals.trade_points, Decimal("3000"))
        self.assertEqual(result.totals.trade_profit_points, Decimal("50"))
        self.assertEqual(result.totals.total_points, Decimal("3050"))

    def test_zero_length_window_is_accepted(self):
        result = CalculatePointsUseCase().execute(self._base_input(window_start=1500, window_end=1500))
        self.assertEqual(len(result.results), 2)

    def test_rejects_window_end_before_start(self):
        with self.assertRaises(PointsWindowInputError):
            CalculatePointsUseCase().execute(self._base_input(window_start=2000, window_end=1000))

    def test_rejects_negative_window_bounds(self):
        with self.assertRaises(PointsWindowInputError):
            CalculatePointsUseCase().execute(self._base_input(window_start=-1))

    def test_rejects_negative_rate(self):
        config = CalculationConfig(
            liquidity_rate=Decimal("1"),
            trade_rate=Decimal("-1"),
            trade_profit_rate=Decimal("1"),
        )
        with self.assertRaises(PointsConfigInputError):
            CalculatePointsUseCase().execute(self._base_input(config=config))

    def test_rejects_negative_limit(self):
        config = CalculationConfig(
            liquidity_rate=Decimal("1"),
            trade_rate=Decimal("1"),
            trade_profit_rate=Decimal("1"),
            trade_profit_limit=Decimal("-5"),
        )
        with self.assertRaises(PointsConfigInputError):
            CalculatePointsUseCase().execute(self._base_input(config=config))

    def test_rejects_non_finite_rate(self):
        config = CalculationConfig(
            liquidity_rate=Decimal("NaN"),
            trade_rate=Decimal("1"),
            trade_profit_rate=Decimal("1"),
        )
        with self.assertRaises(PointsConfigInputError):
            CalculatePointsUseCase().execute(self._base_input(config=config))


if __name__ == "__main__":
    unittest.main()
