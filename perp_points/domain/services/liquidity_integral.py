from __future__ import annotations

from decimal import Decimal, localcontext

from perp_points.domain.entities.points import (
    POINTS_DECIMAL_CONTEXT,
    LiquidityRecord,
    LiquiditySnapshot,
)


def running_integral_at(*, snapshot: LiquiditySnapshot, timestamp: int) -> Decimal:
    """Running liquidity integral evaluated at `timestamp`.

    Past the snapshot the liquidity is held flat at `snapshot.lp`. At or before
    the snapshot the stored base points are returned unchanged.
    """
    if snapshot.timestamp < timestamp:
        return snapshot.base_points + Decimal(timestamp - snapshot.timestamp) * snapshot.lp
    return snapshot.base_points


def integrate_liquidity(
    *,
    liquidity: LiquidityRecord,
    window_start: int,
    window_end: int,
) -> Decimal:
    """Time-weighted liquidity over [window_start, window_end].

    Uses the two snapshots nearest at-or-before each window bound. The result
    is not clamped; inconsistent snapshots can make it negative.
    """
    ended = liquidity.ended
    if ended is None:
        return Decimal("0")
    if ended.timestamp < window_start:
        return Decimal("0")

    with localcontext(POINTS_DECIMAL_CONTEXT):
        integral = running_integral_at(snapshot=ended, timestamp=window_end)
        if liquidity.start is not None:
            integral -= running_integral_at(snapshot=liquidity.start, timestamp=window_start)
    return integral
