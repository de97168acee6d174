"""Per-quarter performance and trends over the stored baseline years."""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Sequence
from statistics import fmean, linear_regression

from ricecast.engine.quarters import QUARTERS, validate_quarter
from ricecast.engine.yield_estimator import compare_to_baseline, resolve_baseline
from ricecast.errors import NotFoundError
from ricecast.schemas.prediction import (
    HistoricalBaseline,
    HistoricalInsights,
    QuarterInsight,
    QuarterPerformance,
    QuarterTrend,
    YieldTrend,
)

# yearly slope, as a percentage of the quarter's mean yield, below which a
# quarter counts as flat
STABLE_CHANGE_PERCENT = 0.25


def _by_quarter(records: Sequence[HistoricalBaseline], quarter: int) -> list[HistoricalBaseline]:
    return sorted((r for r in records if r.quarter == quarter), key=lambda r: r.year)


def quarter_performance(records: Sequence[HistoricalBaseline]) -> list[QuarterPerformance]:
    """Average, best and worst year for every quarter that has baselines."""
    performance = []
    for quarter in QUARTERS:
        rows = _by_quarter(records, quarter)
        if not rows:
            continue
        # earliest year wins ties at both ends
        best = max(rows, key=lambda r: (r.yield_tonnes_per_ha, -r.year))
        worst = min(rows, key=lambda r: (r.yield_tonnes_per_ha, r.year))
        performance.append(
            QuarterPerformance(
                quarter=quarter,
                years=len(rows),
                average_yield=round(fmean(r.yield_tonnes_per_ha for r in rows), 3),
                best_year=best.year,
                best_yield=best.yield_tonnes_per_ha,
                worst_year=worst.year,
                worst_yield=worst.yield_tonnes_per_ha,
            )
        )
    return performance


def best_quarter(performance: Sequence[QuarterPerformance]) -> int:
    if not performance:
        raise NotFoundError("No historical baselines available")
    return min(performance, key=lambda p: (-p.average_yield, p.quarter)).quarter


def trend_analysis(records: Sequence[HistoricalBaseline], quarter: int) -> QuarterTrend:
    """Least-squares yield change per year for one quarter."""
    validate_quarter(quarter)
    rows = _by_quarter(records, quarter)
    if not rows:
        raise NotFoundError(f"No historical baseline for Q{quarter}")

    years = [r.year for r in rows]
    yields = [r.yield_tonnes_per_ha for r in rows]
    slope = linear_regression(years, yields).slope if len(rows) > 1 else 0.0

    mean_yield = fmean(yields)
    change_percent = slope / mean_yield * 100 if mean_yield else 0.0
    if abs(change_percent) < STABLE_CHANGE_PERCENT:
        trend = YieldTrend.stable
    elif slope > 0:
        trend = YieldTrend.improving
    else:
        trend = YieldTrend.declining
    return QuarterTrend(
        quarter=quarter,
        trend=trend,
        change_per_year=round(slope, 4),
        years=years,
        yields=yields,
    )


def quarter_insight(records: Sequence[HistoricalBaseline], quarter: int, year: int) -> QuarterInsight:
    """How the ``(quarter, year)`` baseline sits within that quarter's history."""
    baseline, is_estimate = resolve_baseline(records, quarter, year)
    yields = sorted(r.yield_tonnes_per_ha for r in _by_quarter(records, quarter))
    average = fmean(yields)
    percentile = bisect_left(yields, baseline.yield_tonnes_per_ha) / len(yields) * 100
    return QuarterInsight(
        baseline=baseline,
        is_estimate=is_estimate,
        comparison=compare_to_baseline(baseline.yield_tonnes_per_ha, average),
        percentile=round(percentile, 1),
        trend=trend_analysis(records, quarter),
    )


def historical_insights(
    records: Sequence[HistoricalBaseline],
    *,
    quarter: int | None = None,
    year: int | None = None,
) -> HistoricalInsights:
    performance = quarter_performance(records)
    best = best_quarter(performance)
    focus = quarter_insight(records, quarter, year) if quarter is not None and year is not None else None
    return HistoricalInsights(
        quarter_performance=performance,
        best_quarter=best,
        trends=[trend_analysis(records, p.quarter) for p in performance],
        focus=focus,
    )
