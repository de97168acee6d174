"""Pick the best quarter of a year to plant.

Each quarter is scored from the same forecast horizon and baseline set;
quarters the horizon does not reach fall back to their historical baseline.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from ricecast.engine.quarters import QUARTERS
from ricecast.engine.recommendations import alternative_quarters, quarter_recommendations
from ricecast.engine.windows import select_windows
from ricecast.engine.yield_estimator import estimate_yield, resolve_baseline
from ricecast.errors import NotFoundError
from ricecast.schemas.prediction import (
    HistoricalBaseline,
    QuarterSelection,
    QuarterSummary,
    WeatherDayPoint,
    WindowSelection,
    YieldEstimate,
)


def estimate_for_selection(
    selection: WindowSelection,
    baselines: Sequence[HistoricalBaseline],
) -> YieldEstimate:
    baseline, is_estimate = resolve_baseline(baselines, selection.quarter, selection.year)
    best = selection.best_window
    if best is None:
        return estimate_yield(baseline, features=None, is_estimate=is_estimate)
    return estimate_yield(
        baseline,
        features=best.features,
        days_present=selection.days_present,
        days_expected=selection.days_expected,
        is_estimate=is_estimate,
    )


def select_quarter(
    forecast: Sequence[WeatherDayPoint],
    year: int,
    baselines: Sequence[HistoricalBaseline],
    *,
    horizon_start: dt.date | None = None,
    horizon_days: int = 16,
) -> QuarterSelection:
    """Rank the quarters by predicted yield, then confidence, then quarter
    number.

    A quarter with no baseline in any year cannot be estimated; it is left
    out of the ranking and listed in ``unscored_quarters``.
    """
    scored: list[tuple[WindowSelection, YieldEstimate]] = []
    unscored: list[int] = []
    for quarter in QUARTERS:
        selection = select_windows(
            forecast,
            year,
            quarter,
            horizon_start=horizon_start,
            horizon_days=horizon_days,
        )
        try:
            scored.append((selection, estimate_for_selection(selection, baselines)))
        except NotFoundError:
            unscored.append(quarter)
    if not scored:
        raise NotFoundError("No historical baselines available")

    scored.sort(
        key=lambda item: (
            -item[1].predicted_yield,
            -item[1].confidence_level,
            item[0].quarter,
        )
    )
    summaries = [
        QuarterSummary(
            quarter=selection.quarter,
            rank=rank,
            basis=estimate.basis,
            coverage_status=selection.status,
            window_count=len(selection.windows),
            best_window=selection.best_window,
            estimate=estimate,
        )
        for rank, (selection, estimate) in enumerate(scored, start=1)
    ]
    return QuarterSelection(
        year=year,
        optimal_quarter=summaries[0].quarter,
        quarters=summaries,
        alternative_quarters=alternative_quarters(summaries),
        unscored_quarters=unscored,
        recommendations=quarter_recommendations(summaries),
    )
