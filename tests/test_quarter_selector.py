from __future__ import annotations

from datetime import date

import pytest
from factories import baseline, calm_forecast

from ricecast.engine.quarter_selector import select_quarter
from ricecast.errors import NotFoundError
from ricecast.schemas.prediction import CoverageStatus, EstimateBasis, HistoricalBaseline


def test_year_beyond_horizon_ranks_on_history_alone(baselines_2025: list[HistoricalBaseline]) -> None:
    result = select_quarter(calm_forecast(date(2025, 5, 1)), 2030, baselines_2025)

    assert result.optimal_quarter == 1
    assert [q.quarter for q in result.quarters] == [1, 4, 2, 3]
    assert [q.rank for q in result.quarters] == [1, 2, 3, 4]
    for summary in result.quarters:
        assert summary.basis == EstimateBasis.historical_only
        assert summary.coverage_status == CoverageStatus.no_forecast_coverage
        assert summary.best_window is None
        assert summary.estimate.is_estimate is True
        assert summary.estimate.baseline_year == 2025


def test_covered_quarter_is_scored_from_forecast() -> None:
    baselines = [baseline(q, 2025, yield_tonnes_per_ha=4.0) for q in (1, 2, 3, 4)]
    result = select_quarter(calm_forecast(date(2025, 5, 1)), 2025, baselines)

    by_quarter = {q.quarter: q for q in result.quarters}
    assert by_quarter[2].basis == EstimateBasis.forecast
    assert by_quarter[2].window_count == 10
    assert by_quarter[2].best_window is not None
    assert by_quarter[1].basis == EstimateBasis.historical_only
    assert by_quarter[2].estimate.predicted_yield == pytest.approx(4.002)
    assert result.optimal_quarter == 2


def test_full_ties_break_on_quarter_number() -> None:
    baselines = [baseline(q, 2025, yield_tonnes_per_ha=4.0) for q in (1, 2, 3, 4)]
    result = select_quarter(calm_forecast(date(2025, 5, 1)), 2031, baselines)
    assert [q.quarter for q in result.quarters] == [1, 2, 3, 4]


def test_quarter_without_any_baseline_is_left_unranked() -> None:
    baselines = [baseline(q, 2025) for q in (1, 2, 4)]
    result = select_quarter(calm_forecast(date(2025, 5, 1)), 2025, baselines)

    assert result.unscored_quarters == [3]
    assert sorted(q.quarter for q in result.quarters) == [1, 2, 4]
    assert [q.rank for q in result.quarters] == [1, 2, 3]
    assert result.optimal_quarter == 2


def test_no_baselines_at_all_raises() -> None:
    with pytest.raises(NotFoundError):
        select_quarter(calm_forecast(date(2025, 5, 1)), 2025, [])


def test_historical_ranking_recommendations(baselines_2025: list[HistoricalBaseline]) -> None:
    result = select_quarter(calm_forecast(date(2025, 5, 1)), 2030, baselines_2025)

    assert result.alternative_quarters == [4, 2]
    assert result.unscored_quarters == []
    assert result.recommendations == [
        "Plant during Q1 (January-March) for an expected yield of 4.42 t/ha",
        "Moderate confidence: monitor weather conditions closely",
        "Close yield predictions across quarters: keep a backup quarter in mind",
        "The forecast does not cover Q1 yet, so this ranking rests on historical yields",
    ]


def test_clear_leader_gets_advantage_message() -> None:
    baselines = [
        baseline(1, 2025, yield_tonnes_per_ha=5.0),
        baseline(2, 2025, yield_tonnes_per_ha=3.9),
        baseline(3, 2025, yield_tonnes_per_ha=3.5),
        baseline(4, 2025, yield_tonnes_per_ha=3.0),
    ]
    result = select_quarter(calm_forecast(date(2025, 5, 1)), 2031, baselines)

    assert result.optimal_quarter == 1
    assert "Significant yield advantage over other quarters" in result.recommendations
