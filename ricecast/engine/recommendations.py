"""Plain-language advice attached to quarter selections and planting analyses."""

from __future__ import annotations

from collections.abc import Sequence

from ricecast.engine.quarters import QUARTER_NAMES
from ricecast.schemas.prediction import (
    CandidateWindow,
    CoverageStatus,
    EstimateBasis,
    QuarterSummary,
    RiskFlagKind,
    RiskLevel,
)

HIGH_CONFIDENCE = 0.9
GOOD_CONFIDENCE = 0.8
SIGNIFICANT_ADVANTAGE_PERCENT = 20.0
MODERATE_ADVANTAGE_PERCENT = 10.0
EXCELLENT_WINDOW_SCORE = 90.0
ALTERNATIVE_QUARTERS = 2
ALTERNATIVE_WINDOWS = 3

_FLAG_ADVICE = {
    RiskFlagKind.heavy_rain: "Heavy rain expected on {dates}: check field drainage and bund condition",
    RiskFlagKind.storm_wind: "Strong winds expected on {dates}: delay transplanting seedlings until they pass",
    RiskFlagKind.temperature_out_of_band: (
        "Temperatures outside the germination range on {dates}: protect seedbeds or shift the sowing date"
    ),
}


def confidence_advice(confidence: float) -> str:
    if confidence >= HIGH_CONFIDENCE:
        return "High confidence in this recommendation based on weather data quality"
    if confidence >= GOOD_CONFIDENCE:
        return "Good confidence in this recommendation"
    return "Moderate confidence: monitor weather conditions closely"


def advantage_advice(best_yield: float, runner_up_yield: float) -> str:
    advantage = (best_yield - runner_up_yield) / best_yield * 100 if best_yield else 0.0
    if advantage > SIGNIFICANT_ADVANTAGE_PERCENT:
        return "Significant yield advantage over other quarters"
    if advantage > MODERATE_ADVANTAGE_PERCENT:
        return "Moderate yield advantage over other quarters"
    return "Close yield predictions across quarters: keep a backup quarter in mind"


def alternative_quarters(summaries: Sequence[QuarterSummary]) -> list[int]:
    """Next best quarters after the optimal one; ``summaries`` must be ranked."""
    return [s.quarter for s in summaries[1 : 1 + ALTERNATIVE_QUARTERS]]


def quarter_recommendations(summaries: Sequence[QuarterSummary]) -> list[str]:
    best = summaries[0]
    estimate = best.estimate
    advice = [
        f"Plant during {QUARTER_NAMES[best.quarter]} "
        f"for an expected yield of {estimate.predicted_yield:.2f} t/ha",
        confidence_advice(estimate.confidence_level),
    ]
    if len(summaries) > 1:
        advice.append(advantage_advice(estimate.predicted_yield, summaries[1].estimate.predicted_yield))
    if best.basis == EstimateBasis.historical_only:
        advice.append(f"The forecast does not cover Q{best.quarter} yet, so this ranking rests on historical yields")
    return advice


def _flag_advice(window: CandidateWindow) -> list[str]:
    dates: dict[RiskFlagKind, list[str]] = {}
    for flag in window.risk_flags:
        dates.setdefault(flag.kind, []).append(flag.date.isoformat())
    return [_FLAG_ADVICE[kind].format(dates=", ".join(days)) for kind, days in dates.items()]


def window_recommendations(
    quarter: int,
    status: CoverageStatus,
    windows: Sequence[CandidateWindow],
    risk_level: RiskLevel,
    confidence: float,
) -> list[str]:
    """Advice for one quarter's planting windows; ``windows`` must be ranked."""
    if not windows:
        if status == CoverageStatus.insufficient_window:
            return [f"Re-run the analysis in a few days, once the forecast covers a full week of Q{quarter}"]
        return [f"Re-run the analysis once the forecast reaches Q{quarter}; until then rely on historical yields"]

    best = windows[0]
    advice = []
    if best.weather_score >= EXCELLENT_WINDOW_SCORE:
        advice.append("Excellent planting conditions predicted")
    advice.append(f"Plant between {best.start_date.isoformat()} and {best.end_date.isoformat()}")
    advice.append(confidence_advice(confidence))
    advice.extend(_flag_advice(best))
    if risk_level == RiskLevel.high:
        advice.append("Consider backup planting dates")
        advice.append("Monitor weather forecasts daily")
    for window in windows[1 : 1 + ALTERNATIVE_WINDOWS]:
        advice.append(
            f"Alternative window: {window.start_date.isoformat()} to {window.end_date.isoformat()} "
            f"(weather score {window.weather_score:.1f})"
        )
    return advice
