from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import pytest
from factories import calm_forecast, manila_may_forecast
from httpx import AsyncClient

from ricecast.errors import ProviderError
from ricecast.main import app
from ricecast.schemas.prediction import HistoricalBaseline, Location, WeatherDayPoint
from ricecast.services.weather_provider import PROVIDER_UNAVAILABLE, WeatherForecastProvider

MANILA = {"latitude": 14.5995, "longitude": 120.9842, "name": "Manila"}


@pytest.fixture
def provider_calls(
    monkeypatch: pytest.MonkeyPatch,
    baselines_2025: list[HistoricalBaseline],
) -> dict[str, int]:
    calls = {"forecast": 0, "historical": 0}

    async def fake_forecast(
        self: WeatherForecastProvider, location: Location, horizon_days: int | None = None
    ) -> list[WeatherDayPoint]:
        calls["forecast"] += 1
        return manila_may_forecast()

    async def fake_historical(self: WeatherForecastProvider) -> list[HistoricalBaseline]:
        calls["historical"] += 1
        return baselines_2025

    monkeypatch.setattr(WeatherForecastProvider, "get_forecast", fake_forecast)
    monkeypatch.setattr(WeatherForecastProvider, "list_historical", fake_historical)
    return calls


@pytest.mark.asyncio
async def test_planting_window_for_manila(client: AsyncClient, provider_calls: dict[str, int]) -> None:
    response = await client.post(
        "/api/v1/predictions/planting-window",
        json={"location": MANILA, "year": 2025, "quarter": 2},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["selected_quarter"] == 2
    assert body["best_window"]["start_date"] == "2025-05-08"
    assert body["best_window"]["end_date"] == "2025-05-14"
    assert body["risk_level"] == "low"
    assert body["risk_flags"] == []
    assert body["estimate"]["basis"] == "forecast"
    assert 0 < body["confidence"] <= 1
    assert provider_calls == {"forecast": 1, "historical": 1}


@pytest.mark.asyncio
async def test_planting_window_beyond_horizon(client: AsyncClient, provider_calls: dict[str, int]) -> None:
    response = await client.post(
        "/api/v1/predictions/planting-window",
        json={"location": MANILA, "year": 2026, "quarter": 1},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "no_forecast_coverage"
    assert body["message"] == "Forecast does not reach that far yet"
    assert body["windows"] == []
    assert body["estimate"]["basis"] == "historical_only"
    assert body["estimate"]["is_estimate"] is True


@pytest.mark.asyncio
async def test_quarter_selection_fetches_forecast_once(
    client: AsyncClient,
    provider_calls: dict[str, int],
) -> None:
    response = await client.post(
        "/api/v1/predictions/quarter-selection",
        json={"location": MANILA, "year": 2025},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["optimal_quarter"] in {1, 2, 3, 4}
    assert len(body["quarters"]) == 4
    assert provider_calls == {"forecast": 1, "historical": 1}


@pytest.mark.asyncio
async def test_provider_failure_maps_to_503(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_forecast(self: WeatherForecastProvider, location: Location, horizon_days: int | None = None):
        raise ProviderError(PROVIDER_UNAVAILABLE)

    monkeypatch.setattr(WeatherForecastProvider, "get_forecast", failing_forecast)

    response = await client.post(
        "/api/v1/predictions/planting-window",
        json={"location": MANILA, "year": 2025, "quarter": 2},
    )

    assert response.status_code == 503
    detail = response.json()["detail"]
    assert detail["error"] == "provider_unavailable"
    assert detail["details"] == ["Weather service is unavailable, try again later"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"location": MANILA, "year": 2025, "quarter": 5},
        {"location": MANILA, "year": 2024, "quarter": 1},
        {"location": {**MANILA, "latitude": 91}, "year": 2025, "quarter": 1},
        {"location": {**MANILA, "name": ""}, "year": 2025, "quarter": 1},
    ],
    ids=["quarter", "year", "latitude", "name"],
)
async def test_invalid_requests_rejected(client: AsyncClient, payload: dict[str, object]) -> None:
    response = await client.post("/api/v1/predictions/planting-window", json=payload)
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "invalid_input"
    assert detail["details"]


@pytest.mark.asyncio
async def test_schema_endpoint(client: AsyncClient) -> None:
    response = await client.get("/api/v1/predictions/planting-window/schema")
    assert response.status_code == 200
    body = response.json()
    assert "location" in body["request"]["properties"]
    assert "best_window" in body["response"]["properties"]
    assert body["errors"]["provider_unavailable"]["status"] == 503
    assert body["thresholds"]["window_days"] == 7


@pytest.mark.asyncio
async def test_daily_forecast(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_forecast(self: WeatherForecastProvider, location: Location, horizon_days: int | None = None):
        return calm_forecast(date(2025, 5, 1))

    monkeypatch.setattr(WeatherForecastProvider, "get_forecast", fake_forecast)

    response = await client.get(
        "/api/v1/predictions/daily-forecast",
        params={"latitude": 14.6, "longitude": 121.0, "name": "Quezon City"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["location"]["name"] == "Quezon City"
    assert body["plantable_days"] == 16
    assert body["trends"] == {"temperature": "stable", "precipitation": "moderate", "wind": "calm"}


@pytest.mark.asyncio
async def test_prediction_rate_limit(
    fake_redis: object,
    client: AsyncClient,
    provider_calls: dict[str, int],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    app.state.redis = fake_redis

    @dataclass
    class _SettingsStub:
        rate_limit_per_minute: int = 1

    monkeypatch.setattr("ricecast.middleware.rate_limit.get_settings", lambda: _SettingsStub())

    payload = {"location": MANILA, "year": 2025, "quarter": 2}
    first = await client.post("/api/v1/predictions/planting-window", json=payload)
    second = await client.post("/api/v1/predictions/planting-window", json=payload)

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["detail"]["error"] == "rate_limited"


@pytest.mark.asyncio
async def test_planting_window_recommendations(client: AsyncClient, provider_calls: dict[str, int]) -> None:
    response = await client.post(
        "/api/v1/predictions/planting-window",
        json={"location": MANILA, "year": 2025, "quarter": 2},
    )

    advice = response.json()["recommendations"]
    assert advice[0] == "Excellent planting conditions predicted"
    assert advice[1] == "Plant between 2025-05-08 and 2025-05-14"
    assert sum(a.startswith("Alternative window:") for a in advice) == 3
    assert "Consider backup planting dates" not in advice


@pytest.mark.asyncio
async def test_historical_insights_overview(client: AsyncClient, provider_calls: dict[str, int]) -> None:
    response = await client.get("/api/v1/predictions/historical-insights")

    assert response.status_code == 200
    body = response.json()
    assert body["best_quarter"] == 1
    assert [p["quarter"] for p in body["quarter_performance"]] == [1, 2, 3, 4]
    assert body["focus"] is None
    assert provider_calls == {"forecast": 0, "historical": 1}


@pytest.mark.asyncio
async def test_historical_insights_for_quarter(client: AsyncClient, provider_calls: dict[str, int]) -> None:
    response = await client.get(
        "/api/v1/predictions/historical-insights",
        params={"quarter": 2, "year": 2027},
    )

    assert response.status_code == 200
    focus = response.json()["focus"]
    assert focus["baseline"]["quarter"] == 2
    assert focus["baseline"]["year"] == 2025
    assert focus["is_estimate"] is True


@pytest.mark.asyncio
async def test_historical_insights_needs_quarter_and_year(
    client: AsyncClient,
    provider_calls: dict[str, int],
) -> None:
    response = await client.get("/api/v1/predictions/historical-insights", params={"quarter": 2})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_input"
    assert provider_calls["historical"] == 0
