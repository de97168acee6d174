from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
from factories import scalars_result
from httpx import AsyncClient
from sqlalchemy.dialects import postgresql

from ricecast.errors import InputError, NotFoundError, OwnershipError
from ricecast.models.enums import PlantingMethodEnum, RiceStageEnum
from ricecast.schemas.growth import GrowthCycleUpsert, StageBoundaryIn
from ricecast.services.growth_service import GrowthService


def _owner_row(cycle: Any, owner_id: uuid.UUID) -> MagicMock:
    result = MagicMock()
    result.first.return_value = (cycle, owner_id)
    return result


def _cycle(start: date = date(2025, 1, 1)) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid.uuid4(),
        farm_profile_id=uuid.uuid4(),
        variety="NSIC Rc222",
        method=PlantingMethodEnum.transplanted,
        cycle_start_date=start,
        cycle_end_date=None,
    )


def _stages() -> list[StageBoundaryIn]:
    return [
        StageBoundaryIn(stage=RiceStageEnum.nursery, start_date=date(2025, 1, 1), end_date=date(2025, 1, 20)),
        StageBoundaryIn(
            stage=RiceStageEnum.vegetative,
            start_date=date(2025, 1, 21),
            end_date=date(2025, 2, 10),
            note="late transplant",
        ),
    ]


# ── Service ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_replace_rejects_empty_set_before_touching_db(fake_db_session: Any) -> None:
    service = GrowthService(fake_db_session)
    with pytest.raises(InputError):
        await service.replace_boundaries(uuid.uuid4(), uuid.uuid4(), [])
    fake_db_session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_replace_checks_ownership(fake_db_session: Any, auth_user_id: uuid.UUID) -> None:
    fake_db_session.execute.return_value = _owner_row(_cycle(), uuid.uuid4())
    service = GrowthService(fake_db_session)
    with pytest.raises(OwnershipError):
        await service.replace_boundaries(uuid.uuid4(), auth_user_id, _stages())
    assert fake_db_session.added == []


@pytest.mark.asyncio
async def test_replace_swaps_whole_set_in_one_flush(fake_db_session: Any, auth_user_id: uuid.UUID) -> None:
    cycle = _cycle()
    fake_db_session.execute.side_effect = [_owner_row(cycle, auth_user_id), MagicMock()]
    service = GrowthService(fake_db_session)

    rows = await service.replace_boundaries(cycle.id, auth_user_id, _stages())

    assert [r.stage for r in rows] == [RiceStageEnum.nursery, RiceStageEnum.vegetative]
    assert all(r.growth_cycle_id == cycle.id for r in rows)
    assert rows[1].note == "late transplant"
    assert fake_db_session.added == rows
    fake_db_session.flush.assert_awaited_once()

    lock_stmt = fake_db_session.execute.await_args_list[0].args[0]
    assert "FOR UPDATE" in str(lock_stmt.compile(dialect=postgresql.dialect()))
    delete_stmt = fake_db_session.execute.await_args_list[1].args[0]
    assert "DELETE FROM stage_boundary_overrides" in str(delete_stmt.compile(dialect=postgresql.dialect()))


@pytest.mark.asyncio
async def test_stage_status_uses_default_timeline(fake_db_session: Any, auth_user_id: uuid.UUID) -> None:
    cycle = _cycle(date(2025, 1, 1))
    fake_db_session.execute.side_effect = [_owner_row(cycle, auth_user_id), scalars_result([])]
    service = GrowthService(fake_db_session)

    status = await service.stage_status(cycle.id, auth_user_id, date(2025, 2, 5))

    assert status.days_after_sowing == 35
    assert status.stage == RiceStageEnum.vegetative
    assert status.next_in_days == 1
    assert status.source == "default"


@pytest.mark.asyncio
async def test_stage_status_prefers_overrides(fake_db_session: Any, auth_user_id: uuid.UUID) -> None:
    cycle = _cycle(date(2025, 1, 1))
    overrides = [
        SimpleNamespace(stage=s.stage, start_date=s.start_date, end_date=s.end_date, note=s.note)
        for s in _stages()
    ]
    fake_db_session.execute.side_effect = [_owner_row(cycle, auth_user_id), scalars_result(overrides)]
    service = GrowthService(fake_db_session)

    status = await service.stage_status(cycle.id, auth_user_id, date(2025, 3, 1))

    assert status.stage == RiceStageEnum.maturity
    assert status.progress == 100.0
    assert status.label == "Maturity"
    assert status.source == "override"


@pytest.mark.asyncio
async def test_unknown_cycle_not_found(fake_db_session: Any) -> None:
    fake_db_session.execute.return_value = scalars_result([])
    service = GrowthService(fake_db_session)
    with pytest.raises(NotFoundError):
        await service.stage_status(uuid.uuid4(), uuid.uuid4(), date(2025, 1, 1))


@pytest.mark.asyncio
async def test_upsert_targets_profile_and_start_date(fake_db_session: Any, auth_user_id: uuid.UUID) -> None:
    profile_id = uuid.uuid4()
    cycle = _cycle()
    fake_db_session.get.return_value = SimpleNamespace(id=profile_id, user_id=auth_user_id)
    fake_db_session.execute.return_value = scalars_result([cycle])
    service = GrowthService(fake_db_session)

    payload = GrowthCycleUpsert(
        farm_profile_id=profile_id,
        variety="NSIC Rc222",
        cycle_start_date=date(2025, 1, 1),
    )
    result = await service.upsert_cycle(auth_user_id, payload)

    assert result is cycle
    stmt = fake_db_session.execute.await_args.args[0]
    sql = str(stmt.compile(dialect=postgresql.dialect()))
    assert "ON CONFLICT ON CONSTRAINT uq_growth_cycles_profile_start DO UPDATE" in sql
    assert "RETURNING" in sql


@pytest.mark.asyncio
async def test_upsert_on_foreign_profile_forbidden(fake_db_session: Any, auth_user_id: uuid.UUID) -> None:
    fake_db_session.get.return_value = SimpleNamespace(id=uuid.uuid4(), user_id=uuid.uuid4())
    service = GrowthService(fake_db_session)
    payload = GrowthCycleUpsert(farm_profile_id=uuid.uuid4(), variety="IR64", cycle_start_date=date(2025, 1, 1))
    with pytest.raises(OwnershipError):
        await service.upsert_cycle(auth_user_id, payload)
    fake_db_session.execute.assert_not_awaited()


# ── Routes ─────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_put_empty_stages_is_400(client: AsyncClient) -> None:
    response = await client.put(f"/api/v1/growth-cycles/{uuid.uuid4()}/stages", json={"stages": []})
    assert response.status_code == 400
    assert response.json()["detail"] == {"error": "invalid_input", "details": ["stages array required"]}


@pytest.mark.asyncio
async def test_put_stages_returns_saved_set(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_replace(self: GrowthService, cycle_id: uuid.UUID, user_id: uuid.UUID, stages: list) -> list:
        return [
            SimpleNamespace(stage=s.stage, start_date=s.start_date, end_date=s.end_date, note=s.note)
            for s in stages
        ]

    monkeypatch.setattr(GrowthService, "replace_boundaries", fake_replace)
    response = await client.put(
        f"/api/v1/growth-cycles/{uuid.uuid4()}/stages",
        json={"stages": [s.model_dump(mode="json") for s in _stages()]},
    )

    assert response.status_code == 200
    body = response.json()
    assert [b["stage"] for b in body] == ["nursery", "vegetative"]


@pytest.mark.asyncio
async def test_foreign_cycle_is_403(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_delete(self: GrowthService, cycle_id: uuid.UUID, user_id: uuid.UUID) -> None:
        raise OwnershipError("Growth cycle belongs to another user")

    monkeypatch.setattr(GrowthService, "delete_cycle", fake_delete)
    response = await client.delete(f"/api/v1/growth-cycles/{uuid.uuid4()}")
    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "forbidden"


@pytest.mark.asyncio
async def test_latest_cycle_missing_is_404(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_latest(self: GrowthService, profile_id: uuid.UUID, user_id: uuid.UUID) -> Any:
        raise NotFoundError("No growth cycle recorded")

    monkeypatch.setattr(GrowthService, "latest_cycle", fake_latest)
    response = await client.get("/api/v1/growth-cycles", params={"farm_profile_id": str(uuid.uuid4())})
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "not_found"


@pytest.mark.asyncio
async def test_latest_cycle_includes_overrides(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    cycle = _cycle()
    overrides = [
        SimpleNamespace(stage=s.stage, start_date=s.start_date, end_date=s.end_date, note=s.note)
        for s in _stages()
    ]

    async def fake_latest(self: GrowthService, profile_id: uuid.UUID, user_id: uuid.UUID) -> Any:
        return cycle, overrides

    monkeypatch.setattr(GrowthService, "latest_cycle", fake_latest)
    response = await client.get("/api/v1/growth-cycles", params={"farm_profile_id": str(cycle.farm_profile_id)})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(cycle.id)
    assert len(body["stage_boundaries"]) == 2


@pytest.mark.asyncio
async def test_cycle_end_before_start_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/growth-cycles",
        json={
            "farm_profile_id": str(uuid.uuid4()),
            "variety": "IR64",
            "cycle_start_date": "2025-03-01",
            "cycle_end_date": "2025-02-01",
        },
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "invalid_input"


@pytest.mark.asyncio
async def test_create_and_list_farm_profiles(
    client: AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
    auth_user_id: uuid.UUID,
) -> None:
    profile = SimpleNamespace(
        id=uuid.uuid4(),
        user_id=auth_user_id,
        name="Nueva Ecija plot",
        latitude=15.58,
        longitude=120.99,
        province="Nueva Ecija",
        created_at=datetime.now(UTC),
    )

    async def fake_create(self: GrowthService, user_id: uuid.UUID, payload: Any) -> Any:
        assert user_id == auth_user_id
        return profile

    async def fake_list(self: GrowthService, user_id: uuid.UUID) -> list:
        return [profile]

    monkeypatch.setattr(GrowthService, "create_profile", fake_create)
    monkeypatch.setattr(GrowthService, "list_profiles", fake_list)

    created = await client.post(
        "/api/v1/farm-profiles",
        json={"name": "Nueva Ecija plot", "latitude": 15.58, "longitude": 120.99, "province": "Nueva Ecija"},
    )
    listed = await client.get("/api/v1/farm-profiles")

    assert created.status_code == 201
    assert created.json()["province"] == "Nueva Ecija"
    assert listed.status_code == 200
    assert [p["id"] for p in listed.json()] == [str(profile.id)]
