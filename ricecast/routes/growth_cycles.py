"""Growth-cycle, stage-boundary and stage-status routes."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.auth.dependencies import get_current_user_id
from ricecast.database import get_db
from ricecast.routes.errors import to_http_exception
from ricecast.schemas.growth import (
	GrowthCycleRead,
	GrowthCycleUpsert,
	StageBoundaryRead,
	StageReplaceRequest,
	StageStatusRead,
)
from ricecast.services.growth_service import GrowthService

router = APIRouter(prefix="/growth-cycles", tags=["growth-cycles"])


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected growth cycle failure")


def _to_cycle_read(cycle: Any, boundaries: list[Any]) -> GrowthCycleRead:
	return GrowthCycleRead(
		id=cycle.id,
		farm_profile_id=cycle.farm_profile_id,
		variety=cycle.variety,
		method=cycle.method,
		cycle_start_date=cycle.cycle_start_date,
		cycle_end_date=cycle.cycle_end_date,
		stage_boundaries=[StageBoundaryRead.model_validate(b) for b in boundaries],
	)


@router.post("", response_model=GrowthCycleRead)
async def upsert_growth_cycle(
	payload: GrowthCycleUpsert,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> GrowthCycleRead:
	service = GrowthService(db)
	try:
		cycle = await service.upsert_cycle(user_id, payload)
		boundaries = await service.list_boundaries(cycle.id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_cycle_read(cycle, boundaries)


@router.get("", response_model=GrowthCycleRead)
async def get_latest_growth_cycle(
	farm_profile_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> GrowthCycleRead:
	service = GrowthService(db)
	try:
		cycle, boundaries = await service.latest_cycle(farm_profile_id, user_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_cycle_read(cycle, boundaries)


@router.delete("/{cycle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_growth_cycle(
	cycle_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> None:
	service = GrowthService(db)
	try:
		await service.delete_cycle(cycle_id, user_id)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.put("/{cycle_id}/stages", response_model=list[StageBoundaryRead])
async def replace_stage_boundaries(
	cycle_id: uuid.UUID,
	payload: StageReplaceRequest,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> list[StageBoundaryRead]:
	service = GrowthService(db)
	try:
		rows = await service.replace_boundaries(cycle_id, user_id, payload.stages)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [StageBoundaryRead.model_validate(row) for row in rows]


@router.get("/{cycle_id}/stage", response_model=StageStatusRead)
async def get_stage_status(
	cycle_id: uuid.UUID,
	as_of: date | None = Query(default=None),
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> StageStatusRead:
	service = GrowthService(db)
	try:
		return await service.stage_status(cycle_id, user_id, as_of or datetime.now(UTC).date())
	except Exception as exc:
		raise _map_error(exc) from exc
