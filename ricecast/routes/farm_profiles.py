"""Farm profile routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.auth.dependencies import get_current_user_id
from ricecast.database import get_db
from ricecast.routes.errors import to_http_exception
from ricecast.schemas.growth import FarmProfileCreate, FarmProfileRead
from ricecast.services.growth_service import GrowthService

router = APIRouter(prefix="/farm-profiles", tags=["farm-profiles"])


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected farm profile failure")


@router.post("", response_model=FarmProfileRead, status_code=status.HTTP_201_CREATED)
async def create_farm_profile(
	payload: FarmProfileCreate,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> FarmProfileRead:
	service = GrowthService(db)
	try:
		profile = await service.create_profile(user_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return FarmProfileRead.model_validate(profile)


@router.get("", response_model=list[FarmProfileRead])
async def list_farm_profiles(
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> list[FarmProfileRead]:
	service = GrowthService(db)
	try:
		profiles = await service.list_profiles(user_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return [FarmProfileRead.model_validate(profile) for profile in profiles]
