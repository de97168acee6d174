"""Saved planting-analysis routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.auth.dependencies import get_current_user_id
from ricecast.database import get_db
from ricecast.routes.errors import to_http_exception
from ricecast.schemas.analyses import SavedAnalysis, SavedAnalysisCreated, SavedAnalysisSummary
from ricecast.schemas.prediction import PlantingAnalysis
from ricecast.services.analysis_store import PlantingAnalysisStore

router = APIRouter(prefix="/analyses", tags=["analyses"])


def _map_error(exc: Exception) -> HTTPException:
	return to_http_exception(exc, "Unexpected analysis store failure")


@router.post("", response_model=SavedAnalysisCreated, status_code=status.HTTP_201_CREATED)
async def save_analysis(
	payload: PlantingAnalysis,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> SavedAnalysisCreated:
	store = PlantingAnalysisStore(db)
	try:
		return SavedAnalysisCreated(id=await store.create(payload, user_id))
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("", response_model=list[SavedAnalysisSummary])
async def list_analyses(
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> list[SavedAnalysisSummary]:
	store = PlantingAnalysisStore(db)
	try:
		return await store.list(user_id)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/{analysis_id}", response_model=SavedAnalysis)
async def get_analysis(
	analysis_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> SavedAnalysis:
	store = PlantingAnalysisStore(db)
	try:
		return await store.get(analysis_id, user_id)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.delete("/{analysis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_analysis(
	analysis_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user_id: uuid.UUID = Depends(get_current_user_id),
) -> None:
	store = PlantingAnalysisStore(db)
	try:
		await store.delete(analysis_id, user_id)
	except Exception as exc:
		raise _map_error(exc) from exc
