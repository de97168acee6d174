"""Saved planting analyses.

The full ``PlantingAnalysis`` document is stored as JSONB and validated back
into the same model on read, so a retrieved analysis carries exactly the
windows, quarter and confidence that were saved.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.errors import NotFoundError
from ricecast.models.analyses import PlantingAnalysisRecord
from ricecast.models.enums import RiskLevelEnum
from ricecast.schemas.analyses import SavedAnalysis, SavedAnalysisSummary
from ricecast.schemas.prediction import PlantingAnalysis, RiskLevel

logger = structlog.get_logger("ricecast.analyses")


def to_record(analysis: PlantingAnalysis, user_id: uuid.UUID) -> PlantingAnalysisRecord:
	return PlantingAnalysisRecord(
		id=uuid.uuid4(),
		user_id=user_id,
		location_name=analysis.location.name,
		latitude=analysis.location.latitude,
		longitude=analysis.location.longitude,
		year=analysis.year,
		quarter=analysis.selected_quarter,
		predicted_yield=analysis.estimate.predicted_yield,
		confidence=analysis.confidence,
		risk_level=RiskLevelEnum(analysis.risk_level.value),
		payload=analysis.model_dump(mode="json"),
	)


def from_record(record: PlantingAnalysisRecord) -> SavedAnalysis:
	return SavedAnalysis(
		id=record.id,
		created_at=record.created_at,
		analysis=PlantingAnalysis.model_validate(record.payload),
	)


class PlantingAnalysisStore:
	"""create / list / get / delete, last write wins."""

	def __init__(self, db: AsyncSession):
		self.db = db

	async def create(self, analysis: PlantingAnalysis, user_id: uuid.UUID) -> uuid.UUID:
		record = to_record(analysis, user_id)
		self.db.add(record)
		await self.db.flush()
		logger.info("analysis_saved", analysis_id=str(record.id), year=record.year, quarter=record.quarter)
		return record.id

	async def list(self, user_id: uuid.UUID) -> list[SavedAnalysisSummary]:
		stmt = (
			select(PlantingAnalysisRecord)
			.where(PlantingAnalysisRecord.user_id == user_id)
			.order_by(PlantingAnalysisRecord.created_at.desc())
		)
		rows = await self.db.execute(stmt)
		return [
			SavedAnalysisSummary(
				id=record.id,
				location_name=record.location_name,
				year=record.year,
				quarter=record.quarter,
				predicted_yield=record.predicted_yield,
				confidence=record.confidence,
				risk_level=RiskLevel(record.risk_level.value),
				created_at=record.created_at,
			)
			for record in rows.scalars().all()
		]

	async def _owned(self, analysis_id: uuid.UUID, user_id: uuid.UUID) -> PlantingAnalysisRecord:
		stmt = select(PlantingAnalysisRecord).where(
			PlantingAnalysisRecord.id == analysis_id,
			PlantingAnalysisRecord.user_id == user_id,
		)
		record = (await self.db.execute(stmt)).scalar_one_or_none()
		if record is None:
			raise NotFoundError(f"Analysis {analysis_id} not found")
		return record

	async def get(self, analysis_id: uuid.UUID, user_id: uuid.UUID) -> SavedAnalysis:
		return from_record(await self._owned(analysis_id, user_id))

	async def delete(self, analysis_id: uuid.UUID, user_id: uuid.UUID) -> None:
		record = await self._owned(analysis_id, user_id)
		await self.db.delete(record)
		await self.db.flush()
		logger.info("analysis_deleted", analysis_id=str(analysis_id))
