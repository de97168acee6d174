"""Pydantic schemas for saved planting analyses."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from ricecast.schemas.prediction import PlantingAnalysis, RiskLevel


class SavedAnalysisCreated(BaseModel):
	id: uuid.UUID


class SavedAnalysisSummary(BaseModel):
	id: uuid.UUID
	location_name: str
	year: int
	quarter: int
	predicted_yield: float
	confidence: float
	risk_level: RiskLevel
	created_at: datetime


class SavedAnalysis(BaseModel):
	id: uuid.UUID
	created_at: datetime
	analysis: PlantingAnalysis
