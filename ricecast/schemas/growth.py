"""Pydantic request/response schemas for farm profiles, growth cycles and stages."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ricecast.models.enums import PlantingMethodEnum, RiceStageEnum


class FarmProfileCreate(BaseModel):
	name: str = Field(min_length=1, max_length=255)
	latitude: float = Field(ge=-90, le=90)
	longitude: float = Field(ge=-180, le=180)
	province: str | None = Field(default=None, max_length=128)


class FarmProfileRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	user_id: uuid.UUID
	name: str
	latitude: float
	longitude: float
	province: str | None = None
	created_at: datetime


class GrowthCycleUpsert(BaseModel):
	farm_profile_id: uuid.UUID
	variety: str = Field(min_length=1, max_length=128)
	method: PlantingMethodEnum = PlantingMethodEnum.transplanted
	cycle_start_date: date
	cycle_end_date: date | None = None

	@model_validator(mode="after")
	def _end_after_start(self) -> GrowthCycleUpsert:
		if self.cycle_end_date is not None and self.cycle_end_date < self.cycle_start_date:
			raise ValueError("cycle_end_date must not precede cycle_start_date")
		return self


class StageBoundaryIn(BaseModel):
	stage: RiceStageEnum
	start_date: date
	end_date: date
	note: str | None = Field(default=None, max_length=1000)


class StageReplaceRequest(BaseModel):
	stages: list[StageBoundaryIn] = Field(default_factory=list)


class StageBoundaryRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	stage: RiceStageEnum
	start_date: date
	end_date: date
	note: str | None = None


class GrowthCycleRead(BaseModel):
	id: uuid.UUID
	farm_profile_id: uuid.UUID
	variety: str
	method: PlantingMethodEnum
	cycle_start_date: date
	cycle_end_date: date | None = None
	stage_boundaries: list[StageBoundaryRead] = Field(default_factory=list)


class StageStatusRead(BaseModel):
	cycle_id: uuid.UUID
	as_of: date
	days_after_sowing: int
	stage: RiceStageEnum
	label: str
	progress: float = Field(ge=0, le=100)
	next_in_days: int
	upcoming: bool
	source: Literal["default", "override"]
