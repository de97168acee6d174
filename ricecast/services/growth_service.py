"""Farm profiles, growth cycles and stage-boundary overrides."""

from __future__ import annotations

import uuid
from datetime import date

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ricecast.engine.growth_stage import (
	StageBoundary,
	compute_stage,
	days_after_sowing,
	stage_label,
	validate_boundaries,
)
from ricecast.errors import NotFoundError, OwnershipError
from ricecast.models.farm import FarmProfile, GrowthCycle, StageBoundaryOverride
from ricecast.schemas.growth import (
	FarmProfileCreate,
	GrowthCycleUpsert,
	StageBoundaryIn,
	StageStatusRead,
)

logger = structlog.get_logger("ricecast.growth")


class GrowthService:
	"""Crop tracking for the calling user's farm profiles.

	Every cycle operation resolves cycle -> profile -> owner first and raises
	``OwnershipError`` before touching anything the caller does not own.
	"""

	def __init__(self, db: AsyncSession):
		self.db = db

	# ── Farm profiles ────────────────────────────────────────────────────

	async def create_profile(self, user_id: uuid.UUID, payload: FarmProfileCreate) -> FarmProfile:
		profile = FarmProfile(
			user_id=user_id,
			name=payload.name,
			latitude=payload.latitude,
			longitude=payload.longitude,
			province=payload.province,
		)
		self.db.add(profile)
		await self.db.flush()
		await self.db.refresh(profile)
		return profile

	async def list_profiles(self, user_id: uuid.UUID) -> list[FarmProfile]:
		stmt = select(FarmProfile).where(FarmProfile.user_id == user_id).order_by(FarmProfile.created_at.desc())
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def get_owned_profile(self, profile_id: uuid.UUID, user_id: uuid.UUID) -> FarmProfile:
		profile = await self.db.get(FarmProfile, profile_id)
		if profile is None:
			raise NotFoundError(f"Farm profile {profile_id} not found")
		if profile.user_id != user_id:
			raise OwnershipError(f"Farm profile {profile_id} belongs to another user")
		return profile

	# ── Growth cycles ────────────────────────────────────────────────────

	async def get_owned_cycle(
		self,
		cycle_id: uuid.UUID,
		user_id: uuid.UUID,
		*,
		for_update: bool = False,
	) -> GrowthCycle:
		stmt = (
			select(GrowthCycle, FarmProfile.user_id)
			.join(FarmProfile, FarmProfile.id == GrowthCycle.farm_profile_id)
			.where(GrowthCycle.id == cycle_id)
		)
		if for_update:
			stmt = stmt.with_for_update(of=GrowthCycle)
		row = (await self.db.execute(stmt)).first()
		if row is None:
			raise NotFoundError(f"Growth cycle {cycle_id} not found")
		cycle, owner_id = row
		if owner_id != user_id:
			raise OwnershipError(f"Growth cycle {cycle_id} belongs to another user")
		return cycle

	async def upsert_cycle(self, user_id: uuid.UUID, payload: GrowthCycleUpsert) -> GrowthCycle:
		"""Insert a cycle, or update the one already planted on that date.

		A later submission without ``cycle_end_date`` keeps a previously
		confirmed harvest date.
		"""
		await self.get_owned_profile(payload.farm_profile_id, user_id)
		stmt = pg_insert(GrowthCycle).values(
			id=uuid.uuid4(),
			farm_profile_id=payload.farm_profile_id,
			variety=payload.variety,
			method=payload.method,
			cycle_start_date=payload.cycle_start_date,
			cycle_end_date=payload.cycle_end_date,
		)
		stmt = stmt.on_conflict_do_update(
			constraint="uq_growth_cycles_profile_start",
			set_={
				"variety": stmt.excluded.variety,
				"method": stmt.excluded.method,
				"cycle_end_date": func.coalesce(stmt.excluded.cycle_end_date, GrowthCycle.cycle_end_date),
				"updated_at": func.now(),
			},
		).returning(GrowthCycle)
		result = await self.db.execute(stmt, execution_options={"populate_existing": True})
		cycle = result.scalar_one()
		logger.info("growth_cycle_upserted", cycle_id=str(cycle.id), farm_profile_id=str(payload.farm_profile_id))
		return cycle

	async def latest_cycle(
		self,
		profile_id: uuid.UUID,
		user_id: uuid.UUID,
	) -> tuple[GrowthCycle, list[StageBoundaryOverride]]:
		await self.get_owned_profile(profile_id, user_id)
		stmt = (
			select(GrowthCycle)
			.where(GrowthCycle.farm_profile_id == profile_id)
			.order_by(GrowthCycle.cycle_start_date.desc())
			.limit(1)
		)
		cycle = (await self.db.execute(stmt)).scalar_one_or_none()
		if cycle is None:
			raise NotFoundError(f"No growth cycle recorded for farm profile {profile_id}")
		return cycle, await self.list_boundaries(cycle.id)

	async def delete_cycle(self, cycle_id: uuid.UUID, user_id: uuid.UUID) -> None:
		cycle = await self.get_owned_cycle(cycle_id, user_id)
		await self.db.delete(cycle)
		await self.db.flush()
		logger.info("growth_cycle_deleted", cycle_id=str(cycle_id))

	# ── Stage boundaries ─────────────────────────────────────────────────

	async def list_boundaries(self, cycle_id: uuid.UUID) -> list[StageBoundaryOverride]:
		stmt = (
			select(StageBoundaryOverride)
			.where(StageBoundaryOverride.growth_cycle_id == cycle_id)
			.order_by(StageBoundaryOverride.start_date)
		)
		rows = await self.db.execute(stmt)
		return list(rows.scalars().all())

	async def replace_boundaries(
		self,
		cycle_id: uuid.UUID,
		user_id: uuid.UUID,
		stages: list[StageBoundaryIn],
	) -> list[StageBoundaryOverride]:
		"""Swap the cycle's whole override set inside the request transaction.

		The cycle row is locked first so two concurrent replacements cannot
		interleave their delete and insert.
		"""
		checked = validate_boundaries(
			[StageBoundary(stage=s.stage, start_date=s.start_date, end_date=s.end_date) for s in stages]
		)
		cycle = await self.get_owned_cycle(cycle_id, user_id, for_update=True)

		await self.db.execute(
			delete(StageBoundaryOverride).where(StageBoundaryOverride.growth_cycle_id == cycle.id)
		)
		rows = [
			StageBoundaryOverride(
				growth_cycle_id=cycle.id,
				stage=boundary.stage,
				start_date=boundary.start_date,
				end_date=boundary.end_date,
				note=source.note,
			)
			for boundary, source in zip(checked, stages, strict=True)
		]
		self.db.add_all(rows)
		await self.db.flush()
		logger.info("stage_boundaries_replaced", cycle_id=str(cycle_id), count=len(rows))
		return rows

	async def stage_status(self, cycle_id: uuid.UUID, user_id: uuid.UUID, as_of: date) -> StageStatusRead:
		cycle = await self.get_owned_cycle(cycle_id, user_id)
		overrides = await self.list_boundaries(cycle.id)
		boundaries = [StageBoundary(stage=o.stage, start_date=o.start_date, end_date=o.end_date) for o in overrides]

		das = days_after_sowing(cycle.cycle_start_date, as_of)
		status = compute_stage(das, boundaries, today=as_of)
		return StageStatusRead(
			cycle_id=cycle.id,
			as_of=as_of,
			days_after_sowing=das,
			stage=status.stage,
			label=stage_label(status.stage),
			progress=round(status.progress, 1),
			next_in_days=status.next_in_days,
			upcoming=status.upcoming,
			source="override" if boundaries else "default",
		)
