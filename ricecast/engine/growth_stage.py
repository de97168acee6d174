"""Rice phenology stage tracking.

Maps days-after-sowing (DAS) onto a fixed 130-day timeline, or onto a
farmer-supplied set of stage boundaries when one exists.  Everything here is
pure: the reference date is always passed in by the caller.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from dataclasses import dataclass

from ricecast.errors import InputError
from ricecast.models.enums import RiceStageEnum

TOTAL_DAYS = 130

# (stage, first DAS, last DAS), inclusive
STAGE_BANDS: tuple[tuple[RiceStageEnum, int, int], ...] = (
    (RiceStageEnum.nursery, 0, 20),
    (RiceStageEnum.vegetative, 21, 35),
    (RiceStageEnum.tillering, 36, 55),
    (RiceStageEnum.panicle_initiation, 56, 65),
    (RiceStageEnum.booting, 66, 75),
    (RiceStageEnum.heading, 76, 85),
    (RiceStageEnum.flowering, 86, 95),
    (RiceStageEnum.grain_fill, 96, 115),
    (RiceStageEnum.maturity, 116, 130),
)

STAGE_ORDER: dict[RiceStageEnum, int] = {
    stage: idx for idx, (stage, _, _) in enumerate(STAGE_BANDS)
}

_LABELS = {
    RiceStageEnum.panicle_initiation: "Panicle Initiation",
    RiceStageEnum.grain_fill: "Grain Fill",
}


@dataclass(slots=True, frozen=True)
class StageBoundary:
    stage: RiceStageEnum
    start_date: dt.date | str
    end_date: dt.date | str


@dataclass(slots=True, frozen=True)
class StageStatus:
    stage: RiceStageEnum
    progress: float
    next_in_days: int
    upcoming: bool = False


def parse_date(value: dt.date | str, field: str = "date") -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = str(value).strip()
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise InputError(f"Unparsable {field}: {value!r}") from exc


def days_after_sowing(sowing_date: dt.date | str, today: dt.date | str) -> int:
    start = parse_date(sowing_date, "sowing_date")
    ref = parse_date(today, "today")
    return max(0, (ref - start).days)


def stage_label(stage: RiceStageEnum) -> str:
    return _LABELS.get(stage, stage.value.replace("_", " ").title())


def compute_stage(
    days_after_sowing: int,
    boundaries: Sequence[StageBoundary] | None = None,
    *,
    today: dt.date | str | None = None,
) -> StageStatus:
    """Current stage, progress (0-100) and days until the next transition.

    ``boundaries`` must already be sorted ascending and non-overlapping;
    see ``validate_boundaries``.  An empty sequence falls back to the
    default band table.
    """
    if boundaries:
        if today is None:
            raise InputError("today is required when stage boundaries are supplied")
        return _from_boundaries(boundaries, parse_date(today, "today"))
    return _from_bands(days_after_sowing)


def _from_bands(das: int) -> StageStatus:
    if das < 0:
        raise InputError(f"days_after_sowing must be >= 0, got {das}")
    if das >= TOTAL_DAYS:
        return StageStatus(stage=RiceStageEnum.maturity, progress=100.0, next_in_days=0)

    progress = min(100.0, das / TOTAL_DAYS * 100.0)
    for stage, start, end in STAGE_BANDS:
        if start <= das <= end:
            return StageStatus(stage=stage, progress=progress, next_in_days=end - das + 1)
    # bands are contiguous over [0, TOTAL_DAYS)
    raise AssertionError(f"no band for das={das}")


def _from_boundaries(boundaries: Sequence[StageBoundary], today: dt.date) -> StageStatus:
    parsed = [
        (b.stage, parse_date(b.start_date, "start_date"), parse_date(b.end_date, "end_date"))
        for b in boundaries
    ]
    first = parsed[0][1]
    last = parsed[-1][2]

    if today > last:
        return StageStatus(stage=RiceStageEnum.maturity, progress=100.0, next_in_days=0)

    total_days = max(1, (last - first).days + 1)
    elapsed = min(total_days, max(0, (today - first).days + 1))
    progress = min(100.0, max(0.0, elapsed / total_days * 100.0))

    for stage, start, end in parsed:
        if start <= today <= end:
            return StageStatus(stage=stage, progress=progress, next_in_days=(end - today).days + 1)
        if today < start:
            return StageStatus(
                stage=stage,
                progress=progress,
                next_in_days=(start - today).days,
                upcoming=True,
            )
    raise AssertionError("today lies after the last boundary but was not caught above")


def validate_boundaries(boundaries: Sequence[StageBoundary]) -> list[StageBoundary]:
    """Check an override set before it is persisted.

    Returns the boundaries with dates parsed.  The set must be non-empty,
    each range must satisfy start <= end, ranges must ascend without
    overlapping, and stages must follow the agronomic order.
    """
    if not boundaries:
        raise InputError("stages array required")

    checked: list[StageBoundary] = []
    previous: StageBoundary | None = None
    for idx, item in enumerate(boundaries):
        start = parse_date(item.start_date, "start_date")
        end = parse_date(item.end_date, "end_date")
        if start > end:
            raise InputError(f"stage {idx} ({item.stage}) ends before it starts")
        current = StageBoundary(stage=item.stage, start_date=start, end_date=end)
        if previous is not None:
            if start <= previous.end_date:  # type: ignore[operator]
                raise InputError(f"stage {idx} ({item.stage}) overlaps the previous stage")
            if STAGE_ORDER[item.stage] < STAGE_ORDER[previous.stage]:
                raise InputError(f"stage {idx} ({item.stage}) is out of agronomic order")
        checked.append(current)
        previous = current
    return checked
