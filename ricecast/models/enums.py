"""PostgreSQL-backed enum types.

Each StrEnum maps 1:1 to a PostgreSQL ``CREATE TYPE ... AS ENUM``.  The
growth-stage engine uses ``RiceStageEnum`` directly, so the stored override
rows and the computed stage share one vocabulary.
"""

from enum import StrEnum

# ── Crop tracking enums ─────────────────────────────────────────────────────


class RiceStageEnum(StrEnum):
    """Rice phenology stages in agronomic order."""

    nursery = "nursery"
    vegetative = "vegetative"
    tillering = "tillering"
    panicle_initiation = "panicle_initiation"
    booting = "booting"
    heading = "heading"
    flowering = "flowering"
    grain_fill = "grain_fill"
    maturity = "maturity"


class PlantingMethodEnum(StrEnum):
    """How the crop was established."""

    transplanted = "transplanted"
    direct_seeded = "direct_seeded"


# ── Analysis enums ──────────────────────────────────────────────────────────


class RiskLevelEnum(StrEnum):
    """Summary risk of a saved planting analysis."""

    low = "low"
    medium = "medium"
    high = "high"
