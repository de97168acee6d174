"""ORM model registry: importing this module registers every table on Base.metadata.

Alembic ``env.py`` imports ``Base`` from here so that autogenerate sees all
tables.
"""

# ── Base & Mixins ───────────────────────────────────────────────────────────
# ── Saved analyses ──────────────────────────────────────────────────────────
from ricecast.models.analyses import PlantingAnalysisRecord
from ricecast.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

# ── Enums ───────────────────────────────────────────────────────────────────
from ricecast.models.enums import PlantingMethodEnum, RiceStageEnum, RiskLevelEnum

# ── Crop tracking ───────────────────────────────────────────────────────────
from ricecast.models.farm import FarmProfile, GrowthCycle, StageBoundaryOverride

# ── Reference data ──────────────────────────────────────────────────────────
from ricecast.models.historical import HistoricalRecord

__all__ = [
    # Base & mixins
    "Base",
    # Crop tracking
    "FarmProfile",
    "GrowthCycle",
    # Reference data
    "HistoricalRecord",
    # Saved analyses
    "PlantingAnalysisRecord",
    # Enums
    "PlantingMethodEnum",
    "RiceStageEnum",
    "RiskLevelEnum",
    "StageBoundaryOverride",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
]
