"""Data layer - declarations, record mapping, normalization and caching."""

from .cache import InventoryCache
from .mapping import Field, MappingContext, flatten, flatten_all
from .models import (
    BackupWindow,
    ComplianceStatus,
    DayResult,
    ObjectSuccessRate,
    ObjectTypeSpec,
    QuerySpec,
    SuccessRateReport,
    SuccessRateSummary,
    SummaryGroup,
)

__all__ = [
    "InventoryCache",
    "Field",
    "MappingContext",
    "flatten",
    "flatten_all",
    "BackupWindow",
    "ComplianceStatus",
    "DayResult",
    "ObjectSuccessRate",
    "ObjectTypeSpec",
    "QuerySpec",
    "SuccessRateReport",
    "SuccessRateSummary",
    "SummaryGroup",
]
