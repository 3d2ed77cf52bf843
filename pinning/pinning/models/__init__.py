"""Models package initialization."""

from .file_record import FileRecord, ModelRecord, PinStatus, parse_accuracy
from .results import ConnectionCheck, ListResult, PinStatusResult, UploadResult
from .stats import (
    AccuracyDistribution,
    BestModel,
    LatestModel,
    RecentUploads,
    StatsSnapshot,
)

__all__ = [
    "FileRecord",
    "ModelRecord",
    "PinStatus",
    "parse_accuracy",
    "ConnectionCheck",
    "ListResult",
    "PinStatusResult",
    "UploadResult",
    "AccuracyDistribution",
    "BestModel",
    "LatestModel",
    "RecentUploads",
    "StatsSnapshot",
]
