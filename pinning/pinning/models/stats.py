"""Statistics snapshot models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class _Camel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class AccuracyDistribution(_Camel):
    high: int = 0  # > 0.9
    medium: int = 0  # 0.7 - 0.9
    low: int = 0  # < 0.7


class RecentUploads(BaseModel):
    """Cumulative upload counts; a 2h old upload counts in every window."""
    last24h: int = 0
    last7d: int = 0
    last30d: int = 0


class BestModel(_Camel):
    name: str
    ipfs_hash: str
    accuracy: float
    model_type: str


class LatestModel(_Camel):
    name: str
    ipfs_hash: str
    uploaded_at: datetime
    model_type: str

    @field_serializer("uploaded_at")
    def serialize_datetime(self, dt: datetime) -> str:
        return dt.isoformat()


class StatsSnapshot(_Camel):
    """Derived statistics over a collection of model records."""

    total_models: int = 0
    total_storage: int = 0
    total_storage_formatted: str = "0 Bytes"
    models_by_type: dict[str, int] = Field(default_factory=dict)
    accuracy_distribution: AccuracyDistribution = Field(default_factory=AccuracyDistribution)
    recent_uploads: RecentUploads = Field(default_factory=RecentUploads)
    average_accuracy: float = 0
    best_model: BestModel | None = None
    latest_model: LatestModel | None = None

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
