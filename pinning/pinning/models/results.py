"""Result models returned by the pinning client and lister."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from .file_record import FileRecord


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict[str, Any]:
        """Dump to a JSON-safe dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class UploadResult(_CamelModel):
    """Outcome of a successful upload."""

    content_id: str
    url: str = Field(description="Primary gateway URL")
    public_url: str = Field(description="Public gateway URL")
    size_bytes: int = 0
    timestamp: str | None = Field(default=None, description="Provider pin timestamp")


class ListResult(_CamelModel):
    """Accumulated pin list rows, or a structured failure."""

    success: bool = True
    records: list[FileRecord] = Field(default_factory=list)
    truncated: bool = False
    error: str | None = None
    pinned_count: int | None = None
    unpinned_count: int | None = None

    @property
    def count(self) -> int:
        return len(self.records)

    @classmethod
    def failure(cls, error: str) -> "ListResult":
        return cls(success=False, error=error)

    def to_response(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error, "timestamp": utc_now().isoformat()}

        response: dict[str, Any] = {
            "success": True,
            "count": self.count,
            "rows": [r.model_dump(by_alias=True, mode="json") for r in self.records],
            "truncated": self.truncated,
            "timestamp": utc_now().isoformat(),
        }
        if self.pinned_count is not None:
            response["pinnedCount"] = self.pinned_count
            response["unpinnedCount"] = self.unpinned_count
        return response


class PinStatusResult(_CamelModel):
    """Whether an identifier is present in the provider's pin list."""

    success: bool = True
    pinned: bool = False
    record: FileRecord | None = None
    error: str | None = None


class ConnectionCheck(_CamelModel):
    """Result of the provider authentication test."""

    success: bool
    message: str
    data: Any = None
    error: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)

    @field_serializer("timestamp")
    def serialize_datetime(self, dt: datetime) -> str:
        return dt.isoformat()
