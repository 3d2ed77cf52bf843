"""Data models for pinned file records."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from pinning.formatting import format_bytes

if TYPE_CHECKING:
    from pinning.gateways import GatewayResolver

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class PinStatus(str, Enum):
    """Pin state reported by the provider."""
    PINNED = "pinned"
    UNPINNED = "unpinned"


def parse_accuracy(value: Any) -> float:
    """Parse an accuracy tag; missing, unparseable or non-finite values become 0.0."""
    try:
        accuracy = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(accuracy):
        return 0.0
    return accuracy


class FileRecord(BaseModel):
    """A pinned object as returned by the provider's pin list."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    content_id: str = Field(description="Content identifier (CID)")
    name: str = Field(description="Provider-side display name")
    size_bytes: int = Field(default=0, ge=0, description="Pinned size in bytes")
    pinned_at: datetime = Field(description="When the object was pinned")
    key_values: dict[str, str] = Field(
        default_factory=dict,
        description="Provider key-value tags",
    )
    status: PinStatus = Field(default=PinStatus.PINNED)

    @field_validator("pinned_at")
    @classmethod
    def ensure_timezone(cls, dt: datetime) -> datetime:
        """Treat naive provider timestamps as UTC."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt

    @field_serializer("pinned_at")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format."""
        return dt.isoformat()

    @classmethod
    def from_provider_row(
        cls,
        row: dict[str, Any],
        status: PinStatus | None = None,
    ) -> "FileRecord":
        """Create a record from a pinList row.

        Args:
            row: Raw row from the provider's pin list
            status: Force a status; derived from ``date_unpinned`` if None
        """
        cid = row.get("ipfs_pin_hash") or ""
        metadata = row.get("metadata") or {}
        if status is None:
            status = PinStatus.UNPINNED if row.get("date_unpinned") else PinStatus.PINNED

        prefix = "unpinned" if status == PinStatus.UNPINNED else "file"
        keyvalues = metadata.get("keyvalues") or {}

        return cls(
            content_id=cid,
            name=metadata.get("name") or f"{prefix}-{cid[:8]}",
            size_bytes=row.get("size") or 0,
            pinned_at=row.get("date_pinned") or EPOCH,
            key_values={str(k): str(v) for k, v in keyvalues.items() if v is not None},
            status=status,
        )


class ModelRecord(BaseModel):
    """Model view of a FileRecord with fields parsed from its tags."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    record: FileRecord
    model_type: str = "unknown"
    version: str = "1.0.0"
    accuracy: float = 0.0

    @classmethod
    def from_file_record(cls, record: FileRecord) -> "ModelRecord":
        tags = record.key_values
        return cls(
            record=record,
            model_type=tags.get("modelType") or "unknown",
            version=tags.get("version") or "1.0.0",
            accuracy=parse_accuracy(tags.get("accuracy")),
        )

    @property
    def content_id(self) -> str:
        return self.record.content_id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def size_bytes(self) -> int:
        return self.record.size_bytes

    @property
    def pinned_at(self) -> datetime:
        return self.record.pinned_at

    def to_summary(self, resolver: "GatewayResolver", full: bool = True) -> dict[str, Any]:
        """Build the JSON summary used by the listing and search endpoints.

        Args:
            resolver: Gateway resolver used for the retrieval URLs
            full: Include size and the gateway map (listing) or not (search)
        """
        summary: dict[str, Any] = {
            "modelId": self.content_id,
            "ipfsHash": self.content_id,
            "name": self.name,
            "modelType": self.model_type,
            "version": self.version,
            "accuracy": self.accuracy,
            "uploadedAt": self.pinned_at.isoformat(),
            "ipfsUrl": resolver.primary_url(self.content_id),
            "metadata": dict(self.record.key_values),
        }
        if full:
            summary.update(
                {
                    "size": self.size_bytes,
                    "sizeFormatted": format_bytes(self.size_bytes),
                    "publicUrl": resolver.public_url(self.content_id),
                    "gateways": resolver.fallback_map(self.content_id),
                }
            )
        return summary
