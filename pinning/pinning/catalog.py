"""Model record classification, sorting and search filtering."""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict

from pinning.models import FileRecord, ModelRecord

MODEL_TYPE_TAG = "ml-model"
TFT_MODEL_TYPE = "temporal_fusion_transformer"

DEFAULT_NAME_MARKERS = ("model",)
LISTING_NAME_MARKERS = ("model", "tft")

SORT_KEYS = ("date", "name", "accuracy", "size")


def is_model_record(
    key_values: Mapping[str, str],
    name: str | None,
    name_markers: Iterable[str] = DEFAULT_NAME_MARKERS,
) -> bool:
    """Best-effort guess whether a pinned object is a model.

    The provider has no schema, so this only looks at the ``type`` and
    ``modelType`` tags and at markers in the name. Expect both false
    positives and false negatives.
    """
    if key_values.get("type") == MODEL_TYPE_TAG:
        return True
    if key_values.get("modelType") == TFT_MODEL_TYPE:
        return True
    if name:
        return any(marker in name for marker in name_markers)
    return False


def select_models(
    records: Iterable[FileRecord],
    name_markers: Iterable[str] = DEFAULT_NAME_MARKERS,
) -> list[ModelRecord]:
    """Keep model-like records and parse their model fields."""
    markers = tuple(name_markers)
    return [
        ModelRecord.from_file_record(record)
        for record in records
        if is_model_record(record.key_values, record.name, markers)
    ]


def _sort_key(key: str):
    if key == "name":
        return lambda m: m.name.casefold()
    if key == "accuracy":
        return lambda m: m.accuracy
    if key == "size":
        return lambda m: m.size_bytes
    return lambda m: m.pinned_at


def sort_models(models: Iterable[ModelRecord], key: str = "date", order: str = "desc") -> list[ModelRecord]:
    """Sort by date, name, accuracy or size.

    Unknown keys sort by date. Any order other than 'asc' is descending.
    The sort is stable: equal keys keep their input order either way.
    """
    if key not in SORT_KEYS:
        key = "date"
    return sorted(models, key=_sort_key(key), reverse=order != "asc")


def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class SearchCriteria(BaseModel):
    """Optional filters for model search; unset fields do not filter."""

    model_config = ConfigDict(protected_namespaces=())

    query: str | None = None
    model_type: str | None = None
    min_accuracy: float | None = None
    max_accuracy: float | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None

    def to_response(self) -> dict:
        return {
            "query": self.query,
            "modelType": self.model_type,
            "minAccuracy": self.min_accuracy,
            "maxAccuracy": self.max_accuracy,
            "fromDate": self.from_date.isoformat() if self.from_date else None,
            "toDate": self.to_date.isoformat() if self.to_date else None,
        }


def filter_models(models: Iterable[ModelRecord], criteria: SearchCriteria) -> list[ModelRecord]:
    """Apply every set criterion; a model must pass all of them."""
    results = list(models)

    if criteria.query:
        needle = criteria.query.lower()
        results = [
            m for m in results
            if needle in m.name.lower()
            or needle in m.model_type.lower()
            or needle in m.version
        ]

    if criteria.model_type:
        results = [m for m in results if m.model_type == criteria.model_type]

    if criteria.min_accuracy is not None:
        results = [m for m in results if m.accuracy >= criteria.min_accuracy]

    if criteria.max_accuracy is not None:
        results = [m for m in results if m.accuracy <= criteria.max_accuracy]

    if criteria.from_date is not None:
        start = _as_utc(criteria.from_date)
        results = [m for m in results if m.pinned_at >= start]

    if criteria.to_date is not None:
        end = _as_utc(criteria.to_date)
        results = [m for m in results if m.pinned_at <= end]

    return results
