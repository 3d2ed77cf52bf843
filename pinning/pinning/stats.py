"""Statistics over a collection of model records."""

from collections.abc import Sequence
from datetime import datetime, timezone

from pinning.formatting import format_bytes
from pinning.models import (
    AccuracyDistribution,
    BestModel,
    LatestModel,
    ModelRecord,
    RecentUploads,
    StatsSnapshot,
)

HIGH_ACCURACY = 0.9
MEDIUM_ACCURACY = 0.7

# Cumulative windows in hours: a record counts in every window it falls in
RECENCY_WINDOWS = (("last24h", 24), ("last7d", 168), ("last30d", 720))


def accuracy_bucket(accuracy: float) -> str | None:
    """Return 'high', 'medium' or 'low'; None for accuracy <= 0."""
    if accuracy <= 0:
        return None
    if accuracy > HIGH_ACCURACY:
        return "high"
    if accuracy >= MEDIUM_ACCURACY:
        return "medium"
    return "low"


def compute_stats(models: Sequence[ModelRecord], now: datetime | None = None) -> StatsSnapshot:
    """Compute a fresh statistics snapshot.

    Accuracies <= 0 count toward ``totalModels`` only. The best model is
    the first one with the strictly highest accuracy; the latest model is
    the first one with the newest pin timestamp.

    Args:
        models: Model records to summarize
        now: Reference time for the recency windows (defaults to now, UTC)
    """
    now = now or datetime.now(timezone.utc)

    total_storage = sum(m.size_bytes for m in models)
    by_type: dict[str, int] = {}
    distribution = AccuracyDistribution()
    recent = {name: 0 for name, _ in RECENCY_WINDOWS}

    accuracy_sum = 0.0
    valid_count = 0
    best: ModelRecord | None = None

    for model in models:
        by_type[model.model_type] = by_type.get(model.model_type, 0) + 1

        bucket = accuracy_bucket(model.accuracy)
        if bucket is not None:
            accuracy_sum += model.accuracy
            valid_count += 1
            setattr(distribution, bucket, getattr(distribution, bucket) + 1)
            if best is None or model.accuracy > best.accuracy:
                best = model

        hours = (now - model.pinned_at).total_seconds() / 3600
        for name, window in RECENCY_WINDOWS:
            if hours <= window:
                recent[name] += 1

    snapshot = StatsSnapshot(
        total_models=len(models),
        total_storage=total_storage,
        total_storage_formatted=format_bytes(total_storage),
        models_by_type=by_type,
        accuracy_distribution=distribution,
        recent_uploads=RecentUploads(**recent),
        average_accuracy=round(accuracy_sum / valid_count, 4) if valid_count else 0,
    )

    if best is not None:
        snapshot.best_model = BestModel(
            name=best.name,
            ipfs_hash=best.content_id,
            accuracy=best.accuracy,
            model_type=best.model_type,
        )

    if models:
        latest = max(models, key=lambda m: m.pinned_at)
        snapshot.latest_model = LatestModel(
            name=latest.name,
            ipfs_hash=latest.content_id,
            uploaded_at=latest.pinned_at,
            model_type=latest.model_type,
        )

    return snapshot
