"""Model registry service backed by the pinning provider."""

import asyncio
import functools
import logging
from datetime import datetime, timezone
from typing import Any

from pinning.catalog import (
    LISTING_NAME_MARKERS,
    SearchCriteria,
    filter_models,
    select_models,
    sort_models,
)
from pinning.client import PinningClient
from pinning.errors import ProviderError
from pinning.formatting import format_bytes
from pinning.gateways import require_valid_cid
from pinning.lister import PinLister
from pinning.models import ConnectionCheck, ListResult, PinStatusResult, StatsSnapshot, UploadResult
from pinning.stats import compute_stats

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Listing, search and statistics over pinned model documents.

    Client calls block, so each one runs in the default executor.
    """

    def __init__(self, client: PinningClient, lister: PinLister, list_limit: int = 1000):
        self.client = client
        self.lister = lister
        self.resolver = client.resolver
        self.list_limit = list_limit

    async def _run(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    async def _list_or_raise(self, limit: int, error: str) -> ListResult:
        listing = await self._run(self.lister.list_records, limit)
        if not listing.success:
            raise ProviderError(f"{error}: {listing.error}")
        return listing

    async def upload(self, payload: Any, metadata: dict[str, Any] | None = None) -> UploadResult:
        return await self._run(self.client.upload, payload, metadata)

    async def fetch(self, cid: str) -> Any:
        return await self._run(self.client.fetch, cid)

    async def list_files(self, limit: int, status: str = "all") -> ListResult:
        return await self._run(self.lister.list_records, limit, status)

    async def list_all_files(self, limit: int) -> ListResult:
        return await self.lister.list_all(limit)

    async def pin_status(self, cid: str) -> PinStatusResult:
        return await self._run(self.client.pin_status, cid)

    async def unpin(self, cid: str) -> dict[str, Any]:
        return await self._run(self.client.unpin, cid)

    async def test_connection(self) -> ConnectionCheck:
        return await self._run(self.client.test_connection)

    def gateways(self, cid: str) -> dict[str, str]:
        return self.resolver.gateways(require_valid_cid(cid))

    async def store_model(
        self,
        model_weights: Any = None,
        model_architecture: Any = None,
        training_config: Any = None,
        performance_metrics: dict[str, Any] | None = None,
        model_metadata: dict[str, Any] | None = None,
    ) -> UploadResult:
        """Package and upload a temporal fusion transformer model."""
        model_metadata = model_metadata or {}
        performance_metrics = performance_metrics or {}
        timestamp = datetime.now(timezone.utc).isoformat()

        package = {
            "type": "tft_churn_model",
            "version": "1.0.0",
            "timestamp": timestamp,
            "model_weights": model_weights,
            "model_architecture": model_architecture,
            "training_config": training_config,
            "performance_metrics": performance_metrics,
            "metadata": model_metadata,
        }
        metadata = {
            "modelName": model_metadata.get("name") or "retail-churn-tft",
            "version": model_metadata.get("version") or "1.0.0",
            "accuracy": performance_metrics.get("accuracy") or 0,
            "timestamp": timestamp,
        }
        logger.info(f"Storing TFT model {metadata['modelName']}")
        return await self._run(self.client.upload_model, package, metadata)

    async def list_models(
        self,
        limit: int = 50,
        offset: int = 0,
        sort_by: str = "date",
        order: str = "desc",
    ) -> dict[str, Any]:
        """List model records sorted and sliced to one page, with a summary."""
        listing = await self._list_or_raise(limit, "Failed to retrieve model list")

        models = select_models(listing.records, LISTING_NAME_MARKERS)
        ordered = sort_models(models, sort_by, order)
        end = offset + limit
        page = ordered[offset:end]

        total_size = sum(m.size_bytes for m in models)
        average = round(sum(m.accuracy for m in models) / len(models), 4) if models else 0

        logger.info(f"Found {len(models)} models, returning {len(page)}")
        return {
            "models": [m.to_summary(self.resolver) for m in page],
            "pagination": {
                "total": len(models),
                "limit": limit,
                "offset": offset,
                "returned": len(page),
                "hasMore": end < len(models),
            },
            "summary": {
                "totalModels": len(models),
                "totalSize": total_size,
                "totalSizeFormatted": format_bytes(total_size),
                "modelTypes": list(dict.fromkeys(m.model_type for m in models)),
                "averageAccuracy": average,
            },
        }

    async def model_details(self, cid: str) -> dict[str, Any]:
        """Pin status, stored package and gateways for one identifier."""
        require_valid_cid(cid)
        status = await self.pin_status(cid)
        package = await self.fetch(cid)

        pin_info = None
        if status.record is not None:
            pin_info = {
                "ipfsHash": status.record.content_id,
                "name": status.record.name,
                "size": status.record.size_bytes,
                "timestamp": status.record.pinned_at.isoformat(),
                "status": status.record.status.value,
            }

        return {
            "ipfsHash": cid,
            "pinned": status.pinned if status.success else None,
            "pinInfo": pin_info,
            "modelPackage": package,
            "gateways": self.resolver.gateways(cid),
            "retrievedAt": datetime.now(timezone.utc).isoformat(),
        }

    async def search_models(self, criteria: SearchCriteria, limit: int = 50) -> dict[str, Any]:
        """Filter model records by the given criteria."""
        listing = await self._list_or_raise(limit * 2, "Failed to search models")

        models = filter_models(select_models(listing.records), criteria)[:limit]

        logger.info(f"Search returned {len(models)} models")
        return {
            "models": [m.to_summary(self.resolver, full=False) for m in models],
            "count": len(models),
            "searchCriteria": criteria.to_response(),
        }

    async def statistics(self) -> StatsSnapshot:
        listing = await self._list_or_raise(self.list_limit, "Failed to retrieve statistics")
        return compute_stats(select_models(listing.records))
