"""Model management API router."""
import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict

from api.dependencies import get_registry
from api.responses import envelope, error_response, now_iso
from api.services.registry import ModelRegistry
from pinning.catalog import SearchCriteria

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ml", tags=["ml"])


class StoreModelRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_weights: Any = None
    model_architecture: Any = None
    training_config: Any = None
    performance_metrics: dict[str, Any] | None = None
    model_metadata: dict[str, Any] | None = None


@router.post("/store-model")
async def store_model(request: StoreModelRequest, registry: ModelRegistry = Depends(get_registry)):
    try:
        result = await registry.store_model(
            model_weights=request.model_weights,
            model_architecture=request.model_architecture,
            training_config=request.training_config,
            performance_metrics=request.performance_metrics,
            model_metadata=request.model_metadata,
        )
        logger.info(f"TFT model stored on IPFS: {result.content_id}")
        return envelope({
            "modelId": result.content_id,
            "ipfsHash": result.content_id,
            "ipfsUrl": result.url,
            "timestamp": now_iso(),
            "message": "TFT model stored successfully on IPFS",
        })
    except Exception as e:
        return error_response(e)


@router.get("/get-model/{cid}")
async def get_model(cid: str, registry: ModelRegistry = Depends(get_registry)):
    try:
        package = await registry.fetch(cid)
        return envelope({"ipfsHash": cid, "modelPackage": package, "retrievedAt": now_iso()})
    except Exception as e:
        return error_response(e)


@router.get("/list-models")
async def list_models(
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
    sort_by: str = Query("date", alias="sortBy"),
    order: str = Query("desc"),
    registry: ModelRegistry = Depends(get_registry),
):
    try:
        return envelope(await registry.list_models(limit, offset, sort_by, order))
    except Exception as e:
        return error_response(e)


@router.get("/model-details/{cid}")
async def model_details(cid: str, registry: ModelRegistry = Depends(get_registry)):
    try:
        return envelope(await registry.model_details(cid))
    except Exception as e:
        return error_response(e)


@router.get("/search-models")
async def search_models(
    query: str | None = Query(None),
    model_type: str | None = Query(None, alias="modelType"),
    min_accuracy: float | None = Query(None, alias="minAccuracy"),
    max_accuracy: float | None = Query(None, alias="maxAccuracy"),
    from_date: datetime | None = Query(None, alias="fromDate"),
    to_date: datetime | None = Query(None, alias="toDate"),
    limit: int = Query(50, ge=1),
    registry: ModelRegistry = Depends(get_registry),
):
    criteria = SearchCriteria(
        query=query,
        model_type=model_type,
        min_accuracy=min_accuracy,
        max_accuracy=max_accuracy,
        from_date=from_date,
        to_date=to_date,
    )
    try:
        return envelope(await registry.search_models(criteria, limit))
    except Exception as e:
        return error_response(e)


@router.get("/statistics")
async def statistics(registry: ModelRegistry = Depends(get_registry)):
    try:
        logger.info("Calculating model statistics")
        snapshot = await registry.statistics()
        return envelope(snapshot.to_response())
    except Exception as e:
        return error_response(e)
