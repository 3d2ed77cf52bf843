"""IPFS storage API router."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from api.dependencies import get_registry
from api.responses import envelope, error_response, failure, now_iso
from api.services.registry import ModelRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ipfs", tags=["ipfs"])


class UploadModelRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_data: Any = Field(default=None, alias="modelData")
    metadata: dict[str, Any] | None = None


class UploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: Any = None
    metadata: dict[str, Any] | None = None
    file_name: str = Field(default="file.json", alias="fileName")


@router.get("/test")
async def test_connection(registry: ModelRegistry = Depends(get_registry)):
    try:
        check = await registry.test_connection()
        return envelope(check.to_response())
    except Exception as e:
        return error_response(e)


@router.post("/upload-model")
async def upload_model(request: UploadModelRequest, registry: ModelRegistry = Depends(get_registry)):
    if request.model_data is None:
        return failure("Model data is required", 400)
    try:
        logger.info("Uploading model to IPFS")
        result = await registry.upload(request.model_data, request.metadata or {})
        return envelope({
            "ipfs": result.to_response(),
            "message": "Model stored successfully on IPFS",
            "timestamp": now_iso(),
        })
    except Exception as e:
        return error_response(e)


@router.post("/upload")
async def upload(request: UploadRequest, registry: ModelRegistry = Depends(get_registry)):
    if request.data is None:
        return failure("Data is required", 400)
    try:
        metadata = {"fileName": request.file_name, **(request.metadata or {})}
        result = await registry.upload(request.data, metadata)
        return envelope(result.to_response())
    except Exception as e:
        return error_response(e)


@router.get("/model/{cid}")
async def get_model(cid: str, registry: ModelRegistry = Depends(get_registry)):
    try:
        logger.info(f"Fetching model from IPFS: {cid}")
        document = await registry.fetch(cid)
        return envelope({"ipfsHash": cid, "modelData": document, "retrievedAt": now_iso()})
    except Exception as e:
        return error_response(e)


@router.get("/files")
async def list_files(
    limit: int = Query(1000, ge=1),
    status: str = Query("all"),
    registry: ModelRegistry = Depends(get_registry),
):
    try:
        listing = await registry.list_files(limit, status)
        if not listing.success:
            return failure("Failed to list pinned files", 500, details=listing.error)
        return envelope(listing.to_response())
    except Exception as e:
        return error_response(e)


@router.get("/files/all")
async def list_all_files(
    limit: int = Query(1000, ge=1),
    registry: ModelRegistry = Depends(get_registry),
):
    try:
        listing = await registry.list_all_files(limit)
        return envelope(listing.to_response())
    except Exception as e:
        return error_response(e)


@router.get("/pin/{cid}")
async def pin_status(cid: str, registry: ModelRegistry = Depends(get_registry)):
    try:
        status = await registry.pin_status(cid)
        if not status.success:
            return failure("Failed to get pin status", 500, details=status.error)
        return envelope(status.to_response())
    except Exception as e:
        return error_response(e)


@router.delete("/pin/{cid}")
async def unpin(cid: str, registry: ModelRegistry = Depends(get_registry)):
    try:
        return envelope(await registry.unpin(cid))
    except Exception as e:
        return error_response(e)


@router.get("/gateways/{cid}")
async def gateways(cid: str, registry: ModelRegistry = Depends(get_registry)):
    try:
        return envelope(registry.gateways(cid))
    except Exception as e:
        return error_response(e)
