"""FastAPI backend for the model pinning service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import server_settings
from api.dependencies import build_registry
from api.responses import failure, now_iso
from api.routers import ipfs, ml
from pinning.config import settings
from pinning.logging_config import configure_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "Model Pinning Service"
SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        format_type=settings.log_format,
        service_name=settings.service_name,
    )
    settings.check_credentials()
    app.state.registry = build_registry(settings, server_settings)
    logger.info(f"Starting {SERVICE_NAME} on port {server_settings.port}")
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")
    app.state.registry.client.close()


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=server_settings.cors_origins, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

app.include_router(ipfs.router, tags=["ipfs"])
app.include_router(ml.router, tags=["ml"])


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return failure("Invalid request", 400, details=jsonable_errors(exc))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return failure(message, exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}", exc_info=exc)
    return failure("Internal server error", 500)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": SERVICE_VERSION,
        "features": ["IPFS Storage", "Model Management", "TFT Model Support"],
        "timestamp": now_iso(),
    }


@app.get("/api/info")
async def info():
    return {
        "success": True,
        "data": {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "endpoints": {
                "health": "GET /health",
                "testConnection": "GET /api/ipfs/test",
                "uploadModel": "POST /api/ipfs/upload-model",
                "upload": "POST /api/ipfs/upload",
                "getModel": "GET /api/ipfs/model/{cid}",
                "listFiles": "GET /api/ipfs/files",
                "listAllFiles": "GET /api/ipfs/files/all",
                "pinStatus": "GET /api/ipfs/pin/{cid}",
                "unpin": "DELETE /api/ipfs/pin/{cid}",
                "gateways": "GET /api/ipfs/gateways/{cid}",
                "storeTFTModel": "POST /api/ml/store-model",
                "getTFTModel": "GET /api/ml/get-model/{cid}",
                "listModels": "GET /api/ml/list-models",
                "modelDetails": "GET /api/ml/model-details/{cid}",
                "searchModels": "GET /api/ml/search-models",
                "statistics": "GET /api/ml/statistics",
            },
            "supportedModels": ["TFT", "Generic ML Models"],
            "storage": "IPFS via Pinata",
        },
        "timestamp": now_iso(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=server_settings.host, port=server_settings.port)
