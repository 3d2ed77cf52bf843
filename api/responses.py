"""Response envelope helpers: {success, data|error, timestamp}."""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse

from pinning.errors import ValidationError

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def envelope(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data, "timestamp": now_iso()}


def failure(message: str, status_code: int = 500, **extra: Any) -> JSONResponse:
    content = {"success": False, "error": message, **extra, "timestamp": now_iso()}
    return JSONResponse(status_code=status_code, content=content)


def error_response(exc: Exception) -> JSONResponse:
    """Convert a component error to a failure envelope (400 for validation)."""
    if isinstance(exc, ValidationError):
        return failure(str(exc), 400)
    logger.error(f"Request failed: {exc}", exc_info=exc)
    return failure(str(exc), 500)
