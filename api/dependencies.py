"""Registry construction and FastAPI dependency."""

from fastapi import Request

from api.config import ServerSettings
from api.services.registry import ModelRegistry
from pinning.client import PinningClient
from pinning.config import Settings
from pinning.lister import PinLister


def build_registry(settings: Settings, server_settings: ServerSettings) -> ModelRegistry:
    """Wire the client, lister and registry from explicit settings."""
    client = PinningClient(settings)
    lister = PinLister(client, settings)
    return ModelRegistry(client, lister, list_limit=server_settings.list_limit)


def get_registry(request: Request) -> ModelRegistry:
    return request.app.state.registry
