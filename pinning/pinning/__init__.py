"""Pinata pinning client, listing and model statistics."""

from pinning.catalog import SearchCriteria, filter_models, is_model_record, select_models, sort_models
from pinning.client import PinningClient
from pinning.config import Settings, settings
from pinning.errors import (
    AllGatewaysExhaustedError,
    ConfigurationError,
    PinningError,
    ProviderError,
    ValidationError,
)
from pinning.gateways import GatewayResolver, is_valid_cid
from pinning.lister import PinLister
from pinning.stats import compute_stats

__version__ = "1.0.0"

__all__ = [
    "SearchCriteria",
    "filter_models",
    "is_model_record",
    "select_models",
    "sort_models",
    "PinningClient",
    "Settings",
    "settings",
    "AllGatewaysExhaustedError",
    "ConfigurationError",
    "PinningError",
    "ProviderError",
    "ValidationError",
    "GatewayResolver",
    "is_valid_cid",
    "PinLister",
    "compute_stats",
]
