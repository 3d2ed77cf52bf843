"""Content identifier validation and gateway URL resolution."""

import re

from pinning.config import Settings
from pinning.errors import ValidationError

# CIDv0 (base58btc multihash, 46 chars) and base32 CIDv1 with the common "bafy" prefix
CID_V0_PATTERN = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")
CID_V1_PATTERN = re.compile(r"^bafy[1-9A-HJ-NP-Za-km-z]{52}$")


def is_valid_cid(cid: str | None) -> bool:
    """Check whether a string looks like a content identifier."""
    if not cid:
        return False
    return bool(CID_V0_PATTERN.match(cid) or CID_V1_PATTERN.match(cid))


def require_valid_cid(cid: str | None) -> str:
    """Return ``cid`` unchanged or raise ValidationError."""
    if not is_valid_cid(cid):
        raise ValidationError("Invalid IPFS hash format")
    return cid


class GatewayResolver:
    """Resolves content identifiers to retrieval URLs."""

    def __init__(self, settings: Settings):
        self.templates = dict(settings.gateway_templates)
        self.fallback_count = settings.fallback_gateways

    def gateways(self, cid: str) -> dict[str, str]:
        """Map every gateway name to its URL for ``cid``."""
        return {name: template.format(cid=cid) for name, template in self.templates.items()}

    def fallback_map(self, cid: str) -> dict[str, str]:
        """Gateways used for retrieval, in the order they are tried."""
        return dict(list(self.gateways(cid).items())[: self.fallback_count])

    def fallback_chain(self, cid: str) -> list[str]:
        return list(self.fallback_map(cid).values())

    def primary_url(self, cid: str) -> str:
        return self.fallback_chain(cid)[0]

    def public_url(self, cid: str) -> str:
        """Second gateway, the public one in the default configuration."""
        urls = list(self.gateways(cid).values())
        return urls[1] if len(urls) > 1 else urls[0]
