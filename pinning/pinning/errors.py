"""Exceptions raised by the pinning client and its helpers."""


class PinningError(Exception):
    """Base exception for pinning service errors."""
    pass


class ConfigurationError(PinningError):
    """Required provider credentials are missing."""
    pass


class ValidationError(PinningError):
    """A request field or content identifier is missing or malformed."""
    pass


class ProviderError(PinningError):
    """The pinning provider rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AllGatewaysExhaustedError(PinningError):
    """Every retrieval gateway failed for a content identifier."""

    def __init__(self, cid: str, attempts: list[tuple[str, str]]):
        """Initialize with the failed attempts.

        Args:
            cid: Content identifier that could not be fetched
            attempts: (gateway url, error message) per attempt, in order
        """
        self.cid = cid
        self.attempts = attempts
        last_error = attempts[-1][1] if attempts else "no gateways configured"
        super().__init__(f"Failed to fetch from IPFS: {last_error}")
