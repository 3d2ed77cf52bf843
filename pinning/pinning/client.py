"""Pinata REST API and IPFS gateway client."""

import json
from datetime import datetime, timezone
from typing import Any

import requests
import structlog

from pinning.catalog import TFT_MODEL_TYPE
from pinning.config import Settings
from pinning.errors import AllGatewaysExhaustedError, ProviderError, ValidationError
from pinning.gateways import GatewayResolver, require_valid_cid
from pinning.models import ConnectionCheck, FileRecord, PinStatusResult, UploadResult

logger = structlog.get_logger()


def provider_error_message(exc: requests.exceptions.RequestException) -> str:
    """Extract the provider's error text from a failed request."""
    response = getattr(exc, "response", None)
    if response is None:
        return str(exc)

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("error"):
        error = body["error"]
        if isinstance(error, dict):
            return error.get("details") or error.get("reason") or json.dumps(error)
        return str(error)
    return response.text or str(exc)


def describe_upload_failure(exc: requests.exceptions.RequestException) -> str:
    """Map an upload failure to a human-readable cause."""
    response = getattr(exc, "response", None)
    status = response.status_code if response is not None else None

    if status == 401:
        return "Invalid Pinata API credentials. Check your PINATA_JWT token."
    if status == 403:
        return "Pinata API key does not have required permissions."
    if isinstance(exc, requests.exceptions.ConnectionError):
        return "Network error: Cannot reach Pinata API. Check your internet connection."
    return provider_error_message(exc)


class PinningClient:
    """HTTP client for the Pinata pinning API and public IPFS gateways."""

    def __init__(
        self,
        settings: Settings,
        resolver: GatewayResolver | None = None,
        session: requests.Session | None = None,
        gateway_session: requests.Session | None = None,
    ):
        """Initialize pinning client.

        Args:
            settings: Credentials, endpoints and timeouts
            resolver: Gateway resolver (built from settings if None)
            session: Session for authenticated provider calls
            gateway_session: Session for unauthenticated gateway fetches
        """
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.resolver = resolver or GatewayResolver(settings)
        self.session = session or requests.Session()
        self.gateway_session = gateway_session or requests.Session()

    def close(self) -> None:
        self.session.close()
        self.gateway_session.close()

    def __enter__(self) -> "PinningClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        timeout: float,
        action: str,
        **kwargs: Any,
    ) -> requests.Response:
        """Send an authenticated provider request.

        Raises:
            ProviderError: On network failure or a non-2xx response
        """
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                headers=self.settings.auth_headers,
                timeout=timeout,
                **kwargs,
            )
            resp.raise_for_status()
            return resp
        except requests.exceptions.RequestException as e:
            message = provider_error_message(e)
            status = e.response.status_code if e.response is not None else None
            logger.error(f"{action}_failed", status_code=status, error=message)
            raise ProviderError(f"{action.replace('_', ' ').capitalize()} failed: {message}", status) from e

    def upload(self, payload: Any, metadata: dict[str, Any] | None = None) -> UploadResult:
        """Upload a JSON payload wrapped with its metadata and pin it.

        Args:
            payload: JSON-serializable data, stored under ``data``
            metadata: Caller metadata (modelName, version, modelType, accuracy, ...)

        Returns:
            UploadResult with the content identifier and gateway URLs

        Raises:
            ValidationError: If the payload cannot be serialized
            ProviderError: If the provider rejects the upload or is unreachable
        """
        metadata = dict(metadata or {})
        now = datetime.now(timezone.utc)
        stamp_ms = int(now.timestamp() * 1000)

        document = {
            "data": payload,
            "metadata": {
                **metadata,
                "uploadedAt": now.isoformat(),
                "service": self.settings.service_name,
                "serviceVersion": self.settings.service_version,
            },
        }
        try:
            body = json.dumps(document, indent=2).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Payload is not JSON serializable: {e}") from e

        accuracy = metadata.get("accuracy")
        key_values = {
            "version": str(metadata.get("version") or "1.0.0"),
            "type": str(metadata.get("type") or "ml-model"),
            "accuracy": str(accuracy) if accuracy is not None else "0",
            "timestamp": str(metadata.get("timestamp") or stamp_ms),
            "service": self.settings.service_name,
        }
        if metadata.get("modelType"):
            key_values["modelType"] = str(metadata["modelType"])

        pinata_metadata = {
            "name": metadata.get("modelName") or f"model-{stamp_ms}",
            "keyvalues": key_values,
        }
        pinata_options = {"cidVersion": 0, "wrapWithDirectory": False}

        files_form = [
            ("file", (f"model-{stamp_ms}.json", body, "application/json")),
            ("pinataMetadata", (None, json.dumps(pinata_metadata), "application/json")),
            ("pinataOptions", (None, json.dumps(pinata_options), "application/json")),
        ]

        logger.info("upload_started", name=pinata_metadata["name"], size=len(body))
        try:
            resp = self.session.post(
                f"{self.base_url}/pinning/pinFileToIPFS",
                files=files_form,
                headers=self.settings.auth_headers,
                timeout=self.settings.upload_timeout,
            )
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            cause = describe_upload_failure(e)
            status = e.response.status_code if e.response is not None else None
            logger.error("upload_failed", status_code=status, error=cause)
            raise ProviderError(f"IPFS upload failed: {cause}", status) from e

        data = resp.json()
        cid = data["IpfsHash"]
        logger.info("upload_succeeded", cid=cid, pin_size=data.get("PinSize"))

        return UploadResult(
            content_id=cid,
            url=self.resolver.primary_url(cid),
            public_url=self.resolver.public_url(cid),
            size_bytes=data.get("PinSize") or 0,
            timestamp=data.get("Timestamp"),
        )

    def upload_model(self, model_data: Any, metadata: dict[str, Any] | None = None) -> UploadResult:
        """Upload a temporal fusion transformer package with standard tags."""
        standardized = {
            "modelType": TFT_MODEL_TYPE,
            "framework": "pytorch",
            "task": "churn_prediction",
            "domain": "retail",
            **(metadata or {}),
        }
        return self.upload(model_data, standardized)

    def upload_training_data(self, data: Any, metadata: dict[str, Any] | None = None) -> UploadResult:
        training_metadata = {
            "dataType": "training",
            "purpose": "model_training",
            **(metadata or {}),
        }
        return self.upload(data, training_metadata)

    def fetch(self, cid: str) -> Any:
        """Fetch a JSON document, trying each fallback gateway once.

        Args:
            cid: Content identifier

        Returns:
            Parsed JSON document from the first gateway that answers

        Raises:
            ValidationError: If ``cid`` is malformed (no request is made)
            AllGatewaysExhaustedError: If every gateway fails
        """
        require_valid_cid(cid)
        attempts: list[tuple[str, str]] = []

        for url in self.resolver.fallback_chain(cid):
            try:
                resp = self.gateway_session.get(
                    url,
                    headers={"Accept": "application/json"},
                    timeout=self.settings.fetch_timeout,
                )
                resp.raise_for_status()
                document = resp.json()
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.warning("gateway_fetch_failed", cid=cid, url=url, error=str(e))
                attempts.append((url, str(e)))
                continue

            logger.info("gateway_fetch_succeeded", cid=cid, url=url, attempt=len(attempts) + 1)
            return document

        logger.error("all_gateways_failed", cid=cid, attempts=len(attempts))
        raise AllGatewaysExhaustedError(cid, attempts)

    def fetch_pin_page(
        self,
        offset: int,
        limit: int,
        status: str = "all",
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Fetch one page of the provider's pin list.

        Returns:
            Provider JSON with ``count`` and ``rows``

        Raises:
            ProviderError: If the request fails
        """
        params: dict[str, Any] = {"pageLimit": limit, "pageOffset": offset}
        if status != "all":
            params["status"] = status

        resp = self._request(
            "GET",
            "/data/pinList",
            timeout or self.settings.list_timeout,
            "list_pins",
            params=params,
        )
        return resp.json() or {}

    def pin_status(self, cid: str) -> PinStatusResult:
        """Look up ``cid`` in the pin list.

        Provider failures are reported in the result rather than raised.

        Raises:
            ValidationError: If ``cid`` is malformed
        """
        require_valid_cid(cid)
        try:
            resp = self._request(
                "GET",
                "/data/pinList",
                self.settings.status_timeout,
                "pin_status",
                params={"hashContains": cid},
            )
        except ProviderError as e:
            return PinStatusResult(success=False, error=str(e))

        rows = (resp.json() or {}).get("rows") or []
        for row in rows:
            if row.get("ipfs_pin_hash") == cid:
                return PinStatusResult(pinned=True, record=FileRecord.from_provider_row(row))
        return PinStatusResult(pinned=False)

    def unpin(self, cid: str) -> dict[str, Any]:
        """Remove the pin for ``cid``.

        Raises:
            ValidationError: If ``cid`` is malformed
            ProviderError: If the provider rejects the request
        """
        require_valid_cid(cid)
        resp = self._request(
            "DELETE",
            f"/pinning/unpin/{cid}",
            self.settings.unpin_timeout,
            "unpin",
        )
        logger.info("unpin_succeeded", cid=cid)
        return {"message": "File unpinned successfully", "response": resp.text}

    def test_connection(self) -> ConnectionCheck:
        """Check that the configured credentials are accepted."""
        try:
            resp = self._request(
                "GET",
                "/data/testAuthentication",
                self.settings.auth_timeout,
                "test_authentication",
            )
        except ProviderError as e:
            return ConnectionCheck(
                success=False,
                message="Failed to connect to Pinata",
                error=str(e),
            )

        return ConnectionCheck(
            success=True,
            message="Pinata connection successful",
            data=resp.json() if resp.text else None,
        )
