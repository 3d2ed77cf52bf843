"""Shared pytest fixtures for all tests."""

import json
from datetime import datetime, timezone
from urllib.parse import urlparse

import pytest
import requests

from pinning.client import PinningClient
from pinning.config import Settings
from pinning.lister import PinLister

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def make_cid(n: int) -> str:
    """Build a valid-looking CIDv0 from an integer seed."""
    return "Qm" + "".join(BASE58_ALPHABET[(n + i) % 58] for i in range(44))


def make_response(status_code: int = 200, json_body=None, text: str | None = None) -> requests.Response:
    """Create a real requests.Response with the given body."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.encoding = "utf-8"
    if json_body is not None:
        resp._content = json.dumps(json_body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = (text or "").encode("utf-8")
    return resp


def make_row(n: int, name: str | None = None, keyvalues: dict | None = None, size: int = 1024,
             date_pinned: str = "2024-01-01T00:00:00.000Z") -> dict:
    """Build a pinList row shaped like the provider's."""
    return {
        "id": f"pin-{n}",
        "ipfs_pin_hash": make_cid(n),
        "size": size,
        "date_pinned": date_pinned,
        "date_unpinned": None,
        "metadata": {"name": name or f"model-{n}", "keyvalues": keyvalues or {}},
    }


class FakeSession:
    """Stands in for requests.Session; a handler decides every response."""

    def __init__(self, handler):
        self.handler = handler
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        result = self.handler(method, url, kwargs)
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def delete(self, url, **kwargs):
        return self.request("DELETE", url, **kwargs)

    def close(self):
        pass


class FakePinata:
    """In-memory provider: pins uploads, serves the pin list and gateways."""

    def __init__(self):
        self.documents: dict[str, dict] = {}
        self.rows: list[dict] = []
        self.uploads: list[dict] = []

    def provider(self, method, url, kwargs):
        path = urlparse(url).path
        if method == "POST" and path == "/pinning/pinFileToIPFS":
            return self._pin(kwargs["files"])
        if method == "GET" and path == "/data/pinList":
            return self._pin_list(kwargs.get("params") or {})
        if method == "GET" and path == "/data/testAuthentication":
            return make_response(200, {"message": "Congratulations! You are communicating with the Pinata API!"})
        if method == "DELETE" and path.startswith("/pinning/unpin/"):
            cid = path.rsplit("/", 1)[-1]
            self.rows = [r for r in self.rows if r["ipfs_pin_hash"] != cid]
            return make_response(200, text="OK")
        return make_response(404, {"error": "Not found"})

    def gateway(self, method, url, kwargs):
        cid = urlparse(url).path.rsplit("/", 1)[-1]
        if cid in self.documents:
            return make_response(200, self.documents[cid])
        return make_response(404, text="not found")

    def _pin(self, files):
        form = {name: part for name, part in files}
        document = json.loads(form["file"][1])
        pinata_metadata = json.loads(form["pinataMetadata"][1])

        cid = make_cid(len(self.rows) + 1)
        timestamp = datetime.now(timezone.utc).isoformat()
        self.documents[cid] = document
        self.uploads.append({"document": document, "pinataMetadata": pinata_metadata})
        self.rows.append({
            "ipfs_pin_hash": cid,
            "size": len(form["file"][1]),
            "date_pinned": timestamp,
            "date_unpinned": None,
            "metadata": pinata_metadata,
        })
        return make_response(200, {"IpfsHash": cid, "PinSize": len(form["file"][1]), "Timestamp": timestamp})

    def _pin_list(self, params):
        if "hashContains" in params:
            rows = [r for r in self.rows if params["hashContains"] in r["ipfs_pin_hash"]]
            return make_response(200, {"count": len(rows), "rows": rows})
        offset = int(params.get("pageOffset", 0))
        limit = int(params.get("pageLimit", 10))
        page = self.rows[offset:offset + limit]
        return make_response(200, {"count": len(self.rows), "rows": page})


@pytest.fixture
def settings():
    """Settings with test credentials and no .env lookup."""
    return Settings(
        _env_file=None,
        api_key="test-key",
        api_secret="test-secret",
        jwt="test-jwt",
        page_limit=10,
        max_pages=20,
    )


@pytest.fixture
def pinata():
    return FakePinata()


@pytest.fixture
def provider_session(pinata):
    return FakeSession(pinata.provider)


@pytest.fixture
def gateway_session(pinata):
    return FakeSession(pinata.gateway)


@pytest.fixture
def client(settings, provider_session, gateway_session):
    """PinningClient wired to the in-memory provider."""
    return PinningClient(settings, session=provider_session, gateway_session=gateway_session)


@pytest.fixture
def lister(client, settings):
    return PinLister(client, settings)
