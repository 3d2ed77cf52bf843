"""HTTP tests for the ipfs and ml routers against an in-memory provider."""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_registry
from api.main import app
from api.services.registry import ModelRegistry
from pinning.client import PinningClient
from pinning.lister import PinLister

from conftest import FakeSession, make_cid, make_response, make_row


@pytest.fixture
def registry(client, lister):
    return ModelRegistry(client, lister, list_limit=100)


@pytest.fixture
def api(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert "timestamp" in body


def test_info_lists_endpoints(api):
    body = api.get("/api/info").json()

    assert body["success"] is True
    assert body["data"]["endpoints"]["storeTFTModel"] == "POST /api/ml/store-model"


def test_unknown_route_envelope(api):
    response = api.get("/api/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Endpoint not found"
    assert "timestamp" in body


def test_connection(api):
    body = api.get("/api/ipfs/test").json()

    assert body["success"] is True
    assert body["data"]["success"] is True
    assert body["data"]["message"] == "Pinata connection successful"


class TestUploadAndFetch:
    def test_upload_model_then_fetch(self, api):
        upload = api.post(
            "/api/ipfs/upload-model",
            json={"modelData": {"a": 1}, "metadata": {"modelName": "model-a", "accuracy": 0.9}},
        )

        assert upload.status_code == 200
        ipfs = upload.json()["data"]["ipfs"]
        cid = ipfs["contentId"]
        assert ipfs["url"].endswith(cid)

        fetched = api.get(f"/api/ipfs/model/{cid}")

        assert fetched.status_code == 200
        data = fetched.json()["data"]
        assert data["ipfsHash"] == cid
        assert data["modelData"]["data"] == {"a": 1}
        assert data["modelData"]["metadata"]["modelName"] == "model-a"

    def test_upload_model_requires_data(self, api, provider_session):
        response = api.post("/api/ipfs/upload-model", json={"metadata": {}})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Model data is required",
            "timestamp": response.json()["timestamp"],
        }
        assert provider_session.calls == []

    def test_upload_requires_data(self, api):
        response = api.post("/api/ipfs/upload", json={"fileName": "x.json"})

        assert response.status_code == 400
        assert response.json()["error"] == "Data is required"

    def test_generic_upload(self, api, pinata):
        response = api.post("/api/ipfs/upload", json={"data": [1, 2], "fileName": "numbers.json"})

        assert response.status_code == 200
        assert pinata.uploads[0]["document"]["metadata"]["fileName"] == "numbers.json"

    def test_invalid_cid_is_rejected_without_network(self, api, gateway_session, provider_session):
        for path in (
            "/api/ipfs/model/not-a-hash",
            "/api/ml/get-model/not-a-hash",
            "/api/ml/model-details/not-a-hash",
            "/api/ipfs/pin/not-a-hash",
            "/api/ipfs/gateways/not-a-hash",
        ):
            response = api.get(path)
            assert response.status_code == 400, path
            assert response.json()["error"] == "Invalid IPFS hash format"

        assert api.delete("/api/ipfs/pin/not-a-hash").status_code == 400
        assert gateway_session.calls == []
        assert provider_session.calls == []

    def test_fetch_unknown_cid_fails(self, api):
        response = api.get(f"/api/ipfs/model/{make_cid(40)}")

        assert response.status_code == 500
        assert response.json()["error"].startswith("Failed to fetch from IPFS")

    def test_upload_provider_failure(self, settings):
        session = FakeSession(lambda *_: make_response(401, {"error": "bad"}))
        client = PinningClient(settings, session=session, gateway_session=FakeSession(None))
        registry = ModelRegistry(client, PinLister(client, settings))
        app.dependency_overrides[get_registry] = lambda: registry
        try:
            response = TestClient(app).post("/api/ipfs/upload-model", json={"modelData": {"a": 1}})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert "Invalid Pinata API credentials" in response.json()["error"]


class TestPins:
    def test_list_files(self, api, pinata):
        pinata.rows.extend(make_row(i) for i in range(3))

        body = api.get("/api/ipfs/files").json()

        assert body["success"] is True
        assert body["data"]["count"] == 3
        assert body["data"]["rows"][0]["contentId"] == make_cid(0)

    def test_list_files_empty(self, api):
        data = api.get("/api/ipfs/files").json()["data"]

        assert data["count"] == 0
        assert data["rows"] == []

    def test_list_all_files(self, api, pinata):
        pinata.rows.append(make_row(1))

        data = api.get("/api/ipfs/files/all").json()["data"]

        assert data["pinnedCount"] == 1
        assert "unpinnedCount" in data

    def test_pin_status_and_unpin(self, api, pinata):
        pinata.rows.append(make_row(2))
        cid = make_cid(2)

        status = api.get(f"/api/ipfs/pin/{cid}").json()["data"]
        assert status["pinned"] is True
        assert status["record"]["contentId"] == cid

        removed = api.delete(f"/api/ipfs/pin/{cid}").json()
        assert removed["success"] is True
        assert removed["data"]["message"] == "File unpinned successfully"

        assert api.get(f"/api/ipfs/pin/{cid}").json()["data"]["pinned"] is False

    def test_gateways(self, api):
        cid = make_cid(2)

        data = api.get(f"/api/ipfs/gateways/{cid}").json()["data"]

        assert data["ipfsIo"] == f"https://ipfs.io/ipfs/{cid}"


class TestModels:
    def store(self, api, name, accuracy):
        response = api.post(
            "/api/ml/store-model",
            json={
                "model_weights": {"layers": 2},
                "performance_metrics": {"accuracy": accuracy},
                "model_metadata": {"name": name, "version": "1.2.0"},
            },
        )
        assert response.status_code == 200
        return response.json()["data"]["ipfsHash"]

    def test_store_and_get_model(self, api):
        cid = self.store(api, "churn-tft", 0.88)

        package = api.get(f"/api/ml/get-model/{cid}").json()["data"]["modelPackage"]

        assert package["data"]["type"] == "tft_churn_model"
        assert package["data"]["model_weights"] == {"layers": 2}
        assert package["metadata"]["modelType"] == "temporal_fusion_transformer"

    def test_list_models(self, api, pinata):
        self.store(api, "churn-tft-a", 0.8)
        self.store(api, "churn-tft-b", 0.9)
        pinata.rows.append(make_row(50, name="readme.txt"))

        data = api.get("/api/ml/list-models", params={"sortBy": "accuracy", "order": "asc"}).json()["data"]

        assert [m["accuracy"] for m in data["models"]] == [0.8, 0.9]
        assert data["models"][0]["modelType"] == "temporal_fusion_transformer"
        assert data["models"][0]["version"] == "1.2.0"
        assert "gateways" in data["models"][0]
        assert data["pagination"] == {"total": 2, "limit": 50, "offset": 0, "returned": 2, "hasMore": False}
        assert data["summary"]["totalModels"] == 2
        assert data["summary"]["modelTypes"] == ["temporal_fusion_transformer"]
        assert data["summary"]["averageAccuracy"] == 0.85

    def test_list_models_pages(self, api):
        for i in range(3):
            self.store(api, f"model-{i}", 0.5)

        data = api.get("/api/ml/list-models", params={"limit": 2, "offset": 1}).json()["data"]

        assert data["pagination"]["returned"] == 2
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["hasMore"] is False

    def test_list_models_failure(self, settings):
        session = FakeSession(lambda *_: make_response(500, {"error": "down"}))
        client = PinningClient(settings, session=session, gateway_session=FakeSession(None))
        registry = ModelRegistry(client, PinLister(client, settings))
        app.dependency_overrides[get_registry] = lambda: registry
        try:
            response = TestClient(app).get("/api/ml/list-models")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert "Failed to retrieve model list" in response.json()["error"]

    def test_model_details(self, api):
        cid = self.store(api, "churn-tft", 0.88)

        data = api.get(f"/api/ml/model-details/{cid}").json()["data"]

        assert data["pinned"] is True
        assert data["pinInfo"]["name"] == "churn-tft"
        assert data["modelPackage"]["data"]["type"] == "tft_churn_model"
        assert set(data["gateways"]) == {"pinata", "ipfsIo", "cloudflare", "dweb"}

    def test_search_models(self, api):
        self.store(api, "churn-model-a", 0.95)
        self.store(api, "churn-model-b", 0.6)

        data = api.get("/api/ml/search-models", params={"query": "churn", "minAccuracy": 0.9}).json()["data"]

        assert data["count"] == 1
        assert data["models"][0]["name"] == "churn-model-a"
        assert "gateways" not in data["models"][0]
        assert data["searchCriteria"]["minAccuracy"] == 0.9

    def test_statistics_empty(self, api):
        data = api.get("/api/ml/statistics").json()["data"]

        assert data["totalModels"] == 0
        assert data["averageAccuracy"] == 0
        assert data["bestModel"] is None
        assert data["latestModel"] is None

    def test_statistics(self, api):
        self.store(api, "churn-tft-a", 0.95)
        self.store(api, "churn-tft-b", 0.75)

        data = api.get("/api/ml/statistics").json()["data"]

        assert data["totalModels"] == 2
        assert data["accuracyDistribution"] == {"high": 1, "medium": 1, "low": 0}
        assert data["recentUploads"]["last24h"] == 2
        assert data["bestModel"]["name"] == "churn-tft-a"
        assert data["modelsByType"] == {"temporal_fusion_transformer": 2}

    def test_store_model_uses_model_upload_tags(self, api, pinata):
        self.store(api, "churn-tft", 0.88)

        upload = pinata.uploads[0]
        assert upload["document"]["metadata"]["framework"] == "pytorch"
        assert upload["document"]["metadata"]["task"] == "churn_prediction"
        assert upload["pinataMetadata"]["keyvalues"]["modelType"] == "temporal_fusion_transformer"
        assert upload["pinataMetadata"]["keyvalues"]["version"] == "1.2.0"


class TestUntrustedProviderRows:
    @pytest.fixture
    def rows(self, pinata):
        pinata.rows.extend([
            make_row(1, name="churn-model", keyvalues={"type": "ml-model", "accuracy": "Infinity"}),
            make_row(2, name="churn-model-b", keyvalues={"type": "ml-model", "accuracy": "0.75"}),
            make_row(3, name="broken-model", date_pinned="not a date"),
        ])

    @pytest.mark.parametrize(
        "path",
        ["/api/ml/statistics", "/api/ml/list-models", "/api/ml/search-models", "/api/ipfs/files"],
    )
    def test_endpoints_stay_available(self, api, rows, path):
        response = api.get(path)

        assert response.status_code == 200, response.text
        assert response.json()["success"] is True

    def test_infinite_accuracy_reads_as_zero(self, api, rows):
        stats = api.get("/api/ml/statistics").json()["data"]
        models = api.get("/api/ml/list-models", params={"sortBy": "name", "order": "asc"}).json()["data"]

        assert stats["totalModels"] == 2
        assert stats["averageAccuracy"] == 0.75
        assert stats["bestModel"]["name"] == "churn-model-b"
        assert [m["accuracy"] for m in models["models"]] == [0.0, 0.75]

    def test_upload_with_overflowing_accuracy(self, api):
        api.post(
            "/api/ipfs/upload-model",
            content='{"modelData": {"a": 1}, "metadata": {"modelName": "model-x", "accuracy": 1e999}}',
            headers={"Content-Type": "application/json"},
        )

        response = api.get("/api/ml/statistics")

        assert response.status_code == 200
        assert response.json()["data"]["totalModels"] == 1
        assert response.json()["data"]["averageAccuracy"] == 0
