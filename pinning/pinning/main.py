"""Command line entry points: provider check, sample upload, API server."""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import requests
import structlog

from pinning.client import PinningClient
from pinning.config import Settings, settings
from pinning.errors import ConfigurationError, PinningError
from pinning.lister import PinLister
from pinning.logging_config import configure_logging

logger = structlog.get_logger()

SAMPLE_TFT_MODEL = {
    "model_weights": {
        "encoder_weights": {"layers": 4, "hidden_size": 160, "attention_heads": 4, "parameters": 2450000},
        "decoder_weights": {"layers": 2, "hidden_size": 160, "parameters": 1200000},
        "attention_weights": {"multihead_attention": True, "attention_dim": 64},
        "output_layer": {"output_size": 7, "activation": "sigmoid"},
    },
    "model_architecture": {
        "type": "TemporalFusionTransformer",
        "hidden_size": 160,
        "attention_head_size": 4,
        "dropout": 0.1,
        "hidden_continuous_size": 160,
        "output_size": 7,
        "input_features": [
            "product_id", "store_id", "units_sold", "price", "inventory_level",
            "demand_forecast", "day_of_week", "month", "is_weekend",
        ],
        "output_features": ["churn_probability_7d", "churn_probability_14d", "churn_probability_30d"],
        "time_features": ["date", "day_of_week", "month", "quarter"],
    },
    "training_config": {
        "learning_rate": 0.03,
        "batch_size": 64,
        "epochs": 50,
        "gradient_clip_val": 0.1,
        "optimizer": "adamw",
        "loss_function": "mse",
        "validation_split": 0.2,
        "early_stopping_patience": 10,
    },
    "performance_metrics": {
        "accuracy": 0.8945,
        "loss": 0.2341,
        "val_accuracy": 0.8762,
        "mse": 0.0456,
        "mae": 0.1234,
        "r2_score": 0.856,
        "precision": 0.867,
        "recall": 0.845,
        "f1_score": 0.856,
        "dataset_size": 150000,
    },
    "model_metadata": {
        "name": "Retail Churn TFT v1.0",
        "version": "1.0.0",
        "description": "Temporal Fusion Transformer for retail product churn prediction",
        "target": "churn_probability",
        "horizon": [7, 14, 30],
        "framework": "pytorch_lightning",
        "library": "pytorch_forecasting",
    },
}


def run_check(config: Settings) -> int:
    """Exercise the provider end to end: auth, upload, fetch, list, status.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config.check_credentials(strict=True)
    except ConfigurationError as e:
        logger.error("configuration_invalid", error=str(e))
        print(f"{e}\nSet PINATA_API_KEY, PINATA_API_SECRET and PINATA_JWT in .env")
        return 1

    with PinningClient(config) as client:
        connection = client.test_connection()
        if not connection.success:
            logger.error("connection_check_failed", error=connection.error)
            return 1
        logger.info("connection_check_passed")

        test_model = {
            "model_type": "tft_churn_predictor",
            "version": "1.0.0",
            "hyperparameters": {"hidden_size": 160, "attention_head_size": 4, "dropout": 0.1},
            "performance": {"accuracy": 0.894, "loss": 0.234},
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "test": True,
        }

        try:
            upload = client.upload(
                test_model,
                {"modelName": "test-tft-model", "version": "1.0.0", "accuracy": 0.894, "test": True},
            )
            document = client.fetch(upload.content_id)
        except PinningError as e:
            logger.error("check_failed", error=str(e))
            return 1

        fetched = document.get("data", {}) if isinstance(document, dict) else {}
        if fetched.get("model_type") != test_model["model_type"]:
            logger.error("check_roundtrip_mismatch", cid=upload.content_id)
            return 1

        listing = PinLister(client, config).list_records(5)
        status = client.pin_status(upload.content_id)
        gateways = client.resolver.gateways(upload.content_id)

    print("\n" + "=" * 60)
    print("PINNING CHECK COMPLETE")
    print("=" * 60)
    print(f"IPFS hash: {upload.content_id}")
    print(f"IPFS URL: {upload.url}")
    print(f"Pin size: {upload.size_bytes} bytes")
    if listing.success:
        print(f"Pinned files listed: {listing.count}")
    else:
        print(f"Pin listing not available: {listing.error}")
    print(f"Pinned: {'yes' if status.pinned else 'unclear'}")
    for name, url in gateways.items():
        print(f"  {name}: {url}")
    print("=" * 60)
    return 0


def upload_sample(server_url: str, timeout: float = 30.0) -> str | None:
    """POST the sample TFT package to a running service.

    Returns:
        The new content identifier, or None on failure
    """
    url = f"{server_url.rstrip('/')}/api/ml/store-model"
    try:
        resp = requests.post(url, json=SAMPLE_TFT_MODEL, timeout=timeout)
        body = resp.json()
    except requests.exceptions.ConnectionError:
        logger.error("server_unreachable", url=url, hint="Start the service with: pinning serve")
        return None
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error("sample_upload_failed", error=str(e))
        return None

    if not body.get("success"):
        logger.error("sample_upload_rejected", status_code=resp.status_code, error=body.get("error"))
        return None

    data = body["data"]
    print("\n" + "=" * 60)
    print("SAMPLE TFT MODEL UPLOADED")
    print("=" * 60)
    print(f"IPFS hash: {data['ipfsHash']}")
    print(f"IPFS URL: {data['ipfsUrl']}")
    print(f"Retrieve with: GET {server_url.rstrip('/')}/api/ml/get-model/{data['ipfsHash']}")
    print("=" * 60)
    return data["ipfsHash"]


def upload_training_file(config: Settings, path: Path, name: str | None = None) -> str | None:
    """Pin a JSON training data file directly through the provider.

    Returns:
        The new content identifier, or None on failure
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("training_file_unreadable", path=str(path), error=str(e))
        return None

    metadata = {"modelName": name or path.stem, "sourceFile": path.name}
    with PinningClient(config) as client:
        try:
            result = client.upload_training_data(data, metadata)
        except PinningError as e:
            logger.error("training_upload_failed", path=str(path), error=str(e))
            return None

    print(f"Training data pinned: {result.content_id}")
    print(f"IPFS URL: {result.url}")
    return result.content_id


def serve(host: str | None, port: int | None) -> int:
    import uvicorn

    from api.config import server_settings

    uvicorn.run(
        "api.main:app",
        host=host or server_settings.host,
        port=port or server_settings.port,
    )
    return 0


def main(argv: list[str] | None = None):
    """Entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Model pinning service tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Verify Pinata credentials and gateways
  pinning check

  # Upload the sample TFT model through a running service
  pinning upload-sample --server http://localhost:3000

  # Pin a JSON training data file
  pinning upload-training data/train.json --name churn-train-v1

  # Run the HTTP API
  pinning serve --port 3000
        """,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level",
    )
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        default=None,
        help="Log format",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="JSON log file path",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("check", help="Test connection, upload, fetch and list")

    sample_parser = subparsers.add_parser("upload-sample", help="Upload the sample TFT model")
    sample_parser.add_argument(
        "--server",
        default="http://localhost:3000",
        help="Base URL of the running service",
    )
    sample_parser.add_argument("--timeout", type=float, default=30.0)

    training_parser = subparsers.add_parser("upload-training", help="Pin a JSON training data file")
    training_parser.add_argument("path", type=Path, help="JSON file to upload")
    training_parser.add_argument("--name", default=None, help="Pin name (defaults to the file stem)")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    # Override settings with CLI args
    if args.log_level:
        settings.log_level = args.log_level
    if args.log_format:
        settings.log_format = args.log_format
    if args.log_file:
        settings.log_file = args.log_file

    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        format_type=settings.log_format,
        service_name=settings.service_name,
    )

    if args.command == "check":
        sys.exit(run_check(settings))
    if args.command == "upload-sample":
        sys.exit(0 if upload_sample(args.server, args.timeout) else 1)
    if args.command == "upload-training":
        sys.exit(0 if upload_training_file(settings, args.path, args.name) else 1)
    sys.exit(serve(args.host, args.port))


if __name__ == "__main__":
    main()
