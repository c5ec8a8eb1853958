"""Configuration settings for the Relay server."""

import os

from common.constants import DB_ROW_TTL_SECONDS, TierThresholds


DATABASE_PATH = os.environ.get("QRDROP_DATABASE_PATH", "/app/data/payloads.db")

RELAY_HOST = os.environ.get("QRDROP_RELAY_HOST", "0.0.0.0")

RELAY_PORT = int(os.environ.get("QRDROP_RELAY_PORT", "8000"))

PUBLIC_BASE_URL = os.environ.get("QRDROP_PUBLIC_BASE_URL", f"http://localhost:{RELAY_PORT}").rstrip("/")

BLOBSERVER_URL = os.environ.get("QRDROP_BLOBSERVER_URL", "http://blobserver:9000").rstrip("/")

BACKEND_TIMEOUT_SECONDS = float(os.environ.get("QRDROP_BACKEND_TIMEOUT_SECONDS", "15"))

BACKEND_MAX_RETRIES = int(os.environ.get("QRDROP_BACKEND_MAX_RETRIES", "3"))

PAYLOAD_TTL_SECONDS = int(os.environ.get("QRDROP_DB_ROW_TTL_SECONDS", str(DB_ROW_TTL_SECONDS)))

CLEANUP_INTERVAL_SECONDS = int(os.environ.get("QRDROP_CLEANUP_INTERVAL_SECONDS", "3600"))

TIER_THRESHOLDS = TierThresholds.from_env()
