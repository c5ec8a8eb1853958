"""Configuration settings for the Blob server."""

import os

from common.constants import BLOB_MAX_BYTES


BLOB_STORAGE_PATH = os.environ.get("QRDROP_BLOB_STORAGE_PATH", "/app/data/blobs")

BLOBSERVER_HOST = os.environ.get("QRDROP_BLOBSERVER_HOST", "0.0.0.0")

BLOBSERVER_PORT = int(os.environ.get("QRDROP_BLOBSERVER_PORT", "9000"))

# Base URL put into returned object URLs; defaults to the URL the request arrived on
BLOB_PUBLIC_URL = os.environ.get("QRDROP_BLOB_PUBLIC_URL", "").rstrip("/")

MAX_OBJECT_BYTES = int(os.environ.get("QRDROP_BLOB_MAX_BYTES", str(BLOB_MAX_BYTES)))
