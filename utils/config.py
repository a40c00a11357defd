# utils/config.py

import os
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

# URL of the inference backend. Unset means the in-process mock client is used.
BACKEND_URL = os.getenv("LESION_BACKEND_URL")
MODEL_ID = os.getenv("LESION_MODEL_ID", "finetuned_efficientnet")

SAMPLES_DIR = Path(os.getenv("LESION_SAMPLES_DIR", str(ROOT / "samples")))
REQUEST_TIMEOUT = float(os.getenv("LESION_REQUEST_TIMEOUT", "60"))

GALLERY_SIZE = int(os.getenv("LESION_GALLERY_SIZE", "12"))
_seed = os.getenv("LESION_GALLERY_SEED")
GALLERY_SEED = int(_seed) if _seed else None

# "base64" or "url"
ACTIVATION_MAP_FORMAT = os.getenv("ACTIVATION_MAP_FORMAT", "base64").lower()
MOCK_LATENCY = (
    float(os.getenv("MOCK_LATENCY_MIN", "1.5")),
    float(os.getenv("MOCK_LATENCY_MAX", "2.5")),
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
