"""
config.py

Central configuration for the POD Assistant.

All tuneable parameters live here so that nothing is hardcoded in the
node, adapter or store modules.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# LLM configuration
# ---------------------------------------------------------------------------
LLM_MODEL: str = os.getenv("POD_LLM_MODEL", "gemini-3-flash-preview")
LLM_TEMPERATURE: float = float(os.getenv("POD_LLM_TEMPERATURE", "0"))
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")

# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------
# Case-insensitive marker the vision model is told to emit for a valid POD.
ACCEPTANCE_MARKER: str = os.getenv("POD_ACCEPTANCE_MARKER", "pod is good")

# ---------------------------------------------------------------------------
# Docket store
# ---------------------------------------------------------------------------
DB_PATH: str = os.getenv("POD_DB_PATH", "logistics.db")
DOCKET_ID_PATTERN: str = r"DKT-\d+"

SAMPLE_DOCKETS = [
    ("DKT-1001", "John Doe", "123 Maple St, Springfield"),
    ("DKT-1002", "Jane Smith", "456 Oak Ave, Metropolis"),
    ("DKT-1003", "Acme Corp", "789 Industrial Way, Gotham"),
]
SAMPLE_DOCKET_IDS = [docket_id for docket_id, _, _ in SAMPLE_DOCKETS]

# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------
MAX_IMAGE_SIZE_MB: float = float(os.getenv("POD_MAX_IMAGE_MB", "10"))
# Pillow format name -> MIME type
ALLOWED_IMAGE_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
}

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("POD_LOG_LEVEL", "INFO")
