import os
from pathlib import Path

HOST = os.environ.get("LINKHUB_HOST", "127.0.0.1")
PORT = int(os.environ.get("LINKHUB_PORT", "8765"))

# Directory holding the four locally cached state entries
CACHE_DIR = Path(os.environ.get("LINKHUB_CACHE_DIR", "linkhub_cache"))

# Remote document store (spreadsheet web app). Empty means local-only.
ENDPOINT_URL = os.environ.get("LINKHUB_ENDPOINT_URL", "")

ADMIN_PASSWORD = os.environ.get("LINKHUB_ADMIN_PASSWORD", "changeme")

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", "")
GEMINI_MODEL = os.environ.get("LINKHUB_GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

LOG_LEVEL = os.environ.get("LINKHUB_LOG_LEVEL", "INFO").upper()
OPEN_BROWSER = os.environ.get("LINKHUB_OPEN_BROWSER", "1") not in {"0", "false", "no"}
