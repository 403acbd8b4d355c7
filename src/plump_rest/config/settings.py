import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if present
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- REST adapter ---
BASE_URL = os.getenv("PLUMP_REST_BASE_URL", "http://localhost/api")
SOCKET_URL = os.getenv("PLUMP_REST_SOCKET_URL") or None
API_KEY = os.getenv("PLUMP_REST_API_KEY") or None
ONLY_FIRE_SOCKET_EVENTS = _flag("PLUMP_REST_ONLY_FIRE_SOCKET_EVENTS", "false")
TERMINAL = _flag("PLUMP_REST_TERMINAL", "true")

# --- Backend selection ---
STORE_BACKEND = os.getenv("PLUMP_STORE_BACKEND", "rest")  # rest | memory

# --- Dev backend server ---
SERVER_HOST = os.getenv("PLUMP_SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("PLUMP_SERVER_PORT", 8080))
