"""Configuration: env, data paths, cooldown timing, DJ credentials, Spotify credentials."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of barjukebox package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SPOTIFY_CLIENT_ID etc. are set
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("BARJUKEBOX_DATA_DIR", str(BASE_DIR / "data")))

# API
API_HOST = os.getenv("BARJUKEBOX_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("BARJUKEBOX_API_PORT", "8000"))
# Browser origin of the customer/DJ screens; "*" when unset
BARJUKEBOX_WEB_ORIGIN = os.getenv("BARJUKEBOX_WEB_ORIGIN", "")

# Lifecycle timing
COOLDOWN_DURATION_MS = int(float(os.getenv("BARJUKEBOX_COOLDOWN_SEC", "7200")) * 1000)
SWEEP_INTERVAL_SEC = float(os.getenv("BARJUKEBOX_SWEEP_INTERVAL_SEC", "5.0"))
# How often FileBridge checks the store for writes made by other instances
STORE_POLL_INTERVAL_SEC = float(os.getenv("BARJUKEBOX_STORE_POLL_INTERVAL_SEC", "1.0"))

# Fun fact lookup (advisory only)
ENRICHMENT_WAIT_SEC = float(os.getenv("BARJUKEBOX_ENRICHMENT_WAIT_SEC", "4.0"))
ENRICHMENT_WORKERS = int(os.getenv("BARJUKEBOX_ENRICHMENT_WORKERS", "2"))

# DJ login (shared secret gate, not a security boundary)
DJ_USERNAME = os.getenv("BARJUKEBOX_DJ_USERNAME", "Cowboy")
DJ_PASSWORD = os.getenv("BARJUKEBOX_DJ_PASSWORD", "Thecowboyisthebest")

# Spotify (client credentials; only used for fun facts)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SPOTIFY_MARKET = os.getenv("SPOTIFY_MARKET", "US")


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
