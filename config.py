import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent
load_dotenv(BASE_DIR / ".env")
OUTPUT_DIR = Path(os.environ.get("OUTPUT_DIR", BASE_DIR / "output"))


def _flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


# External tool path (looked up at execution time so it can change per run)
GNUPLOT_ENV_VAR = "GNUPLOT_EXE"

# Script debugging
PRINT_SCRIPT = _flag("GNUPLOT_PRINT_SCRIPT")
SAVE_SCRIPT = _flag("GNUPLOT_SAVE_SCRIPT")

# Data serialization
CSV_PRECISION = int(os.environ.get("CSV_PRECISION", "10"))
DEFAULT_IMAGE_FORMAT = os.environ.get("GNUPLOT_IMAGE_FORMAT", "svg")

# Server settings
SERVER_HOST = os.environ.get("SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.environ.get("SERVER_PORT", "8000"))
