"""Configuration management for the rotation service."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Rotation defaults
ROTATION_WEEK_COUNT: Final[int] = int(os.getenv('ROTATION_WEEK_COUNT', '6'))
ROTATION_LOCATIONS: Final[tuple] = tuple(
    loc.strip() for loc in os.getenv('ROTATION_LOCATIONS', 'city,sued').split(',') if loc.strip()
)

# Analysis / optimization tuning
VARIETY_WINDOW_WEEKS: Final[int] = int(os.getenv('VARIETY_WINDOW_WEEKS', '2'))
MAX_SWAPS: Final[int] = int(os.getenv('MAX_SWAPS', '15'))
ALLERGEN_CONCENTRATION_THRESHOLD: Final[float] = float(os.getenv('ALLERGEN_CONCENTRATION_THRESHOLD', '0.5'))

# Guests per service when no guest count was recorded
DEFAULT_PAX: Final[dict[str, int]] = {
    "city": int(os.getenv('DEFAULT_PAX_CITY', '60')),
    "sued": int(os.getenv('DEFAULT_PAX_SUED', '45')),
}
FALLBACK_PAX: Final[int] = int(os.getenv('FALLBACK_PAX', '50'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))
