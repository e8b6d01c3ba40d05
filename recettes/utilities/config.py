"""Configuration management for the recipe planner application."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

from recettes.infra.paths import CACHE_DIR as _DEFAULT_CACHE_DIR, RECIPES_DIR as _DEFAULT_RECIPES_DIR
from recettes.utilities import constants

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# Data locations
RECIPES_DIR: Final[Path] = Path(os.getenv('RECIPES_DIR', str(_DEFAULT_RECIPES_DIR)))
CACHE_DIR: Final[Path] = Path(os.getenv('CACHE_DIR', str(_DEFAULT_CACHE_DIR)))

# Plan persistence
PLAN_STORAGE_KEY: Final[str] = os.getenv('PLAN_STORAGE_KEY', constants.PLAN_STORAGE_KEY)
SAVE_DEBOUNCE_SECONDS: Final[float] = float(os.getenv('SAVE_DEBOUNCE_SECONDS', str(constants.SAVE_DEBOUNCE_SECONDS)))

# Remote document store (empty URL -> local cache only)
REMOTE_STORE_URL: Final[str] = os.getenv('REMOTE_STORE_URL', '')
REMOTE_STORE_TOKEN: Final[str] = os.getenv('REMOTE_STORE_TOKEN', '')
REMOTE_POLL_SECONDS: Final[float] = float(os.getenv('REMOTE_POLL_SECONDS', str(constants.REMOTE_POLL_SECONDS)))
