"""Constants for Fchanger."""

from pathlib import Path

# Application constants
APP_NAME = "fchanger"

# Default paths
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_LOG_DIR = ".logs"
DEFAULT_CONFIG_FILE = "fchanger.yaml"

# Config file locations (in order of priority, relative paths resolve against cwd)
CONFIG_LOCATIONS = [
    Path(DEFAULT_CONFIG_FILE),
    Path.home() / ".config" / APP_NAME / "config.yaml",
]

# Batch settings
MAX_BATCH_SIZE = 5
DEFAULT_TARGET_FORMAT = "png"
DEFAULT_QUALITY = 1.0

# User-visible intake warnings
TRUNCATION_WARNING = "You can only upload up to {limit} images at a time."
NO_VALID_IMAGES_WARNING = "Please select valid image files."

# Background used for targets without an alpha channel
OPAQUE_BACKGROUND = (255, 255, 255, 255)

# Enrichment
ENRICHMENT_PROVIDERS = ["gemini", "openai"]

PROVIDER_API_KEY_ENV_VARS = {
    "gemini": "GOOGLE_API_KEY",
    "openai": "OPENAI_API_KEY",
}

DEFAULT_LLM_MODELS = {
    "gemini": "gemini-3-flash-preview",
    "openai": "gpt-5.2",
}

DEFAULT_MAX_ALT_TEXT_LENGTH = 125
DEFAULT_MAX_FILENAME_LENGTH = 80

# Retry settings
DEFAULT_MAX_RETRIES = 3

# Timeout settings (seconds)
DEFAULT_LLM_TIMEOUT = 120
