"""Default paths, environment variable names, and constants."""

from __future__ import annotations

import platformdirs

APP_NAME = "studio-cli"

CONFIG_DIR = platformdirs.user_config_path(APP_NAME)
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Environment variable names
ENV_BACKEND_URL = "STUDIO_BACKEND_URL"
ENV_API_TOKEN = "STUDIO_API_TOKEN"
ENV_PROFILE = "STUDIO_PROFILE"
ENV_HOLDER_ID = "STUDIO_HOLDER_ID"
ENV_LOG_LEVEL = "STUDIO_LOG_LEVEL"

# API defaults
DEFAULT_API_BASE = "/api/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
