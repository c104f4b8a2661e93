"""Shared constants for bundlestrap."""

BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RESET = "\033[0m"

# Conventional capability directory inside a bundle. Only its presence is reported.
PLUGINS_DIR_NAME = "plugins"

DEFAULT_ARCHIVE_NAME = "repo.zip"
DEFAULT_BUNDLE_DIR_NAME = "bundle"
DEFAULT_ENTRY_POINT = "index.js"
DEFAULT_SETTINGS_NAME = "settings.js"
DEFAULT_RUNNER = ("node",)
DEFAULT_ENV_OVERRIDES = (("NODE_ENV", "production"),)

NETWORK_TIMEOUT_SECONDS = 30.0
DOWNLOAD_CHUNK_SIZE = 64 * 1024
