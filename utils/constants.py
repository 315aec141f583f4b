"""
Constants and configuration values for JellySubChanger.
"""

# Application metadata
__version__ = "0.1.0"
__app_name__ = "JellySubChanger"

# Client identity sent in the MediaBrowser authorization header
CLIENT_NAME = "Jellyfin Subtitle Changer"
DEVICE_NAME = "Jellyfin Subtitle Changer"

# Server discovery
HTTP_DEFAULT_PORT = 8096
HTTPS_DEFAULT_PORT = 8920
PRODUCT_NAME = "Jellyfin Server"
MINIMUM_SERVER_VERSION = (10, 8, 0)
SLOW_RESPONSE_MS = 3000
DEFAULT_DISCOVERY_TIMEOUT = 5  # Probe timeout in seconds

# Discovery scoring (lower is better)
SCORE_PENALTY_INSECURE = 10
SCORE_PENALTY_SLOW = 20
SCORE_PENALTY_REDIRECT = 5

# Item types and stream types used by the Jellyfin API
ITEM_TYPE_SERIES = "Series"
STREAM_TYPE_SUBTITLE = "Subtitle"
STREAM_TYPE_AUDIO = "Audio"

# Web API
DEFAULT_WEB_HOST = "127.0.0.1"
DEFAULT_WEB_PORT = 5000

# Configuration File
CONFIG_FILE_PATH = 'config.ini'  # Path to application configuration file
