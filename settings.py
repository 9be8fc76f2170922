from config.loader import default_config_dir, get_config_loader

# Get the config loader instance
config = get_config_loader()

APP_NAME = "gchatctl"
VERSION = "0.1.0"

# Logging configuration
LOG_LEVEL = config.get("LOG_LEVEL", "")
DEBUG_LOG_FILE = "gchatctl_debug.log"

# Config directory holding config.json and token_<profile>.json
CONFIG_DIR = config.get("GCHATCTL_CONFIG_DIR", str(default_config_dir(APP_NAME)))

# Google OAuth endpoints (hardcoded - not user configurable)
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_DEVICE_URL = "https://oauth2.googleapis.com/device/code"
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

# Google Cloud console pages used by `auth setup`
GCP_CREDS_URL = "https://console.cloud.google.com/apis/credentials"
GCP_CONSENT_URL = "https://console.cloud.google.com/apis/credentials/consent"
GCP_CHAT_API_URL = "https://console.cloud.google.com/apis/library/chat.googleapis.com"

# Google Chat API
CHAT_API_BASE = "https://chat.googleapis.com/v1"

DEFAULT_CHAT_SCOPES = (
    "https://www.googleapis.com/auth/chat.messages",
    "https://www.googleapis.com/auth/chat.spaces.readonly",
    "https://www.googleapis.com/auth/chat.memberships.readonly",
    "https://www.googleapis.com/auth/chat.users.readstate.readonly",
)

# Loopback redirect for the browser flow
CALLBACK_HOST = "127.0.0.1"
CALLBACK_PATH = "/callback"

# Flow defaults
DEFAULT_PROFILE = "default"
DEFAULT_LOGIN_TIMEOUT = 180.0  # seconds
DEFAULT_DEVICE_INTERVAL = 5
SLOW_DOWN_INCREMENT = 5
# Treat tokens as expired slightly before the provider does
TOKEN_EXPIRY_DELTA = 10.0

# HTTP timeout for provider and API requests
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 30.0)
