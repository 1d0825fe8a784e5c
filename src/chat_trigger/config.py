import os

PORT = int(os.environ.get("PORT", "5678"))
HOST = os.environ.get("HOST", "0.0.0.0")
ROOT_PATH = os.environ.get("ROOT_PATH", "")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# JSON file holding the trigger parameter mapping; empty means built-in defaults
CHAT_CONFIG_FILE = os.environ.get("CHAT_CONFIG_FILE", "")

BASIC_AUTH_USER = os.environ.get("BASIC_AUTH_USER", "")
BASIC_AUTH_PASSWORD = os.environ.get("BASIC_AUTH_PASSWORD", "")
AUTH_REALM = os.environ.get("AUTH_REALM", "Webhook")

PUBLIC_PREFIX = "webhook"
TEST_PREFIX = "webhook-test"
SETUP_SUFFIX = "chat"

DEFAULT_WEBHOOK_PATH = "chat"
DEFAULT_INITIAL_MESSAGE = "Hi! How can I help you today?"
DEFAULT_MESSAGE_SOURCE = "chat_ui"
DEFAULT_FEATURES = ("markdown", "codeHighlight", "copy", "timestamps")
DEFAULT_MAX_HEIGHT_PX = 600
