import os
import json

DISCORD_TOKEN = os.environ.get("DISCORD_TOKEN")
GUILD_ID = int(os.environ.get("GUILD_ID", "0"))

# Name of the player running the client; their own lines are never translated
LOCAL_PLAYER_NAME = os.environ.get("LOCAL_PLAYER_NAME") or None

# Paths
DATA_PATH = os.environ.get("DATA_PATH", "/var/lib/chatranslator")
TRANSLATOR_DB_PATH = os.environ.get(
    "TRANSLATOR_DB_PATH", os.path.join(DATA_PATH, "translator.db")
)
CHAT_LOG_PATH = os.environ.get("CHAT_LOG_PATH", "logs/latest.log")
LOG_POLL_SECONDS = float(os.environ.get("LOG_POLL_SECONDS", "0.5"))

# Translation provider
TRANSLATION_PROVIDER = os.environ.get("TRANSLATION_PROVIDER", "appworlds")
APPWORLDS_API_URL = os.environ.get("APPWORLDS_API_URL", "https://translate.appworlds.cn")
OPENAI_API_KEY_OPENROUTER = os.environ.get("OPENAI_API_KEY_OPENROUTER")
OPENROUTER_BASE_URL = os.environ.get("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
TRANSLATION_AI_MODEL = os.environ.get("TRANSLATION_AI_MODEL", "google/gemini-3-flash-preview")

# Free tier of the provider allows one call every two seconds
PROVIDER_MIN_INTERVAL_SECONDS = float(os.environ.get("PROVIDER_MIN_INTERVAL_SECONDS", "2.0"))
PROVIDER_TIMEOUT_SECONDS = float(os.environ.get("PROVIDER_TIMEOUT_SECONDS", "5.0"))

# Dispatcher
DISPATCH_MIN_INTERVAL_SECONDS = float(os.environ.get("DISPATCH_MIN_INTERVAL_SECONDS", "1.3"))
DISPATCH_TICK_SECONDS = float(os.environ.get("DISPATCH_TICK_SECONDS", "0.1"))
TRANSLATION_MAX_ATTEMPTS = int(os.environ.get("TRANSLATION_MAX_ATTEMPTS", "5"))


# Mapping Helpers
def get_env_list(var_name, default):
    val = os.environ.get(var_name)
    if val:
        try:
            return json.loads(val)
        except json.JSONDecodeError:
            pass
    return default


# Channels carrying relayed game chat
RELAY_CHANNEL_IDS = [int(c) for c in get_env_list("RELAY_CHANNEL_IDS", [])]
TRANSLATION_OUTPUT_CHANNEL_ID = int(os.environ.get("TRANSLATION_OUTPUT_CHANNEL_ID", "0"))

# Also follow CHAT_LOG_PATH from inside the bot, feeding the same pipeline as the relay channels
BOT_TAIL_CHAT_LOG = os.environ.get("BOT_TAIL_CHAT_LOG", "").lower() in ("1", "true", "yes")
