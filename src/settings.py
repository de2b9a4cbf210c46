"""Static configuration for channelbot.

All user-editable settings (polling, monitor, replies, logging) live in a
single JSON file for quick edits without touching Python. Credentials stay in
the environment (.env).
"""

import json
import os

from dotenv import load_dotenv

from core.config import DEFAULT_DOCS_URL, DEFAULT_LINK_PREFIX

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Where to store the SQLite database with registered channels.
DB_PATH = os.getenv("DB_PATH") or os.path.join(PROJECT_ROOT, "channelbot.db")

CONFIG_PATH = os.getenv("CHANNELBOT_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Task intervals in seconds. Each task finishes a cycle before sleeping again.
_polling = _CONFIG.get("polling", {})
INBOX_INTERVAL = float(_polling.get("inbox_interval", 30))
FEED_INTERVAL = float(_polling.get("feed_interval", 300))

# Announcement link = LINK_PREFIX + video id.
# SEEN_WINDOW caps remembered video ids per channel (0 = unbounded). It must
# cover a full PAGE_SIZE page or old uploads could be announced again.
_monitor = _CONFIG.get("monitor", {})
LINK_PREFIX = _monitor.get("link_prefix", DEFAULT_LINK_PREFIX)
SEEN_WINDOW = int(_monitor.get("seen_window", 200))
PAGE_SIZE = int(_monitor.get("page_size", 50))
if 0 < SEEN_WINDOW < PAGE_SIZE:
    raise ValueError(f"monitor.seen_window ({SEEN_WINDOW}) must be 0 or at least monitor.page_size ({PAGE_SIZE})")

_replies = _CONFIG.get("replies", {})
DOCS_URL = _replies.get("docs_url", DEFAULT_DOCS_URL)

_reddit = _CONFIG.get("reddit", {})
USER_AGENT = _reddit.get("user_agent", "ChannelBot 2.0")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
