"""Platform client factories for channelbot.

Credentials come from the environment via python-dotenv to keep secrets out
of the repo.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

import settings
from adapters.reddit_client import RedditMessenger
from adapters.youtube_client import YouTubeVideoSource

REDDIT_ENV = ("REDDIT_CLIENT_ID", "REDDIT_CLIENT_SECRET", "REDDIT_USERNAME", "REDDIT_PASSWORD")


def build_reddit_client() -> RedditMessenger:
    """Create the Reddit messaging adapter from environment variables."""

    load_dotenv()

    values = {name: os.getenv(name) for name in REDDIT_ENV}
    missing = [name for name, value in values.items() if not value]
    # Fail fast on missing credentials rather than on the first API call.
    if missing:
        raise RuntimeError(f"Missing {', '.join(missing)} in environment")

    logging.getLogger(__name__).info("Initializing Reddit client for %s", values["REDDIT_USERNAME"])

    return RedditMessenger(
        client_id=values["REDDIT_CLIENT_ID"],
        client_secret=values["REDDIT_CLIENT_SECRET"],
        username=values["REDDIT_USERNAME"],
        password=values["REDDIT_PASSWORD"],
        user_agent=settings.USER_AGENT,
    )


def build_youtube_client() -> YouTubeVideoSource:
    """Create the YouTube adapter from YOUTUBE_API_KEY."""

    load_dotenv()

    api_key = os.getenv("YOUTUBE_API_KEY")
    if not api_key:
        raise RuntimeError("Missing YOUTUBE_API_KEY in environment")

    logging.getLogger(__name__).info("Initializing YouTube client")

    return YouTubeVideoSource(api_key, page_size=settings.PAGE_SIZE)
