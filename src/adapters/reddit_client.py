"""Reddit messaging adapter.

Talks to the Reddit OAuth API with a "script" app (password grant) and
satisfies the core MessagingPort. HTTP calls are blocking, so each one runs in
a worker thread to keep the event loop free for the other task.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, List, Mapping, Optional

from core.models import InboundMessage, Moderator

LOGGER = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
API_BASE = "https://oauth.reddit.com"
# Reddit rejects message subjects longer than this.
MAX_SUBJECT_CHARS = 100


class RedditAPIError(RuntimeError):
    """Raised for HTTP failures or API-level errors in a JSON response."""


def message_from_listing(child: Mapping[str, Any]) -> InboundMessage:
    """Map one ``/message/unread`` listing child to an InboundMessage."""

    data = child.get("data", {})
    return InboundMessage(
        id=str(data.get("name", "")),
        author=str(data.get("author") or ""),
        subject=str(data.get("subject") or ""),
        body=str(data.get("body") or ""),
        is_reply=bool(data.get("was_comment", False)),
    )


def moderators_from_listing(payload: Mapping[str, Any]) -> List[Moderator]:
    """Map an ``/about/moderators`` response to Moderator records."""

    children = payload.get("data", {}).get("children", [])
    return [
        Moderator(name=str(child.get("name", "")), permissions=tuple(child.get("mod_permissions") or ()))
        for child in children
    ]


def _raise_for_json_errors(payload: Any) -> None:
    errors = payload.get("json", {}).get("errors") if isinstance(payload, dict) else None
    if errors:
        raise RedditAPIError(f"Reddit API error: {errors}")


class RedditMessenger:
    """MessagingPort implementation backed by the Reddit API."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
        user_agent: str,
        timeout: float = 30.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._username = username
        self._password = password
        self._user_agent = user_agent
        self._timeout = timeout
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _open(self, request: urllib.request.Request) -> Any:
        request.add_header("User-Agent", self._user_agent)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RedditAPIError(f"Reddit API error {e.code}: {body}") from e
        return json.loads(raw) if raw else {}

    def _access_token(self) -> str:
        # Refresh a minute early so a request never races the expiry.
        if self._token and time.monotonic() < self._token_expires_at - 60:
            return self._token

        data = urllib.parse.urlencode(
            {"grant_type": "password", "username": self._username, "password": self._password}
        ).encode("utf-8")
        request = urllib.request.Request(TOKEN_URL, data=data, method="POST")
        credentials = base64.b64encode(f"{self._client_id}:{self._client_secret}".encode("utf-8"))
        request.add_header("Authorization", f"Basic {credentials.decode('ascii')}")
        payload = self._open(request)
        token = payload.get("access_token")
        if not token:
            raise RedditAPIError(f"Reddit login failed: {payload.get('error', 'no token returned')}")
        self._token = token
        self._token_expires_at = time.monotonic() + float(payload.get("expires_in", 3600))
        LOGGER.info("Obtained Reddit access token for %s", self._username)
        return token

    def _call(self, method: str, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{API_BASE}{path}"
        data = None
        encoded = urllib.parse.urlencode(params or {})
        if method == "GET":
            if encoded:
                url = f"{url}?{encoded}"
        else:
            data = encoded.encode("utf-8")
        request = urllib.request.Request(url, data=data, method=method)
        request.add_header("Authorization", f"bearer {self._access_token()}")
        payload = self._open(request)
        _raise_for_json_errors(payload)
        return payload

    async def fetch_unread(self) -> List[InboundMessage]:
        payload = await asyncio.to_thread(self._call, "GET", "/message/unread", {"limit": 100, "raw_json": 1})
        children = payload.get("data", {}).get("children", [])
        return [message_from_listing(child) for child in children]

    async def reply(self, to: str, subject: str, body: str) -> None:
        await asyncio.to_thread(
            self._call,
            "POST",
            "/api/compose",
            {"api_type": "json", "to": to, "subject": subject[:MAX_SUBJECT_CHARS], "text": body},
        )

    async def mark_read(self, message_id: str) -> None:
        await asyncio.to_thread(self._call, "POST", "/api/read_message", {"id": message_id})

    async def publish(self, destination: str, title: str, url: str) -> None:
        await asyncio.to_thread(
            self._call,
            "POST",
            "/api/submit",
            {
                "api_type": "json",
                "sr": destination,
                "kind": "link",
                "title": title,
                "url": url,
                "resubmit": "true",
            },
        )

    async def list_moderators(self, destination: str) -> List[Moderator]:
        path = f"/r/{urllib.parse.quote(destination)}/about/moderators"
        payload = await asyncio.to_thread(self._call, "GET", path, {"raw_json": 1})
        return moderators_from_listing(payload)
