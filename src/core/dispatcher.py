"""Command dispatcher and authorization pipeline.

The pipeline for ``add`` runs in a strict order:
1) Parse + validate the payload
2) Authorize the author against the subreddit's moderator list
3) Resolve the channel on the video platform
4) Reject duplicates of (channel_id, subreddit)
5) Commit a new registry row

Every terminal state produces exactly one reply and one mark-read, even when
an intermediate step raised something unexpected.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Tuple

from core.commands import SUPPORTED_SUBJECTS, AddPayload, Command, CommandKind, parse_command
from core.errors import (
    AuthorizationError,
    CommandError,
    DuplicateError,
    ErrorKind,
    InternalError,
    Outcome,
    ResolutionError,
    ValidationError,
)
from core.models import Channel, InboundMessage, ResolvedChannel
from core.ports import MessagingPort, VideoPort
from core.registry import ChannelRegistry

LOGGER = logging.getLogger(__name__)

FULL_PERMISSION = "all"

# Reply headlines per failure kind; the detail comes from the error itself.
HEADLINES = {
    ErrorKind.PARSE: "Unable to parse your message",
    ErrorKind.VALIDATION: "Unable to add channel",
    ErrorKind.AUTHORIZATION: "Mod check failed",
    ErrorKind.RESOLUTION: "The check if your channel is valid has failed",
    ErrorKind.DUPLICATE: "This channel is already added to this subreddit",
    ErrorKind.INTERNAL: "Internal error",
}

INTERNAL_DETAIL = (
    "Couldn't process your message because of an internal error. "
    "Please contact the administrator of this bot."
)

ReplyRenderer = Callable[[Outcome], Tuple[str, str]]


class CommandDispatcher:
    """Turns one inbound message into exactly one reply."""

    def __init__(
        self,
        registry: ChannelRegistry,
        messaging: MessagingPort,
        video: VideoPort,
        render_reply: ReplyRenderer,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._registry = registry
        self._messaging = messaging
        self._video = video
        self._render_reply = render_reply
        self._clock = clock

    async def handle(self, message: InboundMessage) -> Outcome:
        """Run the pipeline for one message and respond to its author."""

        LOGGER.info("Got a message from '%s' with the subject '%s'", message.author, message.subject)
        try:
            outcome = await self._run(message)
        except CommandError as exc:
            LOGGER.warning("Rejected message %s (%s): %s", message.id, exc.kind.value, exc.message)
            outcome = _rejected(exc)
        except Exception:
            LOGGER.exception("Error while processing message %s", message.id)
            outcome = _rejected(InternalError(INTERNAL_DETAIL))

        await self._respond(message, outcome)
        return outcome

    async def _run(self, message: InboundMessage) -> Outcome:
        command = parse_command(message)
        if command.kind is CommandKind.ADD:
            return await self._add(command)
        return _unsupported(command)

    async def _add(self, command: Command) -> Outcome:
        payload = command.payload
        if payload is None:
            raise InternalError(INTERNAL_DETAIL)
        author = command.message.author

        await self._authorize(payload.subreddit, author)
        resolved = await self._resolve(payload)

        if self._registry.find(resolved.channel_id, payload.subreddit) is not None:
            raise DuplicateError("This channel+subreddit combination is already added.")

        channel = Channel(
            channel_id=resolved.channel_id,
            display_name=resolved.display_name,
            destination=payload.subreddit,
            owner=author,
            registered_at=int(self._clock()),
            feed_cursor=resolved.feed_cursor,
        )
        index = self._registry.append(channel)
        LOGGER.info(
            "Registered channel '%s' for /r/%s at index %s", channel.display_name, channel.destination, index
        )
        return Outcome(
            committed=True,
            headline=f"Successfully added {channel.display_name}",
            detail=f"{channel.display_name} was added and will now be monitored for new uploads.",
            channel=channel,
        )

    async def _authorize(self, subreddit: str, author: str) -> None:
        LOGGER.debug("Checking if %s moderates /r/%s", author, subreddit)
        try:
            moderators = await self._messaging.list_moderators(subreddit)
        except Exception as exc:
            raise AuthorizationError(f"Could not fetch the moderators of /r/{subreddit}: {exc}") from exc

        wanted = author.lower()
        for moderator in moderators:
            if moderator.name.lower() == wanted and FULL_PERMISSION in moderator.permissions:
                return
        raise AuthorizationError("You're not a moderator of this subreddit (with full permissions)")

    async def _resolve(self, payload: AddPayload) -> ResolvedChannel:
        identifier, by_id = payload.lookup()
        LOGGER.debug("Checking if channel %s (by_id=%s) is valid", identifier, by_id)
        try:
            resolved = await self._video.resolve_channel(identifier, by_id)
        except Exception as exc:
            raise ResolutionError(f"The channel lookup failed: {exc}") from exc
        if resolved is None or not resolved.channel_id or not resolved.feed_cursor:
            raise ResolutionError(
                "Could not get channel details. Check if your uploads are accessible to everyone "
                "and if you didn't misspell the channel (id)."
            )
        return resolved

    async def _respond(self, message: InboundMessage, outcome: Outcome) -> None:
        try:
            subject, body = self._render_reply(outcome)
        except Exception:
            LOGGER.exception("Failed to render reply for message %s", message.id)
            subject, body = outcome.headline, outcome.detail
        LOGGER.info("Responded with '%s'", outcome.headline)
        try:
            await self._messaging.reply(message.author, subject, body)
        except Exception:
            LOGGER.exception("Failed to reply to %s", message.author)
        try:
            await self._messaging.mark_read(message.id)
        except Exception:
            LOGGER.exception("Failed to mark message %s as read", message.id)


def _rejected(error: CommandError) -> Outcome:
    errors = tuple(error.messages) if isinstance(error, ValidationError) else ()
    return Outcome(
        committed=False,
        headline=HEADLINES[error.kind],
        detail=error.message,
        kind=error.kind,
        errors=errors,
    )


def _unsupported(command: Command) -> Outcome:
    # list/remove are anticipated subjects without behaviour yet.
    subjects = ", ".join(f"'{kind.value}'" for kind in SUPPORTED_SUBJECTS)
    return Outcome(
        committed=False,
        headline="Invalid subject",
        detail=f"Subject needs to be one of the following: {subjects}. Only 'add' is currently supported.",
    )
