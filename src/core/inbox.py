"""Inbox polling: admit each unread message into the command pipeline once."""

from __future__ import annotations

import logging

from core.dedup import HandledMessages
from core.dispatcher import CommandDispatcher
from core.ports import MessagingPort

LOGGER = logging.getLogger(__name__)


class InboxProcessor:
    """Fetches unread messages and routes new ones to the dispatcher."""

    def __init__(
        self,
        messaging: MessagingPort,
        dispatcher: CommandDispatcher,
        handled: HandledMessages,
    ) -> None:
        self._messaging = messaging
        self._dispatcher = dispatcher
        self._handled = handled

    async def poll(self) -> int:
        """Run one inbox cycle and return the number of messages admitted."""

        try:
            messages = await self._messaging.fetch_unread()
        except Exception:
            LOGGER.exception("Can't get unread messages")
            return 0

        admitted = 0
        for message in messages:
            if self._handled.seen(message.id):
                continue
            # Marked before processing: a crash mid-pipeline must not cause a
            # second run for the same message on the next poll.
            self._handled.mark(message.id)
            admitted += 1

            # Comment replies are not commands: they are marked read and get no
            # reply, so the one-reply-per-message rule covers private messages only.
            if message.is_reply:
                LOGGER.debug("Ignored a comment reply from %s", message.author)
                try:
                    await self._messaging.mark_read(message.id)
                except Exception:
                    LOGGER.exception("Failed to mark comment reply %s as read", message.id)
                continue

            await self._dispatcher.handle(message)
        return admitted
