from __future__ import annotations

import asyncio

from core.dedup import HandledMessages
from core.inbox import InboxProcessor
from core.models import InboundMessage


class RecordingDispatcher:
    def __init__(self, fail: bool = False) -> None:
        self.handled: list[str] = []
        self._fail = fail

    async def handle(self, message: InboundMessage) -> None:
        self.handled.append(message.id)
        if self._fail:
            raise RuntimeError("crashed mid-pipeline")


class FakeInbox:
    def __init__(self, messages: list[InboundMessage]) -> None:
        self.messages = messages
        self.read: list[str] = []
        self.fail_fetch = False

    async def fetch_unread(self) -> list[InboundMessage]:
        if self.fail_fetch:
            raise RuntimeError("503")
        return list(self.messages)

    async def mark_read(self, message_id: str) -> None:
        self.read.append(message_id)


def _pm(message_id: str, is_reply: bool = False) -> InboundMessage:
    return InboundMessage(id=message_id, author="mod_user", subject="add", body="", is_reply=is_reply)


def test_redelivered_message_is_processed_once() -> None:
    inbox = FakeInbox([_pm("t4_1"), _pm("t4_2")])
    dispatcher = RecordingDispatcher()
    processor = InboxProcessor(inbox, dispatcher, HandledMessages())

    assert asyncio.run(processor.poll()) == 2
    # Reddit keeps returning the messages until mark-read lands.
    assert asyncio.run(processor.poll()) == 0

    assert dispatcher.handled == ["t4_1", "t4_2"]


def test_message_is_marked_before_processing() -> None:
    inbox = FakeInbox([_pm("t4_1")])
    handled = HandledMessages()
    dispatcher = RecordingDispatcher(fail=True)
    processor = InboxProcessor(inbox, dispatcher, handled)

    try:
        asyncio.run(processor.poll())
    except RuntimeError:
        pass
    asyncio.run(processor.poll())

    assert handled.seen("t4_1")
    assert dispatcher.handled == ["t4_1"]


def test_comment_replies_are_marked_read_without_a_reply() -> None:
    inbox = FakeInbox([_pm("t1_9", is_reply=True)])
    dispatcher = RecordingDispatcher()
    processor = InboxProcessor(inbox, dispatcher, HandledMessages())

    asyncio.run(processor.poll())

    assert dispatcher.handled == []
    assert inbox.read == ["t1_9"]


def test_fetch_failure_ends_cycle_quietly() -> None:
    inbox = FakeInbox([_pm("t4_1")])
    inbox.fail_fetch = True
    dispatcher = RecordingDispatcher()

    assert asyncio.run(InboxProcessor(inbox, dispatcher, HandledMessages()).poll()) == 0
    assert dispatcher.handled == []
