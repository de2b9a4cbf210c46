from __future__ import annotations

import asyncio
from typing import Optional

from adapters.reply_formatting import FAILURE_GLYPH, SUCCESS_GLYPH, ReplyFormatter
from core.config import ReplyConfig
from core.dispatcher import CommandDispatcher
from core.errors import ErrorKind
from core.models import InboundMessage, Moderator, ResolvedChannel
from core.registry import ChannelRegistry

from fakes import FakeMessaging, FakeStorage, FakeVideo, make_channel

RESOLVED = ResolvedChannel(
    channel_id="UCabc1234567890123456789",
    display_name="SomeCreator",
    feed_cursor="UUabc",
)
ADD_BODY = "subreddit: videos\nchannel: SomeCreator\n"


def _message(body: str = ADD_BODY, subject: str = "add", author: str = "mod_user") -> InboundMessage:
    return InboundMessage(id="t4_abc", author=author, subject=subject, body=body)


def _setup(
    moderators: Optional[list[Moderator]] = None,
    existing: Optional[list] = None,
):
    registry = ChannelRegistry(FakeStorage(existing or []))
    messaging = FakeMessaging(
        moderators={"videos": moderators if moderators is not None else [Moderator("Mod_User", ("all",))]}
    )
    video = FakeVideo(channels={"SomeCreator": RESOLVED, RESOLVED.channel_id: RESOLVED})
    dispatcher = CommandDispatcher(
        registry,
        messaging,
        video,
        ReplyFormatter(ReplyConfig(docs_url="https://docs.example")).render,
        clock=lambda: 1_700_000_000,
    )
    return dispatcher, registry, messaging, video


def _assert_single_response(messaging: FakeMessaging) -> None:
    assert len(messaging.replies) == 1
    assert messaging.read == ["t4_abc"]


def test_add_from_moderator_commits_channel() -> None:
    dispatcher, registry, messaging, video = _setup()

    outcome = asyncio.run(dispatcher.handle(_message()))

    assert outcome.committed
    assert len(registry) == 1
    channel = registry.get(0)
    assert channel.channel_id == RESOLVED.channel_id
    assert channel.destination == "videos"
    assert channel.owner == "mod_user"
    assert channel.registered_at == 1_700_000_000
    assert channel.feed_cursor == "UUabc"
    assert channel.seen_item_ids == ()
    assert video.lookups == [("SomeCreator", False)]
    _assert_single_response(messaging)
    to, subject, body = messaging.replies[0]
    assert to == "mod_user"
    assert subject == "Successfully added SomeCreator"
    assert body.startswith(SUCCESS_GLYPH)


def test_non_moderator_is_rejected() -> None:
    dispatcher, registry, messaging, _ = _setup(moderators=[Moderator("someone_else", ("all",))])

    outcome = asyncio.run(dispatcher.handle(_message()))

    assert outcome.kind is ErrorKind.AUTHORIZATION
    assert len(registry) == 0
    _assert_single_response(messaging)
    assert messaging.replies[0][1] == "Mod check failed"
    assert messaging.replies[0][2].startswith(FAILURE_GLYPH)


def test_moderator_without_full_permissions_is_rejected() -> None:
    dispatcher, registry, messaging, _ = _setup(moderators=[Moderator("mod_user", ("posts", "wiki"))])

    outcome = asyncio.run(dispatcher.handle(_message()))

    assert outcome.kind is ErrorKind.AUTHORIZATION
    assert len(registry) == 0


def test_moderator_lookup_failure_is_an_authorization_error() -> None:
    dispatcher, registry, messaging, _ = _setup()
    messaging.fail_moderators = True

    outcome = asyncio.run(dispatcher.handle(_message()))

    assert outcome.kind is ErrorKind.AUTHORIZATION
    assert len(registry) == 0
    _assert_single_response(messaging)


def test_unresolvable_channel_is_rejected() -> None:
    dispatcher, registry, messaging, _ = _setup()

    outcome = asyncio.run(dispatcher.handle(_message("subreddit: videos\nchannel: Nobody\n")))

    assert outcome.kind is ErrorKind.RESOLUTION
    assert len(registry) == 0
    _assert_single_response(messaging)


def test_duplicate_pair_is_rejected_case_insensitively() -> None:
    existing = make_channel(channel_id=RESOLVED.channel_id, destination="Videos")
    dispatcher, registry, messaging, _ = _setup(existing=[existing])

    outcome = asyncio.run(dispatcher.handle(_message()))

    assert outcome.kind is ErrorKind.DUPLICATE
    assert len(registry) == 1
    _assert_single_response(messaging)


def test_same_channel_into_another_subreddit_is_allowed() -> None:
    existing = make_channel(channel_id=RESOLVED.channel_id, destination="music")
    dispatcher, registry, messaging, _ = _setup(existing=[existing])

    outcome = asyncio.run(dispatcher.handle(_message()))

    assert outcome.committed
    assert len(registry) == 2


def test_validation_errors_are_listed_in_one_reply() -> None:
    dispatcher, registry, messaging, video = _setup()

    outcome = asyncio.run(dispatcher.handle(_message("subreddit: bad name!\nchannel_id: nope\n")))

    assert outcome.kind is ErrorKind.VALIDATION
    assert len(outcome.errors) == 2
    assert video.lookups == []
    _assert_single_response(messaging)
    body = messaging.replies[0][2]
    assert "The following errors occurred" in body
    for error in outcome.errors:
        assert error in body
    assert "https://docs.example" in body


def test_malformed_body_is_a_parse_error() -> None:
    dispatcher, registry, messaging, _ = _setup()

    outcome = asyncio.run(dispatcher.handle(_message("{{not yaml")))

    assert outcome.kind is ErrorKind.PARSE
    _assert_single_response(messaging)
    assert messaging.replies[0][1] == "Unable to parse your message"


def test_unsupported_subjects_get_help_reply() -> None:
    for subject in ("list", "remove", "hello"):
        dispatcher, registry, messaging, _ = _setup()

        outcome = asyncio.run(dispatcher.handle(_message(subject=subject)))

        assert not outcome.committed
        assert outcome.headline == "Invalid subject"
        assert len(registry) == 0
        _assert_single_response(messaging)
        assert "'add', 'list', 'remove'" in messaging.replies[0][2]


def test_unexpected_error_becomes_internal_error_reply() -> None:
    dispatcher, registry, messaging, _ = _setup()

    def broken_find(channel_id: str, destination: str):
        raise RuntimeError("disk on fire")

    registry.find = broken_find

    outcome = asyncio.run(dispatcher.handle(_message()))

    assert outcome.kind is ErrorKind.INTERNAL
    _assert_single_response(messaging)
    assert messaging.replies[0][1] == "Internal error"


def test_failed_reply_still_marks_read() -> None:
    dispatcher, _, messaging, _ = _setup()
    messaging.fail_reply = True

    asyncio.run(dispatcher.handle(_message()))

    _assert_single_response(messaging)
