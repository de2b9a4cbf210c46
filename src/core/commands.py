"""Command parsing: subject selects the variant, body carries the payload."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

import yaml

from core.errors import ParseError, ValidationError
from core.models import InboundMessage
from core.validation import ADD_CROSS_RULES, ADD_RULES, check_payload


class CommandKind(str, Enum):
    ADD = "add"
    LIST = "list"
    REMOVE = "remove"
    UNKNOWN = "unknown"


SUPPORTED_SUBJECTS = (CommandKind.ADD, CommandKind.LIST, CommandKind.REMOVE)


@dataclass(frozen=True)
class AddPayload:
    """Validated payload of an ``add`` command."""

    subreddit: str
    channel_id: Optional[str] = None
    channel: Optional[str] = None

    def lookup(self) -> Tuple[str, bool]:
        """Return (identifier, by_id); channel_id wins when both are given."""

        if self.channel_id:
            return self.channel_id, True
        return self.channel or "", False


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    message: InboundMessage
    payload: Optional[AddPayload] = None


def command_kind(subject: str) -> CommandKind:
    try:
        return CommandKind((subject or "").strip().lower())
    except ValueError:
        return CommandKind.UNKNOWN


def parse_body(body: str) -> Mapping[str, Any]:
    """Deserialize a message body into a mapping or raise ParseError."""

    try:
        document = yaml.safe_load(body or "")
    except yaml.YAMLError as exc:
        raise ParseError(f"Your message contains invalid YAML: {exc}") from exc
    if not isinstance(document, dict) or not document:
        raise ParseError("Your message must be a YAML mapping of fields")
    return document


def build_add_payload(document: Mapping[str, Any]) -> AddPayload:
    """Validate a parsed body against the add rule table."""

    errors = check_payload(document, ADD_RULES, ADD_CROSS_RULES)
    if errors:
        raise ValidationError(errors)
    return AddPayload(
        subreddit=document["subreddit"],
        channel_id=document.get("channel_id") or None,
        channel=document.get("channel") or None,
    )


def parse_command(message: InboundMessage) -> Command:
    """Parse one inbound message.

    Only ``add`` reads the body; list/remove are recognized but carry no
    payload. Raises ParseError or ValidationError for a bad ``add``.
    """

    kind = command_kind(message.subject)
    if kind is not CommandKind.ADD:
        return Command(kind=kind, message=message)
    payload = build_add_payload(parse_body(message.body))
    return Command(kind=kind, message=message, payload=payload)
