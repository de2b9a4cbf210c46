"""Command pipeline error taxonomy and outcome type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from core.models import Channel


class ErrorKind(str, Enum):
    PARSE = "parse"
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    RESOLUTION = "resolution"
    DUPLICATE = "duplicate"
    INTERNAL = "internal"


class CommandError(Exception):
    """Base class for every failure recovered at the dispatcher boundary."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseError(CommandError):
    kind = ErrorKind.PARSE


class ValidationError(CommandError):
    kind = ErrorKind.VALIDATION

    def __init__(self, messages: Sequence[str]) -> None:
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages))


class AuthorizationError(CommandError):
    kind = ErrorKind.AUTHORIZATION


class ResolutionError(CommandError):
    kind = ErrorKind.RESOLUTION


class DuplicateError(CommandError):
    kind = ErrorKind.DUPLICATE


class InternalError(CommandError):
    kind = ErrorKind.INTERNAL


@dataclass(frozen=True)
class Outcome:
    """Terminal state of one pipeline run.

    ``kind`` is None for a committed command. ``headline`` and ``detail`` are
    the reply contents sent to the author; ``errors`` lists validation
    violations.
    """

    committed: bool
    headline: str
    detail: str
    kind: Optional[ErrorKind] = None
    errors: Tuple[str, ...] = ()
    channel: Optional[Channel] = None
