"""Declarative payload validation (core domain).

A rule table maps each field to an ordered list of constraints. Every
violation is collected so the author sees all problems in one reply.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Callable, Iterable, List, Mapping, Tuple

MISSING = object()


@dataclass(frozen=True)
class Constraint:
    """A single check; ``message`` is formatted with ``field``."""

    check: Callable[[Any], bool]
    message: str
    # A failed type check makes the remaining checks of the field meaningless.
    stops_field: bool = False


@dataclass(frozen=True)
class FieldRule:
    field: str
    constraints: Tuple[Constraint, ...]
    required: bool = False


@dataclass(frozen=True)
class CrossRule:
    """Rule over the whole payload; returns an error message or None."""

    check: Callable[[Mapping[str, Any]], "str | None"]


def is_string() -> Constraint:
    return Constraint(lambda value: isinstance(value, str), "{field} must be a string", stops_field=True)


def min_length(size: int) -> Constraint:
    return Constraint(
        lambda value: len(value) >= size,
        "{field} must be at least %d character%s long" % (size, "" if size == 1 else "s"),
    )


def max_length(size: int) -> Constraint:
    return Constraint(
        lambda value: len(value) <= size,
        "{field} must be at most %d characters long" % size,
    )


def charset(pattern: str, description: str) -> Constraint:
    compiled = re.compile(rf"[{pattern}]+")
    return Constraint(
        lambda value: compiled.fullmatch(value) is not None,
        "{field} must be %s" % description,
    )


def _one_of_channel_fields(payload: Mapping[str, Any]) -> "str | None":
    if _value(payload, "channel") is MISSING and _value(payload, "channel_id") is MISSING:
        return "Please provide either 'channel' or 'channel_id'"
    return None


ADD_RULES: Tuple[FieldRule, ...] = (
    FieldRule(
        "subreddit",
        (is_string(), charset("A-Za-z0-9_", "alphanumeric (underscores allowed)")),
        required=True,
    ),
    FieldRule(
        "channel_id",
        (
            is_string(),
            min_length(24),
            max_length(24),
            charset("A-Za-z0-9_-", "alphanumeric (underscores and dashes allowed)"),
        ),
    ),
    FieldRule("channel", (is_string(), charset("A-Za-z0-9", "alphanumeric"))),
)

ADD_CROSS_RULES: Tuple[CrossRule, ...] = (CrossRule(_one_of_channel_fields),)


def _value(payload: Mapping[str, Any], field: str) -> Any:
    value = payload.get(field, MISSING)
    # YAML "field:" without a value yields None; treat it as absent.
    return MISSING if value is None else value


def check_payload(
    payload: Mapping[str, Any],
    rules: Iterable[FieldRule],
    cross_rules: Iterable[CrossRule] = (),
) -> List[str]:
    """Return every violation in rule-table order (empty list when valid)."""

    errors: List[str] = []
    for rule in rules:
        value = _value(payload, rule.field)
        if value is MISSING:
            if rule.required:
                errors.append(f"{rule.field} is required")
            continue
        for constraint in rule.constraints:
            if constraint.check(value):
                continue
            errors.append(constraint.message.format(field=rule.field))
            if constraint.stops_field:
                break

    for cross_rule in cross_rules:
        message = cross_rule.check(payload)
        if message:
            errors.append(message)
    return errors
