"""Reply formatting for private-message responses.

Keeping formatting here prevents drift between pipeline stages and keeps every
reply consistent: a success/failure glyph, a one-line headline, then the
explanation.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from core.config import ReplyConfig
from core.errors import ErrorKind, Outcome

SUCCESS_GLYPH = "**✔**"
FAILURE_GLYPH = "**✖**"


def escape_md(value: str) -> str:
    """Escape the reddit markdown characters that would break a headline."""

    for ch in r"*[`":
        value = value.replace(ch, f"\\{ch}")
    return value


def format_validation_errors(errors: Sequence[str], docs_url: str) -> str:
    """Render collected validation errors as a markdown bullet list."""

    plural = "s" if len(errors) > 1 else ""
    lines = [f"The following error{plural} occurred while validating your message:", ""]
    lines.extend(f"- {escape_md(error)}" for error in errors)
    lines.extend(["", f"Don't forget to read the [docs]({docs_url})."])
    return "\n".join(lines)


class ReplyFormatter:
    """Turns a pipeline outcome into a (subject, body) pair."""

    def __init__(self, config: ReplyConfig) -> None:
        self._config = config

    def render(self, outcome: Outcome) -> Tuple[str, str]:
        glyph = SUCCESS_GLYPH if outcome.committed else FAILURE_GLYPH
        if outcome.kind is ErrorKind.VALIDATION and outcome.errors:
            detail = format_validation_errors(outcome.errors, self._config.docs_url)
        elif outcome.kind is ErrorKind.PARSE:
            detail = (
                f"{escape_md(outcome.detail)}\n\n"
                f"For more info, read the [API docs]({self._config.docs_url})."
            )
        else:
            detail = escape_md(outcome.detail)

        lines = [f"{glyph} {escape_md(outcome.headline)}", "", detail]
        return outcome.headline, "\n".join(lines)
