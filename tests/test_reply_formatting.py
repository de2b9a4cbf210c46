from __future__ import annotations

from adapters.reply_formatting import FAILURE_GLYPH, SUCCESS_GLYPH, ReplyFormatter, format_validation_errors
from core.config import ReplyConfig
from core.errors import ErrorKind, Outcome


def test_success_reply_has_glyph_and_headline() -> None:
    formatter = ReplyFormatter(ReplyConfig())
    subject, body = formatter.render(
        Outcome(committed=True, headline="Successfully added Creator", detail="Creator was added.")
    )

    assert subject == "Successfully added Creator"
    first_line, _, rest = body.partition("\n")
    assert first_line == f"{SUCCESS_GLYPH} Successfully added Creator"
    assert "Creator was added." in rest


def test_failure_reply_escapes_markdown() -> None:
    formatter = ReplyFormatter(ReplyConfig())
    _, body = formatter.render(
        Outcome(committed=False, headline="Mod check failed", detail="not a *mod*", kind=ErrorKind.AUTHORIZATION)
    )

    assert body.startswith(FAILURE_GLYPH)
    assert "not a \\*mod\\*" in body


def test_single_validation_error_uses_singular() -> None:
    text = format_validation_errors(["subreddit is required"], "https://docs.example")

    assert text.startswith("The following error occurred")
    assert "- subreddit is required" in text
    assert "[docs](https://docs.example)" in text
