"""Chat title generation prompt and cleanup of the model's answer."""

from __future__ import annotations

import re

from infra.llm.base import PromptMessage

MAX_TITLE_WORDS = 6

TITLE_INSTRUCTION = (
    "Generate a short, descriptive title of at most {max_words} words for a tutoring conversation "
    "that starts with the student message below. Reply with the title only: no quotes, no punctuation "
    "at the end, no explanation."
)

_THINK_BLOCK = re.compile(r"<think>.*?(</think>|$)", re.DOTALL | re.IGNORECASE)
_WRAPPING = "\"'`*#“”‘’ "
_TRAILING = ".,;:!?" + _WRAPPING


def build_title_prompt(first_user_message: str) -> list[PromptMessage]:
    return [
        PromptMessage(role="system", content=TITLE_INSTRUCTION.format(max_words=MAX_TITLE_WORDS)),
        PromptMessage(role="user", content=first_user_message),
    ]


def clean_title(raw: str | None, max_words: int = MAX_TITLE_WORDS) -> str:
    """
    Reduce a model answer to a bare title: reasoning blocks removed, first non-empty line,
    "Title:" prefix and wrapping quotes dropped, cut to max_words. Returns "" when nothing is left.
    """
    text = _THINK_BLOCK.sub("", raw or "")
    line = next((ln.strip() for ln in text.splitlines() if ln.strip()), "")
    line = re.sub(r"^title\s*:\s*", "", line, flags=re.IGNORECASE)
    words = line.strip(_WRAPPING).split()[:max_words]
    return " ".join(words).strip(_TRAILING)
