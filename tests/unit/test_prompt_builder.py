"""Unit tests for prompt templates and title cleanup (no LLM)."""
import pytest

from api.models.models import Message, Tutor
from api.prompt_builders import (
    MAX_TITLE_WORDS,
    build_conversation_prompt,
    build_title_prompt,
    build_tutor_system_prompt,
    clean_title,
)


@pytest.mark.unit
class TestTutorPrompt:
    def test_persona_sentence(self):
        prompt = build_tutor_system_prompt(
            name="Ms. Ada",
            subject="Computer Science",
            description="Specialized in algorithms.",
        )
        assert prompt.startswith(
            "You are Ms. Ada, a tutor specializing in Computer Science. Specialized in algorithms. Be helpful"
        )
        assert "encouraging, and educational" in prompt

    def test_empty_description_leaves_no_gap(self):
        prompt = build_tutor_system_prompt(name="X", subject="Y", description="")
        assert "  " not in prompt

    def test_description_is_inserted_verbatim(self):
        prompt = build_tutor_system_prompt(
            name="Ms. Ada",
            subject="Computer Science",
            description="Sets like {1, 2}\n  and maps {k: v}.",
        )
        assert "Computer Science. Sets like {1, 2} and maps {k: v}. Be helpful" in prompt

    def test_history_roles(self):
        tutor = Tutor(id="t", name="Dr. Newton", subject="Mathematics", description="Calculus.")
        history = [
            Message(id="1", chat_id="c", role="user", content="q", seq=1),
            Message(id="2", chat_id="c", role="assistant", content="a", seq=2),
        ]
        prompt = build_conversation_prompt(tutor, history)
        assert [m.role for m in prompt] == ["system", "user", "assistant"]
        assert prompt[-1].content == "a"


@pytest.mark.unit
class TestTitle:
    def test_title_prompt_carries_first_message(self):
        prompt = build_title_prompt("What is a derivative?")
        assert prompt[0].role == "system"
        assert str(MAX_TITLE_WORDS) in prompt[0].content
        assert prompt[1].content == "What is a derivative?"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ('"Understanding Derivatives"', "Understanding Derivatives"),
            ("Title: Limits and Continuity.", "Limits and Continuity"),
            ("one two three four five six seven eight", "one two three four five six"),
            ("<think>the user asks about calculus</think>\nIntro to Derivatives", "Intro to Derivatives"),
            ("\n\n  Rates of Change!  \nextra line", "Rates of Change"),
            ("", ""),
            (None, ""),
            ("<think>never closed", ""),
        ],
    )
    def test_clean_title(self, raw, expected):
        assert clean_title(raw) == expected
