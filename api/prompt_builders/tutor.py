"""Tutor persona system prompt and the conversation prompt fed to the completion provider."""

from __future__ import annotations

from typing import Iterable

from api.models.models import Message, Tutor
from infra.llm.base import PromptMessage

TEMPLATE_TUTOR_SYSTEM = (
    "You are {name}, a tutor specializing in {subject}. {description} "
    "Be helpful, encouraging, and educational in your responses. "
    "Explain concepts clearly and provide examples when appropriate. "
    "Keep your responses concise and focused on the student's questions."
)


def build_tutor_system_prompt(*, name: str, subject: str, description: str) -> str:
    """Persona sentence for the system turn. An empty description leaves no double space."""
    filled = TEMPLATE_TUTOR_SYSTEM.format(name=name, subject=subject, description=(description or "").strip())
    return " ".join(filled.split())


def build_conversation_prompt(tutor: Tutor, history: Iterable[Message]) -> list[PromptMessage]:
    """
    Leading system turn for the tutor persona, then the stored history in order.
    Any role other than "user" is sent as "assistant".
    """
    prompt = [
        PromptMessage(
            role="system",
            content=build_tutor_system_prompt(
                name=tutor.name,
                subject=tutor.subject,
                description=tutor.description,
            ),
        )
    ]
    for m in history:
        prompt.append(PromptMessage(role="user" if m.role == "user" else "assistant", content=m.content))
    return prompt
