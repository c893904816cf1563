"""
App prompt builders. All prompt content and templates live here; the relay
receives built prompts.
"""

from api.prompt_builders.tutor import build_tutor_system_prompt, build_conversation_prompt
from api.prompt_builders.title import build_title_prompt, clean_title, MAX_TITLE_WORDS

__all__ = [
    "build_tutor_system_prompt",
    "build_conversation_prompt",
    "build_title_prompt",
    "clean_title",
    "MAX_TITLE_WORDS",
]
