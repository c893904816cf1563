"""
API data models. Single import surface for DB entities.

DB entities (api.models.models):
- Tutor, Chat, Message
"""

from api.models.models import Tutor, Chat, Message

__all__ = [
    "Tutor",
    "Chat",
    "Message",
]
