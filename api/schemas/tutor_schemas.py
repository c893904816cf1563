"""
Tutor schemas.
"""

from api.schemas.base import CamelModel


class TutorResponse(CamelModel):
    id: str
    name: str
    subject: str
    description: str


class SeedResponse(CamelModel):
    success: bool
    message: str
