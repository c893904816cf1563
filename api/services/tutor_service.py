"""
Tutor service: read access to tutor personas and idempotent seeding of the defaults.
"""

from uuid import uuid4

from sqlalchemy.orm import Session as DBSession

from api.errors import NotFoundError
from api.models.models import Tutor
from api.utils.common import storage_guard
from api.utils.logger import configure_logging

logger = configure_logging()

DEFAULT_TUTORS = [
    {
        "name": "Professor Einstein",
        "subject": "Physics",
        "description": (
            "Expert in theoretical physics with a focus on relativity and quantum mechanics. "
            "I can help explain complex physics concepts in simple terms."
        ),
    },
    {
        "name": "Ms. Ada",
        "subject": "Computer Science",
        "description": (
            "Specialized in programming, algorithms, and computer science fundamentals. "
            "I can help with coding problems and explain CS concepts clearly."
        ),
    },
    {
        "name": "Dr. Newton",
        "subject": "Mathematics",
        "description": (
            "Mathematics expert with knowledge in calculus, algebra, and statistics. "
            "I can help solve math problems step-by-step and explain mathematical concepts."
        ),
    },
    {
        "name": "Professor Curie",
        "subject": "Chemistry",
        "description": (
            "Chemistry specialist with expertise in organic chemistry, biochemistry, and chemical reactions. "
            "I can help with chemical equations and concepts."
        ),
    },
    {
        "name": "Mr. Shakespeare",
        "subject": "Literature",
        "description": (
            "Literature expert with knowledge of classic and modern works. "
            "I can help with literary analysis, writing essays, and understanding complex texts."
        ),
    },
]


class TutorService:
    """Tutors are read-only to the chat subsystem; only seeding writes them."""

    def __init__(self, db: DBSession):
        self.db = db

    def get_tutor(self, tutor_id: str) -> Tutor:
        with storage_guard(self.db, "fetch tutor"):
            tutor = self.db.get(Tutor, tutor_id)
        if tutor is None:
            raise NotFoundError("Tutor not found")
        return tutor

    def list_tutors(self) -> list[Tutor]:
        with storage_guard(self.db, "fetch tutors"):
            return self.db.query(Tutor).order_by(Tutor.name.asc()).all()

    def seed_tutors(self, tutors: list[dict] | None = None) -> bool:
        """Insert the default tutors when the table is empty. Returns True when rows were written."""
        with storage_guard(self.db, "seed database"):
            if self.db.query(Tutor).count() > 0:
                return False
            for t in tutors or DEFAULT_TUTORS:
                self.db.add(Tutor(id=str(uuid4()), **t))
            self.db.commit()
        logger.info("tutors seeded count=%s", len(tutors or DEFAULT_TUTORS))
        return True
