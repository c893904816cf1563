"""
Seed the default tutors into the configured database.

Usage:
    python scripts/seed_tutors.py
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from api.config import SessionLocal, create_db  # noqa: E402
from api.services.tutor_service import TutorService  # noqa: E402


def main() -> int:
    create_db()
    db = SessionLocal()
    try:
        seeded = TutorService(db).seed_tutors()
        tutors = TutorService(db).list_tutors()
    finally:
        db.close()
    print("Database seeded successfully" if seeded else "Database already seeded")
    for t in tutors:
        print(f"  {t.id}  {t.name} ({t.subject})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
