"""
Tutor routes: read-only persona listing and seeding of the default tutors.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DBSession

from api.config import get_db
from api.models.models import Tutor
from api.schemas.tutor_schemas import SeedResponse, TutorResponse
from api.services.tutor_service import TutorService

tutor_routes = APIRouter()


def tutor_response(t: Tutor) -> TutorResponse:
    return TutorResponse(id=t.id, name=t.name, subject=t.subject, description=t.description or "")


@tutor_routes.get("/tutors", response_model=list[TutorResponse])
async def list_tutors(db: DBSession = Depends(get_db)) -> list[TutorResponse]:
    return [tutor_response(t) for t in TutorService(db).list_tutors()]


@tutor_routes.get("/tutors/{tutor_id}", response_model=TutorResponse)
async def get_tutor(tutor_id: str, db: DBSession = Depends(get_db)) -> TutorResponse:
    return tutor_response(TutorService(db).get_tutor(tutor_id))


@tutor_routes.get("/seed", response_model=SeedResponse)
async def seed(db: DBSession = Depends(get_db)) -> SeedResponse:
    """Seed the default tutors into an empty store; a no-op otherwise."""
    if TutorService(db).seed_tutors():
        return SeedResponse(success=True, message="Database seeded successfully")
    return SeedResponse(success=True, message="Database already seeded")
