from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.exceptions import NotFoundError, PersistenceError
from myplan.itineraries.schemas import ItineraryCreate, ItineraryResponse, ItineraryUpdate
from myplan.logging_config import get_logger
from myplan.models import Experience, Itinerary, Visitor

logger = get_logger(__name__)


class ItineraryService:
    """A visitor's personal day plans around experiences"""

    def __init__(self, db: Session):
        self.db = db

    def list_itineraries(self, visitor: Visitor) -> List[Itinerary]:
        return self.db.query(Itinerary).filter(
            Itinerary.visitor_id == visitor.visitor_id
        ).order_by(Itinerary.start_date, Itinerary.day).all()

    def store(self, visitor: Visitor, request: ItineraryCreate) -> Itinerary:
        self._require_experience(request.experience_id)
        itinerary = Itinerary(visitor_id=visitor.visitor_id, **request.dict())
        self._commit(itinerary, "itinerary_store_failed")
        logger.info("itinerary_created", itinerary_id=itinerary.itinerary_id, visitor_id=visitor.visitor_id)
        return itinerary

    def update(self, visitor: Visitor, itinerary_id: int, request: ItineraryUpdate) -> Itinerary:
        itinerary = self._get_owned(visitor, itinerary_id)
        self._require_experience(request.experience_id)
        for field, value in request.dict().items():
            setattr(itinerary, field, value)
        self._commit(itinerary, "itinerary_update_failed")
        return itinerary

    def delete(self, visitor: Visitor, itinerary_id: int) -> None:
        itinerary = self._get_owned(visitor, itinerary_id)
        try:
            self.db.delete(itinerary)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("itinerary_delete_failed", itinerary_id=itinerary_id)
            raise PersistenceError()

    def _get_owned(self, visitor: Visitor, itinerary_id: int) -> Itinerary:
        itinerary = self.db.query(Itinerary).filter(
            Itinerary.itinerary_id == itinerary_id,
            Itinerary.visitor_id == visitor.visitor_id
        ).first()
        if not itinerary:
            raise NotFoundError("Itinerary not found.")
        return itinerary

    def _require_experience(self, experience_id: int) -> None:
        exists = self.db.query(Experience.experience_id).filter(
            Experience.experience_id == experience_id
        ).first()
        if not exists:
            raise NotFoundError("Experience not found.")

    def _commit(self, itinerary: Itinerary, event: str) -> None:
        try:
            self.db.add(itinerary)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(event)
            raise PersistenceError()
        self.db.refresh(itinerary)

    @staticmethod
    def to_response(itinerary: Itinerary) -> ItineraryResponse:
        return ItineraryResponse(
            itinerary_id=itinerary.itinerary_id,
            experience_id=itinerary.experience_id,
            experience_title=itinerary.experience.title if itinerary.experience else None,
            start_date=itinerary.start_date,
            end_date=itinerary.end_date,
            day=itinerary.day,
            description=itinerary.description,
            added_at=itinerary.added_at,
        )
