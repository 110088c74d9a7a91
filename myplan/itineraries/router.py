from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from myplan.auth.dependencies import get_current_visitor
from myplan.database import get_db
from myplan.itineraries.schemas import ItineraryCreate, ItineraryResponse, ItineraryUpdate
from myplan.itineraries.service import ItineraryService
from myplan.models import Visitor

router = APIRouter()


@router.get("", response_model=List[ItineraryResponse])
def list_itineraries(visitor: Visitor = Depends(get_current_visitor), db: Session = Depends(get_db)):
    service = ItineraryService(db)
    return [service.to_response(i) for i in service.list_itineraries(visitor)]


@router.post("", response_model=ItineraryResponse, status_code=status.HTTP_201_CREATED)
def store_itinerary(
    request: ItineraryCreate,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    service = ItineraryService(db)
    return service.to_response(service.store(visitor, request))


@router.put("/{itinerary_id}", response_model=ItineraryResponse)
def update_itinerary(
    itinerary_id: int,
    request: ItineraryUpdate,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    service = ItineraryService(db)
    return service.to_response(service.update(visitor, itinerary_id, request))


@router.delete("/{itinerary_id}")
def delete_itinerary(
    itinerary_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    ItineraryService(db).delete(visitor, itinerary_id)
    return {"message": "Itinerary deleted successfully!"}
