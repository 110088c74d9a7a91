from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from myplan.database import get_db
from myplan.explore.schemas import ExploreFilter, ExploreResponse, HomeExperience, MapPoint
from myplan.explore.service import ExploreService

router = APIRouter()


@router.get("/explore", response_model=ExploreResponse)
def explore(
    search: Optional[str] = Query(None, description="Matches title, description or location"),
    category: Optional[str] = Query(None, description="Experience type"),
    filter: Optional[ExploreFilter] = Query(None),
    db: Session = Depends(get_db)
):
    """Search results plus featured, recommended, categories and friends feeds"""
    return ExploreService(db).explore(search=search, category=category, filter=filter)


@router.get("/home", response_model=List[HomeExperience])
def home(db: Session = Depends(get_db)):
    """Upcoming experiences for the landing page"""
    return ExploreService(db).home()


@router.get("/home/map", response_model=List[MapPoint])
def experience_map(db: Session = Depends(get_db)):
    return ExploreService(db).map_points()
