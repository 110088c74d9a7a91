from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from myplan.auth.dependencies import get_current_visitor, require_admin
from myplan.database import get_db
from myplan.models import Visitor
from myplan.reviews.schemas import (
    BulkDeleteRequest, ReviewCreate, ReviewFilters, ReviewListResponse, ReviewResponse,
    ReviewSort, ReviewUpdate
)
from myplan.reviews.service import ReviewService

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])


# Visitor Endpoints
@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    request: ReviewCreate,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    service = ReviewService(db)
    return service.to_response(service.create_review(visitor, request))


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: int,
    request: ReviewUpdate,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    service = ReviewService(db)
    return service.to_response(service.update_review(visitor, review_id, request))


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    visitor: Visitor = Depends(get_current_visitor),
    db: Session = Depends(get_db)
):
    ReviewService(db).delete_own_review(visitor, review_id)
    return {"message": "Review deleted successfully!"}


# Admin Endpoints
@admin_router.get("", response_model=ReviewListResponse)
def list_reviews(
    search: Optional[str] = Query(None),
    rating: Optional[int] = Query(None, ge=1, le=5),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    experience_type: Optional[str] = Query(None),
    sort_by: ReviewSort = Query(ReviewSort.DATE_DESC),
    db: Session = Depends(get_db)
):
    """Filtered, sorted review listing with rating statistics"""
    filters = ReviewFilters(
        search=search, rating=rating, from_date=from_date, to_date=to_date,
        experience_type=experience_type, sort_by=sort_by
    )
    return ReviewService(db).list_reviews(filters)


@admin_router.get("/experience/{experience_id}", response_model=List[ReviewResponse])
def reviews_by_experience(experience_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).reviews_for_experience(experience_id)


@admin_router.post("/bulk-delete")
def bulk_delete_reviews(request: BulkDeleteRequest, db: Session = Depends(get_db)):
    deleted = ReviewService(db).bulk_delete(request.ids)
    return {"deleted": deleted, "message": f"{deleted} review(s) deleted successfully!"}


@admin_router.get("/{review_id}", response_model=ReviewResponse)
def get_review(review_id: int, db: Session = Depends(get_db)):
    service = ReviewService(db)
    return service.to_response(service.get_review(review_id))


@admin_router.delete("/{review_id}")
def admin_delete_review(review_id: int, db: Session = Depends(get_db)):
    ReviewService(db).delete_review(review_id)
    return {"message": "Review deleted successfully!"}
