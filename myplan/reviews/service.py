from datetime import datetime, time, timedelta
from typing import List

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myplan.display import rating_badge, rating_label, rating_stars, time_ago, truncate
from myplan.exceptions import NotFoundError, PersistenceError, ValidationError
from myplan.logging_config import get_logger
from myplan.models import Booking, Experience, Review, Visitor
from myplan.reviews.schemas import (
    ReviewCreate, ReviewFilters, ReviewListResponse, ReviewResponse, ReviewSort,
    ReviewStats, ReviewUpdate
)

logger = get_logger(__name__)


class ReviewService:
    def __init__(self, db: Session):
        self.db = db

    # Admin
    def list_reviews(self, filters: ReviewFilters) -> ReviewListResponse:
        query = self.db.query(Review) \
            .outerjoin(Visitor, Review.visitor_id == Visitor.visitor_id) \
            .outerjoin(Experience, Review.experience_id == Experience.experience_id)

        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(or_(
                Review.comment.ilike(pattern),
                Visitor.first_name.ilike(pattern),
                Visitor.last_name.ilike(pattern),
                Experience.title.ilike(pattern),
            ))
        if filters.rating:
            query = query.filter(Review.rating == filters.rating)
        if filters.from_date:
            query = query.filter(Review.review_time >= datetime.combine(filters.from_date, time.min))
        if filters.to_date:
            # whole to_date day is included
            query = query.filter(Review.review_time < datetime.combine(filters.to_date + timedelta(days=1), time.min))
        if filters.experience_type:
            query = query.filter(Experience.type == filters.experience_type)

        order = {
            ReviewSort.DATE_ASC: [Review.review_time.asc()],
            ReviewSort.RATING_ASC: [Review.rating.asc(), Review.review_time.desc()],
            ReviewSort.RATING_DESC: [Review.rating.desc(), Review.review_time.desc()],
        }.get(filters.sort_by, [Review.review_time.desc()])

        reviews = query.order_by(*order).all()
        experience_types = [
            t for (t,) in self.db.query(Experience.type).filter(Experience.type.isnot(None)).distinct().order_by(Experience.type)
        ]

        return ReviewListResponse(
            reviews=[self.to_response(r) for r in reviews],
            stats=self.compute_stats(),
            filters=filters,
            experience_types=experience_types,
        )

    def compute_stats(self) -> ReviewStats:
        total = self.db.query(func.count(Review.review_id)).scalar() or 0
        average = self.db.query(func.avg(Review.rating)).scalar()
        counts = dict(self.db.query(Review.rating, func.count(Review.review_id)).group_by(Review.rating).all())
        return ReviewStats(
            total=total,
            average_rating=round(float(average), 1) if average is not None else 0.0,
            rating_counts={star: counts.get(star, 0) for star in range(1, 6)},
        )

    def get_review(self, review_id: int) -> Review:
        review = self.db.query(Review).filter(Review.review_id == review_id).first()
        if not review:
            raise NotFoundError("Review not found.")
        return review

    def delete_review(self, review_id: int) -> None:
        review = self.get_review(review_id)
        self._delete([review])

    def bulk_delete(self, ids: List[int]) -> int:
        if not ids:
            raise ValidationError("No reviews selected for deletion.")
        reviews = self.db.query(Review).filter(Review.review_id.in_(ids)).all()
        if not reviews:
            raise NotFoundError("No reviews found.")
        self._delete(reviews)
        return len(reviews)

    def reviews_for_experience(self, experience_id: int) -> List[ReviewResponse]:
        reviews = self.db.query(Review).filter(
            Review.experience_id == experience_id
        ).order_by(Review.review_time.desc()).all()
        return [self.to_response(r) for r in reviews]

    # Visitor
    def create_review(self, visitor: Visitor, request: ReviewCreate) -> Review:
        experience = self.db.query(Experience).filter(Experience.experience_id == request.experience_id).first()
        if not experience:
            raise NotFoundError("Experience not found.")

        if request.booking_id is not None:
            booking = self.db.query(Booking).filter(
                Booking.booking_id == request.booking_id,
                Booking.visitor_id == visitor.visitor_id,
                Booking.experience_id == request.experience_id
            ).first()
            if not booking:
                raise NotFoundError("Booking not found.")

        review = Review(
            visitor_id=visitor.visitor_id,
            experience_id=request.experience_id,
            booking_id=request.booking_id,
            rating=request.rating,
            comment=request.comment,
        )
        self._save(review, "review_create_failed")
        logger.info("review_created", review_id=review.review_id, experience_id=request.experience_id)
        return review

    def update_review(self, visitor: Visitor, review_id: int, request: ReviewUpdate) -> Review:
        review = self._get_owned(visitor, review_id)
        for field, value in request.dict(exclude_unset=True).items():
            setattr(review, field, value)
        self._save(review, "review_update_failed")
        return review

    def delete_own_review(self, visitor: Visitor, review_id: int) -> None:
        self._delete([self._get_owned(visitor, review_id)])

    def _get_owned(self, visitor: Visitor, review_id: int) -> Review:
        review = self.db.query(Review).filter(
            Review.review_id == review_id,
            Review.visitor_id == visitor.visitor_id
        ).first()
        if not review:
            raise NotFoundError("Review not found.")
        return review

    def _save(self, review: Review, event: str) -> None:
        try:
            self.db.add(review)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(event)
            raise PersistenceError()
        self.db.refresh(review)

    def _delete(self, reviews: List[Review]) -> None:
        try:
            for review in reviews:
                self.db.delete(review)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("review_delete_failed", count=len(reviews))
            raise PersistenceError()
        logger.info("reviews_deleted", count=len(reviews))

    @staticmethod
    def to_response(review: Review) -> ReviewResponse:
        visitor = review.visitor
        experience = review.experience
        return ReviewResponse(
            review_id=review.review_id,
            rating=review.rating,
            comment=review.comment,
            short_comment=truncate(review.comment),
            review_time=review.review_time,
            time_ago=time_ago(review.review_time, with_weeks=True),
            stars=rating_stars(review.rating),
            rating_label=rating_label(review.rating),
            rating_badge=rating_badge(review.rating),
            booking_id=review.booking_id,
            visitor_id=review.visitor_id,
            visitor_name=visitor.full_name if visitor else "Unknown",
            visitor_email=visitor.user.email if visitor and visitor.user else None,
            experience_id=review.experience_id,
            experience_title=experience.title if experience else None,
            experience_type=experience.type if experience else None,
        )
