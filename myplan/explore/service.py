from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from myplan.bookings.schemas import BookingStatus
from myplan.config import settings
from myplan.display import (
    experience_type_badge, explore_category_icon, format_time, initials, price_text, time_ago,
    truncate
)
from myplan.explore.schemas import (
    CategoryFacet, ExperienceCard, ExploreFilter, ExploreResponse, FriendHighlight, FriendSummary,
    HomeExperience, MapPoint
)
from myplan.models import Booking, Experience, ExperienceDetail, Highlight, Review, Visitor

DEFAULT_RATING = 4.5
DEFAULT_EVENT_TIME = "7:00 PM"
DEFAULT_IMAGES = [
    "https://images.unsplash.com/photo-1501281668745-f7f57925c3b4",
    "https://images.unsplash.com/photo-1492684223066-81342ee5ff30",
    "https://images.unsplash.com/photo-1540575467063-178a50c2df87",
]
NEAR_ME_CITIES = ("Riyadh", "Jeddah")
WEEKEND_DAYS = {4, 5}  # Friday, Saturday

FEATURED_LIMIT = 8
RECOMMENDATION_LIMIT = 6
FRIEND_HIGHLIGHT_LIMIT = 10
FRIEND_LIMIT = 100
HOME_LIMIT = 6

KNOWN_LOCATIONS: Dict[str, Tuple[float, float]] = {
    "Boulevard Riyadh City": (24.7136, 46.6753),
    "King Abdullah Financial District": (24.8095, 46.6417),
    "At-Turaif District Diriyah": (24.7375, 46.5755),
    "King Fahd Park": (24.6789, 46.6895),
    "Riyadh Front": (24.7914, 46.6932),
}
DEFAULT_COORDINATES = (24.7136, 46.6753)


def geocode(location: Optional[str]) -> Tuple[float, float]:
    """Coordinates for a known venue name, Riyadh centre otherwise"""
    if location:
        for name, coordinates in KNOWN_LOCATIONS.items():
            if name.lower() in location.lower():
                return coordinates
    return DEFAULT_COORDINATES


class ExploreService:
    """Read-only browse feeds: explore page, home page and map"""

    def __init__(self, db: Session):
        self.db = db

    def explore(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        filter: Optional[ExploreFilter] = None,
        today: Optional[date] = None
    ) -> ExploreResponse:
        today = today or date.today()
        ratings = self._ratings()

        return ExploreResponse(
            search=search,
            category=category,
            filter=filter,
            results=[self._card(e, ratings) for e in self.search(search, category, filter)],
            featured=self.featured(ratings, today),
            recommendations=self.recommendations(ratings, today),
            categories=self.categories(),
            friends_highlights=self.friends_highlights(),
            friends=self.friends(),
        )

    def search(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        filter: Optional[ExploreFilter] = None
    ) -> List[Experience]:
        query = self.db.query(Experience)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Experience.title.ilike(pattern),
                Experience.description.ilike(pattern),
                Experience.location.ilike(pattern),
            ))
        if category:
            query = query.filter(Experience.type == category)

        if filter == ExploreFilter.NEAR_ME:
            query = query.filter(or_(*[Experience.location.ilike(f"%{city}%") for city in NEAR_ME_CITIES]))

        if filter == ExploreFilter.POPULAR:
            booking_count = func.count(Booking.booking_id)
            query = query.outerjoin(Booking, Booking.experience_id == Experience.experience_id) \
                .group_by(Experience.experience_id) \
                .order_by(booking_count.desc(), Experience.start_date)
        else:
            query = query.order_by(Experience.start_date)

        experiences = query.all()
        if filter == ExploreFilter.WEEKEND:
            experiences = [e for e in experiences if e.start_date.weekday() in WEEKEND_DAYS]
        return experiences

    def featured(self, ratings: Dict[int, Tuple[float, int]], today: date) -> List[ExperienceCard]:
        upcoming = self.db.query(Experience).filter(Experience.end_date >= today).all()
        cards = [self._card(e, ratings) for e in upcoming]
        cards.sort(key=lambda card: card.rating, reverse=True)
        return cards[:FEATURED_LIMIT]

    def recommendations(self, ratings: Dict[int, Tuple[float, int]], today: date) -> List[ExperienceCard]:
        experiences = self.db.query(Experience).filter(
            Experience.end_date >= today
        ).order_by(func.random()).limit(RECOMMENDATION_LIMIT).all()
        return [self._card(e, ratings) for e in experiences]

    def categories(self) -> List[CategoryFacet]:
        rows = self.db.query(Experience.type, func.count(Experience.experience_id)) \
            .filter(Experience.type.isnot(None)) \
            .group_by(Experience.type) \
            .order_by(Experience.type).all()
        return [
            CategoryFacet(name=name, icon=explore_category_icon(name), count=count, count_text=f"{count} events")
            for name, count in rows
        ]

    def friends_highlights(self) -> List[FriendHighlight]:
        highlights = self.db.query(Highlight).filter(
            Highlight.visitor_id.isnot(None)
        ).order_by(Highlight.highlight_time.desc()).limit(FRIEND_HIGHLIGHT_LIMIT).all()

        results = []
        for h in highlights:
            visitor = h.visitor
            image = visitor.user.image if visitor and visitor.user else None
            results.append(FriendHighlight(
                highlight_id=h.highlight_id,
                title=h.title,
                content=truncate(h.content),
                image=h.image,
                author_name=visitor.full_name if visitor else "Unknown",
                author_avatar=image or (initials(visitor.first_name, visitor.last_name) if visitor else "?"),
                time_ago=time_ago(h.highlight_time),
            ))
        return results

    def friends(self) -> List[FriendSummary]:
        confirmed = func.count(Booking.booking_id)
        rows = self.db.query(Visitor, confirmed) \
            .outerjoin(Booking, (Booking.visitor_id == Visitor.visitor_id)
                       & (Booking.status == BookingStatus.CONFIRMED.value)) \
            .group_by(Visitor.visitor_id) \
            .order_by(Visitor.first_name, Visitor.last_name) \
            .limit(FRIEND_LIMIT).all()

        return [
            FriendSummary(
                visitor_id=v.visitor_id,
                full_name=v.full_name,
                username=f"{v.first_name}.{v.last_name}".lower().replace(" ", ""),
                initials=initials(v.first_name, v.last_name),
                image=v.user.image if v.user else None,
                confirmed_bookings=count,
            )
            for v, count in rows
        ]

    def home(self, today: Optional[date] = None) -> List[HomeExperience]:
        today = today or date.today()
        ratings = self._ratings()
        experiences = self.db.query(Experience).filter(
            Experience.start_date >= today
        ).order_by(Experience.start_date).limit(HOME_LIMIT).all()

        results = []
        for e in experiences:
            earliest = self.db.query(func.min(ExperienceDetail.time)).filter(
                ExperienceDetail.experience_id == e.experience_id
            ).scalar()
            rating, _ = ratings.get(e.experience_id, (0.0, 0))
            results.append(HomeExperience(
                experience_id=e.experience_id,
                title=e.title,
                type=e.type,
                location=e.location,
                start_date=e.start_date,
                time=format_time(earliest, DEFAULT_EVENT_TIME),
                price_text=price_text(e.min_price, settings.CURRENCY),
                rating=rating,
                image=self._image(e),
            ))
        return results

    def map_points(self, today: Optional[date] = None) -> List[MapPoint]:
        today = today or date.today()
        experiences = self.db.query(Experience).filter(
            Experience.location.isnot(None),
            Experience.location != "",
            Experience.start_date > today,
            Experience.end_date > today
        ).order_by(Experience.start_date).all()

        points = []
        for e in experiences:
            if e.lat is not None and e.long is not None:
                lat, lng = e.lat, e.long
            else:
                lat, lng = geocode(e.location)
            points.append(MapPoint(
                experience_id=e.experience_id,
                title=e.title,
                location=e.location,
                lat=lat,
                lng=lng,
                start_date=e.start_date,
                end_date=e.end_date,
                type=e.type,
                price_text=price_text(e.min_price, settings.CURRENCY),
            ))
        return points

    def _ratings(self) -> Dict[int, Tuple[float, int]]:
        """experience_id -> (average rating to 1 decimal, review count)"""
        rows = self.db.query(
            Review.experience_id, func.avg(Review.rating), func.count(Review.review_id)
        ).group_by(Review.experience_id).all()
        return {
            experience_id: (round(float(avg), 1), count)
            for experience_id, avg, count in rows if experience_id is not None
        }

    def _card(self, experience: Experience, ratings: Dict[int, Tuple[float, int]]) -> ExperienceCard:
        rating, review_count = ratings.get(experience.experience_id, (DEFAULT_RATING, 0))
        return ExperienceCard(
            experience_id=experience.experience_id,
            title=experience.title,
            type=experience.type,
            location=experience.location,
            start_date=experience.start_date,
            end_date=experience.end_date,
            min_price=experience.min_price or 0,
            price_text=price_text(experience.min_price, settings.CURRENCY),
            rating=rating,
            review_count=review_count,
            image=self._image(experience),
            type_badge=experience_type_badge(experience.type),
        )

    @staticmethod
    def _image(experience: Experience) -> str:
        if experience.images:
            return experience.images[0].attachment
        return DEFAULT_IMAGES[experience.experience_id % len(DEFAULT_IMAGES)]
