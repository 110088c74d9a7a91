"""
Presentation helpers applied while shaping responses.

Every function here is pure: it takes a raw status, number or timestamp and
returns display values (badge class, icon, label). Nothing here is persisted.
"""

from datetime import datetime, time
from decimal import Decimal
from typing import Dict, Optional, Tuple, Union

Number = Union[int, float, Decimal]

BOOKING_STATUS_BADGES = {
    "Confirmed": "bg-success",
    "Pending": "bg-warning",
    "Cancelled": "bg-danger",
}

PAYMENT_STATUS_BADGES = {
    "Paid": "bg-success",
    "Pending": "bg-warning",
    "Failed": "bg-danger",
}

TICKET_STATUS_BADGES = {
    "Valid": "bg-success",
    "Used": "bg-info",
    "Expired": "bg-warning",
    "Cancelled": "bg-danger",
}

PAYMENT_METHOD_ICONS = {
    "Card": "bi-credit-card",
    "PayPal": "bi-paypal",
}

EXPERIENCE_TYPE_BADGES = {
    "Adventure": "bg-danger",
    "Cultural": "bg-primary",
    "Food & Drink": "bg-warning",
    "Nature": "bg-success",
    "Urban": "bg-secondary",
    "Relaxation": "bg-info",
    "Educational": "bg-dark",
    "Sports": "bg-orange",
}

CATEGORY_COLORS = {
    "Adventure": "#FF6B6B",
    "Cultural": "#4ECDC4",
    "Food & Drink": "#FFD166",
    "Nature": "#06D6A0",
    "Urban": "#118AB2",
    "Relaxation": "#9B5DE5",
    "Educational": "#073B4C",
    "Sports": "#EF476F",
}

CATEGORY_ICONS = {
    "Adventure": "bi-compass",
    "Cultural": "bi-bank",
    "Food & Drink": "bi-cup-hot",
    "Nature": "bi-tree",
    "Urban": "bi-buildings",
    "Relaxation": "bi-flower1",
    "Educational": "bi-book",
    "Sports": "bi-trophy",
}

EXPLORE_CATEGORY_ICONS = {
    "Music": "🎵",
    "Tech": "💻",
    "Sports": "⚽",
    "Cultural": "🎭",
    "Food": "🍽️",
    "Art": "🎨",
    "Business": "💼",
    "Education": "📚",
}

RATING_BADGES = {
    5: "bg-success",
    4: "bg-info",
    3: "bg-warning",
    2: "bg-orange",
    1: "bg-danger",
}

RATING_LABELS = {
    5: "Excellent",
    4: "Very Good",
    3: "Good",
    2: "Fair",
    1: "Poor",
}

HIGHLIGHT_CREATOR_BADGES = {"Admin": "bg-primary", "Visitor": "bg-success"}
HIGHLIGHT_CREATOR_ICONS = {"Admin": "bi-shield-check", "Visitor": "bi-person"}


def booking_status_badge(status: Optional[str]) -> str:
    return BOOKING_STATUS_BADGES.get(status or "", "bg-secondary")


def payment_status_badge(status: Optional[str]) -> str:
    return PAYMENT_STATUS_BADGES.get(status or "", "bg-secondary")


def ticket_status_badge(status: Optional[str]) -> str:
    return TICKET_STATUS_BADGES.get(status or "", "bg-secondary")


def payment_method_icon(method: Optional[str]) -> str:
    return PAYMENT_METHOD_ICONS.get(method or "", "bi-cash")


def experience_type_badge(experience_type: Optional[str]) -> str:
    return EXPERIENCE_TYPE_BADGES.get(experience_type or "", "bg-secondary")


def category_color(category: Optional[str]) -> str:
    return CATEGORY_COLORS.get(category or "", "#6c757d")


def category_icon(category: Optional[str]) -> str:
    return CATEGORY_ICONS.get(category or "", "bi-tag")


def explore_category_icon(category: Optional[str]) -> str:
    return EXPLORE_CATEGORY_ICONS.get(category or "", "🎪")


def rating_badge(rating: int) -> str:
    return RATING_BADGES.get(rating, "bg-secondary")


def rating_label(rating: int) -> str:
    return RATING_LABELS.get(rating, "Unrated")


def rating_stars(rating: int) -> str:
    rating = max(0, min(5, rating or 0))
    return "★" * rating + "☆" * (5 - rating)


def highlight_creator_display(creator_type: Optional[str]) -> Tuple[str, str]:
    """Return (badge_class, icon) for a highlight author type"""
    return (
        HIGHLIGHT_CREATOR_BADGES.get(creator_type or "", "bg-secondary"),
        HIGHLIGHT_CREATOR_ICONS.get(creator_type or "", "bi-question-circle"),
    )


def truncate(text: Optional[str], length: int = 100) -> str:
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def initials(first_name: Optional[str], last_name: Optional[str]) -> str:
    first = (first_name or "").strip()[:1]
    last = (last_name or "").strip()[:1]
    return (first + last).upper() or "?"


def _naive(moment: datetime) -> datetime:
    # Postgres hands back aware datetimes, SQLite naive ones
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''} ago"


def time_ago(moment: Optional[datetime], now: Optional[datetime] = None, with_weeks: bool = False) -> str:
    """Relative time string: 'Just now', '5 min ago', '2 hours ago', '3 days ago'.

    Anything older than a week (or 30 days with ``with_weeks``) falls back to
    an absolute 'Mar 05, 2025' date.
    """
    if moment is None:
        return ""
    moment = _naive(moment)
    now = _naive(now) if now else datetime.now()
    delta = now - moment
    seconds = delta.total_seconds()

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{int(seconds // 60)} min ago"
    if seconds < 86400:
        return _plural(int(seconds // 3600), "hour")
    if delta.days < 7:
        return _plural(delta.days, "day")
    if with_weeks and delta.days < 30:
        return _plural(delta.days // 7, "week")
    return moment.strftime("%b %d, %Y")


def growth(current: Number, previous: Number) -> float:
    """Period-over-period growth percentage"""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((Decimal(str(current)) - Decimal(str(previous))) / Decimal(str(previous)) * 100)


def growth_display(value: float) -> Dict[str, str]:
    positive = value >= 0
    return {
        "text": f"{'+' if positive else ''}{value:.1f}%",
        "css_class": "text-success" if positive else "text-danger",
        "icon": "bi-arrow-up" if positive else "bi-arrow-down",
    }


def price_text(amount: Optional[Number], currency: str = "SAR") -> str:
    if not amount:
        return "Free"
    return f"{amount:g} {currency}" if isinstance(amount, float) else f"{amount} {currency}"


def format_time(value: Optional[time], default: Optional[str] = None) -> Optional[str]:
    """'7:00 PM' style clock time"""
    if value is None:
        return default
    return value.strftime("%I:%M %p").lstrip("0")
