#!/usr/bin/env python3
"""
Seed Data Script

Creates an admin, two visitors and a handful of experiences with bookable
slots, plus a confirmed booking with tickets, a paid payment and invoice, a
review and a highlight. Running it twice does not duplicate anything.

Usage:
    python seed_data.py
"""

import sys
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from myplan.admin.admin_service import split_tax
from myplan.auth.utils import get_password_hash
from myplan.bookings.ticket_service import TicketService
from myplan.config import settings
from myplan.database import SessionLocal, init_db
from myplan.models import (
    Admin, Booking, Experience, ExperienceDetail, Highlight, Invoice, Payment, Review, User,
    Visitor
)

ADMIN_EMAIL = "admin@myplan.sa"
VISITORS = [
    ("sara@example.com", "Sara", "Alqahtani", "0551234567"),
    ("omar@example.com", "Omar", "Alharbi", "0557654321"),
]
EXPERIENCES = [
    {
        "title": "Riyadh Season Concert Night",
        "description": "An evening of live music on the Boulevard stage.",
        "type": "Music",
        "location": "Boulevard Riyadh City",
        "price": Decimal("150.00"),
        "days_ahead": 14,
        "capacity": 500,
    },
    {
        "title": "Diriyah Heritage Walk",
        "description": "Guided tour through the mud-brick lanes of At-Turaif.",
        "type": "Cultural",
        "location": "At-Turaif District Diriyah",
        "price": Decimal("75.00"),
        "days_ahead": 21,
        "capacity": 40,
    },
    {
        "title": "KAFD Tech Meetup",
        "description": "Talks and demos from local startups.",
        "type": "Tech",
        "location": "King Abdullah Financial District",
        "price": Decimal("0.00"),
        "days_ahead": 30,
        "capacity": 120,
    },
]


def get_or_create_user(db: Session, email: str, full_name: str, password: str, role: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        print(f"✅ {email} already exists, skipping...")
        return user

    user = User(full_name=full_name, email=email, password_hash=get_password_hash(password), role=role)
    db.add(user)
    db.flush()
    return user


def create_admin(db: Session) -> Admin:
    print("🔧 Creating admin...")
    user = get_or_create_user(db, ADMIN_EMAIL, "System Administrator", "Admin123!", "admin")
    if user.admin is None:
        db.add(Admin(user=user, first_name="System", last_name="Administrator", position="Operations"))
        db.flush()
    return user.admin


def create_visitors(db: Session):
    print("👥 Creating visitors...")
    visitors = []
    for email, first_name, last_name, phone in VISITORS:
        user = get_or_create_user(db, email, f"{first_name} {last_name}", "Visitor123!", "visitor")
        if user.visitor is None:
            db.add(Visitor(user=user, first_name=first_name, last_name=last_name, phone=phone))
            db.flush()
        visitors.append(user.visitor)
    return visitors


def create_experiences(db: Session):
    print("🎪 Creating experiences...")
    experiences = []
    for data in EXPERIENCES:
        experience = db.query(Experience).filter(Experience.title == data["title"]).first()
        if experience is None:
            start = date.today() + timedelta(days=data["days_ahead"])
            experience = Experience(
                title=data["title"],
                description=data["description"],
                type=data["type"],
                location=data["location"],
                min_price=data["price"],
                max_price=data["price"],
                start_date=start,
                end_date=start + timedelta(days=1),
                max_capacity=data["capacity"],
            )
            db.add(experience)
            db.flush()
            for offset in range(2):
                db.add(ExperienceDetail(
                    experience=experience,
                    date=start + timedelta(days=offset),
                    time=time(19, 0),
                    price=data["price"],
                ))
            db.flush()
        experiences.append(experience)
    return experiences


def create_sample_booking(db: Session, visitor: Visitor, experience: Experience) -> None:
    print("🎟️  Creating sample booking...")
    if db.query(Booking).filter(Booking.visitor_id == visitor.visitor_id).first():
        print("✅ Sample booking already exists, skipping...")
        return

    detail = experience.details[0]
    tickets = 2
    total = Decimal(detail.price) * tickets
    booking = Booking(
        experience_id=experience.experience_id,
        experience_detail_id=detail.experience_detail_id,
        visitor_id=visitor.visitor_id,
        booking_date=datetime.now(),
        number_of_ticket=tickets,
        price_per_ticket=detail.price,
        total_amount=total,
        status="Confirmed",
    )
    db.add(booking)
    db.flush()
    TicketService(db).issue_tickets(booking, tickets)

    payment = Payment(
        booking_id=booking.booking_id,
        payment_date=datetime.now(),
        amount=total,
        method="Card",
        status="Paid",
    )
    db.add(payment)
    db.flush()
    db.add(Invoice(
        payment_id=payment.payment_id,
        invoice_date=payment.payment_date,
        total_amount=total,
        tax_amount=split_tax(total, Decimal(str(settings.TAX_RATE))),
    ))
    db.add(Review(
        visitor_id=visitor.visitor_id,
        experience_id=experience.experience_id,
        booking_id=booking.booking_id,
        rating=5,
        comment="Unforgettable night, great sound and organisation.",
    ))
    db.add(Highlight(
        title="Best concert of the season",
        content="The crowd, the lights, the music. Already planning the next one!",
        visitor_id=visitor.visitor_id,
    ))


def main() -> bool:
    print("🚀 Creating seed data for MyPlan...")
    init_db()

    db = SessionLocal()
    try:
        create_admin(db)
        visitors = create_visitors(db)
        experiences = create_experiences(db)
        create_sample_booking(db, visitors[0], experiences[0])
        db.commit()

        print("✅ Seed data ready!")
        print(f"   • Admin: {ADMIN_EMAIL} / Admin123!")
        for email, *_ in VISITORS:
            print(f"   • Visitor: {email} / Visitor123!")
        print(f"   • {len(experiences)} experiences")
        return True

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        return False

    finally:
        db.close()


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
