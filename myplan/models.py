from sqlalchemy import (
    BigInteger, CheckConstraint, Column, Date, DateTime, Float, ForeignKey, Integer,
    Numeric, String, Text, Time
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from myplan.database import Base

# SQLite only autoincrements INTEGER PRIMARY KEY
Id = BigInteger().with_variant(Integer, "sqlite")

# ================================
# Users & Profiles
# ================================
class User(Base):
    __tablename__ = "users"

    user_id = Column(Id, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="visitor")
    image = Column(String(255))
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    visitor = relationship("Visitor", back_populates="user", uselist=False)
    admin = relationship("Admin", back_populates="user", uselist=False)

class Visitor(Base):
    __tablename__ = "visitors"

    visitor_id = Column(Id, primary_key=True, index=True)
    user_id = Column(Id, ForeignKey("users.user_id", ondelete="SET NULL"), unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20))
    bio = Column(Text)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="visitor")
    bookings = relationship("Booking", back_populates="visitor")
    reviews = relationship("Review", back_populates="visitor")
    highlights = relationship("Highlight", back_populates="visitor")
    itineraries = relationship("Itinerary", back_populates="visitor")
    sent_invitations = relationship(
        "FriendInvitation", back_populates="sender", foreign_keys="FriendInvitation.visitor_id"
    )
    received_invitations = relationship(
        "FriendInvitation", back_populates="receiver", foreign_keys="FriendInvitation.receiver_id"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

class Admin(Base):
    __tablename__ = "admins"

    admin_id = Column(Id, primary_key=True, index=True)
    user_id = Column(Id, ForeignKey("users.user_id", ondelete="SET NULL"), unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20))
    position = Column(String(100))
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="admin")
    highlights = relationship("Highlight", back_populates="admin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

# ================================
# Experiences
# ================================
class Experience(Base):
    __tablename__ = "experiences"

    experience_id = Column(Id, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    type = Column(String(50))
    location = Column(String(100))
    min_price = Column(Numeric(10, 2), default=0)
    max_price = Column(Numeric(10, 2), default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    max_capacity = Column(Integer, nullable=False, default=1)
    lat = Column(Float)
    long = Column(Float)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    details = relationship("ExperienceDetail", back_populates="experience")
    images = relationship("Image", back_populates="experience")
    bookings = relationship("Booking", back_populates="experience")
    reviews = relationship("Review", back_populates="experience")
    itineraries = relationship("Itinerary", back_populates="experience")

class ExperienceDetail(Base):
    __tablename__ = "experience_details"

    experience_detail_id = Column(Id, primary_key=True, index=True)
    experience_id = Column(Id, ForeignKey("experiences.experience_id", ondelete="SET NULL"))
    date = Column(Date, nullable=False)
    time = Column(Time)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Active")
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    experience = relationship("Experience", back_populates="details")
    invitations = relationship("FriendInvitation", back_populates="experience_detail")

class Image(Base):
    __tablename__ = "images"

    image_id = Column(Id, primary_key=True, index=True)
    experience_id = Column(Id, ForeignKey("experiences.experience_id", ondelete="SET NULL"))
    attachment = Column(String(255), nullable=False)
    image_time = Column(DateTime(timezone=True), server_default=func.now())
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    experience = relationship("Experience", back_populates="images")

# ================================
# Bookings, Tickets & Payments
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    booking_id = Column(Id, primary_key=True, index=True)
    experience_id = Column(Id, ForeignKey("experiences.experience_id", ondelete="SET NULL"))
    experience_detail_id = Column(Id, ForeignKey("experience_details.experience_detail_id", ondelete="SET NULL"))
    visitor_id = Column(Id, ForeignKey("visitors.visitor_id", ondelete="SET NULL"))
    booking_date = Column(DateTime(timezone=True), server_default=func.now())
    number_of_ticket = Column(Integer, nullable=False)
    price_per_ticket = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), default="Pending")
    description = Column(Text)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    experience = relationship("Experience", back_populates="bookings")
    experience_detail = relationship("ExperienceDetail")
    visitor = relationship("Visitor", back_populates="bookings")
    tickets = relationship("Ticket", back_populates="booking", order_by="Ticket.ticket_id")
    payments = relationship("Payment", back_populates="booking", order_by="Payment.payment_id")
    reviews = relationship("Review", back_populates="booking")

class Ticket(Base):
    __tablename__ = "tickets"

    ticket_id = Column(Id, primary_key=True, index=True)
    booking_id = Column(Id, ForeignKey("bookings.booking_id", ondelete="SET NULL"))
    code = Column(String(50), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="Valid")
    type = Column(String(50), default="Standard")
    seat_number = Column(String(20))
    issued_at = Column(DateTime(timezone=True), server_default=func.now())
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="tickets")

class Payment(Base):
    __tablename__ = "payments"

    payment_id = Column(Id, primary_key=True, index=True)
    booking_id = Column(Id, ForeignKey("bookings.booking_id", ondelete="SET NULL"))
    payment_date = Column(DateTime(timezone=True))
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="Pending")
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="payments")

class Invoice(Base):
    __tablename__ = "invoices"

    invoice_id = Column(Id, primary_key=True, index=True)
    # Joined by hand; there is no FK from invoices to payments
    payment_id = Column(Id, index=True)
    invoice_date = Column(DateTime(timezone=True), server_default=func.now())
    visitor_address = Column(String(255))
    total_amount = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

# ================================
# Social
# ================================
class Review(Base):
    __tablename__ = "reviews"

    review_id = Column(Id, primary_key=True, index=True)
    visitor_id = Column(Id, ForeignKey("visitors.visitor_id", ondelete="SET NULL"))
    experience_id = Column(Id, ForeignKey("experiences.experience_id", ondelete="SET NULL"))
    booking_id = Column(Id, ForeignKey("bookings.booking_id", ondelete="SET NULL"))
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    review_time = Column(DateTime(timezone=True), server_default=func.now())
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    # Relationships
    visitor = relationship("Visitor", back_populates="reviews")
    experience = relationship("Experience", back_populates="reviews")
    booking = relationship("Booking", back_populates="reviews")

class Highlight(Base):
    __tablename__ = "highlights"

    highlight_id = Column(Id, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    content = Column(Text)
    image = Column(String(255))
    description = Column(Text)
    highlight_time = Column(DateTime(timezone=True), server_default=func.now())
    admin_id = Column(Id, ForeignKey("admins.admin_id", ondelete="SET NULL"))
    visitor_id = Column(Id, ForeignKey("visitors.visitor_id", ondelete="SET NULL"))
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "(admin_id IS NULL) <> (visitor_id IS NULL)",
            name="ck_highlights_single_author",
        ),
    )

    # Relationships
    admin = relationship("Admin", back_populates="highlights")
    visitor = relationship("Visitor", back_populates="highlights")

class Itinerary(Base):
    __tablename__ = "itineraries"

    itinerary_id = Column(Id, primary_key=True, index=True)
    visitor_id = Column(Id, ForeignKey("visitors.visitor_id", ondelete="SET NULL"))
    experience_id = Column(Id, ForeignKey("experiences.experience_id", ondelete="SET NULL"))
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    day = Column(Integer, nullable=False, default=1)
    description = Column(String(500), nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    visitor = relationship("Visitor", back_populates="itineraries")
    experience = relationship("Experience", back_populates="itineraries")

class FriendInvitation(Base):
    __tablename__ = "friend_invitations"

    invitation_id = Column(Id, primary_key=True, index=True)
    visitor_id = Column(Id, ForeignKey("visitors.visitor_id", ondelete="SET NULL"))
    receiver_id = Column(Id, ForeignKey("visitors.visitor_id", ondelete="SET NULL"))
    receiver_email = Column(String(100), nullable=False)
    experience_detail_id = Column(Id, ForeignKey("experience_details.experience_detail_id", ondelete="SET NULL"))
    message = Column(String(500))
    status = Column(String(20), nullable=False, default="Pending")
    token = Column(String(64), unique=True, nullable=False)
    sent_at = Column(DateTime(timezone=True), server_default=func.now())
    accepted_at = Column(DateTime(timezone=True))
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    sender = relationship("Visitor", back_populates="sent_invitations", foreign_keys=[visitor_id])
    receiver = relationship("Visitor", back_populates="received_invitations", foreign_keys=[receiver_id])
    experience_detail = relationship("ExperienceDetail", back_populates="invitations")
