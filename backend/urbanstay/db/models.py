# urbanstay/db/models.py

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Text,
    ForeignKey,
    Numeric,
    Boolean,
    JSON,
    Table,
    UniqueConstraint,
    Index,
)
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

from urbanstay.db.base import Base
from urbanstay.services import booking_workflow


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


user_favorites = Table(
    "user_favorites",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(10), nullable=True)

    # DB column name: password_hash
    hashed_password = Column("password_hash", String(255), nullable=False)

    avatar = Column(String(500), nullable=False, default="")

    # "user" | "seller" | "admin"
    role = Column(String(20), nullable=False, default="user")
    is_verified = Column(Boolean, nullable=False, default=False)

    bio = Column(String(500), nullable=True)
    company_name = Column(String(255), nullable=True)
    rera_number = Column(String(100), nullable=True)

    # password reset code, stored hashed like the password
    otp_hash = Column(String(255), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)

    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    properties = relationship(
        "Property",
        back_populates="owner",
        foreign_keys="Property.owner_id",
        passive_deletes=True,
    )

    favorites = relationship(
        "Property",
        secondary=user_favorites,
        passive_deletes=True,
    )

    refresh_tokens = relationship(
        "UserRefreshToken",
        back_populates="user",
        cascade="all,delete-orphan",
        passive_deletes=True,
    )


class PropertyAmenity(Base):
    __tablename__ = "property_amenities"
    __table_args__ = (UniqueConstraint("property_id", "name", name="uq_property_amenity"),)

    id = Column(Integer, primary_key=True)
    property_id = Column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False, index=True)

    def __init__(self, name: str, **kwargs):
        super().__init__(name=name, **kwargs)


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)

    owner_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)
    slug = Column(String(300), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)

    # "sale" | "rent"
    listing_type = Column(String(20), nullable=False, index=True)
    # "apartment" | "house" | "villa" | "plot" | "commercial" | "pg"
    property_type = Column(String(20), nullable=False, index=True)
    price = Column(Numeric(14, 2, asdecimal=False), nullable=False, index=True)

    # Location
    address = Column(String(255), nullable=True)
    locality = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=True)
    pincode = Column(String(10), nullable=True)

    # Specifications
    bedrooms = Column(Integer, nullable=True, index=True)
    bathrooms = Column(Integer, nullable=True)
    carpet_area = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    furnishing = Column(String(20), nullable=True)

    # list[str] / list[{url, caption, is_primary}] as JSON
    highlights = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)

    # "available" | "pending" | "sold" | "rented"
    status = Column(String(20), nullable=False, default="available", index=True)

    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    featured_until = Column(DateTime, nullable=True)

    is_verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime, nullable=True)
    verified_by_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    views = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    owner = relationship(
        "User",
        back_populates="properties",
        foreign_keys=[owner_id],
        lazy="selectin",
    )

    amenity_links = relationship(
        "PropertyAmenity",
        cascade="all,delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="PropertyAmenity.id",
    )
    amenities = association_proxy("amenity_links", "name")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_property_buyer", "property_id", "buyer_id"),
        Index("ix_bookings_buyer_status", "buyer_id", "status"),
        Index("ix_bookings_seller_status", "seller_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)

    property_id = Column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    buyer_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # owner of the property when the booking was made; never refreshed
    seller_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # "visit" | "purchase" | "rent"
    booking_type = Column(String(20), nullable=False)
    # "pending" | "confirmed" | "cancelled" | "completed"
    status = Column(String(20), nullable=False, default="pending", index=True)

    visit_date = Column(Date, nullable=False)
    visit_time = Column(String(50), nullable=False)

    price_negotiated = Column(Numeric(14, 2, asdecimal=False), nullable=True)

    buyer_message = Column(String(500), nullable=False, default="")
    seller_confirmation_note = Column(String(500), nullable=True)

    seller_confirmed_at = Column(DateTime, nullable=True)
    buyer_confirmed_at = Column(DateTime, nullable=True)
    confirmation_token = Column(String(64), unique=True, nullable=False)

    # "<property_id>:<buyer_id>" while pending, NULL afterwards.
    # Unique, so a second pending booking for the pair cannot be inserted.
    pending_key = Column(String(50), unique=True, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def state(self):
        return booking_workflow.state_of(self.status, self.buyer_confirmed_at)

    @property
    def stage(self) -> str:
        return self.state.stage

    # keep below state and stage: it shadows the builtin ``property`` in this class body
    property = relationship("Property", lazy="selectin")
    buyer = relationship("User", foreign_keys=[buyer_id], lazy="selectin")
    seller = relationship("User", foreign_keys=[seller_id], lazy="selectin")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(64), nullable=False, index=True)

    property_id = Column(
        Integer,
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    seller_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(20), nullable=False, default="captured")
    method = Column(String(20), nullable=False, default="mock")
    plan = Column(String(100), nullable=False)
    featured_until = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    property = relationship("Property", lazy="selectin")
    seller = relationship("User", lazy="selectin")


class Inquiry(Base):
    __tablename__ = "inquiries"
    __table_args__ = (
        Index("ix_inquiries_property_sender", "property_id", "sender_id"),
        Index("ix_inquiries_receiver_status", "receiver_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)

    property_id = Column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    receiver_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    message = Column(String(1000), nullable=False)
    inquiry_type = Column(String(30), nullable=False, default="general")

    preferred_visit_date = Column(Date, nullable=True)
    preferred_visit_time = Column(String(50), nullable=True)

    status = Column(String(20), nullable=False, default="pending")

    # contact overrides
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    property = relationship("Property", lazy="selectin")
    sender = relationship("User", foreign_keys=[sender_id], lazy="selectin")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="selectin")
    responses = relationship(
        "InquiryResponse",
        back_populates="inquiry",
        cascade="all,delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="InquiryResponse.id",
    )


class InquiryResponse(Base):
    __tablename__ = "inquiry_responses"

    id = Column(Integer, primary_key=True)
    inquiry_id = Column(
        Integer,
        ForeignKey("inquiries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    responder_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    message = Column(String(1000), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    inquiry = relationship("Inquiry", back_populates="responses")
    responder = relationship("User", lazy="selectin")


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("property_id", "user_id", name="uq_review_property_user"),)

    id = Column(Integer, primary_key=True, index=True)

    property_id = Column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    rating = Column(Integer, nullable=False)
    title = Column(String(100), nullable=True)
    comment = Column(String(2000), nullable=False)
    # {"location": 4, "value": 5, ...}
    ratings = Column(JSON, nullable=False, default=dict)
    pros = Column(JSON, nullable=False, default=list)
    cons = Column(JSON, nullable=False, default=list)

    # "pending" | "approved" | "rejected"
    status = Column(String(20), nullable=False, default="pending", index=True)
    rejection_reason = Column(String(500), nullable=True)

    helpful_votes = Column(Integer, nullable=False, default=0)

    owner_response = Column(String(1000), nullable=True)
    owner_responded_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    property = relationship("Property", lazy="selectin")
    user = relationship("User", lazy="selectin")
    votes = relationship(
        "ReviewVote",
        cascade="all,delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )


class ReviewVote(Base):
    __tablename__ = "review_votes"
    __table_args__ = (UniqueConstraint("review_id", "user_id", name="uq_review_vote"),)

    id = Column(Integer, primary_key=True)
    review_id = Column(
        Integer,
        ForeignKey("reviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_helpful = Column(Boolean, nullable=False)


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)

    # criteria
    listing_type = Column(String(20), nullable=True)
    property_types = Column(JSON, nullable=False, default=list)
    cities = Column(JSON, nullable=False, default=list)
    min_price = Column(Numeric(14, 2, asdecimal=False), nullable=True)
    max_price = Column(Numeric(14, 2, asdecimal=False), nullable=True)
    min_bedrooms = Column(Integer, nullable=True)

    frequency = Column(String(20), nullable=False, default="daily")
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class UserRefreshToken(Base):
    __tablename__ = "user_refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    revoked = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="refresh_tokens")
