"""SQLAlchemy database models for users, properties, and interactions."""
import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Float, Text, Date, JSON,
    Boolean, ForeignKey, DateTime, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship, validates

from database import Base


def utcnow():
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    TENANT = "tenant"
    OWNER = "owner"
    ADMIN = "admin"


class KycStatus(str, enum.Enum):
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class PropertyType(str, enum.Enum):
    APARTMENT = "apartment"
    INDEPENDENT_HOUSE = "independent_house"
    PG = "pg"
    STUDIO = "studio"
    SHARED_FLAT = "shared_flat"


class Furnishing(str, enum.Enum):
    UNFURNISHED = "unfurnished"
    SEMI_FURNISHED = "semi_furnished"
    FULLY_FURNISHED = "fully_furnished"


class AllowedTenants(str, enum.Enum):
    FAMILY = "family"
    BACHELORS = "bachelors"
    STUDENTS = "students"
    ANY = "any"


class PropertyStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    RENTED_OUT = "rented_out"


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"


class VisitRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FrozenLinkMixin:
    """Reference columns guarded by `_check_frozen` may be set once, never reassigned."""

    def _check_frozen(self, key, value):
        current = getattr(self, key)
        if current is not None and current != value:
            raise ValueError(f"{key} is fixed at creation")
        return value


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String(10), nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, default=UserRole.TENANT.value, nullable=False)
    is_email_verified = Column(Boolean, default=False)
    kyc_status = Column(String, default=KycStatus.NOT_SUBMITTED.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    properties = relationship("Property", back_populates="owner")
    favorites = relationship("Favorite", back_populates="tenant")
    reviews_given = relationship("Review", back_populates="reviewer", foreign_keys="Review.reviewer_id")

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower()


class Property(FrozenLinkMixin, Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    property_type = Column(String, nullable=False, index=True)
    bhk = Column(Integer, nullable=False, index=True)
    furnishing = Column(String, nullable=False)
    rent = Column(Float, nullable=False, index=True)
    security_deposit = Column(Float, nullable=False)
    maintenance_amount = Column(Float, default=0)
    maintenance_included = Column(Boolean, default=False)
    built_up_area = Column(Float, nullable=False)
    available_from = Column(Date, nullable=False)
    min_lock_in_period_months = Column(Integer, default=0)
    allowed_tenants = Column(String, default=AllowedTenants.ANY.value)
    pets_allowed = Column(Boolean, default=False)
    smoking_allowed = Column(Boolean, default=False)
    city = Column(String, nullable=False)
    area = Column(String, nullable=False)
    landmark = Column(String)
    pincode = Column(String(6), nullable=False)
    lat = Column(Float)
    lng = Column(Float)
    amenities = Column(JSON, default=list)
    is_verified = Column(Boolean, default=False)
    status = Column(String, default=PropertyStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    owner = relationship("User", back_populates="properties")
    images = relationship("PropertyImage", back_populates="property", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="property")

    __table_args__ = (
        Index("ix_properties_city_area", "city", "area"),
    )

    @validates("owner_id")
    def _freeze_owner(self, key, value):
        return self._check_frozen(key, value)

    @property
    def location(self):
        if self.city is None:
            return None
        geo = None
        if self.lat is not None and self.lng is not None:
            geo = {"lat": self.lat, "lng": self.lng}
        return {
            "city": self.city,
            "area": self.area,
            "landmark": self.landmark,
            "pincode": self.pincode,
            "geo": geo,
        }

    @location.setter
    def location(self, value):
        geo = value.get("geo") or {}
        self.city = value["city"]
        self.area = value["area"]
        self.landmark = value.get("landmark")
        self.pincode = value["pincode"]
        self.lat = geo.get("lat")
        self.lng = geo.get("lng")

    @property
    def maintenance(self):
        return {"amount": self.maintenance_amount or 0, "included": bool(self.maintenance_included)}

    @maintenance.setter
    def maintenance(self, value):
        self.maintenance_amount = value.get("amount", 0)
        self.maintenance_included = value.get("included", False)


class PropertyImage(Base):
    __tablename__ = "property_images"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"))
    url = Column(String)

    property = relationship("Property", back_populates="images")


class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    tenant = relationship("User", back_populates="favorites")
    property = relationship("Property")

    __table_args__ = (
        UniqueConstraint("tenant_id", "property_id", name="_tenant_property_favorite_uc"),
    )


class RentalApplication(FrozenLinkMixin, Base):
    """A tenant's application to rent a property.

    ``owner_id`` is a snapshot of the property's owner when the application was
    submitted. Property, tenant and owner links cannot be reassigned.
    """
    __tablename__ = "rental_applications"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    monthly_rent_offered = Column(Float)
    move_in_date = Column(Date, nullable=False)
    status = Column(String, default=ApplicationStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    property = relationship("Property")
    tenant = relationship("User", foreign_keys=[tenant_id])
    owner = relationship("User", foreign_keys=[owner_id])

    __table_args__ = (
        Index("ix_applications_property_tenant", "property_id", "tenant_id"),
        Index("ix_applications_owner_status", "owner_id", "status"),
        Index("ix_applications_tenant_status", "tenant_id", "status"),
    )

    @validates("property_id", "tenant_id", "owner_id")
    def _freeze_links(self, key, value):
        return self._check_frozen(key, value)


class VisitRequest(FrozenLinkMixin, Base):
    """A tenant's request to visit a property; ``owner_id`` is a creation-time snapshot."""
    __tablename__ = "visit_requests"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    preferred_date_time = Column(DateTime, nullable=False)
    notes = Column(String(500))
    status = Column(String, default=VisitRequestStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    property = relationship("Property")
    tenant = relationship("User", foreign_keys=[tenant_id])
    owner = relationship("User", foreign_keys=[owner_id])

    __table_args__ = (
        Index("ix_visits_property_tenant", "property_id", "tenant_id"),
        Index("ix_visits_owner_status", "owner_id", "status"),
        Index("ix_visits_tenant_status", "tenant_id", "status"),
    )

    @validates("property_id", "tenant_id", "owner_id")
    def _freeze_links(self, key, value):
        return self._check_frozen(key, value)


class Conversation(FrozenLinkMixin, Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    starter_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    last_message = Column(Text, default="")
    last_message_at = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, index=True)

    @property
    def participant_ids(self):
        return {self.starter_id, self.recipient_id}

    @property
    def participants(self):
        return [self.starter, self.recipient]

    property = relationship("Property")
    starter = relationship("User", foreign_keys=[starter_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
    messages = relationship("Message", back_populates="conversation", order_by="Message.created_at")

    @validates("property_id", "starter_id", "recipient_id")
    def _freeze_links(self, key, value):
        return self._check_frozen(key, value)


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User")

    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
    )


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id"))
    user_id = Column(Integer, ForeignKey("users.id"))
    rating = Column(Integer, nullable=False)  # 1 to 5
    comment = Column(String(500))
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    reviewer = relationship("User", back_populates="reviews_given", foreign_keys=[reviewer_id])
    property = relationship("Property", back_populates="reviews")
    user = relationship("User", foreign_keys=[user_id])

    # NULL targets never collide, so each pair is unique only where it is set
    __table_args__ = (
        UniqueConstraint("reviewer_id", "property_id", name="_reviewer_property_uc"),
        UniqueConstraint("reviewer_id", "user_id", name="_reviewer_user_uc"),
    )
