"""Pydantic schemas for data validation and serialization."""
from datetime import date, datetime, timezone
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator, model_validator

from models import AllowedTenants, Furnishing, KycStatus, PropertyStatus, PropertyType, UserRole

PHONE_PATTERN = r"^[0-9]{10}$"
PINCODE_PATTERN = r"^[0-9]{6}$"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_image_urls(urls):
    for url in urls or []:
        if not url.startswith(("http://", "https://", "/")):
            raise ValueError("Each image must be a valid URL")
    return urls


# Users & auth

class UserBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, max_length=72)
    role: Literal["tenant", "owner"] = UserRole.TENANT.value


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    is_email_verified: Optional[bool] = False
    kyc_status: Optional[str] = KycStatus.NOT_SUBMITTED.value
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)


class RoleConversion(BaseModel):
    confirm_role: Literal["owner"]


# Properties

class GeoPoint(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    city: str = Field(..., min_length=1)
    area: str = Field(..., min_length=1)
    landmark: Optional[str] = None
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    geo: Optional[GeoPoint] = None


class Maintenance(BaseModel):
    amount: float = Field(0, ge=0)
    included: bool = False


class ImageResponse(BaseModel):
    url: str

    model_config = ConfigDict(from_attributes=True)


class PropertyCreate(BaseModel):
    title: str = Field(..., min_length=10, max_length=200)
    description: str = Field(..., min_length=50, max_length=2000)
    property_type: PropertyType
    bhk: int = Field(..., ge=1, le=10)
    furnishing: Furnishing
    rent: float = Field(..., ge=1000)
    security_deposit: float = Field(..., ge=0)
    maintenance: Maintenance = Field(default_factory=Maintenance)
    built_up_area: float = Field(..., ge=50)
    available_from: date
    min_lock_in_period_months: int = Field(0, ge=0, le=36)
    allowed_tenants: AllowedTenants = AllowedTenants.ANY
    pets_allowed: bool = False
    smoking_allowed: bool = False
    location: Location
    amenities: List[str] = []
    images: List[str] = []

    @field_validator("images")
    @classmethod
    def images_are_urls(cls, urls):
        return _check_image_urls(urls)


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=10, max_length=200)
    description: Optional[str] = Field(None, min_length=50, max_length=2000)
    property_type: Optional[PropertyType] = None
    bhk: Optional[int] = Field(None, ge=1, le=10)
    furnishing: Optional[Furnishing] = None
    rent: Optional[float] = Field(None, ge=1000)
    security_deposit: Optional[float] = Field(None, ge=0)
    maintenance: Optional[Maintenance] = None
    built_up_area: Optional[float] = Field(None, ge=50)
    available_from: Optional[date] = None
    min_lock_in_period_months: Optional[int] = Field(None, ge=0, le=36)
    allowed_tenants: Optional[AllowedTenants] = None
    pets_allowed: Optional[bool] = None
    smoking_allowed: Optional[bool] = None
    location: Optional[Location] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    status: Optional[PropertyStatus] = None

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return data

    @field_validator("images")
    @classmethod
    def images_are_urls(cls, urls):
        return _check_image_urls(urls)


class PropertyResponse(BaseModel):
    id: int
    owner_id: int
    owner: Optional[UserSummary] = None
    title: str
    description: Optional[str] = None
    property_type: Optional[str] = None
    bhk: Optional[int] = None
    furnishing: Optional[str] = None
    rent: Optional[float] = None
    security_deposit: Optional[float] = None
    maintenance: Optional[Maintenance] = None
    built_up_area: Optional[float] = None
    available_from: Optional[date] = None
    min_lock_in_period_months: Optional[int] = None
    allowed_tenants: Optional[str] = None
    pets_allowed: Optional[bool] = None
    smoking_allowed: Optional[bool] = None
    location: Optional[Location] = None
    amenities: Optional[List[str]] = None
    images: List[ImageResponse] = []
    is_verified: Optional[bool] = None
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PropertySummary(BaseModel):
    id: int
    title: str
    rent: Optional[float] = None
    location: Optional[Location] = None

    model_config = ConfigDict(from_attributes=True)


class PropertyPage(BaseModel):
    items: List[PropertyResponse]
    page: int
    limit: int
    total_items: int
    total_pages: int


# Favorites

class FavoriteResponse(BaseModel):
    id: int
    tenant_id: int
    property_id: int
    property: Optional[PropertyResponse] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Rental applications

class ApplicationCreate(BaseModel):
    message: str = Field(..., min_length=20, max_length=1000)
    monthly_rent_offered: Optional[float] = Field(None, ge=0)
    move_in_date: date

    @field_validator("message")
    @classmethod
    def strip_message(cls, value):
        value = value.strip()
        if len(value) < 20:
            raise ValueError("Message must be at least 20 characters")
        return value

    @field_validator("move_in_date")
    @classmethod
    def move_in_not_past(cls, value):
        if value < datetime.now(timezone.utc).date():
            raise ValueError("Move-in date must be today or in the future")
        return value


class ApplicationStatusUpdate(BaseModel):
    status: Literal["shortlisted", "rejected", "accepted", "cancelled"]


class ApplicationResponse(BaseModel):
    id: int
    property_id: int
    tenant_id: int
    owner_id: int
    property: Optional[PropertySummary] = None
    tenant: Optional[UserSummary] = None
    owner: Optional[UserSummary] = None
    message: str
    monthly_rent_offered: Optional[float] = None
    move_in_date: date
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Visit requests

class VisitRequestCreate(BaseModel):
    preferred_date_time: datetime
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("preferred_date_time")
    @classmethod
    def visit_in_future(cls, value):
        value = _as_utc(value)
        if value <= datetime.now(timezone.utc):
            raise ValueError("Preferred date must be in the future")
        return value


class VisitRequestStatusUpdate(BaseModel):
    status: Literal["accepted", "rejected", "completed", "cancelled"]


class VisitRequestResponse(BaseModel):
    id: int
    property_id: int
    tenant_id: int
    owner_id: int
    property: Optional[PropertySummary] = None
    tenant: Optional[UserSummary] = None
    owner: Optional[UserSummary] = None
    preferred_date_time: datetime
    notes: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Chat

class ConversationCreate(BaseModel):
    property_id: int
    owner_id: int


class ConversationResponse(BaseModel):
    id: int
    property_id: int
    property: Optional[PropertySummary] = None
    participants: List[UserSummary] = []
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("Message cannot be empty")
        return value


class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    sender_id: int
    sender: Optional[UserSummary] = None
    content: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Reviews

class ReviewCreate(BaseModel):
    property_id: Optional[int] = None
    user_id: Optional[int] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def exactly_one_target(self):
        if (self.property_id is None) == (self.user_id is None):
            raise ValueError("Must review either a property or a user")
        return self


class ReviewResponse(BaseModel):
    id: int
    reviewer_id: int
    reviewer: Optional[UserSummary] = None
    property_id: Optional[int] = None
    user_id: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Admin

class KycUpdate(BaseModel):
    kyc_status: KycStatus
