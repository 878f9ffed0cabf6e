"""API Schemas - Request and Response DTOs"""
import re
from pydantic import BaseModel, Field, EmailStr, validator
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.enums import BookingStatus, PaymentStatus, ListingStatus, PropertyType, RoomType, UserRole

_IMAGE_URL = re.compile(r"^https?://.+")


def _check_image_urls(images):
    for url in images or []:
        if not _IMAGE_URL.match(url):
            raise ValueError("Image URL must be a valid URL")
    return images


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    user_id: Optional[str] = None


class RegisterRequest(BaseModel):
    """Register request DTO"""
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone_number: Optional[str] = None


class LoginRequest(BaseModel):
    """Login request DTO"""
    email: EmailStr
    password: str


class UpdateProfileRequest(BaseModel):
    """Update profile request DTO"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    role: UserRole
    disabled: bool = False
    created_at: datetime


class AuthResponse(BaseModel):
    """Login/register response DTO"""
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


# ============================================================================
# LISTING SCHEMAS
# ============================================================================

class LocationSchema(BaseModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: str = Field(min_length=1)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)


class PriceSchema(BaseModel):
    base: Decimal = Field(ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    cleaning_fee: Decimal = Field(ge=0, default=Decimal("0"))
    service_fee: Decimal = Field(ge=0, default=Decimal("0"))


class CreateListingRequest(BaseModel):
    """Create listing request DTO"""
    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=20, max_length=2000)
    location: LocationSchema
    price: PriceSchema
    property_type: PropertyType
    room_type: RoomType
    amenities: List[str] = []
    images: List[str] = []
    max_guests: int = Field(ge=1)
    bedrooms: int = Field(ge=0)
    beds: int = Field(ge=1)
    bathrooms: int = Field(ge=1)
    status: ListingStatus = ListingStatus.ACTIVE

    @validator('images')
    def images_must_be_urls(cls, v):
        return _check_image_urls(v)


class UpdateListingRequest(BaseModel):
    """Update listing request DTO; omitted fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=5, max_length=100)
    description: Optional[str] = Field(None, min_length=20, max_length=2000)
    location: Optional[LocationSchema] = None
    price: Optional[PriceSchema] = None
    property_type: Optional[PropertyType] = None
    room_type: Optional[RoomType] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    max_guests: Optional[int] = Field(None, ge=1)
    bedrooms: Optional[int] = Field(None, ge=0)
    beds: Optional[int] = Field(None, ge=1)
    bathrooms: Optional[int] = Field(None, ge=1)
    status: Optional[ListingStatus] = None

    @validator('images')
    def images_must_be_urls(cls, v):
        return _check_image_urls(v)


class DateRangeResponse(BaseModel):
    check_in: date
    check_out: date


class ListingResponse(BaseModel):
    """Listing response DTO"""
    listing_id: UUID
    host_id: UUID
    title: str
    description: str
    location: LocationSchema
    price: PriceSchema
    property_type: str
    room_type: str
    amenities: List[str]
    images: List[str]
    max_guests: int
    bedrooms: int
    beds: int
    bathrooms: int
    availability: List[DateRangeResponse]
    status: str
    average_rating: float
    created_at: datetime
    updated_at: datetime


class ListingPageResponse(BaseModel):
    """Paged listing search response DTO"""
    listings: List[ListingResponse]
    current_page: int
    total_pages: int
    total_listings: int


class PriceQuoteResponse(BaseModel):
    """Price preview response DTO"""
    check_in: date
    check_out: date
    nights: int
    nightly_rate: Decimal
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    total_price: Decimal
    currency: str


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class CreateBookingRequest(BaseModel):
    """Create booking request DTO"""
    listing_id: UUID
    check_in: date
    check_out: date
    guests: int = Field(ge=1)


class UpdateBookingStatusRequest(BaseModel):
    """Update booking status request DTO"""
    status: BookingStatus


class BookingResponse(BaseModel):
    """Booking response DTO"""
    booking_id: UUID
    listing_id: UUID
    guest_id: UUID
    host_id: UUID
    check_in: date
    check_out: date
    nights: int
    guests: int
    total_price: Decimal
    currency: str
    status: BookingStatus
    payment_status: PaymentStatus
    payment_intent_id: Optional[str] = None
    created_at: datetime
    modified_at: datetime
    version: int


class MessageResponse(BaseModel):
    message: str
