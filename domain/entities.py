"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Optional, List

from domain.enums import (
    BookingStatus, PaymentStatus, ListingStatus, PropertyType, RoomType,
    ACTIVE_BOOKING_STATUSES, BOOKING_STATUS_TRANSITIONS
)
from domain.exceptions import DomainValidationError
from domain.value_objects import DateRange, Money, RateStructure, Location


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Listing(BaseModel):
    """Listing Aggregate Root Entity"""

    # Identity
    listing_id: UUID = Field(default_factory=uuid4)
    host_id: UUID

    # Description
    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=20, max_length=2000)
    location: Location
    property_type: PropertyType
    room_type: RoomType
    amenities: List[str] = []
    images: List[str] = []

    # Value Objects
    price: RateStructure

    # Capacity
    max_guests: int = Field(ge=1)
    bedrooms: int = Field(ge=0)
    beds: int = Field(ge=1)
    bathrooms: int = Field(ge=1)

    # Blocked (booked) windows, appended as bookings are made
    availability: List[DateRange] = []

    status: ListingStatus = ListingStatus.ACTIVE
    average_rating: float = Field(ge=0, le=5, default=0)

    # Metadata
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    version: int = 1

    class Config:
        from_attributes = True
        validate_assignment = True

    # ==================== OWNERSHIP ====================
    def is_hosted_by(self, user_id: UUID) -> bool:
        return self.host_id == user_id

    # ==================== AVAILABILITY METHODS ====================
    def block_dates(self, date_range: DateRange) -> None:
        """Record a booked window"""
        self.availability = self.availability + [date_range]
        self._touch()

    def release_dates(self, date_range: DateRange) -> bool:
        """Remove the first blocked window with exactly these dates"""
        for index, window in enumerate(self.availability):
            if window.same_dates(date_range):
                self.availability = self.availability[:index] + self.availability[index + 1:]
                self._touch()
                return True
        return False

    def is_blocked(self, date_range: DateRange) -> bool:
        """Check whether any blocked window overlaps the range"""
        return any(window.overlaps(date_range) for window in self.availability)

    # ==================== MODIFICATION METHODS ====================
    def update_details(self, **changes) -> None:
        """Apply host edits; identity and blocked windows are not editable here"""
        protected = {"listing_id", "host_id", "availability", "created_at", "version"}
        for field_name, value in changes.items():
            if field_name in protected:
                raise DomainValidationError(f"Field '{field_name}' cannot be updated")
            if field_name not in type(self).model_fields:
                raise DomainValidationError(f"Unknown listing field '{field_name}'")
            setattr(self, field_name, value)
        self._touch()

    def _touch(self) -> None:
        self.updated_at = _utcnow()
        self.version += 1


class Booking(BaseModel):
    """Booking Aggregate Root Entity"""

    # Identity
    booking_id: UUID = Field(default_factory=uuid4)

    # References; host_id is copied from the listing at creation
    listing_id: UUID
    guest_id: UUID
    host_id: UUID

    # Value Objects
    date_range: DateRange
    guests: int = Field(ge=1)
    total_price: Money

    # Enums/Status
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_intent_id: Optional[str] = None

    # Metadata
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        listing: Listing,
        guest_id: UUID,
        date_range: DateRange,
        guests: int,
        total_price: Money
    ) -> "Booking":
        """Create new booking against a listing with validation"""
        if guests < 1:
            raise DomainValidationError("At least 1 guest is required")
        if guests > listing.max_guests:
            raise DomainValidationError("Number of guests exceeds maximum allowed")

        return Booking(
            listing_id=listing.listing_id,
            guest_id=guest_id,
            host_id=listing.host_id,
            date_range=date_range,
            guests=guests,
            total_price=total_price,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING
        )

    # ==================== STATE TRANSITION METHODS ====================
    def transition_to(self, new_status: BookingStatus) -> BookingStatus:
        """Move to a new status; returns the previous one"""
        allowed = BOOKING_STATUS_TRANSITIONS[self.status]
        if new_status not in allowed:
            raise DomainValidationError(
                f"Cannot change booking status from {self.status.value} to {new_status.value}"
            )

        previous = self.status
        self.status = new_status
        if new_status == BookingStatus.CANCELLED and self.payment_status == PaymentStatus.PAID:
            self.payment_status = PaymentStatus.REFUNDED

        self._touch()
        return previous

    def record_payment(self, payment_intent_id: str) -> None:
        """Mark the booking as paid (simulated, no settlement)"""
        if not self.is_active():
            raise DomainValidationError(
                f"Cannot pay for booking with status {self.status.value}"
            )
        if self.payment_status != PaymentStatus.PENDING:
            raise DomainValidationError(
                f"Payment already {self.payment_status.value}"
            )

        self.payment_status = PaymentStatus.PAID
        self.payment_intent_id = payment_intent_id
        self._touch()

    # ==================== QUERY METHODS ====================
    def is_active(self) -> bool:
        """Active bookings hold their dates"""
        return self.status in ACTIVE_BOOKING_STATUSES

    def involves(self, user_id: UUID) -> bool:
        return user_id in (self.guest_id, self.host_id)

    def nights(self) -> int:
        return self.date_range.nights()

    def _touch(self) -> None:
        self.modified_at = _utcnow()
        self.version += 1
