"""Domain Enums"""
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class PropertyType(str, Enum):
    HOUSE = "house"
    APARTMENT = "apartment"
    CONDO = "condo"
    VILLA = "villa"
    CABIN = "cabin"
    STUDIO = "studio"


class RoomType(str, Enum):
    ENTIRE = "entire"
    PRIVATE = "private"
    SHARED = "shared"


class UserRole(str, Enum):
    GUEST = "guest"
    HOST = "host"
    ADMIN = "admin"


# Bookings in these states hold their dates against new requests
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

BOOKING_STATUS_TRANSITIONS = {
    BookingStatus.PENDING: (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    BookingStatus.CONFIRMED: (BookingStatus.CANCELLED, BookingStatus.COMPLETED),
    BookingStatus.CANCELLED: (),
    BookingStatus.COMPLETED: (),
}
