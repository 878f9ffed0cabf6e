"""In-Memory Repository Implementations"""
from typing import Optional, List, Dict, Tuple, Iterable, TypeVar
from uuid import UUID

from application.queries import ListingQuery
from domain.auth import UserInDB
from domain.entities import Listing, Booking
from domain.enums import BookingStatus
from domain.repositories import ListingRepository, BookingRepository, UserRepository
from domain.value_objects import DateRange

T = TypeVar("T")


def _newest_first(items: List[T]) -> List[T]:
    # reversed() first so that equal timestamps keep the later insert on top
    return sorted(reversed(items), key=lambda item: item.created_at, reverse=True)


class InMemoryListingRepository(ListingRepository):
    """In-memory implementation of ListingRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Listing] = {}

    async def save(self, listing: Listing) -> Listing:
        """Save listing to memory"""
        self._storage[listing.listing_id] = listing
        return listing

    async def find_by_id(self, listing_id: UUID) -> Optional[Listing]:
        """Find listing by ID"""
        return self._storage.get(listing_id)

    async def find_by_host_id(self, host_id: UUID) -> List[Listing]:
        """Find listings owned by a host"""
        return _newest_first([l for l in self._storage.values() if l.host_id == host_id])

    async def search(self, query: ListingQuery) -> Tuple[List[Listing], int]:
        """Filter, sort newest first, then slice one page"""
        matches = _newest_first([l for l in self._storage.values() if query.matches(l)])
        page = matches[query.offset:query.offset + query.limit]
        return page, len(matches)

    async def update(self, listing: Listing) -> Listing:
        """Update listing"""
        if listing.listing_id in self._storage:
            self._storage[listing.listing_id] = listing
            return listing
        raise ValueError("Listing not found")

    async def delete(self, listing_id: UUID) -> bool:
        """Delete listing"""
        if listing_id in self._storage:
            del self._storage[listing_id]
            return True
        return False


class InMemoryBookingRepository(BookingRepository):
    """In-memory implementation of BookingRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Booking] = {}

    async def save(self, booking: Booking) -> Booking:
        """Save booking to memory"""
        self._storage[booking.booking_id] = booking
        return booking

    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        """Find booking by ID"""
        return self._storage.get(booking_id)

    async def find_overlapping(
        self,
        listing_id: UUID,
        date_range: DateRange,
        statuses: Iterable[BookingStatus]
    ) -> List[Booking]:
        """Find bookings in the given statuses whose dates overlap"""
        statuses = set(statuses)
        return [
            b for b in self._storage.values()
            if b.listing_id == listing_id
            and b.status in statuses
            and b.date_range.overlaps(date_range)
        ]

    async def find_by_guest_id(self, guest_id: UUID) -> List[Booking]:
        """Find bookings by guest ID"""
        return _newest_first([b for b in self._storage.values() if b.guest_id == guest_id])

    async def find_by_host_id(self, host_id: UUID) -> List[Booking]:
        """Find bookings by host ID"""
        return _newest_first([b for b in self._storage.values() if b.host_id == host_id])

    async def update(self, booking: Booking) -> Booking:
        """Update booking"""
        if booking.booking_id in self._storage:
            self._storage[booking.booking_id] = booking
            return booking
        raise ValueError("Booking not found")

    async def delete(self, booking_id: UUID) -> bool:
        """Delete booking"""
        if booking_id in self._storage:
            del self._storage[booking_id]
            return True
        return False


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository"""

    def __init__(self):
        self._storage: Dict[UUID, UserInDB] = {}

    async def save(self, user: UserInDB) -> UserInDB:
        """Save user to memory"""
        self._storage[user.user_id] = user
        return user

    async def find_by_id(self, user_id: UUID) -> Optional[UserInDB]:
        """Find user by ID"""
        return self._storage.get(user_id)

    async def find_by_email(self, email: str) -> Optional[UserInDB]:
        """Find user by email"""
        email = email.lower()
        for user in self._storage.values():
            if user.email.lower() == email:
                return user
        return None

    async def update(self, user: UserInDB) -> UserInDB:
        """Update user"""
        if user.user_id in self._storage:
            self._storage[user.user_id] = user
            return user
        raise ValueError("User not found")
