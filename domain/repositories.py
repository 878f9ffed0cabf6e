"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List, Tuple, Iterable, TYPE_CHECKING
from uuid import UUID

from domain.auth import UserInDB
from domain.entities import Listing, Booking
from domain.enums import BookingStatus
from domain.value_objects import DateRange

if TYPE_CHECKING:
    from application.queries import ListingQuery


class ListingRepository(ABC):
    """Repository interface for Listing Aggregate"""

    @abstractmethod
    async def save(self, listing: Listing) -> Listing:
        """Save listing"""
        pass

    @abstractmethod
    async def find_by_id(self, listing_id: UUID) -> Optional[Listing]:
        """Find listing by ID"""
        pass

    @abstractmethod
    async def find_by_host_id(self, host_id: UUID) -> List[Listing]:
        """Find listings owned by a host, newest first"""
        pass

    @abstractmethod
    async def search(self, query: "ListingQuery") -> Tuple[List[Listing], int]:
        """Return one page of matching listings and the total match count"""
        pass

    @abstractmethod
    async def update(self, listing: Listing) -> Listing:
        """Update listing"""
        pass

    @abstractmethod
    async def delete(self, listing_id: UUID) -> bool:
        """Delete listing"""
        pass


class BookingRepository(ABC):
    """Repository interface for Booking Aggregate"""

    @abstractmethod
    async def save(self, booking: Booking) -> Booking:
        """Save booking"""
        pass

    @abstractmethod
    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        """Find booking by ID"""
        pass

    @abstractmethod
    async def find_overlapping(
        self,
        listing_id: UUID,
        date_range: DateRange,
        statuses: Iterable[BookingStatus]
    ) -> List[Booking]:
        """Find bookings on a listing in the given statuses whose dates overlap"""
        pass

    @abstractmethod
    async def find_by_guest_id(self, guest_id: UUID) -> List[Booking]:
        """Find bookings made by a guest, newest first"""
        pass

    @abstractmethod
    async def find_by_host_id(self, host_id: UUID) -> List[Booking]:
        """Find bookings hosted by a user, newest first"""
        pass

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        """Update booking"""
        pass

    @abstractmethod
    async def delete(self, booking_id: UUID) -> bool:
        """Delete booking"""
        pass


class UserRepository(ABC):
    """Repository interface for users"""

    @abstractmethod
    async def save(self, user: UserInDB) -> UserInDB:
        """Save user"""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[UserInDB]:
        """Find user by ID"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserInDB]:
        """Find user by email (case-insensitive)"""
        pass

    @abstractmethod
    async def update(self, user: UserInDB) -> UserInDB:
        """Update user"""
        pass
