"""Application Services - Business use cases"""
import logging
from uuid import UUID, uuid4
from datetime import date
from typing import List, Optional

from pydantic import ValidationError

from application.queries import ListingSearchFilters, ListingPage, build_listing_query
from domain.auth import User, UserInDB
from domain.entities import Listing, Booking
from domain.enums import BookingStatus, UserRole, ACTIVE_BOOKING_STATUSES
from domain.exceptions import (
    DomainValidationError, ConflictError, NotFoundError, AuthorizationError
)
from domain.repositories import ListingRepository, BookingRepository, UserRepository
from domain.services import PriceQuote, calculate_total_price, quote_stay
from domain.value_objects import DateRange
from infrastructure.locks import ListingLockRegistry
from infrastructure.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


def _validation_message(error: ValidationError) -> str:
    """First pydantic error message without the 'Value error, ' prefix"""
    message = error.errors()[0]["msg"]
    return message.replace("Value error, ", "", 1)


def build_date_range(check_in: date, check_out: date) -> DateRange:
    """Build a DateRange, reporting bad ranges as validation failures"""
    try:
        return DateRange(check_in=check_in, check_out=check_out)
    except ValidationError as e:
        raise DomainValidationError(_validation_message(e))


class AvailabilityService:
    """Decides whether a listing can take a new booking for a date range"""

    def __init__(self, booking_repository: BookingRepository):
        self.booking_repository = booking_repository

    async def find_conflicts(self, listing_id: UUID, date_range: DateRange) -> List[Booking]:
        """Pending or confirmed bookings whose dates overlap the range"""
        return await self.booking_repository.find_overlapping(
            listing_id, date_range, ACTIVE_BOOKING_STATUSES
        )

    async def is_available(self, listing_id: UUID, date_range: DateRange) -> bool:
        """Check if no active booking overlaps the range"""
        conflicts = await self.find_conflicts(listing_id, date_range)
        return not conflicts

    async def ensure_available(self, listing_id: UUID, date_range: DateRange) -> None:
        """Raise ConflictError if the range clashes with an active booking"""
        if not await self.is_available(listing_id, date_range):
            raise ConflictError("Listing is not available for these dates")


class BookingService:
    """Service for the booking lifecycle: create, status changes, delete, reads"""

    def __init__(self,
                 repository: BookingRepository,
                 listing_repository: ListingRepository,
                 availability_service: Optional[AvailabilityService] = None,
                 locks: Optional[ListingLockRegistry] = None):
        self.repository = repository
        self.listing_repository = listing_repository
        self.availability_service = availability_service or AvailabilityService(repository)
        self.locks = locks or ListingLockRegistry()

    async def create_booking(
        self,
        user: User,
        listing_id: UUID,
        check_in: date,
        check_out: date,
        guests: int
    ) -> Booking:
        """Create new booking with availability and capacity checks"""
        date_range = build_date_range(check_in, check_out)

        async with self.locks.for_listing(listing_id):
            listing = await self.listing_repository.find_by_id(listing_id)
            if not listing:
                raise NotFoundError("Listing not found")

            await self.availability_service.ensure_available(listing_id, date_range)

            total_price = calculate_total_price(listing.price, date_range.check_in, date_range.check_out)

            # Use aggregate factory method for creation with validation
            booking = Booking.create(
                listing=listing,
                guest_id=user.user_id,
                date_range=date_range,
                guests=guests,
                total_price=total_price
            )
            await self.repository.save(booking)

            blocked = listing.model_copy(deep=True)
            blocked.block_dates(date_range)
            try:
                await self.listing_repository.update(blocked)
            except Exception:
                logger.exception(
                    "Blocking dates failed for booking %s, removing it", booking.booking_id
                )
                await self.repository.delete(booking.booking_id)
                raise

        logger.info(
            "Booking %s created on listing %s for %s to %s (%s nights, %s %s)",
            booking.booking_id, listing_id, date_range.check_in, date_range.check_out,
            date_range.nights(), total_price.amount, total_price.currency
        )
        return booking

    async def get_booking(self, user: User, booking_id: UUID) -> Booking:
        """Get booking by ID; visible to its guest and host only"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if not booking.involves(user.user_id):
            raise AuthorizationError("Not authorized to view this booking")
        return booking

    async def list_guest_bookings(self, user: User) -> List[Booking]:
        """Get all bookings made by the user, newest first"""
        return await self.repository.find_by_guest_id(user.user_id)

    async def list_host_bookings(self, user: User) -> List[Booking]:
        """Get all bookings on the user's listings, newest first"""
        return await self.repository.find_by_host_id(user.user_id)

    async def update_status(
        self,
        user: User,
        booking_id: UUID,
        new_status: BookingStatus
    ) -> Booking:
        """Change booking status; cancelling frees the listing's blocked window"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if booking.host_id != user.user_id and not user.is_admin():
            raise AuthorizationError("Not authorized to update this booking")

        async with self.locks.for_listing(booking.listing_id):
            updated = booking.model_copy(deep=True)
            previous = updated.transition_to(new_status)

            listing_before = None
            if new_status == BookingStatus.CANCELLED:
                listing_before = await self._release_dates(updated)
            try:
                await self.repository.update(updated)
            except Exception:
                if listing_before is not None:
                    logger.exception(
                        "Saving booking %s failed, blocking its dates again", updated.booking_id
                    )
                    await self.listing_repository.update(listing_before)
                raise

        logger.info(
            "Booking %s status changed from %s to %s by %s",
            updated.booking_id, previous.value, new_status.value, user.user_id
        )
        return updated

    async def delete_booking(self, user: User, booking_id: UUID) -> None:
        """Delete a booking; only the listing's host may do so"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")

        listing = await self.listing_repository.find_by_id(booking.listing_id)
        if not listing:
            raise NotFoundError("Listing not found")
        if not listing.is_hosted_by(user.user_id):
            raise AuthorizationError("Not authorized to delete this booking")

        async with self.locks.for_listing(booking.listing_id):
            await self.repository.delete(booking.booking_id)
            if booking.status == BookingStatus.CONFIRMED:
                try:
                    await self._release_dates(booking)
                except Exception:
                    logger.exception(
                        "Releasing dates failed for booking %s, restoring it", booking.booking_id
                    )
                    await self.repository.save(booking)
                    raise

        logger.info("Booking %s (%s) deleted by host %s",
                    booking.booking_id, booking.status.value, user.user_id)

    async def record_payment(self, user: User, booking_id: UUID) -> Booking:
        """Simulated payment step: marks the booking paid, no settlement"""
        booking = await self.repository.find_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if booking.guest_id != user.user_id:
            raise AuthorizationError("Not authorized to pay for this booking")

        booking.record_payment(payment_intent_id=f"pi_{uuid4().hex[:24]}")
        await self.repository.update(booking)
        logger.info("Booking %s marked paid (%s)", booking.booking_id, booking.payment_intent_id)
        return booking

    async def _release_dates(self, booking: Booking) -> Optional[Listing]:
        """Remove the booking's blocked window from its listing.

        Returns the listing as it was before the change, or None when
        nothing was written.
        """
        listing = await self.listing_repository.find_by_id(booking.listing_id)
        if not listing:
            logger.warning("Listing %s for booking %s no longer exists",
                           booking.listing_id, booking.booking_id)
            return None

        released = listing.model_copy(deep=True)
        if not released.release_dates(booking.date_range):
            return None
        await self.listing_repository.update(released)
        return listing


class ListingService:
    """Service for listing management and search"""

    def __init__(self,
                 repository: ListingRepository,
                 locks: Optional[ListingLockRegistry] = None):
        self.repository = repository
        self.locks = locks or ListingLockRegistry()

    async def create_listing(self, host: User, data: dict) -> Listing:
        """Create a listing owned by the caller"""
        try:
            listing = Listing(host_id=host.user_id, **data)
        except ValidationError as e:
            raise DomainValidationError(_validation_message(e))

        await self.repository.save(listing)
        logger.info("Listing %s created by host %s", listing.listing_id, host.user_id)
        return listing

    async def get_listing(self, listing_id: UUID) -> Listing:
        """Get listing by ID"""
        listing = await self.repository.find_by_id(listing_id)
        if not listing:
            raise NotFoundError("Listing not found")
        return listing

    async def list_host_listings(self, host: User) -> List[Listing]:
        """Get all listings owned by the caller"""
        return await self.repository.find_by_host_id(host.user_id)

    async def search_listings(self, filters: ListingSearchFilters) -> ListingPage:
        """Search listings with the structured query built from filters"""
        query = build_listing_query(filters)
        listings, total = await self.repository.search(query)
        logger.debug("Listing search %s matched %s", query.model_dump(exclude_none=True), total)
        return ListingPage.build(listings, total, query)

    async def update_listing(self, user: User, listing_id: UUID, changes: dict) -> Listing:
        """Apply host edits to a listing"""
        listing = await self.get_listing(listing_id)
        if not listing.is_hosted_by(user.user_id):
            raise AuthorizationError("Not authorized to update this listing")

        async with self.locks.for_listing(listing_id):
            updated = listing.model_copy(deep=True)
            try:
                updated.update_details(**changes)
            except ValidationError as e:
                raise DomainValidationError(_validation_message(e))
            return await self.repository.update(updated)

    async def delete_listing(self, user: User, listing_id: UUID) -> None:
        """Remove a listing; its bookings are left as they are"""
        listing = await self.get_listing(listing_id)
        if not listing.is_hosted_by(user.user_id):
            raise AuthorizationError("Not authorized to delete this listing")

        async with self.locks.for_listing(listing_id):
            await self.repository.delete(listing_id)
        self.locks.discard(listing_id)
        logger.info("Listing %s removed by host %s", listing_id, user.user_id)

    async def quote(self, listing_id: UUID, check_in: date, check_out: date) -> PriceQuote:
        """Preview the price of a stay without booking it"""
        listing = await self.get_listing(listing_id)
        date_range = build_date_range(check_in, check_out)
        return quote_stay(listing.price, date_range.check_in, date_range.check_out)


class UserService:
    """Service for registration, login and profile use cases"""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
        role: UserRole = UserRole.GUEST
    ) -> UserInDB:
        """Register a new user"""
        if await self.repository.find_by_email(email):
            raise ConflictError("User already exists")

        user = UserInDB(
            email=email.lower(),
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            role=role,
            hashed_password=get_password_hash(password)
        )
        await self.repository.save(user)
        logger.info("User %s registered as %s", user.user_id, user.role.value)
        return user

    async def authenticate(self, email: str, password: str) -> UserInDB:
        """Check credentials"""
        user = await self.repository.find_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthorizationError("Invalid credentials")
        return user

    async def get_user(self, user_id: UUID) -> UserInDB:
        user = await self.repository.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self,
        user_id: UUID,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None
    ) -> UserInDB:
        """Update name and phone; omitted fields keep their value"""
        user = await self.get_user(user_id)
        user.first_name = first_name or user.first_name
        user.last_name = last_name or user.last_name
        user.phone_number = phone_number or user.phone_number
        return await self.repository.update(user)

    async def become_host(self, user_id: UUID) -> UserInDB:
        """Upgrade the user to host"""
        user = await self.get_user(user_id)
        user.become_host()
        logger.info("User %s is now %s", user.user_id, user.role.value)
        return await self.repository.update(user)

    async def ensure_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole
    ) -> UserInDB:
        """Create the account unless the email is taken (startup seeding)"""
        existing = await self.repository.find_by_email(email)
        if existing:
            return existing
        return await self.register(email, password, first_name, last_name, role=role)
