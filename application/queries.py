"""Listing search - translate free-form filters into a structured query"""
import math
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.entities import Listing
from domain.enums import PropertyType
from domain.exceptions import DomainValidationError
from domain.value_objects import DateRange


class ListingSearchFilters(BaseModel):
    """Raw search parameters as a client sends them"""
    location: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: Optional[int] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    property_type: Optional[PropertyType] = None
    page: int = 1
    limit: int = 10


class ListingQuery(BaseModel):
    """Structured listing query; every supplied criterion must match"""
    location_text: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    property_type: Optional[PropertyType] = None
    min_guests: Optional[int] = None
    requested_dates: Optional[DateRange] = None
    page: int = Field(ge=1, default=1)
    limit: int = Field(ge=1, default=10)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, listing: Listing) -> bool:
        if self.location_text and self.location_text not in listing.location.searchable_text():
            return False
        if self.min_price is not None and listing.price.base < self.min_price:
            return False
        if self.max_price is not None and listing.price.base > self.max_price:
            return False
        if self.property_type is not None and listing.property_type != self.property_type:
            return False
        if self.min_guests is not None and listing.max_guests < self.min_guests:
            return False
        # Listings with a booked window touching the requested stay are excluded
        if self.requested_dates is not None and listing.is_blocked(self.requested_dates):
            return False
        return True


class ListingPage(BaseModel):
    """One page of search results with paging metadata"""
    listings: List[Listing]
    current_page: int
    total_pages: int
    total_listings: int

    @staticmethod
    def build(listings: List[Listing], total: int, query: ListingQuery) -> "ListingPage":
        return ListingPage(
            listings=listings,
            current_page=query.page,
            total_pages=math.ceil(total / query.limit),
            total_listings=total
        )


def build_listing_query(filters: ListingSearchFilters) -> ListingQuery:
    """Translate search filters into a ListingQuery.

    The date filter applies only when both check_in and check_out are given.
    """
    if filters.page < 1:
        raise DomainValidationError("Page must be 1 or greater")
    if filters.limit < 1:
        raise DomainValidationError("Limit must be 1 or greater")
    if filters.guests is not None and filters.guests < 1:
        raise DomainValidationError("Guests must be 1 or greater")

    requested_dates = None
    if filters.check_in and filters.check_out:
        if filters.check_in >= filters.check_out:
            raise DomainValidationError("Check-in date must be before check-out date")
        requested_dates = DateRange(check_in=filters.check_in, check_out=filters.check_out)

    location_text = filters.location.strip().lower() if filters.location else None

    return ListingQuery(
        location_text=location_text or None,
        min_price=filters.min_price,
        max_price=filters.max_price,
        property_type=filters.property_type,
        min_guests=filters.guests,
        requested_dates=requested_dates,
        page=filters.page,
        limit=filters.limit
    )
