"""Domain Value Objects"""
from pydantic import BaseModel, Field, validator
from datetime import date
from decimal import Decimal
from typing import Optional


class DateRange(BaseModel):
    """Value Object for date ranges"""
    check_in: date
    check_out: date

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-in date must be before check-out date')
        return v

    def nights(self) -> int:
        """Calculate number of nights"""
        from domain.services import calculate_nights
        return calculate_nights(self.check_in, self.check_out)

    def overlaps(self, other: "DateRange") -> bool:
        """Inclusive overlap: a shared boundary day counts as a clash"""
        from domain.services import dates_overlap
        return dates_overlap(self.check_in, self.check_out, other.check_in, other.check_out)

    def same_dates(self, other: "DateRange") -> bool:
        return self.check_in == other.check_in and self.check_out == other.check_out

    class Config:
        frozen = True


class Money(BaseModel):
    """Value Object for monetary amounts"""
    amount: Decimal = Field(ge=0)
    currency: str = "USD"

    class Config:
        frozen = True


class RateStructure(BaseModel):
    """Value Object for a listing's nightly rate and fixed fees"""
    base: Decimal = Field(ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    cleaning_fee: Decimal = Field(ge=0, default=Decimal("0"))
    service_fee: Decimal = Field(ge=0, default=Decimal("0"))

    class Config:
        frozen = True


class Location(BaseModel):
    """Value Object for a listing's address"""
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: str = Field(min_length=1)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    def searchable_text(self) -> str:
        return " ".join([self.address, self.city, self.state, self.country]).lower()

    class Config:
        frozen = True
