"""Domain Services - overlap checking and pricing

Pure functions with no storage access. The booking lifecycle composes
them; nothing here knows about repositories or callers.
"""
import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Union

from pydantic import BaseModel

from domain.value_objects import Money, RateStructure

DateLike = Union[date, datetime]

_SECONDS_PER_DAY = timedelta(days=1).total_seconds()


def dates_overlap(a_start: DateLike, a_end: DateLike, b_start: DateLike, b_end: DateLike) -> bool:
    """Return True when [a_start, a_end] and [b_start, b_end] share any day.

    Both ends are inclusive, so a check-out on the same day as another
    stay's check-in counts as an overlap. Same-day turnover is rejected.
    """
    return a_start <= b_end and a_end >= b_start


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Number of nights between two dates, partial days rounded up"""
    elapsed = (check_out - check_in).total_seconds()
    return math.ceil(elapsed / _SECONDS_PER_DAY)


class PriceQuote(BaseModel):
    """Breakdown of a stay's price"""
    nights: int
    nightly_rate: Decimal
    subtotal: Decimal
    cleaning_fee: Decimal
    service_fee: Decimal
    total: Money

    class Config:
        frozen = True


def quote_stay(rate: RateStructure, check_in: DateLike, check_out: DateLike) -> PriceQuote:
    """Price a stay: nights x base + cleaning fee + service fee.

    Callers must already have checked that check_in < check_out.
    """
    nights = calculate_nights(check_in, check_out)
    subtotal = rate.base * nights
    total = subtotal + rate.cleaning_fee + rate.service_fee
    return PriceQuote(
        nights=nights,
        nightly_rate=rate.base,
        subtotal=subtotal,
        cleaning_fee=rate.cleaning_fee,
        service_fee=rate.service_fee,
        total=Money(amount=total, currency=rate.currency)
    )


def calculate_total_price(rate: RateStructure, check_in: DateLike, check_out: DateLike) -> Money:
    """Total price for a stay in the listing's currency"""
    return quote_stay(rate, check_in, check_out).total
