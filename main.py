import logging
from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from uuid import UUID
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from api.schemas import (
    # Auth
    Token, RegisterRequest, LoginRequest, UpdateProfileRequest, UserResponse, AuthResponse,
    # Listing
    CreateListingRequest, UpdateListingRequest, ListingResponse, ListingPageResponse,
    PriceQuoteResponse, DateRangeResponse, LocationSchema, PriceSchema,
    # Booking
    CreateBookingRequest, UpdateBookingStatusRequest, BookingResponse, MessageResponse
)

from api.dependencies import (
    get_current_active_user, require_host,
    get_user_service, get_booking_service, get_listing_service
)
from infrastructure.config import settings
from infrastructure.logging_config import configure_logging
from infrastructure.rate_limiting import limiter
from infrastructure.security import create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from domain.auth import User
from domain.exceptions import DomainError

from application.queries import ListingSearchFilters
from application.services import BookingService, ListingService, UserService
from domain.enums import PropertyType

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Short-term rental marketplace: listings, bookings and availability",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": "Validation Error", "errors": errors})

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})

# ============================================================================
# HEALTH
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "Welcome to StayFinder API"}

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

def _issue_token(user: User) -> str:
    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(
        data={"sub": str(user.user_id), "role": user.role.value},
        expires_delta=access_token_expires
    )

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: UserService = Depends(get_user_service)
):
    """OAuth2 password flow; the username is the account email"""
    try:
        user = await service.authenticate(form_data.username, form_data.password)
    except DomainError:
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": _issue_token(user), "token_type": "bearer"}

@app.post("/api/auth/register", response_model=AuthResponse, status_code=201, tags=["Auth"])
async def register(
    request: RegisterRequest,
    service: UserService = Depends(get_user_service)
):
    """Register a new guest account"""
    user = await service.register(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        phone_number=request.phone_number
    )
    return AuthResponse(user=_user_to_response(user), access_token=_issue_token(user))

@app.post("/api/auth/login", response_model=AuthResponse, tags=["Auth"])
async def login(
    request: LoginRequest,
    service: UserService = Depends(get_user_service)
):
    """Log in with email and password"""
    try:
        user = await service.authenticate(request.email, request.password)
    except DomainError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return AuthResponse(user=_user_to_response(user), access_token=_issue_token(user))

@app.get("/api/auth/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return _user_to_response(current_user)

@app.put("/api/auth/profile", response_model=UserResponse, tags=["Auth"])
async def update_profile(
    request: UpdateProfileRequest,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_active_user)
):
    """Update name and phone number"""
    user = await service.update_profile(
        current_user.user_id,
        first_name=request.first_name,
        last_name=request.last_name,
        phone_number=request.phone_number
    )
    return _user_to_response(user)

@app.put("/api/auth/become-host", response_model=AuthResponse, tags=["Auth"])
async def become_host(
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_active_user)
):
    """Upgrade the current user to host; returns a token carrying the new role"""
    user = await service.become_host(current_user.user_id)
    return AuthResponse(user=_user_to_response(user), access_token=_issue_token(user))

# ============================================================================
# LISTING ENDPOINTS
# ============================================================================

@app.get("/api/listings", response_model=ListingPageResponse, tags=["Listings"])
async def search_listings(
    location: Optional[str] = None,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    guests: Optional[int] = Query(None, ge=1),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    property_type: Optional[PropertyType] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=100),
    service: ListingService = Depends(get_listing_service)
):
    """Search listings by location, dates, guests, price and property type"""
    filters = ListingSearchFilters(
        location=location,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        min_price=min_price,
        max_price=max_price,
        property_type=property_type,
        page=page,
        limit=limit
    )
    result = await service.search_listings(filters)
    return ListingPageResponse(
        listings=[_listing_to_response(l) for l in result.listings],
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_listings=result.total_listings
    )

@app.get("/api/listings/host/my-listings", response_model=List[ListingResponse], tags=["Listings"])
async def get_host_listings(
    service: ListingService = Depends(get_listing_service),
    current_user: User = Depends(require_host)
):
    """Get the current host's listings"""
    listings = await service.list_host_listings(current_user)
    return [_listing_to_response(l) for l in listings]

@app.post("/api/listings", response_model=ListingResponse, status_code=201, tags=["Listings"])
async def create_listing(
    request: CreateListingRequest,
    service: ListingService = Depends(get_listing_service),
    current_user: User = Depends(require_host)
):
    """Create a listing"""
    listing = await service.create_listing(current_user, request.model_dump())
    return _listing_to_response(listing)

@app.get("/api/listings/{listing_id}", response_model=ListingResponse, tags=["Listings"])
async def get_listing(
    listing_id: UUID,
    service: ListingService = Depends(get_listing_service)
):
    """Get listing by ID"""
    listing = await service.get_listing(listing_id)
    return _listing_to_response(listing)

@app.get("/api/listings/{listing_id}/quote", response_model=PriceQuoteResponse, tags=["Listings"])
async def quote_listing(
    listing_id: UUID,
    check_in: date,
    check_out: date,
    service: ListingService = Depends(get_listing_service)
):
    """Preview the price of a stay"""
    quote = await service.quote(listing_id, check_in, check_out)
    return PriceQuoteResponse(
        check_in=check_in,
        check_out=check_out,
        nights=quote.nights,
        nightly_rate=quote.nightly_rate,
        subtotal=quote.subtotal,
        cleaning_fee=quote.cleaning_fee,
        service_fee=quote.service_fee,
        total_price=quote.total.amount,
        currency=quote.total.currency
    )

@app.put("/api/listings/{listing_id}", response_model=ListingResponse, tags=["Listings"])
async def update_listing(
    listing_id: UUID,
    request: UpdateListingRequest,
    service: ListingService = Depends(get_listing_service),
    current_user: User = Depends(require_host)
):
    """Update listing details"""
    listing = await service.update_listing(
        current_user, listing_id, request.model_dump(exclude_unset=True)
    )
    return _listing_to_response(listing)

@app.delete("/api/listings/{listing_id}", response_model=MessageResponse, tags=["Listings"])
async def delete_listing(
    listing_id: UUID,
    service: ListingService = Depends(get_listing_service),
    current_user: User = Depends(require_host)
):
    """Delete a listing"""
    await service.delete_listing(current_user, listing_id)
    return {"message": "Listing removed"}

# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings", response_model=BookingResponse, status_code=201, tags=["Bookings"])
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create new booking"""
    booking = await service.create_booking(
        user=current_user,
        listing_id=request.listing_id,
        check_in=request.check_in,
        check_out=request.check_out,
        guests=request.guests
    )
    return _booking_to_response(booking)

@app.get("/api/bookings/my-bookings", response_model=List[BookingResponse], tags=["Bookings"])
async def get_my_bookings(
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get the current user's bookings as guest"""
    bookings = await service.list_guest_bookings(current_user)
    return [_booking_to_response(b) for b in bookings]

@app.get("/api/bookings/host/bookings", response_model=List[BookingResponse], tags=["Bookings"])
async def get_host_bookings(
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(require_host)
):
    """Get bookings on the current host's listings"""
    bookings = await service.list_host_bookings(current_user)
    return [_booking_to_response(b) for b in bookings]

@app.get("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get booking by ID"""
    booking = await service.get_booking(current_user, booking_id)
    return _booking_to_response(booking)

@app.put("/api/bookings/{booking_id}/status", response_model=BookingResponse, tags=["Bookings"])
async def update_booking_status(
    booking_id: UUID,
    request: UpdateBookingStatusRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(require_host)
):
    """Confirm, cancel or complete a booking"""
    booking = await service.update_status(current_user, booking_id, request.status)
    return _booking_to_response(booking)

@app.post("/api/bookings/{booking_id}/payment", response_model=BookingResponse, tags=["Bookings"])
async def pay_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Simulated payment for a booking"""
    booking = await service.record_payment(current_user, booking_id)
    return _booking_to_response(booking)

@app.delete("/api/bookings/{booking_id}", response_model=MessageResponse, tags=["Bookings"])
async def delete_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(require_host)
):
    """Delete a booking"""
    await service.delete_booking(current_user, booking_id)
    return {"message": "Booking deleted successfully"}

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _user_to_response(user) -> UserResponse:
    """Convert User entity to UserResponse"""
    return UserResponse(
        user_id=user.user_id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone_number=user.phone_number,
        role=user.role,
        disabled=user.disabled,
        created_at=user.created_at
    )

def _listing_to_response(listing) -> ListingResponse:
    """Convert Listing entity to ListingResponse"""
    return ListingResponse(
        listing_id=listing.listing_id,
        host_id=listing.host_id,
        title=listing.title,
        description=listing.description,
        location=LocationSchema(**listing.location.model_dump()),
        price=PriceSchema(**listing.price.model_dump()),
        property_type=listing.property_type.value,
        room_type=listing.room_type.value,
        amenities=listing.amenities,
        images=listing.images,
        max_guests=listing.max_guests,
        bedrooms=listing.bedrooms,
        beds=listing.beds,
        bathrooms=listing.bathrooms,
        availability=[
            DateRangeResponse(check_in=w.check_in, check_out=w.check_out)
            for w in listing.availability
        ],
        status=listing.status.value,
        average_rating=listing.average_rating,
        created_at=listing.created_at,
        updated_at=listing.updated_at
    )

def _booking_to_response(booking) -> BookingResponse:
    """Convert Booking entity to BookingResponse"""
    return BookingResponse(
        booking_id=booking.booking_id,
        listing_id=booking.listing_id,
        guest_id=booking.guest_id,
        host_id=booking.host_id,
        check_in=booking.date_range.check_in,
        check_out=booking.date_range.check_out,
        nights=booking.nights(),
        guests=booking.guests,
        total_price=booking.total_price.amount,
        currency=booking.total_price.currency,
        status=booking.status,
        payment_status=booking.payment_status,
        payment_intent_id=booking.payment_intent_id,
        created_at=booking.created_at,
        modified_at=booking.modified_at,
        version=booking.version
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
