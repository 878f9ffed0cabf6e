"""API Dependencies - Authentication and service wiring"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from uuid import UUID

from application.services import AvailabilityService, BookingService, ListingService, UserService
from domain.auth import User
from domain.enums import UserRole
from infrastructure.config import settings
from infrastructure.locks import ListingLockRegistry
from infrastructure.repositories.in_memory_repositories import (
    InMemoryListingRepository, InMemoryBookingRepository, InMemoryUserRepository
)
from infrastructure.seed import seed_sample_data
from infrastructure.security import decode_access_token
from api.schemas import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# Initialize repositories
listing_repo = InMemoryListingRepository()
booking_repo = InMemoryBookingRepository()
user_repo = InMemoryUserRepository()
listing_locks = ListingLockRegistry()

# Accounts created on first use; passwords are hashed then
_default_users = [
    {
        "email": settings.DEFAULT_ADMIN_EMAIL,
        "plain_password": settings.DEFAULT_ADMIN_PASSWORD,
        "first_name": "Admin",
        "last_name": "User",
        "role": UserRole.ADMIN,
    }
]
_seeded = False


async def _seed_defaults() -> None:
    global _seeded
    if _seeded:
        return
    service = UserService(user_repo)
    for user in _default_users:
        await service.ensure_user(
            email=user["email"],
            password=user["plain_password"],
            first_name=user["first_name"],
            last_name=user["last_name"],
            role=user["role"]
        )
    if settings.SEED_SAMPLE_DATA:
        await seed_sample_data(service, ListingService(listing_repo, listing_locks))
    _seeded = True


# Dependency injection
async def get_user_service() -> UserService:
    await _seed_defaults()
    return UserService(user_repo)

def get_availability_service() -> AvailabilityService:
    return AvailabilityService(booking_repo)

def get_booking_service() -> BookingService:
    return BookingService(booking_repo, listing_repo, AvailabilityService(booking_repo), listing_locks)

async def get_listing_service() -> ListingService:
    await _seed_defaults()
    return ListingService(listing_repo, listing_locks)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    service: UserService = Depends(get_user_service)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        token_data = TokenData(user_id=user_id)
        user = await service.repository.find_by_id(UUID(token_data.user_id))
    except (JWTError, ValueError):
        raise credentials_exception

    if user is None:
        raise credentials_exception
    return user.to_public()

async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


def require_roles(*roles: UserRole):
    """Dependency factory: caller must hold one of the roles"""
    async def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if not current_user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {current_user.role.value} is not authorized to access this route"
            )
        return current_user
    return checker


require_host = require_roles(UserRole.HOST, UserRole.ADMIN)
