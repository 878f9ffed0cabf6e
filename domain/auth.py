"""Domain Entities - Auth"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Optional

from domain.enums import UserRole
from domain.exceptions import DomainValidationError


class User(BaseModel):
    """User Entity"""
    user_id: UUID = Field(default_factory=uuid4)
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    role: UserRole = UserRole.GUEST
    disabled: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        from_attributes = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def become_host(self) -> None:
        """Promote a guest to host; admins keep their role"""
        if self.role == UserRole.HOST:
            raise DomainValidationError("User is already a host")
        if self.role == UserRole.GUEST:
            self.role = UserRole.HOST


class UserInDB(User):
    """User with hashed password for DB storage"""
    hashed_password: str

    def to_public(self) -> User:
        return User(**self.model_dump(exclude={"hashed_password"}))
