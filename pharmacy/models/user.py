from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr

from pharmacy.models.base import MongoModel


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"
    VIEWER = "VIEWER"


class User(MongoModel):
    """User database document."""
    username: str
    email: EmailStr
    full_name: str
    phone_number: Optional[str] = None
    password_hash: str
    role: Role = Role.USER
    is_active: bool = True
    last_login: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def can_write(self) -> bool:
        return self.role != Role.VIEWER
