from pydantic import BaseModel, EmailStr, Field
from pharmacy.models.user import Role
from pharmacy.schemas.user import UserResponse


class UserLogin(BaseModel):
    """Schema for user login"""
    email: EmailStr
    password: str


class UserRegister(BaseModel):
    """Schema for registering a user with a chosen password (admin only)"""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=100)
    phone_number: str | None = None
    password: str = Field(..., min_length=8, max_length=100)
    role: Role = Role.USER


class TokenResponse(BaseModel):
    """Schema for authentication token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class PasswordChange(BaseModel):
    """Schema for changing password"""
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=100)
