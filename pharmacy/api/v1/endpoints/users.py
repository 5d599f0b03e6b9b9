import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from pharmacy.core.auth import get_current_user, require_admin
from pharmacy.core.security import generate_password
from pharmacy.db.mongo import get_db
from pharmacy.models.user import User
from pharmacy.repositories.user_repo import UserRepository
from pharmacy.schemas.user import (
    PasswordResetResponse,
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_my_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile"""
    return UserResponse.from_user(current_user)


@router.get("/", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    users = await UserRepository(db).list_users()
    return [UserResponse.from_user(user) for user in users]


@router.post("/", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Create a user with a generated password, returned once in the response"""
    user_repo = UserRepository(db)
    conflict = await user_repo.find_conflict(
        username=user_in.username,
        email=user_in.email,
        phone_number=user_in.phone_number,
    )
    if conflict:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A user with this {conflict.replace('_', ' ')} already exists"
        )

    password = generate_password()
    user = await user_repo.create_user(
        username=user_in.username,
        email=user_in.email,
        full_name=user_in.full_name,
        password=password,
        role=user_in.role,
        phone_number=user_in.phone_number,
    )
    logger.info("User %s created by %s", user.username, current_user.username)
    return UserCreatedResponse(
        **UserResponse.from_user(user).model_dump(),
        initial_password=password,
    )


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_update: UserUpdate,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    user_repo = UserRepository(db)
    updates = user_update.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in updates:
        updates["email"] = updates["email"].lower()
        existing = await user_repo.collection.find_one({
            "email": updates["email"],
            "_id": {"$ne": user_repo._oid(user_id)}
        })
        if existing:
            raise HTTPException(status_code=400, detail="Email already in use")

    if not updates:
        user = await user_repo.get(user_id)
    else:
        user = await user_repo.update_fields(user_id, updates)
    return UserResponse.from_user(user)


@router.post("/{user_id}/reset-password", response_model=PasswordResetResponse)
async def reset_password(
    user_id: str,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    password = generate_password()
    user = await UserRepository(db).set_password(user_id, password)
    logger.info("Password of %s reset by %s", user.username, current_user.username)
    return PasswordResetResponse(
        message=f"Password reset for {user.username}",
        new_password=password,
    )
