import logging

from fastapi import APIRouter, Depends, HTTPException, status

from pharmacy.core.auth import create_access_token, get_current_user, require_admin
from pharmacy.core.security import hash_password, verify_password
from pharmacy.db.mongo import get_db
from pharmacy.models.user import User
from pharmacy.repositories.user_repo import UserRepository
from pharmacy.schemas.auth import PasswordChange, TokenResponse, UserLogin, UserRegister
from pharmacy.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, db = Depends(get_db)):
    """Login with email and password"""
    user_repo = UserRepository(db)
    user = await user_repo.get_user_by_email(credentials.email)

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated"
        )

    await user_repo.touch_last_login(user.id)
    access_token = create_access_token(str(user.id), user.role.value)

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.from_user(user)
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    current_user: User = Depends(require_admin),
    db = Depends(get_db)
):
    """Register a new user with a chosen password (admin only)"""
    user_repo = UserRepository(db)

    conflict = await user_repo.find_conflict(
        username=user_data.username,
        email=user_data.email,
        phone_number=user_data.phone_number,
    )
    if conflict:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A user with this {conflict.replace('_', ' ')} already exists"
        )

    user = await user_repo.create_user(
        username=user_data.username,
        email=user_data.email,
        full_name=user_data.full_name,
        password=user_data.password,
        role=user_data.role,
        phone_number=user_data.phone_number,
    )
    logger.info("User %s registered by %s", user.username, current_user.username)
    return UserResponse.from_user(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return UserResponse.from_user(current_user)


@router.post("/change-password")
async def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db = Depends(get_db)
):
    """Change user password"""
    if not verify_password(password_data.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )

    await UserRepository(db).update_fields(
        current_user.id, {"password_hash": hash_password(password_data.new_password)}
    )
    return {"message": "Password changed successfully"}
