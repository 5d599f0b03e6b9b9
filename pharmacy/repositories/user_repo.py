from datetime import datetime, timezone
from typing import List, Optional

from pharmacy.core.security import hash_password
from pharmacy.models.user import Role, User
from pharmacy.repositories.base import Repository


class UserRepository(Repository[User]):
    """User database operations."""

    collection_name = "users"
    model = User
    kind = "User"

    async def create_user(
        self,
        username: str,
        email: str,
        full_name: str,
        password: str,
        role: Role = Role.USER,
        phone_number: Optional[str] = None,
    ) -> User:
        """Create a new user."""
        user = User(
            username=username,
            email=email.lower(),
            full_name=full_name,
            phone_number=phone_number,
            password_hash=hash_password(password),
            role=role,
        )
        return await self.insert(user)

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email."""
        doc = await self.collection.find_one({"email": email.lower()})
        if doc:
            return User(**doc)
        return None

    async def find_conflict(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Optional[str]:
        """Name of the first unique field already taken by another user, if any."""
        for field, value in (
            ("username", username),
            ("email", email.lower() if email else None),
            ("phone_number", phone_number),
        ):
            if value and await self.collection.find_one({field: value}):
                return field
        return None

    async def list_users(self) -> List[User]:
        return await self.find({}, sort=[("username", 1)])

    async def set_password(self, user_id, password: str) -> User:
        return await self.update_fields(user_id, {"password_hash": hash_password(password)})

    async def touch_last_login(self, user_id) -> None:
        await self.collection.update_one(
            {"_id": user_id},
            {"$set": {"last_login": datetime.now(timezone.utc)}}
        )
