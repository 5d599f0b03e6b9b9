from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from pharmacy.core.auth import get_current_user
from pharmacy.db.mongo import get_db
from pharmacy.main import app
from pharmacy.models.user import Role, User


def make_collection() -> MagicMock:
    """A Motor collection stand-in; ``find`` returns a chainable cursor."""
    collection = MagicMock()
    for method in (
        "find_one", "find_one_and_update", "find_one_and_delete", "insert_one",
        "update_one", "delete_one", "delete_many", "count_documents", "distinct",
    ):
        setattr(collection, method, AsyncMock())

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


def make_session(db: MagicMock):
    """Wire ``db.client.start_session`` for ``async with ... start_transaction()``."""
    transaction = MagicMock()
    transaction.__aenter__ = AsyncMock(return_value=None)
    transaction.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.start_transaction.return_value = transaction

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)

    db.client.start_session = AsyncMock(return_value=session_cm)
    return session, transaction


def make_user(role: Role = Role.ADMIN, **overrides) -> User:
    data = {
        "id": ObjectId(),
        "username": role.value.lower(),
        "email": f"{role.value.lower()}@example.com",
        "full_name": f"Test {role.value.title()}",
        "password_hash": "dummy",
        "role": role,
    }
    data.update(overrides)
    return User(**data)


@pytest.fixture
def mock_db():
    """Mock MongoDB database; ``db["name"]`` always returns the same collection mock."""
    db = MagicMock()
    collections = {}

    def get_collection(name):
        if name not in collections:
            collections[name] = make_collection()
        return collections[name]

    db.__getitem__.side_effect = get_collection
    db.command = AsyncMock(return_value={"ok": 1})
    db.session, db.transaction = make_session(db)
    return db


@pytest.fixture
def admin_user():
    return make_user(Role.ADMIN)


@pytest.fixture
def staff_user():
    return make_user(Role.USER)


@pytest.fixture
def viewer_user():
    return make_user(Role.VIEWER)


@pytest.fixture
def login_as():
    """Authenticate requests as the given user."""
    def _login(user: User) -> User:
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _login


@pytest_asyncio.fixture
async def client(mock_db):
    app.dependency_overrides[get_db] = lambda: mock_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def user_factory():
    return make_user
