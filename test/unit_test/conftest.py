"""Shared fixtures for unit tests.

Every test gets a fresh in-memory SQLite database with all tables created, a
repository bundle on one session, and a small seeded world: users of several
roles, two properties with outlets, property grants, the default
categories and the system currencies.
"""

import os
from dataclasses import dataclass
from datetime import date
from test.settings import test_settings
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

# In-memory SQLite unless overridden in test/.env
TEST_DATABASE_URL = test_settings.database.url

# Set test database URL before importing app
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from fnb_cost.core.database.base import Base  # noqa: E402
from fnb_cost.core.database.entities import Category, Outlet, Property, PropertyAccess, User  # noqa: E402
from fnb_cost.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session  # noqa: E402
from fnb_cost.core.database.seed import seed_default_categories, seed_default_currencies  # noqa: E402
from fnb_cost.server.services.audit import AuditService, ClientInfo  # noqa: E402
from fnb_cost.server.services.passwords import hash_password  # noqa: E402
from fnb_cost.server.services.rate_limit import limiter  # noqa: E402
from fnb_cost.server.services.tokens import create_access_token  # noqa: E402

TEST_CLIENT = ClientInfo(ip_address="10.0.0.1", user_agent="pytest")

# Hashed once for the whole session
PASSWORD_HASH = hash_password(test_settings.users.password)


@dataclass
class World:
    """Seeded users, properties, outlets and categories."""

    admin: User
    owner: User
    manager: User
    clerk: User
    outsider: User
    hotel: Property
    bistro: Property
    restaurant: Outlet
    bar: Outlet
    cafe: Outlet
    food: Dict[str, Category]
    beverage: Dict[str, Category]


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine with every table."""
    from fnb_cost.core.database import entities  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session


@pytest.fixture
def repos(session: AsyncSession) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=session)


@pytest.fixture
def make_service(repos: SqlRepoBundle):
    """Build a service for a user: ``make_service(OutletService, user)``.

    Extra leading constructor arguments go after the user, e.g.
    ``make_service(CostEntryService, user, FOOD)``.
    """

    def _make(service_cls, user: User, *args):
        return service_cls(*args, repos, user, AuditService(repos, user, TEST_CLIENT))

    return _make


async def _user(repos: SqlRepoBundle, email: str, role: str, name: str) -> User:
    return await repos.users.create(
        User(email=email, name=name, role=role, password_hash=PASSWORD_HASH)
    )


async def _grant(repos: SqlRepoBundle, user: User, prop: Property, level: str, granted_by: User) -> PropertyAccess:
    return await repos.property_access.create(
        PropertyAccess(user_id=user.id, property_id=prop.id, access_level=level, granted_by=granted_by.id)
    )


@pytest_asyncio.fixture
async def world(session: AsyncSession, repos: SqlRepoBundle) -> World:
    await seed_default_categories(session)
    await seed_default_currencies(session)

    admin = await _user(repos, "admin@example.com", "super_admin", "Ada Admin")
    owner = await _user(repos, "owner@example.com", "property_owner", "Olu Owner")
    manager = await _user(repos, "manager@example.com", "property_manager", "Mika Manager")
    clerk = await _user(repos, "clerk@example.com", "supervisor", "Cam Clerk")
    outsider = await _user(repos, "outsider@example.com", "user", "Oz Outsider")

    hotel = await repos.properties.create(
        Property(name="Harbour Hotel", property_code="HH01", property_type="hotel", owner_id=owner.id)
    )
    bistro = await repos.properties.create(
        Property(name="Corner Bistro", property_code="CB01", property_type="restaurant", owner_id=admin.id)
    )
    await _grant(repos, manager, hotel, "management", owner)
    await _grant(repos, clerk, hotel, "data_entry", owner)

    restaurant = await repos.outlets.create(Outlet(name="Main Restaurant", outlet_code="REST", property_id=hotel.id))
    bar = await repos.outlets.create(Outlet(name="Lobby Bar", outlet_code="BAR", property_id=hotel.id))
    cafe = await repos.outlets.create(Outlet(name="Bistro Cafe", outlet_code="CAFE", property_id=bistro.id))

    food = {c.name: c for c in await repos.categories.list_by_type("Food")}
    beverage = {c.name: c for c in await repos.categories.list_by_type("Beverage")}

    return World(
        admin=admin,
        owner=owner,
        manager=manager,
        clerk=clerk,
        outsider=outsider,
        hotel=hotel,
        bistro=bistro,
        restaurant=restaurant,
        bar=bar,
        cafe=cafe,
        food=food,
        beverage=beverage,
    )


@pytest.fixture
def day() -> date:
    return date(2025, 3, 10)


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the database session overridden."""
    from fnb_cost.core.database.session import get_session
    from fnb_cost.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """Bearer token headers for a user: ``auth(world.admin)``."""

    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture(autouse=True)
def _clear_rate_limits():
    limiter.reset()
    yield
    limiter.reset()
