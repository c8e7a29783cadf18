"""Unit tests for the generic SQL repository and query builder.

CRUD paths are checked against a mocked session, as the session calls are
the whole contract; filtering and pagination run against SQLite.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from fnb_cost.core.database.entities import Outlet, User
from fnb_cost.core.database.repositories import OutletRepository, UserRepository
from fnb_cost.core.database.repositories.base import QueryBuilder


class TestSqlRepositoryWithMockedSession:
    """Session interaction of the default CRUD methods."""

    @pytest.fixture
    def mock_session(self):
        """Mock async database session."""
        session = AsyncMock()
        session.add = MagicMock()
        mock_result = MagicMock()
        session.execute = AsyncMock(return_value=mock_result)
        return session

    @pytest.fixture
    def repository(self, mock_session):
        return OutletRepository(mock_session)

    async def test_create_commits_and_refreshes(self, repository, mock_session):
        outlet = Outlet(name="Pool Bar", outlet_code="POOL", property_id=1)

        result = await repository.create(outlet)

        mock_session.add.assert_called_once_with(outlet)
        mock_session.commit.assert_awaited_once()
        mock_session.refresh.assert_awaited_once_with(outlet)
        assert result is outlet

    async def test_update_touches_updated_at(self, repository, mock_session):
        outlet = Outlet(name="Pool Bar", outlet_code="POOL", property_id=1)
        before = outlet.updated_at

        await repository.update(outlet)

        assert outlet.updated_at >= before
        mock_session.commit.assert_awaited_once()

    async def test_delete_not_found(self, repository, mock_session):
        mock_session.execute.return_value.scalar_one_or_none.return_value = None

        assert await repository.delete(99) is False
        mock_session.delete.assert_not_called()
        mock_session.commit.assert_not_called()

    async def test_delete_found(self, repository, mock_session):
        outlet = Outlet(id=5, name="Pool Bar", outlet_code="POOL", property_id=1)
        mock_session.execute.return_value.scalar_one_or_none.return_value = outlet

        assert await repository.delete(5) is True
        mock_session.delete.assert_awaited_once_with(outlet)
        mock_session.commit.assert_awaited_once()


class TestQueryBuilder:
    def test_none_values_and_unknown_columns_are_skipped(self):
        stmt = QueryBuilder.apply_filters(select(User), User, {"role": None, "nonexistent": "x"})
        assert "WHERE" not in str(stmt)

    def test_filters_and_pagination(self):
        stmt = QueryBuilder.apply_filters(select(User), User, {"role": "user"})
        stmt = QueryBuilder.apply_pagination(stmt, 10, 20)
        sql = str(stmt)
        assert "users.role = " in sql
        assert "LIMIT" in sql
        assert "OFFSET" in sql


class TestSqlRepositoryOnSqlite:
    async def test_list_with_filters_and_pagination(self, repos, world):
        outlets = await repos.outlets.list(filters={"property_id": world.hotel.id})
        assert [o.outlet_code for o in outlets] == ["REST", "BAR"]

        page = await repos.outlets.list(limit=1, offset=1)
        assert [o.outlet_code for o in page] == ["BAR"]

    async def test_count(self, repos, world):
        assert await repos.users.count() == 5
        assert await repos.users.count({"role": "super_admin"}) == 1

    async def test_get_by_id_missing(self, repos, world):
        assert await repos.properties.get_by_id(999) is None

    async def test_update_persists(self, session, world):
        repo = UserRepository(session)
        world.outsider.department = "Finance"

        await repo.update(world.outsider)

        assert (await repo.get_by_id(world.outsider.id)).department == "Finance"
