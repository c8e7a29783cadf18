"""Unit tests for DailySummaryService and summary recalculation."""

from datetime import timedelta

import pytest

from fnb_cost.core.database.entities import DailyFinancialSummary
from fnb_cost.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailedError
from fnb_cost.core.models.io.cost_entries import CostDetailInput, CostEntryCreate
from fnb_cost.core.models.io.daily_summaries import DailySummaryCreate, DailySummaryUpdate
from fnb_cost.server.services.cost_entries import FOOD, CostEntryService
from fnb_cost.server.services.daily_summaries import (
    DailySummaryService,
    actual_cost,
    cost_percentage,
    recalculate_summary,
)


@pytest.fixture
def summaries(make_service):
    def _make(user):
        return make_service(DailySummaryService, user)

    return _make


class TestFormulas:
    def test_actual_cost(self):
        assert actual_cost(500.0, 20.0, 30.0, 5.0) == 455.0

    def test_actual_cost_treats_none_as_zero(self):
        assert actual_cost(500.0, None, None, None) == 500.0

    @pytest.mark.parametrize("cost, revenue, expected", [(300, 1000, 30.0), (300, 0, 0.0), (300, -5, 0.0)])
    def test_cost_percentage(self, cost, revenue, expected):
        assert cost_percentage(cost, revenue) == expected


class TestRecalculate:
    @pytest.mark.asyncio
    async def test_missing_summary(self, repos, world, day):
        assert await recalculate_summary(repos, day, world.hotel.id) is None

    @pytest.mark.asyncio
    async def test_no_entries_leaves_negative_adjustments(self, repos, world, day):
        await repos.daily_summaries.create(
            DailyFinancialSummary(date=day, property_id=world.hotel.id, actual_food_revenue=100.0, ent_food=10.0)
        )
        summary = await recalculate_summary(repos, day, world.hotel.id)
        assert summary.actual_food_cost == -10.0
        assert summary.actual_food_cost_pct == pytest.approx(-10.0)


class TestResolveProperty:
    @pytest.mark.asyncio
    async def test_super_admin_must_name_property(self, summaries, world):
        with pytest.raises(ValidationFailedError, match="property_id is required"):
            await summaries(world.admin).resolve_property(None)

    @pytest.mark.asyncio
    async def test_super_admin_unknown_property(self, summaries, world):
        with pytest.raises(NotFoundError):
            await summaries(world.admin).resolve_property(9999)

    @pytest.mark.asyncio
    async def test_defaults_to_first_accessible_property(self, summaries, world):
        assert await summaries(world.clerk).resolve_property(None) == world.hotel.id

    @pytest.mark.asyncio
    async def test_without_any_property(self, summaries, world):
        with pytest.raises(PermissionDeniedError, match="No property access"):
            await summaries(world.outsider).resolve_property(None)

    @pytest.mark.asyncio
    async def test_foreign_property(self, summaries, world):
        with pytest.raises(PermissionDeniedError):
            await summaries(world.clerk).resolve_property(world.bistro.id)


class TestSave:
    @pytest.mark.asyncio
    async def test_create(self, summaries, repos, world, day):
        saved = await summaries(world.clerk).save(
            DailySummaryCreate(date=day, actual_food_revenue=1200.0, budget_food_cost_pct=28.0, note="Busy Monday")
        )

        assert saved.property_id == world.hotel.id
        assert saved.actual_food_revenue == 1200.0
        assert saved.note == "Busy Monday"
        assert saved.actual_food_cost == 0.0
        assert saved.food_variance_pct == pytest.approx(-28.0)
        logs = await repos.audit_logs.list(filters={"resource": "daily_financial_summary"})
        assert [log.action for log in logs] == ["CREATE"]

    @pytest.mark.asyncio
    async def test_save_again_updates_same_day(self, summaries, repos, world, day):
        service = summaries(world.clerk)
        first = await service.save(DailySummaryCreate(date=day, actual_food_revenue=1000.0, total_covers=80))
        second = await service.save(DailySummaryCreate(date=day, actual_food_revenue=1500.0))

        assert second.id == first.id
        assert second.actual_food_revenue == 1500.0
        # Unset inputs keep their stored value
        assert second.total_covers == 80
        logs = await repos.audit_logs.list(filters={"resource": "daily_financial_summary"})
        assert [log.action for log in logs] == ["CREATE", "UPDATE"]
        assert logs[1].details["changes"]["actual_food_revenue"] == {"from": 1000.0, "to": 1500.0}

    @pytest.mark.asyncio
    async def test_picks_up_existing_cost_entries(self, summaries, make_service, world, day):
        await make_service(CostEntryService, world.clerk, FOOD).save(
            CostEntryCreate(
                date=day,
                outlet_id=world.restaurant.id,
                details=[CostDetailInput(category_id=world.food["Dairy"].id, cost=250.0)],
            )
        )

        saved = await summaries(world.clerk).save(
            DailySummaryCreate(date=day, actual_food_revenue=1000.0, ent_food=50.0)
        )
        assert saved.actual_food_cost == 200.0
        assert saved.actual_food_cost_pct == pytest.approx(20.0)

    @pytest.mark.asyncio
    async def test_requires_create_permission(self, summaries, repos, world, day):
        from fnb_cost.core.database.entities import PropertyAccess

        await repos.property_access.create(
            PropertyAccess(user_id=world.outsider.id, property_id=world.hotel.id, access_level="read_only")
        )
        with pytest.raises(PermissionDeniedError, match="financial.daily_summary.create"):
            await summaries(world.outsider).save(DailySummaryCreate(date=day))


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_fields(self, summaries, world, day):
        service = summaries(world.manager)
        saved = await service.save(DailySummaryCreate(date=day, actual_food_revenue=1000.0))

        updated = await service.update(saved.id, DailySummaryUpdate(budget_food_revenue=900.0, note="Adjusted"))
        assert updated.budget_food_revenue == 900.0
        assert updated.note == "Adjusted"
        assert updated.actual_food_revenue == 1000.0

    @pytest.mark.asyncio
    async def test_explicit_null_clears_note(self, summaries, world, day):
        service = summaries(world.manager)
        saved = await service.save(DailySummaryCreate(date=day, actual_food_revenue=1000.0, note="Private event"))

        kept = await service.update(saved.id, DailySummaryUpdate(budget_food_revenue=900.0))
        assert kept.note == "Private event"

        cleared = await service.update(saved.id, DailySummaryUpdate(note=None, actual_food_revenue=None))
        assert cleared.note is None
        assert cleared.actual_food_revenue == 1000.0

    @pytest.mark.asyncio
    async def test_move_to_taken_date(self, summaries, world, day):
        service = summaries(world.manager)
        saved = await service.save(DailySummaryCreate(date=day))
        await service.save(DailySummaryCreate(date=day + timedelta(days=1)))

        with pytest.raises(ConflictError):
            await service.update(saved.id, DailySummaryUpdate(date=day + timedelta(days=1)))

    @pytest.mark.asyncio
    async def test_move_date(self, summaries, world, day):
        service = summaries(world.manager)
        saved = await service.save(DailySummaryCreate(date=day))
        moved = await service.update(saved.id, DailySummaryUpdate(date=day + timedelta(days=7)))
        assert moved.date == day + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_delete_needs_permission(self, summaries, world, day):
        saved = await summaries(world.manager).save(DailySummaryCreate(date=day))
        with pytest.raises(PermissionDeniedError):
            await summaries(world.manager).delete(saved.id)

        await summaries(world.owner).delete(saved.id)
        with pytest.raises(NotFoundError):
            await summaries(world.owner).get(saved.id)

    @pytest.mark.asyncio
    async def test_get_foreign_summary(self, summaries, world, day):
        saved = await summaries(world.admin).save(DailySummaryCreate(date=day, property_id=world.bistro.id))
        with pytest.raises(PermissionDeniedError):
            await summaries(world.clerk).get(saved.id)


class TestListing:
    @pytest.mark.asyncio
    async def test_get_by_date(self, summaries, world, day):
        saved = await summaries(world.clerk).save(DailySummaryCreate(date=day))
        assert (await summaries(world.clerk).get_by_date(day)).id == saved.id
        with pytest.raises(NotFoundError):
            await summaries(world.clerk).get_by_date(day + timedelta(days=1))

    @pytest.mark.asyncio
    async def test_list_range(self, summaries, world, day):
        admin = summaries(world.admin)
        for offset in range(3):
            await admin.save(DailySummaryCreate(date=day + timedelta(days=offset), property_id=world.hotel.id))
        await admin.save(DailySummaryCreate(date=day, property_id=world.bistro.id))

        assert len(await admin.list_range(day, day + timedelta(days=2))) == 4
        assert len(await summaries(world.clerk).list_range(day, day + timedelta(days=1))) == 2
        assert len(await admin.list_range(day, day, property_id=world.bistro.id)) == 1

    @pytest.mark.asyncio
    async def test_list_range_rejects_reversed_dates(self, summaries, world, day):
        with pytest.raises(ValidationFailedError):
            await summaries(world.clerk).list_range(day, day - timedelta(days=1))

    @pytest.mark.asyncio
    async def test_paginate(self, summaries, world, day):
        service = summaries(world.clerk)
        for offset in range(5):
            await service.save(DailySummaryCreate(date=day + timedelta(days=offset)))

        first = await service.paginate(limit=2)
        assert first.total_count == 5
        assert first.has_more is True
        assert first.next_cursor == first.items[-1].id

        second = await service.paginate(limit=2, cursor=first.next_cursor)
        assert not {s.id for s in first.items} & {s.id for s in second.items}

        last = await service.paginate(limit=10)
        assert last.has_more is False
        assert last.next_cursor is None
