"""Unit tests for CostEntryService: saving, updating and deleting cost entries,
summary recalculation and the detailed cost report."""

from datetime import timedelta

import pytest
import pytest_asyncio

from fnb_cost.core.database.entities import DailyFinancialSummary
from fnb_cost.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from fnb_cost.core.models.io.cost_entries import CostDetailInput, CostEntryCreate, CostEntryUpdate
from fnb_cost.server.services.cost_entries import BEVERAGE, FOOD, CostEntryService, validate_details


@pytest.fixture
def food_service(make_service):
    def _make(user):
        return make_service(CostEntryService, user, FOOD)

    return _make


@pytest.fixture
def beverage_service(make_service):
    def _make(user):
        return make_service(CostEntryService, user, BEVERAGE)

    return _make


@pytest_asyncio.fixture
async def summary(repos, world, day):
    return await repos.daily_summaries.create(
        DailyFinancialSummary(
            date=day,
            property_id=world.hotel.id,
            actual_food_revenue=1000.0,
            actual_beverage_revenue=500.0,
            budget_food_cost_pct=30.0,
            budget_beverage_cost_pct=20.0,
        )
    )


def food_entry(world, day, outlet=None, **costs):
    costs = costs or {"Proteins": 300.0, "Vegetables": 100.0}
    return CostEntryCreate(
        date=day,
        outlet_id=(outlet or world.restaurant).id,
        details=[CostDetailInput(category_id=world.food[name].id, cost=cost) for name, cost in costs.items()],
    )


class TestValidateDetails:
    def test_requires_details(self):
        with pytest.raises(ValidationFailedError, match="at least one cost detail"):
            validate_details([])

    def test_rejects_negative_costs(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_details([CostDetailInput(category_id=1, cost=5), CostDetailInput(category_id=2, cost=-1)])
        assert exc_info.value.details == {"detail_indexes": [1]}

    def test_zero_cost_is_allowed(self):
        validate_details([CostDetailInput(category_id=1, cost=0)])


class TestSave:
    @pytest.mark.asyncio
    async def test_total_is_sum_of_details(self, food_service, world, day):
        entry = await food_service(world.clerk).save(food_entry(world, day))

        assert entry.total_cost == 400.0
        assert entry.property_id == world.hotel.id
        assert entry.created_by == world.clerk.id
        assert [d.category_name for d in entry.details] == ["Proteins", "Vegetables"]

    @pytest.mark.asyncio
    async def test_recalculates_daily_summary(self, food_service, repos, world, day, summary):
        await food_service(world.clerk).save(food_entry(world, day))

        refreshed = await repos.daily_summaries.get_by_date(day, world.hotel.id)
        assert refreshed.actual_food_cost == 400.0
        assert refreshed.actual_food_cost_pct == pytest.approx(40.0)
        assert refreshed.food_variance_pct == pytest.approx(10.0)
        assert refreshed.actual_beverage_cost == 0.0

    @pytest.mark.asyncio
    async def test_outlets_of_one_property_add_up(self, food_service, repos, world, day, summary):
        service = food_service(world.owner)
        await service.save(food_entry(world, day))
        await service.save(food_entry(world, day, world.bar, Dairy=100.0))

        refreshed = await repos.daily_summaries.get_by_date(day, world.hotel.id)
        assert refreshed.actual_food_cost == 500.0

    @pytest.mark.asyncio
    async def test_adjustments_apply(self, food_service, repos, world, day, summary):
        summary.ent_food = 50.0
        summary.co_food = 30.0
        summary.other_food_adjustment = 10.0
        await repos.daily_summaries.update(summary)

        await food_service(world.clerk).save(food_entry(world, day))

        refreshed = await repos.daily_summaries.get_by_date(day, world.hotel.id)
        assert refreshed.actual_food_cost == pytest.approx(330.0)

    @pytest.mark.asyncio
    async def test_writes_audit_entry(self, food_service, repos, world, day):
        entry = await food_service(world.clerk).save(food_entry(world, day))

        logs = await repos.audit_logs.list(filters={"resource": "food_cost_entry"})
        assert len(logs) == 1
        assert logs[0].action == "CREATE"
        assert logs[0].resource_id == str(entry.id)
        assert logs[0].property_id == world.hotel.id
        assert logs[0].details["created"]["total_cost"] == 400.0

    @pytest.mark.asyncio
    async def test_rejects_category_of_other_family(self, food_service, world, day):
        data = CostEntryCreate(
            date=day,
            outlet_id=world.restaurant.id,
            details=[CostDetailInput(category_id=world.beverage["Hot"].id, cost=10.0)],
        )
        with pytest.raises(ValidationFailedError, match="not a Food category"):
            await food_service(world.clerk).save(data)

    @pytest.mark.asyncio
    async def test_unknown_category(self, food_service, world, day):
        data = CostEntryCreate(
            date=day, outlet_id=world.restaurant.id, details=[CostDetailInput(category_id=9999, cost=1.0)]
        )
        with pytest.raises(NotFoundError):
            await food_service(world.clerk).save(data)

    @pytest.mark.asyncio
    async def test_unknown_outlet(self, food_service, world, day):
        data = food_entry(world, day)
        data.outlet_id = 9999
        with pytest.raises(NotFoundError, match="Outlet"):
            await food_service(world.clerk).save(data)

    @pytest.mark.asyncio
    async def test_requires_property_access(self, food_service, world, day):
        with pytest.raises(PermissionDeniedError):
            await food_service(world.clerk).save(food_entry(world, day, world.cafe))

    @pytest.mark.asyncio
    async def test_beverage_family(self, beverage_service, repos, world, day, summary):
        data = CostEntryCreate(
            date=day,
            outlet_id=world.bar.id,
            details=[CostDetailInput(category_id=world.beverage["Alcoholic"].id, cost=150.0)],
        )
        entry = await beverage_service(world.clerk).save(data)

        assert entry.total_cost == 150.0
        refreshed = await repos.daily_summaries.get_by_date(day, world.hotel.id)
        assert refreshed.actual_beverage_cost == 150.0
        assert refreshed.actual_beverage_cost_pct == pytest.approx(30.0)
        assert refreshed.actual_food_cost == 0.0


class TestUpdate:
    @pytest.mark.asyncio
    async def test_replace_details(self, food_service, repos, world, day, summary):
        service = food_service(world.manager)
        entry = await service.save(food_entry(world, day))

        updated = await service.update(
            entry.id,
            CostEntryUpdate(details=[CostDetailInput(category_id=world.food["Desserts"].id, cost=80.0)]),
        )

        assert updated.total_cost == 80.0
        assert [d.category_name for d in updated.details] == ["Desserts"]
        assert (await repos.daily_summaries.get_by_date(day, world.hotel.id)).actual_food_cost == 80.0

    @pytest.mark.asyncio
    async def test_moving_date_recalculates_both_days(self, food_service, repos, world, day, summary):
        next_day = day + timedelta(days=1)
        await repos.daily_summaries.create(
            DailyFinancialSummary(date=next_day, property_id=world.hotel.id, actual_food_revenue=800.0)
        )
        service = food_service(world.manager)
        entry = await service.save(food_entry(world, day))

        updated = await service.update(entry.id, CostEntryUpdate(date=next_day))

        assert updated.total_cost == 400.0
        assert len(updated.details) == 2
        assert (await repos.daily_summaries.get_by_date(day, world.hotel.id)).actual_food_cost == 0.0
        assert (await repos.daily_summaries.get_by_date(next_day, world.hotel.id)).actual_food_cost == 400.0

    @pytest.mark.asyncio
    async def test_audit_records_changes(self, food_service, repos, world, day):
        service = food_service(world.manager)
        entry = await service.save(food_entry(world, day))
        await service.update(entry.id, CostEntryUpdate(outlet_id=world.bar.id))

        logs = await repos.audit_logs.list(filters={"action": "UPDATE"})
        assert logs[-1].details["changes"]["outlet_id"] == {"from": world.restaurant.id, "to": world.bar.id}

    @pytest.mark.asyncio
    async def test_data_entry_cannot_update(self, food_service, world, day):
        entry = await food_service(world.clerk).save(food_entry(world, day))
        with pytest.raises(PermissionDeniedError, match="financial.food_costs.update"):
            await food_service(world.clerk).update(entry.id, CostEntryUpdate(date=day))

    @pytest.mark.asyncio
    async def test_update_missing_entry(self, food_service, world):
        with pytest.raises(NotFoundError, match="Food cost entry 42 not found"):
            await food_service(world.admin).update(42, CostEntryUpdate())


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_recalculates(self, food_service, repos, world, day, summary):
        entry = await food_service(world.clerk).save(food_entry(world, day))
        await food_service(world.owner).delete(entry.id)

        assert await repos.food_costs.get_by_id(entry.id) is None
        assert (await repos.daily_summaries.get_by_date(day, world.hotel.id)).actual_food_cost == 0.0
        logs = await repos.audit_logs.list(filters={"action": "DELETE"})
        assert logs[0].details["deleted"]["id"] == entry.id

    @pytest.mark.asyncio
    async def test_manager_cannot_delete(self, food_service, world, day):
        entry = await food_service(world.clerk).save(food_entry(world, day))
        with pytest.raises(PermissionDeniedError):
            await food_service(world.manager).delete(entry.id)


class TestReads:
    @pytest.mark.asyncio
    async def test_get_and_lookup_by_date(self, food_service, world, day):
        service = food_service(world.clerk)
        saved = await service.save(food_entry(world, day))

        assert (await service.get(saved.id)).id == saved.id
        assert (await service.get_by_date_and_outlet(day, world.restaurant.id)).id == saved.id
        with pytest.raises(NotFoundError):
            await service.get_by_date_and_outlet(day, world.bar.id)

    @pytest.mark.asyncio
    async def test_list_range_is_scoped_to_accessible_properties(self, food_service, world, day):
        await food_service(world.clerk).save(food_entry(world, day))
        await food_service(world.admin).save(food_entry(world, day, world.cafe, Grains=20.0))

        assert len(await food_service(world.admin).list_range(day, day)) == 2
        visible = await food_service(world.clerk).list_range(day, day)
        assert [e.outlet_id for e in visible] == [world.restaurant.id]

    @pytest.mark.asyncio
    async def test_list_range_rejects_reversed_dates(self, food_service, world, day):
        with pytest.raises(ValidationFailedError):
            await food_service(world.clerk).list_range(day, day - timedelta(days=1))

    @pytest.mark.asyncio
    async def test_list_by_outlet(self, food_service, world, day):
        service = food_service(world.clerk)
        await service.save(food_entry(world, day))
        await service.save(food_entry(world, day + timedelta(days=1)))

        entries = await service.list_by_outlet(world.restaurant.id)
        assert [e.date for e in entries] == [day + timedelta(days=1), day]

    @pytest.mark.asyncio
    async def test_outsider_cannot_read_other_outlets(self, food_service, world):
        with pytest.raises(PermissionDeniedError):
            await food_service(world.outsider).list_by_outlet(world.restaurant.id)


class TestDetailedReport:
    @pytest.mark.asyncio
    async def test_breakdown_per_outlet_and_overall(self, food_service, repos, world, day, summary):
        summary.ent_food = 40.0
        await repos.daily_summaries.update(summary)
        service = food_service(world.owner)
        await service.save(food_entry(world, day))
        await service.save(food_entry(world, day, world.bar, Proteins=100.0))

        report = await service.detailed_report(day, day)

        by_name = {r.outlet_name: r for r in report.outlet_reports}
        assert set(by_name) == {"Main Restaurant", "Lobby Bar"}
        assert by_name["Main Restaurant"].total_cost == 400.0
        assert by_name["Main Restaurant"].total_revenue == 0.0
        assert by_name["Lobby Bar"].category_costs[0].category_name == "Proteins"

        overall = report.overall_summary_report
        assert overall.outlet_id == "all"
        assert overall.total_cost_from_transfers == 500.0
        assert overall.ent_total == 40.0
        assert overall.total_cost == 460.0
        assert overall.total_revenue == 1000.0
        assert overall.cost_percentage == pytest.approx(46.0)
        assert overall.budget_cost_percentage == pytest.approx(30.0)
        assert overall.variance_percentage == pytest.approx(16.0)
        proteins = {c.category_name: c.total_cost for c in overall.category_costs}["Proteins"]
        assert proteins == 400.0
        assert len(overall.cost_details_by_item) == 3

    @pytest.mark.asyncio
    async def test_single_outlet(self, food_service, world, day, summary):
        service = food_service(world.owner)
        await service.save(food_entry(world, day))
        await service.save(food_entry(world, day, world.bar, Proteins=100.0))

        report = await service.detailed_report(day, day, outlet_id=world.bar.id)

        assert [r.outlet_name for r in report.outlet_reports] == ["Lobby Bar"]
        assert report.overall_summary_report.total_cost_from_transfers == 100.0

    @pytest.mark.asyncio
    async def test_empty_range(self, food_service, world, day):
        report = await food_service(world.clerk).detailed_report(day, day)

        assert report.outlet_reports == []
        assert report.overall_summary_report.total_cost == 0.0
        assert report.overall_summary_report.cost_percentage == 0.0
