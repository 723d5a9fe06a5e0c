"""Tests for the primary log store accessor."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from healthlog.aggregation.date_range import resolve_interval
from healthlog.errors import NotFoundError, StoreError
from healthlog.models.health_log import ActivityType
from healthlog.schemas.health_log import HealthLogCreate, HealthLogUpdate, LogSource
from healthlog.sources.primary import LogFilter, PrimaryLogStore
from tests.conftest import test_session


def _create(activity_type: str, value: float, occurred_at: datetime, **kwargs: object) -> HealthLogCreate:
    return HealthLogCreate(
        activity_type=ActivityType(activity_type), value=value, occurred_at=occurred_at, **kwargs
    )


class TestCrud:
    async def test_create_then_get_round_trips(self) -> None:
        occurred = datetime(2025, 9, 5, 7, 30, 15, 123000)
        async with test_session() as session:
            store = PrimaryLogStore(session)
            created = await store.create(
                _create("heart_rate", 72, occurred, unit="bpm", note="after run")
            )
            fetched = await store.get(created.id)

        assert fetched.activity_type == "heart_rate"
        assert fetched.value == 72
        assert fetched.unit == "bpm"
        assert fetched.note == "after run"
        assert fetched.occurred_at == occurred
        assert fetched.created_at is not None

    async def test_aware_timestamps_are_stored_as_utc(self) -> None:
        occurred = datetime(2025, 9, 5, 14, 0, tzinfo=timezone(timedelta(hours=7)))
        async with test_session() as session:
            store = PrimaryLogStore(session)
            created = await store.create(_create("spo2", 97, occurred))

        assert created.occurred_at == datetime(2025, 9, 5, 7, 0)

    async def test_update_is_partial(self) -> None:
        occurred = datetime(2025, 9, 5, 7, 0)
        async with test_session() as session:
            store = PrimaryLogStore(session)
            created = await store.create(_create("calories", 250, occurred, unit="kcal"))
            updated = await store.update(created.id, HealthLogUpdate(value=300))

        assert updated.value == 300
        assert updated.activity_type == "calories"
        assert updated.occurred_at == occurred
        assert updated.unit == "kcal"

    async def test_update_can_change_type_and_clear_note(self) -> None:
        async with test_session() as session:
            store = PrimaryLogStore(session)
            created = await store.create(
                _create("heart_rate", 60, datetime(2025, 9, 5), note="typo")
            )
            updated = await store.update(
                created.id,
                HealthLogUpdate(activity_type=ActivityType.RESTING_HEART_RATE, note=None),
            )

        assert updated.activity_type == "resting_heart_rate"
        assert updated.note is None

    async def test_delete(self) -> None:
        async with test_session() as session:
            store = PrimaryLogStore(session)
            created = await store.create(_create("steps", 1000, datetime(2025, 9, 5)))
            await store.delete(created.id)

            with pytest.raises(NotFoundError):
                await store.get(created.id)

    @pytest.mark.parametrize("operation", ["get", "update", "delete"])
    async def test_missing_id_raises_not_found(self, operation: str) -> None:
        async with test_session() as session:
            store = PrimaryLogStore(session)
            with pytest.raises(NotFoundError) as exc_info:
                if operation == "update":
                    await store.update(999, HealthLogUpdate(value=1))
                else:
                    await getattr(store, operation)(999)

        assert exc_info.value.record_id == 999


class TestQueries:
    async def _seed(self, store: PrimaryLogStore) -> None:
        for hour, value in [(8, 60), (10, 70), (12, 80)]:
            await store.create(_create("heart_rate", value, datetime(2025, 9, 5, hour)))
        await store.create(_create("heart_rate", 90, datetime(2025, 9, 6, 8)))
        await store.create(_create("calories", 300, datetime(2025, 9, 5, 9)))

    async def test_list_page_newest_first_with_total(self) -> None:
        interval = resolve_interval(date=date(2025, 9, 5), tz=timezone.utc)
        async with test_session() as session:
            store = PrimaryLogStore(session)
            await self._seed(store)
            page = await store.list_page(LogFilter("heart_rate", interval), skip=0, limit=2)

        assert page.total == 3
        assert [item.value for item in page.items] == [80, 70]
        assert all(item.source is LogSource.HEALTHLOG for item in page.items)
        assert page.items[0].occurred_at == datetime(2025, 9, 5, 12, tzinfo=timezone.utc)

    async def test_list_page_ties_broken_by_id(self) -> None:
        same = datetime(2025, 9, 5, 8)
        async with test_session() as session:
            store = PrimaryLogStore(session)
            first = await store.create(_create("steps", 1, same))
            second = await store.create(_create("steps", 2, same))
            page = await store.list_page(LogFilter(), skip=0, limit=10)

        assert [item.id for item in page.items] == [second.id, first.id]

    async def test_list_all_ignores_pagination(self) -> None:
        async with test_session() as session:
            store = PrimaryLogStore(session)
            await self._seed(store)
            page = await store.list_all(LogFilter("heart_rate"))

        assert page.total == 4
        assert len(page.items) == 4

    async def test_sum(self) -> None:
        interval = resolve_interval(date=date(2025, 9, 5), tz=timezone.utc)
        async with test_session() as session:
            store = PrimaryLogStore(session)
            await self._seed(store)
            total = await store.sum(LogFilter("heart_rate", interval))
            empty = await store.sum(LogFilter("stress", interval))

        assert total == 210
        assert empty == 0

    async def test_count_by_type(self) -> None:
        async with test_session() as session:
            store = PrimaryLogStore(session)
            await self._seed(store)
            counts = await store.count_by_type(LogFilter())

        assert [(c.activity_type, c.count) for c in counts] == [("calories", 1), ("heart_rate", 4)]


class TestStoreErrors:
    async def test_sqlalchemy_errors_become_store_errors(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("disk I/O error"))
        )
        session.rollback = AsyncMock()

        with pytest.raises(StoreError):
            await PrimaryLogStore(session).sum(LogFilter())
