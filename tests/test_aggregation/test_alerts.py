"""Tests for abnormality rules and the monthly overview."""

from datetime import date, datetime, timezone

from healthlog.aggregation.alerts import (
    ABNORMAL_HEART_RATE,
    FREQUENT_SHORT_SLEEP,
    HEART_RATE_OUT_OF_RANGE,
    LOW_SPO2,
    LOW_SPO2_MONTH,
    SHORT_SLEEP,
    detect_abnormalities,
    monthly_overview,
    monthly_warnings,
    summarize_month,
)
from healthlog.aggregation.engine import LogAggregator
from healthlog.models.health_log import HealthLog
from healthlog.schemas.device import DayOverview
from healthlog.sources.device.source import DeviceSource
from healthlog.sources.primary import PrimaryLogStore
from tests.conftest import add_device_records, device_test_session, test_session


def _epoch(*args: int) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


class TestDetectAbnormalities:
    def test_normal_day(self) -> None:
        assert detect_abnormalities([60, 80, 110], [97, 98], 450) == []

    def test_high_heart_rate(self) -> None:
        assert detect_abnormalities([60, 121], [], None) == [ABNORMAL_HEART_RATE]

    def test_low_heart_rate(self) -> None:
        assert detect_abnormalities([49, 70], [], None) == [ABNORMAL_HEART_RATE]

    def test_boundaries_are_not_abnormal(self) -> None:
        assert detect_abnormalities([50, 120], [94], 360) == []

    def test_low_spo2(self) -> None:
        assert detect_abnormalities([], [96, 93], None) == [LOW_SPO2]

    def test_short_sleep(self) -> None:
        assert detect_abnormalities([], [], 359) == [SHORT_SLEEP]

    def test_unknown_sleep_is_not_flagged(self) -> None:
        assert detect_abnormalities([], [], None) == []

    def test_all_rules(self) -> None:
        assert detect_abnormalities([130], [90], 200) == [ABNORMAL_HEART_RATE, LOW_SPO2, SHORT_SLEEP]


class TestMonthlyWarnings:
    def test_quiet_month(self) -> None:
        assert monthly_warnings([60, 110], [97], [420] * 30) == []

    def test_heart_rate_and_spo2(self) -> None:
        assert monthly_warnings([60, 125], [93, 98], []) == [HEART_RATE_OUT_OF_RANGE, LOW_SPO2_MONTH]

    def test_ten_short_nights_are_tolerated(self) -> None:
        assert monthly_warnings([], [], [300] * 10 + [420] * 20) == []

    def test_more_than_ten_short_nights(self) -> None:
        assert monthly_warnings([], [], [300] * 11 + [420] * 19) == [FREQUENT_SHORT_SLEEP]

    def test_summarize_month_skips_unknown_sleep(self) -> None:
        days = [
            DayOverview(day=date(2025, 9, n), heart_rates=[70], spo2s=[], sleep_duration=300, abnormal=[])
            for n in range(1, 12)
        ]
        days += [
            DayOverview(day=date(2025, 9, n), heart_rates=[], spo2s=[92], abnormal=[])
            for n in range(12, 31)
        ]
        assert summarize_month(days) == [LOW_SPO2_MONTH, FREQUENT_SHORT_SLEEP]


class TestMonthlyOverview:
    async def test_one_entry_per_day_with_warnings(self) -> None:
        async with test_session() as session:
            session.add_all(
                [
                    HealthLog(activity_type="heart_rate", value=130, occurred_at=datetime(2024, 2, 3, 9)),
                    HealthLog(activity_type="spo2", value=97, occurred_at=datetime(2024, 2, 3, 9)),
                ]
            )
            await session.commit()
        await add_device_records(
            "spo2", [{"time": _epoch(2024, 2, 10, 8), "value": {"spo2": 91}}]
        )
        await add_device_records(
            "sleep",
            [
                {"time": _epoch(2024, 2, 10, 6), "value": {"duration": 200}},
                {"time": _epoch(2024, 2, 10, 14), "value": {"duration": 60}},
                {"time": _epoch(2024, 2, 11, 6), "value": {"duration": 480}},
            ],
        )

        async with test_session() as session, device_test_session() as device_session:
            aggregator = LogAggregator(
                PrimaryLogStore(session), DeviceSource(device_session), tz=timezone.utc
            )
            days = await monthly_overview(aggregator, device_session, 2024, 2)

        assert len(days) == 29
        by_day = {d.day: d for d in days}

        assert by_day[date(2024, 2, 3)].heart_rates == [130]
        assert by_day[date(2024, 2, 3)].abnormal == [ABNORMAL_HEART_RATE]

        assert by_day[date(2024, 2, 10)].spo2s == [91]
        assert by_day[date(2024, 2, 10)].sleep_duration == 260
        assert by_day[date(2024, 2, 10)].abnormal == [LOW_SPO2, SHORT_SLEEP]

        assert by_day[date(2024, 2, 11)].abnormal == []
        assert by_day[date(2024, 2, 1)].sleep_duration is None

    async def test_sleep_unavailable_counts_as_unknown(self) -> None:
        async with test_session() as session:
            aggregator = LogAggregator(PrimaryLogStore(session), DeviceSource(None), tz=timezone.utc)
            days = await monthly_overview(aggregator, None, 2025, 4)

        assert len(days) == 30
        assert all(d.sleep_duration is None and d.abnormal == [] for d in days)
