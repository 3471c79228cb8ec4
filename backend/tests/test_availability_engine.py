"""可用率引擎单元测试：区间解析、累加、PA 计算和分组汇总。"""
import random
from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import make_interval, utc
from app.availability.accumulator import accumulate_downtime, by_customer, by_equipment, merge_totals
from app.availability.calculator import availability_percent, days_in_window, pa_status, total_active_hours
from app.availability.models import (
    AvailabilityPolicy,
    AverageMode,
    EvaluationWindow,
    PaStatus,
    UNKNOWN_CUSTOMER,
)
from app.availability.query import compute_availability
from app.availability.resolver import as_utc, overlaps_window, resolve_interval, window_bounds
from app.availability.rollup import summarize


MARCH_WINDOW = EvaluationWindow(
    date_from=date(2024, 3, 1), date_to=date(2024, 3, 10), reference_now=utc(2024, 3, 6),
)


def _fleet():
    """三个客户、五台设备的一组记录，包含一条未结束和一条缺少开始时间的记录。"""
    return [
        make_interval(1, "EXC-01", utc(2024, 3, 1, 8), utc(2024, 3, 1, 14), customer="ACME"),
        make_interval(2, "EXC-01", utc(2024, 3, 5), None, customer="ACME"),
        make_interval(3, "DT-07", utc(2024, 3, 2, 1, 15), utc(2024, 3, 2, 3, 40), customer="ACME"),
        make_interval(4, "GR-03", utc(2024, 3, 3), utc(2024, 3, 3, 0, 0, 1), customer="Borneo"),
        make_interval(5, "GR-03", utc(2024, 3, 4, 7, 7, 7), utc(2024, 3, 4, 9, 9, 9), customer="Borneo"),
        make_interval(6, "LD-11", utc(2024, 3, 9, 22), utc(2024, 3, 10, 1, 30), customer=None),
        make_interval(7, "DZ-02", None, None, customer="Borneo"),
    ]


class TestResolveInterval:
    def test_open_interval_uses_reference_now(self):
        r = resolve_interval(make_interval(1, start=utc(2024, 1, 1)), reference_now=utc(2024, 1, 2))
        assert r.duration_hours == 24
        assert r.end == utc(2024, 1, 2)
        assert r.warning is None

    def test_end_before_start_is_clamped(self):
        r = resolve_interval(make_interval(1, start=utc(2024, 1, 2), end=utc(2024, 1, 1)), utc(2024, 1, 5))
        assert r.duration_hours == 0
        assert r.warning is not None
        assert r.warning.code == "end_before_start"

    def test_missing_start(self):
        r = resolve_interval(make_interval(9, start=None, end=utc(2024, 1, 1)), utc(2024, 1, 5))
        assert r.duration_hours == 0
        assert r.has_start is False
        assert r.warning.code == "missing_start"
        assert r.warning.record_id == 9

    def test_naive_times_are_utc(self):
        naive = make_interval(1, start=datetime(2024, 1, 1, 0), end=datetime(2024, 1, 1, 6))
        assert resolve_interval(naive, utc(2024, 2, 1)).duration_hours == 6

    def test_mixed_offsets(self):
        plus7 = timezone(timedelta(hours=7))
        rec = make_interval(1, start=datetime(2024, 1, 1, 7, tzinfo=plus7), end=utc(2024, 1, 1, 3))
        assert resolve_interval(rec, utc(2024, 2, 1)).duration_hours == 3

    def test_as_utc_converts(self):
        plus7 = timezone(timedelta(hours=7))
        assert as_utc(datetime(2024, 1, 1, 7, tzinfo=plus7)) == utc(2024, 1, 1, 0)


class TestWindow:
    def test_window_bounds_inclusive(self):
        lower, upper = window_bounds(date(2024, 3, 1), date(2024, 3, 1))
        assert lower == utc(2024, 3, 1)
        assert upper == utc(2024, 3, 2)

    def test_overlap_rules(self):
        d1, d2 = date(2024, 3, 1), date(2024, 3, 10)
        assert overlaps_window(make_interval(1, start=utc(2024, 2, 28), end=utc(2024, 3, 1, 2)), d1, d2)
        assert overlaps_window(make_interval(2, start=utc(2024, 2, 1), end=None), d1, d2)
        assert overlaps_window(make_interval(3, start=None), d1, d2)
        assert not overlaps_window(make_interval(4, start=utc(2024, 3, 11)), d1, d2)
        assert not overlaps_window(make_interval(5, start=utc(2024, 2, 1), end=utc(2024, 2, 2)), d1, d2)


class TestCalculator:
    def test_single_day_window(self):
        assert days_in_window(date(2024, 3, 1), date(2024, 3, 1)) == 1

    def test_ten_day_window(self):
        assert days_in_window(date(2024, 3, 1), date(2024, 3, 10)) == 10

    def test_reversed_window_is_zero_days(self):
        assert days_in_window(date(2024, 3, 10), date(2024, 3, 1)) == 0

    def test_datetime_window_rounds_up(self):
        assert days_in_window(datetime(2024, 3, 1, 0), datetime(2024, 3, 1, 12)) == 2

    def test_zero_units_is_full_availability(self):
        assert total_active_hours(0, 10) == 0
        assert availability_percent(total_active_hours(0, 10), 0) == 100.0

    def test_floor_at_zero(self):
        assert availability_percent(24, 30) == 0.0

    def test_plain_percent(self):
        assert availability_percent(240, 30) == pytest.approx(87.5)

    def test_custom_hours_per_day(self):
        assert total_active_hours(2, 10, hours_per_day=20) == 400.0

    @pytest.mark.parametrize("percent,expected", [
        (100.0, PaStatus.GOOD),
        (95.0, PaStatus.GOOD),
        (94.99, PaStatus.WARNING),
        (85.0, PaStatus.WARNING),
        (84.99, PaStatus.CRITICAL),
        (0.0, PaStatus.CRITICAL),
    ])
    def test_status_bands(self, percent, expected):
        assert pa_status(percent) == expected


class TestAccumulator:
    def _resolved(self, records):
        return [resolve_interval(r, MARCH_WINDOW.reference_now) for r in records]

    def test_each_record_in_one_group(self):
        totals = accumulate_downtime(self._resolved(_fleet()), by_equipment)
        assert sum(t.breakdown_count for t in totals.values()) == 7
        assert totals["EXC-01"].breakdown_count == 2
        assert totals["EXC-01"].total_downtime_hours == pytest.approx(30)

    def test_customer_groups_count_units(self):
        totals = accumulate_downtime(self._resolved(_fleet()), by_customer)
        assert totals["ACME"].unit_count == 2
        assert totals["Borneo"].unit_keys == {"GR-03", "DZ-02"}
        assert totals[UNKNOWN_CUSTOMER].unit_keys == {"LD-11"}

    def test_order_independence(self):
        records = self._resolved(_fleet())
        baseline = accumulate_downtime(records, by_customer)
        rng = random.Random(7)
        for _ in range(20):
            shuffled = records[:]
            rng.shuffle(shuffled)
            totals = accumulate_downtime(shuffled, by_customer)
            for key, group in baseline.items():
                assert totals[key].total_downtime_hours == group.total_downtime_hours
                assert totals[key].breakdown_count == group.breakdown_count

    def test_merge_batches_matches_single_pass(self):
        records = self._resolved(_fleet())
        whole = accumulate_downtime(records, by_equipment)
        parts = [accumulate_downtime(records[i:i + 2], by_equipment) for i in range(0, len(records), 2)]
        merged = merge_totals(parts)
        assert merged.keys() == whole.keys()
        for key in whole:
            assert merged[key].total_downtime_hours == whole[key].total_downtime_hours
            assert merged[key].breakdown_count == whole[key].breakdown_count


class TestComputeAvailability:
    def test_end_to_end_scenario(self):
        records = [
            make_interval("A", "EXC-01", utc(2024, 3, 1, 8), utc(2024, 3, 1, 14)),
            make_interval("B", "EXC-01", utc(2024, 3, 5), None),
        ]
        report = compute_availability(records, MARCH_WINDOW)
        assert report.days_in_window == 10
        row = report.equipment[0]
        assert row.group_key == "EXC-01"
        assert row.total_active_hours == 240
        assert row.total_downtime_hours == pytest.approx(30)
        assert round(row.availability_percent, 2) == 87.5
        assert row.pa_status == PaStatus.WARNING
        assert report.summary.total_equipment == 1
        assert report.summary.total_breakdowns == 2

    def test_empty_input(self):
        report = compute_availability([], MARCH_WINDOW)
        assert report.equipment == []
        assert report.customers == []
        assert report.summary.total_equipment == 0
        assert report.summary.average_pa == 100
        assert report.summary.total_breakdowns == 0

    def test_deterministic(self):
        first = compute_availability(_fleet(), MARCH_WINDOW)
        second = compute_availability(_fleet(), MARCH_WINDOW)
        assert first.model_dump() == second.model_dump()

    def test_shuffled_input_gives_same_report(self):
        records = _fleet()
        baseline = compute_availability(records, MARCH_WINDOW).model_dump()
        rng = random.Random(11)
        for _ in range(10):
            rng.shuffle(records)
            assert compute_availability(records, MARCH_WINDOW).model_dump() == baseline

    def test_rows_sorted_worst_first(self):
        report = compute_availability(_fleet(), MARCH_WINDOW)
        keys = [(r.availability_percent, r.group_key) for r in report.equipment]
        assert keys == sorted(keys)
        assert report.equipment[0].group_key == "EXC-01"

    def test_ties_broken_by_key(self):
        records = [
            make_interval(1, "ZZ-9", utc(2024, 3, 2), utc(2024, 3, 2)),
            make_interval(2, "AA-1", utc(2024, 3, 2), utc(2024, 3, 2)),
        ]
        report = compute_availability(records, MARCH_WINDOW)
        assert [r.group_key for r in report.equipment] == ["AA-1", "ZZ-9"]

    def test_customer_rows(self):
        report = compute_availability(_fleet(), MARCH_WINDOW)
        acme = next(r for r in report.customers if r.group_key == "ACME")
        assert acme.unit_count == 2
        assert acme.total_active_hours == 480
        assert acme.equipment_keys == ["DT-07", "EXC-01"]
        assert acme.breakdown_count == 3
        unknown = next(r for r in report.customers if r.group_key == UNKNOWN_CUSTOMER)
        assert unknown.unit_count == 1

    def test_only_equipment_with_records(self):
        report = compute_availability(_fleet(), MARCH_WINDOW)
        assert {r.group_key for r in report.equipment} == {"EXC-01", "DT-07", "GR-03", "LD-11", "DZ-02"}

    def test_data_quality_warnings_do_not_abort(self):
        records = _fleet() + [make_interval(8, "EXC-01", utc(2024, 3, 3), utc(2024, 3, 2))]
        report = compute_availability(records, MARCH_WINDOW)
        codes = sorted(w.code for w in report.warnings)
        assert codes == ["end_before_start", "missing_start"]
        exc = next(r for r in report.equipment if r.group_key == "EXC-01")
        assert exc.breakdown_count == 3
        assert exc.total_downtime_hours == pytest.approx(30)

    def test_missing_start_counted_by_default(self):
        report = compute_availability(_fleet(), MARCH_WINDOW)
        dz = next(r for r in report.equipment if r.group_key == "DZ-02")
        assert dz.breakdown_count == 1
        assert dz.availability_percent == 100.0

    def test_missing_start_can_be_excluded(self):
        policy = AvailabilityPolicy(count_missing_start=False)
        report = compute_availability(_fleet(), MARCH_WINDOW, policy)
        assert "DZ-02" not in {r.group_key for r in report.equipment}
        assert any(w.code == "missing_start" for w in report.warnings)

    def test_duration_not_clipped_to_window(self):
        # 跨越窗口起点的故障按完整时长计入
        records = [make_interval(1, "EXC-01", utc(2024, 2, 29, 12), utc(2024, 3, 1, 12))]
        report = compute_availability(records, MARCH_WINDOW)
        assert report.equipment[0].total_downtime_hours == pytest.approx(24)

    def test_location_from_earliest_record(self):
        records = [
            make_interval(1, "EXC-01", utc(2024, 3, 4), utc(2024, 3, 4, 1), location="Site B"),
            make_interval(2, "EXC-01", utc(2024, 3, 2), utc(2024, 3, 2, 1), location="Site A"),
        ]
        report = compute_availability(records, MARCH_WINDOW)
        assert report.equipment[0].location == "Site A"

    def test_hours_per_day_policy(self):
        records = [make_interval(1, "EXC-01", utc(2024, 3, 1), utc(2024, 3, 1, 20))]
        report = compute_availability(records, MARCH_WINDOW, AvailabilityPolicy(hours_per_day=20))
        assert report.equipment[0].total_active_hours == 200
        assert report.equipment[0].availability_percent == pytest.approx(90.0)

    def test_records_outside_window_are_ignored(self):
        old = [make_interval(1, "OLD-01", utc(2023, 1, 1), utc(2023, 1, 2))]
        report = compute_availability(old, MARCH_WINDOW)
        assert report.equipment == []
        assert report.customers == []
        assert report.summary.total_breakdowns == 0

    def test_records_after_window_are_ignored(self):
        records = _fleet() + [make_interval(9, "EXC-01", utc(2024, 3, 11), utc(2024, 3, 12))]
        report = compute_availability(records, MARCH_WINDOW)
        exc = next(r for r in report.equipment if r.group_key == "EXC-01")
        assert exc.breakdown_count == 2
        assert exc.total_downtime_hours == pytest.approx(30)

    @pytest.mark.parametrize("mode", [AverageMode.SIMPLE, AverageMode.WEIGHTED])
    def test_percent_always_between_0_and_100(self, mode):
        records = _fleet() + [
            make_interval(8, "EXC-01", utc(2024, 3, 3), utc(2024, 3, 2)),
            make_interval(9, "HL-05", utc(2024, 2, 20), None, customer="Borneo"),
        ]
        policy = AvailabilityPolicy(average_mode=mode)
        rng = random.Random(3)
        for _ in range(10):
            rng.shuffle(records)
            report = compute_availability(records, MARCH_WINDOW, policy)
            for row in report.equipment + report.customers:
                assert 0 <= row.availability_percent <= 100
            assert 0 <= report.summary.average_pa <= 100
            hl = next(r for r in report.equipment if r.group_key == "HL-05")
            assert hl.availability_percent == 0.0


class TestSummary:
    def test_simple_average(self):
        report = compute_availability(_fleet(), MARCH_WINDOW)
        mean = sum(r.availability_percent for r in report.equipment) / len(report.equipment)
        assert report.summary.average_pa == pytest.approx(mean)
        assert report.summary.average_mode == AverageMode.SIMPLE

    def test_weighted_average(self):
        policy = AvailabilityPolicy(average_mode=AverageMode.WEIGHTED)
        report = compute_availability(_fleet(), MARCH_WINDOW, policy)
        s = report.summary
        assert s.average_pa == pytest.approx((s.total_active_hours - s.total_downtime_hours) / s.total_active_hours * 100)
        assert s.average_mode == AverageMode.WEIGHTED

    def test_empty_summary_keeps_mode(self):
        s = summarize([], AverageMode.WEIGHTED)
        assert s.total_equipment == 0
        assert s.average_pa == 100.0
        assert s.average_mode == AverageMode.WEIGHTED

    def test_summary_line(self):
        report = compute_availability(_fleet(), MARCH_WINDOW)
        assert report.summary_line().startswith("2024-03-01..2024-03-10: 5 units, 7 breakdowns")
