"""
分组汇总 (Grouping / Rollup Layer)

把解析后的区间组织成设备维度和客户维度的 PA 行，并计算整体汇总：
- 只输出至少有一条故障记录的分组，无故障的设备不会出现在报表中；
- 按 PA 升序排列（最差的排在前面），PA 相同按分组键字典序；
- 汇总的 average_pa 默认是各设备 PA 的简单算术平均，可切换为按小时加权。
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Iterable, Sequence, TypeVar

from app.availability.accumulator import (
    DowntimeTotals,
    accumulate_downtime,
    by_customer,
    by_equipment,
)
from app.availability.calculator import (
    availability_percent,
    pa_status,
    total_active_hours,
)
from app.availability.models import (
    AvailabilityPolicy,
    AvailabilitySummary,
    AverageMode,
    CustomerAvailability,
    EquipmentAvailability,
    GroupAggregate,
    ResolvedInterval,
    UNKNOWN_CUSTOMER,
)

RowT = TypeVar("RowT", bound=GroupAggregate)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def sort_rows(rows: Iterable[RowT]) -> list[RowT]:
    """PA 升序，PA 相同按分组键升序。"""
    return sorted(rows, key=lambda r: (r.availability_percent, r.group_key))


def _first_location(intervals: Sequence[ResolvedInterval]) -> str | None:
    # 取最早开始的记录的地点，与输入顺序无关
    candidates = [i for i in intervals if i.record.location_key]
    if not candidates:
        return None
    earliest = min(
        candidates,
        key=lambda i: (i.start is None, i.start or _EPOCH, str(i.record.id)),
    )
    return earliest.record.location_key


def _first_value(values: Iterable[str | None]) -> str | None:
    present = sorted({v for v in values if v})
    return present[0] if present else None


def build_equipment_rows(
    intervals: Sequence[ResolvedInterval],
    days: int,
    policy: AvailabilityPolicy,
) -> list[EquipmentAvailability]:
    """设备维度：每台设备一行，有效小时 = 天数 × 每天小时数。"""
    rows = []
    for key, totals in accumulate_downtime(intervals, by_equipment).items():
        active = total_active_hours(1, days, policy.hours_per_day)
        percent = availability_percent(active, totals.total_downtime_hours)
        rows.append(EquipmentAvailability(
            group_key=key,
            unit_count=1,
            total_active_hours=active,
            total_downtime_hours=totals.total_downtime_hours,
            breakdown_count=totals.breakdown_count,
            availability_percent=percent,
            pa_status=pa_status(percent, policy.good_threshold, policy.warning_threshold),
            equipment_name=_first_value(i.record.equipment_name for i in totals.intervals),
            customer_key=_first_value(i.record.customer_key for i in totals.intervals) or UNKNOWN_CUSTOMER,
            location=_first_location(totals.intervals),
        ))
    return sort_rows(rows)


def _customer_row(key: str, totals: DowntimeTotals, days: int, policy: AvailabilityPolicy) -> CustomerAvailability:
    active = total_active_hours(totals.unit_count, days, policy.hours_per_day)
    percent = availability_percent(active, totals.total_downtime_hours)
    return CustomerAvailability(
        group_key=key,
        unit_count=totals.unit_count,
        total_active_hours=active,
        total_downtime_hours=totals.total_downtime_hours,
        breakdown_count=totals.breakdown_count,
        availability_percent=percent,
        pa_status=pa_status(percent, policy.good_threshold, policy.warning_threshold),
        equipment_keys=sorted(totals.unit_keys),
    )


def build_customer_rows(
    intervals: Sequence[ResolvedInterval],
    days: int,
    policy: AvailabilityPolicy,
) -> list[CustomerAvailability]:
    """客户维度：有效小时 = 该客户下出现故障的设备数 × 天数 × 每天小时数。"""
    grouped = accumulate_downtime(intervals, by_customer)
    return sort_rows(_customer_row(key, totals, days, policy) for key, totals in grouped.items())


def summarize(
    rows: Sequence[GroupAggregate],
    mode: AverageMode = AverageMode.SIMPLE,
) -> AvailabilitySummary:
    """
    汇总统计。没有任何分组时返回 total_equipment=0、average_pa=100 的零值汇总。
    """
    if not rows:
        return AvailabilitySummary(average_mode=mode)

    active = math.fsum(r.total_active_hours for r in rows)
    downtime = math.fsum(r.total_downtime_hours for r in rows)
    if mode == AverageMode.WEIGHTED:
        average = availability_percent(active, downtime)
    else:
        average = math.fsum(r.availability_percent for r in rows) / len(rows)

    return AvailabilitySummary(
        total_equipment=len(rows),
        average_pa=average,
        total_breakdowns=sum(r.breakdown_count for r in rows),
        total_downtime_hours=downtime,
        total_active_hours=active,
        average_mode=mode,
    )
