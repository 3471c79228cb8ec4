"""
故障区间解析 (Interval Resolver)

把一条故障记录解析为 (start, end, duration_hours)：
- 没有 start_time 的记录时长为 0，并产生 missing_start 告警；
- 没有 end_time 的记录视为仍在故障中，end 取 reference_now；
- end 早于 start 属于数据错误，时长截断为 0 并产生 end_before_start 告警。

reference_now 必须由调用方传入，这里从不读取系统时钟。
无时区的时间一律按 UTC 处理。
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from app.availability.models import (
    BreakdownInterval,
    DataQualityWarning,
    ResolvedInterval,
)

SECONDS_PER_HOUR = 3600.0


def as_utc(value: datetime) -> datetime:
    """无时区时间视为 UTC，有时区时间转换到 UTC。"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_interval(record: BreakdownInterval, reference_now: datetime) -> ResolvedInterval:
    """解析单条故障记录，纯函数。"""
    if record.start_time is None:
        return ResolvedInterval(
            record=record,
            warning=DataQualityWarning(
                record_id=record.id,
                equipment_key=record.equipment_key,
                code="missing_start",
                message=f"breakdown {record.id} on {record.equipment_key} has no start time",
            ),
        )

    start = as_utc(record.start_time)
    end = as_utc(record.end_time) if record.end_time is not None else as_utc(reference_now)
    raw_hours = (end - start).total_seconds() / SECONDS_PER_HOUR

    warning = None
    if record.end_time is not None and raw_hours < 0:
        warning = DataQualityWarning(
            record_id=record.id,
            equipment_key=record.equipment_key,
            code="end_before_start",
            message=(
                f"breakdown {record.id} on {record.equipment_key} ends "
                f"{-raw_hours:.2f}h before it starts"
            ),
        )

    return ResolvedInterval(
        record=record,
        start=start,
        end=end,
        duration_hours=max(0.0, raw_hours),
        warning=warning,
    )


def window_bounds(date_from: date, date_to: date) -> tuple[datetime, datetime]:
    """窗口的 UTC 起止时刻：[date_from 00:00, date_to 次日 00:00)。"""
    lower = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(date_to, time.min, tzinfo=timezone.utc) + timedelta(days=1)
    return lower, upper


def overlaps_window(record: BreakdownInterval, date_from: date, date_to: date) -> bool:
    """
    判断记录是否落在窗口内或与窗口重叠。

    没有 start_time 的记录无法判断区间，交由调用方决定是否计入。
    """
    if record.start_time is None:
        return True
    lower, upper = window_bounds(date_from, date_to)
    start = as_utc(record.start_time)
    if start >= upper:
        return False
    if record.end_time is None:
        return True
    return max(start, as_utc(record.end_time)) >= lower
