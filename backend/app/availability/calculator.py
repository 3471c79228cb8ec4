"""
可用率计算 (Availability Calculator)

PA = (有效小时 - 停机小时) / 有效小时 × 100，下限截断为 0。
有效小时 = 设备数 × 窗口天数 × 每天小时数；有效小时为 0 时 PA 定义为 100。
"""
from __future__ import annotations

import math
from datetime import date, datetime

from app.availability.models import PaStatus

SECONDS_PER_DAY = 86400.0


def days_in_window(date_from: date, date_to: date) -> int:
    """
    窗口天数，两端包含：date_from == date_to 时为 1 天。

    传入 datetime 时按不足一天向上取整；date_from 晚于 date_to 时返回 0。
    """
    if isinstance(date_from, datetime) or isinstance(date_to, datetime):
        seconds = (_to_datetime(date_to) - _to_datetime(date_from)).total_seconds()
        days = math.ceil(seconds / SECONDS_PER_DAY) + 1
    else:
        days = (date_to - date_from).days + 1
    return max(0, days)


def _to_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def total_active_hours(unit_count: int, days: int, hours_per_day: int = 24) -> float:
    return float(unit_count * days * hours_per_day)


def availability_percent(active_hours: float, downtime_hours: float) -> float:
    """未取整的 PA 百分比；展示时再保留两位小数。"""
    if active_hours <= 0:
        return 100.0
    return max(0.0, (active_hours - downtime_hours) / active_hours * 100)


def pa_status(percent: float, good_threshold: float = 95.0, warning_threshold: float = 85.0) -> PaStatus:
    if percent >= good_threshold:
        return PaStatus.GOOD
    if percent >= warning_threshold:
        return PaStatus.WARNING
    return PaStatus.CRITICAL
