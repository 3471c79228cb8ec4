"""
单台设备故障时长表 (Unit Downtime Table)

逐条列出故障记录的持续时长和账龄：
- duration_hours / duration_days：与 PA 计算使用同一套区间解析规则；
- aging_days：已 RFU 且有结束时间的按 (结束 - 开始) 计，否则按 (当前 - 开始) 计，向下取整。
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel

from app.availability.models import BreakdownInterval
from app.availability.resolver import SECONDS_PER_HOUR, as_utc, resolve_interval

RFU_READY = "ready"


class DowntimeRow(BaseModel):
    """故障时长表中的一行。"""
    id: Union[int, str]
    equipment_key: str
    equipment_name: Optional[str] = None
    customer_key: str
    location: Optional[str] = None
    maintenance_category: Optional[str] = None
    rfu: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_hours: float = 0.0
    duration_days: float = 0.0
    aging_days: int = 0


def _aging_days(record: BreakdownInterval, reference_now: datetime) -> int:
    if record.start_time is None:
        return 0
    start = as_utc(record.start_time)
    if record.rfu == RFU_READY and record.end_time is not None:
        end = as_utc(record.end_time)
    else:
        end = as_utc(reference_now)
    hours = (end - start).total_seconds() / SECONDS_PER_HOUR
    return max(0, math.floor(hours / 24))


def build_downtime_row(record: BreakdownInterval, reference_now: datetime) -> DowntimeRow:
    interval = resolve_interval(record, reference_now)
    return DowntimeRow(
        id=record.id,
        equipment_key=record.equipment_key,
        equipment_name=record.equipment_name,
        customer_key=record.customer_key,
        location=record.location_key,
        maintenance_category=record.maintenance_category,
        rfu=record.rfu,
        start_time=record.start_time,
        end_time=record.end_time,
        duration_hours=round(interval.duration_hours, 2),
        duration_days=round(interval.duration_hours / 24, 2),
        aging_days=_aging_days(record, reference_now),
    )
