"""
停机时长累加 (Downtime Accumulator)

按调用方给定的分组键（设备、客户或任意选择器）累加解析后区间的停机小时数。
每条记录只进入一个分组；各分组的小时数用 math.fsum 求和，结果与记录顺序无关，
分批或乱序处理得到的数值完全一致。
"""
from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Iterable

from app.availability.models import BreakdownInterval, ResolvedInterval

GroupSelector = Callable[[BreakdownInterval], str]


def by_equipment(record: BreakdownInterval) -> str:
    return record.equipment_key


def by_customer(record: BreakdownInterval) -> str:
    return record.customer_key


@dataclass
class DowntimeTotals:
    """一个分组的累加结果。"""
    total_downtime_hours: float = 0.0
    breakdown_count: int = 0
    unit_keys: set[str] = field(default_factory=set)
    intervals: list[ResolvedInterval] = field(default_factory=list)

    @property
    def unit_count(self) -> int:
        return len(self.unit_keys)


def accumulate_downtime(
    intervals: Iterable[ResolvedInterval],
    selector: GroupSelector,
) -> dict[str, DowntimeTotals]:
    """
    按分组累加停机时长。

    Returns:
        dict: 分组键 → DowntimeTotals（停机小时、记录数、涉及的设备集合）
    """
    durations: dict[str, list[float]] = defaultdict(list)
    totals: dict[str, DowntimeTotals] = {}

    for interval in intervals:
        key = selector(interval.record)
        group = totals.get(key)
        if group is None:
            group = totals[key] = DowntimeTotals()
        group.breakdown_count += 1
        group.unit_keys.add(interval.record.equipment_key)
        group.intervals.append(interval)
        durations[key].append(interval.duration_hours)

    for key, group in totals.items():
        group.total_downtime_hours = math.fsum(durations[key])
    return totals


def merge_totals(parts: Iterable[dict[str, DowntimeTotals]]) -> dict[str, DowntimeTotals]:
    """合并分批累加的结果，用于分页读取大量记录的场景。"""
    durations: dict[str, list[float]] = defaultdict(list)
    merged: dict[str, DowntimeTotals] = {}
    for part in parts:
        for key, group in part.items():
            target = merged.get(key)
            if target is None:
                target = merged[key] = DowntimeTotals()
            target.breakdown_count += group.breakdown_count
            target.unit_keys |= group.unit_keys
            target.intervals.extend(group.intervals)
            durations[key].extend(i.duration_hours for i in group.intervals)
    for key, group in merged.items():
        group.total_downtime_hours = math.fsum(durations[key])
    return merged
