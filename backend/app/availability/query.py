"""
可用率查询入口 (Availability Query Surface)

外部调用方（HTTP 路由、CLI）唯一使用的入口：
校验日期范围 → 从数据源一次性读取故障记录 → 解析区间 → 按设备/客户汇总 → 返回报表。

数据源（RecordSource）由调用方注入，引擎本身不关心记录如何存储；
数据源失败时抛出的 UpstreamFetchError 原样向上传递，这里不做重试。
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Protocol, Sequence

from pydantic import BaseModel

from app.availability.calculator import days_in_window
from app.availability.models import (
    AvailabilityPolicy,
    AvailabilityReport,
    BreakdownInterval,
    DataQualityWarning,
    EvaluationWindow,
)
from app.availability.resolver import overlaps_window, resolve_interval
from app.availability.rollup import build_customer_rows, build_equipment_rows, summarize
from app.core.exceptions import InvalidRangeError

logger = logging.getLogger(__name__)


class AvailabilityQuery(BaseModel):
    """报表过滤条件：日期范围必填，地点/客户/设备可选。"""
    date_from: date
    date_to: date
    location: Optional[str] = None
    customer: Optional[str] = None
    equipment: Optional[str] = None


class RecordSource(Protocol):
    """故障记录数据源。fetch 之后 truncated 为 True 表示因读取上限没有返回全部记录。"""

    truncated: bool

    async def fetch(self, query: AvailabilityQuery) -> Sequence[BreakdownInterval]:
        ...


def matches_filters(record: BreakdownInterval, query: AvailabilityQuery) -> bool:
    """地点、设备为不区分大小写的包含匹配，客户为精确匹配。"""
    if query.location and query.location.lower() not in (record.location_key or "").lower():
        return False
    if query.equipment and query.equipment.lower() not in record.equipment_key.lower():
        return False
    if query.customer and record.customer_key != query.customer:
        return False
    return True


class StaticRecordSource:
    """内存数据源，过滤语义与 SQL 数据源一致。"""

    truncated = False

    def __init__(self, records: Iterable[BreakdownInterval]):
        self._records = list(records)

    async def fetch(self, query: AvailabilityQuery) -> list[BreakdownInterval]:
        return [
            r for r in self._records
            if matches_filters(r, query) and overlaps_window(r, query.date_from, query.date_to)
        ]


def _mark_truncated(report: AvailabilityReport, fetched: int) -> None:
    message = f"record source stopped at {fetched} records; downtime and counts are understated"
    logger.warning("Availability report %s..%s: %s", report.period_start, report.period_end, message)
    report.summary.truncated = True
    report.warnings.insert(0, DataQualityWarning(code="record_limit", message=message))


def check_range(date_from: date, date_to: date) -> None:
    if date_from > date_to:
        raise InvalidRangeError(
            "开始日期不能晚于结束日期 (date_from must not be after date_to)",
            detail=f"date_from={date_from.isoformat()}, date_to={date_to.isoformat()}",
        )


def compute_availability(
    records: Iterable[BreakdownInterval],
    window: EvaluationWindow,
    policy: Optional[AvailabilityPolicy] = None,
) -> AvailabilityReport:
    """
    对给定记录计算完整报表，纯计算、不做 I/O。

    与窗口没有重叠的记录直接忽略，不依赖数据源是否已经按窗口过滤。
    数据质量问题（缺少开始时间、结束早于开始）只记录告警，不会中断其余记录的计算。
    """
    policy = policy or AvailabilityPolicy()
    days = days_in_window(window.date_from, window.date_to)

    resolved = []
    warnings = []
    for record in records:
        if not overlaps_window(record, window.date_from, window.date_to):
            continue
        interval = resolve_interval(record, window.reference_now)
        if interval.warning is not None:
            warnings.append(interval.warning)
            logger.warning("Data quality: %s", interval.warning.message)
        if not interval.has_start and not policy.count_missing_start:
            continue
        resolved.append(interval)

    equipment_rows = build_equipment_rows(resolved, days, policy)
    customer_rows = build_customer_rows(resolved, days, policy)

    return AvailabilityReport(
        period_start=window.date_from,
        period_end=window.date_to,
        days_in_window=days,
        reference_now=window.reference_now,
        equipment=equipment_rows,
        customers=customer_rows,
        summary=summarize(equipment_rows, policy.average_mode),
        warnings=sorted(warnings, key=lambda w: (str(w.record_id), w.code)),
    )


async def run_availability_query(
    query: AvailabilityQuery,
    source: RecordSource,
    reference_now: Optional[datetime] = None,
    policy: Optional[AvailabilityPolicy] = None,
) -> AvailabilityReport:
    """
    查询入口：日期范围非法时抛出 InvalidRangeError；没有任何记录时返回零值汇总而不是报错。

    Args:
        query: 过滤条件
        source: 故障记录数据源
        reference_now: 解析未结束故障的参考时刻，默认取当前 UTC 时间
        policy: PA 计算策略
    """
    check_range(query.date_from, query.date_to)
    window = EvaluationWindow(
        date_from=query.date_from,
        date_to=query.date_to,
        reference_now=reference_now or datetime.now(timezone.utc),
    )

    records = await source.fetch(query)
    report = compute_availability(records, window, policy)
    if source.truncated:
        _mark_truncated(report, len(records))
    logger.info(
        "Availability report %s..%s: %d records, %d equipment, %d customers, %d warnings",
        query.date_from, query.date_to, len(records),
        len(report.equipment), len(report.customers), len(report.warnings),
    )
    return report
