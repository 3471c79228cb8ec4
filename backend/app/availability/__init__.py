"""
物理可用率 (PA) 计算引擎

纯计算层：故障区间解析 → 停机时长累加 → 可用率计算 → 按设备/客户汇总。
不持有任何跨请求的状态，每次查询从传入的记录重新计算。

Pure computation layer for Physical Availability: interval resolution, downtime
accumulation, availability calculation and equipment/customer rollups. No state is
retained between queries.
"""
from app.availability.models import (
    AvailabilityPolicy,
    AvailabilityReport,
    AverageMode,
    BreakdownInterval,
    DataQualityWarning,
    EvaluationWindow,
)
from app.availability.query import (
    AvailabilityQuery,
    RecordSource,
    StaticRecordSource,
    compute_availability,
    run_availability_query,
)

__all__ = [
    "AvailabilityPolicy", "AvailabilityReport", "AverageMode", "BreakdownInterval",
    "DataQualityWarning", "EvaluationWindow", "AvailabilityQuery", "RecordSource",
    "StaticRecordSource", "compute_availability", "run_availability_query",
]
