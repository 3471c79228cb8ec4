"""
可用率引擎的 Pydantic 数据模型。

用于引擎内部数据传递，与 SQLAlchemy ORM 模型互补：故障区间输入、评估窗口、
解析后的区间、数据质量告警，以及按设备/客户分组的聚合结果和整体汇总。
所有聚合结果每次查询重新计算，不做持久化。
"""
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

UNKNOWN_CUSTOMER = "Unknown"


class AverageMode(str, enum.Enum):
    """汇总 averagePA 的计算方式。"""
    SIMPLE = "simple"  # 各设备 PA 的算术平均
    WEIGHTED = "weighted"  # 按有效小时加权：(Σ有效 - Σ停机) / Σ有效


class PaStatus(str, enum.Enum):
    """PA 状态分级，用于前端着色。"""
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class BreakdownInterval(BaseModel):
    """
    单条故障记录在引擎中的只读视图 (Read-only view of one breakdown record)

    end_time 为空表示故障仍在持续；customer_key 缺失时统一为 "Unknown"。
    """
    id: Union[int, str]
    equipment_key: str
    customer_key: str = UNKNOWN_CUSTOMER
    location_key: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    maintenance_category: Optional[str] = None
    equipment_name: Optional[str] = None
    rfu: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("customer_key", mode="before")
    @classmethod
    def _default_customer(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNKNOWN_CUSTOMER
        return value


class EvaluationWindow(BaseModel):
    """报表时间窗口，两端日期均包含；reference_now 用于解析未结束的故障。"""
    date_from: date
    date_to: date
    reference_now: datetime


class DataQualityWarning(BaseModel):
    """数据质量告警：不中断计算，只记录并随报表返回。"""
    record_id: Optional[Union[int, str]] = None  # 为空表示针对整个报表
    equipment_key: Optional[str] = None
    code: str  # missing_start / end_before_start / record_limit
    message: str


class ResolvedInterval(BaseModel):
    """解析后的故障区间：start 为空表示该记录不参与时长计算。"""
    record: BreakdownInterval
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    duration_hours: float = 0.0
    warning: Optional[DataQualityWarning] = None

    @property
    def has_start(self) -> bool:
        return self.start is not None


class AvailabilityPolicy(BaseModel):
    """PA 计算策略，默认值与配置项一致。"""
    hours_per_day: int = Field(default=24, gt=0)
    good_threshold: float = 95.0
    warning_threshold: float = 85.0
    average_mode: AverageMode = AverageMode.SIMPLE
    count_missing_start: bool = True

    @classmethod
    def from_settings(cls, settings, **overrides) -> "AvailabilityPolicy":
        values = {
            "hours_per_day": settings.pa_hours_per_day,
            "good_threshold": settings.pa_good_threshold,
            "warning_threshold": settings.pa_warning_threshold,
            "average_mode": settings.pa_average_mode,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class GroupAggregate(BaseModel):
    """一个分组（设备或客户）的可用率聚合结果。"""
    group_key: str
    unit_count: int
    total_active_hours: float
    total_downtime_hours: float
    breakdown_count: int
    availability_percent: float
    pa_status: PaStatus


class EquipmentAvailability(GroupAggregate):
    """设备维度 PA，unit_count 恒为 1。"""
    equipment_name: Optional[str] = None
    customer_key: str = UNKNOWN_CUSTOMER
    location: Optional[str] = None


class CustomerAvailability(GroupAggregate):
    """客户维度 PA，unit_count 为该客户下出现故障的设备数。"""
    equipment_keys: list[str] = Field(default_factory=list)


class AvailabilitySummary(BaseModel):
    """全部设备分组的汇总统计。"""
    total_equipment: int = 0
    average_pa: float = 100.0
    total_breakdowns: int = 0
    total_downtime_hours: float = 0.0
    total_active_hours: float = 0.0
    average_mode: AverageMode = AverageMode.SIMPLE
    truncated: bool = False  # 数据源达到读取上限，结果不完整


class AvailabilityReport(BaseModel):
    """一次查询的完整结果。"""
    period_start: date
    period_end: date
    days_in_window: int
    reference_now: datetime
    equipment: list[EquipmentAvailability] = Field(default_factory=list)
    customers: list[CustomerAvailability] = Field(default_factory=list)
    summary: AvailabilitySummary = Field(default_factory=AvailabilitySummary)
    warnings: list[DataQualityWarning] = Field(default_factory=list)

    def summary_line(self) -> str:
        s = self.summary
        return (
            f"{self.period_start}..{self.period_end}: {s.total_equipment} units, "
            f"{s.total_breakdowns} breakdowns, avg PA {s.average_pa:.2f}%"
        )
