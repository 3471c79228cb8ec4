"""
物理可用率 (PA) 报表相关请求/响应模型

百分比和小时数在这里保留两位小数，引擎内部保持未取整的浮点值。
"""
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel

from app.availability.models import (
    AvailabilityReport,
    CustomerAvailability,
    DataQualityWarning,
    EquipmentAvailability,
)
from app.availability.downtime import DowntimeRow


def _r(value: float) -> float:
    return round(value, 2)


class EquipmentPAResponse(BaseModel):
    """设备维度 PA 行。"""
    equipment_number: str
    equipment_name: Optional[str] = None
    customer: str
    location: Optional[str] = None
    total_active_hours: float
    total_downtime_hours: float
    breakdown_count: int
    pa: float
    pa_status: str

    @classmethod
    def from_row(cls, row: EquipmentAvailability) -> "EquipmentPAResponse":
        return cls(
            equipment_number=row.group_key,
            equipment_name=row.equipment_name or row.group_key,
            customer=row.customer_key,
            location=row.location,
            total_active_hours=_r(row.total_active_hours),
            total_downtime_hours=_r(row.total_downtime_hours),
            breakdown_count=row.breakdown_count,
            pa=_r(row.availability_percent),
            pa_status=row.pa_status.value,
        )


class CustomerPAResponse(BaseModel):
    """客户维度 PA 行。"""
    customer: str
    unit_count: int
    total_active_hours: float
    total_downtime_hours: float
    breakdown_count: int
    pa: float
    pa_status: str

    @classmethod
    def from_row(cls, row: CustomerAvailability) -> "CustomerPAResponse":
        return cls(
            customer=row.group_key,
            unit_count=row.unit_count,
            total_active_hours=_r(row.total_active_hours),
            total_downtime_hours=_r(row.total_downtime_hours),
            breakdown_count=row.breakdown_count,
            pa=_r(row.availability_percent),
            pa_status=row.pa_status.value,
        )


class PASummaryResponse(BaseModel):
    """PA 汇总卡片数据。"""
    total_equipment: int
    average_pa: float
    total_breakdowns: int
    total_downtime_hours: float
    total_active_hours: float
    average_mode: str
    truncated: bool = False


class PAReportResponse(BaseModel):
    """PA 报表响应体；rows 按 view 取设备或客户维度。"""
    period_start: date
    period_end: date
    days_in_window: int
    reference_now: datetime
    view: str
    rows: List[Union[CustomerPAResponse, EquipmentPAResponse]] = []
    equipment: List[EquipmentPAResponse] = []
    customers: List[CustomerPAResponse] = []
    summary: PASummaryResponse
    warnings: List[DataQualityWarning] = []

    @classmethod
    def from_report(cls, report: AvailabilityReport, view: str) -> "PAReportResponse":
        equipment = [EquipmentPAResponse.from_row(r) for r in report.equipment]
        customers = [CustomerPAResponse.from_row(r) for r in report.customers]
        s = report.summary
        return cls(
            period_start=report.period_start,
            period_end=report.period_end,
            days_in_window=report.days_in_window,
            reference_now=report.reference_now,
            view=view,
            rows=customers if view == "customer" else equipment,
            equipment=equipment,
            customers=customers,
            summary=PASummaryResponse(
                total_equipment=s.total_equipment,
                average_pa=_r(s.average_pa),
                total_breakdowns=s.total_breakdowns,
                total_downtime_hours=_r(s.total_downtime_hours),
                total_active_hours=_r(s.total_active_hours),
                average_mode=s.average_mode.value,
                truncated=s.truncated,
            ),
            warnings=report.warnings,
        )


class DowntimePageResponse(BaseModel):
    """故障时长表分页响应。"""
    items: List[DowntimeRow] = []
    total: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0
