"""
故障记录模型 (Breakdown Model)

每条记录对应一次设备故障：start_time 为故障开始时间，end_time 为恢复可用 (RFU) 时间，
end_time 为空表示故障仍在持续。rfu 字段记录 RFU 状态（"ready" 表示已恢复）。

Each row is one equipment failure. `start_time` marks the onset, `end_time` the
return to service; a null `end_time` means the breakdown is still open.
"""
from datetime import date, datetime

from sqlalchemy import String, Integer, Date, DateTime, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

MAINTENANCE_CATEGORIES = ("Service", "PMS", "Storing")


class Breakdown(Base):
    """故障记录表 (Breakdown Record Table)"""
    __tablename__ = "breakdown_data"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    report_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)  # 报告日期 (Report Date)
    shift: Mapped[str] = mapped_column(String(20), nullable=True)  # 班次 (Shift)
    equipment_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # 设备编号 (Equipment Number)
    location: Mapped[str] = mapped_column(String(100), nullable=True, index=True)  # 地点 (Site)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True, index=True)  # 故障开始 (Breakdown Start)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)  # 恢复时间 (Return To Service)
    maintenance_category: Mapped[str] = mapped_column(String(20), nullable=True)  # Service / PMS / Storing
    rfu: Mapped[str] = mapped_column(String(20), nullable=True)  # RFU 状态 (Ready For Use status)
    problem: Mapped[str] = mapped_column(Text, nullable=True)  # 故障描述 (Problem Description)
    component: Mapped[str] = mapped_column(String(200), nullable=True)  # 故障部件 (Component)
    work_order: Mapped[str] = mapped_column(String(50), nullable=True)  # 工单号 (Work Order)
    reporter: Mapped[str] = mapped_column(String(100), nullable=True)  # 报告人 (Reporter)
    created_by: Mapped[int] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


def normalize_category(value: str | None) -> str | None:
    """将维护类别统一为 Service / PMS / Storing 的标准写法，未知值原样返回。"""
    if not value:
        return value
    for category in MAINTENANCE_CATEGORIES:
        if value.lower() == category.lower():
            return category
    return value
