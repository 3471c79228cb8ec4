"""
设备主数据模型

设备编号唯一；customer 为设备所属客户，是客户维度 PA 汇总的分组键。
"""
from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Equipment(Base):
    """设备主数据表，提供客户归属和显示名称。"""
    __tablename__ = "equipment_master"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    equipment_number: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=True)
    type: Mapped[str] = mapped_column(String(100), nullable=True)
    customer: Mapped[str] = mapped_column(String(200), nullable=True, index=True)
    location: Mapped[str] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
