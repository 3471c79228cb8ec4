"""
数据模型包 (Data Models Package)

集中导出所有 SQLAlchemy ORM 模型：用户、设备主数据和故障记录。

Centrally exports all SQLAlchemy ORM models: users, equipment master data and breakdown records.
"""
from app.models.user import User
from app.models.equipment import Equipment
from app.models.breakdown import Breakdown

# 导出所有模型类供外部模块使用 (Export all model classes for external modules)
__all__ = ["User", "Equipment", "Breakdown"]
