"""
用户模型 (User Model)

定义系统用户表结构。role 决定可访问的接口，location 非空时非管理员用户只能看到该地点的数据。

Defines the system user table. `role` gates the endpoints a user may call; when
`location` is set, non-admin users only see data for that site.
"""
from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class User(Base):
    """
    用户表 (User Table)

    角色：admin / inputer / viewer / report_viewer。
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)  # 主键 ID (Primary Key ID)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)  # 用户邮箱（登录名） (User Email, Login Name)
    name: Mapped[str] = mapped_column(String(100), nullable=False)  # 用户姓名 (User Name)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)  # 哈希后的密码 (Hashed Password)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="viewer")  # 用户角色 (User Role)
    location: Mapped[str] = mapped_column(String(100), nullable=True)  # 绑定地点，空表示不限 (Assigned site, null = any)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)  # 账户是否激活 (Account Active Status)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
