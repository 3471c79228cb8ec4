"""
FastAPI 依赖项模块 (FastAPI Dependencies Module)

提供用户认证、角色检查和按地点（location）限定数据范围的依赖函数。
角色：admin（管理员）、inputer（录入员）、viewer（查看者）、report_viewer（报表查看者）。

Provides dependency functions for user authentication, role checks and location
scoping. Roles: admin, inputer, viewer, report_viewer.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import PermissionDeniedError
from app.core.security import decode_token
from app.models.user import User

# Bearer Token 认证方案 (Bearer Token Authentication Scheme)
security = HTTPBearer()

ALL_ROLES = ("admin", "inputer", "viewer", "report_viewer")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    从请求头中提取并验证 JWT，返回当前登录用户 (Extract and validate JWT from request header, return current user)

    解析 Authorization 头中的 Bearer Token，验证签名和有效期后从数据库查询用户。
    """
    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


def require_role(*roles: str):
    """
    角色检查依赖工厂 (Role check dependency factory)

    只有拥有指定角色的用户才能访问受保护的端点。
    """
    async def checker(user: User = Depends(get_current_user)):
        if user.role not in roles:
            raise PermissionDeniedError("权限不足 (Insufficient role)", detail=f"role={user.role}")
        return user
    return checker


def resolve_location_scope(user: User, requested: Optional[str]) -> Optional[str]:
    """
    计算本次查询实际生效的地点过滤条件 (Resolve the effective location filter)

    非管理员且绑定了地点的用户始终只能看到自己地点的数据；
    管理员或未绑定地点的用户使用请求中的过滤条件。
    """
    if user.location and user.role != "admin":
        return user.location
    return requested or None


# 预定义常用角色依赖 (Predefined common role dependencies)
get_report_user = require_role(*ALL_ROLES)  # 所有角色均可查看报表 (All roles may read reports)
