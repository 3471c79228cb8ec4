"""
安全工具模块 (Security Tools Module)

提供密码哈希和 JWT 令牌生成与解析。登录流程由外部认证服务负责，
本服务只校验其签发的访问令牌。

Provides password hashing and JWT token generation/parsing. The login flow lives
in the external authentication service; this service only validates the access
tokens it issues.
"""
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# 密码哈希上下文，使用 bcrypt 算法 (Password Hash Context using bcrypt algorithm)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """对明文密码进行 bcrypt 哈希 (Hash plain text password with bcrypt)"""
    return pwd_context.hash(password)


def create_access_token(subject: str) -> str:
    """
    生成访问令牌（短期有效） (Generate access token with short expiry)

    Args:
        subject (str): 用户标识，通常是用户 ID (User identifier, usually user ID)

    Returns:
        str: JWT 访问令牌字符串 (JWT access token string)
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return jwt.encode(
        {"sub": subject, "exp": expire, "type": "access"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict | None:
    """
    解析 JWT 令牌，失败返回 None (Decode JWT token, return None on failure)

    令牌格式错误、签名无效或已过期时返回 None。
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
