"""
应用配置模块 (Application Configuration Module)

使用 Pydantic Settings 管理 SMBE 设备故障维护平台的所有配置项，支持从 .env 文件和环境变量读取。
提供数据库连接、JWT 认证、物理可用率 (PA) 计算策略等各模块的配置管理。

Uses Pydantic Settings to manage all configuration items for the SMBE breakdown maintenance
platform, supporting reading from .env files and environment variables. Provides configuration
management for database connections, JWT authentication and Physical Availability (PA) policy.
"""
import logging
import secrets

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    应用全局配置类 (Application Global Configuration Class)

    字段名自动映射同名环境变量（不区分大小写），支持 .env 文件加载。

    Field names automatically map to same-named environment variables (case insensitive),
    supporting .env file loading.
    """

    # 数据库配置 (Database Configuration)
    postgres_host: str = "localhost"  # PostgreSQL 主机地址 (PostgreSQL Host)
    postgres_port: int = 5432  # PostgreSQL 端口号 (PostgreSQL Port)
    postgres_db: str = "smbe_db"  # 数据库名称 (Database Name)
    postgres_user: str = "smbe"  # 数据库用户名 (Database Username)
    postgres_password: str = "smbe_dev_password"  # 数据库密码 (Database Password)
    database_url_override: str = ""  # 完整连接串，非空时优先使用 (Full URL, wins when set)

    # JWT 认证配置 (JWT Authentication Configuration)
    # ⚠️ 生产环境必须通过环境变量 JWT_SECRET_KEY 设置！
    jwt_secret_key: str = ""  # JWT 签名密钥 (JWT Secret Key)
    jwt_algorithm: str = "HS256"  # JWT 算法 (JWT Algorithm)
    jwt_access_token_expire_minutes: int = 120  # 访问令牌过期时间（分钟） (Access Token Expiry Minutes)

    # 运行环境 (Runtime Environment)
    environment: str = "development"  # development/production
    frontend_url: str = "http://localhost:3000"  # 前端 URL (Frontend URL)
    log_level: str = "INFO"  # 日志级别 (Log Level)

    # 物理可用率计算策略 (Physical Availability Policy)
    pa_hours_per_day: int = 24  # 每台设备每天的有效运行小时 (Active hours per unit per day)
    pa_good_threshold: float = 95.0  # PA >= 此值为 good
    pa_warning_threshold: float = 85.0  # PA >= 此值为 warning，否则 critical
    pa_average_mode: str = "simple"  # 汇总平均方式：simple / weighted (Summary average mode)
    pa_max_records: int = 10000  # 单次报表最多读取的故障记录数 (Max records per report)
    pa_fetch_batch_size: int = 1000  # 分批读取故障记录的批大小 (Rows per fetch batch)

    @property
    def database_url(self) -> str:
        """
        构造 PostgreSQL 异步连接 URL (Build PostgreSQL Async Connection URL)

        设置了 DATABASE_URL_OVERRIDE 时直接使用，否则根据连接参数生成 asyncpg 连接串。
        """
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}  # Pydantic 配置：自动加载 .env 文件 (Pydantic Config: Auto-load .env file)


# 全局配置实例 (Global Configuration Instance)
settings = Settings()

# JWT 密钥安全检查：未设置时生成随机密钥并警告
if not settings.jwt_secret_key or settings.jwt_secret_key == "change-me-in-production":
    settings.jwt_secret_key = secrets.token_urlsafe(64)
    logger.warning(
        "JWT_SECRET_KEY 未设置，已自动生成随机密钥。此密钥在每次重启后会变化，所有已签发的 token 将失效。"
        " | JWT_SECRET_KEY not set, using auto-generated random key. "
        "All issued tokens will be invalidated on restart."
    )
