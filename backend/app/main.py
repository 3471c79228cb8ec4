"""
SMBE 后端应用入口模块 (SMBE Backend Application Entry Module)

设备故障与物理可用率 (PA) 报表服务的主应用入口，负责 FastAPI 应用的生命周期管理。

Main application entry point for the equipment breakdown and Physical Availability
reporting service.

主要功能 (Main Features):
- 数据库表自动创建 (Automatic database table creation)
- 统一业务异常处理 (Uniform business error handling)
- PA 报表、故障时长表和导出路由 (PA report, unit downtime and export routes)
- 健康检查 (Health checks)
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.database import engine, Base
# 导入所有模型以确保 SQLAlchemy 表注册 (Import all models to ensure SQLAlchemy table registration)
from app.models import User, Equipment, Breakdown  # noqa: F401
from app.routers import availability

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理器 (Application Lifecycle Manager)

    启动时创建缺失的数据表；生产环境的表结构变更由 Alembic 迁移管理。
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("SMBE backend started (environment=%s)", settings.environment)

    yield

    await engine.dispose()


app = FastAPI(title="SMBE", version="0.1.0", lifespan=lifespan)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(availability.router)


@app.get("/health")
@app.get("/api/v1/health")
async def health():
    """
    健康检查接口 (Health Check Endpoint)

    检查 API 和数据库连通性，任一组件异常时返回 degraded。
    """
    checks = {"api": "ok"}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception:
        logger.exception("Database health check failed")
        checks["database"] = "error"

    status = "ok" if all(v == "ok" for v in checks.values()) else "degraded"

    return {
        "status": status,
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
