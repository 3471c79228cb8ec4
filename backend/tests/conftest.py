"""
SMBE 测试基础配置

提供 SQLite in-memory 异步数据库、FastAPI 测试客户端、各角色用户和故障记录工厂等通用 fixture。
所有测试使用隔离的 SQLite 数据库，不依赖外部 PostgreSQL。
"""
from datetime import date, datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# 必须在导入 app 之前设置环境变量，避免真实连接
import os
os.environ["POSTGRES_HOST"] = "localhost"
os.environ["POSTGRES_PORT"] = "5432"
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"

from app.availability.models import BreakdownInterval
from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.models.breakdown import Breakdown
from app.models.equipment import Equipment
from app.models.user import User


# ── SQLite 异步引擎 ──────────────────────────────────────────────────
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestingSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def utc(*args) -> datetime:
    """构造 UTC 时间。"""
    return datetime(*args, tzinfo=timezone.utc)


def make_interval(id, equipment="EX-01", start=None, end=None, customer="ACME", location="Site A", **kw) -> BreakdownInterval:
    """构造引擎输入用的故障区间。"""
    return BreakdownInterval(
        id=id,
        equipment_key=equipment,
        customer_key=customer,
        location_key=location,
        start_time=start,
        end_time=end,
        **kw,
    )


# ── Fixtures ──────────────────────────────────────────────────────────

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """每个测试前创建所有表，测试后清空。"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """提供一个干净的数据库会话。"""
    async with TestingSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """提供配置好依赖覆盖的异步 HTTP 测试客户端。"""
    from app.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db_session: AsyncSession, email: str, name: str, role: str, location=None) -> User:
    user = User(
        email=email,
        name=name,
        hashed_password=hash_password("secret123"),
        role=role,
        location=location,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """创建一个管理员用户（绑定了地点，但管理员不受地点限制）。"""
    return await _create_user(db_session, "admin@test.com", "Admin", "admin", location="Site A")


@pytest_asyncio.fixture
async def viewer_user(db_session: AsyncSession) -> User:
    """创建一个未绑定地点的只读用户。"""
    return await _create_user(db_session, "viewer@test.com", "Viewer", "viewer")


@pytest_asyncio.fixture
async def site_user(db_session: AsyncSession) -> User:
    """创建一个绑定到 Site B 的录入员。"""
    return await _create_user(db_session, "inputer@test.com", "Inputer", "inputer", location="Site B")


@pytest_asyncio.fixture
async def auth_headers(admin_user: User) -> dict:
    """管理员认证头。"""
    return {"Authorization": f"Bearer {create_access_token(str(admin_user.id))}"}


@pytest_asyncio.fixture
async def viewer_headers(viewer_user: User) -> dict:
    """只读用户认证头。"""
    return {"Authorization": f"Bearer {create_access_token(str(viewer_user.id))}"}


@pytest_asyncio.fixture
async def site_headers(site_user: User) -> dict:
    """Site B 录入员认证头。"""
    return {"Authorization": f"Bearer {create_access_token(str(site_user.id))}"}


@pytest_asyncio.fixture
async def sample_breakdowns(db_session: AsyncSession) -> list[Breakdown]:
    """
    两个客户、三台设备的故障数据（2024 年 1 月）：
    EX-01 (ACME, Site A): 10h + 20h；DT-07 (ACME, Site B): 6h；GR-03 (无主数据, Site A): 未结束。
    另有一条缺少开始时间的记录和一条窗口之外的记录。
    """
    db_session.add_all([
        Equipment(equipment_number="EX-01", name="Excavator 01", customer="ACME", location="Site A"),
        Equipment(equipment_number="DT-07", name="Dump Truck 07", customer="ACME", location="Site B"),
    ])
    rows = [
        Breakdown(report_date=date(2024, 1, 1), equipment_number="EX-01", location="Site A",
                  start_time=utc(2024, 1, 1, 0), end_time=utc(2024, 1, 1, 10),
                  maintenance_category="service", rfu="ready"),
        Breakdown(report_date=date(2024, 1, 2), equipment_number="EX-01", location="Site A",
                  start_time=utc(2024, 1, 2, 0), end_time=utc(2024, 1, 2, 20),
                  maintenance_category="PMS", rfu="ready"),
        Breakdown(report_date=date(2024, 1, 3), equipment_number="DT-07", location="Site B",
                  start_time=utc(2024, 1, 3, 8), end_time=utc(2024, 1, 3, 14),
                  maintenance_category="Storing", rfu="ready"),
        Breakdown(report_date=date(2024, 1, 4), equipment_number="GR-03", location="Site A",
                  start_time=utc(2024, 1, 4, 0), end_time=None, rfu="breakdown"),
        Breakdown(report_date=date(2024, 1, 5), equipment_number="DT-07", location="Site B",
                  start_time=None, end_time=None),
        Breakdown(report_date=date(2023, 12, 1), equipment_number="EX-01", location="Site A",
                  start_time=utc(2023, 12, 1, 0), end_time=utc(2023, 12, 1, 5), rfu="ready"),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return rows
