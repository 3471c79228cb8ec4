"""
物理可用率 (PA) 报表路由 (Physical Availability Router)

功能说明：为前端 PA 页面、单台设备故障时长表和 PA 明细导出提供接口
核心职责：
  - 解析日期范围和过滤条件，默认本月 1 日至今天
  - 按当前用户绑定的地点限定数据范围（管理员不受限）
  - 调用可用率引擎计算设备/客户维度的 PA 和汇总
  - 导出 PA 明细 CSV
API端点：GET /api/v1/availability/report, GET /api/v1/availability/export,
         GET /api/v1/availability/downtime

Author: SMBE Team
"""
import math
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.availability.downtime import build_downtime_row
from app.availability.export import export_filename, render_detail_csv
from app.availability.models import AvailabilityPolicy, AverageMode
from app.availability.query import AvailabilityQuery, check_range, run_availability_query
from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_report_user, resolve_location_scope
from app.models.user import User
from app.schemas.availability import DowntimePageResponse, PAReportResponse
from app.services.breakdown_source import SqlBreakdownSource

router = APIRouter(prefix="/api/v1/availability", tags=["availability"])


def _build_query(
    user: User,
    date_from: Optional[date],
    date_to: Optional[date],
    location: Optional[str],
    customer: Optional[str],
    equipment: Optional[str],
) -> AvailabilityQuery:
    """缺省日期为本月 1 日到今天；地点按用户权限收敛。"""
    today = datetime.now(timezone.utc).date()
    return AvailabilityQuery(
        date_from=date_from or today.replace(day=1),
        date_to=date_to or today,
        location=resolve_location_scope(user, location),
        customer=customer or None,
        equipment=equipment or None,
    )


@router.get("/report", response_model=PAReportResponse)
async def availability_report(
    date_from: Optional[date] = Query(None, description="开始日期 YYYY-MM-DD"),
    date_to: Optional[date] = Query(None, description="结束日期 YYYY-MM-DD"),
    location: Optional[str] = Query(None, description="地点"),
    customer: Optional[str] = Query(None, description="客户"),
    equipment: Optional[str] = Query(None, description="设备编号"),
    view: str = Query("customer", pattern="^(customer|detail)$", description="customer 或 detail"),
    average_mode: Optional[AverageMode] = Query(None, description="simple 或 weighted"),
    user: User = Depends(get_report_user),
    db: AsyncSession = Depends(get_db),
):
    """
    PA 报表 (Physical Availability Report)

    默认按客户维度返回 rows，view=detail 时返回设备维度；equipment 和 customers 两个维度总是同时返回。
    没有故障记录时返回零值汇总（average_pa=100）。
    """
    query = _build_query(user, date_from, date_to, location, customer, equipment)
    policy = AvailabilityPolicy.from_settings(settings, average_mode=average_mode)
    report = await run_availability_query(query, SqlBreakdownSource(db), policy=policy)
    return PAReportResponse.from_report(report, view)


@router.get("/export")
async def export_availability(
    date_from: Optional[date] = Query(None, description="开始日期 YYYY-MM-DD"),
    date_to: Optional[date] = Query(None, description="结束日期 YYYY-MM-DD"),
    location: Optional[str] = Query(None),
    customer: Optional[str] = Query(None),
    equipment: Optional[str] = Query(None),
    user: User = Depends(get_report_user),
    db: AsyncSession = Depends(get_db),
):
    """导出设备维度 PA 明细 CSV。"""
    query = _build_query(user, date_from, date_to, location, customer, equipment)
    policy = AvailabilityPolicy.from_settings(settings)
    report = await run_availability_query(query, SqlBreakdownSource(db), policy=policy)
    return Response(
        content=render_detail_csv(report),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(report)}"'},
    )


@router.get("/downtime", response_model=DowntimePageResponse)
async def unit_downtime(
    date_from: Optional[date] = Query(None, description="开始日期 YYYY-MM-DD"),
    date_to: Optional[date] = Query(None, description="结束日期 YYYY-MM-DD"),
    location: Optional[str] = Query(None),
    equipment: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="RFU 状态，如 ready；open 表示未结束"),
    limit: int = Query(10, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_report_user),
    db: AsyncSession = Depends(get_db),
):
    """单台设备故障时长表，分页返回每条故障的持续时长和账龄。"""
    today = datetime.now(timezone.utc).date()
    query = _build_query(user, date_from or today, date_to or today, location, None, equipment)
    check_range(query.date_from, query.date_to)

    source = SqlBreakdownSource(db)
    total = await source.count(query, status)
    records = await source.fetch_page(query, limit=limit, offset=offset, status=status)
    now = datetime.now(timezone.utc)
    return DowntimePageResponse(
        items=[build_downtime_row(r, now) for r in records],
        total=total,
        page=offset // limit + 1,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )
