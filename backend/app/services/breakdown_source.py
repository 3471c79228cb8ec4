"""
故障记录 SQL 数据源 (SQL Breakdown Record Source)

从 breakdown_data 表读取与报表窗口重叠的故障记录，左连接设备主数据取得客户归属和设备名称，
转换为可用率引擎使用的 BreakdownInterval。

过滤语义：
- 窗口重叠：start_time < date_to 次日 00:00，且 end_time 为空或 >= date_from 00:00；
  没有 start_time 的记录按 report_date 落在窗口内选取；
- 地点、设备编号为不区分大小写的包含匹配；客户为精确匹配，"Unknown" 匹配没有客户归属的设备。

数据库异常统一转换为 UpstreamFetchError，不在这里重试。
"""
import logging
from typing import Optional

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.availability.models import BreakdownInterval, UNKNOWN_CUSTOMER
from app.availability.query import AvailabilityQuery
from app.availability.resolver import window_bounds
from app.core.config import settings
from app.core.exceptions import UpstreamFetchError
from app.models.breakdown import Breakdown, normalize_category
from app.models.equipment import Equipment

logger = logging.getLogger(__name__)

STATUS_OPEN = "open"


class SqlBreakdownSource:
    """基于 SQLAlchemy 异步会话的故障记录数据源。"""

    def __init__(self, db: AsyncSession, max_records: Optional[int] = None, batch_size: Optional[int] = None):
        self.db = db
        self.max_records = max_records or settings.pa_max_records
        self.batch_size = batch_size or settings.pa_fetch_batch_size
        self.truncated = False

    def _filtered(self, stmt: Select, query: AvailabilityQuery, status: Optional[str] = None) -> Select:
        lower, upper = window_bounds(query.date_from, query.date_to)
        stmt = stmt.where(or_(
            and_(
                Breakdown.start_time.is_not(None),
                Breakdown.start_time < upper,
                or_(Breakdown.end_time.is_(None), Breakdown.end_time >= lower),
            ),
            and_(
                Breakdown.start_time.is_(None),
                Breakdown.report_date >= query.date_from,
                Breakdown.report_date <= query.date_to,
            ),
        ))
        if query.location:
            stmt = stmt.where(Breakdown.location.ilike(f"%{query.location}%"))
        if query.equipment:
            stmt = stmt.where(Breakdown.equipment_number.ilike(f"%{query.equipment}%"))
        if query.customer:
            if query.customer == UNKNOWN_CUSTOMER:
                stmt = stmt.where(or_(Equipment.customer.is_(None), Equipment.customer == ""))
            else:
                stmt = stmt.where(Equipment.customer == query.customer)
        if status == STATUS_OPEN:
            stmt = stmt.where(Breakdown.end_time.is_(None))
        elif status:
            stmt = stmt.where(Breakdown.rfu == status)
        return stmt

    def _select_rows(self) -> Select:
        return (
            select(Breakdown, Equipment.customer, Equipment.name)
            .outerjoin(Equipment, Equipment.equipment_number == Breakdown.equipment_number)
        )

    @staticmethod
    def _to_interval(breakdown: Breakdown, customer: Optional[str], equipment_name: Optional[str]) -> BreakdownInterval:
        return BreakdownInterval(
            id=breakdown.id,
            equipment_key=breakdown.equipment_number,
            customer_key=customer,
            location_key=breakdown.location,
            start_time=breakdown.start_time,
            end_time=breakdown.end_time,
            maintenance_category=normalize_category(breakdown.maintenance_category),
            equipment_name=equipment_name,
            rfu=breakdown.rfu,
        )

    async def _execute(self, stmt: Select) -> list:
        try:
            return list((await self.db.execute(stmt)).all())
        except SQLAlchemyError as e:
            raise UpstreamFetchError("读取故障记录失败 (Failed to load breakdown records)", detail=str(e)) from e

    async def fetch(self, query: AvailabilityQuery) -> list[BreakdownInterval]:
        """
        按 id 分批读取窗口内的全部记录，最多 max_records 条。

        超过上限时 truncated 置为 True，由查询入口把它写进报表告警。
        """
        self.truncated = False
        base = self._filtered(self._select_rows(), query).order_by(Breakdown.id)
        records: list[BreakdownInterval] = []
        last_id = None
        while len(records) < self.max_records:
            # 多取一条用于判断上限之后是否还有记录
            size = min(self.batch_size, self.max_records - len(records) + 1)
            stmt = base if last_id is None else base.where(Breakdown.id > last_id)
            rows = await self._execute(stmt.limit(size))
            for b, customer, name in rows:
                if len(records) == self.max_records:
                    self.truncated = True
                    break
                records.append(self._to_interval(b, customer, name))
            if self.truncated or len(rows) < size:
                break
            last_id = rows[-1][0].id
        else:
            rest = base if last_id is None else base.where(Breakdown.id > last_id)
            self.truncated = bool(await self._execute(rest.limit(1)))

        if self.truncated:
            logger.warning(
                "Breakdown fetch for %s..%s hit the %d record limit; report is incomplete",
                query.date_from, query.date_to, self.max_records,
            )
        return records

    async def count(self, query: AvailabilityQuery, status: Optional[str] = None) -> int:
        stmt = self._filtered(
            select(func.count(Breakdown.id))
            .select_from(Breakdown)
            .outerjoin(Equipment, Equipment.equipment_number == Breakdown.equipment_number),
            query,
            status,
        )
        try:
            return (await self.db.execute(stmt)).scalar() or 0
        except SQLAlchemyError as e:
            raise UpstreamFetchError("统计故障记录失败 (Failed to count breakdown records)", detail=str(e)) from e

    async def fetch_page(
        self,
        query: AvailabilityQuery,
        limit: int,
        offset: int = 0,
        status: Optional[str] = None,
    ) -> list[BreakdownInterval]:
        """分页读取，最新的记录在前。"""
        stmt = (
            self._filtered(self._select_rows(), query, status)
            .order_by(Breakdown.id.desc())
            .limit(limit)
            .offset(offset)
        )
        try:
            rows = (await self.db.execute(stmt)).all()
        except SQLAlchemyError as e:
            raise UpstreamFetchError("读取故障记录失败 (Failed to load breakdown records)", detail=str(e)) from e
        return [self._to_interval(b, customer, name) for b, customer, name in rows]
