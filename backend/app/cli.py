"""
SMBE 命令行入口模块。

提供 CLI 命令：report（打印 PA 报表）和 export（导出 PA 明细 CSV），直接读取数据库，不经过 HTTP。
"""
import asyncio
import logging
import sys
from datetime import date, datetime, timezone

import click

from app.availability.export import export_filename, render_detail_csv
from app.availability.models import AvailabilityPolicy, AvailabilityReport
from app.availability.query import AvailabilityQuery, run_availability_query
from app.core.config import settings
from app.core.database import async_session, engine
from app.core.exceptions import BusinessError
from app.services.breakdown_source import SqlBreakdownSource

logger = logging.getLogger("smbe")


def _parse_date(ctx, param, value):
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}")


async def _load_report(query: AvailabilityQuery, policy: AvailabilityPolicy) -> AvailabilityReport:
    try:
        async with async_session() as session:
            return await run_availability_query(query, SqlBreakdownSource(session), policy=policy)
    finally:
        await engine.dispose()


def _run(ctx, query: AvailabilityQuery, policy: AvailabilityPolicy) -> AvailabilityReport:
    try:
        return asyncio.run(_load_report(query, policy))
    except BusinessError as e:
        click.echo(f"Error: {e.message}" + (f" ({e.detail})" if e.detail else ""), err=True)
        ctx.exit(1)


def _query_options(f):
    f = click.option("--equipment", default=None, help="Equipment number (substring match)")(f)
    f = click.option("--customer", default=None, help="Customer (exact match)")(f)
    f = click.option("--location", default=None, help="Location (substring match)")(f)
    f = click.option("--to", "date_to", callback=_parse_date, default=None,
                     help="End date YYYY-MM-DD (inclusive, default today)")(f)
    f = click.option("--from", "date_from", callback=_parse_date, default=None,
                     help="Start date YYYY-MM-DD (inclusive, default first day of the month)")(f)
    return f


def _build_query(date_from, date_to, location, customer, equipment) -> AvailabilityQuery:
    """缺省日期在命令执行时计算：本月 1 日到今天 (UTC)。"""
    today = datetime.now(timezone.utc).date()
    return AvailabilityQuery(
        date_from=date_from or today.replace(day=1),
        date_to=date_to or today,
        location=location, customer=customer, equipment=equipment,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, verbose):
    """SMBE - 设备故障与物理可用率报表工具。"""
    ctx.ensure_object(dict)
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@cli.command()
@_query_options
@click.option("--average-mode", type=click.Choice(["simple", "weighted"]), default=None,
              help="How the summary average PA is computed")
@click.option("--by", "view", type=click.Choice(["equipment", "customer"]), default="equipment",
              help="Rows to print")
@click.pass_context
def report(ctx, date_from, date_to, location, customer, equipment, average_mode, view):
    """打印 PA 报表。"""
    query = _build_query(date_from, date_to, location, customer, equipment)
    policy = AvailabilityPolicy.from_settings(settings, average_mode=average_mode)
    result = _run(ctx, query, policy)

    click.echo(result.summary_line())
    rows = result.customers if view == "customer" else result.equipment
    for row in rows:
        click.echo(
            f"{row.group_key:<24} {row.availability_percent:>7.2f}%  "
            f"{row.total_downtime_hours:>9.2f}h / {row.total_active_hours:.2f}h  "
            f"{row.breakdown_count} breakdown(s)  [{row.pa_status.value}]"
        )
    for w in result.warnings:
        click.echo(f"warning: {w.message}", err=True)


@cli.command()
@_query_options
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Output file (default PA_Report_<from>_<to>.csv, '-' for stdout)")
@click.pass_context
def export(ctx, date_from, date_to, location, customer, equipment, output):
    """导出 PA 明细 CSV。"""
    query = _build_query(date_from, date_to, location, customer, equipment)
    result = _run(ctx, query, AvailabilityPolicy.from_settings(settings))
    content = render_detail_csv(result)

    if output == "-":
        sys.stdout.write(content)
        return
    path = output or export_filename(result)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(content)
    logger.info("Wrote %d equipment rows to %s", len(result.equipment), path)
    click.echo(path)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
