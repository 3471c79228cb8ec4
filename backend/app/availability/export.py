"""
PA 明细导出为 CSV。

列：Equipment, Customer, Location, Active Hours, Downtime Hours, Breakdown Count, PA (%)
"""
import csv
import io

from app.availability.models import AvailabilityReport

CSV_HEADERS = [
    "Equipment", "Customer", "Location", "Active Hours",
    "Downtime Hours", "Breakdown Count", "PA (%)",
]


def render_detail_csv(report: AvailabilityReport) -> str:
    """按报表中的设备顺序（PA 升序）输出每台设备一行。"""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in report.equipment:
        writer.writerow([
            row.group_key,
            row.customer_key,
            row.location or "-",
            f"{row.total_active_hours:.2f}",
            f"{row.total_downtime_hours:.2f}",
            row.breakdown_count,
            f"{row.availability_percent:.2f}",
        ])
    return buf.getvalue()


def export_filename(report: AvailabilityReport) -> str:
    return f"PA_Report_{report.period_start.isoformat()}_{report.period_end.isoformat()}.csv"
