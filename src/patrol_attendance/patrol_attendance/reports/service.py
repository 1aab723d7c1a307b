from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_hhmm
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError

STATUS_LABELS = {
    AttendanceStatus.SYSTEM_AUTO_CLOSED: "System closed",
    AttendanceStatus.LATE_CLOSE: "Late close",
}

REPORT_FIELDS = [
    "date",
    "guard_name",
    "employee_id",
    "site_name",
    "check_in",
    "check_out",
    "status",
    "status_label",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: dict


class AnomalyReportService:
    """Records closed by reconciliation instead of the guard's own scan, for manual review."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def build(self, *, start: date, end: date) -> ReportData:
        if end < start:
            raise ValidationError("End date must be on or after start date")

        statuses = [s for s in AttendanceStatus if s.is_anomaly]
        query_rows = self._attendance.list_anomalies(start_date=start, end_date=end, statuses=statuses)

        out_rows: list[dict] = []
        summary = {status.value: 0 for status in STATUS_LABELS}
        for r in query_rows:
            out_rows.append(
                {
                    "record_id": r.record_id,
                    "date": r.work_date.strftime("%Y-%m-%d"),
                    "guard_name": r.guard_name or "-",
                    "employee_id": r.employee_id or "-",
                    "site_name": r.site_name or "-",
                    "check_in": format_hhmm(r.check_in_time),
                    "check_out": format_hhmm(r.check_out_time),
                    "status": r.status.value,
                    "status_label": STATUS_LABELS.get(r.status, r.status.value),
                }
            )
            summary[r.status.value] = summary.get(r.status.value, 0) + 1

        summary["total"] = len(out_rows)
        return ReportData(rows=out_rows, summary=summary)
