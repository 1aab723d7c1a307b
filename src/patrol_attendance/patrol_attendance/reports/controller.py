from __future__ import annotations

import csv
import io
from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import json_error, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import TransientStorageError, ValidationError
from .service import REPORT_FIELDS, ReportData


def register(app: Flask, container: Container) -> None:
    service = container.anomaly_report_service

    def _date_range() -> tuple[date, date]:
        """``?start=&end=`` as ISO dates, defaulting to the current month so far."""
        today = container.clock.today()
        start_s = (request.args.get("start") or "").strip()
        end_s = (request.args.get("end") or "").strip()
        start = parse_iso_date(start_s) if start_s else today.replace(day=1)
        end = parse_iso_date(end_s) if end_s else today
        return start, end

    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        # BOM so spreadsheet tools pick up UTF-8 names.
        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    def _build():
        start, end = _date_range()
        return start, end, service.build(start=start, end=end)

    @app.route("/admin/reports/anomalies", methods=["GET"], endpoint="admin_anomaly_report")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def admin_anomaly_report():
        try:
            start, end, data = _build()
        except ValidationError as e:
            return json_error(str(e), 400)
        except ValueError:
            return json_error("Dates must be YYYY-MM-DD", 400)
        except TransientStorageError as e:
            return json_error(str(e), 503, error="storage_unavailable")

        return jsonify(
            {
                "success": True,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "rows": data.rows,
                "summary": data.summary,
            }
        ), 200

    @app.route("/admin/reports/anomalies.csv", methods=["GET"], endpoint="admin_anomaly_report_csv")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def admin_anomaly_report_csv():
        try:
            start, end, data = _build()
        except ValidationError as e:
            return json_error(str(e), 400)
        except ValueError:
            return json_error("Dates must be YYYY-MM-DD", 400)
        except TransientStorageError as e:
            return json_error(str(e), 503, error="storage_unavailable")

        filename = f"attendance_anomalies_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(data=data, filename=filename)
