from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_client_datetime
from ..common.web import json_error, login_required
from ..container import Container
from ..core.exceptions import (
    AuthorizationError,
    ConcurrentScanError,
    DuplicateCheckInError,
    InvalidCodeError,
    RecordNotFoundError,
    TransientStorageError,
    ValidationError,
)
from ..scan.codes import INVALID_CODE_MESSAGE, decode_qr_image
from .service import ResolutionResult, ScanResult

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M:%S"


def _iso(value):
    return value.isoformat(timespec="seconds") if value else None


def _scan_body(result: ScanResult) -> dict:
    body = {
        "action": result.action.value,
        "site_id": result.site_id,
        "site_name": result.site_name,
        "time": result.at.strftime(TIME_FORMAT),
        "record_id": result.record_id,
    }
    if result.conflict:
        c = result.conflict
        body["conflict"] = {
            "stale_record_id": c.stale_record_id,
            "stale_site_id": c.stale_site_id,
            "stale_site_name": c.stale_site_name,
            "stale_check_in_time": _iso(c.stale_check_in_time),
            "pending_site_id": c.pending_site_id,
            "pending_site_name": c.pending_site_name,
            "suggested_check_out_time": _iso(c.suggested_check_out_time),
        }
    return body


def _resolution_body(result: ResolutionResult) -> dict:
    return {
        "success": True,
        "action": result.action.value,
        "closed_record_id": result.closed_record_id,
        "check_out_time": _iso(result.check_out_time),
        "new_record_id": result.new_record_id,
        "site_id": result.site_id,
        "site_name": result.site_name,
    }


def register(app: Flask, container: Container) -> None:
    service = container.site_attendance_service

    def _current_guard():
        return container.guards_repo.get_active_by_user_id(str(session["user_id"]))

    def _handle_scan(read_code):
        try:
            guard = _current_guard()
            if not guard:
                return json_error("Guard record not found, ask an administrator to link your account", 404)

            result = service.scan(guard.guard_id, read_code())
        except ConcurrentScanError as e:
            return json_error(str(e), 409, error="concurrent_scan")
        except (InvalidCodeError, DuplicateCheckInError) as e:
            return json_error(str(e), 400, error="invalid_code")
        except TransientStorageError as e:
            logger.warning("Scan failed on storage: %s", e)
            return json_error(str(e), 503, error="storage_unavailable")
        except Exception:
            logger.exception("Unexpected error while processing scan")
            return json_error("System error while processing the scan", 500)

        body = _scan_body(result)
        if result.conflict:
            body["success"] = False
            body["message"] = (
                f"You have not checked out at {result.conflict.stale_site_name}. "
                "Confirm the checkout time of the previous shift."
            )
            return jsonify(body), 409

        body["success"] = True
        return jsonify(body), 200

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    @login_required
    def api_scan():
        """Scan with the decoded QR text: ``{"code": "<text>"}``."""
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return json_error(INVALID_CODE_MESSAGE, 400, error="invalid_code")
        return _handle_scan(lambda: data.get("code"))

    @app.route("/api/scan/image", methods=["POST"], endpoint="api_scan_image")
    @login_required
    def api_scan_image():
        """Scan by uploading a photo of the QR code (multipart field ``image``)."""
        if "image" not in request.files:
            return json_error("Missing image file", 400)

        file = request.files["image"]
        return _handle_scan(lambda: decode_qr_image(file.stream))

    @app.route("/api/attendance/<record_id>/late-close", methods=["POST"], endpoint="api_late_close")
    @login_required
    def api_late_close(record_id: str):
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return json_error("Request body must be a JSON object", 400)
        try:
            guard = _current_guard()
            if not guard:
                return json_error("Guard record not found", 404)

            check_out_time = parse_client_datetime(str(data.get("check_out_time") or ""), clock=container.clock)
            result = service.resolve_conflict(
                guard.guard_id,
                stale_record_id=record_id,
                check_out_time=check_out_time,
                pending_site_id=data.get("pending_site_id"),
                pending_site_name=data.get("pending_site_name"),
            )
        except RecordNotFoundError as e:
            return json_error(str(e), 404)
        except AuthorizationError as e:
            return json_error(str(e), 403)
        except ConcurrentScanError as e:
            return json_error(str(e), 409, error="concurrent_scan")
        except (ValidationError, InvalidCodeError, DuplicateCheckInError) as e:
            return json_error(str(e), 400)
        except TransientStorageError as e:
            logger.warning("Late close failed on storage: %s", e)
            return json_error(str(e), 503, error="storage_unavailable")
        except Exception:
            logger.exception("Unexpected error while closing record=%s", record_id)
            return json_error("System error while saving the checkout time", 500)

        return jsonify(_resolution_body(result)), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @login_required
    def api_attendance_today():
        try:
            guard = _current_guard()
            if not guard:
                return json_error("Guard record not found", 404)
            records = service.list_today(guard.guard_id)
        except TransientStorageError as e:
            return json_error(str(e), 503, error="storage_unavailable")

        return jsonify(
            {
                "success": True,
                "date": container.clock.today().isoformat(),
                "records": [
                    {
                        "record_id": r.record_id,
                        "site_id": r.site_id,
                        "site_name": r.site_name or "-",
                        "check_in_time": _iso(r.check_in_time),
                        "check_out_time": _iso(r.check_out_time),
                        "status": r.status.value,
                    }
                    for r in records
                ],
                "suggested_check_out_time": _iso(service.suggested_check_out_time()),
            }
        ), 200
