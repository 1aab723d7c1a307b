"""HTTP triggers for the reconciliation jobs.

Both endpoints are meant for a scheduler (cron, a platform job runner) rather
than people: they take no body and return a flat JSON object. When
``JOB_SECRET`` is configured callers must send it in ``X-Job-Secret`` or as a
bearer token.
"""

from __future__ import annotations

import hmac
import logging

from flask import Flask, jsonify, request

from ..container import Container

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, x-job-secret",
}

JOB_METHODS = ["OPTIONS", "GET", "POST"]


def register(app: Flask, container: Container) -> None:
    def _respond(body: dict, status: int):
        resp = jsonify(body)
        resp.status_code = status
        resp.headers.update(CORS_HEADERS)
        return resp

    def _preflight():
        return app.response_class("", status=200, headers=CORS_HEADERS)

    def _authorized() -> bool:
        secret = app.config.get("JOB_SECRET") or ""
        if not secret:
            # Open only in local development and tests.
            return bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        provided = request.headers.get("X-Job-Secret") or ""
        if not provided:
            auth = request.headers.get("Authorization") or ""
            if auth.lower().startswith("bearer "):
                provided = auth[7:].strip()
        return hmac.compare_digest(provided.encode("utf-8"), secret.encode("utf-8"))

    def _run(job_name: str, job):
        if request.method == "OPTIONS":
            return _preflight()
        if not _authorized():
            return _respond({"error": "Unauthorized"}, 401)

        try:
            result = job.run()
        except Exception as e:
            logger.exception("Job %s failed", job_name)
            return _respond({"error": str(e)}, 500)

        return _respond(result.to_dict(), 200)

    @app.route("/functions/auto-close-attendance", methods=JOB_METHODS, endpoint="job_auto_close_attendance")
    def job_auto_close_attendance():
        return _run("auto-close-attendance", container.stale_session_reaper)

    @app.route("/functions/check-permit-expiry", methods=JOB_METHODS, endpoint="job_check_permit_expiry")
    def job_check_permit_expiry():
        return _run("check-permit-expiry", container.expiry_monitor)
