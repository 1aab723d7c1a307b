from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, send_file

from ..common.web import json_error, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import RecordNotFoundError, TransientStorageError
from ..scan.codes import encode_site_code

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.site_qr_service

    @app.route("/admin/sites/<site_id>/qr.png", methods=["GET"], endpoint="admin_site_qr_image")
    @roles_required(Role.ADMIN)
    def admin_site_qr_image(site_id: str):
        """Printable check-in QR code for one site."""
        try:
            png = service.render_png(site_id)
        except RecordNotFoundError as e:
            return json_error(str(e), 404)
        except TransientStorageError as e:
            return json_error(str(e), 503, error="storage_unavailable")

        return send_file(io.BytesIO(png), mimetype="image/png", download_name=f"site_{site_id}.png")

    @app.route("/admin/sites/<site_id>/qr", methods=["GET"], endpoint="admin_site_qr_payload")
    @roles_required(Role.ADMIN)
    def admin_site_qr_payload(site_id: str):
        try:
            code = service.checkin_code(site_id)
        except RecordNotFoundError as e:
            return json_error(str(e), 404)
        except TransientStorageError as e:
            return json_error(str(e), 503, error="storage_unavailable")

        return jsonify({"success": True, "payload": code.to_payload(), "text": encode_site_code(code)}), 200
