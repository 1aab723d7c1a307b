from __future__ import annotations

import io
import json

import pytest

from src.patrol_attendance.patrol_attendance.core.exceptions import InvalidCodeError
from src.patrol_attendance.patrol_attendance.scan.codes import (
    INVALID_CODE_MESSAGE,
    SiteCheckinCode,
    decode_qr_image,
    decode_site_code,
    encode_site_code,
    render_qr_png,
)


def test_decode_reads_site_fields():
    code = decode_site_code('{"type":"site_checkin","site_id":" s-1 ","site_name":"North Gate","code":"NG-01"}')

    assert code == SiteCheckinCode(site_id="s-1", site_name="North Gate", code="NG-01")


def test_decode_accepts_bytes():
    raw = encode_site_code(SiteCheckinCode(site_id="s-1", site_name="仓库")).encode("utf-8")

    assert decode_site_code(raw).site_name == "仓库"


def test_encoded_payload_is_compact_json():
    text = encode_site_code(SiteCheckinCode(site_id="s-1", site_name="North Gate"))

    assert " " not in text.replace("North Gate", "")
    assert json.loads(text) == {"type": "site_checkin", "site_id": "s-1", "site_name": "North Gate"}


def test_invalid_code_message_is_user_facing():
    with pytest.raises(InvalidCodeError) as exc:
        decode_site_code('{"type":"user_card","id":7}')

    assert str(exc.value) == INVALID_CODE_MESSAGE


def test_non_string_site_id_is_rejected():
    with pytest.raises(InvalidCodeError):
        decode_site_code('{"type":"site_checkin","site_id":42}')


def test_rendered_png_scans_back():
    payload = encode_site_code(SiteCheckinCode(site_id="s-1", site_name="North Gate"))
    png = render_qr_png(payload, border=4)

    assert png.startswith(b"\x89PNG")
    assert decode_site_code(decode_qr_image(io.BytesIO(png))).site_id == "s-1"


def test_image_without_qr_is_invalid():
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (64, 64), "white").save(buf, format="PNG")
    buf.seek(0)

    with pytest.raises(InvalidCodeError):
        decode_qr_image(buf)


def test_non_image_upload_is_invalid():
    with pytest.raises(InvalidCodeError):
        decode_qr_image(io.BytesIO(b"plain text, not an image"))
