"""Site check-in QR codes.

The payload printed on every site is a small JSON object::

    {"type": "site_checkin", "site_id": "<uuid>", "site_name": "...", "code": "..."}

Encoding (for printing) and decoding (for scanning) live together so the two
sides cannot drift apart.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass
from typing import BinaryIO, Optional

import qrcode
from PIL import Image, UnidentifiedImageError
from pyzbar.pyzbar import decode as pyzbar_decode

from ..core.constants import SITE_CHECKIN_CODE_TYPE
from ..core.exceptions import InvalidCodeError

INVALID_CODE_MESSAGE = "Invalid site QR code, please scan the site check-in code"


@dataclass(frozen=True)
class SiteCheckinCode:
    site_id: str
    site_name: str
    code: Optional[str] = None

    def to_payload(self) -> dict:
        payload = {"type": SITE_CHECKIN_CODE_TYPE, "site_id": self.site_id, "site_name": self.site_name}
        if self.code:
            payload["code"] = self.code
        return payload


def decode_site_code(raw: str | bytes | None) -> SiteCheckinCode:
    """Parse scanned text; anything but a site check-in code raises InvalidCodeError."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidCodeError(INVALID_CODE_MESSAGE)
    if not isinstance(raw, str):
        raise InvalidCodeError(INVALID_CODE_MESSAGE)
    if not raw or not raw.strip():
        raise InvalidCodeError(INVALID_CODE_MESSAGE)

    try:
        data = json.loads(raw)
    except ValueError:
        raise InvalidCodeError(INVALID_CODE_MESSAGE)

    if not isinstance(data, dict) or data.get("type") != SITE_CHECKIN_CODE_TYPE:
        raise InvalidCodeError(INVALID_CODE_MESSAGE)

    site_id = data.get("site_id")
    if not isinstance(site_id, str) or not site_id.strip():
        raise InvalidCodeError(INVALID_CODE_MESSAGE)

    site_name = data.get("site_name")
    code = data.get("code")
    return SiteCheckinCode(
        site_id=site_id.strip(),
        site_name=str(site_name).strip() if site_name else site_id.strip(),
        code=str(code) if code else None,
    )


def encode_site_code(code: SiteCheckinCode) -> str:
    return json.dumps(code.to_payload(), ensure_ascii=False, separators=(",", ":"))


def render_qr_png(data: str, *, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(stream: BinaryIO) -> str:
    """Return the text of the first QR code found in an uploaded image."""
    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise InvalidCodeError("Uploaded file is not a readable image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise InvalidCodeError("No QR code found in the image")
    return decoded[0].data.decode("utf-8", errors="replace").strip()
