from __future__ import annotations

from ..core.exceptions import RecordNotFoundError
from ..scan.codes import SiteCheckinCode, encode_site_code, render_qr_png
from .repository import SiteRepository


class SiteQRService:
    """Use case: print the check-in QR code for a site."""

    def __init__(self, sites: SiteRepository):
        self._sites = sites

    def checkin_code(self, site_id: str) -> SiteCheckinCode:
        site = self._sites.get_by_id(site_id)
        if not site:
            raise RecordNotFoundError("Site not found")
        return SiteCheckinCode(site_id=site.site_id, site_name=site.name, code=site.code)

    def render_png(self, site_id: str) -> bytes:
        return render_qr_png(encode_site_code(self.checkin_code(site_id)))
