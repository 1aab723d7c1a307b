from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import BusinessClock
from ..core.constants import EXPIRY_NOTICE_TARGET_ROLES, EXPIRY_WARNING_DAYS, NOTICE_VALID_DAYS
from ..core.enums import NoticePriority, NoticeStatus
from ..core.exceptions import DomainError, JobAbortError
from ..notices.model import Notice
from ..notices.repository import NoticeRepository
from ..profiles.model import EmployeeProfile
from ..profiles.repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpiryCheckResult:
    expiring_permits: int
    expiring_passports: int
    expired_permits: int
    notices_created: int
    notice_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "message": "Expiry check completed",
            "expiring_permits": self.expiring_permits,
            "expiring_passports": self.expiring_passports,
            "expired_permits": self.expired_permits,
            "notices_created": self.notices_created,
        }


def _format_section(
    heading: str,
    profiles: Sequence[EmployeeProfile],
    expiry_of: Callable[[EmployeeProfile], Optional[date]],
) -> str:
    lines = [f"{p.full_name}({p.employee_id or '-'}): {expiry_of(p)}" for p in profiles]
    return heading + "\n" + "\n".join(lines)


class ExpiryMonitor:
    """Raise one aggregated notice about foreign employees' expiring documents.

    Runs are not deduplicated: two runs on the same day create two notices.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        notices: NoticeRepository,
        *,
        clock: BusinessClock | None = None,
        warning_days: int = EXPIRY_WARNING_DAYS,
        notice_valid_days: int = NOTICE_VALID_DAYS,
    ):
        self._profiles = profiles
        self._notices = notices
        self._clock = clock or BusinessClock()
        self._warning_days = int(warning_days)
        self._notice_valid_days = int(notice_valid_days)

    def run(self) -> ExpiryCheckResult:
        now = self._clock.now()
        today = now.date()
        window_end = today + timedelta(days=self._warning_days)

        try:
            expiring_permits = self._profiles.list_work_permits_expiring(start=today, end=window_end)
            expiring_passports = self._profiles.list_passports_expiring(start=today, end=window_end)
            expired_permits = self._profiles.list_work_permits_expired(before=today)
        except DomainError as e:
            raise JobAbortError(f"Could not load employee documents: {e}") from e

        sections: list[str] = []
        if expiring_permits:
            sections.append(
                _format_section(
                    f"[Work permit expiring] {len(expiring_permits)} employee(s) have a work permit "
                    f"expiring within {self._warning_days} days:",
                    expiring_permits,
                    lambda p: p.work_permit_expiry_date,
                )
            )
        if expiring_passports:
            sections.append(
                _format_section(
                    f"[Passport expiring] {len(expiring_passports)} employee(s) have a passport "
                    f"expiring within {self._warning_days} days:",
                    expiring_passports,
                    lambda p: p.passport_expiry_date,
                )
            )
        if expired_permits:
            sections.append(
                _format_section(
                    f"[Work permit expired] {len(expired_permits)} employee(s) have an expired work permit, "
                    "please handle immediately:",
                    expired_permits,
                    lambda p: p.work_permit_expiry_date,
                )
            )

        notice_id = None
        if sections:
            notice = Notice(
                title=f"Foreign employee document expiry alert - {today.isoformat()}",
                content="\n\n".join(sections),
                priority=NoticePriority.HIGH,
                status=NoticeStatus.ACTIVE,
                target_roles=EXPIRY_NOTICE_TARGET_ROLES,
                start_date=now,
                end_date=now + timedelta(days=self._notice_valid_days),
            )
            try:
                notice_id = self._notices.create(notice)
            except DomainError as e:
                raise JobAbortError(f"Could not create expiry notice: {e}") from e

        result = ExpiryCheckResult(
            expiring_permits=len(expiring_permits),
            expiring_passports=len(expiring_passports),
            expired_permits=len(expired_permits),
            notices_created=1 if notice_id else 0,
            notice_id=notice_id,
        )
        logger.info(
            "Expiry check: permits_expiring=%s passports_expiring=%s permits_expired=%s notices=%s",
            result.expiring_permits,
            result.expiring_passports,
            result.expired_permits,
            result.notices_created,
        )
        return result
