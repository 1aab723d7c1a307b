from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import BusinessClock, default_late_close_time
from ..common.validators import optional_str, require_non_empty
from ..core.enums import ResolutionAction, ScanAction
from ..core.exceptions import AuthorizationError, ConcurrentScanError, RecordNotFoundError, ValidationError
from ..scan.codes import SiteCheckinCode, decode_site_code
from .factory import CheckoutPolicyFactory
from .model import AttendanceRecord
from .policies.base import CheckoutPolicy
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanConflict:
    """Open session at another site; needs an operator-supplied checkout time."""

    stale_record_id: str
    stale_site_id: str
    stale_site_name: str
    stale_check_in_time: datetime
    pending_site_id: str
    pending_site_name: str
    suggested_check_out_time: datetime


@dataclass(frozen=True)
class ScanResult:
    action: ScanAction
    site_id: str
    site_name: str
    at: datetime
    record_id: Optional[str] = None
    conflict: Optional[ScanConflict] = None


@dataclass(frozen=True)
class ResolutionResult:
    action: ResolutionAction
    closed_record_id: str
    check_out_time: datetime
    new_record_id: Optional[str] = None
    site_id: Optional[str] = None
    site_name: Optional[str] = None


class SiteAttendanceService:
    """Use case: guard scans a site code, operator reconciles a forgotten checkout."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        clock: BusinessClock | None = None,
        checkout_policy: CheckoutPolicy | str | None = None,
        policy_factory: CheckoutPolicyFactory | None = None,
    ):
        self._attendance = attendance
        self._clock = clock or BusinessClock()
        if isinstance(checkout_policy, CheckoutPolicy):
            self._policy = checkout_policy
        else:
            self._policy = (policy_factory or CheckoutPolicyFactory()).for_name(checkout_policy)

    @property
    def checkout_policy(self) -> CheckoutPolicy:
        return self._policy

    def scan(self, guard_id: str, raw_code: str | bytes | None) -> ScanResult:
        # Reject bad payloads before touching storage.
        code = decode_site_code(raw_code)
        return self.check_in_or_out(guard_id, code)

    def check_in_or_out(self, guard_id: str, code: SiteCheckinCode) -> ScanResult:
        now = self._clock.now()
        today = now.date()

        open_record = self._attendance.find_open_for_guard(guard_id)

        if open_record is None:
            record_id = self._attendance.create_checkin(
                guard_id=guard_id,
                site_id=code.site_id,
                work_date=today,
                check_in_time=now,
            )
            logger.info("guard=%s checked in at site=%s record=%s", guard_id, code.site_id, record_id)
            return ScanResult(
                action=ScanAction.CHECK_IN,
                site_id=code.site_id,
                site_name=code.site_name,
                at=now,
                record_id=record_id,
            )

        target = None
        if open_record.site_id == code.site_id:
            today_records: Sequence[AttendanceRecord] = ()
            if self._policy.requires_today_records:
                today_records = self._attendance.list_for_guard_and_date(guard_id, today)
            target = self._policy.select_checkout(
                open_record=open_record,
                site_id=code.site_id,
                today_records=today_records,
            )

        if target is not None:
            if not self._attendance.mark_checked_out(record_id=target.record_id, check_out_time=now):
                raise ConcurrentScanError("This session was closed by another action, please scan again")
            logger.info("guard=%s checked out at site=%s record=%s", guard_id, code.site_id, target.record_id)
            return ScanResult(
                action=ScanAction.CHECK_OUT,
                site_id=code.site_id,
                site_name=code.site_name,
                at=now,
                record_id=target.record_id,
            )

        conflict = ScanConflict(
            stale_record_id=open_record.record_id,
            stale_site_id=open_record.site_id,
            stale_site_name=open_record.site_name or open_record.site_id,
            stale_check_in_time=open_record.check_in_time,
            pending_site_id=code.site_id,
            pending_site_name=code.site_name,
            # Never earlier than the stale check-in.
            suggested_check_out_time=max(default_late_close_time(now), open_record.check_in_time),
        )
        logger.warning(
            "guard=%s scanned site=%s while record=%s at site=%s is still open",
            guard_id,
            code.site_id,
            open_record.record_id,
            open_record.site_id,
        )
        return ScanResult(
            action=ScanAction.CONFLICT,
            site_id=code.site_id,
            site_name=code.site_name,
            at=now,
            conflict=conflict,
        )

    def resolve_conflict(
        self,
        guard_id: str,
        *,
        stale_record_id: str,
        check_out_time: datetime,
        pending_site_id: Optional[str] = None,
        pending_site_name: Optional[str] = None,
    ) -> ResolutionResult:
        """Close a forgotten session as late_close, then optionally check in at the pending site."""
        now = self._clock.now()
        check_out_time = self._clock.to_local(check_out_time)

        record = self._attendance.get_by_id(require_non_empty(stale_record_id, "Record id"))
        if not record:
            raise RecordNotFoundError("Attendance record not found")
        if record.guard_id != guard_id:
            raise AuthorizationError("This attendance record belongs to another guard")
        if not record.is_open:
            raise ValidationError("This session has already been closed")
        if check_out_time < record.check_in_time:
            raise ValidationError("Checkout time cannot be earlier than the check-in time")
        if check_out_time > now:
            raise ValidationError("Checkout time cannot be in the future")

        pending_site_id = optional_str(pending_site_id)
        new_record_id = self._attendance.close_late(
            record_id=record.record_id,
            check_out_time=check_out_time,
            reopen_site_id=pending_site_id,
            reopen_date=now.date() if pending_site_id else None,
            reopen_time=now if pending_site_id else None,
        )

        if pending_site_id:
            logger.info(
                "guard=%s late-closed record=%s and checked in at site=%s record=%s",
                guard_id,
                record.record_id,
                pending_site_id,
                new_record_id,
            )
            return ResolutionResult(
                action=ResolutionAction.RESOLVED_AND_CHECKED_IN,
                closed_record_id=record.record_id,
                check_out_time=check_out_time,
                new_record_id=new_record_id,
                site_id=pending_site_id,
                site_name=optional_str(pending_site_name) or pending_site_id,
            )

        logger.info("guard=%s late-closed record=%s at %s", guard_id, record.record_id, check_out_time)
        return ResolutionResult(
            action=ResolutionAction.RESOLVED,
            closed_record_id=record.record_id,
            check_out_time=check_out_time,
        )

    def list_today(self, guard_id: str) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_guard_and_date(guard_id, self._clock.today())

    def suggested_check_out_time(self) -> datetime:
        return default_late_close_time(self._clock.now())
