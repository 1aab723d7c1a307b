from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import BusinessClock
from ..core.constants import FALLBACK_SHIFT_HOURS, STALE_SESSION_HOURS
from ..core.exceptions import DomainError, JobAbortError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReaperResult:
    message: str
    count: int
    skipped: int = 0

    def to_dict(self) -> dict:
        return {"message": self.message, "count": self.count}


class StaleSessionReaper:
    """Force-close sessions left open longer than the stale threshold.

    Safe to run repeatedly: closed rows leave ``checked_in`` so a second sweep
    finds nothing. Rows that fail to update are left for the next sweep.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        clock: BusinessClock | None = None,
        stale_after: timedelta = timedelta(hours=STALE_SESSION_HOURS),
        fallback_duration: timedelta = timedelta(hours=FALLBACK_SHIFT_HOURS),
    ):
        self._attendance = attendance
        self._clock = clock or BusinessClock()
        self._stale_after = stale_after
        self._fallback_duration = fallback_duration

    def run(self) -> ReaperResult:
        now = self._clock.now()
        cutoff = now - self._stale_after

        try:
            stale = self._attendance.list_stale(opened_before=cutoff)
        except DomainError as e:
            raise JobAbortError(f"Could not load open sessions: {e}") from e

        if not stale:
            return ReaperResult(message="No stale records found", count=0)

        closed = 0
        skipped = 0
        for record in stale:
            fallback_checkout = record.check_in_time + self._fallback_duration
            try:
                ok = self._attendance.mark_auto_closed(
                    record_id=record.record_id,
                    check_out_time=fallback_checkout,
                    closed_at=now,
                )
            except DomainError as e:
                logger.warning("Skipping stale record=%s: %s", record.record_id, e)
                skipped += 1
                continue

            if ok:
                closed += 1
            else:
                # Closed by the guard or an operator since the select.
                skipped += 1

        if skipped:
            logger.warning("Auto-close left %s of %s stale records for the next run", skipped, len(stale))
        logger.info("Auto-closed %s stale records (cutoff=%s)", closed, cutoff)
        return ReaperResult(message=f"Auto-closed {closed} stale records", count=closed, skipped=skipped)
