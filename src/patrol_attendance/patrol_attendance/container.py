from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import CheckoutPolicyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import SiteAttendanceService
from .common.datetime_utils import BusinessClock
from .core.constants import DEFAULT_BUSINESS_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .guards.mysql_guard_repository import MySQLGuardRepository
from .guards.repository import GuardRepository
from .jobs.permit_expiry import ExpiryMonitor
from .jobs.stale_sessions import StaleSessionReaper
from .notices.mysql_notice_repository import MySQLNoticeRepository
from .notices.repository import NoticeRepository
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .reports.service import AnomalyReportService
from .sites.mysql_site_repository import MySQLSiteRepository
from .sites.repository import SiteRepository
from .sites.service import SiteQRService


@dataclass(frozen=True)
class Container:
    clock: BusinessClock

    attendance_repo: AttendanceRepository
    guards_repo: GuardRepository
    sites_repo: SiteRepository
    profiles_repo: ProfileRepository
    notices_repo: NoticeRepository

    site_attendance_service: SiteAttendanceService
    site_qr_service: SiteQRService
    anomaly_report_service: AnomalyReportService
    stale_session_reaper: StaleSessionReaper
    expiry_monitor: ExpiryMonitor

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    clock: BusinessClock,
    attendance_repo: AttendanceRepository,
    guards_repo: GuardRepository,
    sites_repo: SiteRepository,
    profiles_repo: ProfileRepository,
    notices_repo: NoticeRepository,
    checkout_policy: Optional[str] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, fakes in tests)."""
    return Container(
        clock=clock,
        attendance_repo=attendance_repo,
        guards_repo=guards_repo,
        sites_repo=sites_repo,
        profiles_repo=profiles_repo,
        notices_repo=notices_repo,
        site_attendance_service=SiteAttendanceService(
            attendance_repo,
            clock=clock,
            checkout_policy=checkout_policy,
            policy_factory=CheckoutPolicyFactory(),
        ),
        site_qr_service=SiteQRService(sites_repo),
        anomaly_report_service=AnomalyReportService(attendance_repo),
        stale_session_reaper=StaleSessionReaper(attendance_repo, clock=clock),
        expiry_monitor=ExpiryMonitor(profiles_repo, notices_repo, clock=clock),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_BUSINESS_TIMEZONE,
    checkout_policy: Optional[str] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        clock=BusinessClock(timezone=timezone),
        attendance_repo=MySQLAttendanceRepository(conn),
        guards_repo=MySQLGuardRepository(conn),
        sites_repo=MySQLSiteRepository(conn),
        profiles_repo=MySQLProfileRepository(conn),
        notices_repo=MySQLNoticeRepository(conn),
        checkout_policy=checkout_policy,
        conn=conn,
    )
