from __future__ import annotations

import pytest

from src.patrol_attendance.patrol_attendance.attendance.service import SiteAttendanceService
from src.patrol_attendance.patrol_attendance.container import Container, build_services
from src.patrol_attendance.patrol_attendance.main import create_app
from tests.fakes import (
    GUARDS,
    SITE_NAMES,
    SITES,
    FakeClock,
    InMemoryAttendance,
    InMemoryGuards,
    InMemoryNotices,
    InMemoryProfiles,
    InMemorySites,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance(site_names=SITE_NAMES, guards={g.guard_id: g for g in GUARDS})


@pytest.fixture
def service(attendance, clock) -> SiteAttendanceService:
    return SiteAttendanceService(attendance, clock=clock)


@pytest.fixture
def app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")


@pytest.fixture
def profiles() -> InMemoryProfiles:
    return InMemoryProfiles([])


@pytest.fixture
def notices() -> InMemoryNotices:
    return InMemoryNotices()


@pytest.fixture
def container(attendance, clock, profiles, notices) -> Container:
    return build_services(
        clock=clock,
        attendance_repo=attendance,
        guards_repo=InMemoryGuards(GUARDS),
        sites_repo=InMemorySites(SITES),
        profiles_repo=profiles,
        notices_repo=notices,
    )


@pytest.fixture
def app(app_env, container):
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, *, user_id: str = "u-1", role: str = "guard") -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


@pytest.fixture
def login_as():
    return login
