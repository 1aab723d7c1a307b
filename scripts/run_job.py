"""Run a reconciliation job once, without going through HTTP.

    python scripts/run_job.py auto-close-attendance
    python scripts/run_job.py check-permit-expiry

Suitable for a crontab entry on the database host.
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.patrol_attendance.patrol_attendance.common.logging_config import PACKAGE_LOGGER, configure_logging
from src.patrol_attendance.patrol_attendance.container import build_container
from src.patrol_attendance.patrol_attendance.core.constants import DEFAULT_BUSINESS_TIMEZONE
from src.patrol_attendance.patrol_attendance.core.exceptions import DomainError

logger = logging.getLogger(f"{PACKAGE_LOGGER}.run_job")

JOBS = {
    "auto-close-attendance": "stale_session_reaper",
    "check-permit-expiry": "expiry_monitor",
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run an attendance reconciliation job once.")
    parser.add_argument("job", choices=sorted(JOBS), help="job to run")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        timezone=getattr(settings, "BUSINESS_TIMEZONE", DEFAULT_BUSINESS_TIMEZONE),
    )
    job = getattr(container, JOBS[args.job])

    try:
        result = job.run()
    except DomainError as e:
        logger.error("Job %s failed: %s", args.job, e)
        print(json.dumps({"error": str(e)}))
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
