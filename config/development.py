import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "patrol_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Wall-clock timezone used for "today", check-in times and the late-close default
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Asia/Shanghai")

# How a repeat scan at the same site is matched: today_only | any_open
SAME_SITE_CHECKOUT_POLICY = os.getenv("SAME_SITE_CHECKOUT_POLICY", "today_only")

# Shared secret for /functions/*; empty leaves them open while DEBUG is on
JOB_SECRET = os.getenv("JOB_SECRET", "")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo sites and guards on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
