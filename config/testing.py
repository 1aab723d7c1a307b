import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "patrol_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

BUSINESS_TIMEZONE = "Asia/Shanghai"
SAME_SITE_CHECKOUT_POLICY = "today_only"
JOB_SECRET = "test-job-secret"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
