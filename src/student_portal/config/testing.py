import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "student_portal_test"),
}
DB_POOL_SIZE = 0

IDENTITY_API_URL = "http://identity.invalid/v1"
IDENTITY_SECRET_KEY = "test-identity-key"
IDENTITY_JWKS_URL = "http://identity.invalid/.well-known/jwks.json"
SESSION_COOKIE = "__session"

PORTAL_TIMEZONE = "America/Chicago"
TARGET_HOURS = 6.0
PERIOD_ANCHOR_WEEKDAY = 3

DATA_DIR = os.getenv("DATA_DIR", "data")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "public/images")

ALLOWED_EMAIL_DOMAINS = ["@mnsu.edu", "@go.minnstate.edu", "@minnstate.edu"]

LOG_LEVEL = "WARNING"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
