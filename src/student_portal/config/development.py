import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "student_portal"),
}
# Pooled connections per worker process; 0 opens a fresh connection per query
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "0"))

# Identity provider (Backend API + session JWKS)
IDENTITY_API_URL = os.getenv("IDENTITY_API_URL", "https://api.clerk.com/v1")
IDENTITY_SECRET_KEY = os.getenv("IDENTITY_SECRET_KEY", "")
IDENTITY_JWKS_URL = os.getenv("IDENTITY_JWKS_URL", "")
SESSION_COOKIE = os.getenv("SESSION_COOKIE", "__session")

PORTAL_TIMEZONE = os.getenv("PORTAL_TIMEZONE", "America/Chicago")
TARGET_HOURS = float(os.getenv("TARGET_HOURS", "6"))
# datetime.weekday() numbering, 3 = Thursday
PERIOD_ANCHOR_WEEKDAY = int(os.getenv("PERIOD_ANCHOR_WEEKDAY", "3"))

# Flat-file stores (voting, team members) and uploaded team images
DATA_DIR = os.getenv("DATA_DIR", "data")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "public/images")

ALLOWED_EMAIL_DOMAINS = [
    d.strip() for d in os.getenv("ALLOWED_EMAIL_DOMAINS", "@mnsu.edu,@go.minnstate.edu,@minnstate.edu").split(",") if d.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo calendar content on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
