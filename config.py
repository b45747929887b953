import os
from dotenv import load_dotenv

load_dotenv()

TRUTHS = {"1", "true", "yes", "on"}


def get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHS


# Database
DB_NAME = os.getenv("DB_NAME", "db.sqlite3")
SEED_DATA = get_bool("SEED_DATA", True)

# Sessions
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me")  # Change this in production!
ALGORITHM = "HS256"
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
SESSION_EXPIRE_MINUTES = int(os.getenv("SESSION_EXPIRE_MINUTES", 60 * 24))  # 1 day
SESSION_COOKIE_SECURE = get_bool("SESSION_COOKIE_SECURE", False)

# Registration
BCRYPT_ROUNDS = 10
VERIFICATION_TOKEN_EXPIRE_HOURS = int(os.getenv("VERIFICATION_TOKEN_EXPIRE_HOURS", 24))
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000")

# Mail (an empty SMTP_HOST logs verification links instead of sending them)
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@campuscircle.local")

# Uploads
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
