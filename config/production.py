import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
TOKEN_SECRET = os.getenv("TOKEN_SECRET", "")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_management"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")

TIMEZONE = os.getenv("TIMEZONE", "Asia/Dhaka")
FRONTEND_URL = os.getenv("FRONTEND_URL", "")

MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
MAIL_PORT = int(os.getenv("MAIL_PORT", "465"))
MAIL_USE_TLS = bool(int(os.getenv("MAIL_USE_TLS", "0")))
MAIL_USE_SSL = bool(int(os.getenv("MAIL_USE_SSL", "1")))
MAIL_USERNAME = os.getenv("MAIL_USERNAME")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", os.getenv("MAIL_USERNAME", ""))
MAIL_BATCH_SIZE = int(os.getenv("MAIL_BATCH_SIZE", "50"))

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
IPRN_TOKEN = os.getenv("IPRN_TOKEN", "")
