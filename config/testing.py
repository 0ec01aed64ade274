import os

SECRET_KEY = "test-secret"
TOKEN_SECRET = "test-token-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_management_test"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ADMIN_EMAIL = ""

TIMEZONE = "Asia/Dhaka"
FRONTEND_URL = "http://frontend.test"

MAIL_SERVER = "localhost"
MAIL_PORT = 25
MAIL_USE_TLS = False
MAIL_USE_SSL = False
MAIL_USERNAME = None
MAIL_PASSWORD = None
MAIL_DEFAULT_SENDER = "no-reply@webbriks.test"
MAIL_BATCH_SIZE = 50
MAIL_SUPPRESS_SEND = True

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "/tmp/hr_management_uploads")
IPRN_TOKEN = ""
