"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta

DEFAULT_TIMEZONE = "Asia/Dhaka"

SESSION_TOKEN_LIFETIME = timedelta(hours=24)
ACTIVATION_TOKEN_LIFETIME = timedelta(days=7)

OT_KEY_SUFFIX = "_OT"
OT_SHIFT_NAME = "OT list"

DEFAULT_CASUAL_LEAVE_DAYS = 10
DEFAULT_SICK_LEAVE_DAYS = 14

MAIL_BATCH_SIZE = 50
DEFAULT_HISTORY_LIMIT = 200

MAIN_BALANCE = "main"
HR_BALANCE = "hr"
LOAN_BALANCE = "loan"
