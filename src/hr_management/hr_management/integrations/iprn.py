"""OTP lookup against the IPRN SMS stock API.

Stateless: two pages of the most recent SMS records in a rolling 8-day window
are scanned for the phone number; there is no retry or backoff.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

logger = logging.getLogger(__name__)

IPRN_URL = "https://api.iprn.pro/api/public/v1/stock/edr-account"
MAX_PAGES = 2
PER_PAGE = 12
LOOKBACK = timedelta(days=8)
REQUEST_TIMEOUT = 15

OTP_PATTERN = re.compile(r"n/(\d{5})")
_NON_DIGITS = re.compile(r"\D")


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def extract_otp(message: str) -> str:
    """The 5-digit code after ``n/``, or the whole trimmed message when the format differs."""
    match = OTP_PATTERN.search(message)
    return match.group(1) if match else message.strip()


def fetch_otp_from_iprn(
    phone_number: str,
    token: str,
    *,
    now: Optional[datetime] = None,
    session: Optional[requests.Session] = None,
) -> Optional[str]:
    http = session or requests
    now = now or datetime.now(timezone.utc)
    target = _NON_DIGITS.sub("", phone_number or "")
    logger.info("Fetching OTP for number %s", phone_number)

    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    params = {
        "type": "sms",
        "stock_account": 0,
        "perPage": PER_PAGE,
        "sortColumn": "created_at",
        "sortDirection": "desc",
        "period[0]": _iso(now - LOOKBACK),
        "period[1]": _iso(now),
    }

    for page in range(1, MAX_PAGES + 1):
        try:
            response = http.get(IPRN_URL, headers=headers, params={**params, "page": page}, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            messages = (response.json() or {}).get("data") or []
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 401:
                logger.error("IPRN token expired or unauthorized; update IPRN_TOKEN")
            logger.error("IPRN lookup failed on page %d: %s", page, e)
            continue
        except (requests.RequestException, ValueError) as e:
            logger.error("IPRN lookup failed on page %d: %s", page, e)
            continue

        for msg in messages:
            b_number = _NON_DIGITS.sub("", str(msg.get("b_number") or ""))
            text = msg.get("message")
            if target and target in b_number and text:
                return extract_otp(text)

    logger.info("No OTP found for %s", phone_number)
    return None
