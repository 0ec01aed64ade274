from __future__ import annotations

from datetime import datetime, timezone

import requests

from src.hr_management.hr_management.integrations.iprn import (
    IPRN_URL,
    MAX_PAGES,
    PER_PAGE,
    extract_otp,
    fetch_otp_from_iprn,
)

NOW = datetime(2025, 8, 4, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, payload=None, status: int = 200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, *, headers, params, timeout):
        self.calls.append({"url": url, "headers": headers, "params": params})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_extract_otp_prefers_code_after_marker():
    assert extract_otp("Your code is n/48213 do not share") == "48213"
    assert extract_otp("  plain text  ") == "plain text"


def test_otp_found_on_first_page():
    session = FakeSession(
        FakeResponse({"data": [
            {"b_number": "+880 1711-000000", "message": "code n/11111"},
            {"b_number": "8801999888777", "message": "code n/22222"},
        ]})
    )

    otp = fetch_otp_from_iprn("+880-1999-888777", "tkn", now=NOW, session=session)

    assert otp == "22222"
    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == IPRN_URL
    assert call["headers"]["Authorization"] == "Bearer tkn"
    assert call["params"]["page"] == 1
    assert call["params"]["perPage"] == PER_PAGE
    assert call["params"]["period[0]"] == "2025-07-27T12:00:00.000Z"
    assert call["params"]["period[1]"] == "2025-08-04T12:00:00.000Z"


def test_second_page_is_scanned_after_a_failed_first_page():
    session = FakeSession(
        requests.ConnectionError("reset"),
        FakeResponse({"data": [{"b_number": "8801999888777", "message": "n/33333"}]}),
    )

    assert fetch_otp_from_iprn("8801999888777", "tkn", now=NOW, session=session) == "33333"
    assert [c["params"]["page"] for c in session.calls] == [1, 2]


def test_unauthorized_and_empty_pages_yield_none(caplog):
    session = FakeSession(FakeResponse(status=401), FakeResponse({"data": []}))

    with caplog.at_level("ERROR"):
        assert fetch_otp_from_iprn("8801999888777", "expired", now=NOW, session=session) is None

    assert len(session.calls) == MAX_PAGES
    assert "IPRN_TOKEN" in caplog.text
