from __future__ import annotations

from datetime import date

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError, OperationalError

from src.hr_management.hr_management.attendance.model import Punch
from src.hr_management.hr_management.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.hr_management.hr_management.clients.mysql_client_repository import MySQLClientRepository
from src.hr_management.hr_management.core.enums import PunchKind


class FailingCursor:
    def __init__(self, error: Exception):
        self._error = error

    def execute(self, sql, params=None):
        raise self._error

    def close(self):
        pass


class FakeConnection:
    def __init__(self, error: Exception):
        self._error = error
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return FailingCursor(self._error)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self, error: Exception):
        self.conn = FakeConnection(error)

    def connect(self):
        return self.conn


def _duplicate() -> IntegrityError:
    return IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)


def _punch() -> Punch:
    return Punch(email="sam@example.com", work_date=date(2025, 8, 4), kind=PunchKind.CHECK_IN, punch_time_ms=21_600_000)


def test_duplicate_punch_is_reported_not_raised():
    factory = FakeConnectionFactory(_duplicate())

    assert MySQLAttendanceRepository(factory).record_punch(_punch()) is False
    assert factory.conn.rolled_back and factory.conn.closed
    assert not factory.conn.committed


def test_duplicate_client_is_reported_not_raised():
    factory = FakeConnectionFactory(_duplicate())
    created = MySQLClientRepository(factory).create(client_id="C-1", client_name="Acme", country=None, source=None)
    assert created is False


@pytest.mark.parametrize(
    "error",
    [
        IntegrityError(msg="Cannot be null", errno=errorcode.ER_BAD_NULL_ERROR),
        OperationalError(msg="Lost connection", errno=errorcode.CR_SERVER_LOST),
    ],
)
def test_other_database_errors_propagate(error):
    with pytest.raises(type(error)):
        MySQLAttendanceRepository(FakeConnectionFactory(error)).record_punch(_punch())
    with pytest.raises(type(error)):
        MySQLClientRepository(FakeConnectionFactory(error)).create(client_id="C-1", client_name=None, country=None, source=None)
