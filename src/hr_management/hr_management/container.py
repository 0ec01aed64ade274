from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import CheckInStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .clients.mysql_client_repository import MySQLClientRepository
from .clients.service import ClientService
from .common.mailer import Mailer
from .core.constants import DEFAULT_TIMEZONE
from .database.bootstrap import as_db_config
from .database.connection import DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .ledger.mysql_ledger_repository import MySQLLedgerRepository
from .ledger.service import LedgerService
from .loans.mysql_loan_repository import MySQLLoanRepository
from .loans.service import LoanService
from .notices.mysql_notice_repository import MySQLNoticeRepository, MySQLNotificationRepository
from .notices.service import NoticeService, NotificationService
from .orders.mysql_order_repository import MySQLOrderRepository
from .orders.service import OrderService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import TokenService, UserService


@dataclass(frozen=True)
class Container:
    token_service: TokenService
    user_service: UserService
    employee_service: EmployeeService
    shift_service: ShiftService
    attendance_service: AttendanceService
    ledger_service: LedgerService
    client_service: ClientService
    order_service: OrderService
    leave_service: LeaveService
    notification_service: NotificationService
    notice_service: NoticeService
    loan_service: LoanService
    conn: Optional[DatabaseConnection] = None


def build_container(
    *,
    db_config: dict,
    token_secret: str,
    mailer: Mailer,
    frontend_url: str = "",
    timezone: str = DEFAULT_TIMEZONE,
    upload_folder: str = "uploads",
) -> Container:
    conn = DatabaseConnection.get_instance(as_db_config(db_config))

    users_repo = MySQLUserRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    ledger_repo = MySQLLedgerRepository(conn)
    clients_repo = MySQLClientRepository(conn)
    orders_repo = MySQLOrderRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    notices_repo = MySQLNoticeRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)
    loans_repo = MySQLLoanRepository(conn)

    token_service = TokenService(token_secret)
    notification_service = NotificationService(notifications_repo)

    return Container(
        conn=conn,
        token_service=token_service,
        user_service=UserService(users_repo),
        employee_service=EmployeeService(
            employees_repo, users_repo, token_service, mailer, frontend_url=frontend_url
        ),
        shift_service=ShiftService(shifts_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            shifts_repo,
            employees_repo,
            strategy_factory=CheckInStrategyFactory(),
            timezone=timezone,
        ),
        ledger_service=LedgerService(ledger_repo, timezone=timezone),
        client_service=ClientService(clients_repo),
        order_service=OrderService(orders_repo, clients_repo),
        leave_service=LeaveService(leaves_repo, employees_repo, notification_service),
        notification_service=notification_service,
        notice_service=NoticeService(
            notices_repo, notification_service, employees_repo, mailer, upload_folder=upload_folder
        ),
        loan_service=LoanService(loans_repo),
    )
