from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payslip_repository import MySQLPayslipRepository
from .payroll.report import PayrollReportService
from .payroll.rules import PayrollRules
from .payroll.service import PayrollService
from .timeentries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .timeentries.service import TimeTrackingService
from .users.mysql_user_repository import MySQLUserRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    rules: PayrollRules

    users_repo: MySQLUserRepository
    entries_repo: MySQLTimeEntryRepository
    payslips_repo: MySQLPayslipRepository

    time_tracking_service: TimeTrackingService
    payroll_service: PayrollService
    payroll_report_service: PayrollReportService


def build_container(*, db_config: dict, payroll: Optional[dict] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    rules = PayrollRules.from_settings(payroll)

    users_repo = MySQLUserRepository(conn)
    entries_repo = MySQLTimeEntryRepository(conn)
    payslips_repo = MySQLPayslipRepository(conn)

    time_tracking_service = TimeTrackingService(entries_repo, users_repo, rules=rules)
    payroll_service = PayrollService(
        users_repo,
        entries_repo,
        payslips_repo,
        calculator=StandardPayrollCalculator(rules),
    )
    payroll_report_service = PayrollReportService(payslips_repo)

    return Container(
        conn=conn,
        rules=rules,
        users_repo=users_repo,
        entries_repo=entries_repo,
        payslips_repo=payslips_repo,
        time_tracking_service=time_tracking_service,
        payroll_service=payroll_service,
        payroll_report_service=payroll_report_service,
    )
