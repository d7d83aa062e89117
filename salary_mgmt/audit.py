# salary_mgmt/audit.py
#
# Employee updates with a salary audit trail. A salary that changes value
# appends exactly one SalaryLog row, committed in the same transaction as the
# update itself. If the append fails the update is rolled back with it.

import logging
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from salary_mgmt.derived import quantize_money
from salary_mgmt.exceptions import (
    AuditWriteError,
    ConstraintViolationError,
    EmployeeNotFoundError,
)
from salary_mgmt.models import Employee, EmployeeUpdate, SalaryLog

logger = logging.getLogger(__name__)


def build_salary_log(employee_id: int, old_salary: Decimal, new_salary: Decimal) -> SalaryLog:
    return SalaryLog(
        employee_id=employee_id,
        old_salary=old_salary,
        new_salary=new_salary,
    )


def _record_salary_change(session: Session, employee_id: int, old: Decimal, new: Decimal) -> SalaryLog:
    try:
        entry = build_salary_log(employee_id, old, new)
        session.add(entry)
        session.flush()
    except Exception as e:
        raise AuditWriteError(
            f"Could not log salary change for employee {employee_id}: {e}"
        ) from e
    logger.debug("Salary log %s: employee %d %s -> %s", entry.log_id, employee_id, old, new)
    return entry


def update_employee(
    session: Session,
    employee_id: int,
    changes: Union[EmployeeUpdate, dict],
) -> Employee:
    """
    Apply `changes` to one employee, addressed by id.

    Only fields explicitly present in `changes` are written. Derived columns
    (bonus, normalized_salary, tiers) are rejected; they belong to the
    recomputation pass.
    """
    if isinstance(changes, dict):
        changes = EmployeeUpdate(**changes)
    values = changes.model_dump(exclude_unset=True)
    if "salary" in values and values["salary"] is not None:
        values["salary"] = quantize_money(values["salary"])

    try:
        emp = session.get(Employee, employee_id)
        if emp is None:
            raise EmployeeNotFoundError(employee_id)

        old_salary = quantize_money(emp.salary)
        for field, value in values.items():
            setattr(emp, field, value)
        session.add(emp)
        session.flush()

        new_salary = values.get("salary", old_salary)
        if new_salary is not None and new_salary != old_salary:
            _record_salary_change(session, employee_id, old_salary, new_salary)

        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConstraintViolationError(
            f"Update of employee {employee_id} violates a constraint: {e.orig}"
        ) from e
    except Exception:
        session.rollback()
        raise

    session.refresh(emp)
    logger.info("Updated employee %d: %s", employee_id, sorted(values))
    return emp


def set_salary(session: Session, employee_id: int, new_salary) -> Employee:
    return update_employee(session, employee_id, EmployeeUpdate(salary=new_salary))


def list_salary_log(
    session: Session,
    employee_id: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[SalaryLog]:
    """Salary changes, most recent first."""
    statement = select(SalaryLog)
    if employee_id is not None:
        statement = statement.where(SalaryLog.employee_id == employee_id)
    statement = statement.order_by(
        SalaryLog.change_timestamp.desc(), SalaryLog.log_id.desc()
    )
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())
