# salary_mgmt/transforms.py
#
# One-off data corrections applied after a load. Each pass selects the rows it
# changes, updates them by primary key and commits once. None of them touch
# salary, so none of them produce salary log entries.

import logging
from decimal import Decimal

from sqlmodel import Session, select

from salary_mgmt.models import Employee

logger = logging.getLogger(__name__)


def _apply(session: Session, statement, field: str, value) -> int:
    try:
        rows = session.exec(statement).all()
        for emp in rows:
            setattr(emp, field, value)
            session.add(emp)
        session.commit()
    except Exception:
        session.rollback()
        raise
    return len(rows)


def normalize_status(session: Session, old: str = "Inactive", new: str = "Retired") -> int:
    """Rename an employment status, e.g. 'Inactive' → 'Retired'."""
    count = _apply(
        session,
        select(Employee).where(Employee.status == old),
        "status",
        new,
    )
    logger.info("Status '%s' → '%s': %d employees", old, new, count)
    return count


def fill_missing_performance(session: Session, department: str = "IT", score=5) -> int:
    """Give employees of `department` with no performance score a default one."""
    count = _apply(
        session,
        select(Employee).where(
            Employee.department == department,
            Employee.performance_score.is_(None),
        ),
        "performance_score",
        Decimal(str(score)),
    )
    logger.info("Filled %d missing performance scores in %s with %s", count, department, score)
    return count


def enforce_min_experience(session: Session, minimum: int = 2) -> int:
    """Raise experience_years to `minimum` wherever it is below it."""
    count = _apply(
        session,
        select(Employee).where(Employee.experience_years < minimum),
        "experience_years",
        minimum,
    )
    logger.info("Raised experience to %d years for %d employees", minimum, count)
    return count
