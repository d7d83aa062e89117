# salary_mgmt/reports.py
#
# Read-only reports and filters. Every function re-evaluates against the
# current table contents; nothing is cached or materialized.

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import Float, func, type_coerce
from sqlmodel import Session, select

from salary_mgmt.models import (
    BudgetRow,
    BudgetUtilization,
    DepartmentAverage,
    DepartmentBudget,
    DepartmentRank,
    DepartmentScore,
    Employee,
    HighPerformer,
    RankedEmployee,
)

HIGH_PERFORMER_THRESHOLD = Decimal("4.5")
TOP_FRACTION = Decimal("0.10")


# ── Basic checks ──

def employee_count(session: Session) -> int:
    return session.exec(select(func.count()).select_from(Employee)).one()


def preview(session: Session, limit: int = 10) -> list[Employee]:
    return list(session.exec(select(Employee).order_by(Employee.id).limit(limit)).all())


# ── Filters ──

def employees_by_department(session: Session, department: str) -> list[Employee]:
    statement = (
        select(Employee)
        .where(Employee.department == department)
        .order_by(Employee.id)
    )
    return list(session.exec(statement).all())


def active_high_earners(session: Session, min_salary=8000) -> list[Employee]:
    """Active employees earning strictly more than `min_salary`."""
    statement = (
        select(Employee)
        .where(Employee.salary > Decimal(str(min_salary)), Employee.status == "Active")
        .order_by(Employee.salary.desc(), Employee.id)
    )
    return list(session.exec(statement).all())


def experienced_performers(session: Session, min_experience: int = 5, min_score=4) -> list[Employee]:
    """More than `min_experience` years and a score of at least `min_score`."""
    statement = (
        select(Employee)
        .where(
            Employee.experience_years > min_experience,
            Employee.performance_score >= Decimal(str(min_score)),
        )
        .order_by(Employee.id)
    )
    return list(session.exec(statement).all())


# ── Aggregates & rankings ──

def department_average_salary(session: Session) -> list[DepartmentAverage]:
    avg_salary = func.round(func.avg(Employee.salary), 2).label("avg_salary")
    statement = (
        select(Employee.department, avg_salary)
        .group_by(Employee.department)
        .order_by(Employee.department)
    )
    return [
        DepartmentAverage(department=dept, avg_salary=avg)
        for dept, avg in session.exec(statement).all()
    ]


def top_decile_by_salary(session: Session) -> list[RankedEmployee]:
    """
    Highest paid ceil(10% of N) employees, salary descending.
    Equal salaries at the cut-off are ordered by id so the prefix is stable.
    """
    total = employee_count(session)
    if total == 0:
        return []
    size = math.ceil(total * TOP_FRACTION)

    ordering = (Employee.salary.desc(), Employee.id)
    rank = func.row_number().over(order_by=ordering).label("rank")
    statement = (
        select(rank, Employee.id, Employee.name, Employee.department, Employee.salary)
        .order_by(*ordering)
        .limit(size)
    )
    return [
        RankedEmployee(rank=r, id=emp_id, name=name, department=dept, salary=salary)
        for r, emp_id, name, dept, salary in session.exec(statement).all()
    ]


def department_salary_ranks(session: Session, department: Optional[str] = None) -> list[DepartmentRank]:
    """Competition rank (1, 1, 3, ...) of salary descending within each department."""
    dept_rank = func.rank().over(
        partition_by=Employee.department,
        order_by=Employee.salary.desc(),
    ).label("dept_rank")
    statement = select(
        Employee.department, Employee.id, Employee.name, Employee.salary, dept_rank
    )
    if department is not None:
        statement = statement.where(Employee.department == department)
    statement = statement.order_by(Employee.department, dept_rank, Employee.id)
    return [
        DepartmentRank(department=dept, id=emp_id, name=name, salary=salary, dept_rank=r)
        for dept, emp_id, name, salary, r in session.exec(statement).all()
    ]


def best_performing_department(session: Session) -> Optional[DepartmentScore]:
    """
    Department with the highest mean performance score. Ties go to the
    alphabetically first department name. Unscored employees are ignored.
    """
    avg_score = type_coerce(func.avg(Employee.performance_score), Float).label("avg_score")
    statement = (
        select(Employee.department, avg_score)
        .where(Employee.performance_score.is_not(None))
        .group_by(Employee.department)
        .order_by(avg_score.desc(), Employee.department)
        .limit(1)
    )
    row = session.exec(statement).first()
    if row is None:
        return None
    return DepartmentScore(department=row[0], avg_score=row[1])


def high_performers(session: Session, threshold=HIGH_PERFORMER_THRESHOLD) -> list[HighPerformer]:
    statement = (
        select(Employee)
        .where(Employee.performance_score >= Decimal(str(threshold)))
        .order_by(Employee.performance_score.desc(), Employee.id)
    )
    return [
        HighPerformer(
            id=emp.id,
            name=emp.name,
            department=emp.department,
            salary=emp.salary,
            performance_score=emp.performance_score,
        )
        for emp in session.exec(statement).all()
    ]


# ── Budget ──

def budget_join(session: Session) -> list[BudgetRow]:
    """Employees next to their department budget. Unbudgeted departments drop out."""
    statement = (
        select(Employee.name, Employee.department, Employee.salary, DepartmentBudget.budget)
        .join(DepartmentBudget, Employee.department == DepartmentBudget.department)
        .order_by(Employee.department, Employee.id)
    )
    return [
        BudgetRow(name=name, department=dept, salary=salary, budget=budget)
        for name, dept, salary, budget in session.exec(statement).all()
    ]


def budget_utilization(session: Session) -> list[BudgetUtilization]:
    """Salary spend against allocation, per budgeted department that has staff."""
    headcount = func.count(Employee.id).label("headcount")
    total_salary = func.sum(Employee.salary).label("total_salary")
    statement = (
        select(DepartmentBudget.department, headcount, total_salary, DepartmentBudget.budget)
        .join(Employee, Employee.department == DepartmentBudget.department)
        .group_by(DepartmentBudget.department, DepartmentBudget.budget)
        .order_by(DepartmentBudget.department)
    )

    report = []
    for dept, count, total, budget in session.exec(statement).all():
        total = Decimal(str(total))
        budget = Decimal(str(budget))
        pct = None
        if budget:
            pct = float((total / budget * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
        report.append(BudgetUtilization(
            department=dept,
            headcount=count,
            total_salary=total,
            budget=budget,
            utilization_pct=pct,
        ))
    return report
