# salary_mgmt/api/report_routes.py

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from salary_mgmt import reports
from salary_mgmt.audit import list_salary_log
from salary_mgmt.database import get_session
from salary_mgmt.models import (
    BudgetRow,
    BudgetUtilization,
    DepartmentAverage,
    DepartmentRank,
    DepartmentScore,
    Employee,
    HighPerformer,
    RankedEmployee,
    SalaryLog,
)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/department-averages", response_model=list[DepartmentAverage])
def department_averages(session: Session = Depends(get_session)):
    return reports.department_average_salary(session)


@router.get("/top-decile", response_model=list[RankedEmployee])
def top_decile(session: Session = Depends(get_session)):
    return reports.top_decile_by_salary(session)


@router.get("/department-ranks", response_model=list[DepartmentRank])
def department_ranks(department: Optional[str] = None, session: Session = Depends(get_session)):
    return reports.department_salary_ranks(session, department)


@router.get("/best-department", response_model=DepartmentScore)
def best_department(session: Session = Depends(get_session)):
    best = reports.best_performing_department(session)
    if best is None:
        raise HTTPException(status_code=404, detail="No scored employees yet.")
    return best


@router.get("/high-performers", response_model=list[HighPerformer])
def high_performers(session: Session = Depends(get_session)):
    return reports.high_performers(session)


@router.get("/budget", response_model=list[BudgetRow])
def budget(session: Session = Depends(get_session)):
    return reports.budget_join(session)


@router.get("/budget-utilization", response_model=list[BudgetUtilization])
def budget_utilization(session: Session = Depends(get_session)):
    return reports.budget_utilization(session)


@router.get("/active-high-earners", response_model=list[Employee])
def active_high_earners(
    min_salary: Decimal = Query(default=Decimal("8000"), ge=0),
    session: Session = Depends(get_session),
):
    return reports.active_high_earners(session, min_salary)


@router.get("/experienced-performers", response_model=list[Employee])
def experienced_performers(
    min_experience: int = Query(default=5, ge=0),
    min_score: Decimal = Query(default=Decimal("4"), ge=0, le=5),
    session: Session = Depends(get_session),
):
    return reports.experienced_performers(session, min_experience, min_score)


@router.get("/salary-log", response_model=list[SalaryLog])
def salary_log(
    limit: Optional[int] = Query(default=None, ge=1),
    session: Session = Depends(get_session),
):
    return list_salary_log(session, limit=limit)
