# salary_mgmt/api/employee_routes.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from salary_mgmt.api.errors import to_http
from salary_mgmt.audit import list_salary_log, update_employee
from salary_mgmt.database import get_session
from salary_mgmt.exceptions import EmployeeNotFoundError, SalaryMgmtError
from salary_mgmt.models import Employee, EmployeeCreate, EmployeeUpdate, SalaryLog
from salary_mgmt.reports import employee_count
from salary_mgmt.upload import create_employee

router = APIRouter(prefix="/api/employees", tags=["Employees"])


@router.get("", response_model=list[Employee])
def list_employees(
    department: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    session: Session = Depends(get_session),
):
    statement = select(Employee)
    if department is not None:
        statement = statement.where(Employee.department == department)
    if status is not None:
        statement = statement.where(Employee.status == status)
    statement = statement.order_by(Employee.id).offset(offset).limit(limit)
    return session.exec(statement).all()


@router.get("/count")
def count_employees(session: Session = Depends(get_session)):
    return {"total_employees": employee_count(session)}


@router.get("/{employee_id}", response_model=Employee)
def get_employee(employee_id: int, session: Session = Depends(get_session)):
    emp = session.get(Employee, employee_id)
    if emp is None:
        raise to_http(EmployeeNotFoundError(employee_id))
    return emp


@router.post("", response_model=Employee, status_code=201)
def create_employee_endpoint(payload: EmployeeCreate, session: Session = Depends(get_session)):
    try:
        return create_employee(session, payload)
    except SalaryMgmtError as e:
        raise to_http(e)


@router.patch("/{employee_id}", response_model=Employee)
def update_employee_endpoint(
    employee_id: int,
    payload: EmployeeUpdate,
    session: Session = Depends(get_session),
):
    try:
        return update_employee(session, employee_id, payload)
    except SalaryMgmtError as e:
        raise to_http(e)


@router.get("/{employee_id}/salary-log", response_model=list[SalaryLog])
def employee_salary_log(employee_id: int, session: Session = Depends(get_session)):
    if session.get(Employee, employee_id) is None:
        raise to_http(EmployeeNotFoundError(employee_id))
    return list_salary_log(session, employee_id=employee_id)
