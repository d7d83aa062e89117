from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(SQLModel, table=True):
    # Identity
    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    name: str = Field(max_length=100)

    # Demographics
    age: Optional[int] = Field(default=None)
    gender: Optional[str] = Field(default=None, max_length=10)

    # Employment
    department: str = Field(max_length=50, index=True)
    joining_date: Optional[date] = Field(default=None)
    experience_years: Optional[int] = Field(default=None)
    status: Optional[str] = Field(default="Active", max_length=20)
    location: Optional[str] = Field(default=None, max_length=100)
    session: Optional[str] = Field(default=None, max_length=20)

    # Compensation & performance
    salary: Decimal = Field(max_digits=10, decimal_places=2)
    performance_score: Optional[Decimal] = Field(default=None, max_digits=3, decimal_places=2)

    # Derived: only written by salary_mgmt.derived
    bonus: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    normalized_salary: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=4)
    experience_tier: Optional[str] = Field(default=None, max_length=20)
    age_tier: Optional[str] = Field(default=None, max_length=20)


class DepartmentBudget(SQLModel, table=True):
    __tablename__ = "department_budget"

    department: str = Field(primary_key=True, max_length=50)
    budget: Decimal = Field(max_digits=12, decimal_places=2)


class SalaryLog(SQLModel, table=True):
    __tablename__ = "salary_log"

    log_id: Optional[int] = Field(default=None, primary_key=True)
    # plain identity reference, entries outlive employee reloads
    employee_id: int = Field(index=True)
    old_salary: Decimal = Field(max_digits=10, decimal_places=2)
    new_salary: Decimal = Field(max_digits=10, decimal_places=2)
    change_timestamp: datetime = Field(
        default_factory=_utcnow, index=True, sa_type=DateTime(timezone=True)
    )


# ── Request bodies ──

class EmployeeCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    name: str
    department: str
    salary: Decimal = PydanticField(ge=0)
    age: Optional[int] = PydanticField(default=None, ge=0)
    gender: Optional[str] = None
    joining_date: Optional[date] = None
    performance_score: Optional[Decimal] = PydanticField(default=None, ge=0, le=5)
    experience_years: Optional[int] = PydanticField(default=None, ge=0)
    status: Optional[str] = "Active"
    location: Optional[str] = None
    session: Optional[str] = None


class EmployeeUpdate(BaseModel):
    """Base attributes a caller may change. Derived columns are not accepted."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    department: Optional[str] = None
    salary: Optional[Decimal] = PydanticField(default=None, ge=0)
    age: Optional[int] = PydanticField(default=None, ge=0)
    gender: Optional[str] = None
    joining_date: Optional[date] = None
    performance_score: Optional[Decimal] = PydanticField(default=None, ge=0, le=5)
    experience_years: Optional[int] = PydanticField(default=None, ge=0)
    status: Optional[str] = None
    location: Optional[str] = None
    session: Optional[str] = None


# ── Report rows ──

class DepartmentAverage(BaseModel):
    department: str
    avg_salary: float


class RankedEmployee(BaseModel):
    rank: int
    id: int
    name: str
    department: str
    salary: Decimal


class DepartmentRank(BaseModel):
    department: str
    id: int
    name: str
    salary: Decimal
    dept_rank: int


class DepartmentScore(BaseModel):
    department: str
    avg_score: float


class HighPerformer(BaseModel):
    id: int
    name: str
    department: str
    salary: Decimal
    performance_score: Decimal


class BudgetRow(BaseModel):
    name: str
    department: str
    salary: Decimal
    budget: Decimal


class BudgetUtilization(BaseModel):
    department: str
    headcount: int
    total_salary: Decimal
    budget: Decimal
    utilization_pct: Optional[float]
