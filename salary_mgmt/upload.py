# salary_mgmt/upload.py

import logging
from decimal import Decimal
from typing import Optional, Union

import pandas as pd
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, delete, select

from salary_mgmt.derived import quantize_money
from salary_mgmt.exceptions import ConstraintViolationError, DuplicateEmployeeError
from salary_mgmt.models import DepartmentBudget, Employee, EmployeeCreate
from salary_mgmt.schema import build_schema_report, missing_required_columns, normalize_dataframe

logger = logging.getLogger(__name__)

DEFAULT_BUDGETS = {
    "Sales":     Decimal("1500000"),
    "IT":        Decimal("1200000"),
    "HR":        Decimal("800000"),
    "Finance":   Decimal("1000000"),
    "Marketing": Decimal("950000"),
}


def clean_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    logger.info("Cleaning %d rows", len(df))
    df = df.copy()

    # --- id ---
    df['id'] = pd.to_numeric(df['id'], errors='coerce').round(0)
    df = df.dropna(subset=['id'])  # drop rows with no id
    df['id'] = df['id'].astype(int)

    # Remove duplicates after cleaning id
    before = len(df)
    df = df.drop_duplicates(subset=['id'])
    if len(df) < before:
        logger.warning("Removed %d duplicate employee ids", before - len(df))

    # --- Required text ---
    for col in ['name', 'department']:
        df[col] = df[col].astype('string').str.strip().replace('', pd.NA)

    # --- salary ---
    df['salary'] = pd.to_numeric(df['salary'], errors='coerce')
    df['salary'] = df['salary'].clip(lower=0).round(2)

    before = len(df)
    df = df.dropna(subset=['name', 'department', 'salary'])
    if len(df) < before:
        logger.warning("Dropped %d rows missing name, department or salary", before - len(df))

    # --- Integers that may be unknown ---
    for col in ['age', 'experience_years']:
        df[col] = pd.to_numeric(df[col], errors='coerce').round(0).astype('Int64')
    df['age'] = df['age'].clip(lower=0)
    df['experience_years'] = df['experience_years'].clip(lower=0)

    # --- performance_score (0-5, may stay missing) ---
    df['performance_score'] = pd.to_numeric(df['performance_score'], errors='coerce')
    out_of_range = int(((df['performance_score'] < 0) | (df['performance_score'] > 5)).sum())
    df['performance_score'] = df['performance_score'].clip(lower=0, upper=5).round(2)

    # --- joining_date ---
    df['joining_date'] = pd.to_datetime(df['joining_date'], errors='coerce').dt.date

    # --- Normalize category strings ---
    df['gender'] = df['gender'].fillna('Unknown').astype(str).str.strip().str.capitalize()
    df['status'] = df['status'].fillna('Active').astype(str).str.strip().str.title()
    for col in ['location', 'session']:
        df[col] = df[col].astype('string').str.strip()

    # clipped above, validate_data_quality reports it
    df.attrs['scores_out_of_range'] = out_of_range

    logger.info("Cleaning done. %d rows ready.", len(df))
    return df


def validate_data_quality(df: pd.DataFrame, budgets: Optional[dict] = None) -> dict:
    warnings = []
    errors   = []

    total = len(df)
    if total == 0:
        errors.append("No valid employee rows after cleaning.")
        return {"warnings": warnings, "errors": errors, "passed": False}

    # Minimum employee count
    if total < 10:
        warnings.append(
            f"Small dataset: only {total} employees. "
            f"Top-decile and ranking reports will be coarse."
        )

    # Normalization needs a salary spread
    if df['salary'].nunique() == 1:
        warnings.append(
            "Every employee has the same salary. "
            "Salary normalization will fail until salaries differ."
        )

    # Scores outside 0-5 (clipped during cleaning)
    out_of_range = df.attrs.get('scores_out_of_range', 0)
    if out_of_range > 0:
        warnings.append(
            f"{out_of_range} performance scores were outside 0-5. "
            f"These were clipped automatically."
        )

    # Missing performance scores
    missing_scores = int(df['performance_score'].isna().sum())
    if missing_scores > 0:
        warnings.append(
            f"{missing_scores} employees have no performance score."
        )

    # Departments with no budget row are left out of budget reports
    budgets = DEFAULT_BUDGETS if budgets is None else budgets
    unbudgeted = sorted(set(df['department']) - set(budgets))
    if unbudgeted:
        warnings.append(
            f"No budget for department(s) {unbudgeted}; "
            f"they are excluded from budget utilization."
        )

    return {"warnings": warnings, "errors": errors, "passed": len(errors) == 0}


def _value(row, col):
    value = row[col]
    if value is None or value is pd.NA or (not isinstance(value, str) and pd.isna(value)):
        return None
    return value


def _employee_from_row(row) -> Employee:
    age        = _value(row, 'age')
    experience = _value(row, 'experience_years')
    score      = _value(row, 'performance_score')
    return Employee(
        id                = int(row['id']),
        name              = str(row['name']),
        department        = str(row['department']),
        salary            = quantize_money(row['salary']),
        age               = int(age) if age is not None else None,
        gender            = _value(row, 'gender'),
        joining_date      = _value(row, 'joining_date'),
        performance_score = Decimal(str(score)) if score is not None else None,
        experience_years  = int(experience) if experience is not None else None,
        status            = _value(row, 'status'),
        location          = _value(row, 'location'),
        session           = _value(row, 'session'),
    )


def ingest_from_dataframe(session: Session, df: pd.DataFrame, replace: bool = True) -> dict:
    """
    Load cleaned rows as employees in one transaction.
    With replace=True the employee table is emptied first. The salary log
    is append-only and is kept.
    """
    employees = []
    skipped   = 0

    for _, row in df.iterrows():
        try:
            employees.append(_employee_from_row(row))
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            logger.warning("Skipping bad row: %s", e)
            skipped += 1

    try:
        if replace:
            session.exec(delete(Employee))
            # drop stale identities so reloaded ids don't clash
            session.expunge_all()
        else:
            ids = [emp.id for emp in employees]
            clashing = session.exec(select(Employee.id).where(Employee.id.in_(ids))).all()
            if clashing:
                raise ConstraintViolationError(f"Employee ids already exist: {sorted(clashing)}")
        session.add_all(employees)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConstraintViolationError(f"Ingestion violates a constraint: {e.orig}") from e
    except Exception:
        session.rollback()
        raise

    logger.info("%d employees ingested. Skipped: %d", len(employees), skipped)
    return {"ingested": len(employees), "skipped": skipped}


def create_employee(session: Session, data: Union[EmployeeCreate, dict]) -> Employee:
    if isinstance(data, dict):
        data = EmployeeCreate(**data)

    values = data.model_dump()
    values["salary"] = quantize_money(values["salary"])

    try:
        if session.get(Employee, data.id) is not None:
            raise DuplicateEmployeeError(data.id)
        emp = Employee(**values)
        session.add(emp)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConstraintViolationError(f"Employee {data.id} violates a constraint: {e.orig}") from e
    except Exception:
        session.rollback()
        raise

    session.refresh(emp)
    logger.info("Created employee %d", emp.id)
    return emp


def seed_department_budgets(session: Session, budgets: Optional[dict] = None) -> int:
    """Insert or overwrite one budget row per department."""
    budgets = DEFAULT_BUDGETS if budgets is None else budgets
    try:
        for department, amount in budgets.items():
            row = session.get(DepartmentBudget, department)
            if row is None:
                row = DepartmentBudget(department=department, budget=quantize_money(amount))
            else:
                row.budget = quantize_money(amount)
            session.add(row)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Seeded %d department budgets", len(budgets))
    return len(budgets)


def list_department_budgets(session: Session) -> list[DepartmentBudget]:
    return list(session.exec(select(DepartmentBudget).order_by(DepartmentBudget.department)).all())


def load_csv(session: Session, path: str, replace: bool = True) -> dict:
    """Read, normalize, clean and ingest a CSV file. Returns counts + quality report."""
    df = pd.read_csv(path)
    logger.info("Found %d rows in %s", len(df), path)

    df, missing_optional, found_optional = normalize_dataframe(df)
    missing_required = missing_required_columns(df)
    if missing_required:
        raise ConstraintViolationError(f"Missing required columns: {missing_required}")

    df = clean_dataframe(df)
    quality = validate_data_quality(df)
    if not quality["passed"]:
        raise ConstraintViolationError("; ".join(quality["errors"]))
    result = ingest_from_dataframe(session, df, replace=replace)
    return {
        **result,
        "schema": build_schema_report(missing_optional, found_optional),
        "warnings": quality["warnings"],
    }
