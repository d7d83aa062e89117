"""
Shared fixtures: a fresh in-memory database per test, a small sample staff,
and a FastAPI TestClient wired to the same database.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from salary_mgmt.database import get_session, init_db, make_engine
from salary_mgmt.main import app
from salary_mgmt.models import Employee
from salary_mgmt.upload import seed_department_budgets


def make_employee(id, salary, department="Sales", **kwargs) -> Employee:
    values = {
        "name": f"Employee {id}",
        "age": 35,
        "gender": "Female",
        "experience_years": 5,
        "status": "Active",
    }
    values.update(kwargs)
    return Employee(id=id, salary=Decimal(str(salary)), department=department, **values)


# id, name, department, salary, age, experience, score, status
STAFF = [
    (1, "Alice", "Sales",      5000, 25,  1, "4.5", "Active"),
    (2, "Bob",   "Sales",      7000, 30,  3, "3.0", "Active"),
    (3, "Carol", "Sales",      7000, 50,  7, "4.0", "Active"),
    (4, "Dan",   "IT",         9000, 51,  8, "4.8", "Active"),
    (5, "Eve",   "IT",         3000, 45, 10, None,  "Active"),
    (6, "Frank", "HR",         6000, 29,  2, "4.2", "Inactive"),
    (7, "Gina",  "Operations", 8000, 35,  5, "4.6", "Active"),
]


def staff_employees() -> list[Employee]:
    return [
        make_employee(
            id, salary, department,
            name=name,
            age=age,
            experience_years=experience,
            performance_score=Decimal(score) if score is not None else None,
            status=status,
        )
        for id, name, department, salary, age, experience, score, status in STAFF
    ]


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def staff(session):
    session.add_all(staff_employees())
    session.commit()
    seed_department_budgets(session)
    return session


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(engine, client):
    with Session(engine) as session:
        session.add_all(staff_employees())
        session.commit()
        seed_department_budgets(session)
    return client
