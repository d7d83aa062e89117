from decimal import Decimal

import pytest
from sqlmodel import select

from salary_mgmt.derived import (
    DerivedAttributes,
    age_tier,
    calculate_bonus,
    calculate_bonuses,
    compute_derived,
    experience_tier,
    normalize_salary,
    recompute_derived_attributes,
)
from salary_mgmt.exceptions import NormalizationError
from salary_mgmt.models import Employee
from tests.conftest import make_employee


def _snapshot(session):
    return [
        (e.id, e.bonus, e.normalized_salary, e.experience_tier, e.age_tier)
        for e in session.exec(select(Employee).order_by(Employee.id)).all()
    ]


class TestPureHelpers:
    def test_bonus_is_ten_percent(self):
        assert calculate_bonus(Decimal("5000")) == Decimal("500.00")
        assert calculate_bonus(7250) == Decimal("725.00")

    def test_bonus_rounds_half_up_to_cents(self):
        assert calculate_bonus("1234.55") == Decimal("123.46")

    def test_normalize_salary(self):
        assert normalize_salary(5000, 3000, 9000) == Decimal("0.3333")
        assert normalize_salary(3000, 3000, 9000) == Decimal("0")
        assert normalize_salary(9000, 3000, 9000) == Decimal("1")

    def test_normalize_salary_rejects_flat_population(self):
        with pytest.raises(NormalizationError):
            normalize_salary(5000, 5000, 5000)

    @pytest.mark.parametrize("years, tier", [
        (0, "Junior"), (2, "Junior"), (3, "Mid"), (5, "Mid"),
        (7, "Mid"), (8, "Senior"), (30, "Senior"), (None, None),
    ])
    def test_experience_tier_boundaries(self, years, tier):
        assert experience_tier(years) == tier

    @pytest.mark.parametrize("age, tier", [
        (18, "Young"), (29, "Young"), (30, "Middle-aged"), (42, "Middle-aged"),
        (50, "Middle-aged"), (51, "Senior"), (None, None),
    ])
    def test_age_tier_boundaries(self, age, tier):
        assert age_tier(age) == tier


class TestComputeDerived:
    def test_pure_batch_over_unsaved_employees(self):
        employees = [
            make_employee(1, 1000, experience_years=1, age=22),
            make_employee(2, 3000, experience_years=9, age=60),
        ]
        result = compute_derived(employees)
        assert result == {
            1: DerivedAttributes(Decimal("100.00"), Decimal("0"), "Junior", "Young"),
            2: DerivedAttributes(Decimal("300.00"), Decimal("1"), "Senior", "Senior"),
        }
        # inputs untouched
        assert employees[0].bonus is None

    def test_empty_population(self):
        assert compute_derived([]) == {}

    def test_flat_population_fails(self):
        with pytest.raises(NormalizationError):
            compute_derived([make_employee(1, 4000), make_employee(2, 4000)])


class TestRecompute:
    def test_writes_every_derived_attribute(self, staff):
        assert recompute_derived_attributes(staff) == 7

        for emp in staff.exec(select(Employee)).all():
            assert emp.bonus == (emp.salary * Decimal("0.10")).quantize(Decimal("0.01"))
            assert Decimal("0") <= emp.normalized_salary <= Decimal("1")
            assert emp.experience_tier == experience_tier(emp.experience_years)
            assert emp.age_tier == age_tier(emp.age)

        lowest = staff.get(Employee, 5)
        highest = staff.get(Employee, 4)
        assert lowest.normalized_salary == Decimal("0")
        assert highest.normalized_salary == Decimal("1")
        assert staff.get(Employee, 1).normalized_salary == Decimal("0.3333")

    def test_is_idempotent(self, staff):
        recompute_derived_attributes(staff)
        first = _snapshot(staff)
        recompute_derived_attributes(staff)
        assert _snapshot(staff) == first

    def test_flat_population_writes_nothing(self, session):
        session.add_all([make_employee(1, 4000), make_employee(2, 4000)])
        session.commit()

        with pytest.raises(NormalizationError):
            recompute_derived_attributes(session)

        for emp in session.exec(select(Employee)).all():
            assert emp.bonus is None
            assert emp.normalized_salary is None
            assert emp.experience_tier is None

    def test_no_employees(self, session):
        assert recompute_derived_attributes(session) == 0

    def test_reflects_salary_change(self, staff):
        recompute_derived_attributes(staff)
        emp = staff.get(Employee, 1)
        emp.salary = Decimal("9000")
        staff.add(emp)
        staff.commit()

        recompute_derived_attributes(staff)
        assert staff.get(Employee, 1).bonus == Decimal("900.00")
        assert staff.get(Employee, 1).normalized_salary == Decimal("1")


class TestCalculateBonuses:
    def test_only_bonus_is_written(self, staff):
        assert calculate_bonuses(staff) == 7
        emp = staff.get(Employee, 4)
        assert emp.bonus == Decimal("900.00")
        assert emp.normalized_salary is None
        assert emp.experience_tier is None

    def test_works_on_flat_population(self, session):
        session.add_all([make_employee(1, 4000), make_employee(2, 4000)])
        session.commit()
        calculate_bonuses(session)
        assert session.get(Employee, 2).bonus == Decimal("400.00")
