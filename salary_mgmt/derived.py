# salary_mgmt/derived.py
#
# Derived attribute maintenance:
#   - bonus              = salary * BONUS_RATE
#   - normalized_salary  = (salary - min) / (max - min) over the whole population
#   - experience_tier    = Junior / Mid / Senior
#   - age_tier           = Young / Middle-aged / Senior
#
# All four are pure functions of base attributes. The recomputation pass is
# idempotent and reads the normalization basis once per invocation.

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from sqlmodel import Session, select

from salary_mgmt.exceptions import NormalizationError
from salary_mgmt.models import Employee

logger = logging.getLogger(__name__)

BONUS_RATE = Decimal("0.10")

MONEY = Decimal("0.01")
RATIO = Decimal("0.0001")

# (upper bound of Junior/Young exclusive, upper bound of Mid/Middle-aged inclusive)
EXPERIENCE_THRESHOLDS = (3, 7)
AGE_THRESHOLDS = (30, 50)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() avoids binary float artefacts (0.1 → 0.1000000000000000055...)
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(MONEY, rounding=ROUND_HALF_UP)


def calculate_bonus(salary) -> Decimal:
    return quantize_money(to_decimal(salary) * BONUS_RATE)


def normalize_salary(salary, min_salary, max_salary) -> Decimal:
    """Rescale salary to [0, 1] against the population min/max.

    Raises NormalizationError when max == min, the ratio is undefined.
    """
    lo, hi = to_decimal(min_salary), to_decimal(max_salary)
    spread = hi - lo
    if spread == 0:
        raise NormalizationError(
            f"Cannot normalize salaries: every salary equals {lo}"
        )
    return ((to_decimal(salary) - lo) / spread).quantize(RATIO, rounding=ROUND_HALF_UP)


def experience_tier(years: Optional[int]) -> Optional[str]:
    if years is None:
        return None
    junior_below, mid_upto = EXPERIENCE_THRESHOLDS
    if years < junior_below:
        return "Junior"
    if years <= mid_upto:
        return "Mid"
    return "Senior"


def age_tier(age: Optional[int]) -> Optional[str]:
    if age is None:
        return None
    young_below, middle_upto = AGE_THRESHOLDS
    if age < young_below:
        return "Young"
    if age <= middle_upto:
        return "Middle-aged"
    return "Senior"


@dataclass(frozen=True)
class DerivedAttributes:
    bonus: Decimal
    normalized_salary: Decimal
    experience_tier: Optional[str]
    age_tier: Optional[str]


def compute_derived(employees: Iterable[Employee]) -> dict[int, DerivedAttributes]:
    """Pure batch computation keyed by employee id. Nothing is written."""
    employees = list(employees)
    if not employees:
        return {}

    salaries = [to_decimal(emp.salary) for emp in employees]
    lo, hi = min(salaries), max(salaries)   # one normalization basis for the batch

    return {
        emp.id: DerivedAttributes(
            bonus=calculate_bonus(salary),
            normalized_salary=normalize_salary(salary, lo, hi),
            experience_tier=experience_tier(emp.experience_years),
            age_tier=age_tier(emp.age),
        )
        for emp, salary in zip(employees, salaries)
    }


def recompute_derived_attributes(session: Session) -> int:
    """
    Recompute bonus, normalized salary and both tiers for every employee.
    Everything is computed before anything is written, so a NormalizationError
    leaves the table untouched. Returns the number of employees updated.
    """
    try:
        employees = session.exec(select(Employee)).all()
        derived = compute_derived(employees)
        for emp in employees:
            attrs = derived[emp.id]
            emp.bonus = attrs.bonus
            emp.normalized_salary = attrs.normalized_salary
            emp.experience_tier = attrs.experience_tier
            emp.age_tier = attrs.age_tier
            session.add(emp)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Recomputed derived attributes for %d employees", len(employees))
    return len(employees)


def calculate_bonuses(session: Session) -> int:
    """Bonus-only pass: bonus = salary * 10% for every employee."""
    try:
        employees = session.exec(select(Employee)).all()
        for emp in employees:
            emp.bonus = calculate_bonus(emp.salary)
            session.add(emp)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("Calculated bonus for %d employees", len(employees))
    return len(employees)
