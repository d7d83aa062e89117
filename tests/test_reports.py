from decimal import Decimal

import pytest

from salary_mgmt import reports
from salary_mgmt.audit import update_employee
from salary_mgmt.upload import seed_department_budgets
from tests.conftest import make_employee


def _population(session, salaries, department="Sales"):
    session.add_all([make_employee(i, s, department) for i, s in enumerate(salaries, start=1)])
    session.commit()


class TestBasics:
    def test_count_and_preview(self, staff):
        assert reports.employee_count(staff) == 7
        assert [e.id for e in reports.preview(staff, limit=3)] == [1, 2, 3]

    def test_empty_table(self, session):
        assert reports.employee_count(session) == 0
        assert reports.department_average_salary(session) == []
        assert reports.top_decile_by_salary(session) == []
        assert reports.department_salary_ranks(session) == []
        assert reports.best_performing_department(session) is None
        assert reports.high_performers(session) == []
        assert reports.budget_join(session) == []
        assert reports.budget_utilization(session) == []


class TestFilters:
    def test_by_department(self, staff):
        assert [e.id for e in reports.employees_by_department(staff, "IT")] == [4, 5]
        assert reports.employees_by_department(staff, "Legal") == []

    def test_active_high_earners(self, staff):
        earners = reports.active_high_earners(staff, min_salary=6500)
        assert [e.id for e in earners] == [4, 7, 2, 3]

    def test_active_high_earners_is_strict(self, staff):
        assert [e.id for e in reports.active_high_earners(staff, min_salary=8000)] == [4]

    def test_experienced_performers(self, staff):
        found = reports.experienced_performers(staff, min_experience=5, min_score=4)
        assert [e.id for e in found] == [3, 4]


class TestDepartmentAverage:
    def test_rounded_mean_per_department(self, staff):
        result = {r.department: r.avg_salary for r in reports.department_average_salary(staff)}
        assert result == {
            "HR": pytest.approx(6000.00),
            "IT": pytest.approx(6000.00),
            "Operations": pytest.approx(8000.00),
            "Sales": pytest.approx(6333.33),
        }

    def test_sorted_by_department(self, staff):
        names = [r.department for r in reports.department_average_salary(staff)]
        assert names == sorted(names)


class TestTopDecile:
    def test_hundred_employees_gives_ten(self, session):
        _population(session, [1000 + i * 10 for i in range(100)])
        top = reports.top_decile_by_salary(session)

        assert len(top) == 10
        salaries = [r.salary for r in top]
        assert salaries == sorted(salaries, reverse=True)
        assert salaries[0] == Decimal("1990.00")
        assert [r.rank for r in top] == list(range(1, 11))

    def test_size_is_rounded_up(self, session):
        _population(session, [1000 + i for i in range(11)])
        assert len(reports.top_decile_by_salary(session)) == 2

    def test_small_population_keeps_one(self, staff):
        [top] = reports.top_decile_by_salary(staff)
        assert (top.id, top.name, top.salary) == (4, "Dan", Decimal("9000.00"))

    def test_ties_at_cut_off_are_stable(self, session):
        _population(session, [5000] * 20)
        first = [r.id for r in reports.top_decile_by_salary(session)]
        assert first == [1, 2]
        assert [r.id for r in reports.top_decile_by_salary(session)] == first


class TestDepartmentRanks:
    def test_competition_ranking(self, staff):
        sales = [(r.name, r.dept_rank) for r in reports.department_salary_ranks(staff, "Sales")]
        assert sales == [("Bob", 1), ("Carol", 1), ("Alice", 3)]

    def test_partitioned_by_department(self, staff):
        ranks = {(r.department, r.id): r.dept_rank for r in reports.department_salary_ranks(staff)}
        assert ranks[("IT", 4)] == 1
        assert ranks[("IT", 5)] == 2
        assert ranks[("HR", 6)] == 1
        assert ranks[("Operations", 7)] == 1
        assert len(ranks) == 7


class TestBestDepartment:
    def test_highest_mean_score(self, staff):
        best = reports.best_performing_department(staff)
        # Eve has no score and is ignored, leaving IT at 4.8
        assert best.department == "IT"
        assert best.avg_score == pytest.approx(4.8)

    def test_tie_goes_to_first_name(self, session):
        session.add_all([
            make_employee(1, 5000, "Beta", performance_score=Decimal("4.0")),
            make_employee(2, 6000, "Beta", performance_score=Decimal("5.0")),
            make_employee(3, 7000, "Alpha", performance_score=Decimal("4.5")),
        ])
        session.commit()
        assert reports.best_performing_department(session).department == "Alpha"

    def test_no_scores(self, session):
        _population(session, [1000, 2000])
        assert reports.best_performing_department(session) is None


class TestHighPerformers:
    def test_threshold_is_inclusive(self, staff):
        assert [p.name for p in reports.high_performers(staff)] == ["Dan", "Gina", "Alice"]
        assert all(p.performance_score >= Decimal("4.5") for p in reports.high_performers(staff))

    def test_follows_score_changes(self, staff):
        update_employee(staff, 2, {"performance_score": Decimal("4.9")})
        assert "Bob" in [p.name for p in reports.high_performers(staff)]

        update_employee(staff, 4, {"performance_score": Decimal("4.4")})
        assert "Dan" not in [p.name for p in reports.high_performers(staff)]

    def test_none_qualify(self, session):
        session.add(make_employee(1, 5000, performance_score=Decimal("3.0")))
        session.commit()
        assert reports.high_performers(session) == []


class TestBudget:
    def test_join_excludes_unbudgeted_departments(self, staff):
        rows = reports.budget_join(staff)
        assert len(rows) == 6
        assert "Operations" not in {r.department for r in rows}
        sales = [r for r in rows if r.department == "Sales"]
        assert all(r.budget == Decimal("1500000.00") for r in sales)

    def test_utilization(self, staff):
        result = {r.department: r for r in reports.budget_utilization(staff)}
        assert set(result) == {"HR", "IT", "Sales"}

        sales = result["Sales"]
        assert sales.headcount == 3
        assert sales.total_salary == Decimal("19000.00")
        assert sales.budget == Decimal("1500000.00")
        assert sales.utilization_pct == pytest.approx(1.27)

        assert result["IT"].utilization_pct == pytest.approx(1.0)
        assert result["HR"].utilization_pct == pytest.approx(0.75)

    def test_zero_budget(self, session):
        _population(session, [1000], department="Legal")
        seed_department_budgets(session, {"Legal": 0})
        [row] = reports.budget_utilization(session)
        assert row.utilization_pct is None
