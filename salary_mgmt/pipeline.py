# salary_mgmt/pipeline.py
# Load, correct, derive and report in one step.
# Usage: python -m salary_mgmt.pipeline [path/to/employees.csv]

import sys

from sqlmodel import Session

from salary_mgmt import reports
from salary_mgmt.audit import list_salary_log
from salary_mgmt.config import settings
from salary_mgmt.database import engine, init_db
from salary_mgmt.derived import calculate_bonuses, recompute_derived_attributes
from salary_mgmt.transforms import enforce_min_experience, fill_missing_performance, normalize_status
from salary_mgmt.upload import load_csv, seed_department_budgets


def run_pipeline(session: Session, data_file: str) -> dict:
    print("=" * 50)
    print("Salary Management Pipeline")
    print("=" * 50)

    print(f"\n[1/5] Loading {data_file}...")
    loaded = load_csv(session, data_file)
    print(f"   ingested: {loaded['ingested']}  skipped: {loaded['skipped']}")
    for warning in loaded["warnings"]:
        print(f"   warning: {warning}")

    print("\n[2/5] Seeding department budgets...")
    seed_department_budgets(session)

    print("\n[3/5] Applying data corrections...")
    print(f"   Inactive → Retired:        {normalize_status(session)}")
    print(f"   IT scores filled:          {fill_missing_performance(session)}")
    print(f"   experience raised to 2:    {enforce_min_experience(session)}")

    print("\n[4/5] Recomputing derived attributes...")
    recompute_derived_attributes(session)
    calculate_bonuses(session)

    print("\n[5/5] Reports")
    summary = {
        "total_employees":    reports.employee_count(session),
        "department_average": reports.department_average_salary(session),
        "top_decile":         reports.top_decile_by_salary(session),
        "best_department":    reports.best_performing_department(session),
        "high_performers":    reports.high_performers(session),
        "budget_utilization": reports.budget_utilization(session),
        "salary_log":         list_salary_log(session, limit=10),
    }

    print(f"   total employees: {summary['total_employees']}")
    for row in summary["department_average"]:
        print(f"   {row.department:<12} avg salary {row.avg_salary:>12,.2f}")
    if summary["best_department"] is not None:
        best = summary["best_department"]
        print(f"   best department: {best.department} ({best.avg_score:.2f})")
    print(f"   top decile: {len(summary['top_decile'])} employees")
    print(f"   high performers: {len(summary['high_performers'])}")
    for row in summary["budget_utilization"]:
        print(f"   {row.department:<12} {row.total_salary:>12} / {row.budget:>12} ({row.utilization_pct}%)")

    print("\n" + "=" * 50)
    print("Pipeline complete.")
    print("=" * 50)
    return summary


if __name__ == "__main__":
    init_db()
    with Session(engine) as session:
        run_pipeline(session, sys.argv[1] if len(sys.argv) > 1 else settings.DATA_FILE)
