# salary_mgmt/schema.py
#
# Handles all incoming dataset normalization:
#   - Column name aliases (the original dump uses "Performance Score", "ID", ...)
#   - Optional column defaults (fill missing columns with sensible values)
#   - Schema report (tell the caller what was found vs missing)

import logging

import pandas as pd

logger = logging.getLogger(__name__)

# ── Hard required, upload fails without these ──
REQUIRED_COLUMNS = [
    "id",
    "name",
    "department",
    "salary",
]

# ── Optional, filled with defaults if missing ──
# None means "unknown", stored as NULL.
OPTIONAL_COLUMNS = {
    "age":               None,
    "gender":            "Unknown",
    "joining_date":      None,
    "performance_score": None,
    "experience_years":  None,
    "status":            "Active",
    "location":          None,
    "session":           None,
}

# ── Column name aliases ──
# Maps any known variation → our canonical schema name.
COLUMN_ALIASES = {
    # id
    "ID":                 "id",
    "Employee ID":        "id",
    "EmployeeID":         "id",
    "EmpID":              "id",
    "employee_id":        "id",

    # name
    "Name":               "name",
    "Employee Name":      "name",
    "Full Name":          "name",

    # demographics
    "Age":                "age",
    "Gender":             "gender",
    "Sex":                "gender",

    # employment
    "Department":         "department",
    "Dept":               "department",
    "Joining_Date":       "joining_date",
    "Joining Date":       "joining_date",
    "Date of Joining":    "joining_date",
    "Hire Date":          "joining_date",
    "Experience":         "experience_years",
    "Years of Experience":"experience_years",
    "Experience (Years)": "experience_years",
    "Status":             "status",
    "Employment Status":  "status",
    "Location":           "location",
    "Office":             "location",
    "Session":            "session",
    "Cohort":             "session",

    # compensation & performance
    "Salary":             "salary",
    "Monthly Salary":     "salary",
    "Performance Score":  "performance_score",
    "Performance_Score":  "performance_score",
}

# Derived columns are recomputed after load, never trusted from a file.
DERIVED_COLUMNS = [
    "bonus", "normalized_salary", "experience_tier", "age_tier",
    "Norm_Salary", "Experience_Level", "Age_Group",
]


def _squash(name: str) -> str:
    return str(name).lower().replace(" ", "").replace("_", "").replace("-", "")


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Step 1: Rename columns to match our schema.
    Uses exact alias match first, then fuzzy lowercase match.
    """
    df = df.rename(columns=COLUMN_ALIASES)

    our_cols = set(REQUIRED_COLUMNS) | set(OPTIONAL_COLUMNS.keys())
    df_col_normalized = {_squash(c): c for c in df.columns}
    rename = {}
    for target in our_cols:
        if target in df.columns:
            continue
        key = _squash(target)
        if key in df_col_normalized:
            rename[df_col_normalized[key]] = target

    return df.rename(columns=rename)


def drop_derived_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Step 2: Discard any bonus/normalization/tier columns carried by the file."""
    present = [c for c in df.columns if _squash(c) in {_squash(d) for d in DERIVED_COLUMNS}]
    if present:
        logger.info("Ignoring derived columns from upload: %s", present)
        df = df.drop(columns=present)
    return df


def apply_optional_defaults(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str], list[str]]:
    """
    Step 3: Add missing optional columns with their defaults.
    Returns (df, missing_optional, found_optional).
    """
    missing, found = [], []
    for col, default in OPTIONAL_COLUMNS.items():
        if col in df.columns:
            found.append(col)
        else:
            df[col] = default
            missing.append(col)
    return df, missing, found


def build_schema_report(missing_optional: list[str], found_optional: list[str]) -> dict:
    """Step 4: Report which optional columns were found vs filled with defaults."""
    return {
        "optional_features_found":   found_optional,
        "optional_features_missing": missing_optional,
        "note": (
            "All optional columns present."
            if not missing_optional else
            f"{len(missing_optional)} optional column(s) missing, filled with defaults."
        ),
    }


def normalize_dataframe(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str], list[str]]:
    """
    Full normalization pipeline: call this before cleaning.
    Returns (normalized_df, missing_optional, found_optional).
    """
    df = normalize_columns(df)
    df = drop_derived_columns(df)
    df, missing_optional, found_optional = apply_optional_defaults(df)
    return df, missing_optional, found_optional


def missing_required_columns(df: pd.DataFrame) -> list[str]:
    return [col for col in REQUIRED_COLUMNS if col not in df.columns]
