# salary_mgmt/api/upload_routes.py

import io
from decimal import Decimal
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel
from sqlmodel import Session

from salary_mgmt.api.errors import to_http
from salary_mgmt.database import get_session
from salary_mgmt.exceptions import SalaryMgmtError
from salary_mgmt.schema import build_schema_report, missing_required_columns, normalize_dataframe
from salary_mgmt.upload import (
    clean_dataframe,
    ingest_from_dataframe,
    list_department_budgets,
    seed_department_budgets,
    validate_data_quality,
)

router = APIRouter(prefix="/api/upload", tags=["Upload"])


class BudgetRequest(BaseModel):
    # None → the standard five-department allocation
    budgets: Optional[dict[str, Decimal]] = None


@router.post("/dataset")
async def upload_dataset(
    file: UploadFile = File(...),
    replace: bool = True,
    session: Session = Depends(get_session),
):
    # 1. Validate file provided and type
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided. Please select a CSV file to upload.")
    if not file.filename.endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are accepted.")

    # 2. Read CSV
    contents = await file.read()
    try:
        df = pd.read_csv(io.BytesIO(contents))
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not read CSV: {str(e)}")

    # 3. Normalize: column names, derived columns, defaults
    df, missing_optional, found_optional = normalize_dataframe(df)

    # 4. Validate required columns (after normalization)
    missing_required = missing_required_columns(df)
    if missing_required:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required columns: {missing_required}."
        )

    # 5. Clean + validate data quality
    df = clean_dataframe(df)
    quality = validate_data_quality(df)
    if not quality["passed"]:
        raise HTTPException(status_code=400, detail="; ".join(quality["errors"]))

    # 6. Ingest
    try:
        result = ingest_from_dataframe(session, df, replace=replace)
    except SalaryMgmtError as e:
        raise to_http(e)

    return {
        "status":   "success",
        "rows":     result["ingested"],
        "skipped":  result["skipped"],
        "schema":   build_schema_report(missing_optional, found_optional),
        "warnings": quality["warnings"] or None,
    }


@router.post("/budgets")
def upload_budgets(request: BudgetRequest, session: Session = Depends(get_session)):
    seeded = seed_department_budgets(session, request.budgets)
    return {
        "status": "success",
        "seeded": seeded,
        "budgets": {b.department: b.budget for b in list_department_budgets(session)},
    }
