# salary_mgmt/api/maintenance_routes.py

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlmodel import Session

from salary_mgmt.api.errors import to_http
from salary_mgmt.database import get_session
from salary_mgmt.derived import calculate_bonuses, recompute_derived_attributes
from salary_mgmt.exceptions import SalaryMgmtError
from salary_mgmt.transforms import (
    enforce_min_experience,
    fill_missing_performance,
    normalize_status,
)

router = APIRouter(prefix="/api/maintenance", tags=["Maintenance"])


class StatusRenameRequest(BaseModel):
    old: str = "Inactive"
    new: str = "Retired"


class FillPerformanceRequest(BaseModel):
    department: str = "IT"
    score: float = Field(default=5, ge=0, le=5)


class MinExperienceRequest(BaseModel):
    minimum: int = Field(default=2, ge=0)


@router.post("/recompute")
def recompute(session: Session = Depends(get_session)):
    try:
        updated = recompute_derived_attributes(session)
    except SalaryMgmtError as e:
        raise to_http(e)
    return {"updated": updated}


@router.post("/bonus")
def bonus(session: Session = Depends(get_session)):
    return {"updated": calculate_bonuses(session)}


@router.post("/normalize-status")
def rename_status(request: StatusRenameRequest, session: Session = Depends(get_session)):
    return {"updated": normalize_status(session, request.old, request.new)}


@router.post("/fill-performance")
def fill_performance(request: FillPerformanceRequest, session: Session = Depends(get_session)):
    return {"updated": fill_missing_performance(session, request.department, request.score)}


@router.post("/min-experience")
def min_experience(request: MinExperienceRequest, session: Session = Depends(get_session)):
    return {"updated": enforce_min_experience(session, request.minimum)}
