# salary_mgmt/api/errors.py

from fastapi import HTTPException

from salary_mgmt.exceptions import (
    AuditWriteError,
    ConstraintViolationError,
    EmployeeNotFoundError,
    NormalizationError,
    SalaryMgmtError,
)

STATUS_CODES = [
    (EmployeeNotFoundError, 404),
    (ConstraintViolationError, 409),
    (NormalizationError, 400),
    (AuditWriteError, 500),
]


def to_http(error: SalaryMgmtError) -> HTTPException:
    for kind, status_code in STATUS_CODES:
        if isinstance(error, kind):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
