# salary_mgmt/exceptions.py


class SalaryMgmtError(Exception):
    """Base class for every error raised by salary_mgmt."""


class EmployeeNotFoundError(SalaryMgmtError):
    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found")


class ConstraintViolationError(SalaryMgmtError):
    """Duplicate identity, missing required field or other integrity failure."""


class DuplicateEmployeeError(ConstraintViolationError):
    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} already exists")


class NormalizationError(SalaryMgmtError):
    """Salary normalization is undefined: every salary in the population is equal."""


class AuditWriteError(SalaryMgmtError):
    """The salary log append failed and the paired salary update was rolled back."""
