"""Employee record store."""

from kgb_assistant.repository.employee_repository import EmployeeRepository

__all__ = ["EmployeeRepository"]
