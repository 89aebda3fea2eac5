"""Custom exceptions for the retirement drawdown planner."""

from __future__ import annotations


class RetirementPlannerError(Exception):
    """Base exception for retirement planner errors."""

    pass


class ValidationError(RetirementPlannerError):
    """Raised when scenario validation fails."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class OptimizationError(RetirementPlannerError):
    """Raised when a parameter sweep is configured with unusable options."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
