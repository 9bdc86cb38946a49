"""Shared API schemas."""

from .problem_details import ProblemDetails, ValidationErrorItem, ValidationProblemDetails

__all__ = ["ProblemDetails", "ValidationErrorItem", "ValidationProblemDetails"]
