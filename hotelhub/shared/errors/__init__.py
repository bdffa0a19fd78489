from .base import AppError, DomainError, InfrastructureError, IntegrityViolationError

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "IntegrityViolationError",
]
