"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError            (domain.py)
    │   └── InvalidParameterError
    ├── ApplicationError       (application.py)
    │   └── InvalidPipelineError
    └── InfrastructureError    (infrastructure.py)
        └── StorageError
            └── StorageTimeoutError
"""

from listing_planner.kernel.errors.application import ApplicationError, InvalidPipelineError
from listing_planner.kernel.errors.base import BaseError
from listing_planner.kernel.errors.domain import DomainError, InvalidParameterError
from listing_planner.kernel.errors.infrastructure import (
    InfrastructureError,
    StorageError,
    StorageTimeoutError,
)

PlannerError = InvalidParameterError | InvalidPipelineError

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "InfrastructureError",
    "InvalidParameterError",
    "InvalidPipelineError",
    "PlannerError",
    "StorageError",
    "StorageTimeoutError",
]
