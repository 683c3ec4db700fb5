"""
Field validation: typed datatype checkers, field specific rules and the
ordered validation pipeline.
"""

from .pipeline import (
    Accepted,
    Rejected,
    Skipped,
    ValidationPipeline,
    ValidationResult
)

__all__ = [
    'Accepted',
    'Rejected',
    'Skipped',
    'ValidationPipeline',
    'ValidationResult'
]
