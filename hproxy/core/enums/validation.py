"""
Validation pipeline enums.
"""

from enum import Enum


class ValidationStatus(Enum):
    """Outcome of validating one field write."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SKIPPED = "skipped"
