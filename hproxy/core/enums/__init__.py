"""
Core enums for the hproxy engine.

This module provides all enum classes used throughout hproxy,
organized by concern for better maintainability.
"""

# Field model enums
from .field import (
    FieldKind,
    Datatype,
    UniqueScope
)

# Validation enums
from .validation import ValidationStatus

__all__ = [
    # Field model enums
    'FieldKind',
    'Datatype',
    'UniqueScope',

    # Validation enums
    'ValidationStatus'
]
