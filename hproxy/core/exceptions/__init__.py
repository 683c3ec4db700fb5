"""
Core exceptions for the hproxy configuration engine.

This module provides all exception classes used throughout hproxy,
organized by concern with a clear inheritance hierarchy.
"""

# Base exceptions
from .base import (
    HProxyError,
    ConfigurationError,
    NotFoundError,
    UnknownSectionTypeError,
    SectionNotFoundError,
    UnknownFieldError
)

# Field validation exceptions
from .validation import (
    FieldValidationError,
    EmptyRequiredField,
    InvalidFormat,
    DuplicateIdentifier,
    RecursiveReference,
    ConflictingSelection,
    ReadOnlyField
)

# Remote control exceptions
from .transport import TransportUnavailable

__all__ = [
    # Base exceptions
    'HProxyError',
    'ConfigurationError',
    'NotFoundError',
    'UnknownSectionTypeError',
    'SectionNotFoundError',
    'UnknownFieldError',

    # Field validation exceptions
    'FieldValidationError',
    'EmptyRequiredField',
    'InvalidFormat',
    'DuplicateIdentifier',
    'RecursiveReference',
    'ConflictingSelection',
    'ReadOnlyField',

    # Remote control exceptions
    'TransportUnavailable'
]
