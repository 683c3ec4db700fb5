"""
Field-dependency and validation engine.

This module provides the components evaluating a configuration snapshot:
- DependencyEvaluator: Field visibility from declarative predicates
- ReferenceResolver: Dynamic option lists and reference cycle checks
- ValidationPipeline: Ordered checks of a single field write
- SectionController: Sole mutator of the snapshot
"""

from .dependency import DependencyEvaluator
from .references import ReferenceResolver
from .validation import ValidationPipeline, ValidationResult
from .controller import InvalidReference, SectionController, WriteResult

__all__ = [
    'DependencyEvaluator',
    'ReferenceResolver',
    'ValidationPipeline',
    'ValidationResult',
    'SectionController',
    'WriteResult',
    'InvalidReference'
]
