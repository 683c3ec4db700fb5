"""
Field model: section records, field descriptors, visibility predicates and
the section type registry.
"""

from .field import FieldContext, FieldDescriptor, Option
from .predicate import FieldRef, Predicate, depends, depends_any, when
from .registry import SectionTypeRegistry, SectionTypeSpec
from .section import ConfigSnapshot, Section

__all__ = [
    'ConfigSnapshot',
    'FieldContext',
    'FieldDescriptor',
    'FieldRef',
    'Option',
    'Predicate',
    'Section',
    'SectionTypeRegistry',
    'SectionTypeSpec',
    'depends',
    'depends_any',
    'when'
]
