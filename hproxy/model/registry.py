"""
Section type registry.

This module provides a centralized registry of section types and the
ordered field descriptors declared for each of them.
"""

import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from hproxy.core.exceptions import ConfigurationError, UnknownFieldError, UnknownSectionTypeError
from hproxy.logger import get_hproxy_logger
from .field import FieldDescriptor, feature_enabled
from .predicate import ALWAYS, Predicate


@dataclass(frozen=True)
class SectionTypeSpec:
    """
    Declaration of one section type.

    Attributes
    ----------
    name : str
        Section type name, also the identifier of singleton sections.
    fields : tuple of FieldDescriptor
        Field model in display order.
    singleton : bool
        Exactly one instance named after the type.
    visible_when : Predicate
        Visibility of the whole section type; it is combined with each
        field's own predicate.
    id_prefix, id_suffix : str
        Wrapping applied to user supplied identifiers of list sections.
    """
    name: str
    fields: Tuple[FieldDescriptor, ...]
    title: str = ''
    singleton: bool = False
    visible_when: Predicate = ALWAYS
    id_prefix: str = ''
    id_suffix: str = ''

    @property
    def unique_keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.fields if f.unique)


class SectionTypeRegistry:
    """
    Central registry of section type declarations.

    Descriptors are immutable once registered; `describe` filters them by
    the builtin features of the running router.
    """

    def __init__(self, specs: Optional[Iterable[SectionTypeSpec]] = None):
        self.logger = get_hproxy_logger().bind(component="SectionTypeRegistry")
        self._lock = threading.RLock()
        self._specs: Dict[str, SectionTypeSpec] = {}

        for spec in specs or ():
            self.register(spec)

    def register(self, spec: SectionTypeSpec) -> SectionTypeSpec:
        """
        Register a section type.

        Raises:
            ConfigurationError: If the type is already registered or declares a key twice
        """
        with self._lock:
            if spec.name in self._specs:
                raise ConfigurationError(spec.name, reason="section type already registered")
            keys = [f.key for f in spec.fields]
            duplicates = {k for k in keys if keys.count(k) > 1}
            if duplicates:
                raise ConfigurationError(spec.name, reason=f"duplicate field keys {sorted(duplicates)}")

            self._specs[spec.name] = spec
            self.logger.debug("Section type registered", section_type=spec.name, fields=len(keys))
            return spec

    def spec(self, section_type: str) -> SectionTypeSpec:
        try:
            return self._specs[section_type]
        except KeyError:
            raise UnknownSectionTypeError(section_type)

    def describe(self, section_type: str,
                 features: Optional[FrozenSet[str]] = None) -> Tuple[FieldDescriptor, ...]:
        """
        Ordered field descriptors of a section type.

        Args:
            section_type: Registered section type name
            features: Builtin features; descriptors gated on a missing feature are left out.
                      None disables gating.
        """
        fields = self.spec(section_type).fields
        if features is None:
            return fields
        return tuple(f for f in fields if feature_enabled(f.feature, features))

    def field(self, section_type: str, key: str) -> FieldDescriptor:
        for descriptor in self.spec(section_type).fields:
            if descriptor.key == key:
                return descriptor
        raise UnknownFieldError(section_type, key)

    def has_field(self, section_type: str, key: str) -> bool:
        return any(f.key == key for f in self.spec(section_type).fields)

    def section_types(self) -> list[str]:
        with self._lock:
            return list(self._specs.keys())

    def singletons(self) -> list[str]:
        return [name for name, spec in self._specs.items() if spec.singleton]

    def reference_fields(self, target_type: Optional[str] = None):
        """Yield ``(section_type, descriptor)`` for every reference-typed field."""
        for name, spec in self._specs.items():
            for descriptor in spec.fields:
                if descriptor.reference is None:
                    continue
                if target_type is None or descriptor.reference.target_type == target_type:
                    yield name, descriptor
