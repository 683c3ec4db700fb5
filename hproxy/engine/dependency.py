"""
Dependency evaluator.

Decides, from a configuration snapshot, which fields are currently visible.
A referenced field that is itself hidden contributes no value, so hiding
propagates along dependency chains. Nothing is cached between calls: every
evaluation reads the snapshot it is given.
"""

from typing import Any, Dict, List, Optional, Set, Tuple

from hproxy.model.field import FieldDescriptor, feature_enabled
from hproxy.model.predicate import CURRENT, FieldRef
from hproxy.model.registry import SectionTypeRegistry
from hproxy.model.section import ConfigSnapshot

FieldAddress = Tuple[str, str, str]


class DependencyEvaluator:
    """Interprets visibility predicates against a snapshot."""

    def __init__(self, registry: SectionTypeRegistry):
        self.registry = registry

    def is_visible(self, section_type: str, descriptor: FieldDescriptor,
                   snapshot: ConfigSnapshot, section_id: str) -> bool:
        """True when the field's section type and the field itself are visible."""
        return self._visible(section_type, descriptor, snapshot, section_id, set())

    def is_section_visible(self, section_type: str, snapshot: ConfigSnapshot,
                           section_id: str) -> bool:
        spec = self.registry.spec(section_type)
        lookup = self._lookup(section_type, snapshot, section_id, set())
        return spec.visible_when.evaluate(lookup)

    def visible_fields(self, section_type: str, snapshot: ConfigSnapshot,
                       section_id: str) -> List[FieldDescriptor]:
        return [d for d in self.registry.describe(section_type, snapshot.features)
                if self.is_visible(section_type, d, snapshot, section_id)]

    def visibility_map(self, snapshot: ConfigSnapshot) -> Dict[FieldAddress, bool]:
        """Visibility of every declared field of every section in the snapshot."""
        result = {}
        for section in snapshot:
            if section.section_type not in self.registry.section_types():
                continue
            for descriptor in self.registry.spec(section.section_type).fields:
                result[(section.section_type, section.section_id, descriptor.key)] = \
                    self.is_visible(section.section_type, descriptor, snapshot, section.section_id)
        return result

    def field_value(self, snapshot: ConfigSnapshot, section_type: str,
                    section_id: str, key: str) -> Any:
        """Stored value of a field, or its declared default when unset."""
        section = snapshot.find(section_type, section_id)
        descriptor = None
        if self.registry.has_field(section_type, key):
            descriptor = self.registry.field(section_type, key)

        if descriptor is not None and descriptor.named_list:
            return snapshot.external.get('named_lists', {}).get(descriptor.named_list, '')
        if section is not None and key in section.values:
            return section.values[key]
        if descriptor is not None:
            return descriptor.default_value()
        return None

    def _visible(self, section_type: str, descriptor: FieldDescriptor,
                 snapshot: ConfigSnapshot, section_id: str, stack: Set[FieldAddress]) -> bool:
        address = (section_type, section_id, descriptor.key)
        if address in stack:
            return False
        if not feature_enabled(descriptor.feature, snapshot.features):
            return False

        stack = stack | {address}
        lookup = self._lookup(section_type, snapshot, section_id, stack)
        spec = self.registry.spec(section_type)
        return spec.visible_when.evaluate(lookup) and descriptor.depends.evaluate(lookup)

    def _lookup(self, section_type: str, snapshot: ConfigSnapshot,
                section_id: str, stack: Set[FieldAddress]):
        def lookup(ref: FieldRef) -> Optional[Any]:
            target_type = ref.section_type or section_type
            target_id = section_id if ref.section_id == CURRENT else ref.section_id
            if snapshot.find(target_type, target_id) is None:
                return None
            if not self.registry.has_field(target_type, ref.key):
                return snapshot.get(target_type, target_id, ref.key)

            target = self.registry.field(target_type, ref.key)
            if not self._visible(target_type, target, snapshot, target_id, stack):
                return None
            return self.field_value(snapshot, target_type, target_id, ref.key)

        return lookup
