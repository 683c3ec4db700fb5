"""
Reference resolver.

Derives option lists for choice fields from the current snapshot and
guards reference edges against self-loops and cycles. Option lists are
pure functions of the snapshot; nothing is kept between calls.
"""

from typing import Dict, List, Optional, Tuple

from hproxy.core.exceptions import RecursiveReference
from hproxy.model.field import (
    FieldDescriptor, Option, ResourceOptionSource, SectionOptionSource, feature_enabled
)
from hproxy.model.registry import SectionTypeRegistry
from hproxy.model.section import ConfigSnapshot

INSTALLED = 'Installed'
NOT_INSTALLED = 'Not Installed'


def as_values(value) -> List[str]:
    """Single and multi valued field contents as a list of non-empty strings."""
    if value is None or value == '':
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v != '']
    return [str(value)]


def resource_key(kind: str, repo: str) -> str:
    return f"{kind}:{repo}"


class ReferenceResolver:
    """Computes option lists and checks reference edges."""

    def __init__(self, registry: SectionTypeRegistry):
        self.registry = registry

    def options_for(self, descriptor: FieldDescriptor, snapshot: ConfigSnapshot,
                    section_id: Optional[str] = None, include_self: bool = False) -> List[Option]:
        """
        Ordered options of a choice field for one section.

        Static options gated on a missing builtin feature are dropped.
        Section backed options list enabled sections of the source type by
        label; the section itself is left out for fields that forbid
        self-reference unless ``include_self`` is set.
        """
        options = [o for o in descriptor.options if feature_enabled(o.feature, snapshot.features)]
        source = descriptor.option_source

        if isinstance(source, SectionOptionSource):
            options.extend(source.sentinels)
            for section in snapshot.sections_of_type(source.section_type):
                if source.require_enabled and not section.enabled:
                    continue
                if source.exclude_self and not include_self and section.section_id == section_id:
                    continue
                options.append(Option(section.section_id, section.label))

        elif isinstance(source, ResourceOptionSource):
            options.extend(source.sentinels)
            versions = snapshot.external.get('resource_versions', {})
            for repo, name in source.resources:
                key = resource_key(source.kind, repo)
                if key not in versions:
                    label = name
                else:
                    label = f"{name} - {INSTALLED if versions[key] else NOT_INSTALLED}"
                options.append(Option(repo, label))

        return options

    def option_values(self, descriptor: FieldDescriptor, snapshot: ConfigSnapshot,
                      section_id: Optional[str] = None, include_self: bool = False) -> List[str]:
        return [o.value for o in self.options_for(descriptor, snapshot, section_id, include_self)]

    def edges(self, snapshot: ConfigSnapshot, section_type: str, key: str) -> Dict[str, List[str]]:
        """Reference edges induced by one field, restricted to existing targets."""
        descriptor = self.registry.field(section_type, key)
        target_type = descriptor.reference.target_type
        existing = {s.section_id for s in snapshot.sections_of_type(target_type)}

        graph = {}
        for section in snapshot.sections_of_type(section_type):
            graph[section.section_id] = [v for v in as_values(section.get(key)) if v in existing]
        return graph

    @staticmethod
    def find_path(graph: Dict[str, List[str]], start: str, goal: str) -> Optional[List[str]]:
        """Depth-first search for a path from ``start`` to ``goal``."""
        stack: List[Tuple[str, List[str]]] = [(start, [start])]
        visited = set()
        while stack:
            node, path = stack.pop()
            if node == goal:
                return path
            if node in visited:
                continue
            visited.add(node)
            for successor in graph.get(node, []):
                if successor not in visited:
                    stack.append((successor, path + [successor]))
        return None

    def check_reference(self, section_type: str, descriptor: FieldDescriptor,
                        snapshot: ConfigSnapshot, section_id: str, value) -> None:
        """
        Reject a reference write that introduces a self-loop or a cycle.

        Raises:
            RecursiveReference: If a target is the section itself or leads back to it
        """
        spec = descriptor.reference
        if spec is None or not spec.acyclic or spec.target_type != section_type:
            return

        targets = as_values(value)
        if section_id in targets:
            raise RecursiveReference(descriptor.key, value, section_id, [section_id, section_id])

        graph = self.edges(snapshot, section_type, descriptor.key)
        graph[section_id] = [t for t in targets if t in graph]
        for target in graph[section_id]:
            path = self.find_path(graph, target, section_id)
            if path is not None:
                raise RecursiveReference(descriptor.key, value, section_id, [section_id] + path)

    def dangling(self, descriptor: FieldDescriptor, snapshot: ConfigSnapshot,
                 section_type: str, section_id: str) -> List[str]:
        """Stored reference values that no longer appear in the field's option list."""
        if descriptor.reference is None:
            return []
        section = snapshot.find(section_type, section_id)
        if section is None or descriptor.key not in section.values:
            return []
        offered = set(self.option_values(descriptor, snapshot, section_id, include_self=True))
        return [v for v in as_values(section.values[descriptor.key]) if v not in offered]

    def referrers(self, snapshot: ConfigSnapshot, target_type: str,
                  target_id: str) -> List[Tuple[str, str, str]]:
        """Every ``(section_type, section_id, key)`` whose stored value names the target."""
        found = []
        for section_type, descriptor in self.registry.reference_fields(target_type):
            for section in snapshot.sections_of_type(section_type):
                if target_id in as_values(section.get(descriptor.key)):
                    found.append((section_type, section.section_id, descriptor.key))
        return found
