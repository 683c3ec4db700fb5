"""
Section records and the configuration snapshot they live in.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Optional

from hproxy.core.exceptions import SectionNotFoundError


@dataclass
class Section:
    """
    One configurable record instance of a section type.

    Field values are stored the way the router persists them: flags as
    ``'0'``/``'1'`` strings, multi-valued fields as lists of strings.
    """
    section_type: str
    section_id: str
    values: Dict[str, Any] = field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return self.values.get('enabled', '1') == '1'

    @property
    def label(self) -> str:
        return self.values.get('label') or self.section_id

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {'.type': self.section_type, '.name': self.section_id, **copy.deepcopy(self.values)}


class ConfigSnapshot:
    """
    Explicit in-memory view of the whole configuration.

    Sections are kept per type in user order. ``external`` holds results
    merged from the remote control surface (named lists, resource versions,
    service state). ``version`` increases on every committed change and is
    used to reject stale asynchronous results.
    """

    def __init__(self, sections: Optional[Dict[str, List[Section]]] = None,
                 features: FrozenSet[str] = frozenset(),
                 external: Optional[Dict[str, Any]] = None,
                 version: int = 0):
        self._sections: Dict[str, List[Section]] = sections or {}
        self.features = frozenset(features)
        self.external: Dict[str, Any] = external or {}
        self.version = version

    def sections_of_type(self, section_type: str) -> List[Section]:
        return list(self._sections.get(section_type, []))

    def section_types(self) -> List[str]:
        return list(self._sections.keys())

    def find(self, section_type: str, section_id: str) -> Optional[Section]:
        for section in self._sections.get(section_type, []):
            if section.section_id == section_id:
                return section
        return None

    def get_section(self, section_type: str, section_id: str) -> Section:
        section = self.find(section_type, section_id)
        if section is None:
            raise SectionNotFoundError(section_type, section_id)
        return section

    def has_section(self, section_type: str, section_id: str) -> bool:
        return self.find(section_type, section_id) is not None

    def get(self, section_type: str, section_id: str, key: str, default: Any = None) -> Any:
        section = self.find(section_type, section_id)
        if section is None:
            return default
        return section.values.get(key, default)

    def __iter__(self) -> Iterator[Section]:
        for sections in self._sections.values():
            yield from sections

    # Mutators are only called by the section controller on a private copy.

    def put_section(self, section: Section, index: Optional[int] = None):
        sections = self._sections.setdefault(section.section_type, [])
        if index is None:
            sections.append(section)
        else:
            sections.insert(index, section)

    def drop_section(self, section_type: str, section_id: str) -> Section:
        section = self.get_section(section_type, section_id)
        self._sections[section_type].remove(section)
        return section

    def set_value(self, section_type: str, section_id: str, key: str, value: Any):
        section = self.get_section(section_type, section_id)
        if value is None or value == []:
            section.values.pop(key, None)
        else:
            section.values[key] = value

    def copy(self) -> "ConfigSnapshot":
        return ConfigSnapshot(
            sections=copy.deepcopy(self._sections),
            features=self.features,
            external=copy.deepcopy(self.external),
            version=self.version,
        )

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {t: [s.to_dict() for s in sections] for t, sections in self._sections.items()}
