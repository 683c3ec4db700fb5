import copy
from typing import Any, Dict, List, Optional

from hproxy.model.section import Section
from .base import ConfigStore


class InMemoryConfigStore(ConfigStore):
    """
    In-memory implementation of ConfigStore.

    Keeps sections in plain dictionaries, one ordered mapping of
    ``section_id -> values`` per section type. Ideal for tests and for
    embedding the engine where persistence is handled elsewhere. The state
    at the last `commit` is kept so a failed commit can be rolled back.
    """

    def __init__(self, data: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        """
        Initialize the store.

        Parameters
        ----------
        data : dict, optional
            Initial content, ``{section_type: [{'.name': id, key: value, ...}, ...]}``
        """
        self.sections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._committed: Dict[str, Dict[str, Dict[str, Any]]] = {}
        if data:
            self._import(data)

    def _import(self, data: Dict[str, List[Dict[str, Any]]]):
        self.sections = {}
        for section_type, records in data.items():
            bucket = self.sections.setdefault(section_type, {})
            for record in records or []:
                values = dict(record)
                section_id = values.pop('.name', None) or section_type
                values.pop('.type', None)
                bucket[section_id] = values
        self._committed = copy.deepcopy(self.sections)

    def _export(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            section_type: [{'.name': section_id, **copy.deepcopy(values)}
                           for section_id, values in bucket.items()]
            for section_type, bucket in self.sections.items()
        }

    def load(self, section_type: str) -> List[Section]:
        return [Section(section_type, section_id, copy.deepcopy(values))
                for section_id, values in self.sections.get(section_type, {}).items()]

    def sections_of_type(self, section_type: str) -> List[str]:
        return list(self.sections.get(section_type, {}).keys())

    def get(self, section_type: str, section_id: str, key: str) -> Optional[Any]:
        values = self.sections.get(section_type, {}).get(section_id)
        if values is None:
            return None
        return copy.deepcopy(values.get(key))

    def set(self, section_type: str, section_id: str, key: str, value: Any) -> None:
        values = self.sections.get(section_type, {}).get(section_id)
        if values is None:
            raise KeyError(f"Section '{section_type}.{section_id}' does not exist")
        if value is None:
            values.pop(key, None)
        else:
            values[key] = copy.deepcopy(value)

    def add_section(self, section_type: str, section_id: str,
                    values: Optional[Dict[str, Any]] = None) -> None:
        bucket = self.sections.setdefault(section_type, {})
        if section_id in bucket:
            raise ValueError(f"Section '{section_type}.{section_id}' already exists")
        bucket[section_id] = copy.deepcopy(values or {})

    def delete_section(self, section_type: str, section_id: str) -> bool:
        bucket = self.sections.get(section_type, {})
        if section_id not in bucket:
            return False
        del bucket[section_id]
        return True

    def reorder(self, section_type: str, section_ids: List[str]) -> None:
        bucket = self.sections.get(section_type, {})
        if set(section_ids) != set(bucket):
            raise ValueError(f"Reorder of '{section_type}' must list every section exactly once")
        self.sections[section_type] = {section_id: bucket[section_id] for section_id in section_ids}

    def commit(self) -> None:
        self._committed = copy.deepcopy(self.sections)

    def rollback(self) -> None:
        self.sections = copy.deepcopy(self._committed)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return self._export()
