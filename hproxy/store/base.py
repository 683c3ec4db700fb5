from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from hproxy.model.section import Section


class ConfigStore(ABC):
    """
    Abstract base class for configuration stores.

    A store holds sections grouped by type, in user order. The section
    controller reads the whole configuration once through `load` and then
    pushes every committed change back through the fine grained mutators,
    followed by `commit`.
    """

    @abstractmethod
    def load(self, section_type: str) -> List[Section]:
        """
        Read every section of a type from the backing store.

        Parameters
        ----------
        section_type : str
            The section type to read

        Returns
        -------
        List[Section]
            Fresh copies of the stored sections in user order
        """
        pass

    @abstractmethod
    def sections_of_type(self, section_type: str) -> List[str]:
        """
        Identifiers of the sections of a type, in user order.
        """
        pass

    @abstractmethod
    def get(self, section_type: str, section_id: str, key: str) -> Optional[Any]:
        """
        Read one stored field value.

        Returns
        -------
        Any or None
            The stored value, None when the section or key is missing
        """
        pass

    @abstractmethod
    def set(self, section_type: str, section_id: str, key: str, value: Any) -> None:
        """
        Write one field value; None removes the key.
        """
        pass

    @abstractmethod
    def add_section(self, section_type: str, section_id: str,
                    values: Optional[Dict[str, Any]] = None) -> None:
        """
        Append a new section.

        Raises
        ------
        ValueError
            If a section with the same identifier already exists
        """
        pass

    @abstractmethod
    def delete_section(self, section_type: str, section_id: str) -> bool:
        """
        Remove a section.

        Returns
        -------
        bool
            True if the section was found and removed, False otherwise
        """
        pass

    @abstractmethod
    def reorder(self, section_type: str, section_ids: List[str]) -> None:
        """
        Reorder the sections of a type to match ``section_ids``.
        """
        pass

    def commit(self) -> None:
        """
        Make pending changes durable. Stores without a durable backend
        have nothing to do.
        """
        pass

    def rollback(self) -> None:
        """
        Discard changes made since the last successful `commit`. Called
        by the controller when a commit fails.
        """
        pass
