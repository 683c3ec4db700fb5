from typing import Optional

from .base import ConfigStore
from .in_memory_storage import InMemoryConfigStore


class ConfigStoreFactory:
    """
    Factory class for creating ConfigStore instances.

    - InMemoryConfigStore for tests and embedding (no persistence)
    - YamlConfigStore for a configuration kept in a YAML file
    """

    @staticmethod
    def create(backend: str, path: Optional[str] = None) -> ConfigStore:
        """
        Create a ConfigStore instance for a backend.

        Parameters
        ----------
        backend : str
            The backend type ('memory', 'test', 'yaml')
        path : str, optional
            File path (required for the 'yaml' backend)

        Returns
        -------
        ConfigStore
            Appropriate store implementation for the backend

        Raises
        ------
        ValueError
            If the backend is not supported or required parameters are missing
        """
        backend = backend.lower()

        if backend in ('memory', 'test'):
            return InMemoryConfigStore()
        elif backend == 'yaml':
            if not path:
                raise ValueError("File path is required for the yaml backend")
            from .yaml_storage import YamlConfigStore
            return YamlConfigStore(path)
        else:
            raise ValueError(
                f"Unknown backend: {backend}. "
                f"Supported backends are: 'memory', 'test', 'yaml'"
            )

    @staticmethod
    def create_in_memory() -> InMemoryConfigStore:
        """Create an in-memory store directly."""
        return InMemoryConfigStore()
