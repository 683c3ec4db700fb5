"""
Configuration stores for the hproxy engine.

This module provides the storage implementations the section controller
persists to:
- InMemoryConfigStore: Dictionary backed store for tests and embedding
- YamlConfigStore: Store backed by a YAML file
"""

from .base import ConfigStore
from .in_memory_storage import InMemoryConfigStore
from .storage_factory import ConfigStoreFactory
from .yaml_storage import YamlConfigStore

__all__ = [
    'ConfigStore',
    'InMemoryConfigStore',
    'YamlConfigStore',
    'ConfigStoreFactory'
]
