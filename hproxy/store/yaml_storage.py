import threading
from pathlib import Path
from typing import List, Optional

import yaml

from hproxy.logger import get_hproxy_logger
from hproxy.model.section import Section
from .in_memory_storage import InMemoryConfigStore


class YamlConfigStore(InMemoryConfigStore):
    """
    File-based configuration store that reads and writes a YAML file.

    The file maps each section type to a list of records carrying their
    identifier under ``.name``. Changes are kept in memory until `commit`;
    `load` re-reads the file when it was modified on disk.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.logger = get_hproxy_logger().bind(component="YamlConfigStore")
        self._lock = threading.RLock()
        self._last_modified: Optional[float] = None
        self._refresh_cache()

    def load(self, section_type: str) -> List[Section]:
        with self._lock:
            self._refresh_cache()
            return super().load(section_type)

    def commit(self) -> None:
        """Save the configuration to file."""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                yaml.safe_dump(self._export(), f, default_flow_style=False, indent=2, sort_keys=False)
            self._last_modified = self.path.stat().st_mtime
            super().commit()
            self.logger.debug("Configuration saved", path=str(self.path))

    def _refresh_cache(self):
        """Refresh the in-memory copy if the file has changed."""
        if not self.path.exists():
            return

        current_mtime = self.path.stat().st_mtime
        if self._last_modified is None or current_mtime > self._last_modified:
            with open(self.path, 'r') as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Configuration file {self.path} must contain a mapping")
            self._import(data)
            self._last_modified = current_mtime
            self.logger.debug("Configuration loaded", path=str(self.path),
                              section_types=len(self.sections))
