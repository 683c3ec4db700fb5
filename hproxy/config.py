"""
Engine configuration.

`Config` carries process-level settings read from the environment;
`EngineSettings` carries the behaviour switches of the validation engine
and can be loaded from a YAML file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

import yaml

from hproxy.core.enums import UniqueScope
from hproxy.core.exceptions import ConfigurationError


class Config:
	"""
	hproxy general configuration variables.
	All settings can be overridden via environment variables.

	Environment Variables:
	----------------------
	HPROXY_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO
	HPROXY_JSON_LOGS: Render log events as JSON when set to 1. Default: 0
	HPROXY_SETTINGS_DIR: Directory holding engine.yaml. Default: settings
	"""
	LOG_LEVEL = os.getenv('HPROXY_LOG_LEVEL', 'INFO').upper()
	JSON_LOGS = os.getenv('HPROXY_JSON_LOGS', '0') == '1'
	SETTINGS_DIR = os.getenv('HPROXY_SETTINGS_DIR', 'settings')


# Uniqueness scope used when a section type has no explicit entry.
DEFAULT_UNIQUE_SCOPE = UniqueScope.ENABLED


@dataclass
class EngineSettings:
    """
    Behaviour switches of the field-dependency and validation engine.

    Attributes
    ----------
    features : frozenset of str
        Builtin features reported by the router (e.g. ``hp_has_tproxy``).
    unique_scope : dict
        Per section type, whether unique keys are compared against every
        sibling section or only the enabled ones.
    strict_choices : bool
        Reject single and multi choice values absent from the current option list.
    """
    features: FrozenSet[str] = field(default_factory=frozenset)
    unique_scope: Dict[str, UniqueScope] = field(default_factory=lambda: {
        'node': UniqueScope.ALL,
    })
    strict_choices: bool = True

    def scope_for(self, section_type: str) -> UniqueScope:
        return self.unique_scope.get(section_type, DEFAULT_UNIQUE_SCOPE)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineSettings":
        """Build settings from a plain mapping (as read from YAML)."""
        settings = cls()
        if 'features' in data:
            settings.features = frozenset(data['features'] or [])
        for section_type, scope in (data.get('unique_scope') or {}).items():
            try:
                settings.unique_scope[section_type] = UniqueScope(scope)
            except ValueError:
                raise ConfigurationError('unique_scope', str(scope),
                                         f"expected one of {[s.value for s in UniqueScope]}")
        if 'strict_choices' in data:
            settings.strict_choices = bool(data['strict_choices'])
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return {
            'features': sorted(self.features),
            'unique_scope': {k: v.value for k, v in self.unique_scope.items()},
            'strict_choices': self.strict_choices,
        }


def load_settings(path: Optional[str] = None) -> EngineSettings:
    """
    Load engine settings from a YAML file.

    Args:
        path: File to read, defaults to ``<HPROXY_SETTINGS_DIR>/engine.yaml``

    Returns:
        EngineSettings, with defaults when the file does not exist
    """
    settings_file = Path(path) if path else Path(Config.SETTINGS_DIR) / "engine.yaml"
    if not settings_file.exists():
        return EngineSettings()

    with open(settings_file, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(settings_file), reason="settings file must contain a mapping")
    return EngineSettings.from_dict(data)
