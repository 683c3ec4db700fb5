"""
Section type declarations of the proxy router configuration.

Importing this package has no side effects; call `build_registry` to get a
registry holding every declared section type.
"""

from hproxy.model.registry import SectionTypeRegistry
from .control import CONTROL
from .dns import DNS, DNS_RULE, DNS_SERVER
from .experimental import DASHBOARD_KIND, DASHBOARD_REPOS, EXPERIMENTAL
from .inventory import NODE, RULESET
from .main import CONFIG
from .routing import ROUTING, ROUTING_NODE, ROUTING_RULE

ALL_SECTION_TYPES = (
    CONFIG,
    ROUTING,
    NODE,
    ROUTING_NODE,
    ROUTING_RULE,
    DNS,
    DNS_SERVER,
    DNS_RULE,
    RULESET,
    EXPERIMENTAL,
    CONTROL,
)


def build_registry() -> SectionTypeRegistry:
    """Registry with every section type of the router configuration."""
    return SectionTypeRegistry(ALL_SECTION_TYPES)


__all__ = [
    'ALL_SECTION_TYPES',
    'DASHBOARD_KIND',
    'DASHBOARD_REPOS',
    'build_registry',
]
