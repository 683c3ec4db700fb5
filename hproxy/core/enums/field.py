"""
Field model enums for the hproxy engine.
"""

from enum import Enum


class FieldKind(Enum):
    """Value kinds a field descriptor can declare."""
    FLAG = "flag"
    CHOICE = "choice"
    MULTI_CHOICE = "multi_choice"
    TEXT = "text"
    LIST = "list"
    TEXT_BLOB = "text_blob"


class Datatype(Enum):
    """Typed validators available to text and list fields."""
    HOSTNAME = "hostname"
    IPADDR = "ipaddr"
    IP4ADDR = "ip4addr"
    IP6ADDR = "ip6addr"
    CIDR = "cidr"
    CIDR4 = "cidr4"
    CIDR6 = "cidr6"
    PORT = "port"
    PORT_RANGE = "portrange"
    UINTEGER = "uinteger"
    MACADDR = "macaddr"


class UniqueScope(Enum):
    """Which sibling sections a unique key is compared against."""
    ALL = "all"
    ENABLED = "enabled"
