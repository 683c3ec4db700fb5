"""
Typed value validators.

Each checker returns the normalized value on success and None when the
value does not match the datatype.
"""

import ipaddress
import re
from typing import Callable, Dict, Iterable, Optional

from hproxy.core.enums import Datatype

MAX_PORT = 65535

_HOSTNAME_SIMPLE = re.compile(r'^[a-zA-Z0-9_]+$')
_HOSTNAME_DOTTED = re.compile(r'^[a-zA-Z0-9_][a-zA-Z0-9_\-.]*[a-zA-Z0-9]\.?$')
_NOT_NUMERIC = re.compile(r'[^0-9.]')
_PORT_RANGE = re.compile(r'^(\d+)?:(\d+)?$')
_MACADDR = re.compile(r'^([0-9a-fA-F]{1,2}:){5}[0-9a-fA-F]{1,2}$')
_UINTEGER = re.compile(r'^\d+$')


def check_hostname(value: str) -> Optional[str]:
    if not value or len(value) > 253:
        return None
    if _HOSTNAME_SIMPLE.match(value):
        return value
    if _HOSTNAME_DOTTED.match(value) and _NOT_NUMERIC.search(value):
        return value
    return None


def _check_address(value: str, version: Optional[int]) -> Optional[str]:
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        return None
    if version is not None and address.version != version:
        return None
    return value


def check_ipaddr(value: str) -> Optional[str]:
    return _check_address(value, None)


def check_ip4addr(value: str) -> Optional[str]:
    return _check_address(value, 4)


def check_ip6addr(value: str) -> Optional[str]:
    return _check_address(value, 6)


def _check_cidr(value: str, version: Optional[int]) -> Optional[str]:
    if '/' not in value:
        return None
    try:
        network = ipaddress.ip_network(value, strict=False)
    except ValueError:
        return None
    if version is not None and network.version != version:
        return None
    return value


def check_cidr(value: str) -> Optional[str]:
    return _check_cidr(value, None)


def check_cidr4(value: str) -> Optional[str]:
    return _check_cidr(value, 4)


def check_cidr6(value: str) -> Optional[str]:
    return _check_cidr(value, 6)


def check_port(value: str) -> Optional[str]:
    if not _UINTEGER.match(value or ''):
        return None
    port = int(value)
    if 1 <= port <= MAX_PORT:
        return str(port)
    return None


def parse_port_range(value: str) -> Optional[tuple]:
    """
    Parse ``start:end`` where either side may be omitted.

    A missing start means 0 and a missing end means 65535. The pair is only
    valid when ``start < end <= 65535``.
    """
    match = _PORT_RANGE.match(value or '')
    if match is None:
        return None
    start, end = match.groups()
    if start is None and end is None:
        return None
    start = int(start) if start is not None else 0
    end = int(end) if end is not None else MAX_PORT
    if start < end <= MAX_PORT:
        return start, end
    return None


def check_port_range(value: str) -> Optional[str]:
    parsed = parse_port_range(value)
    if parsed is None:
        return None
    return f"{parsed[0]}:{parsed[1]}"


def check_uinteger(value: str) -> Optional[str]:
    if _UINTEGER.match(value or ''):
        return str(int(value))
    return None


def check_macaddr(value: str) -> Optional[str]:
    if _MACADDR.match(value or ''):
        return value.upper()
    return None


CHECKERS: Dict[Datatype, Callable[[str], Optional[str]]] = {
    Datatype.HOSTNAME: check_hostname,
    Datatype.IPADDR: check_ipaddr,
    Datatype.IP4ADDR: check_ip4addr,
    Datatype.IP6ADDR: check_ip6addr,
    Datatype.CIDR: check_cidr,
    Datatype.CIDR4: check_cidr4,
    Datatype.CIDR6: check_cidr6,
    Datatype.PORT: check_port,
    Datatype.PORT_RANGE: check_port_range,
    Datatype.UINTEGER: check_uinteger,
    Datatype.MACADDR: check_macaddr,
}

DESCRIPTIONS: Dict[Datatype, str] = {
    Datatype.HOSTNAME: "valid hostname",
    Datatype.IPADDR: "valid IP address",
    Datatype.IP4ADDR: "valid IPv4 address",
    Datatype.IP6ADDR: "valid IPv6 address",
    Datatype.CIDR: "valid IP prefix (CIDR)",
    Datatype.CIDR4: "valid IPv4 prefix (CIDR)",
    Datatype.CIDR6: "valid IPv6 prefix (CIDR)",
    Datatype.PORT: "valid port value",
    Datatype.PORT_RANGE: "valid port range (port1:port2)",
    Datatype.UINTEGER: "positive integer value",
    Datatype.MACADDR: "valid MAC address",
}


def check_any(datatypes: Iterable[Datatype], value: str) -> Optional[str]:
    """Normalized value for the first matching alternative, None if none match."""
    for datatype in datatypes:
        normalized = CHECKERS[datatype](value)
        if normalized is not None:
            return normalized
    return None


def describe(datatypes: Iterable[Datatype]) -> str:
    return " or ".join(DESCRIPTIONS[d] for d in datatypes)
