"""
Field-specific validators used by the section type declarations.

Validators receive the already normalized value and a FieldContext and
raise a FieldValidationError subclass when the value is not acceptable.
"""

from hproxy.core.exceptions import DuplicateIdentifier, InvalidFormat
from hproxy.model.field import FLAG_ENABLED, FieldContext
from . import datatypes

WAN_DNS = 'wan'
PORT_PRESETS = ('all', 'common')
CHINADNS_V2_FEATURE = 'hp_has_chinadns_ng_v2'
CHINADNS_V1_MAX_SERVERS = 2


def _ipv6_enabled(ctx: FieldContext) -> bool:
    return ctx.read('config', 'config', 'ipv6_support') == FLAG_ENABLED


def _address_checker(ctx: FieldContext):
    return datatypes.check_ipaddr if _ipv6_enabled(ctx) else datatypes.check_ip4addr


def validate_dns_server(value: str, ctx: FieldContext):
    """Upstream DNS: ``wan`` or an IP address (IPv6 only with IPv6 support)."""
    if value == WAN_DNS:
        return
    if _address_checker(ctx)(value) is None:
        raise InvalidFormat(ctx.descriptor.key, "valid IP address", value, ctx.section_id)


def validate_china_dns_servers(values: list, ctx: FieldContext):
    """Entries are ``wan`` or ``address[#port]``; chinadns-ng v1 accepts two at most."""
    if not values:
        return
    if CHINADNS_V2_FEATURE not in ctx.features and len(values) > CHINADNS_V1_MAX_SERVERS:
        raise InvalidFormat(ctx.descriptor.key, "two servers at maximum", values, ctx.section_id)

    check_address = _address_checker(ctx)
    for entry in values:
        if entry == WAN_DNS:
            continue
        parts = entry.split('#')
        if (len(parts) > 2 or check_address(parts[0]) is None
                or (len(parts) == 2 and datatypes.check_port(parts[1]) is None)):
            raise InvalidFormat(ctx.descriptor.key, "valid address#port", entry, ctx.section_id)


def validate_routing_port(value: str, ctx: FieldContext):
    """A preset, or comma separated ports and port ranges without duplicates."""
    if value in PORT_PRESETS:
        return

    seen = []
    for item in value.split(','):
        if datatypes.check_port(item) is None and datatypes.check_port_range(item) is None:
            raise InvalidFormat(ctx.descriptor.key, "valid port value", item, ctx.section_id)
        if item in seen:
            raise DuplicateIdentifier(ctx.descriptor.key, item, ctx.section_id,
                                      message=f"Port {item} already exists")
        seen.append(item)


def validate_domain_blob(value: str, ctx: FieldContext):
    """Newline delimited hostnames; blank lines are ignored."""
    for line in value.split('\n'):
        if line and datatypes.check_hostname(line) is None:
            raise InvalidFormat(ctx.descriptor.key, "valid hostname", line, ctx.section_id)
