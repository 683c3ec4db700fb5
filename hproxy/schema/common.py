"""
Shared option sets and builders for the section type declarations.
"""

from hproxy.core.enums import Datatype
from hproxy.model.field import (
    Option, ReferenceSpec, SectionOptionSource, choice, dynamic_list, flag, multi_choice, text
)
from hproxy.model.predicate import when

CUSTOM_ROUTING = when('config.routing_mode', 'custom')

DIRECT_OUT = Option('direct-out', 'Direct')
BLOCK_OUT = Option('block-out', 'Block')
ANY_OUT = Option('any-out', 'Any')
DISABLED_NODE = Option('nil', 'Disable')

DEFAULT_DNS = Option('default-dns', 'Default DNS (issued by WAN)')
SYSTEM_DNS = Option('system-dns', 'System DNS')
BLOCK_DNS = Option('block-dns', 'Block DNS queries')

DNS_STRATEGY = (
    Option('', 'Default'),
    Option('prefer_ipv4', 'Prefer IPv4'),
    Option('prefer_ipv6', 'Prefer IPv6'),
    Option('ipv4_only', 'IPv4 only'),
    Option('ipv6_only', 'IPv6 only'),
)

IP_VERSION = (Option('4', 'IPv4'), Option('6', 'IPv6'), Option('', 'Both'))
NETWORK = (Option('tcp', 'TCP'), Option('udp', 'UDP'), Option('', 'Both'))
CLASH_MODE = (
    Option('', 'None'),
    Option('global', 'Global'),
    Option('rule', 'Rule'),
    Option('direct', 'Direct'),
)

CIDR_OR_IP = (Datatype.CIDR, Datatype.IPADDR)


def reference(key, title, target_type, sentinels=(), multi=False, exclude_self=False,
              acyclic=False, **kwargs):
    """A choice whose options are the enabled sections of ``target_type``."""
    build = multi_choice if multi else choice
    return build(
        key, title,
        option_source=SectionOptionSource(target_type, tuple(sentinels), exclude_self=exclude_self),
        reference=ReferenceSpec(target_type, acyclic=acyclic),
        **kwargs
    )


def label_field():
    return text('label', 'Label', unique=True)


def enabled_field():
    return flag('enabled', 'Enable', enabled=True, required=True)


def rule_set_field():
    return reference('rule_set', 'Rule set', 'ruleset', multi=True)


def rule_match_fields(private_ip_title='Private IP'):
    """Host, port, source and process matchers shared by routing and DNS rules."""
    return (
        dynamic_list('domain', 'Domain name', datatypes=(Datatype.HOSTNAME,)),
        dynamic_list('domain_suffix', 'Domain suffix'),
        dynamic_list('domain_keyword', 'Domain keyword'),
        dynamic_list('domain_regex', 'Domain regex'),
        dynamic_list('ip_cidr', 'IP CIDR', datatypes=CIDR_OR_IP),
        flag('ip_is_private', private_ip_title),
        dynamic_list('source_ip_cidr', 'Source IP CIDR', datatypes=CIDR_OR_IP),
        flag('source_ip_is_private', 'Private source IP'),
        dynamic_list('port', 'Port', datatypes=(Datatype.PORT,)),
        dynamic_list('port_range', 'Port range', datatypes=(Datatype.PORT_RANGE,)),
        dynamic_list('source_port', 'Source port', datatypes=(Datatype.PORT,)),
        dynamic_list('source_port_range', 'Source port range', datatypes=(Datatype.PORT_RANGE,)),
        dynamic_list('process_name', 'Process name'),
        dynamic_list('process_path', 'Process path'),
        dynamic_list('user', 'User'),
        choice('clash_mode', 'Clash mode', CLASH_MODE),
    )


def rule_head_fields():
    return (
        label_field(),
        enabled_field(),
        choice('mode', 'Mode', (Option('default', 'Default'),), default='default',
               required=True, readonly=True),
        choice('ip_version', 'IP version', IP_VERSION),
    )


def client_subnet_field():
    return text('client_subnet', 'EDNS Client subnet', datatypes=CIDR_OR_IP)
