"""
Custom DNS: DNS settings, DNS servers and DNS rules.
"""

from hproxy.core.enums import Datatype
from hproxy.model.field import Option, choice, dynamic_list, flag, multi_choice, text
from hproxy.model.predicate import depends
from hproxy.model.registry import SectionTypeSpec
from .common import (
    ANY_OUT, BLOCK_DNS, BLOCK_OUT, CUSTOM_ROUTING, DEFAULT_DNS, DIRECT_OUT, DNS_STRATEGY,
    NETWORK, SYSTEM_DNS, client_subnet_field, enabled_field, label_field, reference,
    rule_head_fields, rule_match_fields, rule_set_field
)

CACHE_ENABLED = depends({'disable_cache': '0'})

SNIFF_PROTOCOLS = (
    Option('http', 'HTTP'),
    Option('tls', 'TLS'),
    Option('quic', 'QUIC'),
    Option('dns', 'DNS'),
    Option('stun', 'STUN'),
)

DNS = SectionTypeSpec(
    name='dns',
    title='DNS Settings',
    singleton=True,
    visible_when=CUSTOM_ROUTING,
    fields=(
        choice('default_strategy', 'Default DNS strategy', DNS_STRATEGY),
        reference('default_server', 'Default DNS server', 'dns_server',
                  sentinels=(DEFAULT_DNS, SYSTEM_DNS, BLOCK_DNS),
                  default='default-dns', required=True),
        flag('disable_cache', 'Disable DNS cache'),
        flag('disable_cache_expire', 'Disable cache expire', depends=CACHE_ENABLED),
        flag('independent_cache', 'Independent cache per server', depends=CACHE_ENABLED),
        client_subnet_field(),
    ),
)

DNS_SERVER = SectionTypeSpec(
    name='dns_server',
    title='DNS Servers',
    visible_when=CUSTOM_ROUTING,
    id_prefix='dns_',
    fields=(
        label_field(),
        enabled_field(),
        text('address', 'Address', required=True),
        reference('address_resolver', 'Address resolver', 'dns_server',
                  sentinels=(Option('', 'None'), DEFAULT_DNS, SYSTEM_DNS),
                  exclude_self=True, acyclic=True),
        choice('address_strategy', 'Address strategy', DNS_STRATEGY),
        choice('resolve_strategy', 'Resolve strategy', DNS_STRATEGY),
        reference('outbound', 'Outbound', 'routing_node', sentinels=(DIRECT_OUT,),
                  default='direct-out', required=True),
        client_subnet_field(),
    ),
)

DNS_RULE = SectionTypeSpec(
    name='dns_rule',
    title='DNS Rules',
    visible_when=CUSTOM_ROUTING,
    id_suffix='_domain',
    fields=rule_head_fields() + (
        dynamic_list('query_type', 'Query type'),
        choice('network', 'Network', NETWORK),
        multi_choice('protocol', 'Protocol', SNIFF_PROTOCOLS),
    ) + rule_match_fields(private_ip_title='Private IP') + (
        rule_set_field(),
        flag('rule_set_ipcidr_match_source', 'Rule set IP CIDR as source IP'),
        flag('invert', 'Invert'),
        reference('outbound', 'Outbound', 'routing_node',
                  sentinels=(ANY_OUT, DIRECT_OUT, BLOCK_OUT), multi=True,
                  exclusive=(ANY_OUT.value,)),
        reference('server', 'Server', 'dns_server',
                  sentinels=(DEFAULT_DNS, SYSTEM_DNS, BLOCK_DNS),
                  default='default-dns', required=True),
        flag('dns_disable_cache', 'Disable dns cache'),
        text('rewrite_ttl', 'Rewrite TTL', datatypes=(Datatype.UINTEGER,)),
        client_subnet_field(),
    ),
)
