"""
Custom routing: routing settings, routing nodes and routing rules.
"""

from hproxy.core.enums import Datatype
from hproxy.model.field import Option, choice, flag, multi_choice, text
from hproxy.model.predicate import depends, when
from hproxy.model.registry import SectionTypeSpec
from .common import (
    BLOCK_OUT, CUSTOM_ROUTING, DIRECT_OUT, DISABLED_NODE, DNS_STRATEGY, NETWORK,
    enabled_field, label_field, reference, rule_head_fields, rule_match_fields, rule_set_field
)

TUN_MODES = when('config.proxy_mode', 'redirect_tun', 'tun')

TCPIP_STACKS = (
    Option('mixed', 'Mixed', feature='with_gvisor'),
    Option('gvisor', 'gVisor', feature='with_gvisor'),
    Option('system', 'System'),
)

SNIFF_PROTOCOLS = (
    Option('http', 'HTTP'),
    Option('tls', 'TLS'),
    Option('quic', 'QUIC'),
    Option('stun', 'STUN'),
)

ROUTING = SectionTypeSpec(
    name='routing',
    title='Routing Settings',
    singleton=True,
    visible_when=CUSTOM_ROUTING,
    fields=(
        flag('tun_gso', 'Generic segmentation offload', required=True, depends=TUN_MODES),
        choice('tcpip_stack', 'TCP/IP stack', TCPIP_STACKS, default='system',
               required=True, depends=TUN_MODES),
        flag('endpoint_independent_nat', 'Enable endpoint-independent NAT', enabled=True,
             required=True, depends=when('tcpip_stack', 'mixed', 'gvisor')),
        text('udp_timeout', 'UDP NAT expiration time', datatypes=(Datatype.UINTEGER,),
             default='300', required=True,
             depends=when('config.proxy_mode', 'redirect_tproxy', 'redirect_tun', 'tun')),
        flag('bypass_cn_traffic', 'Bypass CN traffic', required=True),
        flag('sniff_override', 'Override destination', enabled=True, required=True),
        reference('default_outbound', 'Default outbound', 'routing_node',
                  sentinels=(DISABLED_NODE, DIRECT_OUT, BLOCK_OUT),
                  default='nil', required=True),
    ),
)

ROUTING_NODE = SectionTypeSpec(
    name='routing_node',
    title='Routing Nodes',
    visible_when=CUSTOM_ROUTING,
    fields=(
        label_field(),
        enabled_field(),
        reference('node', 'Node', 'node', unique=True, unique_exempt=('urltest',)),
        choice('domain_strategy', 'Domain strategy', DNS_STRATEGY),
        text('bind_interface', 'Bind interface', depends=depends({'outbound': ''})),
        reference('outbound', 'Outbound', 'routing_node', sentinels=(Option('', 'Direct'),),
                  exclude_self=True, acyclic=True),
    ),
)

ROUTING_RULE = SectionTypeSpec(
    name='routing_rule',
    title='Routing Rules',
    visible_when=CUSTOM_ROUTING,
    id_suffix='_host',
    fields=rule_head_fields() + (
        multi_choice('protocol', 'Protocol', SNIFF_PROTOCOLS),
        choice('network', 'Network', NETWORK),
    ) + rule_match_fields() + (
        rule_set_field(),
        flag('rule_set_ipcidr_match_source', 'Match source IP via rule set'),
        flag('invert', 'Invert'),
        reference('outbound', 'Outbound', 'routing_node', sentinels=(DIRECT_OUT, BLOCK_OUT),
                  default='direct-out', required=True),
    ),
)
