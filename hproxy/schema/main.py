"""
Global settings (`config` singleton).
"""

import re

from hproxy.engine.validation.rules import (
    validate_china_dns_servers, validate_dns_server, validate_routing_port
)
from hproxy.model.field import Option, choice, dynamic_list, flag, text
from hproxy.model.predicate import depends
from hproxy.model.registry import SectionTypeSpec
from .common import DISABLED_NODE, reference

NOT_CUSTOM = depends({'routing_mode': 'custom', '!reverse': True})

ROUTING_MODES = (
    Option('gfwlist', 'GFWList'),
    Option('bypass_mainland_china', 'Bypass mainland China'),
    Option('proxy_mainland_china', 'Only proxy mainland China'),
    Option('custom', 'Custom routing'),
    Option('global', 'Global'),
)

PROXY_MODES = (
    Option('redirect', 'Redirect TCP'),
    Option('redirect_tproxy', 'Redirect TCP + TProxy UDP', feature='hp_has_tproxy'),
    Option('redirect_tun', 'Redirect TCP + Tun UDP', feature=('hp_has_ip_full', 'hp_has_tun')),
    Option('tun', 'Tun TCP/UDP', feature=('hp_has_ip_full', 'hp_has_tun')),
)

DNS_PRESETS = (
    Option('wan', 'WAN DNS (read from interface)'),
    Option('1.1.1.1', 'CloudFlare Public DNS (1.1.1.1)'),
    Option('208.67.222.222', 'Cisco Public DNS (208.67.222.222)'),
    Option('8.8.8.8', 'Google Public DNS (8.8.8.8)'),
    Option('223.5.5.5', 'Aliyun Public DNS (223.5.5.5)'),
    Option('119.29.29.29', 'Tencent Public DNS (119.29.29.29)'),
    Option('114.114.114.114', 'Xinfeng Public DNS (114.114.114.114)'),
)

CHINA_DNS_PRESETS = (
    Option('wan', 'WAN DNS (read from interface)'),
    Option('223.5.5.5', 'Aliyun Public DNS (223.5.5.5)'),
    Option('210.2.4.8', 'CNNIC Public DNS (210.2.4.8)'),
    Option('119.29.29.29', 'Tencent Public DNS (119.29.29.29)'),
    Option('114.114.114.114', 'Xinfeng Public DNS (114.114.114.114)'),
)

CONFIG = SectionTypeSpec(
    name='config',
    title='Routing Settings',
    singleton=True,
    fields=(
        reference('main_node', 'Main node', 'node', sentinels=(DISABLED_NODE,),
                  default='nil', required=True, depends=NOT_CUSTOM),
        reference('main_udp_node', 'Main UDP node', 'node',
                  sentinels=(DISABLED_NODE, Option('same', 'Same as main node')),
                  default='nil', required=True,
                  depends=depends({'routing_mode': re.compile(r'^((?!custom).)+$'),
                                   'proxy_mode': re.compile(r'^((?!redirect$).)+$')})),
        text('dns_server', 'DNS server', options=DNS_PRESETS, default='8.8.8.8',
             required=True, depends=NOT_CUSTOM, validator=validate_dns_server),
        dynamic_list('china_dns_server', 'China DNS server', options=CHINA_DNS_PRESETS,
                     depends=depends({'routing_mode': 'bypass_mainland_china'}),
                     feature='hp_has_chinadns_ng', validator=validate_china_dns_servers),
        choice('routing_mode', 'Routing mode', ROUTING_MODES,
               default='bypass_mainland_china', required=True),
        text('routing_port', 'Routing ports',
             options=(Option('all', 'All ports'),
                      Option('common', 'Common ports only (bypass P2P traffic)')),
             default='common', required=True, validator=validate_routing_port),
        choice('proxy_mode', 'Proxy mode', PROXY_MODES, default='redirect_tproxy', required=True),
        flag('ipv6_support', 'IPv6 support', enabled=True, required=True),
    ),
)

