"""
Access control: interfaces, LAN/WAN IP policy and domain lists.
"""

import re

from hproxy.core.enums import Datatype
from hproxy.engine.validation.rules import validate_domain_blob
from hproxy.model.field import Option, choice, dynamic_list, text, text_blob
from hproxy.model.predicate import depends
from hproxy.model.registry import SectionTypeSpec

IPV4 = (Datatype.IP4ADDR, Datatype.CIDR4)
IPV6 = (Datatype.IP6ADDR, Datatype.CIDR6)
MAC = (Datatype.MACADDR,)

IPV6_ON = {'config.ipv6_support': '1'}
NOT_CUSTOM = depends({'config.routing_mode': 'custom', '!reverse': True})

LAN_PROXY_MODES = (
    Option('disabled', 'Disable'),
    Option('listed_only', 'Proxy listed only'),
    Option('except_listed', 'Proxy all except listed'),
)


def _lan_fields():
    direct = {'lan_proxy_mode': 'except_listed'}
    proxy = {'lan_proxy_mode': 'listed_only'}
    return (
        choice('lan_proxy_mode', 'Proxy filter mode', LAN_PROXY_MODES,
               default='disabled', required=True),
        dynamic_list('lan_direct_ipv4_ips', 'Direct IPv4 IP-s', datatypes=IPV4,
                     depends=depends(direct)),
        dynamic_list('lan_direct_ipv6_ips', 'Direct IPv6 IP-s', datatypes=IPV6,
                     depends=depends({**direct, **IPV6_ON})),
        dynamic_list('lan_direct_mac_addrs', 'Direct MAC-s', datatypes=MAC,
                     depends=depends(direct)),
        dynamic_list('lan_proxy_ipv4_ips', 'Proxy IPv4 IP-s', datatypes=IPV4,
                     depends=depends(proxy)),
        dynamic_list('lan_proxy_ipv6_ips', 'Proxy IPv6 IP-s', datatypes=IPV6,
                     depends=depends({**proxy, **IPV6_ON})),
        dynamic_list('lan_proxy_mac_addrs', 'Proxy MAC-s', datatypes=MAC,
                     depends=depends(proxy)),
        dynamic_list('lan_gaming_mode_ipv4_ips', 'Gaming mode IPv4 IP-s', datatypes=IPV4),
        dynamic_list('lan_gaming_mode_ipv6_ips', 'Gaming mode IPv6 IP-s', datatypes=IPV6,
                     depends=depends(IPV6_ON)),
        dynamic_list('lan_gaming_mode_mac_addrs', 'Gaming mode MAC-s', datatypes=MAC),
        dynamic_list('lan_global_proxy_ipv4_ips', 'Global proxy IPv4 IP-s', datatypes=IPV4,
                     depends=NOT_CUSTOM),
        dynamic_list('lan_global_proxy_ipv6_ips', 'Global proxy IPv6 IP-s', datatypes=IPV6,
                     depends=depends({'config.routing_mode': re.compile(r'^((?!custom).)+$'),
                                      **IPV6_ON})),
        dynamic_list('lan_global_proxy_mac_addrs', 'Global proxy MAC-s', datatypes=MAC,
                     depends=NOT_CUSTOM),
    )


def _wan_fields():
    return (
        dynamic_list('wan_proxy_ipv4_ips', 'Proxy IPv4 IP-s', datatypes=IPV4),
        dynamic_list('wan_proxy_ipv6_ips', 'Proxy IPv6 IP-s', datatypes=IPV6,
                     depends=depends(IPV6_ON)),
        dynamic_list('wan_direct_ipv4_ips', 'Direct IPv4 IP-s', datatypes=IPV4),
        dynamic_list('wan_direct_ipv6_ips', 'Direct IPv6 IP-s', datatypes=IPV6,
                     depends=depends(IPV6_ON)),
    )


CONTROL = SectionTypeSpec(
    name='control',
    title='Access Control',
    singleton=True,
    fields=(
        dynamic_list('listen_interfaces', 'Listen interfaces'),
        text('bind_interface', 'Bind interface'),
    ) + _lan_fields() + _wan_fields() + (
        text_blob('_proxy_domain_list', 'Proxy Domain List', named_list='proxy_list',
                  depends=NOT_CUSTOM, validator=validate_domain_blob),
        text_blob('_direct_domain_list', 'Direct Domain List', named_list='direct_list',
                  depends=NOT_CUSTOM, validator=validate_domain_blob),
    ),
)
