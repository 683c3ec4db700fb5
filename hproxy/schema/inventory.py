"""
Proxy node inventory and rule sets referenced by routing sections.
"""

from hproxy.core.enums import Datatype
from hproxy.model.field import Option, choice, text
from hproxy.model.registry import SectionTypeSpec
from .common import enabled_field, label_field

NODE_TYPES = (
    Option('direct', 'Direct'),
    Option('http', 'HTTP'),
    Option('hysteria2', 'Hysteria2'),
    Option('shadowsocks', 'Shadowsocks'),
    Option('socks', 'Socks'),
    Option('trojan', 'Trojan'),
    Option('tuic', 'Tuic'),
    Option('vless', 'VLESS'),
    Option('vmess', 'VMess'),
    Option('wireguard', 'WireGuard'),
    Option('urltest', 'URLTest'),
)

NODE = SectionTypeSpec(
    name='node',
    title='Nodes',
    fields=(
        label_field(),
        choice('type', 'Type', NODE_TYPES, required=True, default='shadowsocks'),
        text('address', 'Address'),
        text('port', 'Port', datatypes=(Datatype.PORT,)),
    ),
)

RULESET = SectionTypeSpec(
    name='ruleset',
    title='Rule sets',
    fields=(
        label_field(),
        enabled_field(),
        choice('type', 'Type', (Option('local', 'Local'), Option('remote', 'Remote')),
               default='remote', required=True),
        choice('format', 'Format', (Option('binary', 'Binary file'), Option('source', 'Source file')),
               default='binary', required=True),
        text('url', 'Rule set URL'),
        text('path', 'Path'),
    ),
)
