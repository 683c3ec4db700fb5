"""
Experimental settings: rejected-response cache and the Clash API.
"""

from hproxy.core.enums import Datatype
from hproxy.model.field import Option, ResourceOptionSource, choice, flag, text
from hproxy.model.predicate import depends
from hproxy.model.registry import SectionTypeSpec
from .common import CUSTOM_ROUTING

DASHBOARD_KIND = 'clash_dashboard'

DASHBOARD_REPOS = (
    ('metacubex/metacubexd', 'metacubexd'),
    ('metacubex/yacd-meta', 'yacd-meta'),
    ('metacubex/razord-meta', 'razord-meta'),
    ('Zephyruso/zashboard', 'zashboard'),
)

LOG_LEVELS = (
    Option('trace', 'Trace'),
    Option('debug', 'Debug'),
    Option('info', 'Info'),
    Option('warn', 'Warning'),
    Option('error', 'Error'),
    Option('fatal', 'Fatal'),
    Option('panic', 'Panic'),
)

EXPERIMENTAL = SectionTypeSpec(
    name='experimental',
    title='Clash API settings',
    singleton=True,
    visible_when=CUSTOM_ROUTING,
    fields=(
        flag('cache_file_store_rdrc', 'Store RDRC'),
        text('cache_file_rdrc_timeout', 'RDRC timeout',
             depends=depends({'cache_file_store_rdrc': '1'})),
        flag('clash_api_enabled', 'Enable Clash API'),
        flag('nginx_support', 'Nginx Support', write_feature='hp_has_nginx'),
        choice('clash_api_log_level', 'Log level', LOG_LEVELS, default='warn'),
        choice('dashboard_repo', 'Select Clash Dashboard', default='',
               option_source=ResourceOptionSource(
                   DASHBOARD_KIND, DASHBOARD_REPOS,
                   sentinels=(Option('', 'Use Online Dashboard'),))),
        flag('set_dash_backend', 'Auto set backend'),
        text('clash_api_port', 'Port', datatypes=(Datatype.PORT,), default='9090', required=True),
        text('clash_api_secret', 'Secret'),
    ),
)
