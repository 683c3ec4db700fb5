"""
Service status and Clash dashboard links.
"""

from dataclasses import dataclass
from typing import Optional

from hproxy.model.field import FLAG_ENABLED
from hproxy.model.section import ConfigSnapshot

NGINX_FEATURE = 'hp_has_nginx'
NGINX_PATH = '/homeproxy'

# Query string telling each dashboard where the API lives.
DASHBOARD_BACKEND_QUERY = {
    'metacubex/metacubexd': '#/setup?hostname={hostname}&port={port}&secret={secret}',
    'metacubex/yacd-meta': '?hostname={hostname}&port={port}&secret={secret}',
    'metacubex/razord-meta': '?host={hostname}&port={port}&secret={secret}',
    'Zephyruso/zashboard': '#/setup?hostname={hostname}&port={port}&secret={secret}',
}


@dataclass(frozen=True)
class ServiceStatus:
    running: bool
    dashboard_url: Optional[str] = None

    @property
    def label(self) -> str:
        return "RUNNING" if self.running else "NOT RUNNING"


def nginx_enabled(snapshot: ConfigSnapshot) -> bool:
    return (NGINX_FEATURE in snapshot.features
            and snapshot.get('experimental', 'experimental', 'nginx_support') == FLAG_ENABLED)


def api_url(snapshot: ConfigSnapshot, hostname: str) -> str:
    """Address of the Clash API, behind nginx when reverse proxying is on."""
    if nginx_enabled(snapshot):
        return f"https://{hostname}{NGINX_PATH}/"
    port = snapshot.get('experimental', 'experimental', 'clash_api_port') or '9090'
    return f"http://{hostname}:{port}"


def dashboard_url(snapshot: ConfigSnapshot, hostname: str, secret: str = '') -> Optional[str]:
    """
    Link to the selected Clash dashboard, None when no dashboard is selected.

    With ``set_dash_backend`` on, the dashboard specific query pointing at
    the API is appended.
    """
    repo = snapshot.get('experimental', 'experimental', 'dashboard_repo') or ''
    if not repo:
        return None

    port = snapshot.get('experimental', 'experimental', 'clash_api_port') or '9090'
    params = ''
    if snapshot.get('experimental', 'experimental', 'set_dash_backend') == FLAG_ENABLED:
        template = DASHBOARD_BACKEND_QUERY.get(repo)
        if template:
            params = template.format(hostname=hostname, port=port, secret=secret)

    if nginx_enabled(snapshot):
        return f"https://{hostname}{NGINX_PATH}/ui/{params}"
    return f"http://{hostname}:{port}/ui/{params}"
