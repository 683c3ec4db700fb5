"""
Asynchronous synchronisation with the router's control surface.

Remote results are fetched against the configuration version current at
dispatch and merged through the section controller, which discards them
when the configuration changed in the meantime. Transport failures never
reach the caller: they are logged and replaced by defaults.
"""

import asyncio
from typing import Any, Awaitable, Dict, Iterable, Optional

from hproxy.core.exceptions import TransportUnavailable
from hproxy.engine.controller import NAMED_LISTS, SectionController
from hproxy.engine.references import resource_key
from hproxy.logger import get_hproxy_logger
from hproxy.schema import DASHBOARD_KIND, DASHBOARD_REPOS
from .base import RemoteControl
from .status import ServiceStatus, dashboard_url

SERVICE_NAME = 'homeproxy'
SERVICE_INSTANCE = 'sing-box-c'
NAMED_LIST_IDS = ('proxy_list', 'direct_list')
RESOURCE_VERSIONS = 'resource_versions'

_MISSING = object()


class RemoteSync:
    """
    Dispatches remote requests and merges their results.

    Parameters
    ----------
    remote : RemoteControl
        Control surface of the router.
    controller : SectionController
        Owner of the snapshot results are merged into.
    timeout : float
        Seconds before a single remote call counts as unavailable.
    """

    def __init__(self, remote: RemoteControl, controller: SectionController, timeout: float = 5.0):
        self.remote = remote
        self.controller = controller
        self.timeout = timeout
        self.last_error: Optional[TransportUnavailable] = None
        self.logger = get_hproxy_logger().bind(component="RemoteSync")

    async def _call(self, operation: str, request: Awaitable, default: Any = None) -> Any:
        try:
            return await asyncio.wait_for(request, self.timeout)
        except asyncio.TimeoutError:
            error = TransportUnavailable(operation, f"timed out after {self.timeout}s")
        except TransportUnavailable as e:
            error = e
        except OSError as e:
            error = TransportUnavailable(operation, str(e))
        except Exception as e:
            # Implementations may fail in their own ways; none of it reaches the engine.
            error = TransportUnavailable(operation, f"{type(e).__name__}: {e}")

        self.last_error = error
        self.logger.warning("Remote call failed", operation=operation, reason=error.reason)
        return default

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------

    async def service_running(self) -> bool:
        record = await self._call('get_service_status',
                                  self.remote.get_service_status(SERVICE_NAME), {})
        try:
            return bool(record[SERVICE_NAME]['instances'][SERVICE_INSTANCE]['running'])
        except (KeyError, TypeError):
            return False

    async def api_secret(self) -> str:
        return await self._call('get_secret', self.remote.get_secret(), '') or ''

    async def status(self, hostname: str) -> ServiceStatus:
        """Running state of the service and, when running, the dashboard link."""
        running, secret = await asyncio.gather(self.service_running(), self.api_secret())
        if not running:
            return ServiceStatus(False)
        return ServiceStatus(True, dashboard_url(self.controller.snapshot, hostname, secret))

    # ------------------------------------------------------------------
    # Named lists
    # ------------------------------------------------------------------

    async def _fetch_named_lists(self, list_ids: Iterable[str]) -> Dict[str, Any]:
        list_ids = list(list_ids)
        texts = await asyncio.gather(*[
            self._call('read_named_list', self.remote.read_named_list(list_id), _MISSING)
            for list_id in list_ids
        ])

        current = self.controller.snapshot.external.get(NAMED_LISTS, {})
        pending = set(self.controller.pending_named_lists)
        lists = {}
        for list_id, text in zip(list_ids, texts):
            # Local edits not yet flushed win over the remote copy.
            if text is _MISSING or list_id in pending:
                lists[list_id] = current.get(list_id, '')
            else:
                lists[list_id] = text
        return {NAMED_LISTS: lists}

    async def load_named_lists(self, list_ids: Iterable[str] = NAMED_LIST_IDS) -> bool:
        """
        Read the named domain lists into the snapshot.

        Returns:
            bool: False when the result was discarded as stale
        """
        version = self.controller.config_version
        updates = await self._fetch_named_lists(list_ids)
        return self.controller.merge_external(updates, version)

    async def flush_named_lists(self) -> Dict[str, bool]:
        """
        Write locally edited named lists back to the remote.

        Returns:
            dict: ``{list_id: written}``; failed lists stay pending
        """
        lists = self.controller.snapshot.external.get(NAMED_LISTS, {})
        pending = self.controller.pending_named_lists

        async def write(list_id: str, text: str) -> bool:
            await self.remote.write_named_list(list_id, text)
            return True

        results = await asyncio.gather(*[
            self._call('write_named_list', write(list_id, lists.get(list_id, '')), False)
            for list_id in pending
        ])

        outcome = {}
        for list_id, written in zip(pending, results):
            if written:
                self.controller.mark_named_list_saved(list_id, lists.get(list_id, ''))
            outcome[list_id] = written
        return outcome

    # ------------------------------------------------------------------
    # Dashboard versions
    # ------------------------------------------------------------------

    async def _fetch_dashboard_versions(self) -> Dict[str, Any]:
        repos = [repo for repo, _ in DASHBOARD_REPOS]
        responses = await asyncio.gather(*[
            self._call('get_resource_version',
                       self.remote.get_resource_version(DASHBOARD_KIND, repo), None)
            for repo in repos
        ])

        versions = {}
        for repo, response in zip(repos, responses):
            if response is None:
                continue
            if response.get('error'):
                versions[resource_key(DASHBOARD_KIND, repo)] = ''
            else:
                versions[resource_key(DASHBOARD_KIND, repo)] = response.get('version') or ''
        return {RESOURCE_VERSIONS: versions}

    async def refresh_dashboard_versions(self) -> bool:
        """
        Look up installed dashboard versions, used to label the dashboard options.

        Returns:
            bool: False when the result was discarded as stale
        """
        version = self.controller.config_version
        updates = await self._fetch_dashboard_versions()
        return self.controller.merge_external(updates, version)

    async def refresh_all(self) -> bool:
        """Named lists and dashboard versions, merged as one result."""
        version = self.controller.config_version
        lists, versions = await asyncio.gather(self._fetch_named_lists(NAMED_LIST_IDS),
                                               self._fetch_dashboard_versions())
        return self.controller.merge_external({**lists, **versions}, version)
