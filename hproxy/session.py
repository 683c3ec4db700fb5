"""
Wiring of a configuration edit session.
"""

from typing import Optional

from hproxy.config import EngineSettings, load_settings
from hproxy.engine import SectionController
from hproxy.remote import RemoteControl, RemoteSync
from hproxy.schema import build_registry
from hproxy.store import ConfigStore, ConfigStoreFactory


def open_session(store: Optional[ConfigStore] = None,
                 settings: Optional[EngineSettings] = None,
                 remote: Optional[RemoteControl] = None):
    """
    Build and load a section controller for the router configuration.

    Args:
        store: Backing store, an in-memory store when omitted
        settings: Engine settings, read with `load_settings` when omitted
        remote: Remote control surface; when given a RemoteSync is returned too

    Returns:
        SectionController, or ``(SectionController, RemoteSync)`` when ``remote`` is set
    """
    controller = SectionController(
        build_registry(),
        store if store is not None else ConfigStoreFactory.create_in_memory(),
        settings if settings is not None else load_settings(),
    )
    controller.load()
    if remote is None:
        return controller
    return controller, RemoteSync(remote, controller)
