"""
Remote control surface of the router.

This module provides the asynchronous side of the engine:
- RemoteControl: Interface of the router's control calls
- SimulatedRemoteControl: In-process implementation for tests and demos
- RemoteSync: Stale-safe merging of remote results into the snapshot
"""

from .base import RemoteControl
from .simulated import SimulatedRemoteControl
from .status import ServiceStatus, api_url, dashboard_url
from .sync import RemoteSync

__all__ = [
    'RemoteControl',
    'SimulatedRemoteControl',
    'RemoteSync',
    'ServiceStatus',
    'api_url',
    'dashboard_url'
]
