import asyncio
from typing import Any, Dict, Optional

from hproxy.core.exceptions import TransportUnavailable
from .base import RemoteControl


class SimulatedRemoteControl(RemoteControl):
	"""
	In-process RemoteControl.

	Serves canned service records, list blobs, a secret and resource
	versions. ``latency`` delays every call; operations listed in
	``failing`` raise TransportUnavailable, which lets callers exercise
	their degraded paths.
	"""
	def __init__(self,
			services: Optional[Dict[str, Any]] = None,
			named_lists: Optional[Dict[str, str]] = None,
			secret: str = '',
			resource_versions: Optional[Dict[str, str]] = None,
			latency: float = 0.0):
		self.services = services or {}
		self.named_lists = dict(named_lists or {})
		self.secret = secret
		self.resource_versions = dict(resource_versions or {})
		self.latency = latency
		self.failing = set()
		self.calls = []

	async def _call(self, operation: str, *args):
		self.calls.append((operation,) + args)
		if self.latency:
			await asyncio.sleep(self.latency)
		if operation in self.failing:
			raise TransportUnavailable(operation, "simulated failure")

	async def get_service_status(self, name: str) -> Dict[str, Any]:
		await self._call('get_service_status', name)
		if name not in self.services:
			return {}
		return {name: self.services[name]}

	async def read_named_list(self, list_id: str) -> str:
		await self._call('read_named_list', list_id)
		return self.named_lists.get(list_id, '')

	async def write_named_list(self, list_id: str, text: str) -> None:
		await self._call('write_named_list', list_id)
		self.named_lists[list_id] = text

	async def get_secret(self) -> str:
		await self._call('get_secret')
		return self.secret

	async def get_resource_version(self, kind: str, repo_id: str) -> Dict[str, Any]:
		await self._call('get_resource_version', kind, repo_id)
		version = self.resource_versions.get(f"{kind}:{repo_id}")
		if version is None:
			return {'error': 'not installed'}
		return {'version': version}
