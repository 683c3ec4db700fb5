from abc import ABC, abstractmethod
from typing import Any, Dict


class RemoteControl(ABC):
	"""
	Asynchronous control surface of the router.

	Implementations talk to the running system (service manager, file
	storage, secrets, installed resources). Every call returns eventually.
	Failures should be raised as TransportUnavailable; `RemoteSync` turns
	them, and any other exception an implementation lets escape, into
	defaults.
	"""

	@abstractmethod
	async def get_service_status(self, name: str) -> Dict[str, Any]:
		"""
		Status record of a service.

		Returns
		--------
		dict
			Service manager record, e.g.
			``{name: {'instances': {instance: {'running': bool}}}}``
		"""
		raise NotImplementedError("Should implement get_service_status()")

	@abstractmethod
	async def read_named_list(self, list_id: str) -> str:
		"""
		Read a newline delimited list blob (``proxy_list``, ``direct_list``).
		"""
		raise NotImplementedError("Should implement read_named_list()")

	@abstractmethod
	async def write_named_list(self, list_id: str, text: str) -> None:
		"""
		Replace a list blob wholesale.
		"""
		raise NotImplementedError("Should implement write_named_list()")

	@abstractmethod
	async def get_secret(self) -> str:
		"""
		API secret of the running service.
		"""
		raise NotImplementedError("Should implement get_secret()")

	@abstractmethod
	async def get_resource_version(self, kind: str, repo_id: str) -> Dict[str, Any]:
		"""
		Installed version of a resource.

		Returns
		--------
		dict
			``{'version': str}`` when installed, ``{'error': str}`` otherwise
		"""
		raise NotImplementedError("Should implement get_resource_version()")
