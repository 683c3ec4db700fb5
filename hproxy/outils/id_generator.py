import re
import threading

from hproxy.core.exceptions import DuplicateIdentifier, InvalidFormat

NAME_FIELD = '.name'
_VALID_NAME = re.compile(r'^[A-Za-z0-9_]+$')


class SectionIdGenerator:
	"""
	A class for generating section identifiers.

	Generated identifiers have the form ``<section_type>_<n>`` with the
	smallest free ``n``; user supplied names are checked and wrapped with
	the prefix and suffix declared by the section type.
	Thread-safe, identifiers handed out are never reused within a run.
	"""
	def __init__(self):
		self._lock = threading.Lock()
		self._issued = set()

	def generate(self, section_type: str, taken) -> str:
		"""
		Generate the next free identifier for a section type.

		Args:
			section_type: Section type name
			taken: Identifiers (and labels) that must not be returned
		"""
		taken = set(taken)
		with self._lock:
			n = 1
			while True:
				candidate = f"{section_type}_{n}"
				if candidate not in taken and candidate not in self._issued:
					self._issued.add(candidate)
					return candidate
				n += 1

	def from_name(self, name: str, taken, prefix: str = '', suffix: str = '') -> str:
		"""
		Build an identifier from a user supplied name.

		Raises:
			InvalidFormat: If the name holds anything but letters, digits and underscores
			DuplicateIdentifier: If the wrapped identifier is already in use
		"""
		if not name or not _VALID_NAME.match(name):
			raise InvalidFormat(NAME_FIELD, "name that contains only letters, digits and underscores", name)

		candidate = f"{prefix}{name}{suffix}"
		with self._lock:
			if candidate in set(taken):
				raise DuplicateIdentifier(NAME_FIELD, candidate)
			self._issued.add(candidate)
		return candidate
