"""
Section controller.

Sole owner and mutator of the configuration snapshot. Every mutation is
applied to a private copy, validated, persisted to the store and then
swapped in as the new snapshot with an increased version. A rejected
write leaves both the snapshot and the store untouched.

Mutations run sequentially within one edit session; the controller is
not meant to be shared between concurrent editors.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from hproxy.config import EngineSettings
from hproxy.core.exceptions import ConfigurationError, FieldValidationError
from hproxy.logger import get_hproxy_logger
from hproxy.model.field import FieldDescriptor, Option
from hproxy.model.registry import SectionTypeRegistry
from hproxy.model.section import ConfigSnapshot, Section
from hproxy.outils.id_generator import SectionIdGenerator
from hproxy.store.base import ConfigStore
from .dependency import DependencyEvaluator
from .references import ReferenceResolver
from .validation.pipeline import ValidationPipeline

NAMED_LISTS = 'named_lists'


@dataclass
class WriteResult:
    """
    Outcome of a multi-field write.

    ``values`` holds the normalized accepted values, ``skipped`` the keys
    of hidden fields left untouched and ``fallbacks`` the dangling
    references reset to their default by the commit.
    """
    section_type: str
    section_id: str
    accepted: bool
    values: Dict[str, Any] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    errors: List[FieldValidationError] = field(default_factory=list)
    fallbacks: Dict[str, Any] = field(default_factory=dict)
    version: int = 0

    @property
    def messages(self) -> Dict[str, str]:
        return {e.field: e.message for e in self.errors}


@dataclass(frozen=True)
class InvalidReference:
    """A stored reference naming a section that is no longer offered."""
    section_type: str
    section_id: str
    key: str
    values: Tuple[str, ...]


class SectionController:
    """
    Serializes all configuration mutations.

    Two counters are kept: ``version`` increases on every snapshot swap,
    including merged remote results, while ``config_version`` increases
    only when sections change. Remote results are checked against the
    latter.

    Parameters
    ----------
    registry : SectionTypeRegistry
        Declared section types.
    store : ConfigStore
        Persistent backing store.
    settings : EngineSettings, optional
        Builtin features, uniqueness scopes and choice strictness.
    """

    def __init__(self, registry: SectionTypeRegistry, store: ConfigStore,
                 settings: Optional[EngineSettings] = None):
        self.registry = registry
        self.store = store
        self.settings = settings or EngineSettings()
        self.evaluator = DependencyEvaluator(registry)
        self.resolver = ReferenceResolver(registry)
        self.pipeline = ValidationPipeline(registry, self.evaluator, self.resolver, self.settings)
        self.id_generator = SectionIdGenerator()
        self.logger = get_hproxy_logger().bind(component="SectionController")

        self._snapshot = ConfigSnapshot(features=self.settings.features)
        self._config_version = 0
        self._pending_named_lists: Set[str] = set()

    @property
    def snapshot(self) -> ConfigSnapshot:
        """Current committed snapshot. Treat as read-only."""
        return self._snapshot

    @property
    def version(self) -> int:
        return self._snapshot.version

    @property
    def config_version(self) -> int:
        """Version of the section data, the reference for remote results."""
        return self._config_version

    @property
    def pending_named_lists(self) -> List[str]:
        """Named lists edited locally and not yet written to the remote."""
        return sorted(self._pending_named_lists)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> ConfigSnapshot:
        """
        Build a fresh snapshot from the store.

        Singleton sections missing from the store are created in memory and
        persisted with the first commit.
        """
        sections = {}
        for section_type in self.registry.section_types():
            loaded = self.store.load(section_type)
            if not loaded and self.registry.spec(section_type).singleton:
                loaded = [Section(section_type, section_type, {})]
            sections[section_type] = loaded

        external = self._snapshot.external
        self._snapshot = ConfigSnapshot(sections, self.settings.features, external,
                                        self._snapshot.version + 1)
        self._config_version += 1
        self.logger.info("Configuration loaded", version=self.version,
                         sections=sum(len(s) for s in sections.values()))
        return self._snapshot

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self, section_type: str, section_id: str, key: str) -> Any:
        """Stored value of a field, or its default when never written."""
        self._snapshot.get_section(section_type, section_id)
        self.registry.field(section_type, key)
        return self.evaluator.field_value(self._snapshot, section_type, section_id, key)

    def sections(self, section_type: str) -> List[Section]:
        self.registry.spec(section_type)
        return self._snapshot.sections_of_type(section_type)

    def visible_fields(self, section_type: str, section_id: str) -> List[str]:
        self._snapshot.get_section(section_type, section_id)
        return [d.key for d in self.evaluator.visible_fields(section_type, self._snapshot, section_id)]

    def is_visible(self, section_type: str, section_id: str, key: str) -> bool:
        descriptor = self.registry.field(section_type, key)
        return self.evaluator.is_visible(section_type, descriptor, self._snapshot, section_id)

    def options(self, section_type: str, section_id: str, key: str) -> List[Option]:
        """Current option list of a choice field, recomputed on every call."""
        descriptor = self.registry.field(section_type, key)
        return self.resolver.options_for(descriptor, self._snapshot, section_id)

    def invalid_references(self, section_type: Optional[str] = None,
                           section_id: Optional[str] = None) -> List[InvalidReference]:
        """Stored references whose target is gone or disabled."""
        found = []
        for candidate_type, descriptor in self.registry.reference_fields():
            if section_type is not None and candidate_type != section_type:
                continue
            for section in self._snapshot.sections_of_type(candidate_type):
                if section_id is not None and section.section_id != section_id:
                    continue
                dangling = self.resolver.dangling(descriptor, self._snapshot,
                                                  candidate_type, section.section_id)
                if dangling:
                    found.append(InvalidReference(candidate_type, section.section_id,
                                                  descriptor.key, tuple(dangling)))
        return found

    def validate_all(self) -> List[FieldValidationError]:
        """Re-validate every visible stored value of the whole configuration."""
        errors = []
        for section_type in self.registry.section_types():
            for section in self._snapshot.sections_of_type(section_type):
                errors.extend(self.pipeline.validate_section(section_type, section.section_id,
                                                             self._snapshot))
        return errors

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, section_type: str, prefill: Optional[Dict[str, Any]] = None,
            name: Optional[str] = None) -> str:
        """
        Create a list section.

        Args:
            section_type: Section type of the new section
            prefill: Initial field values, validated like any other write
            name: Optional user supplied identifier

        Returns:
            str: Identifier of the new section

        Raises:
            ConfigurationError: If the section type is a singleton
            FieldValidationError: First rejection among the prefilled values
        """
        spec = self.registry.spec(section_type)
        if spec.singleton:
            raise ConfigurationError(section_type, reason="singleton sections cannot be added")

        existing = self._snapshot.sections_of_type(section_type)
        taken = {s.section_id for s in existing}
        if name is not None:
            section_id = self.id_generator.from_name(name, taken, spec.id_prefix, spec.id_suffix)
        else:
            section_id = self.id_generator.generate(section_type, taken | {s.label for s in existing})

        candidate = self._snapshot.copy()
        candidate.put_section(Section(section_type, section_id, self._defaults(section_type)))

        updates = dict(prefill or {})
        if self.registry.has_field(section_type, 'label'):
            updates.setdefault('label', section_id)

        result = self._apply_to(candidate, section_type, section_id, updates, reconcile=False)
        if not result.accepted:
            self.logger.info("Section add rejected", section_type=section_type,
                             section_id=section_id, errors=result.messages)
            raise result.errors[0]

        self._commit(candidate)
        self.logger.info("Section added", section_type=section_type,
                         section_id=section_id, version=self.version)
        return section_id

    def remove(self, section_type: str, section_id: str) -> None:
        """
        Delete a list section.

        References to the removed section are kept as stored; they drop out
        of every option list immediately and fall back to their default on
        the next successful write to the referring section.
        """
        spec = self.registry.spec(section_type)
        if spec.singleton:
            raise ConfigurationError(section_type, reason="singleton sections cannot be removed")

        candidate = self._snapshot.copy()
        candidate.drop_section(section_type, section_id)
        referrers = self.resolver.referrers(candidate, section_type, section_id)
        self._commit(candidate)
        self.logger.info("Section removed", section_type=section_type, section_id=section_id,
                         referrers=len(referrers), version=self.version)

    def rename(self, section_type: str, section_id: str, new_label: str) -> WriteResult:
        """Change the display label; the identifier stays stable."""
        return self.apply(section_type, section_id, {'label': new_label})

    def write(self, section_type: str, section_id: str, key: str, value: Any) -> WriteResult:
        return self.apply(section_type, section_id, {key: value})

    def apply(self, section_type: str, section_id: str, updates: Dict[str, Any]) -> WriteResult:
        """
        Write several fields of one section.

        Each field is validated against the candidate produced by the
        writes before it. Nothing is committed unless every visible field
        is accepted.
        """
        candidate = self._snapshot.copy()
        candidate.get_section(section_type, section_id)
        result = self._apply_to(candidate, section_type, section_id, updates)
        if not result.accepted:
            self.logger.info("Write rejected", section_type=section_type,
                             section_id=section_id, errors=result.messages)
            result.version = self.version
            return result

        self._commit(candidate)
        result.version = self.version
        self.logger.debug("Write committed", section_type=section_type,
                          section_id=section_id, keys=sorted(result.values),
                          version=self.version)
        return result

    def move(self, section_type: str, section_id: str, index: int) -> None:
        """Move a list section to ``index`` in user order."""
        if self.registry.spec(section_type).singleton:
            raise ConfigurationError(section_type, reason="singleton sections cannot be moved")

        candidate = self._snapshot.copy()
        section = candidate.drop_section(section_type, section_id)
        candidate.put_section(section, index)
        self._commit(candidate)

    def merge_external(self, updates: Dict[str, Any], dispatched_version: int) -> bool:
        """
        Merge results of asynchronous remote requests.

        Results dispatched against an older configuration, i.e. before a
        section change committed since, are discarded. Other merged results
        do not make a result stale.

        Args:
            updates: External data keyed by kind, dictionaries are merged key by key
            dispatched_version: `config_version` when the request was sent

        Returns:
            bool: True when the results were merged
        """
        if dispatched_version != self._config_version:
            self.logger.info("Discarding stale remote result", keys=sorted(updates),
                             dispatched_version=dispatched_version,
                             config_version=self._config_version)
            return False

        candidate = self._snapshot.copy()
        for key, value in updates.items():
            if isinstance(value, dict) and isinstance(candidate.external.get(key), dict):
                candidate.external[key].update(value)
            else:
                candidate.external[key] = value
        self._swap(candidate)
        return True

    def mark_named_list_saved(self, list_id: str, text: str) -> None:
        """Clear the pending mark unless the list was edited again since ``text`` was sent."""
        if self._snapshot.external.get(NAMED_LISTS, {}).get(list_id) == text:
            self._pending_named_lists.discard(list_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _defaults(self, section_type: str) -> Dict[str, Any]:
        values = {}
        for descriptor in self.registry.describe(section_type, self.settings.features):
            if descriptor.named_list or descriptor.default is None:
                continue
            values[descriptor.key] = descriptor.default_value()
        return values

    def _apply_to(self, candidate: ConfigSnapshot, section_type: str, section_id: str,
                  updates: Dict[str, Any], reconcile: bool = True) -> WriteResult:
        result = WriteResult(section_type, section_id, accepted=True)

        for key, raw_value in updates.items():
            descriptor = self.registry.field(section_type, key)
            outcome = self.pipeline.validate(section_type, descriptor, section_id,
                                             raw_value, candidate)
            if outcome.is_skipped:
                result.skipped.append(key)
            elif outcome.is_rejected:
                result.errors.append(outcome.error)
            else:
                self._store_value(candidate, section_type, section_id, descriptor, outcome.value)
                result.values[key] = outcome.value

        if result.errors:
            result.accepted = False
            return result

        if reconcile:
            result.fallbacks = self._reconcile(candidate, section_type, section_id,
                                               exclude=set(result.values))
        return result

    def _store_value(self, candidate: ConfigSnapshot, section_type: str, section_id: str,
                     descriptor: FieldDescriptor, value: Any):
        if descriptor.named_list:
            candidate.external.setdefault(NAMED_LISTS, {})[descriptor.named_list] = value
        else:
            candidate.set_value(section_type, section_id, descriptor.key, value)

    def _reconcile(self, candidate: ConfigSnapshot, section_type: str, section_id: str,
                   exclude: Set[str]) -> Dict[str, Any]:
        """Reset references to sections no longer offered to the field default."""
        fallbacks = {}
        for descriptor in self.registry.spec(section_type).fields:
            if descriptor.reference is None or descriptor.key in exclude:
                continue
            if not self.evaluator.is_visible(section_type, descriptor, candidate, section_id):
                continue
            dangling = self.resolver.dangling(descriptor, candidate, section_type, section_id)
            if not dangling:
                continue

            value = candidate.get(section_type, section_id, descriptor.key)
            if descriptor.is_multi:
                value = [v for v in value if v not in dangling] or descriptor.default_value()
            else:
                value = descriptor.default_value()
            candidate.set_value(section_type, section_id, descriptor.key, value)
            fallbacks[descriptor.key] = value
            self.logger.info("Dangling reference reset", section_type=section_type,
                             section_id=section_id, field=descriptor.key, dangling=dangling)
        return fallbacks

    def _commit(self, candidate: ConfigSnapshot):
        self._persist(self._snapshot, candidate)
        self._track_named_lists(self._snapshot, candidate)
        self._swap(candidate)
        self._config_version += 1

    def _swap(self, candidate: ConfigSnapshot):
        candidate.version = self._snapshot.version + 1
        self._snapshot = candidate

    def _track_named_lists(self, old: ConfigSnapshot, new: ConfigSnapshot):
        before = old.external.get(NAMED_LISTS, {})
        for list_id, text in new.external.get(NAMED_LISTS, {}).items():
            if before.get(list_id) != text:
                self._pending_named_lists.add(list_id)

    def _persist(self, old: ConfigSnapshot, new: ConfigSnapshot):
        """
        Push the difference between two snapshots to the store.

        A failing store is rolled back to its last commit and the error
        re-raised; the snapshot is then left as it was.
        """
        try:
            for section_type in self.registry.section_types():
                self._persist_type(section_type, old, new)
            self.store.commit()
        except Exception as e:
            self.store.rollback()
            self.logger.error("Store commit failed, changes rolled back", error=str(e))
            raise

    def _persist_type(self, section_type: str, old: ConfigSnapshot, new: ConfigSnapshot):
        before = {s.section_id: s for s in old.sections_of_type(section_type)}
        after = new.sections_of_type(section_type)
        after_ids = [s.section_id for s in after]
        stored = set(self.store.sections_of_type(section_type))

        for section_id in stored:
            if section_id not in after_ids:
                self.store.delete_section(section_type, section_id)

        for section in after:
            previous = before.get(section.section_id)
            # Singletons created by load() reach the store with the first commit.
            if previous is None or section.section_id not in stored:
                self.store.add_section(section_type, section.section_id, section.values)
                continue
            for key in set(previous.values) | set(section.values):
                if previous.values.get(key) != section.values.get(key):
                    self.store.set(section_type, section.section_id, key, section.values.get(key))

        if self.store.sections_of_type(section_type) != after_ids:
            self.store.reorder(section_type, after_ids)
