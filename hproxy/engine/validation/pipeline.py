"""
Field validation pipeline.

Validates one proposed field write against a candidate snapshot. Checks
run in a fixed order and stop at the first failure:

    visibility -> writability -> presence -> datatype -> multiplicity
    -> uniqueness -> structural -> field specific validator

Hidden fields are skipped and keep their stored value. Every failure is
reported as a `FieldValidationError` inside the result, never raised.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from hproxy.config import EngineSettings
from hproxy.core.enums import FieldKind, UniqueScope, ValidationStatus
from hproxy.core.exceptions import (
    ConflictingSelection, DuplicateIdentifier, EmptyRequiredField, FieldValidationError,
    InvalidFormat, ReadOnlyField
)
from hproxy.logger import get_hproxy_logger
from hproxy.model.field import (
    FLAG_DISABLED, FLAG_ENABLED, FieldContext, FieldDescriptor, feature_enabled
)
from hproxy.model.registry import SectionTypeRegistry
from hproxy.model.section import ConfigSnapshot
from ..dependency import DependencyEvaluator
from ..references import ReferenceResolver
from . import datatypes

_TRUE = ('1', 'true', 'yes', 'on')
_FALSE = ('0', 'false', 'no', 'off', '')


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field write."""
    status: ValidationStatus
    value: Any = None
    error: Optional[FieldValidationError] = None

    @property
    def is_accepted(self) -> bool:
        return self.status == ValidationStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == ValidationStatus.REJECTED

    @property
    def is_skipped(self) -> bool:
        return self.status == ValidationStatus.SKIPPED

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None


def Accepted(value: Any) -> ValidationResult:
    return ValidationResult(ValidationStatus.ACCEPTED, value)


def Rejected(error: FieldValidationError) -> ValidationResult:
    return ValidationResult(ValidationStatus.REJECTED, error.value, error)


def Skipped() -> ValidationResult:
    return ValidationResult(ValidationStatus.SKIPPED)


class ValidationPipeline:
    """
    Runs the ordered field checks.

    Parameters
    ----------
    registry : SectionTypeRegistry
        Declared section types.
    evaluator : DependencyEvaluator
        Visibility of fields in the candidate snapshot.
    resolver : ReferenceResolver
        Option lists and reference cycle checks.
    settings : EngineSettings
        Uniqueness scope and choice strictness.
    """

    def __init__(self, registry: SectionTypeRegistry, evaluator: DependencyEvaluator,
                 resolver: ReferenceResolver, settings: Optional[EngineSettings] = None):
        self.registry = registry
        self.evaluator = evaluator
        self.resolver = resolver
        self.settings = settings or EngineSettings()
        self.logger = get_hproxy_logger().bind(component="ValidationPipeline")

    def validate(self, section_type: str, descriptor: FieldDescriptor, section_id: str,
                 raw_value: Any, snapshot: ConfigSnapshot,
                 check_writable: bool = True) -> ValidationResult:
        """
        Validate a proposed value for one field of one section.

        Args:
            section_type: Type of the section being written
            descriptor: Field being written
            section_id: Section being written
            raw_value: Proposed value, before normalization
            snapshot: Candidate snapshot the write is evaluated against
            check_writable: Set to False when re-validating stored values

        Returns:
            ValidationResult: ACCEPTED with the normalized value, REJECTED
            with the error, or SKIPPED for hidden fields
        """
        if not self.evaluator.is_visible(section_type, descriptor, snapshot, section_id):
            return Skipped()

        try:
            value = self._run(section_type, descriptor, section_id, raw_value,
                              snapshot, check_writable)
        except FieldValidationError as e:
            if e.section_id is None:
                e.section_id = section_id
            self.logger.debug("Field write rejected", section_type=section_type,
                              section_id=section_id, field=descriptor.key,
                              code=e.code, reason=e.message)
            return Rejected(e)
        return Accepted(value)

    def _run(self, section_type, descriptor, section_id, raw_value, snapshot, check_writable):
        if check_writable:
            self._check_writable(descriptor, snapshot, section_id, raw_value)

        value = self.normalize(descriptor, raw_value, section_id)

        if self._is_empty(value):
            if descriptor.required:
                raise EmptyRequiredField(descriptor.key, section_id)
            return value

        value = self._check_datatype(descriptor, value, section_id)
        self._check_choices(descriptor, value, snapshot, section_id)
        self._check_multiplicity(descriptor, value, section_id)
        self._check_unique(section_type, descriptor, value, snapshot, section_id)
        self._check_structure(section_type, descriptor, value, snapshot, section_id)

        if descriptor.validator is not None:
            ctx = FieldContext(descriptor, section_type, section_id, snapshot,
                               read=lambda t, i, k: self.evaluator.field_value(snapshot, t, i, k))
            descriptor.validator(value, ctx)
        return value

    def normalize(self, descriptor: FieldDescriptor, raw_value: Any,
                  section_id: Optional[str] = None) -> Any:
        """Coerce a raw write into the stored representation of its field kind."""
        if descriptor.kind == FieldKind.FLAG:
            if isinstance(raw_value, bool):
                return FLAG_ENABLED if raw_value else FLAG_DISABLED
            text = '' if raw_value is None else str(raw_value).strip().lower()
            if text in _TRUE:
                return FLAG_ENABLED
            if text in _FALSE:
                return FLAG_DISABLED
            raise InvalidFormat(descriptor.key, "0 or 1", raw_value, section_id)

        if descriptor.is_multi:
            if raw_value is None:
                return []
            if isinstance(raw_value, str):
                return raw_value.split()
            return [str(v).strip() for v in raw_value if str(v).strip() != '']

        if raw_value is None:
            return ''
        if isinstance(raw_value, (list, tuple)):
            raise InvalidFormat(descriptor.key, "a single value", raw_value, section_id)
        if descriptor.kind == FieldKind.TEXT_BLOB:
            return str(raw_value)
        return str(raw_value).strip()

    @staticmethod
    def _is_empty(value) -> bool:
        return value == '' or value == []

    def _check_writable(self, descriptor, snapshot, section_id, raw_value):
        if descriptor.readonly or not feature_enabled(descriptor.write_feature, snapshot.features):
            raise ReadOnlyField(descriptor.key, raw_value, section_id)

    def _check_datatype(self, descriptor, value, section_id):
        if not descriptor.datatypes:
            return value

        def check(item):
            normalized = datatypes.check_any(descriptor.datatypes, item)
            if normalized is None:
                raise InvalidFormat(descriptor.key, datatypes.describe(descriptor.datatypes),
                                    item, section_id)
            return normalized

        if descriptor.is_multi:
            return [check(item) for item in value]
        return check(value)

    def _check_choices(self, descriptor, value, snapshot, section_id):
        if not descriptor.has_choices or not self.settings.strict_choices:
            return

        # Self is offered here so that self-references reach the structural check.
        offered = self.resolver.option_values(descriptor, snapshot, section_id, include_self=True)
        for item in (value if descriptor.is_multi else [value]):
            if item not in offered:
                raise InvalidFormat(descriptor.key, "one of the available options", item, section_id)

    def _check_multiplicity(self, descriptor, value, section_id):
        if not descriptor.is_multi:
            return
        seen = set()
        for item in value:
            if item in seen:
                raise DuplicateIdentifier(descriptor.key, item, section_id)
            seen.add(item)

    def _check_unique(self, section_type, descriptor, value, snapshot, section_id):
        section = snapshot.find(section_type, section_id)
        enabled_only = self.settings.scope_for(section_type) == UniqueScope.ENABLED
        # Disabled sections are compared when they get enabled again.
        skip = enabled_only and section is not None and not section.enabled

        if descriptor.unique and not skip and value not in descriptor.unique_exempt:
            clash = self._find_clash(section_type, descriptor.key, value, snapshot, section_id)
            if clash is not None:
                raise DuplicateIdentifier(descriptor.key, value, section_id)

        # Enabling a section must not make two enabled siblings share a unique key.
        if descriptor.key == 'enabled' and value == FLAG_ENABLED and enabled_only:
            for key in self.registry.spec(section_type).unique_keys:
                unique = self.registry.field(section_type, key)
                current = self._unique_value(section, key) if section is not None else None
                if self._is_empty(current) or current is None or current in unique.unique_exempt:
                    continue
                if self._find_clash(section_type, key, current, snapshot, section_id) is not None:
                    raise DuplicateIdentifier(key, current, section_id)

    def _find_clash(self, section_type, key, value, snapshot, section_id) -> Optional[str]:
        enabled_only = self.settings.scope_for(section_type) == UniqueScope.ENABLED
        for sibling in snapshot.sections_of_type(section_type):
            if sibling.section_id == section_id:
                continue
            if enabled_only and not sibling.enabled:
                continue
            if self._unique_value(sibling, key) == value:
                return sibling.section_id
        return None

    @staticmethod
    def _unique_value(section, key):
        # Unlabelled sections are displayed, and offered, under their identifier.
        if key == 'label':
            return section.label
        return section.get(key)

    def _check_structure(self, section_type, descriptor, value, snapshot, section_id):
        if descriptor.is_multi and len(value) > 1:
            for sentinel in descriptor.exclusive:
                if sentinel in value:
                    raise ConflictingSelection(descriptor.key, sentinel, value, section_id)

        self.resolver.check_reference(section_type, descriptor, snapshot, section_id, value)

    def validate_section(self, section_type: str, section_id: str,
                         snapshot: ConfigSnapshot) -> List[FieldValidationError]:
        """Re-validate every stored value of a section; hidden fields are ignored."""
        errors = []
        for descriptor in self.registry.describe(section_type, snapshot.features):
            current = self.evaluator.field_value(snapshot, section_type, section_id, descriptor.key)
            result = self.validate(section_type, descriptor, section_id, current, snapshot,
                                   check_writable=False)
            if result.is_rejected:
                errors.append(result.error)
        return errors
