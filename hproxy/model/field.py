"""
Field descriptors.

A `FieldDescriptor` is declared once per section type and never mutated.
Anything that varies per section instance (dynamic option lists, feature
gating) is computed from the snapshot by the engine.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union

from hproxy.core.enums import Datatype, FieldKind
from .predicate import ALWAYS, Predicate

FLAG_ENABLED = '1'
FLAG_DISABLED = '0'

# A feature gate is one builtin feature name or a tuple that must all be present.
FeatureGate = Union[None, str, Tuple[str, ...]]


def feature_enabled(gate: FeatureGate, features) -> bool:
    if gate is None:
        return True
    if isinstance(gate, str):
        return gate in features
    return all(name in features for name in gate)


@dataclass(frozen=True)
class Option:
    """A selectable ``(value, display-label)`` pair."""
    value: str
    label: str
    feature: FeatureGate = None


@dataclass(frozen=True)
class SectionOptionSource:
    """
    Options derived from the sections of another type.

    Sentinel options come first, then every (enabled) section of
    ``section_type`` labelled by its ``label`` field.
    """
    section_type: str
    sentinels: Tuple[Option, ...] = ()
    require_enabled: bool = True
    exclude_self: bool = False


@dataclass(frozen=True)
class ResourceOptionSource:
    """
    Options whose labels depend on remote resource versions.

    ``resources`` lists ``(repo, name)`` pairs; the label reports whether a
    version of ``kind`` was found for the repo in the snapshot's merged
    remote results.
    """
    kind: str
    resources: Tuple[Tuple[str, str], ...]
    sentinels: Tuple[Option, ...] = ()


@dataclass(frozen=True)
class ReferenceSpec:
    """
    Declares a reference edge from this field to sections of ``target_type``.

    ``acyclic`` edges must never form a cycle with edges of the same field.
    """
    target_type: str
    acyclic: bool = False


# Custom validators receive the normalized value and a FieldContext and
# raise a FieldValidationError subclass on failure.
Validator = Callable[[Any, "FieldContext"], None]


@dataclass(frozen=True)
class FieldDescriptor:
    key: str
    kind: FieldKind
    title: str = ''
    default: Any = None
    options: Tuple[Option, ...] = ()
    option_source: Optional[Any] = None
    depends: Predicate = ALWAYS
    datatypes: Tuple[Datatype, ...] = ()
    required: bool = False
    unique: bool = False
    unique_exempt: Tuple[str, ...] = ()
    reference: Optional[ReferenceSpec] = None
    exclusive: Tuple[str, ...] = ()
    validator: Optional[Validator] = None
    feature: FeatureGate = None
    readonly: bool = False
    write_feature: FeatureGate = None
    named_list: Optional[str] = None

    @property
    def is_multi(self) -> bool:
        return self.kind in (FieldKind.MULTI_CHOICE, FieldKind.LIST)

    @property
    def has_choices(self) -> bool:
        return self.kind in (FieldKind.CHOICE, FieldKind.MULTI_CHOICE)

    @property
    def empty_value(self) -> Any:
        return [] if self.is_multi else ''

    def default_value(self) -> Any:
        if self.default is None:
            return self.empty_value
        if self.is_multi and isinstance(self.default, (list, tuple)):
            return list(self.default)
        return self.default


@dataclass
class FieldContext:
    """Everything a custom validator may look at."""
    descriptor: FieldDescriptor
    section_type: str
    section_id: str
    snapshot: Any
    read: Callable[[str, str, str], Any]

    @property
    def features(self):
        return self.snapshot.features


def flag(key: str, title: str = '', enabled: bool = False, **kwargs) -> FieldDescriptor:
    return FieldDescriptor(key, FieldKind.FLAG, title,
                           default=FLAG_ENABLED if enabled else FLAG_DISABLED, **kwargs)


def choice(key: str, title: str = '', options=(), **kwargs) -> FieldDescriptor:
    return FieldDescriptor(key, FieldKind.CHOICE, title, options=tuple(options), **kwargs)


def multi_choice(key: str, title: str = '', options=(), **kwargs) -> FieldDescriptor:
    return FieldDescriptor(key, FieldKind.MULTI_CHOICE, title, options=tuple(options), **kwargs)


def text(key: str, title: str = '', **kwargs) -> FieldDescriptor:
    return FieldDescriptor(key, FieldKind.TEXT, title, **kwargs)


def dynamic_list(key: str, title: str = '', **kwargs) -> FieldDescriptor:
    return FieldDescriptor(key, FieldKind.LIST, title, **kwargs)


def text_blob(key: str, title: str = '', **kwargs) -> FieldDescriptor:
    return FieldDescriptor(key, FieldKind.TEXT_BLOB, title, **kwargs)
