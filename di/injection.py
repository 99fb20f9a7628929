"""
GRAPHWIRE - Rule-Based Injection

Post-construction injection of already built objects into an object graph.

A target declares two ordered rule tables mapping a type to a binding:
- strict rules match the exact runtime class of an offered object
- polymorphic rules match through inheritance or protocols (structurally
  for protocols that are not runtime-checkable)

Strict rules are always evaluated first; the first matching rule wins.
A binding either assigns the object to a property or calls a setter with it.

Usage:
    class ReportService(InjectionPossibleMixin):
        def injection_rules(self):
            return {Database: "db", Mailer: "set_mailer()"}

    service.inject([database, mailer])
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from core.errors import InvalidConfigError
from di import reflection
from observability.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Bindings
# =============================================================================


@dataclass(frozen=True)
class AssignProperty:
    """Assign the injected object to ``target.<name>``."""

    name: str

    def apply(self, target: Any, obj: Any) -> None:
        setattr(target, self.name, obj)


@dataclass(frozen=True)
class InvokeSetter:
    """Call ``target.<name>(obj)``."""

    name: str

    def apply(self, target: Any, obj: Any) -> None:
        setter = getattr(target, self.name, None)
        if not callable(setter):
            raise InvalidConfigError(
                f'Injection setter "{self.name}" is not a method of {reflection.class_name(target)}',
                identifier=reflection.class_name(target),
            )
        setter(obj)


Binding = Union[AssignProperty, InvokeSetter]
RuleKey = Union[type, str]
RuleTable = Mapping[RuleKey, Union[Binding, str]]


def parse_binding(binding: Union[Binding, str]) -> Binding:
    """
    Normalize a rule value.

    ``"name()"`` is a setter call, any other string a property name.
    """
    if isinstance(binding, (AssignProperty, InvokeSetter)):
        return binding
    if isinstance(binding, str) and binding:
        if len(binding) > 2 and binding.endswith("()"):
            return InvokeSetter(binding[:-2])
        return AssignProperty(binding)
    raise InvalidConfigError(f"Invalid injection binding: {binding!r}")


def _rule_type(key: RuleKey) -> type:
    if isinstance(key, str):
        return reflection.import_class(key)
    return key


def match_rule(obj: Any, rules: RuleTable, strict: bool = False) -> Optional[Binding]:
    """First binding in ``rules`` whose type matches ``obj``, if any."""
    for key, binding in rules.items():
        rule_type = _rule_type(key)
        if strict:
            matched = reflection.is_strict_match(obj, rule_type)
        else:
            matched = reflection.satisfies(obj, rule_type)
        if matched:
            return parse_binding(binding)
    return None


def _as_list(objects: Any) -> List[Any]:
    """
    Offered objects as a list.

    Lists, tuples, sets, generators and other collections or iterators are
    expanded. Strings, bytes and mappings count as one object.
    """
    if isinstance(objects, (str, bytes, bytearray, Mapping)):
        return [objects]
    if isinstance(objects, (Collection, Iterator)):
        return list(objects)
    return [objects]


# =============================================================================
# Injection targets
# =============================================================================


class InjectionPossible(ABC):
    """Object able to receive injected objects."""

    @abstractmethod
    def inject(self, objects: Any) -> None:
        """Offer one object or a collection of objects to this instance."""


class InjectionPossibleMixin(InjectionPossible):
    """
    Default ``inject`` driven by :meth:`injection_rules_strict` and
    :meth:`injection_rules`.

    Rule tables are ordered mappings from a class (or dotted class path) to
    a property name, a ``"setter()"`` marker or a binding object.
    """

    def injection_rules(self) -> RuleTable:
        """Polymorphic rules, checked with ``isinstance`` in table order."""
        return {}

    def injection_rules_strict(self) -> RuleTable:
        """Exact-class rules, checked before the polymorphic ones."""
        return {}

    def inject(self, objects: Any) -> None:
        rules = self.injection_rules()
        rules_strict = self.injection_rules_strict()

        for obj in _as_list(objects):
            binding = match_rule(obj, rules_strict, strict=True) if rules_strict else None
            if binding is None and rules:
                binding = match_rule(obj, rules)
            if binding is None:
                continue

            binding.apply(self, obj)
            logger.debug(
                "Object injected",
                target=reflection.class_name(self),
                injected=reflection.class_name(obj),
                binding=binding.name,
            )


# =============================================================================
# Injectors
# =============================================================================


class InjectorMixin:
    """
    Offers a fixed set of objects to every object produced later.

    The host must provide ``on`` and ``remove_all_listeners`` (for instance
    by also inheriting :class:`core.events.EventEmitter`). Objects emitted
    under :attr:`event_children_inject` receive an injection pass.

    Usage:
        class Repository(InjectorMixin, EventEmitter):
            def find(self):
                rows = [Row(data) for data in self.fetch()]
                self.emit(self.event_children_inject, rows)
                return rows

        repository.inject_to_children([db, cache])
    """

    event_children_inject = "children_inject"

    def inject_to_children(self, inject_objects: Any = None) -> "InjectorMixin":
        """
        Replace the objects offered to children and re-arm the hook.

        Calling it again replaces the previous objects and listener.
        """
        if inject_objects is None:
            inject_objects = []
        self._injectable_objects = _as_list(inject_objects)
        self.attach_inject_event_handler()
        return self

    def inject_to(self, obj: Any, inject_objects: Optional[Iterable[Any]] = None) -> None:
        """Inject into one object if it accepts injections."""
        if inject_objects is None:
            inject_objects = self.get_injectable_objects()
        inject_objects = list(inject_objects)
        if inject_objects and isinstance(obj, InjectionPossible):
            obj.inject(inject_objects)

    def inject_to_multiple(
        self,
        objects: Iterable[Any],
        inject_objects: Optional[Iterable[Any]] = None,
    ) -> None:
        """Inject into each of ``objects``."""
        if inject_objects is None:
            inject_objects = self.get_injectable_objects()
        inject_objects = list(inject_objects)
        if not inject_objects:
            return
        for obj in objects:
            self.inject_to(obj, inject_objects)

    def injectable_properties(self) -> List[str]:
        """Names of attributes holding objects to offer. Override in subclasses."""
        return []

    def get_injectable_objects(self) -> List[Any]:
        """Non-``None`` values of :meth:`injectable_properties`."""
        objects = []
        for name in self.injectable_properties():
            value = getattr(self, name, None)
            if value is not None:
                objects.append(value)
        return objects

    def attach_inject_event_handler(self) -> None:
        """Install the single children-inject listener, dropping earlier ones."""
        self.remove_all_listeners(self.event_children_inject)
        self.on(self.event_children_inject, self._on_children_inject)

    def _on_children_inject(self, objects: Any) -> None:
        offered = getattr(self, "_injectable_objects", [])
        if objects is not None:
            self.inject_to_multiple(_as_list(objects), offered)
