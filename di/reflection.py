"""
GRAPHWIRE - Reflection Helpers

Introspection used by the container to bind constructor / callable
parameters, plus the type tests used by the injection rules.
"""
from __future__ import annotations

import builtins
import functools
import importlib
import inspect
import sys
import types
from dataclasses import dataclass
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Protocol,
    Set,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from core.errors import InvalidConfigError, NotInstantiableError

_EMPTY = inspect.Parameter.empty

# ``X | None`` has its own origin on 3.10+
_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))


@dataclass(frozen=True)
class ParameterSpec:
    """A single declared parameter of a constructor or callable.

    Attributes:
        name: Parameter name.
        kind: ``inspect.Parameter`` kind.
        annotation: Resolved annotation, or ``None`` when absent/unresolvable.
        has_default: Whether a default value is declared.
        default: The declared default (``inspect.Parameter.empty`` otherwise).
    """

    name: str
    kind: Any
    annotation: Any
    has_default: bool
    default: Any

    @property
    def dependency_type(self) -> Optional[type]:
        return dependency_type(self.annotation)


def class_name(target: Any) -> str:
    """Dotted ``module.QualName`` of a class (or of an object's class)."""
    cls = target if inspect.isclass(target) else type(target)
    return f"{cls.__module__}.{cls.__qualname__}"


def describe(identifier: Any) -> str:
    """Human readable form of a registry identifier."""
    if inspect.isclass(identifier):
        return class_name(identifier)
    return str(identifier)


def import_class(path: str) -> type:
    """
    Import a class from its dotted path.

    Raises:
        InvalidConfigError: If the path does not name an importable class.
    """
    module_name, _, attribute = path.rpartition(".")
    if not module_name:
        raise InvalidConfigError(
            f'"{path}" is neither a registered identifier nor a dotted class path',
            identifier=path,
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InvalidConfigError(
            f'Cannot import module "{module_name}" for "{path}"',
            identifier=path,
            cause=e,
        ) from e

    target = getattr(module, attribute, None)
    if not inspect.isclass(target):
        raise InvalidConfigError(
            f'"{path}" does not name a class',
            identifier=path,
        )
    return target


def looks_like_class_path(identifier: Any) -> bool:
    return isinstance(identifier, str) and "." in identifier.strip(".")


def is_abstract(cls: type) -> bool:
    """True for ABCs with abstract members and for ``typing.Protocol`` classes."""
    return inspect.isabstract(cls) or bool(getattr(cls, "_is_protocol", False))


def dependency_type(annotation: Any) -> Optional[type]:
    """
    Class an annotation asks the container for, if any.

    ``Optional[X]``, ``X | None`` and ``Annotated[X, ...]`` unwrap to ``X``. Builtin types
    (``str``, ``int``, ``dict`` ...) and unions of several classes are never
    resolved through the container.
    """
    if annotation is None or annotation is _EMPTY:
        return None

    origin = get_origin(annotation)
    if origin is Annotated:
        return dependency_type(get_args(annotation)[0])
    if origin in _UNION_ORIGINS:
        candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(candidates) != 1:
            return None
        return dependency_type(candidates[0])

    if not inspect.isclass(annotation):
        return None
    if annotation.__module__ == builtins.__name__:
        return None
    return annotation


def _type_hints(target: Callable) -> dict:
    hint_source = target.__init__ if inspect.isclass(target) else target
    try:
        return get_type_hints(hint_source, include_extras=True)
    except (NameError, TypeError, AttributeError):
        return _evaluate_each(hint_source)


def _evaluate_each(hint_source: Callable) -> Dict[str, Any]:
    """
    Evaluate annotations one by one.

    Used when ``get_type_hints`` gives up on the whole callable because one
    annotation names something unavailable at runtime (``TYPE_CHECKING``
    imports, undefined forward references). Only those annotations are
    dropped.
    """
    source = inspect.unwrap(hint_source)
    namespace = getattr(source, "__globals__", None)
    if namespace is None:
        module = sys.modules.get(getattr(source, "__module__", None) or "")
        namespace = vars(module) if module is not None else {}

    hints = {}
    for name, annotation in (getattr(source, "__annotations__", None) or {}).items():
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, namespace)
            except (NameError, AttributeError, SyntaxError, TypeError):
                continue
        hints[name] = annotation
    return hints


def get_parameters(target: Callable) -> List[ParameterSpec]:
    """
    Declared parameters of a class constructor or a callable, in order.

    Raises:
        NotInstantiableError: If the signature cannot be read.
    """
    try:
        signature = inspect.signature(target)
    except (ValueError, TypeError) as e:
        raise NotInstantiableError(
            f"Cannot introspect parameters of {describe(target)}",
            identifier=describe(target),
            cause=e,
        ) from e

    hints = _type_hints(target)
    specs = []
    for name, parameter in signature.parameters.items():
        annotation = hints.get(name, parameter.annotation)
        if isinstance(annotation, str):
            # Unresolvable forward reference
            annotation = None
        specs.append(ParameterSpec(
            name=name,
            kind=parameter.kind,
            annotation=None if annotation is _EMPTY else annotation,
            has_default=parameter.default is not _EMPTY,
            default=parameter.default,
        ))
    return specs


def is_strict_match(obj: Any, key: type) -> bool:
    """Exact runtime class equality, no subclass matching."""
    return type(obj) is key


def satisfies(obj: Any, key: type) -> bool:
    """
    Capability match: inheritance or protocol.

    Protocols not marked ``@runtime_checkable`` reject ``isinstance``; they
    are matched structurally by the presence of their public members.
    """
    if _is_protocol(key) and not key.__dict__.get("_is_runtime_protocol", False):
        return all(hasattr(obj, name) for name in protocol_members(key))
    return isinstance(obj, key)


def _is_protocol(cls: type) -> bool:
    return bool(cls.__dict__.get("_is_protocol", False))


def protocol_members(protocol: type) -> Set[str]:
    """Public attribute and method names declared by a protocol and its protocol bases."""
    members: Set[str] = set()
    for base in protocol.__mro__:
        if base in (object, Protocol, Generic) or not _is_protocol(base):
            continue
        names = list(base.__dict__) + list(base.__dict__.get("__annotations__", {}))
        members.update(name for name in names if not name.startswith("_"))
    return members


def is_factory(value: Any) -> bool:
    """Functions, methods and partials act as factories; callable instances do not."""
    return inspect.isroutine(value) or isinstance(value, functools.partial)
