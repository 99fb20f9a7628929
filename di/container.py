"""
GRAPHWIRE - Dependency Injection Container

Definition registry plus resolver. Identifiers (classes, interface classes,
dotted class paths or arbitrary alias strings) map to definitions describing
how to obtain a value; requests walk the alias chain, introspect the target's
constructor and recursively build typed dependencies.

Features:
- Class, alias, config-map, callable, Value and instance definitions
- Singleton caching with stable identity
- Constructor and callable parameter binding (positional, named, by type)
- Alias cycle and constructor cycle detection

Usage:
    container = Container()

    container.set(Mailer, SmtpMailer)
    container.set("db", {"class": Database, "dsn": "sqlite://"})
    container.set_singleton(Cache, {"ttl": 60})

    mailer = container.get(Mailer)
    result = container.invoke(send_report, {"recipient": "ops@example.com"})
"""

from __future__ import annotations

import inspect
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union

from opentelemetry import trace

from core.errors import ErrorContext, InvalidConfigError, NotInstantiableError
from di import reflection
from di.definition import Definition
from di.value import Value
from observability.logging import get_logger

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)

# Global container instance
_default_container: Optional["Container"] = None
_container_lock = threading.Lock()

Params = Union[Sequence[Any], Mapping[Union[int, str], Any], None]
ParamMap = Dict[Union[int, str], Any]

_SCALAR_TYPES = (bool, int, float, complex, bytes, bytearray, list, tuple, set, frozenset)


@dataclass
class _Resolution:
    """Terminal of an alias walk."""

    kind: str  # "class", "callable", "value", "object" or "singleton"
    target: Any
    params: ParamMap
    config: Dict[str, Any]


def normalize_params(params: Params) -> ParamMap:
    """
    Convert caller params into a single map.

    ``int`` keys are positional indices, ``str`` keys are parameter names.
    """
    if params is None:
        return {}
    if isinstance(params, Mapping):
        normalized: ParamMap = {}
        for key, value in params.items():
            if not isinstance(key, (int, str)) or isinstance(key, bool):
                raise InvalidConfigError(
                    f"Parameter keys must be positions or names, got {key!r}"
                )
            normalized[key] = value
        return normalized
    if isinstance(params, (list, tuple)):
        return dict(enumerate(params))
    raise InvalidConfigError(
        f"Parameters must be a sequence or a mapping, got {type(params).__name__}"
    )


def export_params(params: ParamMap) -> Union[List[Any], Dict[Union[int, str], Any]]:
    """Inverse of :func:`normalize_params` for handing params to factories."""
    if all(isinstance(key, int) for key in params):
        return [params[key] for key in sorted(params)]
    return dict(params)


def _is_identifier(value: Any) -> bool:
    return isinstance(value, str) or inspect.isclass(value)


class Container:
    """
    Dependency Injection Container.

    Not safe for concurrent mutation; share one container per event loop
    or serialize access externally.
    """

    def __init__(self) -> None:
        self._definitions: Dict[Any, Any] = {}
        self._params: Dict[Any, ParamMap] = {}
        self._singleton_ids: Set[Any] = set()
        self._instances: Dict[Any, Any] = {}
        self._building: Set[Any] = set()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def set(self, identifier: Any, definition: Any = None, params: Params = None) -> "Container":
        """
        Register a definition for ``identifier``.

        ``definition`` may be:
        - nothing / an empty dict: the identifier is its own class
        - a class or a string: class, interface implementation or alias target
        - a config map: ``class`` plus property values; ``class`` defaults to
          the identifier when the identifier is a class or a dotted path
        - a :class:`Definition`
        - a callable ``(container, params, config) -> object`` or a :class:`Value`
        - an already constructed object

        Re-registering drops any cached instance and the singleton flag.
        """
        if isinstance(definition, Definition):
            if not definition.is_valid():
                raise InvalidConfigError(
                    f'The definition for "{reflection.describe(identifier)}" has no class',
                    identifier=reflection.describe(identifier),
                )
            if params is None:
                params = definition.params
            definition = definition.config

        self._definitions[identifier] = self._normalize_definition(identifier, definition)
        self._params[identifier] = normalize_params(params)
        self._instances.pop(identifier, None)
        self._singleton_ids.discard(identifier)

        logger.debug("Definition registered", identifier=reflection.describe(identifier))
        return self

    def set_singleton(self, identifier: Any, definition: Any = None, params: Params = None) -> "Container":
        """Same as :meth:`set` but only one instance is ever built and cached."""
        self.set(identifier, definition, params)
        self._singleton_ids.add(identifier)
        return self

    def set_definitions(self, definitions: Mapping[Any, Any]) -> "Container":
        """
        Register several definitions.

        Values are definitions, or two-item lists ``[definition, params]``.
        """
        for identifier, definition in definitions.items():
            if isinstance(definition, list) and len(definition) == 2:
                self.set(identifier, definition[0], definition[1])
            else:
                self.set(identifier, definition)
        return self

    def set_singletons(self, singletons: Mapping[Any, Any]) -> "Container":
        """Bulk :meth:`set_singleton`; same value formats as :meth:`set_definitions`."""
        for identifier, definition in singletons.items():
            if isinstance(definition, list) and len(definition) == 2:
                self.set_singleton(identifier, definition[0], definition[1])
            else:
                self.set_singleton(identifier, definition)
        return self

    def _normalize_definition(self, identifier: Any, definition: Any) -> Any:
        if definition is None or (isinstance(definition, dict) and not definition):
            return {"class": identifier}

        if isinstance(definition, str) or inspect.isclass(definition):
            return {"class": definition}

        if isinstance(definition, dict):
            if "class" in definition:
                return dict(definition)
            if inspect.isclass(identifier) or reflection.looks_like_class_path(identifier):
                return {**definition, "class": identifier}
            raise InvalidConfigError(
                f'A class definition for "{reflection.describe(identifier)}" requires a "class" member',
                identifier=reflection.describe(identifier),
            )

        if isinstance(definition, Value) or reflection.is_factory(definition):
            return definition

        if isinstance(definition, _SCALAR_TYPES):
            raise InvalidConfigError(
                f'Unsupported definition type for "{reflection.describe(identifier)}": '
                f"{type(definition).__name__}",
                identifier=reflection.describe(identifier),
            )

        # Already constructed object
        return definition

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has(self, identifier: Any) -> bool:
        """Whether ``identifier`` has a registered definition."""
        return identifier in self._definitions

    def has_singleton(self, identifier: Any, check_instance: bool = False) -> bool:
        """
        Whether ``identifier`` is a registered singleton.

        With ``check_instance`` the singleton must also have been built.
        """
        if identifier not in self._singleton_ids:
            return False
        return identifier in self._instances if check_instance else True

    def get_definitions(self) -> Dict[Any, Any]:
        """Snapshot of the registered definitions."""
        return dict(self._definitions)

    def clear(self, identifier: Any) -> None:
        """Remove the definition, params, cached instance and singleton flag."""
        self._definitions.pop(identifier, None)
        self._params.pop(identifier, None)
        self._instances.pop(identifier, None)
        self._singleton_ids.discard(identifier)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def get(self, identifier: Any, params: Params = None, config: Optional[Dict[str, Any]] = None) -> Any:
        """Return the cached singleton for ``identifier`` or build a new object."""
        return self.get_or_create(identifier, params, config)

    def get_or_create(
        self,
        identifier: Any,
        params: Params = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Singleton-aware resolution.

        A cached singleton is returned unchanged (``params`` and ``config`` are
        ignored). Otherwise the object is built and, for singletons, cached.
        """
        cacheable = _is_identifier(identifier)
        if cacheable and identifier in self._instances:
            logger.debug("Singleton cache hit", identifier=reflection.describe(identifier))
            return self._instances[identifier]

        instance = self.create(identifier, params, config)

        if cacheable and identifier in self._singleton_ids:
            self._instances[identifier] = instance
        return instance

    def create(
        self,
        class_: Any,
        params: Params = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Build a new object for an identifier or a raw definition.

        Raises:
            InvalidConfigError: Unresolvable class, alias cycle, malformed
                definition or unresolvable constructor parameter.
            NotInstantiableError: Abstract class / interface without a
                registered implementation, or a constructor that cannot be
                introspected.
        """
        if isinstance(class_, Definition):
            if params is None:
                params = class_.params
            class_ = class_.config if class_.is_valid() else {}

        with tracer.start_as_current_span("graphwire.container.create") as span:
            span.set_attribute("graphwire.identifier", reflection.describe(class_))

            resolution = self._walk(
                class_,
                normalize_params(params),
                dict(config or {}),
                stop_at_singletons=True,
            )
            span.set_attribute("graphwire.resolution", resolution.kind)

            if resolution.kind == "singleton":
                return self.get_or_create(resolution.target, resolution.params, resolution.config)
            if resolution.kind == "object":
                return resolution.target
            if resolution.kind == "value":
                return resolution.target.resolve(self)
            if resolution.kind == "callable":
                return resolution.target(self, export_params(resolution.params), resolution.config)
            return self._instantiate(resolution.target, resolution.params, resolution.config)

    def resolve_class_name(
        self,
        definition: Any,
        parent: Any = None,
        as_string: bool = False,
    ) -> Union[type, str, None]:
        """
        Walk ``definition`` through the registry down to a class.

        ``definition`` may be an identifier, a config map, a
        :class:`Definition`, a ``[config, params]`` pair, a callable or an
        object; ``parent`` supplies the class of a config map without one.
        Returns the class (its dotted name with ``as_string``), or ``None``
        when the chain ends at a callable, a Value or an object.
        Abstract targets are returned as-is; only construction rejects them.

        Raises:
            InvalidConfigError: On alias cycles or unresolvable class names.
        """
        if isinstance(definition, Definition):
            definition = definition.config if definition.is_valid() else {}
        if isinstance(definition, (list, tuple)) and definition:
            definition = definition[0]

        resolution = self._walk(definition, {}, {}, parent=parent, stop_at_singletons=False)
        if resolution.kind != "class":
            return None
        if as_string:
            return reflection.class_name(resolution.target)
        return resolution.target

    def _walk(
        self,
        definition: Any,
        params: ParamMap,
        config: Dict[str, Any],
        parent: Any = None,
        stop_at_singletons: bool = True,
    ) -> _Resolution:
        """
        Follow alias / definition indirection until a terminal is reached.

        Caller params and config take precedence over registered ones at
        every hop.
        """
        visited: List[Any] = []
        owner = parent
        current = definition

        while True:
            if isinstance(current, dict):
                target = current.get("class", owner)
                if target is None:
                    raise InvalidConfigError(
                        'A class definition requires a "class" member',
                    )
                config = {
                    **{key: value for key, value in current.items() if key != "class"},
                    **config,
                }
                if owner is not None and target == owner and visited:
                    # Entry describing its own identifier
                    if inspect.isclass(target):
                        return _Resolution("class", target, params, config)
                    return _Resolution("class", reflection.import_class(target), params, config)
                current = target
                continue

            if isinstance(current, Value):
                return _Resolution("value", current, params, config)

            if _is_identifier(current):
                if current in visited:
                    chain = [reflection.describe(item) for item in visited + [current]]
                    raise InvalidConfigError(
                        f"Alias cycle detected: {' -> '.join(chain)}",
                        identifier=reflection.describe(current),
                        context=ErrorContext.capture("resolve", chain=chain),
                    )

                if stop_at_singletons and visited and (
                    current in self._singleton_ids or current in self._instances
                ):
                    return _Resolution("singleton", current, params, config)

                visited.append(current)

                if current in self._definitions:
                    params = {**self._params.get(current, {}), **params}
                    owner = current
                    current = self._definitions[current]
                    continue

                if inspect.isclass(current):
                    return _Resolution("class", current, params, config)

                imported = reflection.import_class(current)
                if imported in self._definitions and imported not in visited:
                    current = imported
                    continue
                return _Resolution("class", imported, params, config)

            if reflection.is_factory(current):
                return _Resolution("callable", current, params, config)

            if current is None or isinstance(current, _SCALAR_TYPES):
                raise InvalidConfigError(
                    f"Cannot resolve definition of type {type(current).__name__}",
                )

            return _Resolution("object", current, params, config)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _instantiate(self, cls: type, params: ParamMap, config: Dict[str, Any]) -> Any:
        name = reflection.class_name(cls)
        if reflection.is_abstract(cls):
            raise NotInstantiableError(
                f'Cannot instantiate "{name}": it is abstract or an interface '
                f"and no implementation is registered",
                identifier=name,
            )

        if cls in self._building:
            raise InvalidConfigError(
                f'Circular constructor dependency detected for "{name}"',
                identifier=name,
            )

        self._building.add(cls)
        try:
            specs = reflection.get_parameters(cls)
            args, kwargs, consumed = self._bind(specs, params, config, cls)
        finally:
            self._building.discard(cls)

        instance = cls(*args, **kwargs)

        for key, value in config.items():
            if key not in consumed:
                setattr(instance, key, self._resolve_value(value))

        logger.debug("Object created", class_name=name)
        return instance

    def invoke(self, callback: Callable[..., Any], params: Params = None) -> Any:
        """
        Call ``callback`` resolving its parameters through the container.

        ``params`` may be positional or named; named entries match parameter
        names regardless of position. Parameters annotated with a class that
        were not supplied are resolved with :meth:`get`.

        Example:
            def format_string(string, formatter: Formatter): ...

            container.invoke(format_string, {"string": "Hello World!"})
        """
        specs = reflection.get_parameters(callback)
        args, kwargs, _ = self._bind(specs, normalize_params(params), {}, callback)
        return callback(*args, **kwargs)

    def _bind(
        self,
        specs: List[reflection.ParameterSpec],
        params: ParamMap,
        config: Dict[str, Any],
        owner: Any,
    ) -> Tuple[List[Any], Dict[str, Any], Set[str]]:
        """
        Bind declared parameters in order.

        Precedence per parameter: named param, positional param, config entry
        of the same name, container lookup by annotated class, default.
        """
        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        consumed: Set[str] = set()
        bound_names: Set[str] = set()

        for index, spec in enumerate(specs):
            if spec.kind == inspect.Parameter.VAR_POSITIONAL:
                args.extend(
                    self._resolve_value(params[key])
                    for key in sorted(k for k in params if isinstance(k, int) and k >= index)
                )
                continue

            if spec.kind == inspect.Parameter.VAR_KEYWORD:
                kwargs.update({
                    key: self._resolve_value(value)
                    for key, value in params.items()
                    if isinstance(key, str) and key not in bound_names
                })
                continue

            if spec.name in params:
                value = params[spec.name]
            elif index in params and spec.kind != inspect.Parameter.KEYWORD_ONLY:
                value = params[index]
            elif spec.name in config:
                value = config[spec.name]
                consumed.add(spec.name)
            else:
                value = self._resolve_parameter(spec, owner)

            bound_names.add(spec.name)
            value = self._resolve_value(value)
            if spec.kind == inspect.Parameter.KEYWORD_ONLY:
                kwargs[spec.name] = value
            else:
                args.append(value)

        return args, kwargs, consumed

    def _resolve_parameter(self, spec: reflection.ParameterSpec, owner: Any) -> Any:
        dependency = spec.dependency_type
        if dependency is not None:
            try:
                return self.get(dependency)
            except (InvalidConfigError, NotInstantiableError) as e:
                if spec.has_default:
                    return spec.default
                raise InvalidConfigError(
                    f'Cannot resolve parameter "{spec.name}" of type '
                    f'"{reflection.class_name(dependency)}" for "{reflection.describe(owner)}"',
                    identifier=reflection.describe(owner),
                    parameter=spec.name,
                    cause=e,
                ) from e

        if spec.has_default:
            return spec.default

        raise InvalidConfigError(
            f'Missing required parameter "{spec.name}" for "{reflection.describe(owner)}"',
            identifier=reflection.describe(owner),
            parameter=spec.name,
        )

    def _resolve_value(self, value: Any) -> Any:
        if isinstance(value, Value):
            return value.resolve(self)
        return value


def get_default_container() -> Container:
    """Get or create the process default container."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container()
    return _default_container


def set_default_container(container: Optional[Container]) -> None:
    """Replace (or with ``None``, reset) the process default container."""
    global _default_container
    with _container_lock:
        _default_container = container
