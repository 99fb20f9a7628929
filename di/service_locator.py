"""
GRAPHWIRE - Service Locator

Named-component registry layered on the container. Components are
registered under ids (``"db"``, ``"cache"`` ...), built lazily through the
container on first ``get`` and then shared.

Features:
- Lazy, shared component instances
- Bulk registration ordered by declared ``depends_on`` edges
- Optional eager instantiation of ``ComponentAutoload`` components
- Sequential async initialization of ``ComponentInitBlocking`` components

Usage:
    locator = ServiceLocator(container)
    locator.set_components({
        "db": {"class": Database, "dsn": "sqlite://"},
        "cache": {"class": DbCache, "depends_on": ["db"]},
    })

    await locator.load_components()
    cache = locator.get("cache")  # or locator.cache
"""

from __future__ import annotations

import inspect
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from config import get_config
from core.async_utils import all_in_order, warn_after
from core.errors import EntryNotFoundError, ErrorContext, ErrorSeverity, InvalidConfigError
from di import reflection
from di.component import ComponentAutoload, ComponentInitBlocking, ServiceLocatorAutoload
from di.container import Container, get_default_container
from di.definition import Definition
from di.value import Value
from observability.logging import LogContext, get_logger
from observability.tracing import get_tracer

logger = get_logger(__name__)
tracer = get_tracer(__name__)

_UNSET = object()
_SCALAR_TYPES = (bool, int, float, complex, bytes, bytearray, set, frozenset)


def _is_prebuilt(definition: Any) -> bool:
    """Whether a stored definition is already the component itself."""
    return not (
        isinstance(definition, (dict, list, tuple, str, Value))
        or inspect.isclass(definition)
        or reflection.is_factory(definition)
    )


def sort_by_dependencies(
    ids: Sequence[str],
    dependencies: Mapping[str, Sequence[str]],
) -> List[str]:
    """
    Stable topological order of ``ids``.

    Every id comes after the ids it depends on; otherwise declaration order
    is kept. Dependencies on ids outside ``ids`` are ignored.

    Raises:
        InvalidConfigError: If the declared dependencies contain a cycle.
    """
    known = set(ids)
    remaining: Dict[str, set] = {
        component_id: {dep for dep in dependencies.get(component_id, ()) if dep in known}
        for component_id in ids
    }
    ordered: List[str] = []

    while remaining:
        ready = next(
            (component_id for component_id in ids
             if component_id in remaining and not remaining[component_id]),
            None,
        )
        if ready is None:
            cycle = _find_cycle(ids, remaining)
            raise InvalidConfigError(
                f"Circular dependency detected between components: {' -> '.join(cycle)}",
                identifier=cycle[0],
                context=ErrorContext.capture("set_components", chain=cycle),
                severity=ErrorSeverity.CRITICAL,
                recoverable=False,
            )

        ordered.append(ready)
        del remaining[ready]
        for pending in remaining.values():
            pending.discard(ready)

    return ordered


def _find_cycle(ids: Sequence[str], remaining: Dict[str, set]) -> List[str]:
    # Every remaining id still waits on another remaining id, so walking
    # first dependencies must revisit a node.
    node = next(component_id for component_id in ids if component_id in remaining)
    path: List[str] = []
    while node not in path:
        path.append(node)
        node = next(dep for dep in ids if dep in remaining[node])
    return path[path.index(node):] + [node]


class ServiceLocator:
    """
    Component registry with lazy shared instances.

    The locator delegates construction to the container passed in (or the
    process default container when none is given).
    """

    def __init__(
        self,
        container: Optional[Container] = None,
        components: Optional[Mapping[str, Any]] = None,
        init_warning_timeout: Any = _UNSET,
    ) -> None:
        self._container = container if container is not None else get_default_container()
        self._definitions: Dict[str, Any] = {}
        self._components: Dict[str, Any] = {}
        if init_warning_timeout is _UNSET:
            init_warning_timeout = get_config().container.init_warning_timeout
        self._init_warning_timeout: Optional[float] = init_warning_timeout

        if components:
            self.set_components(components)

    @property
    def container(self) -> Container:
        return self._container

    @property
    def components_autoload_enabled(self) -> bool:
        return isinstance(self, ServiceLocatorAutoload)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal attribute lookup fails
        if not name.startswith("_"):
            definitions = self.__dict__.get("_definitions", {})
            if name in definitions:
                return self.get(name)
        raise AttributeError(
            f"'{type(self).__name__}' object has no attribute or component '{name}'"
        )

    def __contains__(self, component_id: str) -> bool:
        return self.has(component_id)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has(self, component_id: str, check_instance: bool = False) -> bool:
        """
        Whether the component is defined, or with ``check_instance`` built.
        """
        if check_instance:
            return component_id in self._components
        return component_id in self._definitions

    def get(self, component_id: str, throw_on_missing: bool = True) -> Any:
        """
        Return the shared instance of ``component_id``, building it if needed.

        Raises:
            EntryNotFoundError: Unknown id and ``throw_on_missing`` is set.
        """
        if component_id in self._components:
            return self._components[component_id]

        if component_id not in self._definitions:
            if throw_on_missing:
                raise EntryNotFoundError(
                    f"Unknown component ID: {component_id}",
                    identifier=component_id,
                )
            return None

        definition = self._definitions[component_id]
        if _is_prebuilt(definition):
            self._components[component_id] = definition
            return definition

        params = None
        if isinstance(definition, (list, tuple)):
            config = definition[0]
            if not isinstance(config, dict):
                config = {"class": config}
            if len(definition) > 1:
                params = definition[1]
            definition = dict(config)

        component = self._container.get(definition, params)
        self._components[component_id] = component
        logger.debug(
            "Component instantiated",
            component_id=component_id,
            class_name=reflection.class_name(component),
        )
        return component

    def get_components(self, return_definitions: bool = True) -> Dict[str, Any]:
        """Snapshot of the definitions, or of the built instances."""
        if return_definitions:
            return dict(self._definitions)
        return dict(self._components)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def set(self, component_id: str, definition: Any) -> None:
        """
        Register (or with ``None`` remove) a component definition.

        ``definition`` may be a class or dotted class path, a config map with
        a ``class`` entry, a ``[config, params]`` pair, a :class:`Definition`,
        a factory callable or :class:`Value`, or a ready object. Any built
        instance for ``component_id`` is discarded.

        Raises:
            InvalidConfigError: Config map without ``class`` or unsupported type.
        """
        self._components.pop(component_id, None)

        if definition is None:
            self._definitions.pop(component_id, None)
            return

        if isinstance(definition, Definition):
            definition = definition.dump_definition()

        if isinstance(definition, dict):
            if "class" not in definition:
                raise InvalidConfigError(
                    f'The configuration for the "{component_id}" component must contain a "class" element',
                    identifier=component_id,
                )
            self._definitions[component_id] = dict(definition)
        elif isinstance(definition, (list, tuple)):
            head = definition[0] if definition else None
            if not (
                (isinstance(head, dict) and "class" in head)
                or isinstance(head, str)
                or inspect.isclass(head)
            ):
                raise InvalidConfigError(
                    f'The configuration for the "{component_id}" component must start with a class '
                    f'or a config map containing a "class" element',
                    identifier=component_id,
                )
            self._definitions[component_id] = list(definition)
        elif isinstance(definition, _SCALAR_TYPES):
            raise InvalidConfigError(
                f'Unexpected configuration type for the "{component_id}" component: '
                f"{type(definition).__name__}",
                identifier=component_id,
            )
        else:
            self._definitions[component_id] = definition

        logger.debug("Component registered", component_id=component_id)

        if self.components_autoload_enabled:
            self._check_component_autoload(component_id)

    def clear(self, component_id: str) -> None:
        """Remove both the definition and the built instance."""
        self._definitions.pop(component_id, None)
        self._components.pop(component_id, None)

    def set_components(self, components: Mapping[str, Any]) -> None:
        """
        Register several components in dependency order.

        Config maps may declare ``depends_on`` (an id or a list of ids); the
        key is stripped before registration and the caller's mapping is left
        untouched. Nothing is registered when the declarations contain a cycle.

        Raises:
            InvalidConfigError: On circular ``depends_on`` declarations.
        """
        for component_id, definition in self._sort_components_by_dependencies(components):
            self.set(component_id, definition)

    def _sort_components_by_dependencies(
        self,
        components: Mapping[str, Any],
    ) -> List[Tuple[str, Any]]:
        entries: Dict[str, Any] = {}
        dependencies: Dict[str, List[str]] = {}

        for component_id, definition in components.items():
            if isinstance(definition, dict) and "depends_on" in definition:
                definition = dict(definition)
                declared = definition.pop("depends_on") or []
                if isinstance(declared, str):
                    declared = [declared]
                dependencies[component_id] = list(declared)
            entries[component_id] = definition

        order = sort_by_dependencies(list(entries), dependencies)
        return [(component_id, entries[component_id]) for component_id in order]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _check_component_autoload(self, component_id: str) -> Any:
        if component_id not in self._definitions or component_id in self._components:
            return None
        if self._is_autoload(component_id):
            return self.get(component_id)
        return None

    def _is_autoload(self, component_id: str) -> bool:
        cls = self._container.resolve_class_name(self._definitions[component_id], component_id)
        return cls is not None and issubclass(cls, ComponentAutoload)

    async def load_components(self) -> bool:
        """
        Initialize blocking components one by one, in registration order.

        Built components and not-yet-built ``ComponentAutoload`` components
        whose instance is a ``ComponentInitBlocking`` that is not initialized
        get their ``init_component`` awaited. A failing initialization is
        logged and counted as done; it never stops the sequence.

        Returns:
            Always ``True`` once every step has settled.
        """
        with tracer.start_as_current_span("graphwire.locator.load_components") as span:
            pending: List[Tuple[str, ComponentInitBlocking]] = []

            for component_id in list(self._definitions):
                if component_id in self._components:
                    component = self._components[component_id]
                elif self._is_autoload(component_id):
                    component = self.get(component_id)
                else:
                    continue

                if isinstance(component, ComponentInitBlocking) and not component.is_initialized:
                    pending.append((component_id, component))

            span.set_attribute("graphwire.components_pending", len(pending))
            if not pending:
                return True

            logger.info("Loading components", count=len(pending))

            def on_failure(index: int, error: Exception) -> None:
                logger.warning(
                    "Component initialization failed",
                    component_id=pending[index][0],
                    error=str(error),
                    error_type=type(error).__name__,
                )

            await all_in_order(
                [self._init_step(component_id, component) for component_id, component in pending],
                on_failure=on_failure,
            )

            logger.info("Components loaded", count=len(pending))
            return True

    def _init_step(self, component_id: str, component: ComponentInitBlocking):
        async def step() -> bool:
            async with LogContext(component_id=component_id):
                with tracer.start_as_current_span("graphwire.locator.init_component") as span:
                    span.set_attribute("graphwire.component_id", component_id)
                    async with warn_after(
                        self._init_warning_timeout,
                        lambda: self._warn_slow_init(component_id, component),
                    ):
                        await component.init_component()
            return True

        return step

    def _warn_slow_init(self, component_id: str, component: ComponentInitBlocking) -> None:
        if component.is_initialized:
            return
        logger.warning(
            "Component initialization is taking too long",
            component_id=component_id,
            class_name=reflection.class_name(component),
            timeout_seconds=self._init_warning_timeout,
        )
