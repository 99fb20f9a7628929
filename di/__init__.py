"""
GRAPHWIRE - Dependency Injection Module

Object-graph construction and component wiring:
- Container: definition registry, alias resolution, reflection-driven
  construction and singleton caching
- ServiceLocator: named components, ``depends_on`` ordering and
  sequential async initialization
- Injection: strict and polymorphic rule tables applied after construction

Usage:
    from di import Container, ServiceLocator, Definition

    container = Container()
    container.set(Mailer, SmtpMailer)
    container.set_singleton("db", Definition.of(Database).with_params(["sqlite://"]))

    locator = ServiceLocator(container)
    locator.set_components({
        "db": "db",
        "reports": {"class": ReportService, "depends_on": "db"},
    })
    await locator.load_components()
"""

from di.component import (
    ComponentAutoload,
    ComponentInitBlocking,
    ServiceLocatorAutoload,
)
from di.container import (
    Container,
    get_default_container,
    normalize_params,
    set_default_container,
)
from di.definition import Definition
from di.injection import (
    AssignProperty,
    InjectionPossible,
    InjectionPossibleMixin,
    InjectorMixin,
    InvokeSetter,
    match_rule,
    parse_binding,
)
from di.service_locator import ServiceLocator, sort_by_dependencies
from di.value import Value

__all__ = [
    # ========================================================================
    # CONTAINER
    # ========================================================================
    "Container",
    "get_default_container",
    "set_default_container",
    "normalize_params",
    "Definition",
    "Value",

    # ========================================================================
    # SERVICE LOCATOR
    # ========================================================================
    "ServiceLocator",
    "sort_by_dependencies",
    "ComponentAutoload",
    "ComponentInitBlocking",
    "ServiceLocatorAutoload",

    # ========================================================================
    # INJECTION
    # ========================================================================
    "AssignProperty",
    "InvokeSetter",
    "InjectionPossible",
    "InjectionPossibleMixin",
    "InjectorMixin",
    "match_rule",
    "parse_binding",
]
