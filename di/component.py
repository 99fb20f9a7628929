"""
GRAPHWIRE - Component Contracts

Marker and lifecycle contracts understood by the service locator:
- ComponentAutoload: instantiate as soon as the component is registered
  with an autoloading locator, and during ``load_components``
- ComponentInitBlocking: component needs an async setup step before it is
  ready
- ServiceLocatorAutoload: marks a locator that performs eager autoloading
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class ComponentAutoload:
    """Marker: the component is built eagerly instead of on first ``get``."""


class ComponentInitBlocking(ABC):
    """
    Component with an asynchronous initialization step.

    ``load_components`` awaits ``init_component`` for every instance whose
    ``is_initialized`` is still false.
    """

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        """Whether initialization has completed."""

    @abstractmethod
    async def init_component(self) -> None:
        """Perform the initialization; raising marks the attempt as failed."""


class ServiceLocatorAutoload:
    """Marker: the locator instantiates ``ComponentAutoload`` components on ``set``."""
