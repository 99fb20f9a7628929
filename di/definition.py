"""
GRAPHWIRE - Definition Builder

Fluent helper for composing container / service locator definitions.

Usage:
    Definition.of(Database).with_params(["sqlite://"])
    Definition.create().of_class(Cache).with_config({"ttl": 60})
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

ClassRef = Union[type, str]


class Definition:
    """Class reference plus configuration and constructor parameters."""

    def __init__(self, class_name: Optional[ClassRef] = None):
        self.params: List[Any] = []
        self.config: Dict[str, Any] = {}
        self.class_name: Optional[ClassRef] = None
        if class_name is not None:
            self.of_class(class_name)

    def of_class(self, class_name: ClassRef) -> "Definition":
        self.class_name = class_name
        self.config["class"] = class_name
        return self

    def with_config(self, config: Optional[Dict[str, Any]] = None) -> "Definition":
        """Replace the config; the class reference survives unless overridden."""
        self.config = dict(config or {})
        if "class" in self.config:
            self.class_name = self.config["class"]
        elif self.class_name is not None:
            self.config["class"] = self.class_name
        return self

    def with_params(self, params: Optional[Sequence[Any]] = None) -> "Definition":
        self.params = list(params or [])
        return self

    def is_valid(self) -> bool:
        return bool(self.config) and "class" in self.config

    def dump_definition(self) -> Union[Dict[str, Any], List[Any]]:
        """
        Normalized form accepted by ``Container.set`` and ``ServiceLocator.set``.

        Returns the config map when there are no params, ``[config, params]``
        otherwise, and an empty dict for an invalid definition.
        """
        if not self.is_valid():
            return {}
        if not self.params:
            return dict(self.config)
        return [dict(self.config), list(self.params)]

    @classmethod
    def of(cls, class_name: Optional[ClassRef] = None) -> "Definition":
        return cls(class_name)

    @classmethod
    def create(cls) -> "Definition":
        return cls()

    def __repr__(self) -> str:
        return f"Definition(class_name={self.class_name!r}, params={self.params!r})"
