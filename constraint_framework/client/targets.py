"""
Match-target providers.

Each target contributes the schema of the ``match`` field for every
constraint kind whose template names it. The registry maps target names to
providers and is filled once, before templates are compiled.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Protocol, Union

import structlog

from ..apiextensions.types import JSONSchemaProps
from .errors import TargetNotFoundError

logger = structlog.get_logger()


class MatchSchemaProvider(Protocol):
    """Supplies the ``spec.match`` schema for one target."""

    def get_name(self) -> str:
        ...

    def match_schema(self) -> JSONSchemaProps:
        ...


class StaticMatchSchemaProvider:
    """A provider whose match schema is fixed when it is created."""

    def __init__(self, name: str, schema: Union[JSONSchemaProps, Dict[str, Any]]):
        if isinstance(schema, dict):
            schema = JSONSchemaProps.model_validate(copy.deepcopy(schema))
        self._name = name
        self._schema = schema

    def get_name(self) -> str:
        return self._name

    def match_schema(self) -> JSONSchemaProps:
        # Callers embed the result in a new definition; hand out a fresh copy.
        return self._schema.deep_copy()


class TargetRegistry:
    """Name-to-provider lookup for match targets."""

    def __init__(self) -> None:
        self._providers: Dict[str, MatchSchemaProvider] = {}
        self._lock = threading.Lock()

    def register(self, provider: MatchSchemaProvider) -> None:
        name = provider.get_name()
        with self._lock:
            if name in self._providers:
                raise ValueError(f"target {name} is already registered")
            self._providers[name] = provider
        logger.info("Registered match target", target=name)

    def get(self, name: str) -> MatchSchemaProvider:
        """Return the provider for ``name``.

        Raises:
            TargetNotFoundError: If no provider is registered under ``name``.
        """
        with self._lock:
            provider = self._providers.get(name)
        if provider is None:
            raise TargetNotFoundError(name)
        return provider

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._providers)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._providers
