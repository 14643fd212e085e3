from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, List, Optional

from .errors import UnsupportedVariant

log = logging.getLogger(__name__)


@dataclass
class VariantRegistry:
    """
    Memoizing map from variant string to a calendar system.

    `get_or_create` is an idempotent compute-if-absent: two threads may both build a
    system on first use; `dict.setdefault` is atomic, so the first insert wins and
    every caller receives that one instance. The losing build is discarded.
    """
    _systems: Dict[str, Any] = field(default_factory=dict)
    factory: Optional[Callable[[str], Any]] = None

    def get(self, name: str) -> Any:
        system = self._systems.get(name)
        if system is not None:
            return system
        if self.factory is None:
            raise UnsupportedVariant(f"Unknown calendar variant '{name}'. Available: {self.list()}")
        return self.get_or_create(name, self.factory)

    def get_or_create(self, name: str, build: Callable[[str], Any]) -> Any:
        system = self._systems.get(name)
        if system is not None:
            log.debug("registry hit: %s", name)
            return system
        built = build(name)
        system = self._systems.setdefault(name, built)
        if system is built:
            log.debug("registry built: %s", name)
        else:
            log.debug("registry discarded concurrent build: %s", name)
        return system

    def list(self) -> List[str]:
        return sorted(self._systems.keys())

    def register(self, name: str, system: Any, *, overwrite: bool = False) -> None:
        if (not overwrite) and (name in self._systems):
            raise KeyError(f"Variant '{name}' already exists. Use overwrite=True to replace.")
        self._systems[name] = system

    def __contains__(self, name: object) -> bool:
        return name in self._systems
