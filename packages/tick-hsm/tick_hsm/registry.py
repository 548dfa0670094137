"""Registry - state configurations plus hierarchy queries over them."""
from __future__ import annotations

from typing import Any, Iterator

from tick_hsm.config import StateConfiguration, StateConfigurationBuilder
from tick_hsm.types import (
    DuplicateConfigurationError,
    HierarchyCycleError,
    RegistryFrozenError,
)


class Registry:
    """Insertion-ordered map of state -> StateConfiguration.

    Parent links are stored as state keys, never as object references, and
    ancestry is computed by walking them. A registry is shared read-only by
    every Machine built from it; it freezes the first time one is built,
    fires, or exports, and any later configuration raises
    RegistryFrozenError.
    """

    def __init__(self) -> None:
        self._configs: dict[Any, StateConfiguration] = {}
        self._frozen: bool = False

    # --- Configuration ---

    def configure(self, state: Any) -> StateConfigurationBuilder:
        """Start configuring ``state``. Raises DuplicateConfigurationError if seen."""
        self._check_mutable()
        if state in self._configs:
            raise DuplicateConfigurationError(state)
        config = StateConfiguration(state)
        self._configs[state] = config
        return StateConfigurationBuilder(self, config)

    def freeze(self) -> None:
        """Reject any further configuration. Idempotent."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """True once a machine was built or the registry was exported."""
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                "Registry is frozen: configure every state before using it"
            )

    # --- Queries ---

    def __contains__(self, state: Any) -> bool:
        return state in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    def states(self) -> list[Any]:
        """Configured states in insertion order."""
        return list(self._configs)

    def configuration(self, state: Any) -> StateConfiguration:
        """Return the configuration for ``state``. Raises KeyError if unconfigured."""
        return self._configs[state]

    def get(self, state: Any) -> StateConfiguration | None:
        """Return the configuration for ``state``, or None if unconfigured."""
        return self._configs.get(state)

    # --- Hierarchy ---

    def parent_of(self, state: Any) -> Any:
        """Return the parent of ``state``, or None for roots and unconfigured states."""
        config = self._configs.get(state)
        if config is None or not config.has_parent:
            return None
        return config.parent

    def ancestors_of(self, state: Any) -> Iterator[Any]:
        """Yield ``state`` and then each ancestor up to its root."""
        seen: list[Any] = []
        current = state
        while True:
            if current in seen:
                seen.append(current)
                raise HierarchyCycleError(state, seen)
            seen.append(current)
            yield current
            config = self._configs.get(current)
            if config is None or not config.has_parent:
                return
            current = config.parent

    def is_in_state(self, current: Any, queried: Any) -> bool:
        """True if ``queried`` is ``current`` or one of its ancestors."""
        return any(s == queried for s in self.ancestors_of(current))

    def is_descendant_of(self, state: Any, ancestor: Any) -> bool:
        """True if ``ancestor`` is a strict ancestor of ``state``."""
        chain = self.ancestors_of(state)
        next(chain)
        return any(s == ancestor for s in chain)

    def least_common_ancestor(self, a: Any, b: Any) -> Any:
        """Nearest state shared by both ancestor chains, or None if disjoint."""
        chain_b = list(self.ancestors_of(b))
        for candidate in self.ancestors_of(a):
            if candidate in chain_b:
                return candidate
        return None
