"""Shared types, callable aliases and the error taxonomy for tick-hsm."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable


@dataclass(frozen=True, slots=True)
class Transition:
    """Describes the transition an action or listener is running under.

    ``is_reentry`` is True only for reentrant self-transitions.
    """

    source: Any
    destination: Any
    trigger: Any
    is_reentry: bool = False


Action = Callable[[Transition], None]
Guard = Callable[[], bool]
UnhandledTriggerHandler = Callable[[Any, Any], None]


class HSMError(Exception):
    """Base class for every error raised by tick-hsm."""


# --- Configuration time ---


class ConfigurationError(HSMError):
    """Raised when a registry is configured in an invalid way."""


class DuplicateConfigurationError(ConfigurationError):
    """Raised when the same state is configured twice."""

    def __init__(self, state: Any) -> None:
        self.state = state
        super().__init__(f"State {state!r} is already configured")


class DuplicateParentError(ConfigurationError):
    """Raised when ``substate_of`` is called a second time for one state."""

    def __init__(self, state: Any, parent: Any) -> None:
        self.state = state
        self.parent = parent
        super().__init__(
            f"State {state!r} already has parent {parent!r}"
        )


class HierarchyCycleError(ConfigurationError):
    """Raised when a parent chain loops back on itself."""

    def __init__(self, state: Any, chain: Iterable[Any]) -> None:
        self.state = state
        self.chain = tuple(chain)
        path = " -> ".join(repr(s) for s in self.chain)
        super().__init__(f"Hierarchy cycle through {state!r}: {path}")


class RegistryFrozenError(ConfigurationError):
    """Raised when a registry is mutated after machines started using it."""


# --- Fire time ---


class FireError(HSMError):
    """Base class for errors raised while firing a trigger."""

    def __init__(self, state: Any, trigger: Any, message: str) -> None:
        self.state = state
        self.trigger = trigger
        super().__init__(message)


class UnhandledTriggerError(FireError):
    """No transition matched and no unhandled-trigger handler is set."""

    def __init__(self, state: Any, trigger: Any) -> None:
        super().__init__(
            state, trigger,
            f"No valid transition from state {state!r} for trigger {trigger!r}",
        )


class GuardEvaluationError(FireError):
    """A guard raised while being evaluated.

    ``state`` is the state that declares the rule, which may be an ancestor
    of the current state. The original exception is ``__cause__``.
    """

    def __init__(self, state: Any, trigger: Any) -> None:
        super().__init__(
            state, trigger,
            f"Guard failed in state {state!r} for trigger {trigger!r}",
        )


class ActionError(FireError):
    """An entry action, exit action or transition listener raised.

    ``state`` is the state whose action failed (the destination for
    listeners) and ``phase`` is ``"entry"``, ``"exit"`` or ``"listener"``.
    The machine is left wherever the transition had got to; nothing is
    rolled back.
    """

    def __init__(self, state: Any, trigger: Any, phase: str) -> None:
        self.phase = phase
        super().__init__(
            state, trigger,
            f"{phase.capitalize()} action of state {state!r} failed "
            f"during trigger {trigger!r}",
        )


class ReentrantFireError(FireError):
    """``fire`` was called from inside an action of the same machine."""

    def __init__(self, state: Any, trigger: Any) -> None:
        super().__init__(
            state, trigger,
            f"Nested fire of {trigger!r} while a transition is in progress",
        )
