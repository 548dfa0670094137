"""Machine - trigger dispatch and lifecycle sequencing over a shared Registry."""
from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable

from tick_hsm.config import StateConfiguration, TransitionRule
from tick_hsm.registry import Registry
from tick_hsm.types import (
    Action,
    ActionError,
    GuardEvaluationError,
    ReentrantFireError,
    Transition,
    UnhandledTriggerError,
    UnhandledTriggerHandler,
)

logger = logging.getLogger(__name__)

NESTED_QUEUE = "queue"
NESTED_RAISE = "raise"
_NESTED_POLICIES = (NESTED_QUEUE, NESTED_RAISE)


class Machine:
    """A single running instance over a shared, frozen Registry.

    Transitions are resolved innermost state first, then in registration
    order. Exit actions run from the current state up to (not including)
    the least common ancestor, then ``state`` is switched, then entry
    actions run from just below the ancestor down to the destination.

    Failures are not rolled back. If an action raises, ``fire`` raises
    ActionError and ``state`` stays wherever the transition had got to:
    still the source if an exit action failed, already the destination if
    an entry action failed. A raising ``on_transitioned`` listener is
    reported the same way with ``phase="listener"``, after the transition
    has completed. Any queued nested triggers are dropped.

    ``nested_fire`` decides what ``fire`` does when called from inside one
    of this machine's actions: ``"queue"`` runs the trigger FIFO once the
    current transition has fully completed, ``"raise"`` raises
    ReentrantFireError.
    """

    def __init__(
        self, registry: Registry, initial: Any, nested_fire: str = NESTED_QUEUE,
    ) -> None:
        if nested_fire not in _NESTED_POLICIES:
            raise ValueError(
                f"nested_fire must be one of {_NESTED_POLICIES}, got {nested_fire!r}"
            )
        registry.freeze()
        self._registry = registry
        self._state = initial
        self._nested_fire = nested_fire
        self._unhandled: UnhandledTriggerHandler | None = None
        self._listeners: list[Callable[[Transition], None]] = []
        self._pending: deque[Any] = deque()
        self._firing: bool = False

    @property
    def state(self) -> Any:
        """The current (innermost) state."""
        return self._state

    @property
    def registry(self) -> Registry:
        """The shared, frozen registry this machine runs over."""
        return self._registry

    def is_in_state(self, state: Any) -> bool:
        """True if ``state`` is the current state or one of its ancestors."""
        return self._registry.is_in_state(self._state, state)

    # --- Hooks ---

    def on_unhandled_trigger(self, handler: UnhandledTriggerHandler | None) -> None:
        """Call ``handler(state, trigger)`` instead of raising UnhandledTriggerError.

        Replaces any previous handler. ``None`` restores the raising default.
        """
        self._unhandled = handler

    def on_transitioned(self, listener: Callable[[Transition], None]) -> None:
        """Call ``listener(transition)`` after every completed transition."""
        self._listeners.append(listener)

    # --- Queries ---

    def can_fire(self, trigger: Any) -> bool:
        """Would ``fire(trigger)`` take a transition? Evaluates guards only."""
        return self._resolve(trigger) is not None

    def permitted_triggers(self) -> list[Any]:
        """Distinct triggers that can fire from the current state, in resolution order."""
        permitted: list[Any] = []
        for state in self._registry.ancestors_of(self._state):
            config = self._registry.get(state)
            if config is None:
                continue
            for rule in config.transitions:
                if rule.trigger in permitted:
                    continue
                if self._guard_passes(state, rule):
                    permitted.append(rule.trigger)
        return permitted

    # --- Firing ---

    def fire(self, trigger: Any) -> None:
        """Fire ``trigger`` from the current state.

        Raises UnhandledTriggerError when nothing matches and no handler is
        set, GuardEvaluationError when a guard raises, ActionError when an
        entry action, exit action or transition listener raises.
        """
        if self._firing:
            if self._nested_fire == NESTED_RAISE:
                raise ReentrantFireError(self._state, trigger)
            logger.debug("Queueing nested trigger %r in state %r", trigger, self._state)
            self._pending.append(trigger)
            return

        self._firing = True
        try:
            self._fire_one(trigger)
            while self._pending:
                self._fire_one(self._pending.popleft())
        finally:
            self._pending.clear()
            self._firing = False

    def _fire_one(self, trigger: Any) -> None:
        source = self._state
        rule = self._resolve(trigger)
        if rule is None:
            if self._unhandled is None:
                raise UnhandledTriggerError(source, trigger)
            logger.debug("Unhandled trigger %r in state %r", trigger, source)
            self._unhandled(source, trigger)
            return

        destination = rule.destination
        if destination == source and not rule.reentrant:
            logger.debug("Trigger %r keeps state %r", trigger, source)
            return

        transition = Transition(source, destination, trigger, is_reentry=rule.reentrant)
        if rule.reentrant:
            # The destination itself is exited and entered again.
            boundary = self._registry.parent_of(destination)
        else:
            boundary = self._registry.least_common_ancestor(source, destination)
        logger.debug(
            "Transition %r --%r--> %r (boundary %r)", source, trigger, destination, boundary,
        )

        for state in self._registry.ancestors_of(source):
            if state == boundary:
                break
            config = self._registry.get(state)
            if config is not None:
                self._run_exit(config, transition)

        self._state = destination

        entering: list[Any] = []
        for state in self._registry.ancestors_of(destination):
            if state == boundary:
                break
            entering.append(state)
        for state in reversed(entering):
            config = self._registry.get(state)
            if config is not None:
                self._run_entry(config, transition)

        for listener in self._listeners:
            _invoke(listener, destination, transition, "listener")

    # --- Internals ---

    def _resolve(self, trigger: Any) -> TransitionRule | None:
        for state in self._registry.ancestors_of(self._state):
            config = self._registry.get(state)
            if config is None:
                continue
            for rule in config.rules_for(trigger):
                if self._guard_passes(state, rule):
                    return rule
        return None

    def _guard_passes(self, owner: Any, rule: TransitionRule) -> bool:
        if rule.guard is None:
            return True
        try:
            return bool(rule.guard())
        except Exception as exc:
            raise GuardEvaluationError(owner, rule.trigger) from exc

    def _run_exit(self, config: StateConfiguration, transition: Transition) -> None:
        for action in config.exit_actions:
            _invoke(action, config.state, transition, "exit")

    def _run_entry(self, config: StateConfiguration, transition: Transition) -> None:
        for entry in config.entry_actions:
            if entry.applies_to(transition.trigger):
                _invoke(entry.action, config.state, transition, "entry")


def _invoke(action: Action, state: Any, transition: Transition, phase: str) -> None:
    try:
        action(transition)
    except ReentrantFireError:
        raise
    except Exception as exc:
        raise ActionError(state, transition.trigger, phase) from exc
