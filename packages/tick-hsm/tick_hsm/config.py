"""Per-state configuration records and the fluent builder over them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tick_hsm.types import Action, DuplicateParentError, Guard, HierarchyCycleError

if TYPE_CHECKING:
    from tick_hsm.registry import Registry


@dataclass(frozen=True, slots=True)
class TransitionRule:
    """One permitted transition. ``guard`` is None for unconditional rules."""

    trigger: Any
    destination: Any
    guard: Guard | None = None
    reentrant: bool = False

    @property
    def guarded(self) -> bool:
        return self.guard is not None


@dataclass(frozen=True, slots=True)
class EntryAction:
    """Entry callback, optionally restricted to arrivals via ``trigger``."""

    action: Action
    trigger: Any = None
    filtered: bool = False

    def applies_to(self, trigger: Any) -> bool:
        return not self.filtered or self.trigger == trigger


@dataclass
class StateConfiguration:
    """Everything the registry knows about a single state.

    All sequences keep registration order. Rules for the same trigger are
    not merged; the first one whose guard passes wins.
    """

    state: Any
    parent: Any = None
    has_parent: bool = False
    entry_actions: list[EntryAction] = field(default_factory=list)
    exit_actions: list[Action] = field(default_factory=list)
    transitions: list[TransitionRule] = field(default_factory=list)

    def rules_for(self, trigger: Any) -> list[TransitionRule]:
        return [r for r in self.transitions if r.trigger == trigger]


class StateConfigurationBuilder:
    """Chainable view over one state's configuration.

    Every method appends and returns the builder, e.g.::

        registry.configure("locked") \\
            .substate_of("closed") \\
            .permit_if("unlock", "closed", lambda: has_key)
    """

    def __init__(self, registry: Registry, config: StateConfiguration) -> None:
        self._registry = registry
        self._config = config

    @property
    def state(self) -> Any:
        return self._config.state

    # --- Lifecycle actions ---

    def on_entry(self, action: Action) -> StateConfigurationBuilder:
        """Run ``action`` whenever the state is entered."""
        self._registry._check_mutable()
        self._config.entry_actions.append(EntryAction(action))
        return self

    def on_entry_from(self, trigger: Any, action: Action) -> StateConfigurationBuilder:
        """Run ``action`` only when the state is entered via ``trigger``."""
        self._registry._check_mutable()
        self._config.entry_actions.append(
            EntryAction(action, trigger=trigger, filtered=True)
        )
        return self

    def on_exit(self, action: Action) -> StateConfigurationBuilder:
        """Run ``action`` whenever the state is exited."""
        self._registry._check_mutable()
        self._config.exit_actions.append(action)
        return self

    # --- Transitions ---

    def permit(self, trigger: Any, destination: Any) -> StateConfigurationBuilder:
        """Permit ``trigger`` to move to ``destination`` unconditionally."""
        return self._add_rule(TransitionRule(trigger, destination))

    def permit_if(
        self, trigger: Any, destination: Any, guard: Guard,
    ) -> StateConfigurationBuilder:
        """Permit ``trigger`` only while ``guard()`` returns True."""
        return self._add_rule(TransitionRule(trigger, destination, guard))

    def permit_reentry(self, trigger: Any) -> StateConfigurationBuilder:
        """Self-transition on ``trigger`` that still runs exit and entry actions."""
        return self._add_rule(
            TransitionRule(trigger, self._config.state, reentrant=True)
        )

    def permit_reentry_if(self, trigger: Any, guard: Guard) -> StateConfigurationBuilder:
        """Reentrant self-transition on ``trigger`` while ``guard()`` returns True."""
        return self._add_rule(
            TransitionRule(trigger, self._config.state, guard, reentrant=True)
        )

    def _add_rule(self, rule: TransitionRule) -> StateConfigurationBuilder:
        self._registry._check_mutable()
        self._config.transitions.append(rule)
        return self

    # --- Hierarchy ---

    def substate_of(self, parent: Any) -> StateConfigurationBuilder:
        """Make this state a child of ``parent``.

        Raises DuplicateParentError on a second call and HierarchyCycleError
        if ``parent`` is this state or one of its descendants.
        """
        self._registry._check_mutable()
        config = self._config
        if config.has_parent:
            raise DuplicateParentError(config.state, config.parent)
        chain = [config.state]
        for ancestor in self._registry.ancestors_of(parent):
            chain.append(ancestor)
            if ancestor == config.state:
                raise HierarchyCycleError(config.state, chain)
        config.parent = parent
        config.has_parent = True
        return self
