"""tick-hsm - Hierarchical state machines with guarded transitions."""
from __future__ import annotations

from tick_hsm.config import StateConfiguration, StateConfigurationBuilder, TransitionRule
from tick_hsm.graph import export_dot, export_graph
from tick_hsm.machine import Machine
from tick_hsm.registry import Registry
from tick_hsm.types import (
    ActionError,
    ConfigurationError,
    DuplicateConfigurationError,
    DuplicateParentError,
    FireError,
    GuardEvaluationError,
    HierarchyCycleError,
    HSMError,
    ReentrantFireError,
    RegistryFrozenError,
    Transition,
    UnhandledTriggerError,
)

__all__ = [
    "Registry",
    "Machine",
    "StateConfiguration",
    "StateConfigurationBuilder",
    "TransitionRule",
    "Transition",
    "export_graph",
    "export_dot",
    "HSMError",
    "ConfigurationError",
    "DuplicateConfigurationError",
    "DuplicateParentError",
    "HierarchyCycleError",
    "RegistryFrozenError",
    "FireError",
    "UnhandledTriggerError",
    "GuardEvaluationError",
    "ActionError",
    "ReentrantFireError",
]
