"""Deterministic text and Graphviz exports of a Registry."""
from __future__ import annotations

from enum import Enum
from typing import Any

from tick_hsm.registry import Registry


def label(value: Any) -> str:
    """Render a state or trigger id. Enum members render by name."""
    if isinstance(value, Enum):
        return value.name
    return str(value)


def export_graph(registry: Registry) -> str:
    """Return the registry as plain text, nodes first, then edges.

    Node lines are ``state`` or ``state [parent: parent]``; edge lines are
    ``source --trigger--> destination`` with ``[guarded]`` appended to the
    trigger when the rule has a guard. Both follow insertion order, so an
    unmodified registry always exports the same text.

    >>> r = Registry()
    >>> _ = r.configure("closed").permit("open", "opened")
    >>> _ = r.configure("locked").substate_of("closed")
    >>> print(export_graph(r))
    closed
    locked [parent: closed]
    closed --open--> opened
    """
    registry.freeze()
    lines: list[str] = []
    states = registry.states()
    for state in states:
        config = registry.configuration(state)
        if config.has_parent:
            lines.append(f"{label(state)} [parent: {label(config.parent)}]")
        else:
            lines.append(label(state))
    for state in states:
        for rule in registry.configuration(state).transitions:
            guard = "[guarded]" if rule.guarded else ""
            lines.append(
                f"{label(state)} --{label(rule.trigger)}{guard}--> "
                f"{label(rule.destination)}"
            )
    return "\n".join(lines)


def export_dot(registry: Registry, name: str = "hsm") -> str:
    """Return the registry as a Graphviz digraph.

    Substates are drawn inside nested ``cluster_N`` subgraphs named after
    their parent. Unconfigured parents still get a cluster.
    """
    registry.freeze()
    nodes: list[Any] = []
    children: dict[int, list[Any]] = {}
    parent_index: dict[int, int] = {}

    def index_of(state: Any) -> int:
        for i, known in enumerate(nodes):
            if known == state:
                return i
        nodes.append(state)
        return len(nodes) - 1

    for state in registry.states():
        i = index_of(state)
        config = registry.configuration(state)
        if config.has_parent:
            p = index_of(config.parent)
            parent_index[i] = p
            children.setdefault(p, []).append(i)

    lines = [f"digraph {_quote(name)} {{", "  compound=true;"]

    def render(i: int, depth: int) -> None:
        pad = "  " * depth
        if i in children:
            lines.append(f"{pad}subgraph cluster_{i} {{")
            lines.append(f"{pad}  label={_quote(label(nodes[i]))};")
            lines.append(f"{pad}  {_quote(label(nodes[i]))};")
            for child in children[i]:
                render(child, depth + 1)
            lines.append(f"{pad}}}")
        else:
            lines.append(f"{pad}{_quote(label(nodes[i]))};")

    for i in range(len(nodes)):
        if i not in parent_index:
            render(i, 1)

    for state in registry.states():
        for rule in registry.configuration(state).transitions:
            text = label(rule.trigger)
            if rule.guarded:
                text += " [guarded]"
            lines.append(
                f"  {_quote(label(state))} -> {_quote(label(rule.destination))} "
                f"[label={_quote(text)}];"
            )
    lines.append("}")
    return "\n".join(lines)


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
