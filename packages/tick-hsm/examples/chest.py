"""Treasure chest -- a locked chest as a hierarchical state machine.

Demonstrates:
- Enum states and triggers
- A substate (LOCKED inside CLOSED) inheriting its parent's transitions
- A guarded transition reading live game state
- Entry-from actions and a reentrant transition
- Handling rejected interactions instead of raising
- Exporting the transition graph

Run: python -m examples.chest
"""

from enum import Enum, auto

from tick_hsm import Machine, Registry, export_graph


class Chest(Enum):
    CLOSED = auto()
    OPENED = auto()
    LOCKED = auto()


class Use(Enum):
    OPEN = auto()
    CLOSE = auto()
    LOCK = auto()
    UNLOCK = auto()
    KICK = auto()


def main() -> None:
    print("=== Treasure Chest ===\n")
    inventory: set[str] = set()

    registry = Registry()
    registry.configure(Chest.CLOSED) \
        .permit(Use.OPEN, Chest.OPENED) \
        .permit(Use.LOCK, Chest.LOCKED)
    registry.configure(Chest.LOCKED) \
        .substate_of(Chest.CLOSED) \
        .permit_if(Use.UNLOCK, Chest.CLOSED, lambda: "key" in inventory) \
        .permit_reentry(Use.KICK) \
        .on_entry_from(Use.LOCK, lambda t: print("  *click*")) \
        .on_entry_from(Use.KICK, lambda t: print("  *thud* still locked"))
    registry.configure(Chest.OPENED) \
        .permit(Use.CLOSE, Chest.CLOSED) \
        .on_entry(lambda t: print("  the lid swings open"))

    chest = Machine(registry, Chest.LOCKED)
    chest.on_unhandled_trigger(lambda s, t: print(f"  can't {t.name} while {s.name}"))

    for use in (Use.UNLOCK, Use.KICK, None, Use.UNLOCK, Use.OPEN, Use.LOCK):
        if use is None:
            print("  (you find a key)")
            inventory.add("key")
            continue
        print(f"{use.name.lower()}:")
        chest.fire(use)
        print(f"  -> {chest.state.name}")

    print("\nGraph:")
    print(export_graph(registry))


if __name__ == "__main__":
    main()
