"""Game loop -- activating machines from a fixed-rate loop.

Demonstrates:
- One shared Registry driving many machines (one per entity)
- Feeding triggers from an outer tick loop
- Follow-up triggers fired from entry actions (queued, not nested)
- Publishing transitions to an event sink via on_transitioned

Run: python -m examples.game_loop
"""

from tick_hsm import Machine, Registry, Transition


def main() -> None:
    print("=== Game Loop ===\n")
    events: list[tuple[int, Transition]] = []
    machines: dict[int, Machine] = {}

    registry = Registry()
    registry.configure("dormant").permit("wake", "booting")
    registry.configure("awake").permit("sleep", "dormant")
    registry.configure("booting") \
        .substate_of("awake") \
        .permit("booted", "patrolling")
    registry.configure("patrolling").substate_of("awake")

    for eid in range(3):
        machine = Machine(registry, "dormant")
        machine.on_transitioned(lambda t, eid=eid: events.append((eid, t)))
        machines[eid] = machine

    # Entities boot instantly: entering "booting" fires the follow-up.
    for machine in machines.values():
        machine.on_transitioned(
            lambda t, m=machine: m.fire("booted") if t.destination == "booting" else None
        )

    schedule = {1: {0: "wake"}, 2: {1: "wake", 2: "wake"}, 4: {0: "sleep"}}
    for tick in range(1, 6):
        for eid, trigger in schedule.get(tick, {}).items():
            machines[eid].fire(trigger)
        summary = "  ".join(f"{eid}:{m.state:<10}" for eid, m in machines.items())
        print(f"  tick {tick}  |  {summary}")

    print("\nEvents:")
    for eid, t in events:
        print(f"  entity {eid}: {t.source} --{t.trigger}--> {t.destination}")


if __name__ == "__main__":
    main()
