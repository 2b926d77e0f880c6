"""Example: measure a walk between a few stations."""

from metro_schematic import DistanceMeasure

WAYPOINTS = [
    ("Nevsky prospekt", (59.9355, 30.3270)),
    ("Sennaya ploshchad", (59.9271, 30.3206)),
    ("Tekhnologicheskiy institut", (59.9165, 30.3190)),
    ("Frunzenskaya", (59.9063, 30.3175)),
]


def main() -> None:
    measure = DistanceMeasure()
    for name, location in WAYPOINTS:
        label = measure.add(location)
        print(f"{name}: {label}")

    measure.remove(1)
    print(f"\nSkipping {WAYPOINTS[1][0]}: {measure.last_label()}")


if __name__ == "__main__":
    main()
