"""Peak simultaneous demand across simulated time instants."""

from ..models import RoomStats


def bucket_demand_kwh(active_rooms: set[int], rooms: dict[int, RoomStats]) -> float:
    """Sum the rated capacity of the rooms heating at one instant."""
    total = 0.0
    for room_id in active_rooms:
        stats = rooms.get(room_id)
        if stats is not None:
            total += stats.rated_energy_kwh
    return total


def peak_simultaneous_kwh(buckets: dict[int, set[int]], rooms: dict[int, RoomStats]) -> float:
    """Maximum summed rated capacity of simultaneously heating rooms.

    Uses each room's rated capacity rather than its measured draw.
    Returns 0.0 if no heater was ever on at a known simulated time.
    """
    peak = 0.0
    for active_rooms in buckets.values():
        total = bucket_demand_kwh(active_rooms, rooms)
        if total > peak:
            peak = total
    return peak


def peak_instant(buckets: dict[int, set[int]], rooms: dict[int, RoomStats]) -> int | None:
    """Earliest simulated time at which the peak demand occurred."""
    best_time = None
    best = 0.0
    for sim_time in sorted(buckets):
        total = bucket_demand_kwh(buckets[sim_time], rooms)
        if total > best:
            best = total
            best_time = sim_time
    return best_time
