"""
Rounding raw target weights to values a lifter can actually load.

The engine never hardcodes an equipment table: every strategy accepts a
``WeightRounder`` callable. ``round_to_increment`` is the default;
``make_plate_rounder`` builds one from the user's bar and plate inventory.
"""
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

WeightRounder = Callable[[float], float]

DEFAULT_INCREMENT = 2.5
DEFAULT_BAR_WEIGHT = 45.0
# Per-side plates (lbs)
STANDARD_PLATES: Tuple[float, ...] = (45.0, 25.0, 10.0, 5.0, 2.5, 1.25)


def round_to_increment(weight: float, increment: float = DEFAULT_INCREMENT) -> float:
    """Round to the nearest multiple of ``increment`` (half rounds up)."""
    if increment <= 0:
        return float(weight)
    steps = int(weight / increment + 0.5)
    return round(steps * increment, 2)


def round_to_half(weight: float) -> float:
    """Round to the nearest 0.5 unit."""
    return round_to_increment(weight, 0.5)


def make_increment_rounder(increment: float = DEFAULT_INCREMENT) -> WeightRounder:
    """Build a rounder for a fixed increment (dumbbells, machines)."""

    def _round(weight: float) -> float:
        return round_to_increment(weight, increment)

    return _round


@dataclass(frozen=True)
class PlateInventory:
    """A user's bar and available plates (per side)."""

    bar_weight: float = DEFAULT_BAR_WEIGHT
    plates: Tuple[float, ...] = field(default=STANDARD_PLATES)


def _achievable_per_side(plates: Tuple[float, ...], max_per_side: float) -> List[float]:
    """All per-side totals reachable with any count of each plate."""
    achievable = {0.0}
    for plate in plates:
        if plate <= 0:
            continue
        added = []
        for value in achievable:
            n = value
            while n + plate <= max_per_side + 0.01:
                n = round(n + plate, 4)
                added.append(n)
        achievable.update(added)
    return sorted(v for v in achievable if v > 0)


def round_to_loadable_weight(raw_weight: float, inventory: PlateInventory) -> float:
    """
    Round a raw barbell weight to the nearest loadable total.

    Loadable totals are ``bar + 2 * (per-side plate sum)``. Anything at or
    below the bar returns the bar; an empty plate list falls back to 2.5
    rounding.
    """
    bar = inventory.bar_weight
    if not raw_weight or raw_weight <= bar:
        return bar
    if not inventory.plates:
        return round_to_increment(raw_weight)

    per_side = (raw_weight - bar) / 2
    candidates = _achievable_per_side(inventory.plates, per_side + 25)
    if not candidates:
        return round_to_increment(raw_weight)

    nearest = min(candidates, key=lambda v: abs(v - per_side))
    return bar + nearest * 2


def make_plate_rounder(inventory: PlateInventory) -> WeightRounder:
    """Build a rounder that snaps to the inventory's loadable totals."""

    def _round(weight: float) -> float:
        return round_to_loadable_weight(weight, inventory)

    return _round


def is_barbell_exercise(exercise_name: str) -> bool:
    """Check whether an exercise is loaded on a barbell."""
    lower = exercise_name.lower()
    return "barbell" in lower or "bb-" in lower


def rounder_for_exercise(
    exercise_name: str,
    default: WeightRounder,
    inventory: Optional[PlateInventory] = None,
) -> WeightRounder:
    """Plate rounding for barbell lifts when an inventory is given, else ``default``."""
    if inventory is not None and is_barbell_exercise(exercise_name):
        return make_plate_rounder(inventory)
    return default
