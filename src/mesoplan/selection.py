"""Seeded, order-stable exercise selection.

The same (seed, muscle, training day) always maps to the same candidate,
independent of catalog iteration order, process, or hash randomization.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from .exercises import Exercise


def _stable_index(key: str, size: int) -> int:
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % size


def selection_key(seed: int, muscle: str, day_index: int) -> str:
    return f"{seed}|{muscle}|{day_index}"


def choose_exercise(
    candidates: Sequence[Exercise],
    *,
    seed: int,
    muscle: str,
    day_index: int,
) -> Exercise | None:
    """Pick one candidate deterministically; None when there are no candidates."""
    if not candidates:
        return None
    ordered = sorted(candidates, key=lambda ex: ex.exercise_id)
    return ordered[_stable_index(selection_key(seed, muscle, day_index), len(ordered))]
