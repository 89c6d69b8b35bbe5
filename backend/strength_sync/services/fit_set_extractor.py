"""Heuristic extraction of strength sets from FIT activity files.

This is deliberately not a FIT decoder. It does not follow the
definition/data message framing; it slides a small window over the record
area one byte at a time and keeps every window whose fields look like a
strength ``set`` record:

    offset + 0   record header (must be a data message, bit 0x40 clear)
    offset + 1   repetitions                      uint8
    offset + 2   weight, tenths of a kilogram     uint16 little-endian
    offset + 5   exercise category                uint8

Overlapping windows are all considered because the real message
boundaries are unknown here. The plausibility bounds below are what keeps
false positives down; they stay in place even if this is ever replaced by
a full decoder behind the same ``extract_sets`` contract.

Input is untrusted vendor data, so nothing in this module raises for any
bytes-like buffer. The worst case is an empty result.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from strength_sync.services.exercise_taxonomy import MAX_STRENGTH_CATEGORY, resolve_exercise_name

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]

DEFINITION_MESSAGE_FLAG = 0x40

REPS_OFFSET = 1
WEIGHT_OFFSET = 2
CATEGORY_OFFSET = 5

# Scanning stops this many bytes before the end: the 2-byte file CRC plus
# room for the widest window read.
TRAILER_SIZE = 10

MIN_REPS = 1
MAX_REPS = 100
MAX_WEIGHT_TENTHS_KG = 5000  # 500 kg


@dataclass(frozen=True)
class ExtractedSet:
    """One accepted candidate set record."""

    offset: int
    category: int
    reps: int
    weight_kg: float
    exercise: Optional[int] = None

    @property
    def exercise_name(self) -> str:
        return resolve_exercise_name(self.category, self.exercise)


@dataclass
class ExtractedExercise:
    """Sets for one exercise name, in file order."""

    name: str
    reps: list[int] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)

    @property
    def sets(self) -> int:
        return len(self.reps)

    def add(self, reps: int, weight_kg: float) -> None:
        self.reps.append(reps)
        self.weights.append(weight_kg)

    def to_dict(self) -> dict:
        return {
            "exerciseName": self.name,
            "sets": self.sets,
            "reps": list(self.reps),
            "weight": list(self.weights),
        }


def header_size(buffer: Buffer) -> Optional[int]:
    """Length of the file header, read from its first byte.

    Returns None when the buffer is empty or shorter than the header it
    claims to have.
    """
    if len(buffer) == 0:
        return None
    size = buffer[0]
    if size > len(buffer):
        return None
    return size


def _read_candidate(buffer: Buffer, offset: int) -> Optional[ExtractedSet]:
    if buffer[offset] & DEFINITION_MESSAGE_FLAG:
        return None

    reps = buffer[offset + REPS_OFFSET]
    weight = buffer[offset + WEIGHT_OFFSET] | (buffer[offset + WEIGHT_OFFSET + 1] << 8)
    category = buffer[offset + CATEGORY_OFFSET]

    if not MIN_REPS <= reps <= MAX_REPS:
        return None
    if not 0 <= weight <= MAX_WEIGHT_TENTHS_KG:
        return None
    if category > MAX_STRENGTH_CATEGORY:
        return None

    return ExtractedSet(
        offset=offset,
        category=category,
        reps=reps,
        weight_kg=weight / 10,
    )


def scan_sets(buffer: Buffer) -> Iterator[ExtractedSet]:
    """Yield every accepted candidate set in byte order."""
    start = header_size(buffer)
    if start is None:
        return

    end = len(buffer) - TRAILER_SIZE
    for offset in range(start, end):
        candidate = _read_candidate(buffer, offset)
        if candidate is not None:
            yield candidate


def extract_sets(buffer: Buffer) -> dict[str, ExtractedExercise]:
    """Group accepted sets by exercise name.

    The returned dict keeps first-seen order of exercises, and each
    exercise keeps its sets in scan order.
    """
    exercises: dict[str, ExtractedExercise] = {}
    for found in scan_sets(buffer):
        name = found.exercise_name
        if name not in exercises:
            exercises[name] = ExtractedExercise(name=name)
        exercises[name].add(found.reps, found.weight_kg)

    logger.debug(
        f"Scanned {len(buffer)} bytes: "
        f"{sum(e.sets for e in exercises.values())} sets across {len(exercises)} exercises"
    )
    return exercises
