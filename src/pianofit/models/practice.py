from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Set, Tuple


class PracticeMode(Enum):
    SCALES = "scales"
    CHORDS_BY_KEY = "chordsByKey"
    CHORDS_BY_TYPE = "chordsByType"
    ARPEGGIOS = "arpeggios"
    CHORD_PROGRESSIONS = "chordProgressions"


class StepType(Enum):
    SEQUENTIAL = "sequential"  # one note
    PAIRED = "paired"  # two notes, one per hand, any order
    SIMULTANEOUS = "simultaneous"  # exact chord, no extra notes


@dataclass(frozen=True)
class PracticeStep:
    notes: Tuple[int, ...]
    step_type: StepType
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if not self.notes:
            raise ValueError("PracticeStep requires at least one note")
        # Accept any sequence but store a tuple so the step stays immutable
        object.__setattr__(self, "notes", tuple(self.notes))
        if self.step_type == StepType.SEQUENTIAL and len(self.notes) != 1:
            raise ValueError(f"Sequential step expects exactly one note, got {len(self.notes)}")
        if self.step_type == StepType.PAIRED and len(self.notes) != 2:
            raise ValueError(f"Paired step expects exactly two notes, got {len(self.notes)}")

    @property
    def note_set(self) -> Set[int]:
        return set(self.notes)


@dataclass(frozen=True)
class PracticeExercise:
    steps: Tuple[PracticeStep, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def is_empty(self) -> bool:
        return not self.steps

    def __len__(self) -> int:
        return len(self.steps)

    def all_notes(self) -> Set[int]:
        notes: Set[int] = set()
        for step in self.steps:
            notes.update(step.notes)
        return notes
