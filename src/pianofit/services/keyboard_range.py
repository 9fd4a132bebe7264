from dataclasses import dataclass
from typing import Iterable, List, Optional

from pianofit.models.practice import PracticeExercise, PracticeStep
from pianofit.theory.notes import PIANO_HIGHEST_MIDI, PIANO_LOWEST_MIDI, NotePosition, midi_to_position

WINDOW_KEYS = 49
# C2 to C6, shown when there is nothing to centre on
DEFAULT_WINDOW_START = 36


@dataclass(frozen=True)
class KeyboardRange:
    start_midi: int
    end_midi: int

    @property
    def key_count(self) -> int:
        return self.end_midi - self.start_midi + 1

    @property
    def start(self) -> NotePosition:
        return midi_to_position(self.start_midi)

    @property
    def end(self) -> NotePosition:
        return midi_to_position(self.end_midi)

    def contains(self, midi_number: int) -> bool:
        return self.start_midi <= midi_number <= self.end_midi


DEFAULT_KEYBOARD_RANGE = KeyboardRange(DEFAULT_WINDOW_START, DEFAULT_WINDOW_START + WINDOW_KEYS - 1)


def calculate_49_key_range(notes: Iterable[int]) -> KeyboardRange:
    """
    A 49-key window centred on the given notes.

    The window is centred on the midpoint of the lowest and highest note,
    shifted so both extremes are visible, then clamped to the 88-key piano
    while keeping its width. A span wider than the window starts at the
    lowest note.
    """
    notes = list(notes)
    if not notes:
        return DEFAULT_KEYBOARD_RANGE

    lowest, highest = min(notes), max(notes)
    width = WINDOW_KEYS - 1
    if highest - lowest > width:
        start = lowest
    else:
        start = (lowest + highest) // 2 - width // 2
        if lowest < start:
            start = lowest
        if highest > start + width:
            start = highest - width

    start = max(PIANO_LOWEST_MIDI, min(start, PIANO_HIGHEST_MIDI - width))
    return KeyboardRange(start, start + width)


def notes_for_range(exercise: Optional[PracticeExercise]) -> List[int]:
    """Every distinct note the exercise can ask for, lowest first."""
    if exercise is None:
        return []
    return sorted(exercise.all_notes())


def range_for_exercise(exercise: Optional[PracticeExercise]) -> KeyboardRange:
    return calculate_49_key_range(notes_for_range(exercise))


def highlight_for_step(step: Optional[PracticeStep]) -> List[NotePosition]:
    if step is None:
        return []
    return [midi_to_position(note) for note in step.notes]
