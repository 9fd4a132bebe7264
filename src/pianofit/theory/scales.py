from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import Key, MusicalNote, note_to_midi


class ScaleType(Enum):
    MAJOR = "major"
    MINOR = "minor"
    DORIAN = "dorian"
    PHRYGIAN = "phrygian"
    LYDIAN = "lydian"
    MIXOLYDIAN = "mixolydian"
    AEOLIAN = "aeolian"
    LOCRIAN = "locrian"

    @property
    def display_name(self) -> str:
        return SCALE_DISPLAY_NAMES[self]


# Whole/half step patterns, one entry per scale degree
SCALE_INTERVALS = {
    ScaleType.MAJOR: (2, 2, 1, 2, 2, 2, 1),
    ScaleType.MINOR: (2, 1, 2, 2, 1, 2, 2),
    ScaleType.DORIAN: (2, 1, 2, 2, 2, 1, 2),
    ScaleType.PHRYGIAN: (1, 2, 2, 2, 1, 2, 2),
    ScaleType.LYDIAN: (2, 2, 2, 1, 2, 2, 1),
    ScaleType.MIXOLYDIAN: (2, 2, 1, 2, 2, 1, 2),
    ScaleType.AEOLIAN: (2, 1, 2, 2, 1, 2, 2),
    ScaleType.LOCRIAN: (1, 2, 2, 1, 2, 2, 2),
}

SCALE_DISPLAY_NAMES = {
    ScaleType.MAJOR: "Major (Ionian)",
    ScaleType.MINOR: "Natural Minor",
    ScaleType.DORIAN: "Dorian",
    ScaleType.PHRYGIAN: "Phrygian",
    ScaleType.LYDIAN: "Lydian",
    ScaleType.MIXOLYDIAN: "Mixolydian",
    ScaleType.AEOLIAN: "Aeolian",
    ScaleType.LOCRIAN: "Locrian",
}


@dataclass(frozen=True)
class Scale:
    key: Key
    scale_type: ScaleType
    intervals: Tuple[int, ...]
    name: str

    def get_notes(self) -> List[MusicalNote]:
        """Seven degrees plus the octave, so the first and last notes match."""
        notes = [self.key]
        current = self.key
        for step in self.intervals:
            current = current.transpose(step)
            notes.append(current)
        return notes

    def get_midi_notes(self, start_octave: int) -> List[int]:
        """Ascending MIDI numbers, moving up an octave whenever the pitch class wraps past B."""
        midi_notes = []
        octave = start_octave
        previous = None
        for note in self.get_notes():
            if previous is not None and note.value < previous.value:
                octave += 1
            midi_notes.append(note_to_midi(note, octave))
            previous = note
        return midi_notes

    def get_full_sequence(self, start_octave: int) -> List[int]:
        """Up then back down, without repeating the top note."""
        ascending = self.get_midi_notes(start_octave)
        return ascending + list(reversed(ascending))[1:]

    def get_hand_sequence(self, start_octave: int, hand: HandSelection) -> List[int]:
        """
        Full up/down sequence for the selected hand.

        The left hand plays one octave below the right. For both hands the
        result interleaves the two lines as [left_1, right_1, left_2, right_2, ...].
        """
        if hand == HandSelection.RIGHT:
            return self.get_full_sequence(start_octave)
        if start_octave < 1:
            raise ValueError(f"start_octave must be at least 1 for the left hand, got {start_octave}")
        left = self.get_full_sequence(start_octave - 1)
        if hand == HandSelection.LEFT:
            return left
        right = self.get_full_sequence(start_octave)
        interleaved = []
        for left_note, right_note in zip(left, right):
            interleaved.extend([left_note, right_note])
        return interleaved


def get_scale(key: Key, scale_type: ScaleType) -> Scale:
    return Scale(
        key=key,
        scale_type=scale_type,
        intervals=SCALE_INTERVALS[scale_type],
        name=f"{key.display_name} {scale_type.display_name}",
    )
