from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import SEMITONES_PER_OCTAVE, MusicalNote, note_to_midi


class ArpeggioType(Enum):
    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    AUGMENTED = "augmented"
    DOMINANT7 = "dominant7"
    MINOR7 = "minor7"
    MAJOR7 = "major7"


class ArpeggioOctaves(Enum):
    ONE = 1
    TWO = 2


# Chord tones up to and including the octave
ARPEGGIO_INTERVALS = {
    ArpeggioType.MAJOR: (0, 4, 7, 12),
    ArpeggioType.MINOR: (0, 3, 7, 12),
    ArpeggioType.DIMINISHED: (0, 3, 6, 12),
    ArpeggioType.AUGMENTED: (0, 4, 8, 12),
    ArpeggioType.DOMINANT7: (0, 4, 7, 10, 12),
    ArpeggioType.MINOR7: (0, 3, 7, 10, 12),
    ArpeggioType.MAJOR7: (0, 4, 7, 11, 12),
}

ARPEGGIO_NAMES = {
    ArpeggioType.MAJOR: "Major",
    ArpeggioType.MINOR: "Minor",
    ArpeggioType.DIMINISHED: "Diminished",
    ArpeggioType.AUGMENTED: "Augmented",
    ArpeggioType.DOMINANT7: "Dominant 7th",
    ArpeggioType.MINOR7: "Minor 7th",
    ArpeggioType.MAJOR7: "Major 7th",
}


@dataclass(frozen=True)
class Arpeggio:
    root_note: MusicalNote
    arpeggio_type: ArpeggioType
    octaves: ArpeggioOctaves
    intervals: Tuple[int, ...]
    name: str

    def get_notes(self) -> List[MusicalNote]:
        return [self.root_note.transpose(interval) for interval in self.intervals]

    def get_midi_notes(self, start_octave: int) -> List[int]:
        """One octave of the arpeggio, root to root."""
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
        """Up across the whole span and back down, without repeating the top note."""
        ascending = self.get_midi_notes(start_octave)
        if self.octaves == ArpeggioOctaves.TWO:
            ascending = ascending + [note + SEMITONES_PER_OCTAVE for note in ascending[1:]]
        return ascending + list(reversed(ascending))[1:]

    def get_hand_sequence(self, start_octave: int, hand: HandSelection) -> List[int]:
        if hand == HandSelection.RIGHT:
            return self.get_full_sequence(start_octave)
        if start_octave < 1:
            raise ValueError(f"start_octave must be at least 1 for the left hand, got {start_octave}")
        left = self.get_full_sequence(start_octave - 1)
        if hand == HandSelection.LEFT:
            return left
        right = self.get_full_sequence(start_octave)
        paired = []
        for left_note, right_note in zip(left, right):
            paired.extend([left_note, right_note])
        return paired


def get_arpeggio(root_note: MusicalNote, arpeggio_type: ArpeggioType, octaves: ArpeggioOctaves = ArpeggioOctaves.ONE) -> Arpeggio:
    octave_name = "1 Octave" if octaves == ArpeggioOctaves.ONE else "2 Octaves"
    return Arpeggio(
        root_note=root_note,
        arpeggio_type=arpeggio_type,
        octaves=octaves,
        intervals=ARPEGGIO_INTERVALS[arpeggio_type],
        name=f"{root_note.display_name} {ARPEGGIO_NAMES[arpeggio_type]} ({octave_name})",
    )
