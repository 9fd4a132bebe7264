from dataclasses import dataclass
from typing import List, Tuple

from pianofit.theory.chords import Chord, ChordInversion, ChordType, get_chord, inversions_for
from pianofit.theory.notes import MusicalNote

CHROMATIC_ROOTS: Tuple[MusicalNote, ...] = tuple(MusicalNote)


@dataclass(frozen=True)
class ChordByType:
    """One chord quality planed across a set of roots (all 12 for the drill)."""
    chord_type: ChordType
    root_notes: Tuple[MusicalNote, ...]
    include_inversions: bool
    name: str

    def generate_chord_sequence(self) -> List[Chord]:
        inversions = inversions_for(self.chord_type) if self.include_inversions else (ChordInversion.ROOT,)
        return [
            get_chord(root, self.chord_type, inversion)
            for root in self.root_notes
            for inversion in inversions
        ]

    def get_midi_sequence(self, start_octave: int) -> List[int]:
        midi_sequence: List[int] = []
        for chord in self.generate_chord_sequence():
            midi_sequence.extend(chord.get_midi_notes(start_octave))
        return midi_sequence


def get_chord_type_exercise(chord_type: ChordType, include_inversions: bool = True) -> ChordByType:
    suffix = " (with inversions)" if include_inversions else ""
    return ChordByType(
        chord_type=chord_type,
        root_notes=CHROMATIC_ROOTS,
        include_inversions=include_inversions,
        name=f"{chord_type.long_name}{suffix} - All 12 Keys",
    )
