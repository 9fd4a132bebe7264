from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Tuple

from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import MIDI_MAX, SEMITONES_PER_OCTAVE, Key, MusicalNote, note_to_midi
from pianofit.theory.scales import ScaleType, get_scale

MINOR_THIRD = 3
MAJOR_THIRD = 4


class ChordType(Enum):
    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    AUGMENTED = "augmented"
    MAJOR7 = "major7"
    DOMINANT7 = "dominant7"
    MINOR7 = "minor7"
    HALF_DIMINISHED7 = "halfDiminished7"
    DIMINISHED7 = "diminished7"
    MINOR_MAJOR7 = "minorMajor7"
    AUGMENTED7 = "augmented7"

    @property
    def intervals(self) -> Tuple[int, ...]:
        return CHORD_INTERVALS[self]

    @property
    def symbol(self) -> str:
        return CHORD_SYMBOLS[self]

    @property
    def short_name(self) -> str:
        return CHORD_SHORT_NAMES[self]

    @property
    def long_name(self) -> str:
        return f"{CHORD_SHORT_NAMES[self]} Chords"

    @property
    def is_seventh(self) -> bool:
        return len(CHORD_INTERVALS[self]) == 4


class ChordInversion(Enum):
    ROOT = 0
    FIRST = 1
    SECOND = 2
    THIRD = 3

    @property
    def display_name(self) -> str:
        return INVERSION_NAMES[self]


CHORD_INTERVALS = {
    ChordType.MAJOR: (0, 4, 7),
    ChordType.MINOR: (0, 3, 7),
    ChordType.DIMINISHED: (0, 3, 6),
    ChordType.AUGMENTED: (0, 4, 8),
    ChordType.MAJOR7: (0, 4, 7, 11),
    ChordType.DOMINANT7: (0, 4, 7, 10),
    ChordType.MINOR7: (0, 3, 7, 10),
    ChordType.HALF_DIMINISHED7: (0, 3, 6, 10),
    ChordType.DIMINISHED7: (0, 3, 6, 9),
    ChordType.MINOR_MAJOR7: (0, 3, 7, 11),
    ChordType.AUGMENTED7: (0, 4, 8, 10),
}

CHORD_SYMBOLS = {
    ChordType.MAJOR: "",
    ChordType.MINOR: "m",
    ChordType.DIMINISHED: "°",
    ChordType.AUGMENTED: "+",
    ChordType.MAJOR7: "maj7",
    ChordType.DOMINANT7: "7",
    ChordType.MINOR7: "m7",
    ChordType.HALF_DIMINISHED7: "ø7",
    ChordType.DIMINISHED7: "°7",
    ChordType.MINOR_MAJOR7: "m(maj7)",
    ChordType.AUGMENTED7: "aug7",
}

CHORD_SHORT_NAMES = {
    ChordType.MAJOR: "Major",
    ChordType.MINOR: "Minor",
    ChordType.DIMINISHED: "Diminished",
    ChordType.AUGMENTED: "Augmented",
    ChordType.MAJOR7: "Major 7th",
    ChordType.DOMINANT7: "Dominant 7th",
    ChordType.MINOR7: "Minor 7th",
    ChordType.HALF_DIMINISHED7: "Half-Diminished 7th",
    ChordType.DIMINISHED7: "Diminished 7th",
    ChordType.MINOR_MAJOR7: "Minor-Major 7th",
    ChordType.AUGMENTED7: "Augmented 7th",
}

INVERSION_NAMES = {
    ChordInversion.ROOT: "",
    ChordInversion.FIRST: "1st inv",
    ChordInversion.SECOND: "2nd inv",
    ChordInversion.THIRD: "3rd inv",
}

TRIAD_INVERSIONS = (ChordInversion.ROOT, ChordInversion.FIRST, ChordInversion.SECOND)
SEVENTH_INVERSIONS = TRIAD_INVERSIONS + (ChordInversion.THIRD,)


@dataclass(frozen=True)
class Chord:
    root_note: MusicalNote
    chord_type: ChordType
    inversion: ChordInversion
    notes: Tuple[MusicalNote, ...]
    name: str
    # Extra octaves applied on top of the octave passed to get_midi_notes
    octave_offset: int = 0

    @property
    def bass_note(self) -> MusicalNote:
        return self.notes[0]

    def with_octave_offset(self, octave_offset: int) -> "Chord":
        return replace(self, octave_offset=octave_offset)

    def get_midi_notes(self, octave: int) -> List[int]:
        """
        Ascending MIDI voicing of the chord.

        An inverted chord whose bass pitch class sits below the root in the
        requested octave is raised one octave as a whole. Each following tone is
        raised by octaves until it is strictly above the tone before it, and any
        tone above MIDI 127 is dropped.

        C major at octave 4: root [60, 64, 67], first [64, 67, 72], second [67, 72, 76].
        """
        base_octave = octave + self.octave_offset
        if self.inversion != ChordInversion.ROOT:
            if note_to_midi(self.notes[0], base_octave) < note_to_midi(self.root_note, base_octave):
                base_octave += 1

        midi_notes: List[int] = []
        for note in self.notes:
            midi = note_to_midi(note, base_octave)
            if midi_notes:
                while midi <= midi_notes[-1]:
                    midi += SEMITONES_PER_OCTAVE
            if midi <= MIDI_MAX:
                midi_notes.append(midi)
        return midi_notes

    def get_midi_notes_for_hand(self, octave: int, hand: HandSelection) -> List[int]:
        """Right hand plays the voicing as-is, left hand an octave lower, both hands play left then right."""
        right = self.get_midi_notes(octave)
        left = [note - SEMITONES_PER_OCTAVE for note in right if note - SEMITONES_PER_OCTAVE >= 0]
        if hand == HandSelection.RIGHT:
            return right
        if hand == HandSelection.LEFT:
            return left
        return left + right


def _apply_inversion(notes: List[MusicalNote], inversion: ChordInversion) -> List[MusicalNote]:
    if inversion == ChordInversion.THIRD and len(notes) < 4:
        raise ValueError("Third inversion requires a seventh chord")
    # Rotate so the requested chord tone is in the bass
    return notes[inversion.value:] + notes[:inversion.value]


def chord_name(root_note: MusicalNote, chord_type: ChordType, inversion: ChordInversion) -> str:
    name = f"{root_note.display_name}{chord_type.symbol}"
    if inversion.display_name:
        return f"{name} ({inversion.display_name})"
    return name


def get_chord(root_note: MusicalNote, chord_type: ChordType, inversion: ChordInversion = ChordInversion.ROOT) -> Chord:
    notes = [root_note.transpose(interval) for interval in chord_type.intervals]
    return Chord(
        root_note=root_note,
        chord_type=chord_type,
        inversion=inversion,
        notes=tuple(_apply_inversion(notes, inversion)),
        name=chord_name(root_note, chord_type, inversion),
    )


def inversions_for(chord_type: ChordType) -> Tuple[ChordInversion, ...]:
    return SEVENTH_INVERSIONS if chord_type.is_seventh else TRIAD_INVERSIONS


def _interval_between(lower: MusicalNote, upper: MusicalNote) -> int:
    return (upper.value - lower.value) % SEMITONES_PER_OCTAVE


def _stacked_thirds(key: Key, scale_type: ScaleType, degree: int, count: int) -> List[int]:
    degrees = get_scale(key, scale_type).get_notes()[:7]
    tones = [degrees[(degree + 2 * i) % 7] for i in range(count + 1)]
    return [_interval_between(tones[i], tones[i + 1]) for i in range(count)]


def chords_in_key(key: Key, scale_type: ScaleType) -> List[ChordType]:
    """Triad quality built on each of the seven scale degrees."""
    qualities = {
        (MAJOR_THIRD, MINOR_THIRD): ChordType.MAJOR,
        (MINOR_THIRD, MAJOR_THIRD): ChordType.MINOR,
        (MINOR_THIRD, MINOR_THIRD): ChordType.DIMINISHED,
        (MAJOR_THIRD, MAJOR_THIRD): ChordType.AUGMENTED,
    }
    return [qualities.get(tuple(_stacked_thirds(key, scale_type, degree, 2)), ChordType.MAJOR) for degree in range(7)]


def seventh_chords_in_key(key: Key, scale_type: ScaleType) -> List[ChordType]:
    """Seventh-chord quality built on each of the seven scale degrees."""
    chords = []
    for degree in range(7):
        first, second, third = _stacked_thirds(key, scale_type, degree, 3)
        if (first, second) == (MAJOR_THIRD, MINOR_THIRD):
            chords.append(ChordType.MAJOR7 if third == MAJOR_THIRD else ChordType.DOMINANT7)
        elif (first, second) == (MINOR_THIRD, MAJOR_THIRD):
            chords.append(ChordType.MINOR_MAJOR7 if third == MAJOR_THIRD else ChordType.MINOR7)
        elif (first, second) == (MINOR_THIRD, MINOR_THIRD):
            chords.append(ChordType.HALF_DIMINISHED7 if third == MAJOR_THIRD else ChordType.DIMINISHED7)
        elif (first, second) == (MAJOR_THIRD, MAJOR_THIRD):
            chords.append(ChordType.AUGMENTED7)
        else:
            chords.append(ChordType.DOMINANT7)
    return chords


def smooth_key_triad_progression(key: Key, scale_type: ScaleType) -> List[Chord]:
    """Each diatonic triad in turn, moved through root, 1st, 2nd and back to 1st inversion."""
    degrees = get_scale(key, scale_type).get_notes()[:7]
    progression = []
    for root, chord_type in zip(degrees, chords_in_key(key, scale_type)):
        for inversion in (ChordInversion.ROOT, ChordInversion.FIRST, ChordInversion.SECOND, ChordInversion.FIRST):
            progression.append(get_chord(root, chord_type, inversion))
    return progression


def smooth_key_seventh_progression(key: Key, scale_type: ScaleType) -> List[Chord]:
    """Seventh-chord counterpart: root, 1st, 2nd, 3rd, 2nd, 1st on every degree."""
    degrees = get_scale(key, scale_type).get_notes()[:7]
    arc = (
        ChordInversion.ROOT,
        ChordInversion.FIRST,
        ChordInversion.SECOND,
        ChordInversion.THIRD,
        ChordInversion.SECOND,
        ChordInversion.FIRST,
    )
    progression = []
    for root, chord_type in zip(degrees, seventh_chords_in_key(key, scale_type)):
        for inversion in arc:
            progression.append(get_chord(root, chord_type, inversion))
    return progression
