from dataclasses import dataclass
from enum import Enum
from typing import List

import pretty_midi  # type: ignore

MIDI_MIN = 0
MIDI_MAX = 127
SEMITONES_PER_OCTAVE = 12
BASE_OCTAVE = 4
MIDDLE_C = 60

# Full-size piano bounds (A0 to C8)
PIANO_LOWEST_MIDI = 21
PIANO_HIGHEST_MIDI = 108


class MusicalNote(Enum):
    C = 0
    C_SHARP = 1
    D = 2
    D_SHARP = 3
    E = 4
    F = 5
    F_SHARP = 6
    G = 7
    G_SHARP = 8
    A = 9
    A_SHARP = 10
    B = 11

    @property
    def display_name(self) -> str:
        return NOTE_NAMES[self.value]

    def transpose(self, semitones: int) -> "MusicalNote":
        return MusicalNote((self.value + semitones) % SEMITONES_PER_OCTAVE)


# A key is named by its tonic pitch class
Key = MusicalNote

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

CIRCLE_OF_FIFTHS: List[MusicalNote] = [
    MusicalNote.C,
    MusicalNote.G,
    MusicalNote.D,
    MusicalNote.A,
    MusicalNote.E,
    MusicalNote.B,
    MusicalNote.F_SHARP,
    MusicalNote.C_SHARP,
    MusicalNote.G_SHARP,
    MusicalNote.D_SHARP,
    MusicalNote.A_SHARP,
    MusicalNote.F,
]


@dataclass(frozen=True)
class NoteInfo:
    note: MusicalNote
    octave: int
    midi_number: int
    display_name: str


@dataclass(frozen=True)
class NotePosition:
    """A key on the keyboard, as handed to the highlight renderer."""
    note: MusicalNote
    octave: int

    @property
    def midi_number(self) -> int:
        return note_to_midi(self.note, self.octave)


def note_to_midi(note: MusicalNote, octave: int) -> int:
    """MIDI number for a pitch class in an octave (C4 = 60)."""
    return (octave + 1) * SEMITONES_PER_OCTAVE + note.value


def midi_to_note(midi_number: int) -> NoteInfo:
    if midi_number < MIDI_MIN or midi_number > MIDI_MAX:
        raise ValueError(f"MIDI number must be between {MIDI_MIN} and {MIDI_MAX}, got {midi_number}")
    note = MusicalNote(midi_number % SEMITONES_PER_OCTAVE)
    octave = midi_number // SEMITONES_PER_OCTAVE - 1
    return NoteInfo(
        note=note,
        octave=octave,
        midi_number=midi_number,
        display_name=pretty_midi.note_number_to_name(midi_number),
    )


def midi_to_position(midi_number: int) -> NotePosition:
    info = midi_to_note(midi_number)
    return NotePosition(info.note, info.octave)


def next_key_in_circle(key: Key) -> Key:
    """The key a fifth above, clockwise around the circle of fifths."""
    index = CIRCLE_OF_FIFTHS.index(key)
    return CIRCLE_OF_FIFTHS[(index + 1) % len(CIRCLE_OF_FIFTHS)]


def previous_key_in_circle(key: Key) -> Key:
    index = CIRCLE_OF_FIFTHS.index(key)
    return CIRCLE_OF_FIFTHS[(index - 1) % len(CIRCLE_OF_FIFTHS)]
