import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pianofit.theory.chords import Chord, ChordInversion, ChordType, get_chord, inversions_for
from pianofit.theory.notes import BASE_OCTAVE, SEMITONES_PER_OCTAVE, Key

DEFAULT_PROGRESSION_NAME = "I - V"

# Semitones above the tonic for degrees I..VII of the major scale
DEGREE_OFFSETS = (0, 2, 4, 5, 7, 9, 11)
NUMERALS = ("I", "II", "III", "IV", "V", "VI", "VII")

_NUMERAL_PATTERN = re.compile(r"^(?P<accidental>♭|b|♯|#)?(?P<numeral>[IViv]+)(?P<quality>maj7|ø7|°7|°|\+|7)?$")


class ProgressionDifficulty(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def parse_roman_numeral(symbol: str) -> Tuple[int, ChordType]:
    """
    Map a roman numeral to (semitones above the tonic, chord type).

    Upper case is major and lower case minor. A trailing ° or + makes the triad
    diminished or augmented; 7, maj7, ø7 and °7 select the seventh chords. A
    leading ♭/b or ♯/# shifts the degree by a semitone.
    """
    match = _NUMERAL_PATTERN.match(symbol.strip())
    if not match or match.group("numeral").upper() not in NUMERALS:
        raise ValueError(f"Unrecognised roman numeral: {symbol!r}")

    numeral = match.group("numeral")
    if numeral not in (numeral.upper(), numeral.lower()):
        raise ValueError(f"Mixed-case roman numeral: {symbol!r}")
    upper = numeral.isupper()

    offset = DEGREE_OFFSETS[NUMERALS.index(numeral.upper())]
    accidental = match.group("accidental")
    if accidental in ("♭", "b"):
        offset -= 1
    elif accidental in ("♯", "#"):
        offset += 1

    quality = match.group("quality")
    if quality == "°":
        chord_type = ChordType.DIMINISHED
    elif quality == "+":
        chord_type = ChordType.AUGMENTED
    elif quality == "7":
        chord_type = ChordType.DOMINANT7 if upper else ChordType.MINOR7
    elif quality == "maj7":
        chord_type = ChordType.MAJOR7 if upper else ChordType.MINOR_MAJOR7
    elif quality == "ø7":
        chord_type = ChordType.HALF_DIMINISHED7
    elif quality == "°7":
        chord_type = ChordType.DIMINISHED7
    else:
        chord_type = ChordType.MAJOR if upper else ChordType.MINOR

    return offset % SEMITONES_PER_OCTAVE, chord_type


def _movement(previous: List[int], current: List[int]) -> int:
    """Total distance from each new tone to its nearest tone in the previous chord."""
    return sum(min(abs(note - other) for other in previous) for note in current)


def _closest_voicing(chord: Chord, previous: List[int], octave: int) -> Chord:
    best = None
    best_cost = None
    for inversion in inversions_for(chord.chord_type):
        inverted = get_chord(chord.root_note, chord.chord_type, inversion)
        for shift in (0, -1, 1):
            candidate = inverted.with_octave_offset(chord.octave_offset + shift)
            notes = candidate.get_midi_notes(octave)
            if len(notes) != len(candidate.notes):
                continue
            cost = _movement(previous, notes)
            if best_cost is None or cost < best_cost:
                best, best_cost = candidate, cost
    return best if best is not None else chord


@dataclass(frozen=True)
class ChordProgression:
    name: str
    roman_numerals: Tuple[str, ...]
    difficulty: ProgressionDifficulty
    description: str = ""
    smooth_voice_leading: bool = False

    @property
    def display_name(self) -> str:
        return self.name

    def generate_chords(self, key: Key) -> List[Chord]:
        """
        Concrete chords for this progression in a key.

        Each root sits at or above the tonic in the same octave, in root
        position. With smooth voice leading every chord after the first takes
        the inversion and octave that moves least from the chord before it.
        """
        chords: List[Chord] = []
        previous: List[int] = []
        for numeral in self.roman_numerals:
            offset, chord_type = parse_roman_numeral(numeral)
            root = key.transpose(offset)
            chord = get_chord(root, chord_type, ChordInversion.ROOT)
            chord = chord.with_octave_offset((key.value + offset) // SEMITONES_PER_OCTAVE)
            if self.smooth_voice_leading and previous:
                chord = _closest_voicing(chord, previous, BASE_OCTAVE)
            chords.append(chord)
            previous = chord.get_midi_notes(BASE_OCTAVE)
        return chords


def generate_progression_chords(progression: ChordProgression, key: Key) -> List[Chord]:
    return progression.generate_chords(key)


class ProgressionLibrary:
    """Named chord progressions loaded from the bundled JSON resource."""

    def __init__(self, resources_dir: Optional[Path] = None):
        self._resources_dir = resources_dir or Path(__file__).resolve().parent.parent / "resources"
        self._progressions: List[ChordProgression] = []
        self._load_progressions()

    def _load_progressions(self):
        progressions_file = self._resources_dir / "chord_progressions.json"
        if not progressions_file.exists():
            print(f"ProgressionLibrary: WARNING {progressions_file} not found, using empty library")
            self._progressions = []
            return
        with open(progressions_file, "r", encoding="utf-8") as f:
            entries = json.load(f)
        self._progressions = [self._from_entry(entry) for entry in entries]
        print(f"ProgressionLibrary: Loaded {len(self._progressions)} progressions")

    @staticmethod
    def _from_entry(entry: Dict) -> ChordProgression:
        numerals = tuple(entry["romanNumerals"])
        for numeral in numerals:
            parse_roman_numeral(numeral)
        return ChordProgression(
            name=entry["name"],
            roman_numerals=numerals,
            difficulty=ProgressionDifficulty(entry.get("difficulty", "beginner")),
            description=entry.get("description", ""),
            smooth_voice_leading=bool(entry.get("smoothVoiceLeading", False)),
        )

    def all_progressions(self) -> List[ChordProgression]:
        return list(self._progressions)

    def progressions_for_difficulty(self, difficulty: ProgressionDifficulty) -> List[ChordProgression]:
        return [p for p in self._progressions if p.difficulty == difficulty]

    def get_progression_by_name(self, name: str) -> Optional[ChordProgression]:
        for progression in self._progressions:
            if progression.name == name:
                return progression
        return None

    def default_progression(self) -> Optional[ChordProgression]:
        return self.get_progression_by_name(DEFAULT_PROGRESSION_NAME)


_default_library: Optional[ProgressionLibrary] = None


def get_default_library() -> ProgressionLibrary:
    global _default_library
    if _default_library is None:
        _default_library = ProgressionLibrary()
    return _default_library
