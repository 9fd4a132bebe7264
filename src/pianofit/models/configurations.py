from dataclasses import dataclass
from typing import Optional, Union

from pianofit.models.practice import PracticeMode
from pianofit.theory.arpeggios import ArpeggioOctaves, ArpeggioType
from pianofit.theory.chords import ChordType
from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import Key, MusicalNote
from pianofit.theory.progressions import ChordProgression
from pianofit.theory.scales import ScaleType


@dataclass(frozen=True)
class ScaleConfiguration:
    key: Key = Key.C
    scale_type: ScaleType = ScaleType.MAJOR
    hand_selection: HandSelection = HandSelection.RIGHT

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.SCALES


@dataclass(frozen=True)
class ArpeggioConfiguration:
    root_note: MusicalNote = MusicalNote.C
    arpeggio_type: ArpeggioType = ArpeggioType.MAJOR
    octaves: ArpeggioOctaves = ArpeggioOctaves.ONE
    hand_selection: HandSelection = HandSelection.RIGHT

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.ARPEGGIOS


@dataclass(frozen=True)
class ChordsByKeyConfiguration:
    key: Key = Key.C
    scale_type: ScaleType = ScaleType.MAJOR
    hand_selection: HandSelection = HandSelection.RIGHT
    # Drill diatonic seventh chords through all four inversions instead of triads
    include_sevenths: bool = False

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.CHORDS_BY_KEY


@dataclass(frozen=True)
class ChordsByTypeConfiguration:
    chord_type: ChordType = ChordType.MAJOR
    include_inversions: bool = True
    hand_selection: HandSelection = HandSelection.RIGHT

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.CHORDS_BY_TYPE


@dataclass(frozen=True)
class ChordProgressionConfiguration:
    key: Key = Key.C
    progression: Optional[ChordProgression] = None  # None falls back to "I - V"
    hand_selection: HandSelection = HandSelection.RIGHT

    @property
    def mode(self) -> PracticeMode:
        return PracticeMode.CHORD_PROGRESSIONS


PracticeConfiguration = Union[
    ScaleConfiguration,
    ArpeggioConfiguration,
    ChordsByKeyConfiguration,
    ChordsByTypeConfiguration,
    ChordProgressionConfiguration,
]
