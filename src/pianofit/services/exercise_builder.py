"""
Turns a practice configuration into a PracticeExercise.

Every builder is a pure function of its configuration and start octave, so
rebuilding from the same inputs always yields an equal exercise.
"""
from typing import Dict, List, Optional, Sequence

from pianofit.models.configurations import (
    ArpeggioConfiguration,
    ChordProgressionConfiguration,
    ChordsByKeyConfiguration,
    ChordsByTypeConfiguration,
    PracticeConfiguration,
    ScaleConfiguration,
)
from pianofit.models.practice import PracticeExercise, PracticeStep, StepType
from pianofit.theory.arpeggios import get_arpeggio
from pianofit.theory.chord_by_type import ChordByType, get_chord_type_exercise
from pianofit.theory.chords import Chord, smooth_key_seventh_progression, smooth_key_triad_progression
from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import BASE_OCTAVE
from pianofit.theory.progressions import ChordProgression, get_default_library
from pianofit.theory.scales import get_scale


def _position_metadata(hand: HandSelection, position: int, with_degree: bool) -> Dict:
    hand_label = {HandSelection.LEFT: "Left Hand", HandSelection.RIGHT: "Right Hand", HandSelection.BOTH: "Both Hands"}[hand]
    metadata = {
        "hand": hand.value,
        "position": position,
        "displayName": f"Note {position} ({hand_label})",
    }
    if with_degree:
        metadata["degree"] = position
    return metadata


def _single_note_steps(sequence: List[int], hand: HandSelection, with_degree: bool) -> List[PracticeStep]:
    return [
        PracticeStep(
            notes=(note,),
            step_type=StepType.SEQUENTIAL,
            metadata=_position_metadata(hand, i + 1, with_degree),
        )
        for i, note in enumerate(sequence)
    ]


def _paired_steps(sequence: List[int], with_degree: bool) -> List[PracticeStep]:
    """Group an interleaved [left, right, left, right, ...] stream into paired steps."""
    # A trailing unpaired note is dropped here so the session never sees half a pair
    usable = len(sequence) - len(sequence) % 2
    return [
        PracticeStep(
            notes=(sequence[i], sequence[i + 1]),
            step_type=StepType.PAIRED,
            metadata=_position_metadata(HandSelection.BOTH, i // 2 + 1, with_degree),
        )
        for i in range(0, usable, 2)
    ]


def _sequence_steps(sequence: List[int], hand: HandSelection, with_degree: bool = False) -> List[PracticeStep]:
    if hand == HandSelection.BOTH:
        return _paired_steps(sequence, with_degree)
    return _single_note_steps(sequence, hand, with_degree)


def _chord_metadata(chord: Chord, position: int, hand: HandSelection, numeral: Optional[str]) -> Dict:
    metadata = {
        "chordName": chord.name,
        "rootNote": chord.root_note.display_name,
        "chordType": chord.chord_type.value,
        "inversion": chord.inversion.name.lower(),
        "position": position,
        "displayName": chord.name,
        "hand": hand.value,
    }
    if numeral is not None:
        metadata["romanNumeral"] = numeral
        metadata["displayName"] = f"{numeral}: {chord.name}"
    return metadata


def _chord_steps(
    chords: List[Chord],
    start_octave: int,
    hand: HandSelection,
    numerals: Optional[Sequence[str]] = None,
) -> List[PracticeStep]:
    steps = []
    for i, chord in enumerate(chords):
        notes = chord.get_midi_notes_for_hand(start_octave, hand)
        if not notes:
            continue
        numeral = numerals[i] if numerals is not None else None
        steps.append(
            PracticeStep(
                notes=tuple(notes),
                step_type=StepType.SIMULTANEOUS,
                metadata=_chord_metadata(chord, i + 1, hand, numeral),
            )
        )
    return steps


def build_scale_exercise(config: ScaleConfiguration, start_octave: int = BASE_OCTAVE) -> PracticeExercise:
    scale = get_scale(config.key, config.scale_type)
    sequence = scale.get_hand_sequence(start_octave, config.hand_selection)
    return PracticeExercise(
        steps=_sequence_steps(sequence, config.hand_selection, with_degree=True),
        metadata={
            "exerciseType": "scale",
            "name": scale.name,
            "key": config.key.display_name,
            "scaleType": config.scale_type.value,
            "handSelection": config.hand_selection.value,
        },
    )


def build_arpeggio_exercise(config: ArpeggioConfiguration, start_octave: int = BASE_OCTAVE) -> PracticeExercise:
    arpeggio = get_arpeggio(config.root_note, config.arpeggio_type, config.octaves)
    sequence = arpeggio.get_hand_sequence(start_octave, config.hand_selection)
    return PracticeExercise(
        steps=_sequence_steps(sequence, config.hand_selection),
        metadata={
            "exerciseType": "arpeggio",
            "name": arpeggio.name,
            "rootNote": config.root_note.display_name,
            "arpeggioType": config.arpeggio_type.value,
            "octaves": config.octaves.value,
            "handSelection": config.hand_selection.value,
        },
    )


def build_chords_by_key_exercise(config: ChordsByKeyConfiguration, start_octave: int = BASE_OCTAVE) -> PracticeExercise:
    if config.include_sevenths:
        chords = smooth_key_seventh_progression(config.key, config.scale_type)
    else:
        chords = smooth_key_triad_progression(config.key, config.scale_type)
    return PracticeExercise(
        steps=_chord_steps(chords, start_octave, config.hand_selection),
        metadata={
            "exerciseType": "chordsByKey",
            "key": config.key.display_name,
            "scaleType": config.scale_type.value,
            "includeSevenths": config.include_sevenths,
            "handSelection": config.hand_selection.value,
        },
    )


def chord_planing_for(config: ChordsByTypeConfiguration) -> ChordByType:
    """The chord-planing drill behind a chords-by-type exercise, for display alongside the session."""
    return get_chord_type_exercise(config.chord_type, config.include_inversions)


def build_chords_by_type_exercise(config: ChordsByTypeConfiguration, start_octave: int = BASE_OCTAVE) -> PracticeExercise:
    planing = chord_planing_for(config)
    return PracticeExercise(
        steps=_chord_steps(planing.generate_chord_sequence(), start_octave, config.hand_selection),
        metadata={
            "exerciseType": "chordsByType",
            "name": planing.name,
            "chordType": config.chord_type.value,
            "includeInversions": config.include_inversions,
            "handSelection": config.hand_selection.value,
        },
    )


def resolve_progression(config: ChordProgressionConfiguration) -> ChordProgression | None:
    if config.progression is not None:
        return config.progression
    return get_default_library().default_progression()


def build_chord_progression_exercise(config: ChordProgressionConfiguration, start_octave: int = BASE_OCTAVE) -> PracticeExercise:
    progression = resolve_progression(config)
    if progression is None:
        return PracticeExercise(steps=(), metadata={"exerciseType": "chordProgressions"})

    chords = progression.generate_chords(config.key)
    return PracticeExercise(
        steps=_chord_steps(chords, start_octave, config.hand_selection, progression.roman_numerals),
        metadata={
            "exerciseType": "chordProgressions",
            "key": config.key.display_name,
            "progressionName": progression.name,
            "difficulty": progression.difficulty.value,
            "handSelection": config.hand_selection.value,
        },
    )


def initialize_exercise(config: PracticeConfiguration, start_octave: int = BASE_OCTAVE) -> PracticeExercise:
    if isinstance(config, ScaleConfiguration):
        return build_scale_exercise(config, start_octave)
    if isinstance(config, ArpeggioConfiguration):
        return build_arpeggio_exercise(config, start_octave)
    if isinstance(config, ChordsByKeyConfiguration):
        return build_chords_by_key_exercise(config, start_octave)
    if isinstance(config, ChordsByTypeConfiguration):
        return build_chords_by_type_exercise(config, start_octave)
    if isinstance(config, ChordProgressionConfiguration):
        return build_chord_progression_exercise(config, start_octave)
    raise TypeError(f"Unsupported practice configuration: {type(config).__name__}")
