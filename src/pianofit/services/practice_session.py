from typing import Callable, List, Optional, Set

from PySide6.QtCore import QObject, Property, Signal, Slot  # type: ignore

from pianofit.models.configurations import (
    ArpeggioConfiguration,
    ChordProgressionConfiguration,
    ChordsByKeyConfiguration,
    ChordsByTypeConfiguration,
    PracticeConfiguration,
    ScaleConfiguration,
)
from pianofit.models.practice import PracticeExercise, PracticeMode, PracticeStep, StepType
from pianofit.services.exercise_builder import chord_planing_for, initialize_exercise, resolve_progression
from pianofit.services.keyboard_range import DEFAULT_KEYBOARD_RANGE, KeyboardRange, highlight_for_step, range_for_exercise
from pianofit.theory.arpeggios import ArpeggioOctaves, ArpeggioType
from pianofit.theory.chord_by_type import ChordByType
from pianofit.theory.chords import ChordType
from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import BASE_OCTAVE, Key, MusicalNote, NotePosition
from pianofit.theory.progressions import ChordProgression
from pianofit.theory.scales import ScaleType


class PracticeSession(QObject):
    """
    Tracks note input against the current exercise, one step at a time.

    Sequential steps advance on the single expected note. Paired steps
    advance once both notes are held, in either order. Simultaneous steps
    advance only when the held notes match the chord exactly, so an extra
    note blocks the chord until it is released.

    Every configuration setter deactivates practice before regenerating the
    exercise, so notes that arrive mid-reconfiguration are ignored. After the
    last step the session fires exerciseCompleted and rewinds to step 0. With
    auto_start_on_note the next press starts practice again; otherwise the
    caller must call start_practice().
    """

    highlightedNotesChanged = Signal(object)  # List[NotePosition]
    exerciseCompleted = Signal()
    practiceActiveChanged = Signal(bool)
    exerciseChanged = Signal()
    stepChanged = Signal(int)

    def __init__(
        self,
        on_exercise_completed: Optional[Callable[[], None]] = None,
        on_highlighted_notes_changed: Optional[Callable[[List[NotePosition]], None]] = None,
        auto_start_on_note: bool = False,
        start_octave: int = BASE_OCTAVE,
    ):
        super().__init__()
        if on_exercise_completed is not None:
            self.exerciseCompleted.connect(on_exercise_completed)
        if on_highlighted_notes_changed is not None:
            self.highlightedNotesChanged.connect(on_highlighted_notes_changed)

        self.auto_start_on_note = auto_start_on_note
        self._start_octave = start_octave

        # Configuration
        self._practice_mode = PracticeMode.SCALES
        self._selected_key = Key.C
        self._selected_scale_type = ScaleType.MAJOR
        self._selected_root_note = MusicalNote.C
        self._selected_arpeggio_type = ArpeggioType.MAJOR
        self._selected_arpeggio_octaves = ArpeggioOctaves.ONE
        self._selected_chord_progression: Optional[ChordProgression] = None
        self._selected_chord_type = ChordType.MAJOR
        self._include_inversions = True
        self._include_sevenths = False
        self._selected_hand_selection = HandSelection.BOTH
        self._selected_chord_by_type: Optional[ChordByType] = None

        # Progress
        self._exercise: Optional[PracticeExercise] = None
        self._current_step_index = 0
        self._practice_active = False
        self._currently_held_notes: Set[int] = set()
        self._highlighted_notes: List[NotePosition] = []
        self._keyboard_range = DEFAULT_KEYBOARD_RANGE

    # ── Qt properties ─────────────────────────────────────────────────

    @Property(bool, notify=practiceActiveChanged)
    def practiceActive(self) -> bool:
        return self._practice_active

    @Property(int, notify=stepChanged)
    def currentStepIndex(self) -> int:
        return self._current_step_index

    @Property(int, notify=exerciseChanged)
    def totalSteps(self) -> int:
        return len(self._exercise) if self._exercise is not None else 0

    # ── State accessors ───────────────────────────────────────────────

    @property
    def practice_active(self) -> bool:
        return self._practice_active

    @property
    def current_step_index(self) -> int:
        return self._current_step_index

    @property
    def exercise(self) -> Optional[PracticeExercise]:
        return self._exercise

    @property
    def current_step(self) -> Optional[PracticeStep]:
        if self._exercise is None or self._current_step_index >= len(self._exercise):
            return None
        return self._exercise.steps[self._current_step_index]

    @property
    def currently_held_notes(self) -> Set[int]:
        return set(self._currently_held_notes)

    @property
    def highlighted_notes(self) -> List[NotePosition]:
        return list(self._highlighted_notes)

    @property
    def keyboard_range(self) -> KeyboardRange:
        return self._keyboard_range

    @property
    def practice_mode(self) -> PracticeMode:
        return self._practice_mode

    @property
    def selected_key(self) -> Key:
        return self._selected_key

    @property
    def selected_scale_type(self) -> ScaleType:
        return self._selected_scale_type

    @property
    def selected_root_note(self) -> MusicalNote:
        return self._selected_root_note

    @property
    def selected_arpeggio_type(self) -> ArpeggioType:
        return self._selected_arpeggio_type

    @property
    def selected_arpeggio_octaves(self) -> ArpeggioOctaves:
        return self._selected_arpeggio_octaves

    @property
    def selected_chord_progression(self) -> Optional[ChordProgression]:
        return self._selected_chord_progression

    @property
    def selected_chord_type(self) -> ChordType:
        return self._selected_chord_type

    @property
    def include_inversions(self) -> bool:
        return self._include_inversions

    @property
    def include_sevenths(self) -> bool:
        return self._include_sevenths

    @property
    def selected_hand_selection(self) -> HandSelection:
        return self._selected_hand_selection

    @property
    def selected_chord_by_type(self) -> Optional[ChordByType]:
        """The chord-planing drill behind the current chords-by-type exercise."""
        return self._selected_chord_by_type

    # ── Configuration setters ─────────────────────────────────────────

    def set_practice_mode(self, mode: PracticeMode):
        self._apply_config_change(lambda: setattr(self, "_practice_mode", mode))

    def set_selected_key(self, key: Key):
        self._apply_config_change(lambda: setattr(self, "_selected_key", key))

    def set_selected_scale_type(self, scale_type: ScaleType):
        self._apply_config_change(lambda: setattr(self, "_selected_scale_type", scale_type))

    def set_selected_root_note(self, root_note: MusicalNote):
        self._apply_config_change(lambda: setattr(self, "_selected_root_note", root_note))

    def set_selected_arpeggio_type(self, arpeggio_type: ArpeggioType):
        self._apply_config_change(lambda: setattr(self, "_selected_arpeggio_type", arpeggio_type))

    def set_selected_arpeggio_octaves(self, octaves: ArpeggioOctaves):
        self._apply_config_change(lambda: setattr(self, "_selected_arpeggio_octaves", octaves))

    def set_selected_chord_progression(self, progression: Optional[ChordProgression]):
        self._apply_config_change(lambda: setattr(self, "_selected_chord_progression", progression))

    def set_selected_chord_type(self, chord_type: ChordType):
        self._apply_config_change(lambda: setattr(self, "_selected_chord_type", chord_type))

    def set_include_inversions(self, include_inversions: bool):
        self._apply_config_change(lambda: setattr(self, "_include_inversions", include_inversions))

    def set_include_sevenths(self, include_sevenths: bool):
        self._apply_config_change(lambda: setattr(self, "_include_sevenths", include_sevenths))

    def set_selected_hand_selection(self, hand_selection: HandSelection):
        self._apply_config_change(lambda: setattr(self, "_selected_hand_selection", hand_selection))

    @Slot()
    def refresh_exercise(self):
        """Regenerate the exercise from the current configuration."""
        self._apply_config_change(lambda: None)

    def build_configuration(self) -> PracticeConfiguration:
        mode = self._practice_mode
        hand = self._selected_hand_selection
        if mode == PracticeMode.SCALES:
            return ScaleConfiguration(self._selected_key, self._selected_scale_type, hand)
        if mode == PracticeMode.ARPEGGIOS:
            return ArpeggioConfiguration(
                self._selected_root_note, self._selected_arpeggio_type, self._selected_arpeggio_octaves, hand
            )
        if mode == PracticeMode.CHORDS_BY_KEY:
            return ChordsByKeyConfiguration(self._selected_key, self._selected_scale_type, hand, self._include_sevenths)
        if mode == PracticeMode.CHORDS_BY_TYPE:
            return ChordsByTypeConfiguration(self._selected_chord_type, self._include_inversions, hand)
        return ChordProgressionConfiguration(self._selected_key, self._selected_chord_progression, hand)

    def _apply_config_change(self, update: Callable[[], None]):
        # Deactivate first so in-flight notes are ignored while the exercise is swapped
        self._set_practice_active(False)
        update()
        self._regenerate_exercise()

    def _regenerate_exercise(self):
        config = self.build_configuration()
        exercise = initialize_exercise(config, self._start_octave)

        self._selected_chord_by_type = None
        if isinstance(config, ChordsByTypeConfiguration):
            self._selected_chord_by_type = chord_planing_for(config)
        elif isinstance(config, ChordProgressionConfiguration):
            # Remember the "I - V" fallback so it shows as the selection
            self._selected_chord_progression = resolve_progression(config)

        print(f"PracticeSession: Generated {config.mode.value} exercise with {len(exercise)} steps")
        self._replace_exercise(exercise)

    def load_exercise(self, exercise: PracticeExercise):
        """Replace the exercise with one built elsewhere. Practice is deactivated."""
        self._set_practice_active(False)
        self._replace_exercise(exercise)

    def _replace_exercise(self, exercise: PracticeExercise):
        self._exercise = exercise
        self._keyboard_range = range_for_exercise(exercise)
        self._rewind()
        self.exerciseChanged.emit()
        self._update_highlighted_notes()

    # ── Practice lifecycle ────────────────────────────────────────────

    @Slot()
    def start_practice(self):
        if self._exercise is None:
            print("PracticeSession: No exercise loaded, cannot start practice")
            return
        self._set_practice_active(True)
        self._rewind()
        self._update_highlighted_notes()
        print(f"PracticeSession: Practice started ({len(self._exercise)} steps)")

    @Slot()
    def reset_practice(self):
        self._set_practice_active(False)
        self._rewind()
        self._update_highlighted_notes()

    @Slot(int)
    def handle_note_pressed(self, midi_note: int):
        if self._exercise is None or self._exercise.is_empty:
            return
        if not self._practice_active:
            if not self.auto_start_on_note:
                return
            self.start_practice()

        step = self.current_step
        if step is None:
            return

        if step.step_type == StepType.SEQUENTIAL:
            if midi_note == step.notes[0]:
                self._advance()
        elif step.step_type == StepType.PAIRED:
            if midi_note in step.notes:
                self._currently_held_notes.add(midi_note)
                if step.note_set <= self._currently_held_notes:
                    self._advance()
        else:
            # Wrong notes are held too, so an extra key blocks the exact match
            self._currently_held_notes.add(midi_note)
            self._check_chord_completion(step)

    @Slot(int)
    def handle_note_released(self, midi_note: int):
        if not self._practice_active:
            return
        step = self.current_step
        if step is None or step.step_type == StepType.SEQUENTIAL:
            return
        self._currently_held_notes.discard(midi_note)
        if step.step_type == StepType.SIMULTANEOUS and self._currently_held_notes:
            # Letting go of a stray note can leave exactly the chord held
            self._check_chord_completion(step)

    def _check_chord_completion(self, step: PracticeStep):
        if self._currently_held_notes == step.note_set:
            self._advance()

    def _advance(self):
        self._current_step_index += 1
        self._currently_held_notes.clear()
        if self._current_step_index >= len(self._exercise):
            self._complete_exercise()
            return
        self.stepChanged.emit(self._current_step_index)
        self._update_highlighted_notes()

    def _complete_exercise(self):
        self._set_practice_active(False)
        print(f"PracticeSession: Exercise completed ({len(self._exercise)} steps)")
        self.exerciseCompleted.emit()
        self._rewind()
        self._update_highlighted_notes()

    def _rewind(self):
        self._current_step_index = 0
        self._currently_held_notes.clear()
        self.stepChanged.emit(0)

    def _set_practice_active(self, active: bool):
        if self._practice_active != active:
            self._practice_active = active
            self.practiceActiveChanged.emit(active)

    def _update_highlighted_notes(self):
        self._highlighted_notes = highlight_for_step(self.current_step)
        self.highlightedNotesChanged.emit(list(self._highlighted_notes))
