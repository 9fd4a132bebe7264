import sys
import unittest
from pathlib import Path

from PySide6.QtCore import QCoreApplication  # type: ignore

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root / "src"))

from pianofit.models.practice import PracticeExercise, PracticeMode, PracticeStep, StepType
from pianofit.services.practice_session import PracticeSession
from pianofit.theory.chords import ChordType
from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import Key, MusicalNote, NotePosition

app = QCoreApplication.instance() or QCoreApplication([])

C_MAJOR_RUN = [60, 62, 64, 65, 67, 69, 71, 72, 71, 69, 67, 65, 64, 62, 60]


class TestPracticeSession(unittest.TestCase):
    def setUp(self):
        self.completed = []
        self.highlights = []
        self.session = PracticeSession(
            on_exercise_completed=lambda: self.completed.append(True),
            on_highlighted_notes_changed=lambda notes: self.highlights.append(notes),
        )

    def _right_hand_scale(self):
        self.session.set_selected_hand_selection(HandSelection.RIGHT)
        self.session.start_practice()

    def test_defaults(self):
        self.assertEqual(self.session.practice_mode, PracticeMode.SCALES)
        self.assertEqual(self.session.selected_key, Key.C)
        self.assertEqual(self.session.selected_hand_selection, HandSelection.BOTH)
        self.assertTrue(self.session.include_inversions)
        self.assertIsNone(self.session.exercise)
        self.assertEqual(self.session.totalSteps, 0)

    def test_start_without_exercise_is_a_no_op(self):
        self.session.start_practice()
        self.assertFalse(self.session.practice_active)

    def test_notes_are_ignored_until_started(self):
        self.session.set_selected_hand_selection(HandSelection.RIGHT)
        self.session.handle_note_pressed(60)
        self.assertEqual(self.session.current_step_index, 0)
        self.assertFalse(self.session.practice_active)

    def test_sequential_steps(self):
        self._right_hand_scale()
        self.assertTrue(self.session.practiceActive)
        self.session.handle_note_pressed(61)
        self.assertEqual(self.session.current_step_index, 0)
        self.session.handle_note_pressed(60)
        self.assertEqual(self.session.currentStepIndex, 1)
        self.assertEqual(self.session.highlighted_notes, [NotePosition(MusicalNote.D, 4)])

    def test_completion_rewinds_and_deactivates(self):
        self._right_hand_scale()
        for note in C_MAJOR_RUN:
            self.session.handle_note_pressed(note)
        self.assertEqual(self.completed, [True])
        self.assertEqual(self.session.current_step_index, 0)
        self.assertFalse(self.session.practice_active)
        self.assertEqual(self.session.highlighted_notes, [NotePosition(MusicalNote.C, 4)])

        # Nothing happens until practice is started again
        self.session.handle_note_pressed(60)
        self.assertEqual(self.session.current_step_index, 0)

    def test_paired_steps_accept_either_order(self):
        self.session.refresh_exercise()
        self.session.start_practice()
        self.assertEqual(self.session.current_step.step_type, StepType.PAIRED)
        self.session.handle_note_pressed(60)
        self.assertEqual(self.session.currently_held_notes, {60})
        self.session.handle_note_pressed(61)
        self.assertEqual(self.session.currently_held_notes, {60})
        self.session.handle_note_pressed(48)
        self.assertEqual(self.session.current_step_index, 1)
        self.assertEqual(self.session.currently_held_notes, set())

    def test_paired_release_forgets_note(self):
        self.session.refresh_exercise()
        self.session.start_practice()
        self.session.handle_note_pressed(48)
        self.session.handle_note_released(48)
        self.session.handle_note_pressed(60)
        self.assertEqual(self.session.current_step_index, 0)

    def test_simultaneous_step_needs_exact_chord(self):
        self.session.set_practice_mode(PracticeMode.CHORDS_BY_KEY)
        self.session.set_selected_hand_selection(HandSelection.RIGHT)
        self.session.start_practice()
        for note in (60, 64, 61):
            self.session.handle_note_pressed(note)
        self.session.handle_note_pressed(67)
        self.assertEqual(self.session.current_step_index, 0)

        # Letting go of the stray key leaves the chord held
        self.session.handle_note_released(61)
        self.assertEqual(self.session.current_step_index, 1)

    def test_simultaneous_step_order_does_not_matter(self):
        self.session.set_practice_mode(PracticeMode.CHORDS_BY_KEY)
        self.session.set_selected_hand_selection(HandSelection.RIGHT)
        self.session.start_practice()
        for note in (67, 60, 64):
            self.session.handle_note_pressed(note)
        self.assertEqual(self.session.current_step_index, 1)

    def test_configuration_change_deactivates(self):
        active = []
        self.session.practiceActiveChanged.connect(lambda value: active.append(value))
        self._right_hand_scale()
        self.session.handle_note_pressed(60)
        self.session.set_selected_key(Key.G)
        self.assertEqual(active, [True, False])
        self.assertEqual(self.session.current_step_index, 0)
        self.assertEqual(self.session.current_step.notes, (67,))
        self.session.handle_note_pressed(67)
        self.assertEqual(self.session.current_step_index, 0)

    def test_auto_start_on_note(self):
        self.session.auto_start_on_note = True
        self.session.set_selected_hand_selection(HandSelection.RIGHT)
        self.session.handle_note_pressed(60)
        self.assertTrue(self.session.practice_active)
        self.assertEqual(self.session.current_step_index, 1)

    def test_highlight_callback_follows_steps(self):
        self._right_hand_scale()
        self.highlights.clear()
        self.session.handle_note_pressed(60)
        self.assertEqual(self.highlights, [[NotePosition(MusicalNote.D, 4)]])

    def test_reset_practice(self):
        self._right_hand_scale()
        self.session.handle_note_pressed(60)
        self.session.reset_practice()
        self.assertFalse(self.session.practice_active)
        self.assertEqual(self.session.current_step_index, 0)

    def test_progression_mode_remembers_fallback(self):
        self.session.set_practice_mode(PracticeMode.CHORD_PROGRESSIONS)
        self.assertEqual(self.session.selected_chord_progression.name, "I - V")
        self.assertEqual(self.session.totalSteps, 2)

    def test_chords_by_type_exposes_drill(self):
        self.session.set_practice_mode(PracticeMode.CHORDS_BY_TYPE)
        self.session.set_selected_chord_type(ChordType.MINOR)
        self.session.set_include_inversions(False)
        self.assertEqual(self.session.selected_chord_by_type.chord_type, ChordType.MINOR)
        self.assertEqual(self.session.totalSteps, 12)
        self.session.set_practice_mode(PracticeMode.SCALES)
        self.assertIsNone(self.session.selected_chord_by_type)

    def test_keyboard_range_tracks_exercise(self):
        self.session.refresh_exercise()
        window = self.session.keyboard_range
        self.assertEqual(window.key_count, 49)
        self.assertTrue(window.contains(48))
        self.assertTrue(window.contains(72))

    def test_empty_exercise_ignores_notes(self):
        self.session.load_exercise(PracticeExercise())
        self.session.auto_start_on_note = True
        self.session.handle_note_pressed(60)
        self.assertFalse(self.session.practice_active)
        self.assertIsNone(self.session.current_step)

    def test_loaded_exercise(self):
        exercise = PracticeExercise(steps=(PracticeStep((50,), StepType.SEQUENTIAL),))
        self.session.load_exercise(exercise)
        self.session.start_practice()
        self.session.handle_note_pressed(50)
        self.assertEqual(self.completed, [True])


if __name__ == "__main__":
    unittest.main()
