import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from PySide6.QtCore import QCoreApplication  # type: ignore

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root / "src"))

from pianofit.models.practice import PracticeMode
from pianofit.services.midi_decoder import MidiEventType
from pianofit.services.midi_state import MidiState
from pianofit.services.practice_controller import PracticeController
from pianofit.services.settings_service import SettingsService
from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import Key, MusicalNote, NotePosition

app = QCoreApplication.instance() or QCoreApplication([])


class TestMidiState(unittest.TestCase):
    def setUp(self):
        self.state = MidiState()

    def tearDown(self):
        self.state.dispose()

    def test_note_on_and_off(self):
        self.state.note_on(60, 100, 1)
        self.state.note_on(64, 90, 1)
        self.assertEqual(self.state.active_notes, {60, 64})
        self.assertEqual(self.state.lastNote, "Note ON: 64 (Ch: 1, Vel: 90)")
        self.assertTrue(self.state.hasRecentActivity)
        self.assertEqual(
            self.state.highlighted_note_positions,
            [NotePosition(MusicalNote.C, 4), NotePosition(MusicalNote.E, 4)],
        )
        self.state.note_off(60, 1)
        self.assertEqual(self.state.active_notes, {64})

    def test_channel_selection(self):
        channels = []
        self.state.selectedChannelChanged.connect(lambda value: channels.append(value))
        self.state.set_selected_channel(9)
        self.state.set_selected_channel(9)
        self.state.set_selected_channel(16)
        self.assertEqual(self.state.selectedChannel, 9)
        self.assertEqual(channels, [9])

    def test_invalid_initial_channel(self):
        with self.assertRaises(ValueError):
            MidiState(16)


class TestPracticeController(unittest.TestCase):
    def setUp(self):
        self.controller = PracticeController()
        self.sent = []
        self.controller.midiOutRequested.connect(lambda value: self.sent.append(value))
        self.session = self.controller.session
        self.session.set_selected_hand_selection(HandSelection.RIGHT)
        self.session.start_practice()

    def tearDown(self):
        self.controller.dispose()

    def test_hardware_note_drives_session(self):
        event = self.controller.handle_midi_data([0x90, 60, 100])
        self.assertEqual(event.event_type, MidiEventType.NOTE_ON)
        self.assertEqual(self.session.current_step_index, 1)
        self.assertEqual(self.controller.midi_state.active_notes, {60})

        self.controller.handle_midi_data([0x90, 60, 0])
        self.assertEqual(self.controller.midi_state.active_notes, set())
        self.assertEqual(self.controller.midi_state.lastNote, "Note OFF: 60 (Ch: 1)")

    def test_signal_delivers_bytes(self):
        self.controller.midiDataReceived.emit([0x90, 60, 100])
        self.assertEqual(self.session.current_step_index, 1)

    def test_rejected_bytes_change_nothing(self):
        self.assertIsNone(self.controller.handle_midi_data([0xF8]))
        self.assertIsNone(self.controller.handle_midi_data([0x90, 128, 100]))
        self.assertEqual(self.session.current_step_index, 0)
        self.assertEqual(self.controller.midi_state.lastNote, "")

    def test_control_change_updates_last_note_only(self):
        self.controller.handle_midi_data([0xB0, 64, 127])
        self.assertEqual(self.controller.midi_state.lastNote, "CC: Controller 64 = 127 (Ch: 1)")
        self.assertEqual(self.session.current_step_index, 0)

    def test_virtual_note_converges_with_hardware(self):
        self.controller.play_virtual_note(60)
        self.controller.handle_midi_data([0x90, 62, 80])
        self.assertEqual(self.session.current_step_index, 2)
        self.assertEqual(self.sent, [[0x90, 60, 64]])
        self.assertEqual(self.controller.midi_state.lastNote, "Note ON: 62 (Ch: 1, Vel: 80)")

    def test_virtual_note_release(self):
        self.controller.play_virtual_note(60)
        self.assertEqual(self.controller.pending_virtual_notes, 1)
        self.assertEqual(self.controller.midi_state.lastNote, "Virtual Note ON: 60 (Ch: 1, Vel: 64)")

        self.controller._finish_virtual_note(60, 0)
        self.assertEqual(self.controller.pending_virtual_notes, 0)
        self.assertEqual(self.sent[-1], [0x80, 60, 0])

    def test_replaying_a_virtual_note_keeps_one_pending_release(self):
        self.controller.play_virtual_note(60)
        self.controller.play_virtual_note(60)
        self.assertEqual(self.controller.pending_virtual_notes, 1)

    def test_virtual_note_uses_selected_channel(self):
        self.controller.midi_state.set_selected_channel(2)
        self.controller.play_virtual_note(60)
        self.assertEqual(self.sent, [[0x92, 60, 64]])

    def test_virtual_note_out_of_range(self):
        with self.assertRaises(ValueError):
            self.controller.play_virtual_note(128)
        with self.assertRaises(ValueError):
            self.controller.play_virtual_note(-1)

    def test_virtual_release_completes_chord_with_stray_note(self):
        self.session.set_practice_mode(PracticeMode.CHORDS_BY_KEY)
        self.session.start_practice()
        for note in (60, 64, 70, 67):
            self.controller.play_virtual_note(note)
        self.assertEqual(self.session.current_step_index, 0)
        self.controller._finish_virtual_note(70, 0)
        self.assertEqual(self.session.current_step_index, 1)

    def test_circle_of_fifths_navigation(self):
        self.controller.select_next_key()
        self.assertEqual(self.session.selected_key, Key.G)
        self.controller.select_previous_key()
        self.controller.select_previous_key()
        self.assertEqual(self.session.selected_key, Key.F)
        self.assertFalse(self.session.practice_active)

    def test_dispose_silences_every_channel(self):
        self.controller.play_virtual_note(60)
        self.sent.clear()
        self.controller.dispose()
        self.assertEqual(len(self.sent), 16)
        self.assertEqual(self.sent[0], [0xB0, 123, 0])
        self.assertEqual(self.sent[-1], [0xBF, 123, 0])
        self.assertEqual(self.controller.pending_virtual_notes, 0)


class TestControllerSettings(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.env_patch = patch.dict(os.environ)
        self.env_patch.start()
        for key in list(os.environ):
            if key.startswith("PIANOFIT_"):
                del os.environ[key]

    def tearDown(self):
        self.env_patch.stop()
        shutil.rmtree(self.test_dir)

    def test_settings_seed_controller(self):
        with open(self.test_dir / ".env", "w", encoding="utf-8") as f:
            f.write("PIANOFIT_MIDI_CHANNEL=4\nPIANOFIT_AUTO_START=false\nPIANOFIT_VIRTUAL_VELOCITY=90\n")
        controller = PracticeController(settings=SettingsService(self.test_dir))
        try:
            self.assertEqual(controller.midi_state.selectedChannel, 4)
            self.assertFalse(controller.session.auto_start_on_note)
            self.assertEqual(controller.virtual_velocity, 90)
        finally:
            controller.dispose()

    def test_auto_start_defaults_on(self):
        controller = PracticeController(settings=SettingsService(self.test_dir))
        try:
            self.assertTrue(controller.session.auto_start_on_note)
            controller.session.set_selected_hand_selection(HandSelection.RIGHT)
            controller.play_virtual_note(60)
            self.assertEqual(controller.session.current_step_index, 1)
        finally:
            controller.dispose()

    def test_channel_selection_is_persisted(self):
        settings = SettingsService(self.test_dir)
        controller = PracticeController(settings=settings)
        try:
            controller.midi_state.set_selected_channel(7)
            self.assertEqual(settings.midiChannel, 7)
            with open(self.test_dir / ".env", "r", encoding="utf-8") as f:
                self.assertIn("PIANOFIT_MIDI_CHANNEL=7", f.read())
        finally:
            controller.dispose()

    def test_set_auto_start_on_note(self):
        settings = SettingsService(self.test_dir)
        controller = PracticeController(settings=settings)
        try:
            controller.set_auto_start_on_note(False)
            self.assertFalse(controller.session.auto_start_on_note)
            self.assertFalse(settings.autoStartOnNote)
        finally:
            controller.dispose()


if __name__ == "__main__":
    unittest.main()
