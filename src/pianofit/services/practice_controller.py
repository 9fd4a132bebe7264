from typing import Dict, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, Signal, Slot, QTimer  # type: ignore

from pianofit.services.midi_decoder import (
    DEFAULT_VELOCITY,
    MidiChannel,
    MidiEvent,
    MidiEventType,
    decode_midi_data,
    encode_all_notes_off,
    encode_note_off,
    encode_note_on,
)
from pianofit.services.midi_state import MidiState
from pianofit.services.practice_session import PracticeSession
from pianofit.services.settings_service import DEFAULT_VIRTUAL_NOTE_MS, SettingsService
from pianofit.theory.notes import MIDI_MAX, MIDI_MIN, next_key_in_circle, previous_key_in_circle


class PracticeController(QObject):
    """
    Single entry point for note input.

    Hardware MIDI bytes and virtual piano taps both end up in
    _on_note_pressed / _on_note_released, which update the live MIDI state and
    drive the practice session.
    """

    # Raw bytes from the MIDI backend; may be emitted from the backend's thread
    midiDataReceived = Signal(list)
    # Bytes to send to the connected instrument
    midiOutRequested = Signal(list)

    def __init__(
        self,
        session: Optional[PracticeSession] = None,
        midi_state: Optional[MidiState] = None,
        settings: Optional[SettingsService] = None,
    ):
        super().__init__()
        self.settings = settings
        auto_start = settings.autoStartOnNote if settings is not None else False
        self.session = session if session is not None else PracticeSession(auto_start_on_note=auto_start)
        channel = settings.midiChannel if settings is not None else 0
        self.midi_state = midi_state if midi_state is not None else MidiState(channel)

        self._note_off_timers: Dict[Tuple[int, int], QTimer] = {}

        # Queued across threads, direct on the owning thread
        self.midiDataReceived.connect(self.handle_midi_data)
        if settings is not None:
            self.midi_state.selectedChannelChanged.connect(self._on_channel_selected)

    @property
    def virtual_velocity(self) -> int:
        return self.settings.virtualVelocity if self.settings is not None else DEFAULT_VELOCITY

    @property
    def virtual_note_ms(self) -> int:
        return self.settings.virtualNoteMs if self.settings is not None else DEFAULT_VIRTUAL_NOTE_MS

    # ── Hardware input ────────────────────────────────────────────────

    @Slot(list)
    def handle_midi_data(self, data: Sequence[int]) -> Optional[MidiEvent]:
        event = decode_midi_data(data)
        if event is None:
            return None

        self.midi_state.apply_event(event)
        if event.event_type == MidiEventType.NOTE_ON:
            self._on_note_pressed(event.data1)
        elif event.event_type == MidiEventType.NOTE_OFF:
            self._on_note_released(event.data1)
        return event

    # ── Virtual piano ─────────────────────────────────────────────────

    @Slot(int)
    def play_virtual_note(self, note: int):
        """Sound a note on the instrument and feed it to the session like a key press."""
        if note < MIDI_MIN or note > MIDI_MAX:
            raise ValueError(f"Virtual note must be between {MIDI_MIN} and {MIDI_MAX}, got {note}")

        channel = self.midi_state.selectedChannel
        velocity = self.virtual_velocity
        self.midiOutRequested.emit(encode_note_on(note, velocity, channel))
        self.midi_state.set_last_note(f"Virtual Note ON: {note} (Ch: {channel + 1}, Vel: {velocity})")

        # One pending note-off per note and channel; replaying restarts it
        key = (note, channel)
        timer = self._note_off_timers.pop(key, None)
        if timer is not None:
            timer.stop()
            timer.deleteLater()
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(self.virtual_note_ms)
        timer.timeout.connect(lambda: self._finish_virtual_note(note, channel))
        self._note_off_timers[key] = timer
        timer.start()

        self._on_note_pressed(note)

    def _finish_virtual_note(self, note: int, channel: int):
        timer = self._note_off_timers.pop((note, channel), None)
        if timer is not None:
            timer.deleteLater()
        self.midiOutRequested.emit(encode_note_off(note, channel))
        self._on_note_released(note)

    @property
    def pending_virtual_notes(self) -> int:
        return len(self._note_off_timers)

    # ── Shared entry points ───────────────────────────────────────────

    def _on_note_pressed(self, note: int):
        self.session.handle_note_pressed(note)

    def _on_note_released(self, note: int):
        self.session.handle_note_released(note)

    # ── Key navigation ────────────────────────────────────────────────

    @Slot()
    def select_next_key(self):
        """Move the selected key one step clockwise around the circle of fifths."""
        self.session.set_selected_key(next_key_in_circle(self.session.selected_key))

    @Slot()
    def select_previous_key(self):
        self.session.set_selected_key(previous_key_in_circle(self.session.selected_key))

    # ── Settings ──────────────────────────────────────────────────────

    def _on_channel_selected(self, channel: int):
        self.settings.midiChannel = channel

    def set_auto_start_on_note(self, enabled: bool):
        self.session.auto_start_on_note = enabled
        if self.settings is not None:
            self.settings.autoStartOnNote = enabled

    # ── Teardown ──────────────────────────────────────────────────────

    def dispose(self):
        """Silence every channel and drop pending virtual note-offs."""
        for channel in range(MidiChannel.MAX + 1):
            self.midiOutRequested.emit(encode_all_notes_off(channel))
        for timer in self._note_off_timers.values():
            timer.stop()
            timer.deleteLater()
        self._note_off_timers.clear()
        self.midi_state.clear_active_notes()
        self.midi_state.dispose()
        print("PracticeController: Sent All Notes Off on all channels")
