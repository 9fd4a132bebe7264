from typing import List, Set

from PySide6.QtCore import QObject, Property, Signal, Slot, QTimer  # type: ignore

from pianofit.services.midi_decoder import MidiChannel, MidiEvent, MidiEventType
from pianofit.theory.notes import MIDI_MAX, MIDI_MIN, NotePosition, midi_to_position

ACTIVITY_TIMEOUT_MS = 1000


class MidiState(QObject):
    """Live view of the connected keyboard: held notes, last message and the selected channel."""

    activeNotesChanged = Signal()
    lastNoteChanged = Signal(str)
    selectedChannelChanged = Signal(int)
    activityChanged = Signal(bool)

    def __init__(self, selected_channel: int = 0):
        super().__init__()
        self._active_notes: Set[int] = set()
        self._last_note = ""
        self._selected_channel = MidiChannel(selected_channel).value
        self._has_recent_activity = False

        self._activity_timer = QTimer(self)
        self._activity_timer.setSingleShot(True)
        self._activity_timer.setInterval(ACTIVITY_TIMEOUT_MS)
        self._activity_timer.timeout.connect(self._on_activity_timeout)

    @Property(int, notify=selectedChannelChanged)
    def selectedChannel(self) -> int:
        return self._selected_channel

    @Property(str, notify=lastNoteChanged)
    def lastNote(self) -> str:
        return self._last_note

    @Property(bool, notify=activityChanged)
    def hasRecentActivity(self) -> bool:
        return self._has_recent_activity

    @property
    def active_notes(self) -> Set[int]:
        return set(self._active_notes)

    @property
    def highlighted_note_positions(self) -> List[NotePosition]:
        return [midi_to_position(note) for note in sorted(self._active_notes) if MIDI_MIN <= note <= MIDI_MAX]

    @Slot(int)
    def set_selected_channel(self, channel: int):
        # Out-of-range channels are ignored; constructing MidiChannel directly is the strict path
        if MidiChannel.is_valid(channel) and channel != self._selected_channel:
            self._selected_channel = channel
            self.selectedChannelChanged.emit(channel)

    def note_on(self, midi_note: int, velocity: int, channel: int):
        self._active_notes.add(midi_note)
        self.activeNotesChanged.emit()
        self.set_last_note(f"Note ON: {midi_note} (Ch: {channel}, Vel: {velocity})")

    def note_off(self, midi_note: int, channel: int):
        self._active_notes.discard(midi_note)
        self.activeNotesChanged.emit()
        self.set_last_note(f"Note OFF: {midi_note} (Ch: {channel})")

    def apply_event(self, event: MidiEvent):
        if event.event_type == MidiEventType.NOTE_ON:
            self.note_on(event.data1, event.data2, event.channel)
        elif event.event_type == MidiEventType.NOTE_OFF:
            self.note_off(event.data1, event.channel)
        else:
            self.set_last_note(event.display_message)

    def set_last_note(self, text: str):
        self._last_note = text
        self.lastNoteChanged.emit(text)
        self._trigger_activity()

    def clear_active_notes(self):
        if self._active_notes:
            self._active_notes.clear()
            self.activeNotesChanged.emit()

    def dispose(self):
        self._activity_timer.stop()

    def _trigger_activity(self):
        if not self._has_recent_activity:
            self._has_recent_activity = True
            self.activityChanged.emit(True)
        self._activity_timer.start()

    def _on_activity_timeout(self):
        self._has_recent_activity = False
        self.activityChanged.emit(False)
