"""
MIDI byte decoding and encoding.

Incoming buffers are validated here before anything reaches a practice
session: empty or oversized buffers, clock / active-sensing bytes, running
status and out-of-range data bytes all decode to None.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import mido  # type: ignore

MAX_MIDI_BUFFER = 256
TIMING_CLOCK = 0xF8
ACTIVE_SENSING = 0xFE
DATA_MAX = 127
DEFAULT_VELOCITY = 64
ALL_NOTES_OFF_CONTROLLER = 123
PITCH_BEND_MAX = 0x3FFF

# Bytes per channel message, keyed by the status high nibble
CHANNEL_MESSAGE_LENGTHS = {
    0x80: 3,  # note off
    0x90: 3,  # note on
    0xA0: 3,  # polyphonic aftertouch
    0xB0: 3,  # control change
    0xC0: 2,  # program change
    0xD0: 2,  # channel pressure
    0xE0: 3,  # pitch bend
}


class MidiEventType(Enum):
    NOTE_ON = "noteOn"
    NOTE_OFF = "noteOff"
    CONTROL_CHANGE = "controlChange"
    PROGRAM_CHANGE = "programChange"
    PITCH_BEND = "pitchBend"
    OTHER = "other"


@dataclass(frozen=True)
class MidiChannel:
    """A 0-based MIDI channel (0-15)."""
    value: int

    MIN = 0
    MAX = 15

    def __post_init__(self):
        if not self.is_valid(self.value):
            raise ValueError(f"MIDI channel must be between {self.MIN} and {self.MAX} (inclusive), but got {self.value}")

    @classmethod
    def is_valid(cls, channel: int) -> bool:
        return cls.MIN <= channel <= cls.MAX

    @property
    def display_number(self) -> int:
        return self.value + 1


@dataclass(frozen=True)
class MidiEvent:
    status: int
    channel: Optional[int]  # 1-based, None for system messages
    data1: int
    data2: int
    event_type: MidiEventType
    display_message: str

    @property
    def is_note_event(self) -> bool:
        return self.event_type in (MidiEventType.NOTE_ON, MidiEventType.NOTE_OFF)


def pitch_bend_value(data1: int, data2: int) -> float:
    """Normalise a 14-bit pitch bend (LSB, MSB) to the range -1.0 to 1.0."""
    raw = data1 + (data2 << 7)
    return raw / PITCH_BEND_MAX * 2.0 - 1.0


def _hex_dump(data: Sequence[int]) -> str:
    return " ".join(f"0x{b:02X}" for b in data)


def _other_event(frame: Sequence[int], channel: Optional[int]) -> MidiEvent:
    return MidiEvent(
        status=frame[0],
        channel=channel,
        data1=frame[1] if len(frame) > 1 else 0,
        data2=frame[2] if len(frame) > 2 else 0,
        event_type=MidiEventType.OTHER,
        display_message=f"MIDI: Status 0x{frame[0]:02X} Data: {_hex_dump(frame)}",
    )


def decode_midi_data(data: Sequence[int]) -> Optional[MidiEvent]:
    """Decode the first message in a raw MIDI buffer, or None when the buffer is rejected."""
    if not data or len(data) > MAX_MIDI_BUFFER:
        return None

    status = data[0]
    if status in (TIMING_CLOCK, ACTIVE_SENSING):
        return None
    # Running status is not supported; every buffer must start with a status byte
    if status < 0x80 or status > 0xFF:
        return None
    if any(b < 0 or b > DATA_MAX for b in data[1:]):
        return None

    if status >= 0xF0:
        return _other_event(list(data), None)

    length = CHANNEL_MESSAGE_LENGTHS[status & 0xF0]
    if len(data) < length:
        return None
    frame = list(data[:length])

    try:
        message = mido.Message.from_bytes(frame)
    except ValueError as e:
        print(f"MidiDecoder: Rejected {_hex_dump(frame)}: {e}")
        return None

    channel = message.channel + 1
    data1 = frame[1]
    data2 = frame[2] if length > 2 else 0

    if message.type == "note_on" and message.velocity > 0:
        return MidiEvent(status, channel, data1, data2, MidiEventType.NOTE_ON,
                         f"Note ON: {message.note} (Ch: {channel}, Vel: {message.velocity})")
    if message.type in ("note_on", "note_off"):
        # Note-on with velocity 0 is a note-off by convention
        return MidiEvent(status, channel, data1, data2, MidiEventType.NOTE_OFF,
                         f"Note OFF: {message.note} (Ch: {channel})")
    if message.type == "control_change":
        return MidiEvent(status, channel, data1, data2, MidiEventType.CONTROL_CHANGE,
                         f"CC: Controller {message.control} = {message.value} (Ch: {channel})")
    if message.type == "program_change":
        return MidiEvent(status, channel, data1, data2, MidiEventType.PROGRAM_CHANGE,
                         f"Program Change: {message.program} (Ch: {channel})")
    if message.type == "pitchwheel":
        return MidiEvent(status, channel, data1, data2, MidiEventType.PITCH_BEND,
                         f"Pitch Bend: {pitch_bend_value(data1, data2):.2f} (Ch: {channel})")
    return _other_event(frame, channel)


# ── Outbound messages ─────────────────────────────────────────────────

def encode_note_on(note: int, velocity: int = DEFAULT_VELOCITY, channel: int = 0) -> List[int]:
    return mido.Message("note_on", note=note, velocity=velocity, channel=channel).bytes()


def encode_note_off(note: int, channel: int = 0) -> List[int]:
    return mido.Message("note_off", note=note, velocity=0, channel=channel).bytes()


def encode_all_notes_off(channel: int = 0) -> List[int]:
    return mido.Message("control_change", control=ALL_NOTES_OFF_CONTROLLER, value=0, channel=channel).bytes()
