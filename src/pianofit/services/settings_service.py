import os
from pathlib import Path

from PySide6.QtCore import QObject, Property, Signal  # type: ignore

from pianofit.services.midi_decoder import DEFAULT_VELOCITY, MidiChannel

DEFAULT_VIRTUAL_NOTE_MS = 500


def load_env_file(env_file: Path):
    """Copy KEY=value lines from a .env file into os.environ without overriding the real environment."""
    if not env_file.exists():
        return
    try:
        with open(env_file, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except UnicodeDecodeError:
        with open(env_file, "r", encoding="utf-16") as f:
            lines = f.readlines()

    for line in lines:
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, val = line.split("=", 1)
        os.environ.setdefault(key.strip(), val.strip())


class SettingsService(QObject):
    midiSettingsChanged = Signal()
    practiceSettingsChanged = Signal()

    def __init__(self, project_root: Path):
        super().__init__()
        self.env_file = Path(project_root) / ".env"
        load_env_file(self.env_file)

    # ── Generic .env helpers ──────────────────────────────────────────

    def _get_env(self, key: str, default: str = "") -> str:
        return os.environ.get(key, default)

    def _get_int(self, key: str, default: int) -> int:
        raw = self._get_env(key, str(default))
        try:
            return int(raw)
        except ValueError:
            print(f"SettingsService: Ignoring non-integer {key}={raw!r}, using {default}")
            return default

    def _set_env(self, key: str, val: str):
        if os.environ.get(key) == val:
            return
        os.environ[key] = val
        try:
            lines = []
            if self.env_file.exists():
                try:
                    with open(self.env_file, "r", encoding="utf-8") as f:
                        lines = f.readlines()
                except UnicodeDecodeError:
                    with open(self.env_file, "r", encoding="utf-16") as f:
                        lines = f.readlines()

            new_lines = []
            found = False
            for line in lines:
                if line.strip().startswith(f"{key}="):
                    new_lines.append(f"{key}={val}\n")
                    found = True
                else:
                    new_lines.append(line)
            if not found:
                new_lines.append(f"{key}={val}\n")

            with open(self.env_file, "w", encoding="utf-8") as f:
                f.writelines(new_lines)
        except OSError as e:
            print(f"SettingsService: Failed to write {key} to .env: {e}")

    # ── MIDI Channel ──────────────────────────────────────────────────

    @Property(int, notify=midiSettingsChanged)
    def midiChannel(self) -> int:
        channel = self._get_int("PIANOFIT_MIDI_CHANNEL", 0)
        if not MidiChannel.is_valid(channel):
            print(f"SettingsService: MIDI channel {channel} out of range, using 0")
            return 0
        return channel

    @midiChannel.setter  # type: ignore
    def midiChannel(self, val: int):
        channel = MidiChannel(val)
        self._set_env("PIANOFIT_MIDI_CHANNEL", str(channel.value))
        self.midiSettingsChanged.emit()

    # ── Virtual Piano ─────────────────────────────────────────────────

    @Property(int, notify=midiSettingsChanged)
    def virtualVelocity(self) -> int:
        return max(1, min(127, self._get_int("PIANOFIT_VIRTUAL_VELOCITY", DEFAULT_VELOCITY)))

    @virtualVelocity.setter  # type: ignore
    def virtualVelocity(self, val: int):
        self._set_env("PIANOFIT_VIRTUAL_VELOCITY", str(val))
        self.midiSettingsChanged.emit()

    @Property(int, notify=midiSettingsChanged)
    def virtualNoteMs(self) -> int:
        return max(0, self._get_int("PIANOFIT_VIRTUAL_NOTE_MS", DEFAULT_VIRTUAL_NOTE_MS))

    @virtualNoteMs.setter  # type: ignore
    def virtualNoteMs(self, val: int):
        self._set_env("PIANOFIT_VIRTUAL_NOTE_MS", str(val))
        self.midiSettingsChanged.emit()

    # ── Practice ──────────────────────────────────────────────────────

    @Property(bool, notify=practiceSettingsChanged)
    def autoStartOnNote(self) -> bool:
        return self._get_env("PIANOFIT_AUTO_START", "true").lower() in ("1", "true", "yes", "on")

    @autoStartOnNote.setter  # type: ignore
    def autoStartOnNote(self, val: bool):
        self._set_env("PIANOFIT_AUTO_START", "true" if val else "false")
        self.practiceSettingsChanged.emit()
