"""
PianoFit console practice runner.

Connects a MIDI keyboard through mido, builds the requested exercise and
prints the keys to play until the exercise is completed.
"""
import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional

import mido  # type: ignore
from PySide6.QtCore import QCoreApplication  # type: ignore

from pianofit.models.practice import PracticeMode
from pianofit.services.practice_controller import PracticeController
from pianofit.services.settings_service import SettingsService
from pianofit.theory.hands import HandSelection
from pianofit.theory.notes import NOTE_NAMES, MusicalNote, NotePosition
from pianofit.theory.progressions import get_default_library
from pianofit.theory.scales import ScaleType


def pick_port(names: List[str], preferred: Optional[str] = None) -> Optional[str]:
    if not names:
        return None
    if preferred:
        for name in names:
            if preferred.lower() in name.lower():
                return name
        return None
    return names[0]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Piano practice exercises driven by a MIDI keyboard")
    parser.add_argument("--list-ports", action="store_true", help="List MIDI input and output ports and exit.")
    parser.add_argument("--input", type=str, default=None, help="Substring of the MIDI input port to use (default: first).")
    parser.add_argument("--output", type=str, default=None, help="Substring of the MIDI output port for virtual notes.")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in PracticeMode],
        default=PracticeMode.SCALES.value,
        help="Practice mode (default: scales).",
    )
    parser.add_argument("--key", choices=NOTE_NAMES, default="C", help="Key or root note (default: C).")
    parser.add_argument(
        "--scale",
        choices=[s.value for s in ScaleType],
        default=ScaleType.MAJOR.value,
        help="Scale type for scales and chords-by-key (default: major).",
    )
    parser.add_argument(
        "--hand",
        choices=[h.value for h in HandSelection],
        default=HandSelection.RIGHT.value,
        help="Hand selection (default: right).",
    )
    parser.add_argument("--progression", type=str, default=None, help="Progression name, e.g. 'ii - V - I'.")
    return parser


def _format_notes(positions: List[NotePosition]) -> str:
    if not positions:
        return "-"
    return " ".join(f"{p.note.display_name}{p.octave}" for p in positions)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.list_ports:
        print("Inputs:", ", ".join(mido.get_input_names()) or "none")
        print("Outputs:", ", ".join(mido.get_output_names()) or "none")
        return 0

    app = QCoreApplication(sys.argv[:1])
    settings = SettingsService(Path.cwd())
    controller = PracticeController(settings=settings)
    session = controller.session

    session.highlightedNotesChanged.connect(lambda notes: print(f"Play: {_format_notes(notes)}"))
    session.exerciseCompleted.connect(lambda: print("Exercise complete! Press a key to go again."))

    key = MusicalNote(NOTE_NAMES.index(args.key))
    session.set_practice_mode(PracticeMode(args.mode))
    session.set_selected_hand_selection(HandSelection(args.hand))
    session.set_selected_key(key)
    session.set_selected_root_note(key)
    session.set_selected_scale_type(ScaleType(args.scale))
    if args.progression:
        progression = get_default_library().get_progression_by_name(args.progression)
        if progression is None:
            print(f"Unknown progression: {args.progression}")
            return 2
        session.set_selected_chord_progression(progression)

    input_name = pick_port(mido.get_input_names(), args.input)
    if input_name is None:
        print("No MIDI input ports found. Connect a keyboard or enable a virtual port.")
        return 1

    # mido calls back on its own thread; the signal hands the bytes to the Qt thread
    input_port = mido.open_input(input_name, callback=lambda msg: controller.midiDataReceived.emit(msg.bytes()))
    print(f"App: Listening on {input_name}")

    output_port = None
    if args.output:
        output_name = pick_port(mido.get_output_names(), args.output)
        if output_name is not None:
            output_port = mido.open_output(output_name)
            controller.midiOutRequested.connect(lambda data: output_port.send(mido.Message.from_bytes(data)))
            print(f"App: Sending to {output_name}")

    def _shutdown():
        controller.dispose()
        input_port.close()
        if output_port is not None:
            output_port.close()

    app.aboutToQuit.connect(_shutdown)
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    session.start_practice()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
