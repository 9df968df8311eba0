"""CLI interface: segment text, narrate it interactively, list voices."""

import argparse
import asyncio
import json
import logging
import os
import shutil
import sys
from dataclasses import asdict

import aiohttp
import edge_tts

from voxe.constants import SETTINGS_FILE, VERSION
from voxe.coordinator import NarrationCoordinator
from voxe.errors import EngineUnavailable, NoContentError
from voxe.models import PlaybackState
from voxe.sections import find_first_content
from voxe.segmenter import segment
from voxe.settings import apply_overrides, load_settings
from voxe.tts import EdgeNarrationEngine

logger = logging.getLogger(__name__)

READ_HELP = "Commands: [Enter]/p play-pause, <number> jump to sentence, r reset, q quit"


def _check_ffmpeg():
    """Verify ffmpeg is installed."""
    if not shutil.which("ffmpeg"):
        print("Error: ffmpeg is required but not found.", file=sys.stderr)
        print("Install with: brew install ffmpeg", file=sys.stderr)
        raise SystemExit(1)


def _load_units(paths: list[str]):
    """Read plain-text sections and segment the first one with content."""
    sections = []
    for path in paths:
        if not os.path.exists(path):
            print(f"Error: File not found: {path}", file=sys.stderr)
            raise SystemExit(1)
        with open(path, encoding="utf-8") as f:
            sections.append(f.read())

    try:
        index, text = find_first_content(sections)
    except NoContentError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    if len(paths) > 1:
        print(f"Reading section {index + 1}: {os.path.basename(paths[index])}")
    return segment(text)


def cmd_segment(args):
    """Print the sentence units of a text."""
    units = _load_units(args.files)
    if args.json:
        print(json.dumps([asdict(u) for u in units], indent=2))
        return
    for i, unit in enumerate(units):
        print(f"[{i}] ({unit.start_offset}-{unit.end_offset}) {unit.text}")
    print(f"{len(units)} sentences")


async def _narrate(units, config, restart_delay: float, start: int) -> None:
    """Run an interactive narration session on the current event loop."""
    engine = EdgeNarrationEngine()
    try:
        await engine.wait_until_ready()
    except EngineUnavailable as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    def show_unit(index):
        if index is not None:
            print(f"  > [{index}] {units[index].text}")

    def show_state(state):
        if state is not PlaybackState.PLAYING:
            print(f"[{state.value}]")

    def show_error(message):
        print(f"Error: {message}", file=sys.stderr)

    coordinator = NarrationCoordinator(
        engine,
        config=config,
        restart_delay=restart_delay,
        on_unit_changed=show_unit,
        on_state_changed=show_state,
        on_error=show_error,
    )
    coordinator.load_document(units)
    print(READ_HELP)
    if start:
        coordinator.seek(start)
    else:
        coordinator.play()

    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            command = line.strip().lower()
            if command == "q":
                break
            elif command in ("", "p"):
                coordinator.play()
            elif command == "r":
                coordinator.reset()
            elif command.isdigit():
                coordinator.seek(int(command))
            else:
                print(READ_HELP)
    finally:
        coordinator.reset()


def cmd_read(args):
    """Narrate a text aloud with live sentence tracking."""
    _check_ffmpeg()

    units = _load_units(args.files)
    if not units:
        print("Error: Nothing to read.", file=sys.stderr)
        raise SystemExit(1)
    if not 0 <= args.start < len(units):
        print(f"Error: --start must be between 0 and {len(units) - 1}", file=sys.stderr)
        raise SystemExit(1)

    config, restart_delay = load_settings(args.settings)
    config = apply_overrides(
        config, lang=args.lang, voice=args.voice, rate=args.rate, pitch=args.pitch,
    )
    logger.debug("Narration config: %s", config)

    asyncio.run(_narrate(units, config, restart_delay, args.start))


def cmd_voices(args):
    """List available voices."""
    try:
        voices = asyncio.run(edge_tts.list_voices())
    except (aiohttp.ClientError, edge_tts.exceptions.EdgeTTSException) as e:
        print(f"Error: Could not fetch voices: {e}", file=sys.stderr)
        raise SystemExit(1)

    filter_str = args.filter.lower() if args.filter else None
    names = sorted(v["ShortName"] for v in voices)
    if filter_str:
        names = [n for n in names if filter_str in n.lower()]
    if not names:
        print("No matching voices found.")
        return
    print("Available voices:")
    for name in names:
        print(f"  {name}")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="voxe",
        description="Voxe Reader: read books aloud with a synchronized sentence cursor",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # segment
    segment_parser = subparsers.add_parser("segment", help="Split a text into sentences")
    segment_parser.add_argument("files", nargs="+", help="Plain-text section file(s), in reading order")
    segment_parser.add_argument("--json", action="store_true", help="Print units as JSON")
    segment_parser.set_defaults(func=cmd_segment)

    # read
    read_parser = subparsers.add_parser("read", help="Narrate a text aloud")
    read_parser.add_argument("files", nargs="+", help="Plain-text section file(s), in reading order")
    read_parser.add_argument("--start", type=int, default=0, help="Sentence to start from")
    read_parser.add_argument("--voice", help="Voice name (see 'voices')")
    read_parser.add_argument("--lang", help="Language used to pick a voice when none is set")
    read_parser.add_argument("--rate", type=float, help="Speed multiplier, 1.0 = normal")
    read_parser.add_argument("--pitch", type=float, help="Pitch multiplier, 1.0 = normal")
    read_parser.add_argument("--settings", default=SETTINGS_FILE, help="Settings JSON file")
    read_parser.set_defaults(func=cmd_read)

    # voices
    voices_parser = subparsers.add_parser("voices", help="List available voices")
    voices_parser.add_argument("--filter", help="Filter voices by substring")
    voices_parser.set_defaults(func=cmd_voices)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
