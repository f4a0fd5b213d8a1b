"""Command-line practice client: record a take, get it scored."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from src.analysis.scoring import analyze_transcript
from src.analysis.types import TranscriptResult

from .audio.recorder import AudioRecorder
from .audio.types import RecordingStatus
from .report import render_report
from .services.network import ApiClient, ApiError, EmptyRecordingError
from .services.session import AnalysisState, RecordingSession
from .store.settings_store import SettingsStore

DEFAULT_SETTINGS = Path.home() / ".crisp" / "settings.json"

_MIME_TYPES = {
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".ogg": "audio/ogg",
    ".mp3": "audio/mpeg",
    ".webm": "audio/webm",
    ".m4a": "audio/mp4",
}


def _store(args: argparse.Namespace) -> SettingsStore:
    store = SettingsStore(args.settings)
    if args.server:
        store.update(server_url=args.server)
    return store


async def _prompt(client: ApiClient, store: SettingsStore, category: Optional[str]) -> dict:
    prompt = await client.random_prompt(category=category, exclude=store.get().last_prompt_id or None)
    store.update(last_prompt_id=prompt["id"])
    return prompt


async def cmd_prompt(args: argparse.Namespace) -> int:
    store = _store(args)
    client = ApiClient(store)
    try:
        prompt = await _prompt(client, store, args.category)
    finally:
        await client.aclose()
    print(f"{prompt['emoji']} {prompt['text']}")
    return 0


async def cmd_record(args: argparse.Namespace) -> int:
    store = _store(args)
    settings = store.get()
    recorder = AudioRecorder(sample_rate=settings.sample_rate, channels=settings.channels)
    session = RecordingSession(recorder, ApiClient(store))
    try:
        prompt = await _prompt(session.client, store, args.category)
        print(f"{prompt['emoji']} {prompt['text']}")
        if not session.start():
            print(f"Recording error: {session.error}", file=sys.stderr)
            return 1
        if args.seconds:
            print(f"Recording for {args.seconds}s...")
            await asyncio.sleep(args.seconds)
        else:
            await _interactive(session)
        if session.stop() is None:
            print("Nothing recorded.", file=sys.stderr)
            return 1
        print("Analyzing your take...")
        state = await session.wait()
        if state is not AnalysisState.DONE:
            print(session.error, file=sys.stderr)
            return 2 if state is AnalysisState.EMPTY else 1
        if session.result is None or session.metrics is None:
            print("Analysis finished without a result.", file=sys.stderr)
            return 1
        print(render_report(session.result, session.metrics))
        return 0
    finally:
        await session.close()


async def _interactive(session: RecordingSession) -> None:
    print("Recording. Press Enter to stop, 'p' + Enter to pause or resume.")
    while True:
        line = await asyncio.to_thread(sys.stdin.readline)
        if line.strip().lower() == "p":
            if session.status is RecordingStatus.RECORDING:
                session.pause()
                print(f"Paused at {session.recorder.elapsed:.1f}s")
            else:
                session.resume()
                print("Resumed")
            continue
        return


async def cmd_analyze(args: argparse.Namespace) -> int:
    path = Path(args.file)
    mime = _MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")
    client = ApiClient(_store(args))
    try:
        payload = await client.transcribe(path.read_bytes(), mime)
    except EmptyRecordingError:
        print("No speech detected in that file.", file=sys.stderr)
        return 2
    except ApiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await client.aclose()
    result = TranscriptResult.from_payload(payload)
    print(render_report(result, analyze_transcript(result)))
    return 0


async def cmd_waitlist(args: argparse.Namespace) -> int:
    client = ApiClient(_store(args))
    try:
        await client.join_waitlist(args.name, args.email, args.role, args.challenge)
    except ApiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await client.aclose()
    print("You're on the list!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crisp", description="Practice speaking with Crisp.")
    parser.add_argument("--server", help="Crisp API base URL (saved for later runs).")
    parser.add_argument("--settings", type=Path, default=DEFAULT_SETTINGS, help=argparse.SUPPRESS)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    prompt = sub.add_parser("prompt", help="Show a random practice prompt.")
    prompt.add_argument("--category", choices=["self", "opinion", "creativity", "story", "product"])
    prompt.set_defaults(func=cmd_prompt)

    record = sub.add_parser("record", help="Answer a prompt from the microphone.")
    record.add_argument("--category", choices=["self", "opinion", "creativity", "story", "product"])
    record.add_argument("--seconds", type=float, default=0.0, help="Stop automatically after N seconds.")
    record.set_defaults(func=cmd_record)

    analyze = sub.add_parser("analyze", help="Score an existing audio file.")
    analyze.add_argument("file")
    analyze.set_defaults(func=cmd_analyze)

    waitlist = sub.add_parser("waitlist", help="Join the Crisp waitlist.")
    waitlist.add_argument("--name", required=True)
    waitlist.add_argument("--email", required=True)
    waitlist.add_argument("--role", required=True)
    waitlist.add_argument("--challenge", required=True)
    waitlist.set_defaults(func=cmd_waitlist)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    started = time.perf_counter()
    try:
        return asyncio.run(args.func(args))
    except ApiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        logging.getLogger("crisp.cli").debug("Finished in %.2fs", time.perf_counter() - started)


if __name__ == "__main__":
    sys.exit(main())
