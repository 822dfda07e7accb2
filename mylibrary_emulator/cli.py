"""Console entry points. Each ``*_main`` returns the process exit code."""

import argparse
import asyncio
import logging
from typing import List, Optional, Sequence

from .config import EmulatorSettings
from .debug_ui import collect_debug_info
from .enums import UploadState
from .errors import EmulatorConnectionError, SeedError
from .firebase_client import FirebaseHandle
from .port_guard import PortGuard, stdin_prompt
from .preflight import check_emulators
from .seed import SeedSummary, SeedWriter
from .storage_demo import BlobFetcher, FirebaseStorageBucket, LocalMediaLibrary, UploadFlow
from .verify import CollectionCheck, Verifier, VerificationReport

logger = logging.getLogger(__name__)

START_HINT = "Start the emulators first: firebase emulators:start"
SEED_HINT = "Run the seed again: seed-data"


def _parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-vv for debug output)")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ---------------------------------------------------------------------------
# clean-ports
# ---------------------------------------------------------------------------
def clean_ports_main(argv: Optional[Sequence[str]] = None, prompt=stdin_prompt) -> int:
    parser = _parser("clean-ports", "Check and free the Firebase emulator ports.")
    parser.add_argument("-c", "--check", action="store_true", help="Only report, never kill")
    parser.add_argument("-f", "--force", action="store_true", help="Kill without asking")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    guard = PortGuard(EmulatorSettings().emulator_ports())
    try:
        print("Checking Firebase emulator ports...")
        statuses = guard.scan()
        for status in statuses:
            if status.busy:
                pids = ", ".join(str(pid) for pid in status.pids)
                print(f"  BUSY  {status.port} ({status.label}) pids: {pids}")
            else:
                print(f"  FREE  {status.port} ({status.label})")
        busy = [status for status in statuses if status.busy]

        if args.check:
            return 1 if busy else 0
        if not busy:
            print("All ports are free. The emulators can start.")
            return 0

        results = guard.clean_with_confirmation(busy, None if args.force else prompt)
        if results is None:
            print("Cleanup cancelled. Use --force to clean without confirmation.")
            return 0
        for port, freed in results.items():
            print(f"  {'freed' if freed else 'could not free'} port {port}")

        remaining = guard.verify_cleanup()
        if remaining:
            print("Some ports are still busy:")
            for status in remaining:
                print(f"  - {status.port} ({status.label})")
            print("Close the applications using them manually.")
        else:
            print("All ports are free now.")
        return 0
    except Exception as exc:
        logger.exception("Port cleanup failed")
        print(f"Error while cleaning ports: {exc}")
        return 1


# ---------------------------------------------------------------------------
# seed-data / seed-with-check
# ---------------------------------------------------------------------------
async def _seed(settings: EmulatorSettings) -> SeedSummary:
    handle = FirebaseHandle(settings)
    try:
        return await SeedWriter(handle).run()
    finally:
        handle.close()


def _run_seed(settings: EmulatorSettings) -> int:
    print("Seeding the emulator database...")
    try:
        summary = asyncio.run(_seed(settings))
    except SeedError as exc:
        print(f"Seeding failed: {exc}")
        print(START_HINT)
        return 1
    print(
        f"Auth users: {summary.auth_created} created, {summary.auth_existing} already present"
    )
    print(
        f"Written: {summary.users} users, {summary.libraries} libraries, "
        f"{summary.books} books, {summary.reviews} reviews"
    )
    print(f"Browse the data at {settings.ui_url}")
    return 0


def seed_main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser("seed-data", "Load the demo dataset into the emulators.").parse_args(argv)
    _configure_logging(args.verbose)
    return _run_seed(EmulatorSettings())


def seed_with_check_main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser(
        "seed-with-check", "Probe the Firestore and Auth emulators, then seed."
    ).parse_args(argv)
    _configure_logging(args.verbose)
    settings = EmulatorSettings()

    print("Checking that the emulators are running...")
    results = asyncio.run(check_emulators(settings))
    down = [name for name, running in results.items() if not running]
    if down:
        for name in down:
            print(f"The {name} emulator is not running")
        print(START_HINT)
        return 1
    print("Emulators are up.")
    return _run_seed(settings)


# ---------------------------------------------------------------------------
# verify-data
# ---------------------------------------------------------------------------
async def _verify(settings: EmulatorSettings) -> VerificationReport:
    handle = FirebaseHandle(settings)
    try:
        return await Verifier(handle).run()
    finally:
        handle.close()


def _print_check(check: CollectionCheck) -> None:
    if check.error:
        print(f"  {check.name}: error {check.error}")
    elif not check.ok:
        print(f"  {check.name}: no documents found")
    else:
        print(f"  {check.name}: {check.count} documents")
        for sample in check.samples:
            print(f"    - {sample}")
        for library_id, books in check.children.items():
            print(f"    {library_id}/books: {len(books)}")
            for book in books:
                print(f"      * {book}")


def format_report(report: VerificationReport) -> List[str]:
    lines = ["Statistics:"]
    for name, count in report.statistics.collections.items():
        lines.append(f"  {name}: {count} documents")
    lines.append(f"  books (subcollections): {report.statistics.total_books} documents")
    if report.statistics.error:
        lines.append(f"  error collecting statistics: {report.statistics.error}")
    lines.append("RESULT: " + ("all data present" if report.ok else "some data is missing"))
    return lines


def verify_main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser("verify-data", "Read back and check the seeded data.").parse_args(argv)
    _configure_logging(args.verbose)
    settings = EmulatorSettings()

    try:
        report = asyncio.run(_verify(settings))
    except EmulatorConnectionError as exc:
        print(f"Cannot connect to the emulators: {exc.message}")
        print(exc.hint)
        return 1

    print("Connectivity OK")
    for check in (report.users, report.libraries, report.reviews):
        _print_check(check)
    for line in format_report(report):
        print(line)
    if not report.ok:
        print(SEED_HINT)
        return 1
    print(f"Browse the data at {settings.ui_url}")
    return 0


# ---------------------------------------------------------------------------
# debug-ui
# ---------------------------------------------------------------------------
async def _debug(settings: EmulatorSettings):
    handle = FirebaseHandle(settings)
    try:
        return await collect_debug_info(handle)
    finally:
        handle.close()


def debug_ui_main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser("debug-ui", "Show what the emulator UI should display.").parse_args(argv)
    _configure_logging(args.verbose)
    settings = EmulatorSettings()

    print(f"Project:   {settings.project_id}")
    print(f"Firestore: {settings.firestore_host}")
    print(f"UI:        {settings.ui_url}")
    try:
        info = asyncio.run(_debug(settings))
    except Exception as exc:
        logger.exception("Debug report failed")
        print(f"Error while reading the emulator: {exc}")
        print(START_HINT)
        return 1

    print("Top-level collections:")
    for name, count in info.counts.items():
        print(f"  {name}: {count} documents")
        if info.sample_ids.get(name):
            print(f"    e.g. {', '.join(info.sample_ids[name])}")
    print("Library subcollections:")
    for library_id, titles in info.library_titles.items():
        print(f"  {library_id}/books: {len(titles)} documents")
        if titles:
            print(f"    {', '.join(titles)}")

    if info.probe_user_name is None:
        print("  demo-user-1 user not found")
    else:
        print(f"  demo-user-1 user readable: {info.probe_user_name}")
    if info.probe_library_total is None:
        print("  demo-user-1 library not found")
    else:
        print(f"  demo-user-1 library readable: {info.probe_library_total} books")

    if info.complete:
        print("All data is present. If the UI shows nothing, refresh it and check "
              f"that it is on project '{settings.project_id}'.")
    else:
        print(f"Some data is missing. {SEED_HINT}")
    return 0


# ---------------------------------------------------------------------------
# storage-demo
# ---------------------------------------------------------------------------
def _choose_on_terminal(images):
    if not images:
        print("No images found.")
        return None
    for index, path in enumerate(images, start=1):
        print(f"  {index}. {path.name}")
    try:
        answer = input("Image number (empty to cancel): ").strip()
    except EOFError:
        return None
    if not answer.isdigit() or not 1 <= int(answer) <= len(images):
        return None
    return images[int(answer) - 1]


async def _upload(settings: EmulatorSettings, directory: str) -> UploadFlow:
    handle = FirebaseHandle(settings)
    try:
        flow = UploadFlow(
            LocalMediaLibrary(directory, _choose_on_terminal),
            BlobFetcher(),
            FirebaseStorageBucket(handle),
        )
        await flow.select_and_upload()
        return flow
    finally:
        handle.close()


def storage_demo_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _parser("storage-demo", "Upload an image to the Storage emulator.")
    parser.add_argument("directory", help="Directory to pick the image from")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    flow = asyncio.run(_upload(EmulatorSettings(), args.directory))
    if flow.state == UploadState.URL_RESOLVED:
        print(f"Uploaded to {flow.storage_path}")
        print(f"Download URL: {flow.uploaded_url}")
        return 0
    if flow.state == UploadState.ERROR:
        print(flow.error)
        return 1
    if flow.progress:
        print(flow.progress)
    return 0
