"""Watch mode for symark - rebuild the site when notes or assets change."""

import logging
import signal
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """Collects changed paths and hands them over in batches."""

    def __init__(
        self,
        on_batch: Callable[[set[Path]], None],
        debounce_ms: int = 300,
        suffix: str = ".sy",
        ignore: Path | None = None,
    ):
        super().__init__()
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms
        self.suffix = suffix
        self.ignore = ignore.resolve() if ignore is not None else None

        self.pending: set[Path] = set()
        self.last_event_time = 0.0

    def _should_skip(self, path: Path) -> bool:
        """Check if a path can be ignored."""
        name = path.name

        # Skip hidden files
        if name.startswith("."):
            return True

        # Skip temp/swap files
        if name.endswith("~") or name.endswith(".swp") or name.endswith(".tmp"):
            return True

        # Our own output
        if self.ignore is not None and path.resolve().is_relative_to(self.ignore):
            return True

        return not (name.endswith(self.suffix) or "assets" in path.parts)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return

        paths = [Path(str(event.src_path))]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(Path(str(dest)))

        for path in paths:
            if not self._should_skip(path):
                self.pending.add(path)
                self.last_event_time = time.time()

    def check_and_flush(self) -> None:
        """Flush once no event arrived for the debounce window."""
        if not self.pending:
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        if not self.pending:
            return

        changed = set(self.pending)
        self.pending.clear()
        self.on_batch(changed)


def watch_site(
    input_path: Path,
    rebuild: Callable[[], int],
    output_path: Path | None = None,
    debounce_ms: int = 300,
    quiet: bool = False,
) -> int:
    """
    Build once, then rebuild the whole site after every batch of changes.

    Args:
        input_path: Directory holding the .sy documents
        rebuild: Callable that builds the site and returns the page count
        output_path: Output directory, ignored if it lies below input_path
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output

    Returns:
        Exit code
    """
    if not input_path.exists():
        print(f"Error: Input directory not found: {input_path}", file=sys.stderr)
        return 1

    running = True

    def run_build(reason: str) -> None:
        start = time.perf_counter()
        try:
            pages = rebuild()
        except Exception as e:
            # keep watching
            logger.exception("rebuild failed")
            print(f"Error: {e}", file=sys.stderr, flush=True)
            return
        if not quiet:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            print(f"{reason}: built {pages} pages ({elapsed_ms}ms)", flush=True)

    def handle_batch(changed: set[Path]) -> None:
        logger.debug("changed: %s", ", ".join(sorted(str(p) for p in changed)))
        run_build(f"{len(changed)} change(s)")

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    run_build("Initial build")

    handler = DebounceHandler(handle_batch, debounce_ms, ignore=output_path)
    observer = Observer()
    observer.schedule(handler, str(input_path), recursive=True)

    if not quiet:
        print(f"Watching {input_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet:
        print("Watch stopped", flush=True)

    return 0
