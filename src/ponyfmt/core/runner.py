import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from ponyfmt.core.formatter import format_report
from ponyfmt.errors import FormatError
from ponyfmt.models import FileResult, FormatOptions, Mode, RunSummary

logger = logging.getLogger(__name__)


def format_file(path: Path, options: FormatOptions) -> FileResult:
    """Format one file; in write mode, save it back only when it changed."""
    try:
        original = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return FileResult(path=path, error=f"{path}: cannot read: {exc}")

    try:
        outcome = format_report(original, options)
    except FormatError as exc:
        return FileResult(path=path, error=f"{path}:{exc}")

    changed = outcome.text != original
    warnings = [span.describe() for span in outcome.warnings]

    if options.mode is Mode.WRITE and changed:
        try:
            path.write_bytes(outcome.text.encode("utf-8"))
        except OSError as exc:
            return FileResult(path=path, changed=changed, error=f"{path}: cannot write: {exc}", warnings=warnings)
        logger.info("Reformatted %s", path)

    return FileResult(
        path=path,
        changed=changed,
        formatted=outcome.text if options.mode is Mode.STDOUT else None,
        warnings=warnings,
    )


def run_files(paths: Sequence[Path], options: FormatOptions, workers: int | None = None) -> RunSummary:
    """Format every file independently on a thread pool.

    Results come back in the order of ``paths`` whatever order the workers
    finish in. A failure in one file never stops the others.
    """
    results: dict[Path, FileResult] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(format_file, path, options): path for path in paths}
        for future in as_completed(futures):
            path = futures[future]
            try:
                results[path] = future.result()
            except Exception as exc:
                logger.exception("Unexpected failure while formatting %s", path)
                results[path] = FileResult(path=path, error=f"{path}: {exc}")

    logger.debug("Formatted %d file(s)", len(results))
    return RunSummary(mode=options.mode, results=[results[path] for path in paths])
