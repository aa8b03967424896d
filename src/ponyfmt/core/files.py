import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

PONY_EXTENSION = ".pony"

_SKIPPED_DIRECTORIES = frozenset({".git", "_corral", "_repos", "node_modules"})


def is_pony_file(path: Path) -> bool:
    return path.suffix == PONY_EXTENSION


def _is_skipped(path: Path, root: Path) -> bool:
    return any(part in _SKIPPED_DIRECTORIES for part in path.relative_to(root).parts[:-1])


def collect_pony_files(paths: Iterable[str | Path]) -> list[Path]:
    """Expand files and directories into the sorted list of Pony sources they name.

    No paths means the current directory. Directories are searched
    recursively; dependency checkouts and VCS metadata are skipped.
    """
    targets = [Path(p) for p in paths] or [Path(".")]
    found: set[Path] = set()
    for target in targets:
        if target.is_file():
            if is_pony_file(target):
                found.add(target)
            else:
                logger.debug("Skipping %s: not a %s file", target, PONY_EXTENSION)
        elif target.is_dir():
            found.update(
                candidate
                for candidate in target.rglob(f"*{PONY_EXTENSION}")
                if candidate.is_file() and not _is_skipped(candidate, target)
            )
        else:
            logger.warning("Skipping %s: no such file or directory", target)
    return sorted(found)
