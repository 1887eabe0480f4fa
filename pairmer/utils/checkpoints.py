"""
Completion tracking for resumable Pairmer runs.

Every unit of work writes to a path derived from its sample or pair name.
A unit is committed once that path exists, so outputs are produced under a
hidden temporary name in the same directory and renamed into place only
after they are complete.
"""

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterator, TextIO, Union

logger = logging.getLogger(__name__)

TMP_SUFFIX = '.tmp'


def output_exists(path: Union[str, Path], nonempty: bool = False) -> bool:
    """
    Check whether a unit's output has been committed.

    Args:
        path: Output path
        nonempty: Also require a non-zero file size

    Returns:
        True if the unit can be skipped
    """
    path = Path(path)
    if not path.exists():
        return False
    if nonempty:
        return path.is_file() and path.stat().st_size > 0
    return True


def _reserve_temp(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=TMP_SUFFIX, dir=path.parent
    )
    os.close(fd)
    return Path(tmp_name)


@contextlib.contextmanager
def atomic_path(path: Union[str, Path]) -> Iterator[Path]:
    """
    Yield a temporary path that is renamed to ``path`` on success.

    Used for outputs written by external programs. If the block raises,
    the temporary file is removed and ``path`` is left untouched.

    Args:
        path: Final output path
    """
    path = Path(path)
    tmp_path = _reserve_temp(path)
    try:
        yield tmp_path
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


@contextlib.contextmanager
def atomic_write(path: Union[str, Path], mode: str = 'w') -> Iterator[TextIO]:
    """
    Open a handle whose contents appear at ``path`` only when closed cleanly.

    Args:
        path: Final output path
        mode: File mode for the temporary handle

    Example:
        >>> with atomic_write(out_dir / 'matrix.tab') as fh:
        ...     fh.write(header)
    """
    with atomic_path(path) as tmp_path:
        with open(tmp_path, mode) as handle:
            yield handle


def clear_stale_temps(directory: Union[str, Path]) -> int:
    """
    Remove temporary files left behind by an interrupted run.

    Args:
        directory: Directory to scan (recursively)

    Returns:
        Number of files removed
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    removed = 0
    for tmp_file in directory.rglob(f".*{TMP_SUFFIX}"):
        if tmp_file.is_file():
            tmp_file.unlink()
            removed += 1

    if removed:
        logger.debug(f"Removed {removed} stale temporary file(s) under {directory}")
    return removed
