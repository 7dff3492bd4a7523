"""
Filesystem helpers for ngkeeper.

Reading manifests, writing rewritten manifests and backing them up. Every
failure surfaces as :class:`~ngkeeper.exceptions.FileOperationError`.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

from ngkeeper.constants import MAX_FILE_SIZE
from ngkeeper.exceptions import FileOperationError
from ngkeeper.utils.logger import get_logger

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _existing_file(path: Path, operation: str) -> Path:
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation=operation,
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation=operation,
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Write *content* next to *target* in a temp file, then replace it."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing anything larger than *max_size* bytes."""
    path = _existing_file(Path(file_path), "read")
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def create_timestamped_backup(file_path: PathLike) -> Path:
    """Copy *file_path* to ``{stem}.{timestamp}.backup{suffix}`` beside it.

    ``package.json`` becomes e.g. ``package.20260101_120000.backup.json``.
    """
    path = _existing_file(Path(file_path), "backup")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = path.parent / f"{path.stem}.{timestamp}.backup{path.suffix}"

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.debug("Created timestamped backup: %s", backup_path)
    return backup_path


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    create_backup: bool = False,
) -> Optional[Path]:
    """Atomically write *content* to *file_path*.

    When *create_backup* is set and the file exists, a timestamped copy is
    taken first and restored if the write fails.

    Returns:
        Path to the backup, or ``None`` when no backup was taken.
    """
    path = Path(file_path)
    backup: Optional[Path] = None

    if create_backup and path.is_file():
        backup = create_timestamped_backup(path)

    try:
        _atomic_write(path, content)
    except FileOperationError:
        if backup is not None:
            logger.info("Restoring %s from %s", path, backup)
            shutil.copy2(backup, path)
        raise

    return backup
